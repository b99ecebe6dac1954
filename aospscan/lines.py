"""
Logical line assembly for makefiles.
"""

from typing import Iterable, List

CONTINUATION = "\\"


def join_continued_lines(physical_lines: Iterable[str]) -> List[str]:
    """
    Join backslash-continued physical lines into logical lines.

    Every piece is stripped and the trailing backslash removed; pieces are
    joined with a single space. A continuation on the last line is flushed.

    >>> join_continued_lines(["A := x \\\\", "  y \\\\", "z", "B := 1"])
    ['A := x y z', 'B := 1']
    """
    logical = []
    pending: List[str] = []

    for line in physical_lines:
        piece = line.strip()
        if piece.endswith(CONTINUATION):
            piece = piece[:-1].strip()
            if piece:
                pending.append(piece)
            continue
        if piece:
            pending.append(piece)
        logical.append(" ".join(pending))
        pending = []

    if pending:
        logical.append(" ".join(pending))

    return logical
