"""
String helpers shared by the build-file parsers.

Covers balanced-bracket extraction, top-level splitting, and
comment stripping that respects string literals.
"""

from typing import Iterable, List, Optional, Tuple, TypeVar

T = TypeVar('T')


def extract_balanced(text: str, open_char: str, close_char: str,
                     from_index: int = 0, quotes: str = '"') -> Optional[Tuple[int, int]]:
    """
    Find the first balanced span starting at or after from_index.

    Brackets inside quoted string literals are ignored. A backslash
    escapes the next character inside a literal.

    Args:
        text: Text to scan
        open_char: Opening bracket, e.g. '{'
        close_char: Closing bracket, e.g. '}'
        from_index: Where to start looking for open_char
        quotes: Characters that delimit string literals (empty disables)

    Returns:
        (start, end) inclusive indices of the opening and matching closing
        bracket, or None if there is no opening bracket or it never closes.
    """
    start = -1
    depth = 0
    in_quote = ''
    i = max(from_index, 0)
    length = len(text)

    while i < length:
        ch = text[i]
        if in_quote:
            if ch == '\\':
                i += 2
                continue
            if ch == in_quote:
                in_quote = ''
        elif ch in quotes:
            in_quote = ch
        elif ch == open_char:
            if start < 0:
                start = i
            depth += 1
        elif ch == close_char and start >= 0:
            depth -= 1
            if depth == 0:
                return start, i
        i += 1

    return None


def split_top_level(text: str, sep: str = ',') -> List[str]:
    """Split text on sep, ignoring separators nested inside parentheses."""
    parts = []
    depth = 0
    current = []
    for ch in text:
        if ch == '(':
            depth += 1
        elif ch == ')':
            depth = max(depth - 1, 0)
        if ch == sep and depth == 0:
            parts.append(''.join(current))
            current = []
        else:
            current.append(ch)
    parts.append(''.join(current))
    return parts


def strip_line_comment(line: str, marker: str = '//', quotes: str = '"', nested: bool = False) -> str:
    """
    Remove a comment starting with marker, unless it sits inside a string literal.

    A backslash directly before marker escapes it. With nested, markers
    inside parentheses do not start a comment.
    """
    in_quote = ''
    depth = 0
    i = 0
    while i < len(line):
        ch = line[i]
        if in_quote:
            if ch == '\\':
                i += 2
                continue
            if ch == in_quote:
                in_quote = ''
        elif ch in quotes:
            in_quote = ch
        elif ch == '\\' and line.startswith(marker, i + 1):
            i += 1 + len(marker)
            continue
        elif nested and ch == '(':
            depth += 1
        elif nested and ch == ')':
            depth = max(depth - 1, 0)
        elif depth == 0 and line.startswith(marker, i):
            return line[:i]
        i += 1
    return line


def strip_make_comment(line: str) -> str:
    r"""
    Cut a make '#' comment off line; '\#' stays as a literal '#'.

    >>> strip_make_comment(r"A := -Wall # warnings \# on")
    'A := -Wall '
    >>> strip_make_comment(r"B := -DCH=\#")
    'B := -DCH=#'
    """
    return strip_line_comment(line, '#', quotes='', nested=True).replace('\\#', '#')


def strip_comments(text: str, quotes: str = '"') -> str:
    """
    Remove // and /* */ comments outside string literals in one pass.

    Line comments end at the newline, which is kept. Markers inside a
    block comment are ignored, and an unterminated block comment runs
    to the end of text.
    """
    result = []
    in_quote = ''
    i = 0
    while i < len(text):
        ch = text[i]
        if in_quote:
            result.append(ch)
            if ch == '\\' and i + 1 < len(text):
                result.append(text[i + 1])
                i += 2
                continue
            if ch == in_quote:
                in_quote = ''
        elif ch in quotes:
            in_quote = ch
            result.append(ch)
        elif text.startswith('//', i):
            end = text.find('\n', i)
            if end < 0:
                break
            i = end
            continue
        elif text.startswith('/*', i):
            end = text.find('*/', i + 2)
            if end < 0:
                break
            result.append(' ')
            i = end + 2
            continue
        else:
            result.append(ch)
        i += 1
    return ''.join(result)


def ordered_unique(items: Iterable[T]) -> List[T]:
    """Deduplicate while keeping the order of first appearance."""
    seen = set()
    unique = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


def split_words(text: str) -> List[str]:
    """
    Split a make value into words on whitespace and backslashes.

    Whitespace nested inside $(...) does not split, so unexpanded
    calls such as "$(call include-path-for, camera)" stay one word.
    """
    words = []
    current = []
    depth = 0
    for i, ch in enumerate(text):
        if ch == '(':
            depth += 1
        elif ch == ')':
            depth = max(depth - 1, 0)
        # only a free-standing backslash separates; escaped quotes stay intact
        separator = ch.isspace() or (ch == '\\' and text[i + 1:i + 2].strip() == '')
        if depth == 0 and separator:
            if current:
                words.append(''.join(current))
                current = []
            continue
        current.append(ch)
    if current:
        words.append(''.join(current))
    return words
