"""
Compiler flag filters.

Android sets clang-only flags in many modules. When the collected flags
are fed to gcc (e.g. by a downstream ABI checker), those flags must go.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Sequence

from .errors import ConfigurationError
from .text_utils import ordered_unique


class CompilerFilter(ABC):
    """Filters compiler flags for a target compiler."""

    name = ""

    @abstractmethod
    def filter(self, flags: Sequence[str]) -> List[str]:
        pass


class IdentityFilter(CompilerFilter):
    """clang accepts everything Android passes it"""

    name = "clang"

    def filter(self, flags: Sequence[str]) -> List[str]:
        return list(flags)


class GccUnsupportedFilter(CompilerFilter):
    """Drops flags gcc does not understand."""

    name = "gcc"

    UNSUPPORTED_PREFIXES = (
        "-fstandalone-debug",
        "-Wthread-safety",
        "-Wexit-time-destructors",
        "-fno-c++-static-destructors",
        "-ftrivial-auto-var-init",
        "-funused-private-field",
        "-fno-unused-argument",
        "-fno-nullability-completeness",
        "-Wshadow-",
        "-Wno-implicit-fallthrough",
    )

    def __init__(self, extra_unsupported: Iterable[str] = ()):
        self.unsupported = tuple(self.UNSUPPORTED_PREFIXES) + tuple(extra_unsupported)

    def filter(self, flags: Sequence[str]) -> List[str]:
        kept = []
        for flag in flags:
            flag = flag.strip()
            if flag and not flag.startswith(self.unsupported):
                kept.append(flag)
        return ordered_unique(kept)


def get_compiler_filter(name: str, extra_unsupported: Iterable[str] = ()) -> CompilerFilter:
    """Factory function to get a flag filter by compiler name"""
    name = (name or '').lower()
    if name == 'gcc':
        return GccUnsupportedFilter(extra_unsupported)
    if name == 'clang':
        return IdentityFilter()
    raise ConfigurationError(f"Unknown compiler: {name}. Supported: ['gcc', 'clang']")
