"""
Base classes for aospscan build-file parsers.

Each dialect (Android.mk, Android.bp) implements MakefileParser:
- dialect: Short identifier of the build-file syntax
- parse_lines: Turn the lines of one build file into ModuleRecords

Parsing is resilient by contract: unreadable files and blocks that
cannot be understood produce no records instead of raising.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional
import logging
import os
import re

from ..compiler_filter import CompilerFilter, GccUnsupportedFilter
from ..errors import ParserError
from ..models import ALL_KINDS, ModuleKind, ModuleRecord
from ..path_resolver import PathResolver, clean_path

logger = logging.getLogger(__name__)


@dataclass
class ParserOptions:
    """Configuration shared by every parser of a scan run."""
    compiler_filter: CompilerFilter = field(default_factory=GccUnsupportedFilter)
    kinds: FrozenSet[ModuleKind] = ALL_KINDS
    include_path_map: Dict[str, str] = field(default_factory=dict)
    header_fallback: bool = True
    version: str = ""


class MakefileParser(ABC):
    """
    Abstract base class for build-file parsers.

    Parsers hold configuration only. All per-file state lives in locals
    of parse_lines, so one instance can serve many threads.
    """

    ENCODINGS = ('utf-8', 'latin-1')

    HEADER_FILE_RE = re.compile(r'\.(h|hh|hpp|h\+\+)$')
    SOURCE_FILE_RE = re.compile(r'\.(c|cc|cpp|cxx)$')

    def __init__(self, options: Optional[ParserOptions] = None):
        self.options = options or ParserOptions()
        self.path_resolver = PathResolver()

    @property
    @abstractmethod
    def dialect(self) -> str:
        """Short name of the build-file syntax, e.g. 'mk'."""
        pass

    @abstractmethod
    def parse_lines(self, path: str, lines: List[str]) -> List[ModuleRecord]:
        """
        Parse the lines of one build file.

        Args:
            path: Path of the build file (used to resolve relative paths)
            lines: File content, one entry per line without newline

        Returns:
            Complete module records, in file order
        """
        pass

    def parse(self, path: str) -> List[ModuleRecord]:
        """Read and parse a build file; unreadable files yield no records."""
        lines = self.read_lines(path)
        if lines is None:
            return []
        try:
            return self.parse_lines(path, lines)
        except ParserError as e:
            logger.warning(f"Failed to parse {path}: {e}")
            return []

    def read_lines(self, path: str) -> Optional[List[str]]:
        """Read a file as lines with encoding fallback"""
        for encoding in self.ENCODINGS:
            try:
                with open(path, 'r', encoding=encoding) as f:
                    return f.read().splitlines()
            except UnicodeDecodeError:
                continue
            except OSError as e:
                logger.debug(f"Error reading {path}: {e}")
                return None
        return None

    def resolve_includes(self, tokens: Iterable[str], module_dir: str, android_root: str) -> List[str]:
        """Resolve include tokens against the module directory and the platform root."""
        resolved = []
        for token in tokens:
            token = token.strip()
            if not token:
                continue
            for path in self.path_resolver.resolve_all((module_dir, android_root), token):
                if path not in resolved:
                    resolved.append(path)
        return resolved

    def find_header_dirs(self, module_dir: str) -> List[str]:
        """
        Directories holding headers under module_dir.

        Falls back to directories with C/C++ sources when there are no
        headers at all. Used when a native module declares no includes.
        """
        header_dirs: List[str] = []
        source_dirs: List[str] = []
        for root, dirs, filenames in os.walk(module_dir):
            dirs[:] = sorted(d for d in dirs if not d.startswith('.'))
            for filename in filenames:
                if self.HEADER_FILE_RE.search(filename):
                    if root not in header_dirs:
                        header_dirs.append(root)
                elif self.SOURCE_FILE_RE.search(filename):
                    if root not in source_dirs:
                        source_dirs.append(root)
        return [clean_path(d) for d in (header_dirs or source_dirs)]

    def finalize(self, record: ModuleRecord, path: str) -> Optional[ModuleRecord]:
        """
        Apply the shared post-processing to a parsed record.

        Returns the record, or None when it is incomplete or of a kind
        that this run does not report.
        """
        record.source_file = path
        record.version = self.options.version

        if (record.kind == ModuleKind.NATIVE_LIB and not record.header_search_paths
                and self.options.header_fallback):
            module_dir = str(Path(path).parent)
            record.header_search_paths = self.find_header_dirs(module_dir)

        record.normalize(self.options.compiler_filter)

        if record.kind not in self.options.kinds:
            return None
        if not record.is_complete():
            logger.debug(f"Discarding incomplete module in {path}: {record.name!r}")
            return None
        return record
