"""
aospscan - Android build file scanner.

Extracts native library build metadata (include directories, compiler
flags, built outputs) and APK/JAR/APEX attributes from the Android.mk
and Android.bp files of an Android platform source tree.

Components:
    1. Macro expansion - the GNU Make subset used by Android.mk
    2. Android.mk parser - one record per build boundary
    3. Android.bp parser - Blueprint blocks decoded as JSON, with defaults
    4. Path resolution - include paths checked against the source tree
    5. Compiler filter - drops clang-only flags for gcc consumers

Quick Start:
    >>> from aospscan import create_scanner
    >>> scanner = create_scanner(compiler="gcc")
    >>> result = scanner.scan("/path/to/aosp/frameworks/av")
    >>> print(f"Found {len(result.records)} modules")

Output Formats:
    JSON, CSV
"""

__version__ = "0.3.0"

from .models import ModuleKind, ModuleRecord, ScanResult
from .macro import MacroEnvironment, MacroExpander
from .lines import join_continued_lines
from .path_resolver import PathResolver, get_android_root
from .compiler_filter import CompilerFilter, IdentityFilter, GccUnsupportedFilter, get_compiler_filter
from .parsers import (
    MakefileParser, ParserOptions, ParserRegistry, get_parser,
    AndroidMkParser, AndroidBpParser,
)
from .config import ScanConfig, ConfigLoader, load_config
from .scanner import AndroidMakefileScanner, create_scanner
from .reporters import JSONReporter, CSVReporter, get_reporter

__all__ = [
    # Models
    'ModuleKind',
    'ModuleRecord',
    'ScanResult',
    # Parsing core
    'MacroEnvironment',
    'MacroExpander',
    'join_continued_lines',
    'PathResolver',
    'get_android_root',
    'CompilerFilter',
    'IdentityFilter',
    'GccUnsupportedFilter',
    'get_compiler_filter',
    'MakefileParser',
    'ParserOptions',
    'ParserRegistry',
    'get_parser',
    'AndroidMkParser',
    'AndroidBpParser',
    # Scanning
    'ScanConfig',
    'ConfigLoader',
    'load_config',
    'AndroidMakefileScanner',
    'create_scanner',
    # Reporters
    'JSONReporter',
    'CSVReporter',
    'get_reporter',
]
