"""
Main scanner - finds Android build files and parses them in parallel
"""

import os
import re
import time
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List, Optional

from .config import ScanConfig, parse_kinds
from .models import ModuleKind, ModuleRecord, ScanResult
from .parsers import ParserOptions, ParserRegistry

logger = logging.getLogger(__name__)


class ResultCollector:
    """Thread-safe store of parse results keyed by build file path"""

    def __init__(self):
        self._results: Dict[str, List[ModuleRecord]] = {}
        self._lock = threading.Lock()

    def on_result(self, path: str, records: List[ModuleRecord]) -> None:
        if not records:
            return
        with self._lock:
            self._results.setdefault(path, []).extend(records)

    def get_records(self) -> List[ModuleRecord]:
        """All records, ordered by build file path for stable output."""
        with self._lock:
            return [record for path in sorted(self._results) for record in self._results[path]]


class AndroidMakefileScanner:
    """Scans an Android source tree for module build metadata"""

    MAKEFILE_RE = re.compile(r'^Android\.(bp|mk)$')

    # Directories never holding platform build files
    SKIP_DIRS = {'.git', '.repo', 'out', '__pycache__'}

    BUILT_LIB_RE = re.compile(r'\.(so|a)$')

    def __init__(self, options: Optional[ParserOptions] = None, max_workers: Optional[int] = None):
        self.options = options or ParserOptions()
        self.max_workers = max_workers or os.cpu_count() or 1

    def collect_makefiles(self, target: Path) -> List[Path]:
        """Collect Android.mk/Android.bp files under target"""
        if target.is_file():
            return [target]

        files = []
        for root, dirs, filenames in os.walk(target):
            dirs[:] = [d for d in dirs if d not in self.SKIP_DIRS]
            root_path = Path(root)
            for filename in filenames:
                if self.MAKEFILE_RE.match(filename):
                    files.append(root_path / filename)
        return sorted(files)

    def scan(self, target_path: str) -> ScanResult:
        """Parse every build file below target_path"""
        start_time = time.time()
        target = Path(target_path).resolve()
        result = ScanResult(target_path=str(target))

        if not target.exists():
            result.errors.append(f"Target path does not exist: {target}")
            return result

        makefiles = self.collect_makefiles(target)
        logger.info(f"Parsing {len(makefiles)} build files with {self.max_workers} workers...")

        collector = ResultCollector()
        if self.max_workers > 1 and len(makefiles) > 1:
            self._scan_parallel(makefiles, collector)
        else:
            for makefile in makefiles:
                try:
                    collector.on_result(str(makefile), self._parse_file(makefile))
                except Exception as e:
                    logger.error(f"Error processing {makefile}: {e}")

        result.records = collector.get_records()
        result.files_scanned = len(makefiles)
        result.scan_duration_seconds = time.time() - start_time
        result.sort_records()

        logger.info(f"Scan complete: {len(result.records)} modules in {result.scan_duration_seconds:.2f}s")
        return result

    def _parse_file(self, makefile: Path) -> List[ModuleRecord]:
        parser = ParserRegistry.get_parser(str(makefile), self.options)
        if parser is None:
            logger.debug(f"No parser for {makefile}")
            return []
        return parser.parse(str(makefile))

    def _scan_parallel(self, makefiles: List[Path], collector: ResultCollector) -> None:
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_file = {executor.submit(self._parse_file, f): f for f in makefiles}

            for future in as_completed(future_to_file):
                makefile = future_to_file[future]
                try:
                    collector.on_result(str(makefile), future.result())
                except Exception as e:
                    logger.error(f"Error processing {makefile}: {e}")

    def find_built_libraries(self, out_dir: str) -> List[str]:
        """List .so/.a files below a build output directory."""
        found = []
        for root, dirs, filenames in os.walk(out_dir):
            for filename in filenames:
                if self.BUILT_LIB_RE.search(filename):
                    found.append(os.path.join(root, filename))
        return sorted(found)

    def match_built_outputs(self, result: ScanResult, out_dir: str, only_found: bool = False) -> ScanResult:
        """
        Point native library outputs at the files actually built.

        Each built output whose name (without .so/.a) matches a library
        under out_dir is replaced by that library's path, and the record's
        name is taken from its first remaining output.

        Args:
            result: Scan result to rewrite in place
            out_dir: Build output directory, e.g. out/target/product/xxx
            only_found: Drop outputs (and records) without a non-empty built file
        """
        built: Dict[str, str] = {}
        for lib_path in self.find_built_libraries(out_dir):
            if only_found and os.path.getsize(lib_path) == 0:
                continue
            built.setdefault(_library_stem(lib_path), lib_path)

        kept = []
        for record in result.records:
            if record.kind != ModuleKind.NATIVE_LIB:
                if not only_found:
                    kept.append(record)
                continue

            found = False
            outputs = []
            for output in record.built_outputs:
                key = _library_stem(output)
                if key in built:
                    found = True
                    outputs.append(built[key])
                elif not only_found:
                    outputs.append(output)
            record.built_outputs = outputs
            # the library name follows the first (possibly replaced) output
            if outputs:
                record.name = _library_stem(outputs[0])

            if not only_found or found:
                kept.append(record)

        logger.info(f"Matched built outputs under {out_dir}: kept {len(kept)} of {len(result.records)} modules")
        result.records = kept
        return result


def _library_stem(path: str) -> str:
    name = os.path.basename(path)
    for ext in ('.so', '.a'):
        if name.endswith(ext):
            return name[:-len(ext)]
    return name


def create_scanner(compiler: str = "gcc",
                   version: str = "",
                   kinds: Optional[List[str]] = None,
                   header_fallback: bool = True,
                   max_workers: Optional[int] = None) -> AndroidMakefileScanner:
    """Factory function to create and configure a scanner

    Args:
        compiler: Target compiler whose unsupported flags are filtered (gcc, clang)
        version: Version string stamped on every record
        kinds: Module kinds to report (native, apk, jar, apex); all when None
        header_fallback: Use header directories under the module when none are declared
        max_workers: Parser threads; CPU count when None

    Returns:
        Configured AndroidMakefileScanner instance
    """
    config = ScanConfig(compiler=compiler, version=version, header_fallback=header_fallback)
    if kinds:
        config.kinds = parse_kinds(kinds)
    config.validate()

    return AndroidMakefileScanner(config.to_parser_options(), max_workers=max_workers)
