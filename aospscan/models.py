"""
Data models for aospscan.

This module defines the core data structures shared by the parsers,
the scanner and the reporters:

- ModuleKind: What kind of build module a record describes
- ModuleRecord: One detected build module and its native build metadata
- ScanResult: Complete scan output

Reporters rely on the keys produced by ModuleRecord.to_dict(); they are
kept stable across releases.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, TYPE_CHECKING

from .text_utils import ordered_unique

if TYPE_CHECKING:
    from .compiler_filter import CompilerFilter


class ModuleKind(Enum):
    NATIVE_LIB = "native"
    APK = "apk"
    JAR = "jar"
    APEX = "apex"
    UNKNOWN = "unknown"

    @classmethod
    def from_artifact(cls, artifact: str) -> "ModuleKind":
        """Classify a built or prebuilt artifact by its file extension."""
        lowered = artifact.lower()
        if lowered.endswith('.so') or lowered.endswith('.a'):
            return cls.NATIVE_LIB
        if lowered.endswith('.apk'):
            return cls.APK
        if lowered.endswith('.jar'):
            return cls.JAR
        if lowered.endswith('.apex') or lowered.endswith('.capex'):
            return cls.APEX
        return cls.UNKNOWN


ALL_KINDS = frozenset({ModuleKind.NATIVE_LIB, ModuleKind.APK, ModuleKind.JAR, ModuleKind.APEX})


@dataclass
class ModuleRecord:
    """A build module found in an Android.mk or Android.bp file"""
    kind: ModuleKind = ModuleKind.UNKNOWN
    name: str = ""
    built_outputs: List[str] = field(default_factory=list)
    header_search_paths: List[str] = field(default_factory=list)
    compiler_flags: List[str] = field(default_factory=list)
    certificate: str = ""
    dex_pre_opt: str = "true"
    optimize_enabled: str = "true"
    optimize_shrink: str = "true"
    source_file: str = ""
    version: str = ""

    def _name_for(self, kind: ModuleKind) -> str:
        return self.name if self.kind == kind else ""

    @property
    def lib_name(self) -> str:
        return self._name_for(ModuleKind.NATIVE_LIB)

    @property
    def apk_name(self) -> str:
        return self._name_for(ModuleKind.APK)

    @property
    def jar_name(self) -> str:
        return self._name_for(ModuleKind.JAR)

    @property
    def apex_name(self) -> str:
        return self._name_for(ModuleKind.APEX)

    def is_complete(self) -> bool:
        """A record needs an identifying name and at least one supporting fact."""
        if self.kind == ModuleKind.UNKNOWN or not self.name:
            return False
        return bool(self.header_search_paths or self.compiler_flags or self.built_outputs)

    def normalize(self, compiler_filter: Optional["CompilerFilter"] = None) -> None:
        """Deduplicate list fields and drop flags the target compiler rejects."""
        self.built_outputs = ordered_unique(o.strip() for o in self.built_outputs if o.strip())
        self.header_search_paths = ordered_unique(self.header_search_paths)
        flags = ordered_unique(f.strip() for f in self.compiler_flags if f.strip())
        if compiler_filter is not None:
            flags = compiler_filter.filter(flags)
        self.compiler_flags = flags

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to dictionary with report field names"""
        return {
            'libName': self.lib_name,
            'apkName': self.apk_name,
            'jarName': self.jar_name,
            'apexName': self.apex_name,
            'version': self.version,
            'headers': list(self.header_search_paths),
            'libs': list(self.built_outputs),
            'gcc_options': list(self.compiler_flags),
            'certificate': self.certificate,
            'dexPreOpt': self.dex_pre_opt,
            'optimizeEnabled': self.optimize_enabled,
            'optimizeShrink': self.optimize_shrink,
            'kind': self.kind.value,
            'sourceFile': self.source_file,
        }


@dataclass
class ScanResult:
    """Result of scanning an Android source tree"""
    target_path: str
    records: List[ModuleRecord] = field(default_factory=list)
    files_scanned: int = 0
    scan_duration_seconds: float = 0.0
    errors: List[str] = field(default_factory=list)

    @property
    def summary(self) -> Dict[str, int]:
        """Get count by module kind"""
        counts = {k.value: 0 for k in ModuleKind if k != ModuleKind.UNKNOWN}
        for record in self.records:
            if record.kind.value in counts:
                counts[record.kind.value] += 1
        return counts

    def get_records_by_kind(self, kind: ModuleKind) -> List[ModuleRecord]:
        return [r for r in self.records if r.kind == kind]

    def sort_records(self) -> None:
        """Sort by build file, then module name, for stable output."""
        self.records.sort(key=lambda r: (r.source_file, r.name))

    def __iter__(self) -> Iterator[ModuleRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def to_dict(self) -> Dict[str, Any]:
        """Convert scan result to dictionary."""
        return {
            'target_path': self.target_path,
            'records': [r.to_dict() for r in self.records],
            'files_scanned': self.files_scanned,
            'scan_duration_seconds': self.scan_duration_seconds,
            'errors': self.errors,
            'summary': self.summary,
        }
