"""
Scan configuration - parses YAML config files into ScanConfig objects

Example file:

    compiler: clang
    jobs: 8
    version: "1.0"
    kinds: [native, apk]
    header_fallback: false
    include_path_map:
      my-hal: vendor/acme/hal/include
    unsupported_flags:
      - -fsanitize-ignorelist
"""

import os
import yaml
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional

from .compiler_filter import get_compiler_filter
from .errors import ConfigurationError
from .models import ALL_KINDS, ModuleKind
from .parsers.base import ParserOptions

logger = logging.getLogger(__name__)

REPORT_FORMATS = ('json', 'csv')


def parse_kinds(values: Any) -> FrozenSet[ModuleKind]:
    """Turn "native,apk" or ["native", "apk"] into a set of ModuleKind."""
    if isinstance(values, str):
        values = [v for v in values.split(',') if v.strip()]
    if not isinstance(values, (list, tuple)):
        raise ConfigurationError(f"kinds must be a list, got {type(values).__name__}")

    kinds = set()
    for value in values:
        try:
            kind = ModuleKind(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError(
                f"Unknown module kind: {value}. Supported: {sorted(k.value for k in ALL_KINDS)}"
            )
        if kind == ModuleKind.UNKNOWN:
            raise ConfigurationError("Module kind 'unknown' cannot be selected")
        kinds.add(kind)
    return frozenset(kinds)


@dataclass
class ScanConfig:
    """Settings for one scan run"""
    compiler: str = "gcc"
    jobs: int = field(default_factory=lambda: os.cpu_count() or 1)
    version: str = ""
    kinds: FrozenSet[ModuleKind] = ALL_KINDS
    header_fallback: bool = True
    include_path_map: Dict[str, str] = field(default_factory=dict)
    unsupported_flags: List[str] = field(default_factory=list)
    report_format: str = "json"

    def validate(self) -> None:
        if self.jobs < 1:
            raise ConfigurationError(f"jobs must be at least 1, got {self.jobs}")
        if self.report_format not in REPORT_FORMATS:
            raise ConfigurationError(
                f"Unknown report format: {self.report_format}. Supported: {list(REPORT_FORMATS)}"
            )
        # Raises for unknown compilers
        get_compiler_filter(self.compiler)

    def to_parser_options(self) -> ParserOptions:
        return ParserOptions(
            compiler_filter=get_compiler_filter(self.compiler, self.unsupported_flags),
            kinds=self.kinds,
            include_path_map=dict(self.include_path_map),
            header_fallback=self.header_fallback,
            version=self.version,
        )


class ConfigLoader:
    """Loads scan settings from YAML files"""

    KNOWN_KEYS = {
        'compiler', 'jobs', 'version', 'kinds', 'header_fallback',
        'include_path_map', 'unsupported_flags', 'report_format',
    }

    def load(self, path: Optional[Path] = None, base: Optional[ScanConfig] = None) -> ScanConfig:
        """Load a config file on top of base (or defaults)."""
        config = base or ScanConfig()
        if path is None:
            return config

        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}")

        if not data:
            return config
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: top level must be a mapping")

        config = self._apply(config, data)
        config.validate()
        logger.info(f"Loaded scan configuration from {path}")
        return config

    def _apply(self, config: ScanConfig, data: Dict[str, Any]) -> ScanConfig:
        for key in data:
            if key not in self.KNOWN_KEYS:
                logger.warning(f"Ignoring unknown config key: {key}")

        if 'compiler' in data:
            config.compiler = str(data['compiler']).lower()
        if 'jobs' in data:
            try:
                config.jobs = int(data['jobs'])
            except (TypeError, ValueError):
                raise ConfigurationError(f"jobs must be an integer, got {data['jobs']!r}")
        if 'version' in data:
            config.version = str(data['version'])
        if 'kinds' in data:
            config.kinds = parse_kinds(data['kinds'])
        if 'header_fallback' in data:
            config.header_fallback = bool(data['header_fallback'])
        if 'report_format' in data:
            config.report_format = str(data['report_format']).lower()

        include_path_map = data.get('include_path_map', {})
        if not isinstance(include_path_map, dict):
            raise ConfigurationError("include_path_map must be a mapping")
        config.include_path_map.update({str(k): str(v) for k, v in include_path_map.items()})

        unsupported = data.get('unsupported_flags', [])
        if not isinstance(unsupported, list):
            raise ConfigurationError("unsupported_flags must be a list")
        config.unsupported_flags.extend(str(f) for f in unsupported)

        return config


def load_config(path: Optional[str] = None) -> ScanConfig:
    """Load configuration from path, or return defaults when path is None"""
    return ConfigLoader().load(Path(path) if path else None)
