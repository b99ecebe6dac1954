"""
Android.bp (Blueprint/Soong) parser.

Blueprint module blocks are close enough to JSON that a light rewrite
makes them loadable with the json module: bareword keys get quoted and
trailing commas are dropped. Blocks using constructs beyond that (string
concatenation, variables, select) are skipped.
"""

import copy
import json
import re
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Tuple

from ..errors import BlueprintSyntaxError
from ..models import ModuleKind, ModuleRecord
from ..path_resolver import get_android_root
from ..text_utils import extract_balanced, ordered_unique, strip_comments
from .base import MakefileParser
from .registry import ParserRegistry

logger = logging.getLogger(__name__)

STRING_LITERAL_RE = re.compile(r'"(?:[^"\\]|\\.)*"')
BAREWORD_KEY_RE = re.compile(r'([A-Za-z_][A-Za-z0-9_]*)\s*:')
TRAILING_COMMA_RE = re.compile(r',(\s*[\]}])')
MODULE_HEADER_RE = re.compile(r'\b([A-Za-z_][A-Za-z0-9_]*)\s*\{')


def _rewrite_outside_strings(text: str, rewrite) -> str:
    pieces = []
    last = 0
    for match in STRING_LITERAL_RE.finditer(text):
        pieces.append(rewrite(text[last:match.start()]))
        pieces.append(match.group(0))
        last = match.end()
    pieces.append(rewrite(text[last:]))
    return ''.join(pieces)


def blueprint_to_json(block: str) -> Dict[str, Any]:
    """
    Decode one Blueprint "{ ... }" block.

    Raises:
        BlueprintSyntaxError: The block is not valid JSON after rewriting
    """
    def rewrite(segment: str) -> str:
        segment = BAREWORD_KEY_RE.sub(r'"\1":', segment)
        return TRAILING_COMMA_RE.sub(r'\1', segment)

    text = _rewrite_outside_strings(block, rewrite)
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as e:
        raise BlueprintSyntaxError(f"Cannot decode module block: {e.msg}") from e
    if not isinstance(decoded, dict):
        raise BlueprintSyntaxError("Module block is not an object")
    return decoded


def iter_module_blocks(body: str) -> Iterator[Tuple[str, str]]:
    """Yield (module_type, "{...}" text) for every top-level module in body."""
    string_spans = [m.span() for m in STRING_LITERAL_RE.finditer(body)]
    pos = 0
    while True:
        match = MODULE_HEADER_RE.search(body, pos)
        if not match:
            return

        # headers inside string literals, e.g. x = "foo {", are not modules
        inside = next((end for start, end in string_spans if start <= match.start() < end), None)
        if inside is not None:
            pos = inside
            continue

        span = extract_balanced(body, '{', '}', match.end() - 1)
        if span is None:
            logger.debug(f"Unbalanced block for {match.group(1)}")
            return
        start, end = span
        yield match.group(1), body[start:end + 1]
        pos = end + 1


def _union(base: List[Any], extra: List[Any]) -> List[Any]:
    combined = list(base) + list(extra)
    try:
        return ordered_unique(combined)
    except TypeError:
        # unhashable entries (nested objects) are kept as-is
        return combined


def merge_properties(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Merge overlay onto base the way Soong applies defaults.

    Lists are unioned with base entries first, objects are shallow-merged,
    and any other overlay value replaces the base value.
    """
    merged = copy.deepcopy(dict(base))
    for key, value in overlay.items():
        if key not in merged:
            merged[key] = copy.deepcopy(value)
        elif isinstance(merged[key], list) and isinstance(value, list):
            merged[key] = _union(merged[key], value)
        elif isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = {**merged[key], **copy.deepcopy(value)}
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def merge_defaults(module: Mapping[str, Any], defaults_index: Mapping[str, Mapping[str, Any]],
                   _seen: Tuple[str, ...] = ()) -> Dict[str, Any]:
    """
    Apply the "defaults" a module references.

    Defaults may reference further defaults; reference cycles and
    unknown names are ignored. Properties set on the module itself win.
    """
    combined: Dict[str, Any] = {}
    for name in _as_list(module.get('defaults')):
        if name in _seen:
            continue
        if name not in defaults_index:
            logger.debug(f"Defaults {name!r} not found in this file")
            continue
        resolved = merge_defaults(defaults_index[name], defaults_index, _seen + (name,))
        resolved = {k: v for k, v in resolved.items() if k not in ('name', 'defaults')}
        combined = merge_properties(combined, resolved)
    return merge_properties(combined, module)


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v) for v in value if isinstance(v, (str, int, float, bool))]
    return [str(value)]


def _as_flag(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@ParserRegistry.register('.bp')
class AndroidBpParser(MakefileParser):
    """Soong Android.bp parser"""

    MODULE_TYPES = {
        'cc_library': ModuleKind.NATIVE_LIB,
        'cc_library_shared': ModuleKind.NATIVE_LIB,
        'cc_library_static': ModuleKind.NATIVE_LIB,
        'cc_library_headers': ModuleKind.NATIVE_LIB,
        'cc_prebuilt_library_shared': ModuleKind.NATIVE_LIB,
        'cc_prebuilt_library_static': ModuleKind.NATIVE_LIB,
        'android_app': ModuleKind.APK,
        'android_app_import': ModuleKind.APK,
        'android_test': ModuleKind.APK,
        'java_library': ModuleKind.JAR,
        'java_library_static': ModuleKind.JAR,
        'java_import': ModuleKind.JAR,
        'java_sdk_library': ModuleKind.JAR,
        'apex': ModuleKind.APEX,
        'module_apex': ModuleKind.APEX,
        'prebuilt_apex': ModuleKind.APEX,
        'apex_set': ModuleKind.APEX,
    }

    DEFAULTS_TYPES = frozenset({
        'cc_defaults',
        'java_defaults',
        'android_app_defaults',
        'apex_defaults',
        'defaults',
    })

    NAME_KEY = 'name'
    INCLUDE_KEYS = (
        'export_include_dirs',
        'header_libs',
        'export_header_lib_headers',
        'include_dirs',
        'local_include_dirs',
    )
    CFLAGS_KEYS = ('cflags', 'cppflags', 'conlyflags')
    ARTIFACT_KEYS = ('srcs', 'apk', 'jars', 'src')

    @property
    def dialect(self) -> str:
        return "bp"

    def strip_comments(self, lines: List[str]) -> str:
        """Join the file into one string without // and /* */ comments."""
        return strip_comments("\n".join(lines))

    def parse_lines(self, path: str, lines: List[str]) -> List[ModuleRecord]:
        module_dir = str(Path(path).parent)
        android_root = get_android_root(path)
        body = self.strip_comments(lines)

        modules: List[Tuple[str, Dict[str, Any]]] = []
        defaults_index: Dict[str, Dict[str, Any]] = {}

        for module_type, block in iter_module_blocks(body):
            if module_type not in self.MODULE_TYPES and module_type not in self.DEFAULTS_TYPES:
                continue
            try:
                properties = blueprint_to_json(block)
            except BlueprintSyntaxError as e:
                logger.debug(f"{path}: skipping {module_type} block: {e}")
                continue

            if module_type in self.DEFAULTS_TYPES:
                name = properties.get(self.NAME_KEY)
                if isinstance(name, str):
                    defaults_index[name] = properties
            else:
                modules.append((module_type, properties))

        records = []
        for module_type, properties in modules:
            properties = merge_defaults(properties, defaults_index)
            record = self.build_record(self.MODULE_TYPES[module_type], properties,
                                       module_dir, android_root)
            record = self.finalize(record, path)
            if record is not None:
                records.append(record)

        logger.debug(f"{path}: {len(records)} module(s) from {len(modules)} blocks")
        return records

    def build_record(self, kind: ModuleKind, properties: Mapping[str, Any],
                     module_dir: str, android_root: str) -> ModuleRecord:
        """Fill a ModuleRecord from decoded module properties."""
        record = ModuleRecord(kind=kind)
        name = properties.get(self.NAME_KEY)
        if isinstance(name, str) and name:
            record.name = name
            record.built_outputs.append(name)

        for key in self.ARTIFACT_KEYS:
            for artifact in _as_list(properties.get(key)):
                if ModuleKind.from_artifact(artifact) != ModuleKind.UNKNOWN:
                    record.built_outputs.append(artifact)

        if kind == ModuleKind.NATIVE_LIB:
            tokens = []
            for key in self.INCLUDE_KEYS:
                tokens.extend(_as_list(properties.get(key)))
            record.header_search_paths = self.resolve_includes(tokens, module_dir, android_root)
            for key in self.CFLAGS_KEYS:
                record.compiler_flags.extend(_as_list(properties.get(key)))

        if kind in (ModuleKind.APK, ModuleKind.APEX) and 'certificate' in properties:
            record.certificate = _as_flag(properties['certificate'])

        if kind in (ModuleKind.APK, ModuleKind.JAR):
            optimize = properties.get('optimize')
            if isinstance(optimize, dict):
                if 'enabled' in optimize:
                    record.optimize_enabled = _as_flag(optimize['enabled'])
                if 'shrink' in optimize:
                    record.optimize_shrink = _as_flag(optimize['shrink'])
            dex_preopt = properties.get('dex_preopt')
            if isinstance(dex_preopt, dict) and 'enabled' in dex_preopt:
                record.dex_pre_opt = _as_flag(dex_preopt['enabled'])

        return record
