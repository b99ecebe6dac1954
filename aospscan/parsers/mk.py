"""
Android.mk parser.

Walks the logical lines of a makefile as a fold: assignments update a
draft module, and each build boundary such as
"include $(BUILD_SHARED_LIBRARY)" closes the draft and opens a new one.
A file therefore yields one record per module it builds.
"""

import re
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from ..lines import join_continued_lines
from ..macro import MY_DIR_KEY, MacroEnvironment, MacroExpander
from ..models import ModuleKind, ModuleRecord
from ..path_resolver import get_android_root
from ..text_utils import split_words, strip_make_comment
from .base import MakefileParser
from .registry import ParserRegistry

logger = logging.getLogger(__name__)


@dataclass
class _ModuleDraft:
    """Facts collected between two build boundaries"""
    record: ModuleRecord = field(default_factory=ModuleRecord)
    include_tokens: List[str] = field(default_factory=list)
    artifacts: List[str] = field(default_factory=list)
    module_class: str = ""


@ParserRegistry.register('.mk')
class AndroidMkParser(MakefileParser):
    """GNU Make style Android.mk parser"""

    INCLUDE_KEYS = ('LOCAL_C_INCLUDES', 'LOCAL_EXPORT_C_INCLUDE_DIRS')
    # BUILD_PACKAGE modules are named by LOCAL_PACKAGE_NAME
    OUTPUT_KEYS = ('LOCAL_MODULE', 'LOCAL_PACKAGE_NAME')
    CFLAGS_KEYS = ('LOCAL_CFLAGS', 'LOCAL_CPPFLAGS', 'LOCAL_CONLYFLAGS')
    PREBUILT_KEYS = ('LOCAL_SRC_FILES', 'LOCAL_PREBUILT_MODULE_FILE', 'LOCAL_MODULE_STEM')
    MODULE_CLASS_KEY = 'LOCAL_MODULE_CLASS'
    CERTIFICATE_KEY = 'LOCAL_CERTIFICATE'
    DEX_PREOPT_KEY = 'LOCAL_DEX_PREOPT'
    PROGUARD_KEY = 'LOCAL_PROGUARD_ENABLED'

    # Build boundaries; None means "classify from the prebuilt artifact"
    BOUNDARY_MARKERS: List[Tuple[re.Pattern, Optional[ModuleKind]]] = [
        (re.compile(r'\$\(BUILD_(?:HOST_)?(?:STATIC|SHARED)_LIBRARY\)'), ModuleKind.NATIVE_LIB),
        (re.compile(r'\$\(BUILD_(?:HOST_)?(?:MULTI_)?PREBUILT\)'), None),
        (re.compile(r'\$\(BUILD_PACKAGE\)'), ModuleKind.APK),
        (re.compile(r'\$\(BUILD_(?:STATIC_|HOST_)?JAVA_LIBRARY\)'), ModuleKind.JAR),
    ]

    MODULE_CLASS_KINDS = {
        'SHARED_LIBRARIES': ModuleKind.NATIVE_LIB,
        'STATIC_LIBRARIES': ModuleKind.NATIVE_LIB,
        'APPS': ModuleKind.APK,
        'JAVA_LIBRARIES': ModuleKind.JAR,
    }

    CLEAR_VARS_RE = re.compile(r'^-?include\s+\$\(CLEAR_VARS\)')
    OTHER_BUILD_RE = re.compile(r'^-?include\s+\$\(BUILD_[A-Z0-9_]+\)')
    ASSIGNMENT_RE = re.compile(
        r'^(?:(?:export|override)\s+)?([A-Za-z0-9_.\-]+)\s*(::=|:=|\+=|\?=|=)\s*(.*)$'
    )

    @property
    def dialect(self) -> str:
        return "mk"

    @classmethod
    def split_assignment(cls, line: str) -> Optional[Tuple[str, str, str]]:
        """Split "KEY op value" into (key, op, value); None if line is no assignment."""
        match = cls.ASSIGNMENT_RE.match(line.strip())
        if not match:
            return None
        key, operator, value = match.groups()
        if operator == '::=':
            operator = ':='
        return key, operator, value.strip()

    def match_boundary(self, line: str) -> Tuple[bool, Optional[ModuleKind]]:
        for pattern, kind in self.BOUNDARY_MARKERS:
            if pattern.search(line):
                return True, kind
        return False, None

    def parse_lines(self, path: str, lines: List[str]) -> List[ModuleRecord]:
        module_dir = str(Path(path).parent)
        android_root = get_android_root(path)
        expander = MacroExpander(android_root, self.options.include_path_map)
        env = MacroEnvironment({MY_DIR_KEY: module_dir})

        drafts: List[_ModuleDraft] = []
        current = _ModuleDraft()
        in_define = False

        for line in join_continued_lines(lines):
            line = strip_make_comment(line).strip()
            if not line:
                continue

            # define ... endef bodies are recipes, not assignments
            if in_define:
                in_define = not line.startswith('endef')
                continue
            if line.startswith('define '):
                in_define = True
                continue

            if self.CLEAR_VARS_RE.match(line):
                env.clear_local_variables()
                current = _ModuleDraft()
                continue

            is_boundary, kind = self.match_boundary(line)
            if is_boundary:
                self._close(current, kind)
                drafts.append(current)
                current = _ModuleDraft()
                continue
            if self.OTHER_BUILD_RE.match(line):
                # executables, tests and the like end a module we do not report
                logger.debug(f"Skipping module closed by {line!r}")
                current = _ModuleDraft()
                continue

            assignment = self.split_assignment(line)
            if assignment is None:
                continue
            key, operator, raw_value = assignment
            if operator == '?=' and key in env:
                continue

            value = expander.expand(raw_value, env)
            env.assign(key, value, operator)
            self._apply(current, key, value)

        # Forward references resolve only once the whole file is known
        expander.flatten(env)

        records = []
        for draft in drafts:
            record = self._complete(draft, expander, env, module_dir, android_root)
            record = self.finalize(record, path)
            if record is not None:
                records.append(record)

        logger.debug(f"{path}: {len(records)} module(s) from {len(drafts)} boundaries")
        return records

    def _apply(self, draft: _ModuleDraft, key: str, value: str) -> None:
        """Route one assignment into the draft module."""
        record = draft.record
        if key in self.INCLUDE_KEYS:
            draft.include_tokens.extend(split_words(value))
        elif key in self.OUTPUT_KEYS:
            if value:
                record.built_outputs.append(value)
        elif key in self.CFLAGS_KEYS:
            record.compiler_flags.extend(split_words(value))
        elif key in self.PREBUILT_KEYS:
            for token in split_words(value):
                if ModuleKind.from_artifact(token) != ModuleKind.UNKNOWN:
                    draft.artifacts.append(token)
        elif key == self.MODULE_CLASS_KEY:
            draft.module_class = value.strip()
        elif key == self.CERTIFICATE_KEY:
            record.certificate = value
        elif key == self.DEX_PREOPT_KEY:
            record.dex_pre_opt = value
        elif key == self.PROGUARD_KEY:
            record.optimize_enabled = "false" if value.strip() == "disabled" else value

    def _close(self, draft: _ModuleDraft, kind: Optional[ModuleKind]) -> None:
        """Name and classify the draft at its build boundary."""
        record = draft.record
        if kind is None:
            kind = self._classify_prebuilt(draft)
        record.kind = kind
        record.built_outputs.extend(draft.artifacts)

        if record.built_outputs:
            # LOCAL_MODULE is appended before any artifact, so prefer it
            names = [o for o in record.built_outputs if o not in draft.artifacts]
            record.name = names[-1] if names else Path(draft.artifacts[0]).stem
        logger.debug(f"Closed {record.kind.value} module {record.name!r}")

    def _classify_prebuilt(self, draft: _ModuleDraft) -> ModuleKind:
        for artifact in draft.artifacts:
            kind = ModuleKind.from_artifact(artifact)
            if kind != ModuleKind.UNKNOWN:
                return kind
        return self.MODULE_CLASS_KINDS.get(draft.module_class, ModuleKind.UNKNOWN)

    def _complete(self, draft: _ModuleDraft, expander: MacroExpander, env: MacroEnvironment,
                  module_dir: str, android_root: str) -> ModuleRecord:
        """Second expansion pass with the flattened environment, then include resolution."""
        record = draft.record

        def expand_words(words: List[str]) -> List[str]:
            expanded = []
            for word in words:
                if "$(" in word:
                    expanded.extend(split_words(expander.expand(word, env)))
                else:
                    expanded.append(word)
            return expanded

        record.name = expander.expand(record.name, env).strip()
        record.built_outputs = [expander.expand(o, env).strip() for o in record.built_outputs]

        flags = []
        for flag in expand_words(record.compiler_flags):
            if "$(" in flag:
                logger.debug(f"Dropping unresolved flag {flag!r}")
                continue
            flags.append(flag)
        record.compiler_flags = flags

        record.header_search_paths = self.resolve_includes(
            expand_words(draft.include_tokens), module_dir, android_root
        )
        return record
