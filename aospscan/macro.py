"""
Make macro expansion for Android.mk files.

Only the subset of GNU Make that Android.mk files lean on for include
paths and flags is understood:

- $(VAR) references against the variables assigned so far
- $(subst from,to,text), nested, inner calls first
- $(call include-path-for, name) through a fixed lookup table
- $(call my-dir), stored as a synthetic variable

Anything else is left as-is. Expansion never raises on malformed input.
"""

import logging
from typing import Dict, Iterator, Mapping, Optional

from .text_utils import extract_balanced, split_top_level

logger = logging.getLogger(__name__)

# Separator used by "+=" when appending to an existing value
APPEND_SEPARATOR = " "

MY_DIR_KEY = "call my-dir"

# $(call include-path-for, <name>) lookup, relative to the platform root
INCLUDE_PATH_MAP = {
    "camera": "system/media/camera/include",
    "frameworks-base": "frameworks/base/include",
    "frameworks-native": "frameworks/native/include",
    "libhardware": "hardware/libhardware/include",
    "libhardware_legacy": "hardware/libhardware_legacy/include",
    "libril": "hardware/ril/include",
    "system-core": "system/core/include",
    "audio": "system/media/audio/include",
    "audio-effects": "system/media/audio_effects/include",
    "audio-utils": "system/media/audio_utils/include",
    "audio-route": "system/media/audio_route/include",
    "wilhelm": "frameworks/wilhelm/include",
    "wilhelm-ut": "frameworks/wilhelm/src/ut",
    "mediandk": "frameworks/av/media/ndk",
}


class MacroEnvironment:
    """Variables assigned while walking one makefile"""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def assign(self, key: str, value: str, operator: str = ":=") -> str:
        """
        Apply an assignment and return the stored value.

        "+=" appends with APPEND_SEPARATOR, "?=" only sets unset keys,
        every other operator replaces.
        """
        value = value.strip()
        if operator == "+=":
            previous = self._values.get(key)
            if previous:
                value = f"{previous}{APPEND_SEPARATOR}{value}" if value else previous
        elif operator == "?=" and key in self._values:
            return self._values[key]
        self._values[key] = value
        return value

    def clear_local_variables(self) -> None:
        """What include $(CLEAR_VARS) does: forget LOCAL_* except LOCAL_PATH."""
        for key in [k for k in self._values if k.startswith("LOCAL_") and k != "LOCAL_PATH"]:
            del self._values[key]

    def get(self, key: str, default: str = "") -> str:
        return self._values.get(key, default)

    def items(self):
        return self._values.items()

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._values[key] = value

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)


class MacroExpander:
    """Expands make macros found in Android.mk values"""

    SUBST_CALL = "$(subst "
    INCLUDE_PATH_CALL = "$(call include-path-for"

    # Bound for flatten(); self-referencing variables never stabilize
    MAX_FLATTEN_PASSES = 10

    def __init__(self, platform_root: str = "", include_path_map: Optional[Mapping[str, str]] = None):
        self.platform_root = platform_root
        self.include_path_map = dict(INCLUDE_PATH_MAP)
        if include_path_map:
            self.include_path_map.update(include_path_map)

    def expand(self, raw: str, env: MacroEnvironment) -> str:
        """One expansion pass: variables, then subst, then include-path-for."""
        value = self.substitute_variables(raw, env)
        value = self.expand_subst(value)
        value = self.expand_include_path_for(value)
        return value

    def substitute_variables(self, raw: str, env: MacroEnvironment) -> str:
        if "$(" not in raw:
            return raw
        value = raw
        for key, replacement in env.items():
            ref = f"$({key})"
            if ref in value:
                value = value.replace(ref, replacement)
        return value

    def expand_subst(self, value: str) -> str:
        """
        Resolve every $(subst from,to,text) in value, innermost first.

        Malformed calls (unbalanced parentheses, not exactly three
        arguments) are kept verbatim.
        """
        search_from = 0
        while True:
            pos = value.find(self.SUBST_CALL, search_from)
            if pos < 0:
                return value

            span = extract_balanced(value, "(", ")", pos + 1, quotes="")
            if span is None:
                return value
            start, end = span

            arguments = self.expand_subst(value[start + 1 + len("subst "):end])
            parts = split_top_level(arguments, ",")
            if len(parts) != 3:
                logger.debug(f"Ignoring malformed subst: {value[pos:end + 1]}")
                search_from = pos + 2
                continue

            find, replace, text = (p.strip() for p in parts)
            replaced = text.replace(find, replace) if find else text
            value = value[:pos] + replaced + value[end + 1:]
            search_from = pos + len(replaced)

    def expand_include_path_for(self, value: str) -> str:
        """Replace known $(call include-path-for, name) calls with root-relative paths."""
        search_from = 0
        while True:
            pos = value.find(self.INCLUDE_PATH_CALL, search_from)
            if pos < 0:
                return value

            span = extract_balanced(value, "(", ")", pos + 1, quotes="")
            if span is None:
                return value
            start, end = span

            arguments = split_top_level(value[start + 1:end], ",")
            key = arguments[1].strip() if len(arguments) == 2 else ""
            if key not in self.include_path_map:
                search_from = pos + 2
                continue

            replacement = f"{self.platform_root}/{self.include_path_map[key]}"
            value = value[:pos] + replacement + value[end + 1:]
            search_from = pos + len(replacement)

    def flatten(self, env: MacroEnvironment) -> None:
        """Re-expand every variable until values stop changing."""
        for _ in range(self.MAX_FLATTEN_PASSES):
            changed = False
            for key, value in list(env.items()):
                expanded = self.expand(value, env)
                if expanded != value:
                    env[key] = expanded
                    changed = True
            if not changed:
                return
        logger.debug("Macro flattening did not converge; keeping partial expansion")
