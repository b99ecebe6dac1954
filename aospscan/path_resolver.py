"""
Include path resolution against an Android source tree.
"""

import os
import logging
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

# Top-level directories of an Android platform checkout
ANDROID_ROOT_DIRS = (
    "/system/",
    "/frameworks/",
    "/device/",
    "/vendor/",
    "/packages/",
    "/external/",
    "/hardware/",
    "/bionic/",
    "/art/",
    "/libcore/",
    "/build/",
    "/prebuilts/",
)


def get_android_root(path: str) -> str:
    """
    Return the platform root that contains path, or "" if none is recognizable.

    The root is everything before the earliest well-known top-level
    directory, e.g. "/aosp/frameworks/av/Android.mk" -> "/aosp".
    """
    best = -1
    for marker in ANDROID_ROOT_DIRS:
        pos = path.find(marker)
        if pos >= 0 and (best < 0 or pos < best):
            best = pos
    return path[:best] if best >= 0 else ""


def clean_path(path: str) -> str:
    """Collapse duplicate separators and drop trailing '/' or '/.'"""
    path = path.strip()
    if not path:
        return path
    return os.path.normpath(path)


class PathResolver:
    """Turns relative include paths into existing filesystem paths"""

    def resolve(self, base_dir: str, relative_path: str) -> Optional[str]:
        """
        Resolve relative_path against base_dir.

        Build variables often expand to paths that already repeat part of
        base_dir (e.g. "frameworks/av/include" inside ".../frameworks/av/media").
        When the plain join does not exist, the longest leading run of
        relative_path segments found in base_dir is used to splice a
        corrected path.

        Returns:
            An existing path, or None when neither attempt exists.
        """
        relative_path = relative_path.strip()
        if not relative_path:
            return None

        if os.path.isabs(relative_path) and os.path.exists(relative_path):
            return clean_path(relative_path)

        naive = clean_path(f"{base_dir}/{relative_path}")
        if os.path.exists(naive):
            return naive

        corrected = self._splice_overlap(base_dir, relative_path)
        if corrected and os.path.exists(corrected):
            logger.debug(f"Resolved {relative_path} via overlap with {base_dir}: {corrected}")
            return corrected

        return None

    def _splice_overlap(self, base_dir: str, relative_path: str) -> Optional[str]:
        anchored_base = "/" + base_dir.strip("/")
        overlap = ""
        for segment in relative_path.strip("/").split("/"):
            if not segment:
                continue
            candidate = f"{overlap}/{segment}" if overlap else segment
            if f"/{candidate}" in anchored_base:
                overlap = candidate
            else:
                break

        if not overlap:
            return None

        pos = anchored_base.find(f"/{overlap}")
        remainder = relative_path.strip("/")[len(overlap):]
        prefix = anchored_base[:pos]
        if not base_dir.startswith("/"):
            prefix = prefix.lstrip("/")
        return clean_path(f"{prefix}/{overlap}{remainder}" if prefix else f"{overlap}{remainder}")

    def resolve_all(self, bases: Iterable[str], relative_path: str) -> List[str]:
        """Resolve against each non-empty base, keeping existing results only."""
        found = []
        for base in bases:
            if not base:
                continue
            resolved = self.resolve(base, relative_path)
            if resolved and resolved not in found:
                found.append(resolved)
        return found
