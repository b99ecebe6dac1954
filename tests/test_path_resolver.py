"""Tests for aospscan.path_resolver"""

import os
import pytest
from aospscan.path_resolver import PathResolver, clean_path, get_android_root


@pytest.fixture
def resolver():
    return PathResolver()


class TestGetAndroidRoot:
    def test_root_before_top_level_dir(self):
        assert get_android_root("/home/dev/aosp/frameworks/av/Android.mk") == "/home/dev/aosp"

    def test_earliest_marker_wins(self):
        path = "/src/aosp/vendor/acme/system/libx/Android.bp"
        assert get_android_root(path) == "/src/aosp"

    def test_unrecognized_path(self):
        assert get_android_root("/home/dev/project/Android.mk") == ""


class TestCleanPath:
    def test_collapses_separators(self):
        assert clean_path("/a//b/./c/") == "/a/b/c"

    def test_empty(self):
        assert clean_path("  ") == ""


class TestPathResolver:
    def test_naive_join(self, resolver, module_dir):
        assert resolver.resolve(str(module_dir), "include") == str(module_dir / "include")

    def test_overlap_splice(self, resolver, aosp_root, module_dir):
        resolved = resolver.resolve(str(module_dir), "frameworks/av/include")
        assert resolved == str(aosp_root / "frameworks" / "av" / "include")

    def test_absolute_existing_path(self, resolver, aosp_root):
        target = str(aosp_root / "hardware" / "libhardware" / "include")
        assert resolver.resolve("/unrelated", target) == target

    def test_missing_returns_none(self, resolver, module_dir):
        assert resolver.resolve(str(module_dir), "does/not/exist") is None

    def test_blank_returns_none(self, resolver, module_dir):
        assert resolver.resolve(str(module_dir), "  ") is None

    def test_resolve_all_dedupes(self, resolver, aosp_root, module_dir):
        found = resolver.resolve_all(
            (str(module_dir), str(aosp_root), ""), "system/media/camera/include"
        )
        assert found == [os.path.join(str(aosp_root), "system", "media", "camera", "include")]
