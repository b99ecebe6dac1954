"""Shared test fixtures for aospscan test suite."""

import sys
import pytest
from pathlib import Path

# Ensure aospscan is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from aospscan.compiler_filter import IdentityFilter
from aospscan.models import ModuleKind, ModuleRecord, ScanResult
from aospscan.parsers import ParserOptions


@pytest.fixture
def aosp_root(tmp_path):
    """A minimal Android source tree with a few include directories."""
    root = tmp_path / "aosp"
    for sub in (
        "frameworks/av/media/libfoo/include",
        "frameworks/av/include",
        "system/media/camera/include",
        "hardware/libhardware/include",
    ):
        (root / sub).mkdir(parents=True)
    return root


@pytest.fixture
def module_dir(aosp_root):
    """Directory of a native module inside the tree."""
    return aosp_root / "frameworks" / "av" / "media" / "libfoo"


@pytest.fixture
def clang_options():
    """Parser options keeping every flag and skipping header guessing."""
    return ParserOptions(compiler_filter=IdentityFilter(), header_fallback=False)


@pytest.fixture
def write_makefile():
    """Write a build file and return its path as a string."""
    def _write(directory: Path, name: str, content: str) -> str:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text(content)
        return str(path)
    return _write


@pytest.fixture
def sample_record():
    """A populated native library record."""
    return ModuleRecord(
        kind=ModuleKind.NATIVE_LIB,
        name="libfoo",
        built_outputs=["libfoo"],
        header_search_paths=["/aosp/frameworks/av/include"],
        compiler_flags=["-Wall", "-Werror"],
        source_file="/aosp/frameworks/av/Android.bp",
        version="1.0",
    )


@pytest.fixture
def sample_apk_record():
    """A populated APK record."""
    return ModuleRecord(
        kind=ModuleKind.APK,
        name="Settings",
        built_outputs=["Settings"],
        certificate="platform",
        optimize_enabled="false",
        source_file="/aosp/packages/apps/Settings/Android.bp",
    )


@pytest.fixture
def sample_scan_result(sample_record, sample_apk_record):
    """A scan result with one native library and one APK."""
    return ScanResult(
        target_path="/aosp",
        records=[sample_record, sample_apk_record],
        files_scanned=2,
        scan_duration_seconds=0.5,
    )
