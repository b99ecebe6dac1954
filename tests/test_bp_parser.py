"""Tests for the Android.bp parser"""

import pytest
from aospscan.errors import BlueprintSyntaxError
from aospscan.models import ModuleKind
from aospscan.parsers import AndroidBpParser, ParserOptions, blueprint_to_json, merge_defaults


DEFAULTS_FILE = """\
cc_defaults {
    name: "foo_defaults",
    cflags: ["-Wall"],
}

cc_library_shared {
    name: "libfoo",
    defaults: ["foo_defaults"],
    cflags: ["-Werror"],
    export_include_dirs: ["include"],
}
"""


@pytest.fixture
def parser(clang_options):
    return AndroidBpParser(clang_options)


class TestBlueprintToJson:
    def test_bareword_keys_and_trailing_commas(self):
        block = '{ name: "libfoo", cflags: ["-Wall",], optimize: { enabled: false, }, }'
        assert blueprint_to_json(block) == {
            "name": "libfoo",
            "cflags": ["-Wall"],
            "optimize": {"enabled": False},
        }

    def test_strings_left_alone(self):
        block = '{ certificate: ":com.android.foo.cert", cflags: ["-DX=a,]"], }'
        decoded = blueprint_to_json(block)
        assert decoded["certificate"] == ":com.android.foo.cert"
        assert decoded["cflags"] == ["-DX=a,]"]

    def test_concatenation_is_rejected(self):
        with pytest.raises(BlueprintSyntaxError):
            blueprint_to_json('{ srcs: ["a.c"] + ["b.c"] }')


class TestMergeDefaults:
    def test_lists_union_defaults_first(self):
        index = {"d": {"name": "d", "cflags": ["-Wall", "-g"]}}
        merged = merge_defaults({"name": "m", "defaults": ["d"], "cflags": ["-g", "-O2"]}, index)
        assert merged["cflags"] == ["-Wall", "-g", "-O2"]
        assert merged["name"] == "m"

    def test_module_scalars_win(self):
        index = {"d": {"name": "d", "certificate": "platform"}}
        merged = merge_defaults({"name": "m", "defaults": ["d"], "certificate": "shared"}, index)
        assert merged["certificate"] == "shared"

    def test_nested_defaults(self):
        index = {
            "outer": {"name": "outer", "defaults": ["inner"], "cflags": ["-Werror"]},
            "inner": {"name": "inner", "cflags": ["-Wall"]},
        }
        merged = merge_defaults({"name": "m", "defaults": ["outer"]}, index)
        assert merged["cflags"] == ["-Wall", "-Werror"]

    def test_cycle_terminates(self):
        index = {
            "a": {"name": "a", "defaults": ["b"], "cflags": ["-DA"]},
            "b": {"name": "b", "defaults": ["a"], "cflags": ["-DB"]},
        }
        merged = merge_defaults({"name": "m", "defaults": ["a"]}, index)
        assert merged["cflags"] == ["-DB", "-DA"]

    def test_unknown_defaults_ignored(self):
        assert merge_defaults({"name": "m", "defaults": ["nope"]}, {}) == {
            "name": "m", "defaults": ["nope"],
        }


class TestAndroidBpParser:
    def test_dialect(self, parser):
        assert parser.dialect == "bp"

    def test_defaults_applied(self, parser, module_dir, write_makefile):
        path = write_makefile(module_dir, "Android.bp", DEFAULTS_FILE)
        record, = parser.parse(path)

        assert record.kind == ModuleKind.NATIVE_LIB
        assert record.lib_name == "libfoo"
        assert record.compiler_flags == ["-Wall", "-Werror"]
        assert record.header_search_paths == [str(module_dir / "include")]
        assert record.built_outputs == ["libfoo"]

    def test_comments_ignored(self, parser, module_dir, write_makefile):
        content = (
            '// cc_library { name: "ghost" }\n'
            '/* cc_library {\n'
            '    name: "ghost2",\n'
            '} */\n'
            'cc_library {\n'
            '    name: "libreal", // trailing comment\n'
            '    cflags: ["-O2"],\n'
            '}\n'
        )
        path = write_makefile(module_dir, "Android.bp", content)
        assert [r.name for r in parser.parse(path)] == ["libreal"]

    def test_invalid_block_skipped(self, parser, module_dir, write_makefile):
        content = (
            'cc_library { name: "libbad", srcs: ["a.c"] + ["b.c"], }\n'
            'cc_library { name: "libgood", cflags: ["-g"], }\n'
        )
        path = write_makefile(module_dir, "Android.bp", content)
        assert [r.name for r in parser.parse(path)] == ["libgood"]

    def test_braces_inside_strings(self, parser, module_dir, write_makefile):
        content = 'cc_library {\n    name: "libfmt",\n    cflags: ["-DFMT=\\"{}\\""],\n}\n'
        path = write_makefile(module_dir, "Android.bp", content)
        record, = parser.parse(path)
        assert record.compiler_flags == ['-DFMT="{}"']

    def test_url_in_block_comment(self, parser, module_dir, write_makefile):
        content = (
            '/* Docs: https://source.android.com/docs/setup/build */\n'
            'cc_library {\n'
            '    name: "libreal",\n'
            '    cflags: ["-O2"], // see https://example.com /* not a block\n'
            '}\n'
        )
        path = write_makefile(module_dir, "Android.bp", content)
        assert [r.name for r in parser.parse(path)] == ["libreal"]

    def test_header_inside_top_level_string(self, parser, module_dir, write_makefile):
        content = (
            'bogus = "cc_library {"\n'
            'cc_library {\n'
            '    name: "libreal",\n'
            '    cflags: ["-g"],\n'
            '}\n'
        )
        path = write_makefile(module_dir, "Android.bp", content)
        assert [r.name for r in parser.parse(path)] == ["libreal"]

    def test_android_app_attributes(self, parser, aosp_root, write_makefile):
        content = """\
android_app {
    name: "Settings",
    certificate: "platform",
    cflags: ["-Wall"],
    optimize: {
        enabled: false,
        shrink: true,
    },
    dex_preopt: {
        enabled: false,
    },
}
"""
        path = write_makefile(aosp_root / "packages" / "apps" / "Settings", "Android.bp", content)
        record, = parser.parse(path)

        assert record.kind == ModuleKind.APK
        assert record.apk_name == "Settings"
        assert record.certificate == "platform"
        assert record.optimize_enabled == "false"
        assert record.optimize_shrink == "true"
        assert record.dex_pre_opt == "false"
        assert record.compiler_flags == []

    def test_apex(self, parser, aosp_root, write_makefile):
        content = 'apex {\n    name: "com.android.media",\n    certificate: ":com.android.media.certificate",\n}\n'
        path = write_makefile(aosp_root / "packages" / "modules" / "Media", "Android.bp", content)
        record, = parser.parse(path)
        assert record.kind == ModuleKind.APEX
        assert record.apex_name == "com.android.media"
        assert record.certificate == ":com.android.media.certificate"

    def test_java_import_jars(self, parser, aosp_root, write_makefile):
        content = 'java_import {\n    name: "guava-prebuilt",\n    jars: ["libs/guava.jar", "NOTICE"],\n}\n'
        path = write_makefile(aosp_root / "external" / "guava", "Android.bp", content)
        record, = parser.parse(path)
        assert record.kind == ModuleKind.JAR
        assert record.built_outputs == ["guava-prebuilt", "libs/guava.jar"]

    def test_no_module_blocks(self, parser, module_dir, write_makefile):
        content = 'package {\n    default_applicable_licenses: ["x"],\n}\n'
        path = write_makefile(module_dir, "Android.bp", content)
        assert parser.parse(path) == []

    def test_defaults_blocks_emit_nothing(self, parser, module_dir, write_makefile):
        content = 'cc_defaults {\n    name: "only_defaults",\n    cflags: ["-Wall"],\n}\n'
        path = write_makefile(module_dir, "Android.bp", content)
        assert parser.parse(path) == []

    def test_kind_filter(self, module_dir, write_makefile):
        path = write_makefile(module_dir, "Android.bp", DEFAULTS_FILE)
        parser = AndroidBpParser(ParserOptions(kinds=frozenset({ModuleKind.APK})))
        assert parser.parse(path) == []

    def test_header_fallback(self, module_dir, write_makefile):
        (module_dir / "include" / "foo.h").write_text("#pragma once\n")
        path = write_makefile(module_dir, "Android.bp", 'cc_library { name: "libfoo" }\n')
        record, = AndroidBpParser(ParserOptions(version="2.1")).parse(path)
        assert record.header_search_paths == [str(module_dir / "include")]
        assert record.version == "2.1"
