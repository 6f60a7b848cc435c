"""End-to-end tests of the shimbuild command line."""

import json

import pytest

from args import parse_args
from constants import ExitCodes
from shimbuild import main, run


def invoke(shim_tree, *extra):
    argv = [
        "--compat", str(shim_tree / "compat.json"),
        "--shims", str(shim_tree / "shims"),
        "-o", str(shim_tree / "dist"),
        *extra,
    ]
    return run(parse_args(argv))


class TestBuild:
    """Artifacts produced for a shim directory."""

    def test_default_bundle(self, shim_tree):
        assert invoke(shim_tree, "-t", "chrome=70") == ExitCodes.SUCCESS.value
        data = (shim_tree / "dist" / "index.js").read_text(encoding="utf-8")
        assert data == (
            "/** shimbuild bundle */\n"
            "!function (undefined) { 'use strict';\n"
            "/* es.map.constructor */\n"
            "var MapShim = 1;\n"
            "/* esnext.map.from */\n"
            "'use strict';\n"
            "// dependency: es.map.constructor\n"
            "var MapFrom = 1;\n"
            "}();\n"
        )
        assert not (shim_tree / "dist" / "minified.js").exists()

    def test_no_targets_includes_everything(self, shim_tree):
        assert invoke(shim_tree, "--no-wrap", "--banner", "") == ExitCodes.SUCCESS.value
        data = (shim_tree / "dist" / "index.js").read_text(encoding="utf-8")
        markers = [line for line in data.splitlines() if line.startswith("/* ")]
        assert markers == [
            "/* es.array.iterator */",
            "/* es.map.constructor */",
            "/* esnext.map.from */",
            "/* web.dom-collections.iterator */",
        ]
        assert not data.startswith("!function")

    def test_several_bundles(self, shim_tree):
        code = invoke(shim_tree, "-b", "default", "-b", "deno", "-t", "chrome=70")
        assert code == ExitCodes.SUCCESS.value
        assert (shim_tree / "dist" / "default" / "index.js").exists()
        assert (shim_tree / "dist" / "deno" / "index.js").exists()

    def test_modules_file(self, shim_tree):
        modules = shim_tree / "shims" / "modules.json"
        modules.write_text(json.dumps([
            {"id": "es.map.constructor"},
            {"id": "esnext.map.from", "dependencies": ["es.map.constructor"]},
        ]), encoding="utf-8")
        argv = [
            "--compat", str(shim_tree / "compat.json"),
            "--modules", str(modules),
            "-o", str(shim_tree / "out"),
            "-t", "chrome=70",
        ]
        assert run(parse_args(argv)) == ExitCodes.SUCCESS.value
        assert "/* esnext.map.from */" in (shim_tree / "out" / "index.js").read_text(encoding="utf-8")


class TestListAndReport:
    """Non-writing outputs."""

    def test_list(self, shim_tree, capsys):
        assert invoke(shim_tree, "--list", "-t", "chrome=60") == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out.splitlines() == [
            "es.array.iterator",
            "es.map.constructor",
            "esnext.map.from",
            "web.dom-collections.iterator",
        ]
        assert not (shim_tree / "dist").exists()

    def test_list_several_bundles_labelled(self, shim_tree, capsys):
        code = invoke(shim_tree, "--list", "-b", "default", "-b", "deno", "-t", "chrome=70")
        assert code == ExitCodes.SUCCESS.value
        lines = capsys.readouterr().out.splitlines()
        assert lines[:3] == ["# default", "es.map.constructor", "esnext.map.from"]
        assert lines[3:] == ["# deno", "es.map.constructor", "esnext.map.from"]

    def test_empty_target_set_lists_only_forced(self, shim_tree, capsys):
        code = invoke(shim_tree, "--list", "--set", "targets={}", "-i", "esnext.map.from")
        assert code == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out.splitlines() == ["es.map.constructor", "esnext.map.from"]

    def test_report(self, shim_tree):
        report = shim_tree / "report.json"
        code = invoke(shim_tree, "--list", "-t", "chrome=70", "--report", str(report))
        assert code == ExitCodes.SUCCESS.value
        data = json.loads(report.read_text(encoding="utf-8"))
        assert data[0]["bundle"] == "default"
        assert data[0]["modules"] == ["es.map.constructor", "esnext.map.from"]
        assert data[0]["seed"] == ["esnext.map.from"]
        assert data[0]["targets"] == {"chrome": "70"}


class TestExitCodes:
    """Failure and warning statuses."""

    def test_missing_compat_file(self, shim_tree):
        argv = ["--compat", str(shim_tree / "absent.json"), "--shims", str(shim_tree / "shims")]
        assert run(parse_args(argv)) == ExitCodes.FILE_ERROR.value

    def test_no_compat_configured(self, shim_tree):
        assert run(parse_args(["--shims", str(shim_tree / "shims")])) == ExitCodes.FILE_ERROR.value

    def test_unknown_forced_module(self, shim_tree):
        assert invoke(shim_tree, "-i", "ghost") == ExitCodes.RESOLUTION_ERROR.value

    def test_cycle_in_shims(self, shim_tree):
        (shim_tree / "shims" / "es.map.constructor.js").write_text(
            "// dependency: esnext.map.from\n", encoding="utf-8",
        )
        assert invoke(shim_tree) == ExitCodes.RESOLUTION_ERROR.value

    def test_missing_payload(self, shim_tree):
        modules = shim_tree / "modules.json"
        modules.write_text(json.dumps([{"id": "es.gone"}]), encoding="utf-8")
        argv = [
            "--compat", str(shim_tree / "compat.json"),
            "--modules", str(modules),
            "-o", str(shim_tree / "out"),
        ]
        assert run(parse_args(argv)) == ExitCodes.FILE_ERROR.value

    def test_warnings(self, shim_tree):
        extra = ("-t", "chrome=70", "-x", "es.map.constructor")
        assert invoke(shim_tree, *extra) == ExitCodes.SUCCESS.value
        assert invoke(shim_tree, *extra, "--error-on-warnings") == ExitCodes.EXIT_WARNINGS.value

    def test_broken_exclusion_error_policy(self, shim_tree):
        code = invoke(
            shim_tree, "-t", "chrome=70", "-x", "es.map.constructor",
            "--broken-exclusion-policy", "error",
        )
        assert code == ExitCodes.RESOLUTION_ERROR.value

    def test_invalid_config_value(self, shim_tree):
        assert invoke(shim_tree, "--set", "conflict_policy=maybe") == ExitCodes.FILE_ERROR.value


def test_main_exits_with_run_code(shim_tree, monkeypatch):
    monkeypatch.setenv("SHIMBUILD_LOG_LEVEL", "WARNING")
    with pytest.raises(SystemExit) as exc_info:
        main([
            "--compat", str(shim_tree / "compat.json"),
            "--shims", str(shim_tree / "shims"),
            "-o", str(shim_tree / "dist"),
            "--loglevel", "WARNING",
        ])
    assert exc_info.value.code == ExitCodes.SUCCESS.value
