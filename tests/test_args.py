"""Tests for command line parsing."""

import pytest

from args import parse_args


def test_defaults():
    args = parse_args([])
    assert args.TARGETS is None
    assert args.TARGET_PRESET is None
    assert args.BUNDLES is None
    assert args.CONFIG_SET == []
    assert args.LOG_LEVEL == "INFO"
    assert args.NO_WRAP is False
    assert args.LIST_ONLY is False
    assert args.ERROR_ON_WARNINGS is False


def test_repeatable_and_case_insensitive():
    args = parse_args([
        "-t", "chrome=49", "--target", "firefox:52",
        "--preset", "OLDEST",
        "-b", "Default", "-b", "deno",
        "-m", "stable",
        "--conflict-policy", "ERROR",
        "--loglevel", "debug",
    ])
    assert args.TARGETS == ["chrome=49", "firefox:52"]
    assert args.TARGET_PRESET == "oldest"
    assert args.BUNDLES == ["default", "deno"]
    assert args.MODULES_FILTER == ["stable"]
    assert args.CONFLICT_POLICY == "error"
    assert args.LOG_LEVEL == "DEBUG"


@pytest.mark.parametrize("argv", [
    ["--preset", "ancient"],
    ["-b", "nosuch"],
    ["--broken-exclusion-policy", "ignore"],
])
def test_invalid_choices(argv):
    with pytest.raises(SystemExit):
        parse_args(argv)
