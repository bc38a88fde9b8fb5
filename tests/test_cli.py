"""Tests for the fretchord command-line interface."""

import json

import click
import pytest
from click.testing import CliRunner

from fretchord import __version__
from fretchord.cli import _parse_frets, main


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_generate_prints_ranked_tabs(runner: CliRunner) -> None:
    result = runner.invoke(main, ["generate", "Am"])
    assert result.exit_code == 0, result.output
    assert "Am" in result.output
    assert "1. x02210" in result.output
    assert "A C E" in result.output


def test_generate_json(runner: CliRunner) -> None:
    result = runner.invoke(main, ["generate", "Am", "--json", "-n", "3"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["canonical"] == "Am"
    assert payload["quality"] == "minor"
    assert payload["voicings"][0]["frets"] == [None, 0, 2, 2, 1, 0]
    assert len(payload["voicings"]) <= 3


def test_generate_on_ukulele(runner: CliRunner) -> None:
    result = runner.invoke(main, ["generate", "C", "--instrument", "ukulele", "--json"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert all(len(voicing["frets"]) == 4 for voicing in payload["voicings"])


def test_generate_unknown_chord_fails(runner: CliRunner) -> None:
    result = runner.invoke(main, ["generate", "H7"])
    assert result.exit_code == 1
    assert "ERROR" in result.output


def test_generate_rejects_zero_voicings(runner: CliRunner) -> None:
    result = runner.invoke(main, ["generate", "Am", "-n", "0"])
    assert result.exit_code == 2


def test_verbose_flag_is_accepted(runner: CliRunner) -> None:
    result = runner.invoke(main, ["-v", "generate", "E"])
    assert result.exit_code == 0, result.output


def test_notes(runner: CliRunner) -> None:
    result = runner.invoke(main, ["notes", "Cmaj7"])
    assert result.exit_code == 0
    assert "C E G B" in result.output
    assert "maj7" in result.output


def test_notes_rejects_garbage(runner: CliRunner) -> None:
    result = runner.invoke(main, ["notes", "zz"])
    assert result.exit_code == 1


def test_score_open_a_minor(runner: CliRunner) -> None:
    result = runner.invoke(main, ["score", "x02210", "--chord", "Am"])
    assert result.exit_code == 0, result.output
    lines = {line.split()[0]: line.split()[1] for line in result.output.splitlines() if line.strip()}
    assert lines["playability"] == "25"
    assert lines["voice_leading"] == "30"
    assert lines["total"] == "110"


def test_score_warns_about_foreign_notes(runner: CliRunner) -> None:
    result = runner.invoke(main, ["score", "320003", "-c", "Am"])
    assert result.exit_code == 0
    assert "WARNING" in result.output


def test_score_rejects_wrong_string_count(runner: CliRunner) -> None:
    result = runner.invoke(main, ["score", "x0221", "-c", "Am"])
    assert result.exit_code == 2


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("x02210", [None, 0, 2, 2, 1, 0]),
        ("X,10,12,12,11,10", [None, 10, 12, 12, 11, 10]),
        ("x, 3, 2, 0, 1, 0", [None, 3, 2, 0, 1, 0]),
    ],
)
def test_parse_frets(text: str, expected: list[int | None]) -> None:
    assert _parse_frets(text, 6) == expected


def test_parse_frets_rejects_bad_symbols() -> None:
    with pytest.raises(click.BadParameter):
        _parse_frets("x0221q", 6)
