"""CLI tests using click's CliRunner (no MIDI device needed)."""

import json

from click.testing import CliRunner

from notemaster import __version__
from notemaster.cli import main, position_text
from notemaster.pitch import Accidental, Clef, Note, NoteName


def _n(name: str, octave: int, clef: Clef = Clef.TREBLE) -> Note:
    return Note(NoteName(name), Accidental.NONE, octave, clef)


def test_version() -> None:
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_generate_is_repeatable_with_seed() -> None:
    runner = CliRunner()
    args = ["generate", "--mode", "multi", "--level", "3", "--seed", "5", "-n", "4"]
    first = runner.invoke(main, args)
    second = runner.invoke(main, args)
    assert first.exit_code == 0
    assert first.output == second.output
    assert len(first.output.strip().splitlines()) == 4


def test_generate_musical_shows_both_staves() -> None:
    result = CliRunner().invoke(main, ["generate", "--mode", "musical", "-n", "1"])
    assert result.exit_code == 0
    assert "treble:" in result.output
    assert "bass:" in result.output


def test_generate_rejects_bad_level() -> None:
    result = CliRunner().invoke(main, ["generate", "--level", "4"])
    assert result.exit_code != 0


def test_layout_outputs_json() -> None:
    result = CliRunner().invoke(main, ["layout", "--mode", "musical", "--seed", "1"])
    assert result.exit_code == 0
    payload = json.loads(result.output)
    staves = payload["layout"]["staves"]
    assert [staff["clef"] for staff in staves] == ["TREBLE", "BASS"]
    assert all(len(staff["lines"]) == 5 for staff in staves)
    note = staves[0]["notes"][0]
    assert set(note) == {"x", "y", "ledger_lines", "stem_direction", "accidental_glyph", "sequence_index"}


def test_drill_with_keyboard_answers() -> None:
    # every letter in turn: one of them must be right for each single-note card
    answers = "\n".join(["c d e f g a b"] * 2 + ["q"]) + "\n"
    result = CliRunner().invoke(main, ["drill", "--rounds", "2", "--seed", "3"], input=answers)
    assert result.exit_code == 0
    assert result.output.count("Correct!") == 2
    assert "Seen: 2" in result.output


def test_drill_quit_immediately() -> None:
    result = CliRunner().invoke(main, ["drill"], input="q\n")
    assert result.exit_code == 0
    assert "Seen: 0" in result.output


def test_position_text() -> None:
    assert position_text(_n("E", 4)) == "treble staff, line 1"
    assert position_text(_n("F", 4)) == "treble staff, space 1"
    assert position_text(_n("F", 5)) == "treble staff, line 5"
    assert position_text(_n("D", 4)) == "treble staff, space just below the staff"
    assert position_text(_n("C", 4)) == "treble staff, ledger line 1 below"
    assert position_text(_n("B", 5)) == "treble staff, space past ledger line 1 above"
    assert position_text(_n("C", 2, Clef.BASS)) == "bass staff, ledger line 2 below"
