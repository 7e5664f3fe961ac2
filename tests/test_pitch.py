"""Unit tests for the pitch model: step arithmetic and clef-relative offsets."""

import pytest

from notemaster.pitch import (
    CLEF_ANCHORS,
    Accidental,
    Clef,
    Note,
    NoteName,
    enharmonic_partner,
    midi_number,
    step_index_of,
    vertical_offset,
)


def _note(name: str, octave: int, clef: Clef = Clef.TREBLE, accidental: Accidental = Accidental.NONE) -> Note:
    return Note(name=NoteName(name), accidental=accidental, octave=octave, clef=clef)


def test_step_index_middle_c() -> None:
    assert step_index_of(_note("C", 4)) == 28


def test_step_index_accepts_bare_name() -> None:
    assert step_index_of(NoteName.B, 3) == 27


def test_step_index_bare_name_needs_octave() -> None:
    with pytest.raises(TypeError):
        step_index_of(NoteName.B)


def test_treble_bottom_line_is_zero() -> None:
    assert vertical_offset(_note("E", 4)) == 0


def test_bass_bottom_line_is_zero() -> None:
    assert vertical_offset(_note("G", 2, Clef.BASS)) == 0


def test_middle_c_below_treble_staff() -> None:
    assert vertical_offset(_note("C", 4)) == -2


def test_top_lines() -> None:
    assert vertical_offset(_note("F", 5)) == 8
    assert vertical_offset(_note("A", 3, Clef.BASS)) == 8


def test_offset_is_clef_relative() -> None:
    note = _note("C", 4)
    assert vertical_offset(note, Clef.TREBLE) == -2
    assert vertical_offset(note, Clef.BASS) == 10


def test_accidental_does_not_move_note() -> None:
    for accidental in Accidental:
        assert vertical_offset(_note("G", 4, accidental=accidental)) == 4


def test_enharmonic_positions_follow_step_index() -> None:
    notes = [
        _note(name, octave, accidental=accidental)
        for name in "CDEFGAB"
        for octave in (3, 4, 5)
        for accidental in Accidental
    ]
    for a in notes:
        for b in notes:
            if step_index_of(a) == step_index_of(b):
                assert vertical_offset(a) == vertical_offset(b)


def test_clef_anchors_are_read_only() -> None:
    with pytest.raises(TypeError):
        CLEF_ANCHORS[Clef.TREBLE] = CLEF_ANCHORS[Clef.BASS]  # type: ignore[index]


def test_note_is_immutable_value() -> None:
    assert _note("D", 4) == _note("D", 4)
    with pytest.raises(AttributeError):
        _note("D", 4).octave = 5  # type: ignore[misc]


def test_note_label_and_str() -> None:
    assert _note("C", 4, accidental=Accidental.SHARP).label == "C#4"
    assert _note("B", 2, Clef.BASS, Accidental.FLAT).label == "Bb2"
    assert str(_note("F", 5, accidental=Accidental.SHARP)) == "F♯5"


def test_midi_number() -> None:
    assert midi_number(_note("C", 4)) == 60
    assert midi_number(_note("A", 4)) == 69
    assert midi_number(_note("C", 4, accidental=Accidental.SHARP)) == midi_number(
        _note("D", 4, accidental=Accidental.FLAT)
    )


def test_enharmonic_partner_pairs() -> None:
    assert enharmonic_partner(NoteName.C, Accidental.SHARP) == (NoteName.D, Accidental.FLAT)
    assert enharmonic_partner(NoteName.B, Accidental.FLAT) == (NoteName.A, Accidental.SHARP)


def test_enharmonic_partner_none_for_white_keys() -> None:
    assert enharmonic_partner(NoteName.E, Accidental.SHARP) is None
    assert enharmonic_partner(NoteName.C, Accidental.FLAT) is None
    assert enharmonic_partner(NoteName.G, Accidental.NONE) is None
