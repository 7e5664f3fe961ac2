"""Pitch model: note values and their vertical position on a staff."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Final, Mapping

# ── Note vocabulary ──────────────────────────────────────────────────────────


class NoteName(str, Enum):
    """The seven natural letter names, in ascending staff order from C."""

    C = "C"
    D = "D"
    E = "E"
    F = "F"
    G = "G"
    A = "A"
    B = "B"


class Accidental(str, Enum):
    SHARP = "sharp"
    FLAT = "flat"
    NATURAL = "natural"
    NONE = "none"


class Clef(str, Enum):
    TREBLE = "TREBLE"
    BASS = "BASS"


NATURAL_NOTES: Final[tuple[NoteName, ...]] = tuple(NoteName)

#: Position of each letter relative to C within one octave (diatonic steps).
NOTE_STEP_MAP: Final[Mapping[NoteName, int]] = MappingProxyType(
    {name: index for index, name in enumerate(NATURAL_NOTES)}
)

#: Semitones above C for each natural letter.
NATURAL_SEMITONES: Final[Mapping[NoteName, int]] = MappingProxyType(
    {
        NoteName.C: 0,
        NoteName.D: 2,
        NoteName.E: 4,
        NoteName.F: 5,
        NoteName.G: 7,
        NoteName.A: 9,
        NoteName.B: 11,
    }
)

ACCIDENTAL_GLYPHS: Final[Mapping[Accidental, str]] = MappingProxyType(
    {
        Accidental.SHARP: "♯",
        Accidental.FLAT: "♭",
        Accidental.NATURAL: "♮",
        Accidental.NONE: "",
    }
)

_ACCIDENTAL_SUFFIX: Final[Mapping[Accidental, str]] = MappingProxyType(
    {
        Accidental.SHARP: "#",
        Accidental.FLAT: "b",
        Accidental.NATURAL: "",
        Accidental.NONE: "",
    }
)

_SEMITONE_SHIFT: Final[Mapping[Accidental, int]] = MappingProxyType(
    {
        Accidental.SHARP: 1,
        Accidental.FLAT: -1,
        Accidental.NATURAL: 0,
        Accidental.NONE: 0,
    }
)

STEPS_PER_OCTAVE = 7
SEMITONES_PER_OCTAVE = 12


@dataclass(frozen=True)
class Note:
    """
    A written note: letter, accidental, octave and the clef it is read in.

    Scientific pitch notation is used for octaves (middle C is C4).
    """

    name: NoteName
    accidental: Accidental
    octave: int
    clef: Clef

    @property
    def label(self) -> str:
        """Compact identifier, e.g. ``C#4`` or ``Bb2``."""
        return f"{self.name.value}{_ACCIDENTAL_SUFFIX[self.accidental]}{self.octave}"

    @property
    def accidental_glyph(self) -> str:
        return ACCIDENTAL_GLYPHS[self.accidental]

    def __str__(self) -> str:
        return f"{self.name.value}{self.accidental_glyph}{self.octave}"


@dataclass(frozen=True)
class ClefAnchor:
    """The note sitting on a clef's bottom staff line."""

    name: NoteName
    octave: int


#: Bottom staff line of each clef: E4 for treble, G2 for bass.
CLEF_ANCHORS: Final[Mapping[Clef, ClefAnchor]] = MappingProxyType(
    {
        Clef.TREBLE: ClefAnchor(NoteName.E, 4),
        Clef.BASS: ClefAnchor(NoteName.G, 2),
    }
)


# ── Step arithmetic ──────────────────────────────────────────────────────────


def step_index_of(note: Note | ClefAnchor | NoteName, octave: int | None = None) -> int:
    """
    Return the absolute diatonic step index of a note.

    ``octave * 7 + step(name)``, so C4 is 28 and E4 is 30. Accidentals are
    ignored: C♯4 and C4 share an index.

    Args:
        note:   A Note, a ClefAnchor, or a bare NoteName (then ``octave`` is
                required).
        octave: Octave for a bare NoteName.
    """
    if isinstance(note, (Note, ClefAnchor)):
        return note.octave * STEPS_PER_OCTAVE + NOTE_STEP_MAP[note.name]
    if octave is None:
        raise TypeError("octave is required when passing a bare NoteName")
    return octave * STEPS_PER_OCTAVE + NOTE_STEP_MAP[NoteName(note)]


def vertical_offset(note: Note, clef: Clef | None = None) -> int:
    """
    Diatonic steps from the clef's bottom line to the note (may be negative).

    Each step is one line-to-space move, i.e. half a line spacing. The clef
    defaults to the one the note is written in.
    """
    anchor = CLEF_ANCHORS[clef if clef is not None else note.clef]
    return step_index_of(note) - step_index_of(anchor)


def midi_number(note: Note) -> int:
    """Absolute MIDI pitch of a note (C4 = 60)."""
    return (
        (note.octave + 1) * SEMITONES_PER_OCTAVE
        + NATURAL_SEMITONES[note.name]
        + _SEMITONE_SHIFT[note.accidental]
    )


def enharmonic_partner(
    name: NoteName, accidental: Accidental
) -> tuple[NoteName, Accidental] | None:
    """
    Return the other spelling of a black-key note, e.g. C♯ → D♭.

    Returns None for unaltered notes and for spellings (E♯, F♭, B♯, C♭) that
    land on a white key.
    """
    index = NOTE_STEP_MAP[name]
    if accidental is Accidental.SHARP:
        if name in (NoteName.E, NoteName.B):
            return None
        return NATURAL_NOTES[index + 1], Accidental.FLAT
    if accidental is Accidental.FLAT:
        if name in (NoteName.C, NoteName.F):
            return None
        return NATURAL_NOTES[index - 1], Accidental.SHARP
    return None
