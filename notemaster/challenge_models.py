"""Data models for quiz challenges."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from notemaster.config import PARALLEL_LENGTHS, SEQUENCE_LENGTHS
from notemaster.errors import InvalidChallengeShape
from notemaster.pitch import Clef, Note


class PracticeMode(str, Enum):
    SINGLE = "SINGLE"  # one note at a time
    MULTI = "MULTI"  # 3-4 notes in sequence on one staff
    MUSICAL = "MUSICAL"  # treble + bass in parallel


def _check_notes(notes: tuple[Note, ...], variant: str) -> None:
    for note in notes:
        if not isinstance(note, Note):
            raise InvalidChallengeShape(f"{variant} expects Note values, got {note!r}.")


@dataclass(frozen=True)
class SingleChallenge:
    """One note to identify."""

    note: Note

    def __post_init__(self) -> None:
        _check_notes((self.note,), "SingleChallenge")

    @property
    def mode(self) -> PracticeMode:
        return PracticeMode.SINGLE

    def flatten(self) -> tuple[Note, ...]:
        return (self.note,)


@dataclass(frozen=True)
class SequenceChallenge:
    """An ordered run of notes read left to right on a single staff."""

    notes: tuple[Note, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "notes", tuple(self.notes))
        if len(self.notes) not in SEQUENCE_LENGTHS:
            raise InvalidChallengeShape(
                f"SequenceChallenge holds {SEQUENCE_LENGTHS[0]}-{SEQUENCE_LENGTHS[-1]} notes, "
                f"got {len(self.notes)}."
            )
        _check_notes(self.notes, "SequenceChallenge")
        clefs = {note.clef for note in self.notes}
        if len(clefs) > 1:
            raise InvalidChallengeShape("SequenceChallenge notes must share one clef.")

    @property
    def mode(self) -> PracticeMode:
        return PracticeMode.MULTI

    @property
    def clef(self) -> Clef:
        return self.notes[0].clef

    def flatten(self) -> tuple[Note, ...]:
        return self.notes


@dataclass(frozen=True)
class DualChallenge:
    """
    Parallel treble and bass lines on a grand staff.

    Treble note *i* sits above bass note *i*. For validation the two lines are
    read column by column: treble₀, bass₀, treble₁, bass₁, ...
    """

    treble: tuple[Note, ...]
    bass: tuple[Note, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "treble", tuple(self.treble))
        object.__setattr__(self, "bass", tuple(self.bass))
        if not self.treble or not self.bass:
            raise InvalidChallengeShape("DualChallenge needs notes on both staves.")
        if len(self.treble) != len(self.bass):
            raise InvalidChallengeShape(
                f"DualChallenge staves differ in length "
                f"({len(self.treble)} treble vs {len(self.bass)} bass)."
            )
        if len(self.treble) not in PARALLEL_LENGTHS:
            raise InvalidChallengeShape(
                f"DualChallenge holds {PARALLEL_LENGTHS[0]}-{PARALLEL_LENGTHS[-1]} notes per staff, "
                f"got {len(self.treble)}."
            )
        _check_notes(self.treble + self.bass, "DualChallenge")
        if any(note.clef is not Clef.TREBLE for note in self.treble):
            raise InvalidChallengeShape("DualChallenge treble line holds a non-treble note.")
        if any(note.clef is not Clef.BASS for note in self.bass):
            raise InvalidChallengeShape("DualChallenge bass line holds a non-bass note.")

    @property
    def mode(self) -> PracticeMode:
        return PracticeMode.MUSICAL

    def flatten(self) -> tuple[Note, ...]:
        interleaved: list[Note] = []
        for treble_note, bass_note in zip(self.treble, self.bass):
            interleaved.append(treble_note)
            interleaved.append(bass_note)
        return tuple(interleaved)


Challenge = SingleChallenge | SequenceChallenge | DualChallenge

CHALLENGE_TYPES = (SingleChallenge, SequenceChallenge, DualChallenge)


def flatten_challenge(challenge: Challenge) -> tuple[Note, ...]:
    """
    Return the reading-order note sequence a challenge is validated against.

    Raises:
        InvalidChallengeShape: If ``challenge`` is not one of the three variants.
    """
    if not isinstance(challenge, CHALLENGE_TYPES):
        raise InvalidChallengeShape(f"Not a challenge: {challenge!r}")
    return challenge.flatten()
