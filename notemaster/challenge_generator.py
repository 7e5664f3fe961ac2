"""ChallengeGenerator: samples random notes and assembles quiz challenges."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod

from notemaster.challenge_models import (
    Challenge,
    DualChallenge,
    PracticeMode,
    SequenceChallenge,
    SingleChallenge,
)
from notemaster.config import (
    ACCIDENTAL_PROBABILITY,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    PARALLEL_LENGTHS,
    PRIMARY_OCTAVE_PROBABILITY,
    SEQUENCE_LENGTHS,
)
from notemaster.pitch import NATURAL_NOTES, Accidental, Clef, Note

# ── Home octaves ─────────────────────────────────────────────────────────────
TREBLE_HOME_OCTAVE = 4  # C4-B4, around middle C
BASS_HOME_OCTAVE = 3  # C3-B3


# ── Abstract base ────────────────────────────────────────────────────────────

class OctaveStrategy(ABC):
    """
    Abstract Strategy for choosing the octave of a generated note.

    Each difficulty level widens the range away from the home octave of the
    clef while keeping most notes (80%) on familiar ground.
    """

    @abstractmethod
    def pick_octave(self, clef: Clef, rng: random.Random) -> int:
        """
        Return the octave for a note written in ``clef``.

        Args:
            clef: Staff the note will be read on.
            rng:  Random source; strategies hold no state of their own.
        """


# ── Concrete strategies ──────────────────────────────────────────────────────

class Level1Range(OctaveStrategy):
    """
    Level 1: a single octave per clef.

        Treble : C4-B4 only
        Bass   : C3-B3 only
    """

    def pick_octave(self, clef: Clef, rng: random.Random) -> int:
        return TREBLE_HOME_OCTAVE if clef is Clef.TREBLE else BASS_HOME_OCTAVE


class Level2Range(OctaveStrategy):
    """
    Level 2: two octaves, weighted 80/20 toward the home octave.

        Treble : 80% C4-B4, 20% C5-B5
        Bass   : 80% C3-B3, 20% C2-B2
    """

    def pick_octave(self, clef: Clef, rng: random.Random) -> int:
        home = rng.random() < PRIMARY_OCTAVE_PROBABILITY
        if clef is Clef.TREBLE:
            return TREBLE_HOME_OCTAVE if home else TREBLE_HOME_OCTAVE + 1
        return BASS_HOME_OCTAVE if home else BASS_HOME_OCTAVE - 1


class Level3Range(Level2Range):
    """
    Level 3: three treble octaves; bass keeps the Level 2 policy.

        Treble : 80% C4-B4, 10% C5-B5, 10% C6-B6
        Bass   : 80% C3-B3, 20% C2-B2
    """

    def pick_octave(self, clef: Clef, rng: random.Random) -> int:
        if clef is Clef.BASS:
            return super().pick_octave(clef, rng)
        if rng.random() < PRIMARY_OCTAVE_PROBABILITY:
            return TREBLE_HOME_OCTAVE
        return TREBLE_HOME_OCTAVE + 1 if rng.random() < 0.5 else TREBLE_HOME_OCTAVE + 2


_STRATEGIES: dict[int, OctaveStrategy] = {
    1: Level1Range(),
    2: Level2Range(),
    3: Level3Range(),
}


def get_octave_strategy(difficulty_level: int) -> OctaveStrategy:
    """Return the OctaveStrategy for a difficulty level (1-3)."""
    try:
        return _STRATEGIES[difficulty_level]
    except KeyError:
        raise ValueError(
            f"Difficulty level must be between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}, "
            f"got {difficulty_level!r}."
        ) from None


class ChallengeGenerator:
    """
    Produces random notes and challenges for a practice configuration.

    The generator keeps no history: every note is an independent sample, so
    repeats within a sequence or across challenges are allowed.

    Usage:

        generator = ChallengeGenerator(rng=random.Random(7))
        challenge = generator.generate_challenge(PracticeMode.MULTI, 2, Clef.BASS, True)
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        """
        Args:
            rng: Random source. Pass a seeded ``random.Random`` for repeatable
                 output; defaults to a fresh unseeded instance.
        """
        self.rng = rng if rng is not None else random.Random()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _pick_accidental(self, include_accidentals: bool) -> Accidental:
        if not include_accidentals:
            return Accidental.NONE
        if self.rng.random() >= ACCIDENTAL_PROBABILITY:
            return Accidental.NONE
        return Accidental.SHARP if self.rng.random() < 0.5 else Accidental.FLAT

    def _notes(
        self, count: int, clef: Clef, difficulty_level: int, include_accidentals: bool
    ) -> tuple[Note, ...]:
        return tuple(
            self.generate_random_note(clef, difficulty_level, include_accidentals)
            for _ in range(count)
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate_random_note(
        self, clef: Clef, difficulty_level: int = 1, include_accidentals: bool = False
    ) -> Note:
        """
        Sample one note for ``clef``.

        The letter is uniform over C-B. With accidentals enabled 30% of notes
        are altered, split evenly between sharp and flat; ``NATURAL`` is never
        produced. The octave comes from the difficulty level's strategy.
        """
        strategy = get_octave_strategy(difficulty_level)
        clef = Clef(clef)
        name = self.rng.choice(NATURAL_NOTES)
        accidental = self._pick_accidental(include_accidentals)
        octave = strategy.pick_octave(clef, self.rng)
        return Note(name=name, accidental=accidental, octave=octave, clef=clef)

    def generate_challenge(
        self,
        practice_mode: PracticeMode,
        difficulty_level: int = 1,
        clef_preference: Clef = Clef.TREBLE,
        include_accidentals: bool = False,
    ) -> Challenge:
        """
        Build one challenge for the practice mode.

        SINGLE and MULTI use ``clef_preference``; MUSICAL always produces a
        treble line and a bass line of equal length (2 or 3 each).

        Raises:
            ValueError: For an unknown practice mode or difficulty level.
        """
        get_octave_strategy(difficulty_level)
        mode = PracticeMode(practice_mode)
        clef_preference = Clef(clef_preference)

        if mode is PracticeMode.SINGLE:
            return SingleChallenge(
                self.generate_random_note(clef_preference, difficulty_level, include_accidentals)
            )

        if mode is PracticeMode.MULTI:
            count = self.rng.choice(SEQUENCE_LENGTHS)
            return SequenceChallenge(
                self._notes(count, clef_preference, difficulty_level, include_accidentals)
            )

        count = self.rng.choice(PARALLEL_LENGTHS)
        treble = self._notes(count, Clef.TREBLE, difficulty_level, include_accidentals)
        bass = self._notes(count, Clef.BASS, difficulty_level, include_accidentals)
        return DualChallenge(treble=treble, bass=bass)


_default_generator = ChallengeGenerator()


def generate_random_note(
    clef: Clef, difficulty_level: int = 1, include_accidentals: bool = False
) -> Note:
    """Sample one note using the module-level generator."""
    return _default_generator.generate_random_note(clef, difficulty_level, include_accidentals)


def generate_challenge(
    practice_mode: PracticeMode,
    difficulty_level: int = 1,
    clef_preference: Clef = Clef.TREBLE,
    include_accidentals: bool = False,
) -> Challenge:
    """Build one challenge using the module-level generator."""
    return _default_generator.generate_challenge(
        practice_mode, difficulty_level, clef_preference, include_accidentals
    )
