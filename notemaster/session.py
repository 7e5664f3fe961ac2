"""TrainerSession: drives challenges, validation, debouncing and statistics."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from notemaster.challenge_generator import ChallengeGenerator, get_octave_strategy
from notemaster.challenge_models import Challenge, PracticeMode, SingleChallenge
from notemaster.config import ADVANCE_DELAY, DEBOUNCE_WINDOW, NPM_SMOOTHING
from notemaster.errors import StaleAdvance
from notemaster.note_input import AnswerButton, Guess
from notemaster.pitch import Clef, Note, enharmonic_partner, midi_number
from notemaster.validator import (
    MultipleChoiceState,
    Outcome,
    ValidationProgress,
    submit_choice,
    submit_guess,
)

logger = logging.getLogger(__name__)

#: Input sources that name a note without an octave and may retry freely.
CHOICE_SOURCES = frozenset({"button", "keyboard"})


@dataclass
class TrainerSettings:
    practice_mode: PracticeMode = PracticeMode.SINGLE
    difficulty_level: int = 1
    clef_preference: Clef = Clef.TREBLE
    include_accidentals: bool = False

    def __post_init__(self) -> None:
        self.practice_mode = PracticeMode(self.practice_mode)
        self.clef_preference = Clef(self.clef_preference)
        get_octave_strategy(self.difficulty_level)


@dataclass
class SessionStats:
    """Raw counters for a stats display; nothing here is rendered."""

    seen: int = 0
    correct_first_try: int = 0
    attempts: int = 0
    streak: int = 0
    best_streak: int = 0
    notes_per_minute: float = 0.0
    last_correct_at: float | None = None

    @property
    def accuracy(self) -> float:
        """First-try accuracy in percent (0 before anything is seen)."""
        if self.seen == 0:
            return 0.0
        return 100.0 * self.correct_first_try / self.seen

    def record_miss(self) -> None:
        self.attempts += 1
        self.streak = 0

    def record_success(self, first_try: bool, now: float) -> None:
        self.attempts += 1
        self.seen += 1
        if first_try:
            self.correct_first_try += 1
        self.streak += 1
        self.best_streak = max(self.best_streak, self.streak)
        if self.last_correct_at is not None and now > self.last_correct_at:
            rate = 60.0 / (now - self.last_correct_at)
            if self.notes_per_minute == 0:
                self.notes_per_minute = rate
            else:
                self.notes_per_minute = (
                    self.notes_per_minute * NPM_SMOOTHING + rate * (1 - NPM_SMOOTHING)
                )
        self.last_correct_at = now


@dataclass(frozen=True)
class PendingAdvance:
    """A scheduled switch to the next challenge, tagged with its generation."""

    generation: int
    due_at: float


@dataclass(frozen=True)
class SubmitResult:
    outcome: Outcome
    failed_index: int | None = None
    first_try_correct: bool | None = None
    advance: PendingAdvance | None = None

    @property
    def completed(self) -> bool:
        return self.advance is not None


def debounce_allows(last_accepted_at: float | None, now: float, window: float = DEBOUNCE_WINDOW) -> bool:
    """False if ``now`` falls inside the window after the last accepted guess."""
    return last_accepted_at is None or now - last_accepted_at >= window


def describe_answer(note: Note) -> str:
    """Study-mode answer text, naming the enharmonic spelling when there is one."""
    name = f"{note.name.value}{note.accidental_glyph}"
    text = f"This note is {name} (octave {note.octave}, {note.clef.value.lower()} clef)."
    partner = enharmonic_partner(note.name, note.accidental)
    if partner is not None:
        other = Note(partner[0], partner[1], note.octave, note.clef)
        text += f" It shares the same pitch as {other.name.value}{other.accidental_glyph}."
    return text


class TrainerSession:
    """
    One practice session: the current challenge plus everything needed to
    judge guesses against it.

    Guesses are processed strictly one at a time. Single-note challenges
    answered by button or keyboard use multiple-choice validation (retry
    allowed, wrong choices remembered); sequences, grand-staff challenges and
    any MIDI input use ordered validation, restarting on a wrong note.

    A completed challenge schedules a PendingAdvance instead of switching
    immediately, so a display can show feedback. Guesses arriving while an
    advance is pending are ignored, and an advance whose generation no longer
    matches the current challenge raises StaleAdvance.

    Usage:

        session = TrainerSession(TrainerSettings(PracticeMode.MULTI))
        result = session.submit(Guess(NoteName.C, Accidental.NONE, 4), source="midi")
        if result is not None and result.completed:
            session.apply_advance(result.advance, now=result.advance.due_at)
    """

    def __init__(
        self,
        settings: TrainerSettings | None = None,
        generator: ChallengeGenerator | None = None,
        clock: Callable[[], float] = time.monotonic,
        advance_delay: float = ADVANCE_DELAY,
        debounce_window: float = DEBOUNCE_WINDOW,
    ) -> None:
        self.settings = settings if settings is not None else TrainerSettings()
        self.generator = generator if generator is not None else ChallengeGenerator()
        self.clock = clock
        self.advance_delay = advance_delay
        self.debounce_window = debounce_window
        self.stats = SessionStats()
        self.generation = 0
        self.last_accepted_at: float | None = None
        self.challenge: Challenge
        self.progress: ValidationProgress
        self.choice_state: MultipleChoiceState | None = None
        self.pending_advance: PendingAdvance | None = None
        self.last_failed_index: int | None = None
        self.revealed = False
        self._missed = False
        self.new_challenge()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _install(self, challenge: Challenge) -> None:
        self.generation += 1
        self.challenge = challenge
        self.progress = ValidationProgress.for_challenge(challenge)
        self.choice_state = (
            MultipleChoiceState(expected=challenge.note)
            if isinstance(challenge, SingleChallenge)
            else None
        )
        self.pending_advance = None
        self.last_failed_index = None
        self.revealed = False
        self._missed = False

    def _complete(self, now: float, first_try: bool) -> PendingAdvance:
        self.stats.record_success(first_try, now)
        self.pending_advance = PendingAdvance(self.generation, now + self.advance_delay)
        return self.pending_advance

    def _submit_choice(
        self, state: MultipleChoiceState, choice: Guess | AnswerButton, now: float
    ) -> SubmitResult | None:
        if state.is_disabled(choice):
            logger.debug("Ignoring disabled choice %s", choice)
            return None
        result = submit_choice(state, choice)
        self.choice_state = result.state
        if result.outcome is Outcome.MISMATCH:
            self.stats.record_miss()
            return SubmitResult(outcome=Outcome.MISMATCH, failed_index=0)
        self.last_accepted_at = now
        first_try = bool(result.first_try_correct)
        return SubmitResult(
            outcome=Outcome.COMPLETE,
            first_try_correct=first_try,
            advance=self._complete(now, first_try),
        )

    def _spelling_for(self, button: AnswerButton) -> Guess:
        """The button's spelling of the expected note, else its primary one."""
        expected = self.progress.expected_note
        if expected is not None and button.accepts(expected):
            return Guess(expected.name, expected.accidental)
        return button.as_guess()

    def _spelling_for_pitch(self, guess: Guess) -> Guess:
        """
        Respell a device guess as the expected note when both sound the same
        key, so a flat on the page can be played on a keyboard that reports
        sharps. Guesses without an octave are returned unchanged.
        """
        expected = self.progress.expected_note
        if expected is None or guess.octave is None:
            return guess
        played = Note(guess.name, guess.accidental, guess.octave, expected.clef)
        if midi_number(played) != midi_number(expected):
            return guess
        return Guess(expected.name, expected.accidental, expected.octave)

    def _submit_ordered(self, guess: Guess, now: float) -> SubmitResult:
        result = submit_guess(self.progress, guess)
        self.progress = result.progress
        if result.outcome is Outcome.MISMATCH:
            self._missed = True
            self.last_failed_index = result.failed_index
            self.stats.record_miss()
            return SubmitResult(outcome=Outcome.MISMATCH, failed_index=result.failed_index)

        self.last_accepted_at = now
        self.last_failed_index = None
        if result.outcome is Outcome.MATCH:
            return SubmitResult(outcome=Outcome.MATCH)
        first_try = not self._missed
        return SubmitResult(
            outcome=Outcome.COMPLETE,
            first_try_correct=first_try,
            advance=self._complete(now, first_try),
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def new_challenge(self) -> Challenge:
        """Generate and install a fresh challenge, discarding all progress."""
        challenge = self.generator.generate_challenge(
            self.settings.practice_mode,
            self.settings.difficulty_level,
            self.settings.clef_preference,
            self.settings.include_accidentals,
        )
        self._install(challenge)
        return challenge

    def install_challenge(self, challenge: Challenge) -> None:
        """Install a caller-built challenge (replays, tests)."""
        self._install(challenge)

    def submit(
        self,
        guess: Guess | AnswerButton,
        now: float | None = None,
        source: str = "button",
    ) -> SubmitResult | None:
        """
        Judge one guess against the current challenge.

        Args:
            guess:  A Guess, or an AnswerButton for on-screen choices.
            now:    Arrival time; defaults to the session clock.
            source: ``"button"``, ``"keyboard"`` or ``"midi"``.

        Returns:
            The SubmitResult, or None when the guess was ignored (advance
            pending, inside the debounce window, or a disabled choice).
        """
        now = self.clock() if now is None else now
        if self.pending_advance is not None:
            logger.debug("Ignoring %s while advance is pending", guess)
            return None
        if not debounce_allows(self.last_accepted_at, now, self.debounce_window):
            logger.debug("Skipping duplicate %s", guess)
            return None

        if self.choice_state is not None and source in CHOICE_SOURCES:
            return self._submit_choice(self.choice_state, guess, now)

        if isinstance(guess, AnswerButton):
            guess = self._spelling_for(guess)
        else:
            guess = self._spelling_for_pitch(guess)
        return self._submit_ordered(guess, now)

    def apply_advance(self, advance: PendingAdvance, now: float | None = None) -> bool:
        """
        Carry out a scheduled advance.

        Returns:
            True if a new challenge was installed, False if it is not due yet.

        Raises:
            StaleAdvance: If the advance belongs to a replaced challenge.
        """
        if advance.generation != self.generation or advance != self.pending_advance:
            raise StaleAdvance(advance.generation, self.generation)
        now = self.clock() if now is None else now
        if now < advance.due_at:
            return False
        self.new_challenge()
        return True

    def tick(self, now: float | None = None) -> bool:
        """Apply the pending advance if it is due; for polling drivers."""
        if self.pending_advance is None:
            return False
        return self.apply_advance(self.pending_advance, now)

    def reveal(self) -> str:
        """Study mode: show the answer for the current single-note challenge."""
        self.revealed = True
        return "  ".join(describe_answer(note) for note in self.progress.expected)

    def next_after_reveal(self) -> Challenge:
        """Study mode: count the revealed challenge as seen and move on."""
        if not self.revealed:
            raise ValueError("Nothing revealed yet.")
        self.stats.record_success(True, self.clock())
        return self.new_challenge()

    @property
    def played_flags(self) -> tuple[bool, ...]:
        return self.progress.played_flags
