"""Guess validation: ordered-sequence and multiple-choice disciplines."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from notemaster.challenge_models import Challenge, flatten_challenge
from notemaster.note_input import AnswerButton, Guess
from notemaster.pitch import Note


class Outcome(str, Enum):
    MATCH = "MATCH"  # correct; sequences still have notes to go
    MISMATCH = "MISMATCH"
    COMPLETE = "COMPLETE"  # correct, challenge finished


def notes_match(expected: Note, guess: Guess) -> bool:
    """
    True if ``guess`` names ``expected``.

    Name and accidental must be equal. The octave is compared only when the
    guess carries one, so button guesses match in any octave while device
    guesses must hit the exact pitch.
    """
    if guess.name is not expected.name or guess.accidental is not expected.accidental:
        return False
    return guess.octave is None or guess.octave == expected.octave


# ── Ordered sequence ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ValidationProgress:
    """
    Progress through the reading-order sequence of one challenge.

    Attributes:
        expected:      Notes to play, in order.
        current_index: Index of the next note expected.
        played_flags:  One flag per expected note; True once played in order.
    """

    expected: tuple[Note, ...]
    current_index: int = 0
    played_flags: tuple[bool, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "expected", tuple(self.expected))
        if not self.played_flags:
            object.__setattr__(self, "played_flags", (False,) * len(self.expected))
        if len(self.played_flags) != len(self.expected):
            raise ValueError("played_flags must have one entry per expected note.")
        if not 0 <= self.current_index <= len(self.expected):
            raise ValueError(f"current_index {self.current_index} out of range.")

    @classmethod
    def for_challenge(cls, challenge: Challenge) -> "ValidationProgress":
        """Fresh progress, awaiting the first note of the flattened challenge."""
        return cls(expected=flatten_challenge(challenge))

    @property
    def is_complete(self) -> bool:
        return self.current_index >= len(self.expected)

    @property
    def expected_note(self) -> Note | None:
        return None if self.is_complete else self.expected[self.current_index]

    def reset(self) -> "ValidationProgress":
        return ValidationProgress(expected=self.expected)


@dataclass(frozen=True)
class GuessResult:
    outcome: Outcome
    progress: ValidationProgress
    failed_index: int | None = None


def submit_guess(progress: ValidationProgress, guess: Guess) -> GuessResult:
    """
    Apply one guess to an ordered sequence.

    A match marks the note played and moves on (``COMPLETE`` on the last
    note). A mismatch reports the failing index and starts the sequence over
    with every flag cleared.

    Raises:
        ValueError: If the sequence is already complete.
    """
    if progress.is_complete:
        raise ValueError("Sequence already complete; install a new challenge first.")

    index = progress.current_index
    if not notes_match(progress.expected[index], guess):
        return GuessResult(outcome=Outcome.MISMATCH, progress=progress.reset(), failed_index=index)

    flags = list(progress.played_flags)
    flags[index] = True
    advanced = replace(progress, current_index=index + 1, played_flags=tuple(flags))
    outcome = Outcome.COMPLETE if advanced.is_complete else Outcome.MATCH
    return GuessResult(outcome=outcome, progress=advanced)


# ── Multiple choice ──────────────────────────────────────────────────────────

Choice = AnswerButton | Guess


def _choice_key(choice: Choice) -> str:
    if isinstance(choice, AnswerButton):
        return choice.id
    return f"{choice.name.value}-{choice.accidental.value}-{choice.octave}"


def _choice_correct(expected: Note, choice: Choice) -> bool:
    if isinstance(choice, AnswerButton):
        return choice.accepts(expected)
    return notes_match(expected, choice)


@dataclass(frozen=True)
class MultipleChoiceState:
    """
    A single-note quiz answered by picking among choices.

    Wrong choices are remembered so they can be disabled; retries are
    unlimited.
    """

    expected: Note
    wrong_choices: frozenset[str] = frozenset()
    solved: bool = False

    def is_disabled(self, choice: Choice) -> bool:
        return self.solved or _choice_key(choice) in self.wrong_choices

    @property
    def wrong_attempts(self) -> int:
        return len(self.wrong_choices)


@dataclass(frozen=True)
class ChoiceResult:
    outcome: Outcome
    state: MultipleChoiceState
    first_try_correct: bool | None = None


def submit_choice(state: MultipleChoiceState, choice: Choice) -> ChoiceResult:
    """
    Apply one choice to a multiple-choice quiz.

    A correct choice solves the quiz (``MATCH``); ``first_try_correct`` is
    True only when no wrong choice came before it. A wrong choice is recorded
    and the quiz stays open.

    Raises:
        ValueError: If the quiz is solved or the choice was already rejected.
    """
    if state.solved:
        raise ValueError("Question already answered.")
    key = _choice_key(choice)
    if key in state.wrong_choices:
        raise ValueError(f"Choice {key!r} was already rejected.")

    if _choice_correct(state.expected, choice):
        return ChoiceResult(
            outcome=Outcome.MATCH,
            state=replace(state, solved=True),
            first_try_correct=not state.wrong_choices,
        )
    return ChoiceResult(
        outcome=Outcome.MISMATCH,
        state=replace(state, wrong_choices=state.wrong_choices | {key}),
    )


# ── Stateful wrappers ────────────────────────────────────────────────────────

class SequenceValidator:
    """Holds the ValidationProgress of the current challenge."""

    def __init__(self, challenge: Challenge) -> None:
        self.progress = ValidationProgress.for_challenge(challenge)

    def submit(self, guess: Guess) -> GuessResult:
        result = submit_guess(self.progress, guess)
        self.progress = result.progress
        return result

    @property
    def is_complete(self) -> bool:
        return self.progress.is_complete


class MultipleChoiceValidator:
    """Holds the MultipleChoiceState of the current single-note challenge."""

    def __init__(self, expected: Note) -> None:
        self.state = MultipleChoiceState(expected=expected)

    def submit(self, choice: Choice) -> ChoiceResult:
        result = submit_choice(self.state, choice)
        self.state = result.state
        return result

    @property
    def is_complete(self) -> bool:
        return self.state.solved
