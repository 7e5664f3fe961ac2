"""Unit tests for ordered-sequence and multiple-choice validation."""

import pytest

from notemaster.challenge_models import DualChallenge, SequenceChallenge, SingleChallenge
from notemaster.note_input import ENHARMONIC_BUTTONS, NATURAL_BUTTONS, Guess
from notemaster.pitch import Accidental, Clef, Note, NoteName
from notemaster.validator import (
    MultipleChoiceState,
    MultipleChoiceValidator,
    Outcome,
    SequenceValidator,
    ValidationProgress,
    notes_match,
    submit_choice,
    submit_guess,
)

NONE = Accidental.NONE


def _n(name: str, octave: int, clef: Clef = Clef.TREBLE, accidental: Accidental = NONE) -> Note:
    return Note(NoteName(name), accidental, octave, clef)


def _g(name: str, octave=None, accidental: Accidental = NONE) -> Guess:
    return Guess(NoteName(name), accidental, octave)


def _ceg() -> ValidationProgress:
    return ValidationProgress.for_challenge(SequenceChallenge((_n("C", 4), _n("E", 4), _n("G", 4))))


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------

def test_match_without_octave_ignores_octave() -> None:
    assert notes_match(_n("C", 5), _g("C"))


def test_match_with_octave_checks_octave() -> None:
    assert notes_match(_n("C", 4), _g("C", 4))
    assert not notes_match(_n("C", 4), _g("C", 5))


def test_match_requires_same_accidental() -> None:
    assert not notes_match(_n("C", 4, accidental=Accidental.SHARP), _g("C", 4))
    assert not notes_match(_n("C", 4, accidental=Accidental.SHARP), _g("D", 4, Accidental.FLAT))


# ---------------------------------------------------------------------------
# Ordered sequence
# ---------------------------------------------------------------------------

def test_fresh_progress() -> None:
    progress = _ceg()
    assert progress.current_index == 0
    assert progress.played_flags == (False, False, False)
    assert progress.expected_note == _n("C", 4)


def test_in_order_sequence_completes() -> None:
    progress = _ceg()
    outcomes = []
    for guess in (_g("C", 4), _g("E", 4), _g("G", 4)):
        result = submit_guess(progress, guess)
        outcomes.append(result.outcome)
        progress = result.progress
    assert outcomes == [Outcome.MATCH, Outcome.MATCH, Outcome.COMPLETE]
    assert progress.is_complete
    assert progress.played_flags == (True, True, True)


def test_mismatch_resets_sequence() -> None:
    first = submit_guess(_ceg(), _g("C", 4))
    assert first.outcome is Outcome.MATCH
    assert first.progress.played_flags == (True, False, False)

    second = submit_guess(first.progress, _g("F", 4))
    assert second.outcome is Outcome.MISMATCH
    assert second.failed_index == 1
    assert second.progress.current_index == 0
    assert second.progress.played_flags == (False, False, False)


def test_wrong_octave_from_device_is_mismatch() -> None:
    result = submit_guess(_ceg(), _g("C", 5))
    assert result.outcome is Outcome.MISMATCH
    assert result.failed_index == 0


def test_progress_is_not_mutated() -> None:
    progress = _ceg()
    submit_guess(progress, _g("C", 4))
    assert progress.current_index == 0


def test_submit_after_complete_raises() -> None:
    progress = ValidationProgress.for_challenge(SingleChallenge(_n("A", 4)))
    done = submit_guess(progress, _g("A")).progress
    with pytest.raises(ValueError):
        submit_guess(done, _g("A"))


def test_dual_challenge_validated_interleaved() -> None:
    challenge = DualChallenge(
        treble=(_n("C", 4), _n("E", 4)),
        bass=(_n("G", 2, Clef.BASS), _n("B", 2, Clef.BASS)),
    )
    validator = SequenceValidator(challenge)
    assert validator.progress.expected == (
        _n("C", 4),
        _n("G", 2, Clef.BASS),
        _n("E", 4),
        _n("B", 2, Clef.BASS),
    )
    assert validator.submit(_g("C", 4)).outcome is Outcome.MATCH
    # playing the second treble note before the first bass note breaks the order
    result = validator.submit(_g("E", 4))
    assert result.outcome is Outcome.MISMATCH
    assert result.failed_index == 1
    for guess in (_g("C", 4), _g("G", 2), _g("E", 4)):
        assert validator.submit(guess).outcome is Outcome.MATCH
    assert validator.submit(_g("B", 2)).outcome is Outcome.COMPLETE
    assert validator.is_complete


def test_mismatched_flag_length_rejected() -> None:
    with pytest.raises(ValueError):
        ValidationProgress(expected=(_n("C", 4),), played_flags=(False, False))


# ---------------------------------------------------------------------------
# Multiple choice
# ---------------------------------------------------------------------------

def test_wrong_then_right_is_not_first_try() -> None:
    state = MultipleChoiceState(expected=_n("C", 4, accidental=Accidental.SHARP))
    wrong = submit_choice(state, _g("D", accidental=Accidental.NATURAL))
    assert wrong.outcome is Outcome.MISMATCH
    assert wrong.state.wrong_attempts == 1

    right = submit_choice(wrong.state, _g("C", accidental=Accidental.SHARP))
    assert right.outcome is Outcome.MATCH
    assert right.first_try_correct is False
    assert right.state.solved


def test_first_try_correct() -> None:
    result = submit_choice(MultipleChoiceState(expected=_n("G", 4)), NATURAL_BUTTONS[4])
    assert result.outcome is Outcome.MATCH
    assert result.first_try_correct is True


def test_wrong_choice_is_disabled() -> None:
    validator = MultipleChoiceValidator(_n("A", 4))
    c_button = NATURAL_BUTTONS[0]
    validator.submit(c_button)
    assert validator.state.is_disabled(c_button)
    assert not validator.state.is_disabled(NATURAL_BUTTONS[1])
    with pytest.raises(ValueError):
        validator.submit(c_button)


def test_enharmonic_button_accepts_either_spelling() -> None:
    cs_db = ENHARMONIC_BUTTONS[0]
    for expected in (_n("C", 4, accidental=Accidental.SHARP), _n("D", 4, accidental=Accidental.FLAT)):
        result = submit_choice(MultipleChoiceState(expected=expected), cs_db)
        assert result.outcome is Outcome.MATCH


def test_no_submissions_after_solved() -> None:
    validator = MultipleChoiceValidator(_n("B", 3, Clef.BASS))
    validator.submit(NATURAL_BUTTONS[6])
    assert validator.is_complete
    with pytest.raises(ValueError):
        validator.submit(NATURAL_BUTTONS[6])


def test_multiple_wrong_choices_are_all_remembered() -> None:
    state = MultipleChoiceState(expected=_n("F", 4))
    for button in NATURAL_BUTTONS[:3]:
        state = submit_choice(state, button).state
    assert state.wrong_choices == {"nat-C", "nat-D", "nat-E"}
