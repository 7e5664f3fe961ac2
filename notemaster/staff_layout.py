"""Staff layout engine: note-head coordinates and ledger lines for challenges."""

from __future__ import annotations

from typing import Sequence

from notemaster.challenge_models import (
    Challenge,
    DualChallenge,
    SequenceChallenge,
    SingleChallenge,
)
from notemaster.config import (
    FIRST_NOTE_OFFSET,
    GRAND_STAFF_GAP,
    LEDGER_TOLERANCE,
    LINE_SPACING,
    NOTE_SPACING,
    STAFF_START_X,
    STAFF_TOP,
)
from notemaster.errors import InvalidChallengeShape
from notemaster.layout_models import ChallengeLayout, NoteLayout, StaffLayout, StemDirection
from notemaster.pitch import Clef, Note, vertical_offset

STAFF_LINE_COUNT = 5


def _check_spacing(line_spacing: float) -> None:
    if line_spacing <= 0:
        raise ValueError(f"line_spacing must be positive, got {line_spacing!r}.")


def staff_lines(baseline: float, line_spacing: float = LINE_SPACING) -> tuple[float, ...]:
    """Y of the five staff lines, bottom line first."""
    return tuple(baseline - i * line_spacing for i in range(STAFF_LINE_COUNT))


def note_y(note: Note, baseline: float, line_spacing: float = LINE_SPACING) -> float:
    """
    Y of a note head.

    Each diatonic step above the clef's bottom line raises the note by half a
    line spacing; Y grows downward.
    """
    return baseline - vertical_offset(note) * (line_spacing / 2)


def ledger_lines_for(
    y: float,
    baseline: float,
    top_line: float,
    line_spacing: float = LINE_SPACING,
    tolerance: float | None = None,
) -> tuple[float, ...]:
    """
    Ledger line positions needed between the staff and a note head at ``y``.

    Lines are placed every ``line_spacing`` outward from the staff and stop at
    the last line the note head reaches (within ``tolerance``, which defaults
    to ``LEDGER_TOLERANCE`` scaled by ``line_spacing / LINE_SPACING``). A note
    in the space just outside the staff needs none; a note inside the staff
    never gets any.
    """
    if tolerance is None:
        tolerance = LEDGER_TOLERANCE * line_spacing / LINE_SPACING
    ledgers: list[float] = []
    if y > baseline + tolerance:
        k = 1
        while baseline + k * line_spacing <= y + tolerance:
            ledgers.append(baseline + k * line_spacing)
            k += 1
    elif y < top_line - tolerance:
        k = 1
        while top_line - k * line_spacing >= y - tolerance:
            ledgers.append(top_line - k * line_spacing)
            k += 1
    return tuple(ledgers)


def stem_direction_for(y: float, middle_line: float) -> StemDirection:
    """Notes below the middle line take an up stem, all others a down stem."""
    return StemDirection.UP if y > middle_line else StemDirection.DOWN


def note_x(column: int, staff_start_x: float = STAFF_START_X) -> float:
    """Horizontal position of the note in ``column``; shared by both staves."""
    return staff_start_x + FIRST_NOTE_OFFSET + column * NOTE_SPACING


def layout_staff(
    notes: Sequence[Note],
    clef: Clef,
    line_spacing: float = LINE_SPACING,
    staff_top: float = STAFF_TOP,
    sequence_indices: Sequence[int] | None = None,
) -> StaffLayout:
    """
    Lay out a row of notes on one staff.

    Args:
        notes:            Notes in left-to-right order; all must be in ``clef``.
        clef:             Clef of the staff.
        line_spacing:     Distance between adjacent staff lines.
        staff_top:        Y of the staff block; the bottom line sits two line
                          spacings below it.
        sequence_indices: Position of each note in the validation order.
                          Defaults to ``0..len(notes)-1``.

    Raises:
        InvalidChallengeShape: If a note is written in another clef.
        ValueError: If ``line_spacing`` is not positive.
    """
    _check_spacing(line_spacing)
    clef = Clef(clef)
    for note in notes:
        if note.clef is not clef:
            raise InvalidChallengeShape(f"{note.label} is a {note.clef.value} note, not {clef.value}.")
    if sequence_indices is None:
        sequence_indices = range(len(notes))

    baseline = staff_top + 2 * line_spacing
    lines = staff_lines(baseline, line_spacing)
    top_line = lines[-1]
    middle_line = lines[2]

    laid_out: list[NoteLayout] = []
    for column, (note, seq_index) in enumerate(zip(notes, sequence_indices)):
        y = note_y(note, baseline, line_spacing)
        laid_out.append(
            NoteLayout(
                x=note_x(column),
                y=y,
                ledger_lines=ledger_lines_for(y, baseline, top_line, line_spacing),
                stem_direction=stem_direction_for(y, middle_line),
                accidental_glyph=note.accidental_glyph,
                sequence_index=seq_index,
            )
        )

    return StaffLayout(clef=clef, baseline_y=baseline, lines=lines, notes=tuple(laid_out))


def layout_challenge(challenge: Challenge, line_spacing: float = LINE_SPACING) -> ChallengeLayout:
    """
    Compute drawable coordinates for every note of a challenge.

    Single and sequence challenges produce one staff. Dual challenges produce
    a grand staff: treble on top, bass ``GRAND_STAFF_GAP`` (scaled with the
    line spacing) below it, treble note *i* and bass note *i* in the same
    column. The result depends only on the arguments.

    Raises:
        InvalidChallengeShape: If ``challenge`` is not a known variant.
        ValueError: If ``line_spacing`` is not positive.
    """
    _check_spacing(line_spacing)
    scale = line_spacing / LINE_SPACING
    top = STAFF_TOP * scale

    if isinstance(challenge, SingleChallenge):
        staves = (layout_staff([challenge.note], challenge.note.clef, line_spacing, top),)
    elif isinstance(challenge, SequenceChallenge):
        staves = (layout_staff(challenge.notes, challenge.clef, line_spacing, top),)
    elif isinstance(challenge, DualChallenge):
        columns = range(len(challenge.treble))
        staves = (
            layout_staff(
                challenge.treble,
                Clef.TREBLE,
                line_spacing,
                top,
                sequence_indices=[2 * i for i in columns],
            ),
            layout_staff(
                challenge.bass,
                Clef.BASS,
                line_spacing,
                top + GRAND_STAFF_GAP * scale,
                sequence_indices=[2 * i + 1 for i in columns],
            ),
        )
    else:
        raise InvalidChallengeShape(f"Cannot lay out {challenge!r}: not a challenge.")

    return ChallengeLayout(staves=staves)
