"""Data models for staff layout outputs."""

from dataclasses import dataclass
from enum import Enum

from notemaster.pitch import Clef


class StemDirection(str, Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class NoteLayout:
    """Position of one note head, its ledger lines and its stem."""

    x: float
    y: float
    ledger_lines: tuple[float, ...]
    stem_direction: StemDirection
    accidental_glyph: str
    sequence_index: int


@dataclass(frozen=True)
class StaffLayout:
    """One five-line staff block; ``lines`` run bottom line to top line."""

    clef: Clef
    baseline_y: float
    lines: tuple[float, ...]
    notes: tuple[NoteLayout, ...]

    @property
    def top_line_y(self) -> float:
        return self.lines[-1]

    @property
    def middle_line_y(self) -> float:
        return self.lines[2]


@dataclass(frozen=True)
class ChallengeLayout:
    """Every staff needed to draw a challenge (one, or two for a grand staff)."""

    staves: tuple[StaffLayout, ...]
