"""Input adapters: turn button presses, keys and MIDI note-ons into guesses."""

from __future__ import annotations

import logging
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, NamedTuple

from notemaster.errors import MalformedNoteIdentifier
from notemaster.pitch import (
    ACCIDENTAL_GLYPHS,
    NATURAL_NOTES,
    SEMITONES_PER_OCTAVE,
    Accidental,
    Note,
    NoteName,
)

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^([A-G])(#|b)?(\d+)$")

_SHARP_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]


class Guess(NamedTuple):
    """
    A learner's answer in source-neutral form.

    ``octave`` is None for sources that only name the note (buttons, letter
    keys); such guesses are not checked against the octave.
    """

    name: NoteName
    accidental: Accidental
    octave: int | None = None

    def __str__(self) -> str:
        octave = "" if self.octave is None else str(self.octave)
        return f"{self.name.value}{ACCIDENTAL_GLYPHS[self.accidental]}{octave}"


# ── Vendor identifiers ───────────────────────────────────────────────────────

def parse_note_identifier(identifier: str) -> Guess:
    """
    Decompose a device note identifier like ``C4``, ``F#5`` or ``Bb2``.

    Raises:
        MalformedNoteIdentifier: If the string is not letter + optional
            ``#``/``b`` + octave digits.
    """
    if not isinstance(identifier, str):
        raise MalformedNoteIdentifier(f"Invalid note name: {identifier!r}")
    match = _IDENTIFIER_RE.match(identifier)
    if not match:
        raise MalformedNoteIdentifier(f"Invalid note name: {identifier!r}")
    letter, marker, octave_str = match.groups()
    if marker == "#":
        accidental = Accidental.SHARP
    elif marker == "b":
        accidental = Accidental.FLAT
    else:
        accidental = Accidental.NONE
    return Guess(NoteName(letter), accidental, int(octave_str))


def midi_to_identifier(midi_note: int) -> str:
    """
    Name a MIDI note number with sharp spelling (60 → ``C4``, 61 → ``C#4``).

    Raises:
        MalformedNoteIdentifier: If the number is outside 0-127.
    """
    if not isinstance(midi_note, int) or not 0 <= midi_note <= 127:
        raise MalformedNoteIdentifier(f"MIDI note out of range: {midi_note!r}")
    octave = midi_note // SEMITONES_PER_OCTAVE - 1
    return f"{_SHARP_NAMES[midi_note % SEMITONES_PER_OCTAVE]}{octave}"


# ── Answer buttons ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AnswerButton:
    """One on-screen answer choice; enharmonic buttons accept two spellings."""

    id: str
    label: str
    matches: tuple[tuple[NoteName, Accidental], ...]
    shortcut: str | None = None

    def accepts(self, note: Note) -> bool:
        return any(name is note.name and acc is note.accidental for name, acc in self.matches)

    def as_guess(self) -> Guess:
        """The button's primary spelling, without octave."""
        name, accidental = self.matches[0]
        return Guess(name, accidental)


NATURAL_BUTTONS: tuple[AnswerButton, ...] = tuple(
    AnswerButton(
        id=f"nat-{name.value}",
        label=name.value,
        matches=((name, Accidental.NONE),),
        shortcut=name.value.lower(),
    )
    for name in NATURAL_NOTES
)

ENHARMONIC_BUTTONS: tuple[AnswerButton, ...] = tuple(
    AnswerButton(
        id=f"{sharp.value.lower()}s-{flat.value.lower()}b",
        label=f"{sharp.value}♯ / {flat.value}♭",
        matches=((sharp, Accidental.SHARP), (flat, Accidental.FLAT)),
        shortcut=str(number),
    )
    for number, (sharp, flat) in enumerate(
        [
            (NoteName.C, NoteName.D),
            (NoteName.D, NoteName.E),
            (NoteName.F, NoteName.G),
            (NoteName.G, NoteName.A),
            (NoteName.A, NoteName.B),
        ],
        start=1,
    )
)


def answer_buttons(include_accidentals: bool) -> tuple[AnswerButton, ...]:
    """Buttons shown for a single-note quiz."""
    if include_accidentals:
        return NATURAL_BUTTONS + ENHARMONIC_BUTTONS
    return NATURAL_BUTTONS


def button_for_key(key: str, include_accidentals: bool) -> AnswerButton | None:
    """
    Map a keyboard shortcut to its answer button.

    Letters ``a``-``g`` select naturals; digits ``1``-``5`` select the
    enharmonic pairs, only when accidentals are enabled.
    """
    key = key.strip().lower()
    for button in answer_buttons(include_accidentals):
        if button.shortcut == key:
            return button
    return None


def guess_from_key(key: str, include_accidentals: bool) -> Guess | None:
    """Keyboard shortcut → guess, or None for keys with no meaning."""
    button = button_for_key(key, include_accidentals)
    return button.as_guess() if button is not None else None


# ── Input sources ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class NoteEvent:
    """A normalised guess with the time it arrived."""

    guess: Guess
    timestamp: float
    velocity: int = 0
    source: str = "button"
    button: AnswerButton | None = None

    @property
    def answer(self) -> "AnswerButton | Guess":
        """The button pressed when there was one, else the bare guess."""
        return self.button if self.button is not None else self.guess


class NoteInputSource(ABC):
    """
    Abstract producer of guesses.

    Concrete sources hide where the guess came from (device, keyboard,
    replay file) and yield NoteEvents in arrival order.
    """

    @abstractmethod
    def events(self) -> Iterator[NoteEvent]:
        """Yield note events until the source is exhausted or closed."""

    def __iter__(self) -> Iterator[NoteEvent]:
        return self.events()


class KeyboardNoteSource(NoteInputSource):
    """Reads shortcut keys from an iterable of strings (e.g. terminal lines)."""

    def __init__(
        self,
        keys: Iterable[str],
        include_accidentals: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.keys = keys
        self.include_accidentals = include_accidentals
        self.clock = clock

    def events(self) -> Iterator[NoteEvent]:
        for key in self.keys:
            button = button_for_key(key, self.include_accidentals)
            if button is None:
                logger.debug("Ignoring key %r", key)
                continue
            yield NoteEvent(
                guess=button.as_guess(),
                timestamp=self.clock(),
                source="keyboard",
                button=button,
            )


def pick_port(preferred: str | None = None) -> str | None:
    """Return the first MIDI input port containing ``preferred``, else the first port."""
    import mido

    ports = mido.get_input_names()
    if not ports:
        return None
    if preferred:
        for name in ports:
            if preferred.lower() in name.lower():
                return name
    return ports[0]


def guess_from_midi(midi_note: int) -> Guess:
    """
    Convert a MIDI note number to an absolute-pitch guess.

    Raises:
        MalformedNoteIdentifier: If the number cannot be named.
    """
    return parse_note_identifier(midi_to_identifier(midi_note))


def events_from_messages(
    messages: Iterable[object], clock: Callable[[], float] = time.monotonic
) -> Iterator[NoteEvent]:
    """
    Filter an iterable of ``mido`` messages down to note-on guesses.

    Note-on with velocity 0 is a note-off and is skipped. Notes that cannot be
    named are logged and dropped.
    """
    for msg in messages:
        if getattr(msg, "type", None) != "note_on" or getattr(msg, "velocity", 0) <= 0:
            continue
        try:
            guess = guess_from_midi(msg.note)  # type: ignore[attr-defined]
        except MalformedNoteIdentifier as exc:
            logger.warning("Dropping MIDI event: %s", exc)
            continue
        yield NoteEvent(guess=guess, timestamp=clock(), velocity=msg.velocity, source="midi")  # type: ignore[attr-defined]


class MidiNoteSource(NoteInputSource):
    """
    Note-on events from a MIDI keyboard via ``mido``.

    Usage as a context manager closes the port:

        with MidiNoteSource("yamaha") as source:
            for event in source:
                ...
    """

    def __init__(self, port_name: str | None = None, clock: Callable[[], float] = time.monotonic) -> None:
        """
        Args:
            port_name: Substring of the input port to open; the first port is
                       used when None or when nothing matches.
            clock:     Timestamp source for events.
        """
        self.port_name = port_name
        self.clock = clock
        self._port = None

    def open(self) -> str:
        """
        Open the input port and return its full name.

        Raises:
            OSError: If no MIDI input port is available.
        """
        import mido

        name = pick_port(self.port_name)
        if name is None:
            raise OSError("No MIDI input ports found. Connect a keyboard or enable a virtual port.")
        self._port = mido.open_input(name)
        logger.info("Opened MIDI input %s", name)
        return name

    def close(self) -> None:
        if self._port is not None:
            self._port.close()
            self._port = None

    def events(self) -> Iterator[NoteEvent]:
        if self._port is None:
            self.open()
        yield from events_from_messages(self._port, self.clock)

    def __enter__(self) -> "MidiNoteSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
