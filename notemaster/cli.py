"""NoteMaster CLI entry point."""

import json
import logging
import random
import sys
from dataclasses import asdict
from typing import Iterable

import click

from notemaster import __version__
from notemaster.challenge_generator import ChallengeGenerator
from notemaster.challenge_models import Challenge, DualChallenge, PracticeMode, flatten_challenge
from notemaster.config import DEBOUNCE_WINDOW, LINE_SPACING, MAX_DIFFICULTY, MIN_DIFFICULTY
from notemaster.layout_models import ChallengeLayout
from notemaster.note_input import (
    KeyboardNoteSource,
    MidiNoteSource,
    NoteEvent,
)
from notemaster.pitch import Clef, Note, vertical_offset
from notemaster.session import TrainerSession, TrainerSettings
from notemaster.staff_layout import layout_challenge
from notemaster.validator import Outcome

QUIT_KEYS = {"q", "quit", "exit"}


def _make_generator(seed: int | None) -> ChallengeGenerator:
    return ChallengeGenerator(rng=random.Random(seed) if seed is not None else None)


def _settings(mode: str, level: int, clef: str, accidentals: bool) -> TrainerSettings:
    return TrainerSettings(
        practice_mode=PracticeMode(mode.upper()),
        difficulty_level=level,
        clef_preference=Clef(clef.upper()),
        include_accidentals=accidentals,
    )


def _challenge_text(challenge: Challenge) -> str:
    if isinstance(challenge, DualChallenge):
        treble = " ".join(note.label for note in challenge.treble)
        bass = " ".join(note.label for note in challenge.bass)
        return f"treble: {treble}  |  bass: {bass}"
    return " ".join(note.label for note in flatten_challenge(challenge))


def _layout_payload(layout: ChallengeLayout) -> dict:
    return asdict(layout)


def position_text(note: Note) -> str:
    """
    Describe where a note sits on its staff, counting lines and spaces from
    the bottom (``line 1`` is the bottom line, ``space 4`` the top space).
    """
    offset = vertical_offset(note)
    clef = note.clef.value.lower()
    if 0 <= offset <= 8:
        kind = "line" if offset % 2 == 0 else "space"
        return f"{clef} staff, {kind} {offset // 2 + 1}"
    if offset < 0:
        ledgers = (-offset) // 2
        where = "below"
    else:
        ledgers = (offset - 8) // 2
        where = "above"
    if ledgers == 0:
        return f"{clef} staff, space just {where} the staff"
    if offset % 2 == 0:
        return f"{clef} staff, ledger line {ledgers} {where}"
    return f"{clef} staff, space past ledger line {ledgers} {where}"


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="notemaster")
@click.option("--verbose", "-v", is_flag=True, help="Log dropped input events and debounce decisions.")
def main(verbose: bool) -> None:
    """NoteMaster — staff-reading flashcards for treble and bass clef."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def practice_options(func):
    """Options shared by every subcommand that builds challenges."""
    func = click.option(
        "--seed",
        type=int,
        default=None,
        help="Random seed for repeatable challenges.",
    )(func)
    func = click.option(
        "--accidentals/--no-accidentals",
        default=False,
        show_default=True,
        help="Include sharps and flats (30% of notes).",
    )(func)
    func = click.option(
        "--clef",
        type=click.Choice(["treble", "bass"], case_sensitive=False),
        default="treble",
        show_default=True,
        help="Staff to read (ignored in musical mode, which uses both).",
    )(func)
    func = click.option(
        "--level",
        type=click.IntRange(MIN_DIFFICULTY, MAX_DIFFICULTY),
        default=1,
        show_default=True,
        help=(
            "Difficulty level. 1: one octave per clef. "
            "2: two octaves (80/20). 3: three treble octaves (80/10/10)."
        ),
    )(func)
    func = click.option(
        "--mode",
        type=click.Choice(["single", "multi", "musical"], case_sensitive=False),
        default="single",
        show_default=True,
        help="single: 1 note. multi: 3-4 notes in sequence. musical: treble + bass in parallel.",
    )(func)
    return func


# ── generate subcommand ────────────────────────────────────────────────────────

@main.command()
@practice_options
@click.option("--count", "-n", type=click.IntRange(1, 1000), default=5, show_default=True)
def generate(mode: str, level: int, clef: str, accidentals: bool, seed: int | None, count: int) -> None:
    """
    Print randomly generated challenges.

    \b
    Examples:
      notemaster generate --mode multi --level 2
      notemaster generate --mode musical --accidentals -n 3 --seed 42
    """
    settings = _settings(mode, level, clef, accidentals)
    generator = _make_generator(seed)
    for index in range(1, count + 1):
        challenge = generator.generate_challenge(
            settings.practice_mode,
            settings.difficulty_level,
            settings.clef_preference,
            settings.include_accidentals,
        )
        click.echo(f"{index:3d}. {_challenge_text(challenge)}")


# ── layout subcommand ──────────────────────────────────────────────────────────

@main.command()
@practice_options
@click.option(
    "--spacing",
    type=click.FloatRange(min=0, min_open=True),
    default=LINE_SPACING,
    show_default=True,
    help="Distance between staff lines.",
)
def layout(
    mode: str, level: int, clef: str, accidentals: bool, seed: int | None, spacing: float
) -> None:
    """
    Generate one challenge and print its staff layout as JSON.

    The payload lists each staff's line positions and, per note, the head
    position, ledger lines, stem direction and accidental glyph.
    """
    settings = _settings(mode, level, clef, accidentals)
    generator = _make_generator(seed)
    challenge = generator.generate_challenge(
        settings.practice_mode,
        settings.difficulty_level,
        settings.clef_preference,
        settings.include_accidentals,
    )
    payload = {
        "challenge": _challenge_text(challenge),
        "layout": _layout_payload(layout_challenge(challenge, spacing)),
    }
    click.echo(json.dumps(payload, ensure_ascii=False, indent=2))


# ── drill subcommand ───────────────────────────────────────────────────────────

def _prompt_lines() -> Iterable[str]:
    while True:
        line = click.prompt("Your answer", default="", show_default=False)
        if line.strip().lower() in QUIT_KEYS:
            return
        yield from line.split() or [""]


def _show_challenge(session: TrainerSession, number: int) -> None:
    click.echo()
    click.echo(f"Challenge {number}:")
    for note in session.progress.expected:
        line = f"  • {position_text(note)}"
        if note.accidental_glyph:
            line += f"  {note.accidental_glyph}"
        click.echo(line)


def _run_drill(session: TrainerSession, events: Iterable[NoteEvent], rounds: int) -> None:
    number = 1
    _show_challenge(session, number)
    for event in events:
        guess = event.guess
        result = session.submit(event.answer, now=event.timestamp, source=event.source)
        if result is None:
            continue

        if result.outcome is Outcome.MISMATCH:
            click.echo(f"  ✗ {guess} is not right (note {(result.failed_index or 0) + 1}). Try again.")
            continue
        if result.outcome is Outcome.MATCH:
            click.echo(f"  ✓ {guess}")
            continue

        first = "first try" if result.first_try_correct else "after retries"
        click.echo(f"  ✓ Correct! ({first})  streak {session.stats.streak}")
        if number >= rounds:
            return
        session.apply_advance(result.advance, now=result.advance.due_at)
        number += 1
        _show_challenge(session, number)


@main.command()
@practice_options
@click.option("--rounds", "-n", type=click.IntRange(1, 500), default=10, show_default=True)
@click.option(
    "--midi",
    "midi_port",
    default=None,
    metavar="PORT",
    help="Answer on a MIDI keyboard (substring of the port name; 'any' for the first port).",
)
def drill(
    mode: str,
    level: int,
    clef: str,
    accidentals: bool,
    seed: int | None,
    rounds: int,
    midi_port: str | None,
) -> None:
    """
    Interactive flashcard drill in the terminal.

    Type note letters (a-g) and, with --accidentals, 1-5 for the black keys
    (1 = C♯/D♭ … 5 = A♯/B♭). Several answers may go on one line. With --midi,
    play the notes at the written octave instead. Type q to stop.
    """
    settings = _settings(mode, level, clef, accidentals)
    # typed answers never arrive as duplicate note-ons
    session = TrainerSession(
        settings,
        generator=_make_generator(seed),
        debounce_window=DEBOUNCE_WINDOW if midi_port is not None else 0.0,
    )

    click.echo(f"notemaster v{__version__}")
    click.echo(f"  Mode   : {settings.practice_mode.value.lower()}  |  Level: {level}")
    if settings.practice_mode is not PracticeMode.MUSICAL:
        click.echo(f"  Clef   : {settings.clef_preference.value.lower()}")

    try:
        if midi_port is not None:
            preferred = None if midi_port.lower() == "any" else midi_port
            with MidiNoteSource(preferred) as source:
                _run_drill(session, source, rounds)
        else:
            source = KeyboardNoteSource(_prompt_lines(), include_accidentals=accidentals)
            _run_drill(session, source, rounds)
    except OSError as exc:
        click.echo(f"  ERROR: {exc}", err=True)
        sys.exit(1)
    except (KeyboardInterrupt, click.Abort):
        click.echo()

    stats = session.stats
    click.echo()
    click.echo(
        f"Done!  Seen: {stats.seen}  |  First-try accuracy: {stats.accuracy:.0f}%  |  "
        f"Best streak: {stats.best_streak}"
    )
