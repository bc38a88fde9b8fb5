"""fretchord CLI entry point."""

import json
import logging
import sys
from dataclasses import asdict

import click

from fretchord import __version__
from fretchord.chord_generator import generate_chord, parse_chord_name
from fretchord.fretboard import INSTRUMENT_TUNINGS, STANDARD_TUNING
from fretchord.music_theory import get_chord_notes
from fretchord.voicing_generator import VoicingCandidate
from fretchord.voicing_scorer import score_voicing

MAX_VOICINGS = 20


def _parse_frets(text: str, string_count: int) -> list[int | None]:
    """Parse tab notation (``x02210`` or ``x,10,12,12,11,10``) into a fret list.

    Raises:
        click.BadParameter: If a symbol is not ``x`` or a fret number, or the
            number of strings does not match the instrument.
    """
    symbols = text.split(",") if "," in text else list(text)
    frets: list[int | None] = []
    for symbol in (s.strip().lower() for s in symbols):
        if symbol == "x":
            frets.append(None)
        elif symbol.isdigit():
            frets.append(int(symbol))
        else:
            raise click.BadParameter(f"'{symbol}' is neither 'x' nor a fret number.")
    if len(frets) != string_count:
        raise click.BadParameter(f"Expected {string_count} strings, got {len(frets)}.")
    return frets


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="fretchord")
@click.option("--verbose", "-v", is_flag=True, help="Log the voicing search to stderr.")
def main(verbose: bool) -> None:
    """fretchord: chord diagrams for any chord name, no lookup table needed."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ── generate subcommand ────────────────────────────────────────────────────────

@main.command()
@click.argument("chord")
@click.option(
    "--voicings",
    "-n",
    type=click.IntRange(1, MAX_VOICINGS),
    default=5,
    show_default=True,
    help="Number of ranked fingerings to show.",
)
@click.option(
    "--instrument",
    type=click.Choice(sorted(INSTRUMENT_TUNINGS), case_sensitive=False),
    default=STANDARD_TUNING.name,
    show_default=True,
    help="Instrument tuning to voice the chord on.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
def generate(chord: str, voicings: int, instrument: str, as_json: bool) -> None:
    """
    Generate ranked fingerings for CHORD.

    \b
    Examples:
      fretchord generate Am
      fretchord generate Bb7sus4 -n 3
      fretchord generate Cmaj7 --json
    """
    tuning = INSTRUMENT_TUNINGS[instrument.lower()]
    definition = generate_chord(chord, voicings, tuning=tuning)
    if definition is None:
        click.echo(f"  ERROR: Could not generate a fingering for '{chord}'.", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(asdict(definition), indent=2))
        return

    click.echo(f"{definition.display}  ({definition.root} {definition.quality})")
    click.echo(f"  Notes : {' '.join(definition.notes)}")
    if definition.is_partial:
        click.echo(f"  Omits : {', '.join(definition.omitted_notes)}")
    click.echo()

    for rank, fingering in enumerate(definition.voicings, start=1):
        details = [fingering.name, fingering.difficulty]
        if fingering.base_fret is not None:
            details.append(f"base fret {fingering.base_fret}")
        for barre in fingering.barres or ():
            details.append(f"barre {barre.fret} ({barre.from_string}-{barre.to_string})")
        click.echo(f"  {rank}. {fingering.tab:<18} {' | '.join(details)}")


# ── notes subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("chord")
def notes(chord: str) -> None:
    """Print the chord tones of CHORD."""
    parsed = parse_chord_name(chord)
    if parsed is None:
        click.echo(f"  ERROR: '{chord}' is not a chord name.", err=True)
        sys.exit(1)

    chord_notes = get_chord_notes(parsed.root, parsed.quality)
    click.echo(f"{parsed.display}: root {parsed.root}, quality {parsed.quality}")
    click.echo(f"  {' '.join(chord_notes)}")


# ── score subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("frets")
@click.option("--chord", "-c", required=True, help="Chord the fingering is meant to play.")
def score(frets: str, chord: str) -> None:
    """
    Score a fingering written in tab notation (FRETS, low string first).

    \b
    Examples:
      fretchord score x02210 --chord Am
      fretchord score x,10,12,12,11,10 --chord Bm
    """
    parsed = parse_chord_name(chord)
    if parsed is None:
        click.echo(f"  ERROR: '{chord}' is not a chord name.", err=True)
        sys.exit(1)

    fret_list = _parse_frets(frets, STANDARD_TUNING.string_count)
    chord_notes = get_chord_notes(parsed.root, parsed.quality)
    candidate = VoicingCandidate.from_frets(fret_list, parsed.root)

    foreign = sorted(set(candidate.notes_played) - set(chord_notes))
    if foreign:
        click.echo(f"  WARNING: {', '.join(foreign)} not in {parsed.display}.", err=True)

    result = score_voicing(candidate, chord_notes)
    breakdown = asdict(result.breakdown)
    for name, points in breakdown.items():
        click.echo(f"  {name:<14}{points:>7g}")
    click.echo(f"  {'total':<14}{result.total:>7g}")
