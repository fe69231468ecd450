"""Command-line interface for MIDI Analyzer.

Provides commands for:
- analyze: Chord timeline and difficulty score for one or more MIDI files
- chord: Name the chord formed by a set of notes
- keys: List the keys available for chord detection
"""

import logging
from pathlib import Path
from typing import List

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .core.constants import DEFAULT_KEY
from .inference import DEFAULT_ROOT_TABLE, ResolutionPolicy, note_name

app = typer.Typer(
    name="midi-analyzer",
    help="MIDI Chord Detection and Difficulty Analysis",
    rich_markup_mode="markdown",
)
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _check_key(key: str) -> None:
    if key not in DEFAULT_ROOT_TABLE:
        console.print(f"[red]Error: Unknown key '{key}'. Run 'midi-analyzer keys' for the list.[/red]")
        raise typer.Exit(1)


@app.command()
def analyze(
    input_files: List[Path] = typer.Argument(..., help="One or more MIDI files"),
    key: str = typer.Option(
        DEFAULT_KEY, "-k", "--key", help="Key for chord detection, e.g. C, F#, Am"
    ),
    policy: ResolutionPolicy = typer.Option(
        ResolutionPolicy.FIRST_MATCH, "--policy", help="Chord resolution policy"
    ),
    show_timeline: bool = typer.Option(
        True, "--timeline/--no-timeline", help="Show the chord timeline"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose", help="Verbose output"
    ),
):
    """Score the difficulty of MIDI files and list their chord changes.

    **Examples:**

        midi-analyzer analyze song.mid

        midi-analyzer analyze a.mid b.mid --key Am --json
    """
    from .analysis import AnalysisResult, DifficultyScorer
    from .inference import ChordDetector
    from .input import MidiLoader, MidiDecodeError
    from .output import bulk_report

    _configure_logging(verbose)
    _check_key(key)

    for input_file in input_files:
        if not input_file.exists():
            console.print(f"[red]Error: File not found: {input_file}[/red]")
            raise typer.Exit(1)

    scorer = DifficultyScorer(detector=ChordDetector(key=key, policy=policy))
    loader = MidiLoader()

    results = {}
    for input_file in input_files:
        try:
            stream = loader.load(input_file)
        except MidiDecodeError as e:
            if not json_output:
                console.print(f"[yellow]Warning: {e}[/yellow]")
            results[input_file.name] = AnalysisResult.empty()
            continue
        results[input_file.name] = scorer.analyze_stream(stream)

    if json_output:
        console.print_json(data=bulk_report(results))
        return

    for name, result in results.items():
        console.print(f"\n[bold blue]Analysis for {name}[/bold blue] (key: {key})")
        _show_summary_table(result)
        if show_timeline:
            _show_timeline(result)


@app.command()
def chord(
    notes: List[str] = typer.Argument(..., help="Notes as MIDI numbers or names (60, C4, F#)"),
    key: str = typer.Option(
        DEFAULT_KEY, "-k", "--key", help="Key for chord detection, e.g. C, F#, Am"
    ),
    policy: ResolutionPolicy = typer.Option(
        ResolutionPolicy.FIRST_MATCH, "--policy", help="Chord resolution policy"
    ),
):
    """Name the chord formed by a set of notes.

    **Examples:**

        midi-analyzer chord C4 E4 G4

        midi-analyzer chord 57 60 64 --key Am
    """
    from .inference import ChordDetector, parse_note

    _check_key(key)

    try:
        midi_notes = [parse_note(token) for token in notes]
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    detector = ChordDetector(key=key, policy=policy)
    result = detector.detect(midi_notes)

    console.print(f"[green]{result.label}[/green]")
    if result.root is not None:
        console.print(f"  Root: {result.root}")
    console.print(f"  Notes: {', '.join(str(n) for n in sorted(result.source_notes))}")


@app.command()
def keys():
    """List the keys available for chord detection."""
    table = Table(title="Keys and Root Priority")
    table.add_column("Key", style="cyan")
    table.add_column("Root order", style="green")

    for key_name in DEFAULT_ROOT_TABLE.keys():
        order = DEFAULT_ROOT_TABLE.order(key_name)
        table.add_row(key_name, " ".join(note_name(pc) for pc in order))

    console.print(table)


def _show_summary_table(result):
    """Display difficulty subscores in a table."""
    table = Table(title="Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("Max Polyphony", str(result.max_polyphony))
    table.add_row("Note Count", str(result.note_count))
    table.add_row("Chord Difficulty", str(result.chord_difficulty))
    table.add_row("Rhythm Difficulty", str(result.rhythm_difficulty))
    table.add_row("Total Difficulty", str(result.total_difficulty))

    console.print(table)


def _show_timeline(result):
    """Display chord timeline in a table."""
    if not result.timeline:
        console.print("[yellow]No chords detected[/yellow]")
        return

    table = Table(title="Chord Timeline")
    table.add_column("Time (s)", style="yellow")
    table.add_column("Bar", style="green")
    table.add_column("Beat", style="green")
    table.add_column("Chord", style="cyan")

    for entry in result.timeline:
        table.add_row(
            f"{entry.seconds:.2f}",
            str(entry.bar),
            f"{entry.beat_in_bar:.2f}",
            entry.label,
        )

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
