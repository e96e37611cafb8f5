"""Command-line interface for the music-theory engine.

Provides commands for:
- chord: Parse chord symbols
- detect: Name the chord formed by a set of notes
- key: Detect the key of a progression
- suggest: Rank likely next chords
- bass: Generate a bass line (optionally as MIDI)
- listen: Run real-time chord detection against an audio file
"""

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from .core.constants import DEFAULT_FPS

app = typer.Typer(
    name="theory-engine",
    help="Chord, key, progression and bass-line intelligence",
    rich_markup_mode="markdown",
)
console = Console()


def _split_chords(text: str) -> List[str]:
    return [part.strip() for part in text.split(",") if part.strip()]


@app.command()
def chord(
    symbols: List[str] = typer.Argument(..., help="Chord symbols, e.g. Cmaj7 F#m7b5 C/E"),
    transpose: int = typer.Option(
        0, "--transpose", "-t", help="Also show each chord moved by this many semitones"
    ),
):
    """Parse chord symbols into roots, qualities and notes.

    Examples:
        theory-engine chord Cmaj7 Am7 D7
        theory-engine chord Bb Gm -t 2
    """
    from .inference import parse_chord, transpose_chord

    table = Table(title="Parsed Chords")
    table.add_column("Chord", style="cyan")
    table.add_column("Root", style="green")
    table.add_column("Quality", style="yellow")
    table.add_column("Notes", style="blue")
    table.add_column("Tension", style="magenta")
    if transpose:
        table.add_column(f"Transposed ({transpose:+d})", style="cyan")

    parsed_any = False
    for symbol in symbols:
        parsed = parse_chord(symbol)
        if parsed is None:
            console.print(f"[yellow]Warning: Cannot parse chord '{symbol}'[/yellow]")
            continue
        parsed_any = True
        row = [
            parsed.symbol,
            parsed.root_name,
            parsed.quality.value + ("" if parsed.known_suffix else " (guessed)"),
            " ".join(parsed.note_names),
            f"{parsed.tension:.2f}",
        ]
        if transpose:
            row.append(transpose_chord(symbol, transpose))
        table.add_row(*row)

    if not parsed_any:
        console.print("[red]Error: No valid chord symbols given[/red]")
        raise typer.Exit(1)

    console.print(table)


@app.command()
def detect(
    notes: List[str] = typer.Argument(..., help="Note names, e.g. C4 E4 G4 or A C E"),
    top: int = typer.Option(3, "--top", "-n", help="Number of ranked candidates to show"),
):
    """Name the chord formed by a set of notes."""
    from .inference import ChordMatcher

    matcher = ChordMatcher()
    name = matcher.detect_chord_from_notes(notes)
    if name is None:
        console.print(
            f"[red]Error: No chord found (need at least {matcher.config.min_notes} "
            f"distinct pitch classes that fit a chord)[/red]"
        )
        raise typer.Exit(1)

    console.print(f"\n[bold]Chord:[/bold] [cyan]{name}[/cyan]")

    table = Table(title="Candidates")
    table.add_column("Chord", style="cyan")
    table.add_column("Score", style="magenta")
    table.add_column("Missing", style="yellow")
    table.add_column("Extra", style="yellow")

    for candidate in matcher.rank_candidates(notes)[:top]:
        table.add_row(
            candidate.symbol,
            f"{candidate.score:.2f}",
            str(len(candidate.missing_intervals)),
            str(len(candidate.extra_intervals)),
        )

    console.print(table)


@app.command()
def key(
    chords: List[str] = typer.Argument(..., help="Chord progression, e.g. C G Am F"),
):
    """Detect the key of a chord progression."""
    from .inference import KeyDetector, parse_chord

    detector = KeyDetector()
    result = detector.detect_key(chords)
    if result is None:
        console.print("[red]Error: No chords given[/red]")
        raise typer.Exit(1)

    console.print(f"\n[bold]Key:[/bold] [cyan]{result.name}[/cyan] (score {result.score:g})")
    console.print(f"  Scale: {' '.join(result.scale)}")
    console.print(f"  Relative: {result.relative_key}")
    console.print(f"  Parallel: {result.parallel_key}")
    console.print(f"  Dominant: {result.dominant_key}")
    console.print(f"  Subdominant: {result.subdominant_key}")
    if result.alternatives:
        others = ", ".join(f"{c.name} ({c.score:g})" for c in result.alternatives)
        console.print(f"  Alternatives: {others}")

    table = Table(title="Progression")
    table.add_column("Chord", style="cyan")
    table.add_column("Roman", style="green")
    table.add_column("Function", style="yellow")

    for symbol in chords:
        parsed = parse_chord(symbol)
        if parsed is None:
            table.add_row(symbol, "?", "-")
            continue
        function = result.function_of(parsed)
        table.add_row(
            parsed.symbol,
            result.roman_numeral(parsed),
            function.value if function else "chromatic",
        )

    console.print(table)


@app.command()
def suggest(
    current: str = typer.Argument(..., help="Chord being played"),
    key_name: Optional[str] = typer.Option(
        None, "--key", "-k", help="Key, e.g. 'C', 'Am', 'F# minor' (detected if omitted)"
    ),
    history: str = typer.Option(
        "", "--history", help="Comma-separated chords played before, e.g. 'C,Am,F'"
    ),
):
    """Suggest the most likely next chords."""
    from .inference import ProgressionAdvisor, parse_chord, parse_key_name

    if parse_chord(current) is None:
        console.print(f"[red]Error: Cannot parse chord '{current}'[/red]")
        raise typer.Exit(1)

    if key_name is not None and parse_key_name(key_name) is None:
        console.print(f"[yellow]Warning: Unknown key '{key_name}', detecting from the progression[/yellow]")

    advisor = ProgressionAdvisor()
    suggestions = advisor.suggest_next_chords(current, key_name, _split_chords(history))

    table = Table(title=f"Next chords after {current}")
    table.add_column("Chord", style="cyan")
    table.add_column("Probability", style="magenta")
    table.add_column("Function", style="green")
    table.add_column("Reason", style="yellow")

    for suggestion in suggestions:
        table.add_row(
            suggestion.chord,
            f"{suggestion.probability:.2f}",
            suggestion.harmonic_function.value,
            suggestion.reason,
        )

    console.print(table)


@app.command()
def bass(
    chords: List[str] = typer.Argument(..., help="Chord progression, e.g. C Am F G"),
    style: str = typer.Option(
        "root", "--style", "-s",
        help="Bass style: root, alternating, walking, octave, arpeggio",
    ),
    midi: Optional[Path] = typer.Option(
        None, "--midi", "-o", help="Write the bass line to this MIDI file"
    ),
    tempo: float = typer.Option(120.0, "--tempo", help="Tempo in BPM for MIDI output"),
):
    """Generate a bass line for a chord progression.

    Examples:
        theory-engine bass C G Am F
        theory-engine bass Dm7 G7 Cmaj7 --style walking --midi bass.mid
    """
    from .inference import BassLineGenerator
    from .output import MIDIExporter

    try:
        line = BassLineGenerator().generate(chords, style)
    except ValueError:
        console.print(f"[red]Error: Unknown bass style '{style}'[/red]")
        raise typer.Exit(1)

    for index in line.skipped:
        console.print(f"[yellow]Warning: Skipped unreadable chord '{chords[index]}'[/yellow]")

    if not line.notes:
        console.print("[red]Error: No bass notes generated[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Bass Line ({line.style.value})")
    table.add_column("Chord", style="cyan")
    table.add_column("Note", style="green")
    table.add_column("Role", style="yellow")

    for note in line:
        table.add_row(chords[note.chord_index], note.name, note.role.value)

    console.print(table)

    if midi is not None:
        exporter = MIDIExporter(tempo=tempo)
        exporter.export(line, str(midi))
        console.print(f"[green]MIDI saved to:[/green] {midi}")


@app.command()
def listen(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    seconds: Optional[float] = typer.Option(
        None, "--seconds", help="Listen for this long (default: whole file)"
    ),
    fps: float = typer.Option(DEFAULT_FPS, "--fps", help="Detection ticks per second"),
):
    """Play an audio file through the real-time chord detector."""
    from .analysis import AudioLoader, FileFrameSource
    from .realtime import ListeningSession, SessionConfig

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    try:
        config = SessionConfig(fps=fps)
        loader = AudioLoader()
        audio, sr = loader.load(str(input_file))
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    duration = loader.get_duration(audio, sr)
    if seconds is None or seconds > duration:
        seconds = duration

    source = FileFrameSource(audio, sr=sr, fft_size=config.fft_size)
    session = ListeningSession(source, config=config)
    start = session.clock()
    session.on_detection(
        lambda sample: console.print(
            f"  {sample.timestamp - start:6.2f}s  [cyan]{sample.chord_name}[/cyan]"
            f"  ({' '.join(sample.notes)})"
        )
    )

    console.print(f"\n[bold blue]Listening: {input_file.name}[/bold blue] ({seconds:.2f}s at {fps:g} fps)\n")
    history = asyncio.run(session.run_for(seconds))

    if not history:
        console.print("[yellow]No chords detected[/yellow]")
        return

    table = Table(title="Recent Detections")
    table.add_column("Chord", style="cyan")
    table.add_column("Notes", style="green")
    table.add_column("Confidence", style="magenta")

    for sample in history:
        table.add_row(sample.chord_name, " ".join(sample.notes), f"{sample.confidence:.2f}")

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
