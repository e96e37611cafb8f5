"""MIDI export of generated bass lines."""

from pathlib import Path
from typing import List

import pretty_midi

from ..core import Note
from ..inference import BassLine


class MIDIExporter:
    """Render a bass line as one MIDI track, one beat per note."""

    def __init__(
        self,
        tempo: float = 120.0,
        instrument_name: str = "Electric Bass (finger)",
        instrument_program: int = 33,
        velocity: int = 90,
    ):
        """
        Initialize MIDIExporter.

        Args:
            tempo: Tempo in BPM
            instrument_name: MIDI instrument name
            instrument_program: MIDI program number (0-127)
            velocity: Velocity of every note (0-127)
        """
        if tempo <= 0:
            raise ValueError(f"tempo must be positive, got {tempo}")
        self.tempo = tempo
        self.instrument_name = instrument_name
        self.instrument_program = instrument_program
        self.velocity = velocity

    @property
    def beat_duration(self) -> float:
        """Seconds per beat."""
        return 60.0 / self.tempo

    def bass_line_to_notes(self, line: BassLine) -> List[Note]:
        """Lay the bass notes end to end, one beat each."""
        beat = self.beat_duration
        return [
            Note(
                pitch=bass_note.midi,
                onset=i * beat,
                offset=(i + 1) * beat,
                velocity=self.velocity,
                instrument=self.instrument_name,
            )
            for i, bass_note in enumerate(line)
        ]

    def to_pretty_midi(self, line: BassLine) -> pretty_midi.PrettyMIDI:
        """Convert a bass line to a PrettyMIDI object without saving."""
        midi = pretty_midi.PrettyMIDI(initial_tempo=self.tempo)

        instrument = pretty_midi.Instrument(
            program=self.instrument_program,
            name=self.instrument_name,
        )

        for note in self.bass_line_to_notes(line):
            instrument.notes.append(pretty_midi.Note(
                velocity=note.velocity,
                pitch=note.pitch,
                start=note.onset,
                end=note.offset,
            ))

        midi.instruments.append(instrument)
        return midi

    def export(self, line: BassLine, output_path: str) -> None:
        """
        Export a bass line to a MIDI file.

        Args:
            line: Generated bass line
            output_path: Path to output MIDI file
        """
        midi = self.to_pretty_midi(line)

        # Ensure output directory exists
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        midi.write(str(output_path))
