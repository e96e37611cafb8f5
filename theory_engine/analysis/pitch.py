"""Pitch extraction from FFT magnitude frames."""

from dataclasses import dataclass
from typing import List, Optional

import numpy as np
from scipy.signal import find_peaks

from ..core import Note, midi_to_name
from ..core.constants import (
    DEFAULT_SR,
    MAX_FREQUENCY,
    MIN_FREQUENCY,
    PEAK_COUNT,
)


@dataclass
class PitchConfig:
    """Configuration for spectral peak picking.

    Attributes:
        sample_rate: Sample rate of the analysed signal (default: 44100)
        peak_count: Strongest peaks kept per frame (default: 6)
        min_frequency: Lowest accepted peak frequency in Hz (default: 20)
        max_frequency: Highest accepted peak frequency in Hz (default: 4000)
    """

    sample_rate: int = DEFAULT_SR
    peak_count: int = PEAK_COUNT
    min_frequency: float = MIN_FREQUENCY
    max_frequency: float = MAX_FREQUENCY


class PitchExtractor:
    """Turn one spectral frame into candidate note names.

    Local maxima of the magnitude spectrum are ranked, the strongest few
    are converted to frequencies, and each frequency inside the audible
    band is snapped to the nearest equal-tempered semitone.
    """

    def __init__(self, config: Optional[PitchConfig] = None):
        self.config = config or PitchConfig()

    def extract(self, frame: np.ndarray, fft_size: Optional[int] = None) -> List[str]:
        """
        Extract note names from a magnitude frame.

        Args:
            frame: FFT magnitudes (linear or dB) indexed by bin
            fft_size: FFT size used for bin-to-frequency conversion
                      (defaults to the frame length)

        Returns:
            Up to peak_count note names with octave, strongest peak first.
            Duplicates are kept; an empty or flat frame yields [].
        """
        midi = self.extract_midi(frame, fft_size)
        return [midi_to_name(m) for m in midi]

    def extract_midi(self, frame: np.ndarray, fft_size: Optional[int] = None) -> List[int]:
        """Like extract, returning MIDI numbers."""
        magnitudes = np.asarray(frame, dtype=float).ravel()
        if magnitudes.size < 3:
            return []
        if fft_size is None:
            fft_size = magnitudes.size
        if fft_size <= 0:
            raise ValueError(f"fft_size must be positive, got {fft_size}")

        midi = []
        for bin_index in self.find_peaks(magnitudes):
            freq = self.bin_to_frequency(bin_index, fft_size)
            if freq < self.config.min_frequency or freq > self.config.max_frequency:
                continue
            midi.append(Note.freq_to_midi(freq))
        return midi

    def extract_pitch_classes(self, frame: np.ndarray, fft_size: Optional[int] = None) -> List[int]:
        """Distinct pitch classes in the frame, strongest first."""
        classes = []
        for m in self.extract_midi(frame, fft_size):
            if m % 12 not in classes:
                classes.append(m % 12)
        return classes

    def find_peaks(self, magnitudes: np.ndarray) -> List[int]:
        """
        Indices of the strongest strict local maxima.

        Interior bins only; flat-topped maxima are not peaks, equal
        magnitudes keep ascending bin order and non-finite values never
        count as peaks.
        """
        peaks, _ = find_peaks(magnitudes, plateau_size=(None, 1))
        peaks = peaks[np.isfinite(magnitudes[peaks])]
        if peaks.size == 0:
            return []

        order = np.argsort(-magnitudes[peaks], kind="stable")
        return [int(i) for i in peaks[order][:self.config.peak_count]]

    def bin_to_frequency(self, bin_index: int, fft_size: int) -> float:
        """Center frequency of an FFT bin."""
        return bin_index * self.config.sample_rate / fft_size
