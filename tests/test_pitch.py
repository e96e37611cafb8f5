"""Tests for spectral pitch extraction and frame sources."""

import numpy as np
import pytest
from pathlib import Path
import sys

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from theory_engine.analysis import (
    FileFrameSource,
    PitchConfig,
    PitchExtractor,
    SpectrumBuffer,
    magnitude_frame,
)
from theory_engine.inference import ChordMatcher

FFT_SIZE = 8192
SR = 44100


def make_frame(peaks, size=FFT_SIZE // 2):
    """Magnitude frame with isolated peaks at the given bins."""
    frame = np.zeros(size)
    for bin_index, magnitude in peaks.items():
        frame[bin_index] = magnitude
    return frame


def sine(freq, n, sr=SR):
    t = np.arange(n) / sr
    return np.sin(2 * np.pi * freq * t)


# ============================================================================
# PitchExtractor Tests
# ============================================================================

class TestPitchExtractor:
    """Tests for PitchExtractor."""

    def test_single_peak_a4(self):
        """Bin 82 of an 8192-point FFT is 441.4 Hz."""
        frame = make_frame({82: 1.0})
        assert PitchExtractor().extract(frame, FFT_SIZE) == ["A4"]

    def test_fft_size_defaults_to_frame_length(self):
        """Bin 41 of a 4096-bin frame read as a 4096-point FFT is 441.4 Hz."""
        frame = make_frame({41: 1.0})
        assert PitchExtractor().extract(frame) == ["A4"]

    def test_c_major_frame(self):
        frame = make_frame({49: 1.0, 61: 0.9, 73: 0.8})
        notes = PitchExtractor().extract(frame, FFT_SIZE)

        assert notes == ["C4", "E4", "G4"]
        assert ChordMatcher().detect_chord_from_notes(notes) == "C"

    def test_strongest_first(self):
        frame = make_frame({49: 0.2, 82: 1.0})
        assert PitchExtractor().extract(frame, FFT_SIZE) == ["A4", "C4"]

    def test_ties_keep_lower_bin_first(self):
        frame = make_frame({82: 1.0, 49: 1.0})
        assert PitchExtractor().extract(frame, FFT_SIZE) == ["C4", "A4"]

    def test_at_most_six_peaks(self):
        bins = [49, 61, 73, 82, 98, 110, 130, 150]
        frame = make_frame({b: 1.0 + i for i, b in enumerate(bins)})
        notes = PitchExtractor().extract(frame, FFT_SIZE)

        assert len(notes) == 6
        midi = PitchExtractor().extract_midi(frame, FFT_SIZE)
        assert midi == sorted(midi, reverse=True)

    def test_duplicates_allowed(self):
        """Adjacent-bin peaks can land on the same semitone."""
        frame = make_frame({82: 1.0, 84: 0.5})
        assert PitchExtractor().extract(frame, FFT_SIZE) == ["A4", "A4"]

    def test_out_of_band_peaks_dropped(self):
        frame = make_frame({2: 5.0, 1000: 5.0, 82: 1.0})
        assert PitchExtractor().extract(frame, FFT_SIZE) == ["A4"]

    def test_custom_band(self):
        extractor = PitchExtractor(PitchConfig(max_frequency=300.0))
        frame = make_frame({49: 1.0, 82: 1.0})
        assert extractor.extract(frame, FFT_SIZE) == ["C4"]

    def test_degenerate_frames(self):
        extractor = PitchExtractor()
        assert extractor.extract(np.array([])) == []
        assert extractor.extract(np.zeros(4096)) == []
        assert extractor.extract(np.ones(4096)) == []
        assert extractor.extract(np.full(4096, np.nan)) == []

    def test_flat_top_is_not_a_peak(self):
        frame = make_frame({82: 1.0, 83: 1.0, 49: 0.5})
        assert PitchExtractor().extract(frame, FFT_SIZE) == ["C4"]

    def test_non_finite_values_ignored(self):
        frame = make_frame({82: 1.0})
        frame[200] = np.inf
        frame[300] = np.nan
        assert PitchExtractor().extract(frame, FFT_SIZE) == ["A4"]

    def test_invalid_fft_size(self):
        with pytest.raises(ValueError):
            PitchExtractor().extract(make_frame({82: 1.0}), 0)

    def test_pitch_classes(self):
        frame = make_frame({82: 1.0, 164: 0.5, 49: 0.4})
        assert PitchExtractor().extract_pitch_classes(frame, FFT_SIZE) == [9, 0]


# ============================================================================
# Frame Source Tests
# ============================================================================

class TestMagnitudeFrame:
    """Tests for magnitude_frame."""

    def test_length_and_peak(self):
        freq = 50 * SR / 1024
        frame = magnitude_frame(sine(freq, 1024), 1024)

        assert len(frame) == 512
        assert int(np.argmax(frame)) == 50

    def test_short_block_is_padded(self):
        frame = magnitude_frame(np.ones(10), 1024)
        assert len(frame) == 512


class TestSpectrumBuffer:
    """Tests for SpectrumBuffer."""

    def test_empty(self):
        assert SpectrumBuffer(1024).latest_frame() is None

    def test_push_samples(self):
        buffer = SpectrumBuffer(1024)
        buffer.push_samples(sine(50 * SR / 1024, 1024))

        frame = buffer.latest_frame()
        assert len(frame) == 512
        assert int(np.argmax(frame)) == 50

    def test_push_samples_keeps_tail(self):
        buffer = SpectrumBuffer(1024)
        signal = sine(50 * SR / 1024, 1024)
        buffer.push_samples(signal[:512])
        buffer.push_samples(signal[512:])

        np.testing.assert_allclose(buffer.latest_frame(), magnitude_frame(signal, 1024))

    def test_push_frame(self):
        buffer = SpectrumBuffer()
        frame = make_frame({82: 1.0})
        buffer.push_frame(frame)
        np.testing.assert_array_equal(buffer.latest_frame(), frame)

    def test_clear(self):
        buffer = SpectrumBuffer()
        buffer.push_frame(make_frame({82: 1.0}))
        buffer.clear()
        assert buffer.latest_frame() is None

    def test_fft_size_must_be_power_of_two(self):
        with pytest.raises(ValueError):
            SpectrumBuffer(1000)
        with pytest.raises(ValueError):
            SpectrumBuffer(0)


class TestFileFrameSource:
    """Tests for FileFrameSource with a fake clock."""

    def test_playback_follows_clock(self):
        now = [10.0]
        audio = sine(50 * SR / 1024, SR)
        source = FileFrameSource(audio, sr=SR, fft_size=1024, clock=lambda: now[0])

        assert source.latest_frame() is None  # Playback just started

        now[0] = 10.5
        frame = source.latest_frame()
        assert len(frame) == 512
        assert int(np.argmax(frame)) == 50
        assert not source.finished()

        now[0] = 11.5
        assert source.latest_frame() is None
        assert source.finished()

    def test_duration(self):
        source = FileFrameSource(np.zeros(SR // 2), sr=SR)
        assert source.duration == pytest.approx(0.5)
