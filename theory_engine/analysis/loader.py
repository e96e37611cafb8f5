"""Audio file loading for offline listening sessions."""

from pathlib import Path
from typing import Tuple

import librosa
import numpy as np

from ..core.constants import DEFAULT_SR


class AudioLoader:
    """Load an audio file as a mono signal at the analysis sample rate."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a"}

    def __init__(self, target_sr: int = DEFAULT_SR, normalize: bool = True):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Sample rate the pitch extractor assumes (44100)
            normalize: Peak-normalize to [-1, 1] if True
        """
        self.target_sr = target_sr
        self.normalize = normalize

    def load(self, path: str) -> Tuple[np.ndarray, int]:
        """
        Load and resample an audio file.

        Args:
            path: Path to audio file

        Returns:
            Tuple of (mono audio array, sample rate)

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the format is not supported
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {', '.join(sorted(self.SUPPORTED_FORMATS))}"
            )

        audio, sr = librosa.load(str(path), sr=self.target_sr, mono=True)

        if self.normalize:
            peak = np.abs(audio).max() if audio.size else 0.0
            if peak > 0:
                audio = audio / peak

        return audio, sr

    def get_duration(self, audio: np.ndarray, sr: int = None) -> float:
        """Duration in seconds."""
        return len(audio) / (sr or self.target_sr)
