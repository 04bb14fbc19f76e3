from __future__ import annotations

import time
from pathlib import Path
from typing import Tuple

import numpy as np
import soundfile as sf

from intent_detector.audio.producer import AudioProducer


def load_audio(filepath: str) -> Tuple[np.ndarray, int]:
    """Read an audio file as mono int16 samples."""
    audio, sr = sf.read(filepath, dtype="int16")
    if audio.ndim > 1:
        audio = audio[:, 0]  # mono only
    return np.ascontiguousarray(audio), int(sr)


class WavFileProducer(AudioProducer):
    """Stream an audio file in fixed-size PCM16 chunks.

    The producer's sample rate is the file's. With ``realtime`` the chunks are
    paced at playback speed.
    """

    def __init__(self, path: str, chunk_ms: int, realtime: bool = True) -> None:
        self.path = Path(path).expanduser()
        self.audio, sample_rate = load_audio(str(self.path))
        super().__init__(sample_rate, chunk_ms)
        self.realtime = realtime

    def _capture(self) -> None:
        total = len(self.audio)
        idx = 0
        sleep_time = self.chunk_ms / 1000.0
        while idx < total and not self.is_stop_requested():
            end = min(idx + self.frames_per_chunk, total)
            self._emit_frame(self.audio[idx:end].tobytes())
            idx = end
            if self.realtime:
                time.sleep(sleep_time)


__all__ = ["WavFileProducer", "load_audio"]
