from __future__ import annotations

from typing import Optional

import sounddevice as sd

from intent_detector.audio.producer import AudioProducer
from intent_detector.utils.logger import LOGGER as BASE_LOGGER

LOGGER = BASE_LOGGER.getChild("audio")


class MicrophoneProducer(AudioProducer):
    """Capture PCM16 mono audio from the default (or given) input device."""

    def __init__(
        self, sample_rate: int, chunk_ms: int, device: Optional[str] = None
    ) -> None:
        super().__init__(sample_rate, chunk_ms)
        self.device = device

    def _capture(self) -> None:
        with sd.RawInputStream(
            samplerate=self.sample_rate,
            blocksize=self.frames_per_chunk,
            channels=1,
            dtype="int16",
            device=self.device,
        ) as stream:
            while not self.is_stop_requested():
                data, overflowed = stream.read(self.frames_per_chunk)
                if overflowed:
                    LOGGER.warning("Input overflow detected; audio may drop.")
                self._emit_frame(bytes(data))


__all__ = ["MicrophoneProducer"]
