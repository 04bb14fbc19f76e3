"""Thread-backed audio producers delivering PCM16 frames to receivers."""

from __future__ import annotations

import threading
from itertools import count
from typing import List, Optional, Protocol

from intent_detector.utils.logger import LOGGER as BASE_LOGGER

LOGGER = BASE_LOGGER.getChild("audio")

_PRODUCER_IDS = count(1)


class AudioDataReceiver(Protocol):
    """Callback sink for producer events, invoked on the capture thread."""

    def on_started(self) -> None: ...

    def on_frame(self, data: bytes, length: int) -> None: ...

    def on_stopped(self) -> None: ...


class AudioProducer:
    """Runs capture on its own thread.

    Each run emits exactly one ``on_started``, zero or more ``on_frame`` and
    exactly one ``on_stopped``. Stopping is cooperative: ``request_stop`` only
    sets a flag the capture loop polls between frames.
    """

    def __init__(self, sample_rate: int, chunk_ms: int) -> None:
        self.sample_rate = sample_rate
        self.chunk_ms = chunk_ms
        self.frames_per_chunk = max(int(sample_rate * (chunk_ms / 1000)), 1)
        self.samples_captured = 0
        self._receivers: List[AudioDataReceiver] = []
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._name = f"{type(self).__name__}-{next(_PRODUCER_IDS)}"

    def add_receiver(self, receiver: AudioDataReceiver) -> None:
        if self._thread is not None:
            raise RuntimeError("receivers must be added before start()")
        self._receivers.append(receiver)

    def start(self) -> "AudioProducer":
        if self._thread is not None:
            raise RuntimeError(f"{self._name} already started")
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        return self

    def request_stop(self) -> None:
        if not self._stop_event.is_set():
            LOGGER.debug("Stop requested for %s", self._name)
        self._stop_event.set()

    def is_stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the capture thread; returns True once it has exited."""
        if self._thread is None:
            return True
        self._thread.join(timeout=timeout)
        return not self._thread.is_alive()

    @property
    def duration_seconds(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.samples_captured / float(self.sample_rate)

    def _capture(self) -> None:
        raise NotImplementedError

    def _emit_frame(self, data: bytes) -> None:
        self.samples_captured += len(data) // 2
        for receiver in self._receivers:
            receiver.on_frame(data, len(data))

    def _run(self) -> None:
        LOGGER.debug("%s capture thread started", self._name)
        try:
            for receiver in self._receivers:
                receiver.on_started()
            self._capture()
        except Exception:
            LOGGER.exception("%s capture failed", self._name)
        finally:
            self._stop_event.set()
            for receiver in self._receivers:
                try:
                    receiver.on_stopped()
                except Exception:
                    LOGGER.exception("%s stop handler failed", self._name)
            LOGGER.debug(
                "%s capture thread exited (%.2fs captured)",
                self._name,
                self.duration_seconds,
            )


__all__ = ["AudioDataReceiver", "AudioProducer"]
