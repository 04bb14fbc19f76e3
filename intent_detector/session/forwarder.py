"""Bridges producer frames onto the session's stream."""

from __future__ import annotations

import threading

from intent_detector.errors import HandshakeFailure
from intent_detector.session.bootstrap import StreamBootstrap
from intent_detector.session.interpreter import ResponseInterpreter
from intent_detector.session.state import SessionState
from intent_detector.transport.messages import audio_request
from intent_detector.utils.logger import LOGGER, set_session_id


class FrameForwarder:
    """AudioDataReceiver for one session, called on the producer's thread.

    Frames that arrive before the stream is ready block on the session
    condition; once the session is terminating they are dropped. Send
    failures are logged and the session keeps going.
    """

    def __init__(
        self,
        state: SessionState,
        generation: int,
        bootstrap: StreamBootstrap,
        interpreter: ResponseInterpreter,
        session_id: str = "",
    ) -> None:
        self._state = state
        self._generation = generation
        self._bootstrap = bootstrap
        self._interpreter = interpreter
        self._session_id = session_id
        self.frames_forwarded = 0
        self.frames_dropped = 0
        self.send_failures = 0

    def on_started(self) -> None:
        set_session_id(self._session_id)
        LOGGER.debug(
            "Audio capture started [thread=%s]", threading.current_thread().name
        )
        try:
            self._bootstrap.open(self._interpreter)
        except HandshakeFailure as exc:
            self._interpreter.on_error(exc)

    def on_frame(self, data: bytes, length: int) -> None:
        condition = self._state.condition
        with condition:
            if self._state.is_terminating(self._generation):
                self._drop("session terminating")
                return

            channel = self._state.channel_for(self._generation)
            if channel is None:
                LOGGER.debug("Waiting for stream initialization")
            while channel is None:
                condition.wait()
                if self._state.is_terminating(self._generation):
                    self._drop("session terminated while waiting for stream")
                    return
                channel = self._state.channel_for(self._generation)

            payload = bytes(memoryview(data)[:length])
            try:
                channel.send(audio_request(payload))
            except Exception as exc:
                self.send_failures += 1
                LOGGER.warning("Audio frame send failed: %s", exc)
                return
            self.frames_forwarded += 1
            LOGGER.trace("Forwarded %d bytes", length)  # type: ignore[attr-defined]

    def on_stopped(self) -> None:
        LOGGER.debug(
            "Audio capture stopped [thread=%s] forwarded=%d dropped=%d failed=%d",
            threading.current_thread().name,
            self.frames_forwarded,
            self.frames_dropped,
            self.send_failures,
        )
        self._state.finish(self._generation)

    def _drop(self, reason: str) -> None:
        self.frames_dropped += 1
        LOGGER.trace("Audio frame dropped (%s)", reason)  # type: ignore[attr-defined]


__all__ = ["FrameForwarder"]
