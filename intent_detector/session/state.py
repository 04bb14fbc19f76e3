"""Shared per-detector session state guarded by one lock and one condition."""

from __future__ import annotations

import threading
from enum import Enum
from typing import Optional

from intent_detector.audio.producer import AudioProducer
from intent_detector.transport.channel import ChannelHandle
from intent_detector.utils.logger import LOGGER


class SessionPhase(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    STREAMING = "streaming"
    TERMINATING = "terminating"


class TerminationCause(str, Enum):
    INTENT_RECOGNIZED = "intent_recognized"
    END_OF_UTTERANCE = "end_of_utterance"
    CALLER_STOP = "caller_stop"
    TRANSPORT_ERROR = "transport_error"
    COMPLETED = "completed"


class SessionState:
    """Producer and channel slots for the one session a detector may run.

    Every read and write happens under ``condition``. The condition wraps a
    re-entrant lock so helpers can be called while the caller already holds
    it. Each session gets a new generation number; callbacks carry the
    generation they were created for and are ignored once it is stale.
    """

    def __init__(self) -> None:
        self.condition = threading.Condition(threading.RLock())
        self._generation = 0
        self._phase = SessionPhase.IDLE
        self._producer: Optional[AudioProducer] = None
        self._channel: Optional[ChannelHandle] = None
        self._cause: Optional[TerminationCause] = None

    @property
    def generation(self) -> int:
        with self.condition:
            return self._generation

    @property
    def phase(self) -> SessionPhase:
        with self.condition:
            return self._phase

    @property
    def cause(self) -> Optional[TerminationCause]:
        """Cause recorded for the current (or most recent) session."""
        with self.condition:
            return self._cause

    @property
    def producer(self) -> Optional[AudioProducer]:
        with self.condition:
            return self._producer

    @property
    def channel(self) -> Optional[ChannelHandle]:
        with self.condition:
            return self._channel

    def begin(self, producer: AudioProducer) -> Optional[int]:
        """Claim the slots for a new session; None if one is still active."""
        with self.condition:
            if self._phase != SessionPhase.IDLE:
                return None
            self._generation += 1
            self._producer = producer
            self._channel = None
            self._cause = None
            self._phase = SessionPhase.STARTING
            return self._generation

    def is_terminating(self, generation: int) -> bool:
        """True when frames for ``generation`` must be dropped."""
        with self.condition:
            return generation != self._generation or self._phase in (
                SessionPhase.TERMINATING,
                SessionPhase.IDLE,
            )

    def channel_for(self, generation: int) -> Optional[ChannelHandle]:
        with self.condition:
            if generation != self._generation:
                return None
            return self._channel

    def publish_channel(self, generation: int, channel: ChannelHandle) -> bool:
        """Populate the channel slot once the handshake has been sent."""
        with self.condition:
            if generation != self._generation or self._phase != SessionPhase.STARTING:
                return False
            self._channel = channel
            self._phase = SessionPhase.STREAMING
            self.condition.notify_all()
            return True

    def terminate(self, generation: int, cause: TerminationCause) -> bool:
        """Record ``cause`` and request producer stop; only the first call wins."""
        with self.condition:
            if generation != self._generation or self._phase == SessionPhase.IDLE:
                return False
            if self._cause is not None:
                return False
            self._cause = cause
            self._phase = SessionPhase.TERMINATING
            producer = self._producer
            if producer is not None and not producer.is_stop_requested():
                producer.request_stop()
            self.condition.notify_all()
        LOGGER.info("Session %d terminating (cause=%s)", generation, cause.value)
        return True

    def release_channel(self, generation: int) -> None:
        """Half-close and clear the channel slot without ending the session."""
        with self.condition:
            if generation != self._generation or self._channel is None:
                return
            self._channel.close_send()
            self._channel = None

    def finish(self, generation: int) -> bool:
        """Producer has stopped: half-close the channel and return to IDLE."""
        with self.condition:
            if generation != self._generation or self._phase == SessionPhase.IDLE:
                return False
            if self._cause is None:
                # The producer ran out of input on its own.
                self._cause = TerminationCause.COMPLETED
            if self._channel is not None:
                self._channel.close_send()
            self._channel = None
            self._producer = None
            self._phase = SessionPhase.IDLE
            self.condition.notify_all()
        LOGGER.info("Session %d idle", generation)
        return True

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        with self.condition:
            return self.condition.wait_for(
                lambda: self._phase == SessionPhase.IDLE, timeout=timeout
            )


__all__ = ["SessionPhase", "SessionState", "TerminationCause"]
