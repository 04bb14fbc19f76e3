"""Classifies inbound stream events and drives session termination."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from intent_detector.errors import (
    HandshakeFailure,
    IntentDetectorError,
    transport_error_from_rpc,
)
from intent_detector.observer import IntentObserver
from intent_detector.session.bootstrap import StreamBootstrap
from intent_detector.session.state import SessionState, TerminationCause
from intent_detector.transport.channel import ChannelHandle
from intent_detector.transport.messages import (
    StreamingDetectIntentResponse,
    intent_display_name,
    is_end_of_single_utterance,
)
from intent_detector.utils.logger import LOGGER, set_session_id

if TYPE_CHECKING:
    from intent_detector.session.coordinator import IntentDetector


class ResponseInterpreter:
    """StreamObserver for one session's stream.

    Runs on the stream's callback thread. Observer callbacks are invoked
    without holding the session lock.
    """

    def __init__(
        self,
        detector: "IntentDetector",
        observer: IntentObserver,
        state: SessionState,
        generation: int,
        bootstrap: StreamBootstrap,
        session_id: str = "",
    ) -> None:
        self._detector = detector
        self._observer = observer
        self._state = state
        self._generation = generation
        self._bootstrap = bootstrap
        self._session_id = session_id

    def on_start(self, handle: ChannelHandle) -> None:
        set_session_id(self._session_id)
        LOGGER.debug("onStart() [thread=%s]", threading.current_thread().name)
        self._notify("on_start")

    def on_ready(self, handle: ChannelHandle) -> None:
        LOGGER.debug("onReady() [thread=%s]", threading.current_thread().name)
        try:
            self._bootstrap.handshake(handle)
        except HandshakeFailure as exc:
            handle.cancel()
            self.on_error(exc)

    def on_response(self, response: StreamingDetectIntentResponse) -> None:
        LOGGER.debug("onResponse() [thread=%s]", threading.current_thread().name)
        self._notify("on_response", response)

        if intent_display_name(response):
            self._terminal(
                TerminationCause.INTENT_RECOGNIZED, "on_response_intent", response
            )
        elif is_end_of_single_utterance(response):
            self._terminal(
                TerminationCause.END_OF_UTTERANCE,
                "on_response_end_of_utterance",
                response,
            )

    def on_error(self, exc: BaseException) -> None:
        error: IntentDetectorError
        if isinstance(exc, IntentDetectorError):
            error = exc
        else:
            error = transport_error_from_rpc(exc)
        LOGGER.error(
            "onError() [thread=%s] %s", threading.current_thread().name, error
        )
        self._state.terminate(self._generation, TerminationCause.TRANSPORT_ERROR)
        self._notify("on_error", error)

    def on_complete(self) -> None:
        """Record COMPLETED if no cause exists yet and request producer stop."""
        LOGGER.debug("onComplete() [thread=%s]", threading.current_thread().name)
        # Normally a stop was already requested; if not, the server ended the
        # stream on its own and the producer has to be released.
        self._state.terminate(self._generation, TerminationCause.COMPLETED)
        self._state.release_channel(self._generation)
        self._notify("on_complete")

    def _terminal(
        self,
        cause: TerminationCause,
        callback: str,
        response: StreamingDetectIntentResponse,
    ) -> None:
        if not self._state.terminate(self._generation, cause):
            LOGGER.debug(
                "%s ignored; session already terminating (cause=%s)",
                cause.value,
                self._state.cause.value if self._state.cause else None,
            )
            return
        self._notify(callback, response)

    def _notify(self, callback: str, *args) -> None:
        if self._generation != self._state.generation:
            LOGGER.debug(
                "%s dropped for stale session %d", callback, self._generation
            )
            return
        try:
            getattr(self._observer, callback)(self._detector, *args)
        except Exception:
            LOGGER.exception("Observer %s callback failed", callback)


__all__ = ["ResponseInterpreter"]
