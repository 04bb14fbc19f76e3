"""Observer callbacks surfaced by :class:`IntentDetector`."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from intent_detector.transport.messages import (
    StreamingDetectIntentResponse,
    get_intent_string,
    message_type_name,
)
from intent_detector.utils.logger import LOGGER

if TYPE_CHECKING:
    from intent_detector.session.coordinator import IntentDetector


class IntentObserver:
    """Base observer; override the callbacks you care about.

    Callbacks run on the stream's callback thread (or the capture thread for
    failures while opening the stream) and must not block for long.
    """

    def on_start(self, detector: "IntentDetector") -> None:
        pass

    def on_response(
        self, detector: "IntentDetector", response: StreamingDetectIntentResponse
    ) -> None:
        """Every inbound message, intermediate or terminal."""

    def on_response_intent(
        self, detector: "IntentDetector", response: StreamingDetectIntentResponse
    ) -> None:
        """Fired once per session when the agent matched an intent."""

    def on_response_end_of_utterance(
        self, detector: "IntentDetector", response: StreamingDetectIntentResponse
    ) -> None:
        """Fired once per session when single-utterance recognition ended."""

    def on_error(self, detector: "IntentDetector", error: BaseException) -> None:
        pass

    def on_complete(self, detector: "IntentDetector") -> None:
        pass


class LoggingObserver(IntentObserver):
    """Logs every callback."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or LOGGER.getChild("observer")

    def on_start(self, detector: "IntentDetector") -> None:
        self._logger.info("Stream started session=%s", detector.session_name)

    def on_response(
        self, detector: "IntentDetector", response: StreamingDetectIntentResponse
    ) -> None:
        result = response.recognition_result
        self._logger.debug(
            "Response type=%s final=%s transcript=%r",
            message_type_name(response),
            result.is_final,
            result.transcript,
        )

    def on_response_intent(
        self, detector: "IntentDetector", response: StreamingDetectIntentResponse
    ) -> None:
        self._logger.info(
            "Intent detected: %s (confidence=%.2f)",
            get_intent_string(response),
            response.query_result.intent_detection_confidence,
        )

    def on_response_end_of_utterance(
        self, detector: "IntentDetector", response: StreamingDetectIntentResponse
    ) -> None:
        self._logger.info("End of utterance")

    def on_error(self, detector: "IntentDetector", error: BaseException) -> None:
        self._logger.error("Stream error: %s", error)

    def on_complete(self, detector: "IntentDetector") -> None:
        self._logger.info("Stream complete")


__all__ = ["IntentObserver", "LoggingObserver"]
