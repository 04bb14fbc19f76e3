"""Streaming intent detection from live audio."""

from intent_detector.errors import (
    ConfigurationError,
    DetectorClosedError,
    HandshakeFailure,
    IntentDetectorError,
    SendFailure,
    TransportError,
)
from intent_detector.observer import IntentObserver, LoggingObserver
from intent_detector.session import (
    IntentDetector,
    SessionPhase,
    TerminationCause,
)
from intent_detector.transport.messages import UNKNOWN_INTENT, get_intent_string

__all__ = [
    "ConfigurationError",
    "DetectorClosedError",
    "HandshakeFailure",
    "IntentDetector",
    "IntentDetectorError",
    "IntentObserver",
    "LoggingObserver",
    "SendFailure",
    "SessionPhase",
    "TerminationCause",
    "TransportError",
    "UNKNOWN_INTENT",
    "get_intent_string",
]
