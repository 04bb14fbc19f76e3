"""Remote stream transport and message types."""

from .channel import ChannelHandle, StreamingClient, StreamObserver
from .messages import (
    UNKNOWN_INTENT,
    StreamingDetectIntentRequest,
    StreamingDetectIntentResponse,
    get_intent_string,
)

__all__ = [
    "ChannelHandle",
    "StreamObserver",
    "StreamingClient",
    "StreamingDetectIntentRequest",
    "StreamingDetectIntentResponse",
    "UNKNOWN_INTENT",
    "get_intent_string",
]
