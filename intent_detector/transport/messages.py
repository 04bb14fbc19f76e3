"""Streaming detect-intent messages and helpers over the agent API types.

Requests and responses are the agent API's proto-plus messages. Their
``serialize``/``deserialize`` class methods are the stream's wire codec. The
first request on a stream carries only the session name and the query input
(audio config); every following request carries only ``input_audio``.
"""

from __future__ import annotations

from typing import Optional

from google.cloud.dialogflow_v2 import types

AudioEncoding = types.AudioEncoding
InputAudioConfig = types.InputAudioConfig
Intent = types.Intent
QueryInput = types.QueryInput
QueryResult = types.QueryResult
StreamingDetectIntentRequest = types.StreamingDetectIntentRequest
StreamingDetectIntentResponse = types.StreamingDetectIntentResponse
StreamingRecognitionResult = types.StreamingRecognitionResult
MessageType = StreamingRecognitionResult.MessageType

UNKNOWN_INTENT = "unknown"

serialize_request = StreamingDetectIntentRequest.serialize
deserialize_request = StreamingDetectIntentRequest.deserialize
serialize_response = StreamingDetectIntentResponse.serialize
deserialize_response = StreamingDetectIntentResponse.deserialize


def config_request(
    session: str, sample_rate_hertz: int, language_code: str
) -> StreamingDetectIntentRequest:
    """Build the handshake: LINEAR16 audio in single-utterance mode."""
    return StreamingDetectIntentRequest(
        session=session,
        query_input=QueryInput(
            audio_config=InputAudioConfig(
                audio_encoding=AudioEncoding.AUDIO_ENCODING_LINEAR_16,
                sample_rate_hertz=int(sample_rate_hertz),
                language_code=language_code,
                single_utterance=True,
            )
        ),
    )


def audio_request(data: bytes) -> StreamingDetectIntentRequest:
    return StreamingDetectIntentRequest(input_audio=bytes(data))


def is_config_request(request: StreamingDetectIntentRequest) -> bool:
    return "query_input" in request


def intent_display_name(response: Optional[StreamingDetectIntentResponse]) -> str:
    if response is None:
        return ""
    return response.query_result.intent.display_name or ""


def is_end_of_single_utterance(response: StreamingDetectIntentResponse) -> bool:
    return (
        response.recognition_result.message_type
        == MessageType.END_OF_SINGLE_UTTERANCE
    )


def message_type_name(response: StreamingDetectIntentResponse) -> str:
    message_type = response.recognition_result.message_type
    return getattr(message_type, "name", str(message_type))


def get_intent_string(response: Optional[StreamingDetectIntentResponse]) -> str:
    """Return the detected intent's display name or UNKNOWN_INTENT, never None."""
    name = intent_display_name(response)
    return name if name else UNKNOWN_INTENT


__all__ = [
    "AudioEncoding",
    "InputAudioConfig",
    "Intent",
    "MessageType",
    "QueryInput",
    "QueryResult",
    "StreamingDetectIntentRequest",
    "StreamingDetectIntentResponse",
    "StreamingRecognitionResult",
    "UNKNOWN_INTENT",
    "audio_request",
    "config_request",
    "deserialize_request",
    "deserialize_response",
    "get_intent_string",
    "intent_display_name",
    "is_config_request",
    "is_end_of_single_utterance",
    "message_type_name",
    "serialize_request",
    "serialize_response",
]
