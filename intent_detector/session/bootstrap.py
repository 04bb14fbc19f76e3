"""Opens the session's stream and sends the audio config before any audio."""

from __future__ import annotations

from intent_detector.errors import ErrorCode, HandshakeFailure
from intent_detector.session.state import SessionState
from intent_detector.transport.channel import (
    ChannelHandle,
    StreamingClient,
    StreamObserver,
)
from intent_detector.transport.messages import (
    StreamingDetectIntentRequest,
    config_request as build_config_request,
)
from intent_detector.utils.logger import LOGGER


class StreamBootstrap:
    """Per-session handshake: open, send audio config, then publish the channel."""

    def __init__(
        self,
        client: StreamingClient,
        state: SessionState,
        generation: int,
        *,
        session_name: str,
        language_code: str,
        sample_rate: int,
    ) -> None:
        self._client = client
        self._state = state
        self._generation = generation
        self.session_name = session_name
        self.language_code = language_code
        self.sample_rate = sample_rate

    def open(self, observer: StreamObserver) -> ChannelHandle:
        try:
            return self._client.open(observer)
        except HandshakeFailure:
            raise
        except Exception as exc:
            raise HandshakeFailure(ErrorCode.HANDSHAKE_FAILED, str(exc)) from exc

    def config_request(self) -> StreamingDetectIntentRequest:
        # Single-utterance mode: the server stops recognizing after the first
        # utterance and reports END_OF_SINGLE_UTTERANCE.
        return build_config_request(
            self.session_name, self.sample_rate, self.language_code
        )

    def handshake(self, handle: ChannelHandle) -> bool:
        """Send the audio config and publish ``handle``.

        Returns False when the session ended before the channel became ready;
        the handle is then half-closed and never published.
        """
        try:
            handle.send(self.config_request())
        except Exception as exc:
            raise HandshakeFailure(
                ErrorCode.HANDSHAKE_FAILED, f"audio config send failed: {exc}"
            ) from exc

        if self._state.publish_channel(self._generation, handle):
            LOGGER.debug(
                "Stream %d ready (rate=%d language=%s)",
                handle.stream_id,
                self.sample_rate,
                self.language_code,
            )
            return True
        LOGGER.debug(
            "Stream %d ready after session %d ended; closing",
            handle.stream_id,
            self._generation,
        )
        handle.close_send()
        return False


__all__ = ["StreamBootstrap"]
