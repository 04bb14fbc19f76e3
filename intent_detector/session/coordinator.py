"""Intent detector: streams live audio to the agent and reports the result."""

from __future__ import annotations

import threading
import uuid
from typing import Callable, Optional

from intent_detector.audio.producer import AudioProducer
from intent_detector.config.loader import (
    Credentials,
    DetectorConfig,
    load_credentials,
    validate_config,
)
from intent_detector.errors import DetectorClosedError
from intent_detector.observer import IntentObserver
from intent_detector.session.bootstrap import StreamBootstrap
from intent_detector.session.forwarder import FrameForwarder
from intent_detector.session.interpreter import ResponseInterpreter
from intent_detector.session.state import (
    SessionPhase,
    SessionState,
    TerminationCause,
)
from intent_detector.transport.channel import StreamingClient
from intent_detector.transport.messages import (
    UNKNOWN_INTENT,
    StreamingDetectIntentResponse,
    get_intent_string,
)
from intent_detector.utils.logger import LOGGER, set_session_id

ProducerInitializer = Callable[[AudioProducer], None]
ProducerFactory = Callable[[], AudioProducer]


def session_path(project_id: str, session_id: str) -> str:
    return f"projects/{project_id}/agent/sessions/{session_id}"


def microphone_factory(config: DetectorConfig) -> ProducerFactory:
    def factory() -> AudioProducer:
        # Imported lazily: sounddevice needs PortAudio at import time.
        from intent_detector.audio.microphone import MicrophoneProducer

        return MicrophoneProducer(
            sample_rate=int(config.sample_rate),
            chunk_ms=int(config.chunk_ms),
            device=config.input_device,
        )

    return factory


def build_client(config: DetectorConfig, credentials: Credentials) -> StreamingClient:
    return StreamingClient(
        config.target,
        stream_method=config.stream_method,
        tls_enabled=bool(config.tls_enabled),
        tls_ca_file=config.tls_ca_file,
        grpc_max_receive_message_bytes=config.grpc_max_receive_message_bytes,
        grpc_max_send_message_bytes=config.grpc_max_send_message_bytes,
        keepalive_time_ms=int(config.keepalive_time_ms),
        keepalive_timeout_ms=int(config.keepalive_timeout_ms),
        oauth_credentials=credentials.oauth_credentials,
    )


class IntentDetector:
    """Records audio and streams it to the agent to detect an intent.

    - No audio is persisted; everything is streamed.
    - ``start_session`` may be called any number of times, one session at a
      time. Calls while a session is active are ignored.
    - ``close`` must be called to release the gRPC channel. After ``close``
      no session can be started.
    """

    UNKNOWN_INTENT = UNKNOWN_INTENT

    def __init__(
        self,
        config: DetectorConfig,
        observer: IntentObserver,
        *,
        credentials: Optional[Credentials] = None,
        client: Optional[StreamingClient] = None,
        producer_factory: Optional[ProducerFactory] = None,
    ) -> None:
        validate_config(config)
        if credentials is None:
            credentials = load_credentials(config.credentials_file)

        self.config = config
        self.session_id = (config.session_id or "").strip() or str(uuid.uuid4())
        self.session_name = session_path(credentials.project_id, self.session_id)
        self._observer = observer
        self._client = client or build_client(config, credentials)
        self._producer_factory = producer_factory or microphone_factory(config)
        self._state = SessionState()
        self._close_lock = threading.Lock()
        self._closed = False
        LOGGER.info(
            "Intent detector ready session=%s language=%s",
            self.session_name,
            config.language_code,
        )

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def last_cause(self) -> Optional[TerminationCause]:
        return self._state.cause

    @property
    def closed(self) -> bool:
        with self._close_lock:
            return self._closed

    @staticmethod
    def get_intent_string(response: Optional[StreamingDetectIntentResponse]) -> str:
        """Display name of the detected intent or UNKNOWN_INTENT; never None."""
        return get_intent_string(response)

    def start_session(self, initializer: Optional[ProducerInitializer] = None) -> bool:
        """Start recording and streaming; returns False if a session is active.

        ``initializer`` may customize the producer before capture begins.
        """
        set_session_id(self.session_id)
        with self._state.condition:
            if self.closed:
                raise DetectorClosedError()
            if self._state.phase != SessionPhase.IDLE:
                LOGGER.debug("Audio producer is already running.")
                return False

            producer = self._producer_factory()
            if initializer is not None:
                # Runs before the session is claimed; a failing hook leaves
                # the detector idle.
                initializer(producer)
            generation = self._state.begin(producer)
            if generation is None:
                LOGGER.debug("Audio producer is already running.")
                return False

            bootstrap = StreamBootstrap(
                self._client,
                self._state,
                generation,
                session_name=self.session_name,
                language_code=self.config.language_code,
                sample_rate=producer.sample_rate,
            )
            interpreter = ResponseInterpreter(
                self,
                self._observer,
                self._state,
                generation,
                bootstrap,
                session_id=self.session_id,
            )
            try:
                producer.add_receiver(
                    FrameForwarder(
                        self._state,
                        generation,
                        bootstrap,
                        interpreter,
                        session_id=self.session_id,
                    )
                )
                producer.start()
            except Exception:
                self._state.finish(generation)
                raise
            LOGGER.info("Session %d started", generation)
            return True

    def stop(self) -> None:
        """Request the active session to end; no-op if already ending or idle."""
        with self._state.condition:
            self._state.terminate(
                self._state.generation, TerminationCause.CALLER_STOP
            )

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        return self._state.wait_until_idle(timeout)

    def close(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        self.stop()
        self._client.close()
        LOGGER.info("Intent detector closed session=%s", self.session_name)

    def __enter__(self) -> "IntentDetector":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = [
    "IntentDetector",
    "ProducerFactory",
    "ProducerInitializer",
    "build_client",
    "microphone_factory",
    "session_path",
]
