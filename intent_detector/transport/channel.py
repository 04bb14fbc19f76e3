"""gRPC duplex channel used to stream audio and receive detect-intent results."""

from __future__ import annotations

import queue
import threading
from itertools import count
from pathlib import Path
from typing import Iterator, Optional, Protocol

import grpc
from google.auth.credentials import Credentials as AuthCredentials
from google.auth.transport import grpc as google_auth_grpc
from google.auth.transport import requests as google_auth_requests

from intent_detector.errors import (
    ErrorCode,
    HandshakeFailure,
    SendFailure,
    transport_error_from_rpc,
)
from intent_detector.transport.messages import (
    StreamingDetectIntentRequest,
    StreamingDetectIntentResponse,
    deserialize_response,
    serialize_request,
)
from intent_detector.utils.logger import LOGGER

_CLOSE_SEND = object()
_STREAM_IDS = count(1)


class StreamObserver(Protocol):
    """Receives channel events on the channel's callback thread."""

    def on_start(self, handle: "ChannelHandle") -> None: ...

    def on_ready(self, handle: "ChannelHandle") -> None: ...

    def on_response(self, response: StreamingDetectIntentResponse) -> None: ...

    def on_error(self, exc: BaseException) -> None: ...

    def on_complete(self) -> None: ...


class ChannelHandle:
    """Send side of one open stream.

    Requests are queued and drained by gRPC's request iterator; ``send`` never
    blocks on the network.
    """

    def __init__(self, stream_id: int) -> None:
        self.stream_id = stream_id
        self._requests: "queue.Queue[object]" = queue.Queue()
        self._lock = threading.Lock()
        self._send_closed = False
        self._cancelled = False
        self._call: Optional[grpc.Future] = None

    def send(self, request: StreamingDetectIntentRequest) -> None:
        with self._lock:
            if self._send_closed:
                raise SendFailure(
                    ErrorCode.CHANNEL_CLOSED, f"stream {self.stream_id} send closed"
                )
            self._requests.put(request)

    def close_send(self) -> None:
        """Half-close: the server sees end of input once queued requests drain."""
        with self._lock:
            if self._send_closed:
                return
            self._send_closed = True
            self._requests.put(_CLOSE_SEND)
        LOGGER.debug("Stream %d send side closed", self.stream_id)

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True
            call = self._call
        self.close_send()
        if call is not None:
            call.cancel()

    @property
    def send_closed(self) -> bool:
        with self._lock:
            return self._send_closed

    @property
    def cancelled(self) -> bool:
        with self._lock:
            return self._cancelled

    def request_iterator(self) -> Iterator[StreamingDetectIntentRequest]:
        while True:
            item = self._requests.get()
            if item is _CLOSE_SEND:
                return
            yield item  # type: ignore[misc]

    def _attach(self, call: grpc.Future) -> bool:
        with self._lock:
            self._call = call
            cancelled = self._cancelled
        if cancelled:
            call.cancel()
        return not cancelled


def _create_channel(
    target: str,
    grpc_max_receive_message_bytes: Optional[int],
    grpc_max_send_message_bytes: Optional[int],
    tls_enabled: bool,
    tls_ca_file: Optional[str],
    keepalive_time_ms: int,
    keepalive_timeout_ms: int,
    oauth_credentials: Optional[AuthCredentials] = None,
) -> grpc.Channel:
    options = [
        ("grpc.keepalive_time_ms", keepalive_time_ms),
        ("grpc.keepalive_timeout_ms", keepalive_timeout_ms),
        ("grpc.keepalive_permit_without_calls", 1),
    ]
    if grpc_max_receive_message_bytes and grpc_max_receive_message_bytes > 0:
        options.append(
            ("grpc.max_receive_message_length", grpc_max_receive_message_bytes)
        )
    if grpc_max_send_message_bytes and grpc_max_send_message_bytes > 0:
        options.append(("grpc.max_send_message_length", grpc_max_send_message_bytes))

    root_certificates = None
    if tls_ca_file:
        tls_enabled = True
        cert_path = Path(tls_ca_file).expanduser()
        if not cert_path.exists():
            raise FileNotFoundError(f"TLS CA file not found: {cert_path}")
        root_certificates = cert_path.read_bytes()

    if tls_enabled:
        credentials = grpc.ssl_channel_credentials(root_certificates=root_certificates)
        if oauth_credentials is not None:
            # Each call carries a bearer token, refreshed by google-auth.
            credentials = grpc.composite_channel_credentials(
                credentials,
                grpc.metadata_call_credentials(
                    google_auth_grpc.AuthMetadataPlugin(
                        oauth_credentials, google_auth_requests.Request()
                    )
                ),
            )
        return grpc.secure_channel(target, credentials, options=options)
    if oauth_credentials is not None:
        LOGGER.warning(
            "Plaintext channel to %s; access tokens are not attached", target
        )
    return grpc.insecure_channel(target, options=options)


class StreamingClient:
    """Coordinator-scoped gRPC client; opens one duplex stream per session."""

    def __init__(
        self,
        target: str,
        *,
        stream_method: str,
        tls_enabled: bool = True,
        tls_ca_file: Optional[str] = None,
        grpc_max_receive_message_bytes: Optional[int] = None,
        grpc_max_send_message_bytes: Optional[int] = None,
        keepalive_time_ms: int = 30000,
        keepalive_timeout_ms: int = 10000,
        ready_timeout_sec: float = 10.0,
        oauth_credentials: Optional[AuthCredentials] = None,
    ) -> None:
        self._channel = _create_channel(
            target,
            grpc_max_receive_message_bytes,
            grpc_max_send_message_bytes,
            tls_enabled,
            tls_ca_file,
            keepalive_time_ms,
            keepalive_timeout_ms,
            oauth_credentials,
        )
        self._stream = self._channel.stream_stream(
            stream_method,
            request_serializer=serialize_request,
            response_deserializer=deserialize_response,
        )
        self._target = target
        self._ready_timeout_sec = ready_timeout_sec
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        LOGGER.info("Closing gRPC channel to %s", self._target)
        self._channel.close()

    def open(self, observer: StreamObserver) -> ChannelHandle:
        """Start a stream; readiness and results arrive on a callback thread."""
        if self.closed:
            raise HandshakeFailure(ErrorCode.HANDSHAKE_FAILED, "client is closed")
        handle = ChannelHandle(next(_STREAM_IDS))
        thread = threading.Thread(
            target=self._pump,
            args=(handle, observer),
            name=f"intent-stream-{handle.stream_id}",
            daemon=True,
        )
        thread.start()
        return handle

    def _pump(self, handle: ChannelHandle, observer: StreamObserver) -> None:
        observer.on_start(handle)
        try:
            grpc.channel_ready_future(self._channel).result(
                timeout=self._ready_timeout_sec
            )
        except grpc.FutureTimeoutError:
            observer.on_error(
                HandshakeFailure(
                    ErrorCode.HANDSHAKE_FAILED,
                    f"channel to {self._target} not ready after "
                    f"{self._ready_timeout_sec:.1f}s",
                )
            )
            return
        except Exception as exc:
            observer.on_error(HandshakeFailure(ErrorCode.HANDSHAKE_FAILED, str(exc)))
            return

        call = self._stream(handle.request_iterator())
        if not handle._attach(call):
            observer.on_complete()
            return
        observer.on_ready(handle)

        responses = iter(call)
        while True:
            try:
                response = next(responses)
            except StopIteration:
                break
            except grpc.RpcError as exc:
                status = exc.code() if hasattr(exc, "code") else None
                if status == grpc.StatusCode.CANCELLED and (
                    handle.cancelled or self.closed
                ):
                    LOGGER.debug("Stream %d cancelled locally", handle.stream_id)
                    break
                observer.on_error(transport_error_from_rpc(exc))
                return
            observer.on_response(response)
        observer.on_complete()


__all__ = [
    "ChannelHandle",
    "StreamObserver",
    "StreamingClient",
]
