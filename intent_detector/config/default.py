"""Default values for detector/runtime configuration."""

from typing import Dict

DEFAULT_TARGET = "dialogflow.googleapis.com:443"
DEFAULT_TLS_ENABLED = True
DEFAULT_LANGUAGE_CODE = "en-US"
DEFAULT_SAMPLE_RATE = 16000
DEFAULT_CHUNK_MS = 100
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FILE = None
DEFAULT_KEEPALIVE_TIME_MS = 30000
DEFAULT_KEEPALIVE_TIMEOUT_MS = 10000
DEFAULT_GRPC_MAX_RECEIVE_MESSAGE_BYTES = 8 * 1024 * 1024
DEFAULT_GRPC_MAX_SEND_MESSAGE_BYTES = 8 * 1024 * 1024
DEFAULT_STREAM_METHOD = (
    "/google.cloud.dialogflow.v2.Sessions/StreamingDetectIntent"
)
DEFAULT_AUTH_SCOPES = (
    "https://www.googleapis.com/auth/cloud-platform",
    "https://www.googleapis.com/auth/dialogflow",
)

SECTION_MAP: Dict[str, Dict[str, str]] = {
    "server": {
        "target": "target",
        "method": "stream_method",
        "tls_enabled": "tls_enabled",
        "tls_ca_file": "tls_ca_file",
        "keepalive_time_ms": "keepalive_time_ms",
        "keepalive_timeout_ms": "keepalive_timeout_ms",
        "max_receive_message_bytes": "grpc_max_receive_message_bytes",
        "max_send_message_bytes": "grpc_max_send_message_bytes",
    },
    "audio": {
        "sample_rate": "sample_rate",
        "chunk_ms": "chunk_ms",
        "device": "input_device",
    },
    "detector": {
        "language": "language_code",
        "session_id": "session_id",
    },
    "credentials": {
        "file": "credentials_file",
    },
    "logging": {
        "level": "log_level",
        "file": "log_file",
    },
}

__all__ = [
    "DEFAULT_TARGET",
    "DEFAULT_TLS_ENABLED",
    "DEFAULT_LANGUAGE_CODE",
    "DEFAULT_SAMPLE_RATE",
    "DEFAULT_CHUNK_MS",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_LOG_FILE",
    "DEFAULT_KEEPALIVE_TIME_MS",
    "DEFAULT_KEEPALIVE_TIMEOUT_MS",
    "DEFAULT_GRPC_MAX_RECEIVE_MESSAGE_BYTES",
    "DEFAULT_GRPC_MAX_SEND_MESSAGE_BYTES",
    "DEFAULT_STREAM_METHOD",
    "DEFAULT_AUTH_SCOPES",
    "SECTION_MAP",
]
