from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from google.auth import exceptions as auth_exceptions
from google.auth.credentials import Credentials as AuthCredentials
from google.oauth2 import service_account

from intent_detector.config.default import (
    DEFAULT_AUTH_SCOPES,
    DEFAULT_CHUNK_MS,
    DEFAULT_GRPC_MAX_RECEIVE_MESSAGE_BYTES,
    DEFAULT_GRPC_MAX_SEND_MESSAGE_BYTES,
    DEFAULT_KEEPALIVE_TIME_MS,
    DEFAULT_KEEPALIVE_TIMEOUT_MS,
    DEFAULT_LANGUAGE_CODE,
    DEFAULT_LOG_FILE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_SAMPLE_RATE,
    DEFAULT_STREAM_METHOD,
    DEFAULT_TARGET,
    DEFAULT_TLS_ENABLED,
    SECTION_MAP,
)
from intent_detector.errors import ConfigurationError, ErrorCode


@dataclass
class DetectorConfig:
    target: str = DEFAULT_TARGET
    stream_method: str = DEFAULT_STREAM_METHOD
    tls_enabled: bool = DEFAULT_TLS_ENABLED
    tls_ca_file: Optional[str] = None
    keepalive_time_ms: int = DEFAULT_KEEPALIVE_TIME_MS
    keepalive_timeout_ms: int = DEFAULT_KEEPALIVE_TIMEOUT_MS
    grpc_max_receive_message_bytes: Optional[int] = (
        DEFAULT_GRPC_MAX_RECEIVE_MESSAGE_BYTES
    )
    grpc_max_send_message_bytes: Optional[int] = DEFAULT_GRPC_MAX_SEND_MESSAGE_BYTES
    credentials_file: Optional[str] = None
    language_code: str = DEFAULT_LANGUAGE_CODE
    sample_rate: int = DEFAULT_SAMPLE_RATE
    chunk_ms: int = DEFAULT_CHUNK_MS
    input_device: Optional[str] = None
    session_id: Optional[str] = None
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Optional[str] = DEFAULT_LOG_FILE


@dataclass(frozen=True)
class Credentials:
    """Agent project plus the OAuth credentials that authorize calls to it."""

    project_id: str
    client_email: str = ""
    oauth_credentials: Optional[AuthCredentials] = None


# Shipped as package data so installed copies find it too.
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "detector.yaml"


def load_config(path: Optional[Path] = None) -> DetectorConfig:
    """Load detector configuration from YAML, falling back to defaults."""
    cfg = DetectorConfig()
    data = _read_yaml(path or DEFAULT_CONFIG_PATH)
    if data:
        _apply_sections(cfg, data)
    return cfg


def load_credentials(path: Optional[str]) -> Credentials:
    """Read a service-account JSON file; raises ConfigurationError on problems."""
    if not path:
        raise ConfigurationError(
            ErrorCode.CREDENTIALS_MISSING, "credentials_file is not configured"
        )
    cred_path = Path(path).expanduser()
    if not cred_path.exists():
        raise ConfigurationError(
            ErrorCode.CREDENTIALS_MISSING, f"credentials file not found: {cred_path}"
        )
    try:
        account = service_account.Credentials.from_service_account_file(
            str(cred_path), scopes=list(DEFAULT_AUTH_SCOPES)
        )
    except (OSError, ValueError, auth_exceptions.GoogleAuthError) as exc:
        raise ConfigurationError(ErrorCode.CREDENTIALS_INVALID, str(exc)) from exc
    project_id = (account.project_id or "").strip()
    if not project_id:
        raise ConfigurationError(
            ErrorCode.CREDENTIALS_INVALID, "credentials are missing project_id"
        )
    return Credentials(
        project_id=project_id,
        client_email=account.service_account_email or "",
        oauth_credentials=account,
    )


def validate_config(cfg: DetectorConfig) -> None:
    """Reject configurations no session could run with."""
    if not (cfg.language_code or "").strip():
        raise ConfigurationError(ErrorCode.LANGUAGE_REQUIRED)
    try:
        sample_rate = int(cfg.sample_rate)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            ErrorCode.SAMPLE_RATE_INVALID, f"sample_rate={cfg.sample_rate!r}"
        ) from exc
    if sample_rate <= 0:
        raise ConfigurationError(ErrorCode.SAMPLE_RATE_INVALID)
    if int(cfg.chunk_ms) <= 0:
        raise ConfigurationError(ErrorCode.CONFIG_INVALID, "chunk_ms must be positive")
    if not (cfg.target or "").strip():
        raise ConfigurationError(ErrorCode.CONFIG_INVALID, "target is required")


def _read_yaml(path: Optional[Path]) -> Optional[Dict[str, Any]]:
    if not path or not path.exists():
        return None
    with path.open("r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ConfigurationError(ErrorCode.CONFIG_INVALID, str(exc)) from exc
    if isinstance(data, dict):
        return data
    return None


def _apply_sections(cfg: DetectorConfig, raw: Dict[str, Any]) -> None:
    field_names = {f.name for f in fields(DetectorConfig)}
    for section, mapping in SECTION_MAP.items():
        data = raw.get(section)
        if not isinstance(data, dict):
            continue
        for key, attr in mapping.items():
            if key in data and data[key] is not None:
                setattr(cfg, attr, data[key])

    for key, value in raw.items():
        if key in SECTION_MAP:
            continue
        if key in field_names and value is not None:
            setattr(cfg, key, value)


__all__ = [
    "Credentials",
    "DetectorConfig",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "load_credentials",
    "validate_config",
]
