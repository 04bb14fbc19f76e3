import logging
from pathlib import Path

from intent_detector.utils import logger as logger_module
from intent_detector.utils.logger import (
    LOGGER,
    TRACE_LEVEL_NUM,
    clear_session_id,
    configure_logging,
    set_session_id,
)


def _stop_logging_listener() -> None:
    """Helper for stop logging listener."""
    if logger_module.QUEUE_LISTENER:
        logger_module.QUEUE_LISTENER.stop()
        for handler in logger_module.QUEUE_LISTENER.handlers:
            handler.close()
        logger_module.QUEUE_LISTENER = None
    logging.getLogger().handlers.clear()


def test_logging_includes_session_id(tmp_path: Path) -> None:
    """Test logging includes session id."""
    log_path = tmp_path / "detector.log"
    configure_logging("INFO", str(log_path))
    try:
        set_session_id("session-123")
        LOGGER.info("log-test")
    finally:
        clear_session_id()
        _stop_logging_listener()

    content = log_path.read_text(encoding="utf-8")
    assert "session_id=session-123" in content
    assert "log-test" in content


def test_logging_without_session_uses_placeholder(tmp_path: Path) -> None:
    log_path = tmp_path / "detector.log"
    clear_session_id()
    configure_logging("INFO", str(log_path))
    try:
        LOGGER.info("no-session")
    finally:
        _stop_logging_listener()

    content = log_path.read_text(encoding="utf-8")
    assert "session_id=-: no-session" in content


def test_trace_level_is_opt_in(tmp_path: Path) -> None:
    """TRACE records appear only when TRACE is configured."""
    log_path = tmp_path / "detector.log"
    configure_logging("DEBUG", str(log_path))
    try:
        LOGGER.trace("frame-dropped-1")  # type: ignore[attr-defined]
    finally:
        _stop_logging_listener()
    assert "frame-dropped-1" not in log_path.read_text(encoding="utf-8")

    configure_logging("TRACE", str(log_path))
    try:
        assert logging.getLogger().level == TRACE_LEVEL_NUM
        LOGGER.trace("frame-dropped-2")  # type: ignore[attr-defined]
    finally:
        _stop_logging_listener()
    content = log_path.read_text(encoding="utf-8")
    assert "[TRACE]" in content
    assert "frame-dropped-2" in content
