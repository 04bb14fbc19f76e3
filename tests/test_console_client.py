from unittest.mock import MagicMock

from intent_client.realtime.console import ConsoleObserver, run_once
from intent_detector import TerminationCause
from intent_detector.transport.messages import (
    Intent,
    QueryResult,
    StreamingDetectIntentResponse,
)


def test_console_observer_prints_intent_and_reply(capsys):
    observer = ConsoleObserver()
    response = StreamingDetectIntentResponse(
        query_result=QueryResult(
            query_text="order a pizza",
            intent=Intent(display_name="order.pizza"),
            intent_detection_confidence=0.5,
            fulfillment_text="What size?",
        )
    )
    observer.on_response_intent(MagicMock(), response)

    out = capsys.readouterr().out
    assert "[INTENT] order.pizza (confidence=0.50)" in out
    assert "[REPLY] What size?" in out
    assert observer.intent == "order.pizza"
    assert not observer.failed


def test_console_observer_marks_failure(capsys):
    observer = ConsoleObserver()
    observer.on_error(MagicMock(), RuntimeError("ERR2003 boom"))
    assert observer.failed
    assert "ERR2003 boom" in capsys.readouterr().err


def test_run_once_stops_on_keyboard_interrupt(capsys):
    detector = MagicMock()
    detector.wait_until_idle.side_effect = [False, KeyboardInterrupt(), True]
    detector.last_cause = TerminationCause.CALLER_STOP

    run_once(detector)

    detector.start_session.assert_called_once()
    detector.stop.assert_called_once()
    out = capsys.readouterr().out
    assert "interrupted by user" in out
    assert "cause=caller_stop" in out


def test_run_once_reports_metrics(capsys):
    producer = MagicMock()
    producer.duration_seconds = 2.0

    def start_session(initializer):
        initializer(producer)
        return True

    detector = MagicMock()
    detector.start_session.side_effect = start_session
    detector.wait_until_idle.return_value = True
    detector.last_cause = TerminationCause.INTENT_RECOGNIZED

    run_once(detector, report_metrics=True)

    out = capsys.readouterr().out
    assert "cause=intent_recognized" in out
    assert "audio_duration=2.00s" in out


def test_console_observer_also_logs(caplog):
    caplog.set_level("INFO", logger="intent_detector.observer")
    observer = ConsoleObserver()
    response = StreamingDetectIntentResponse(
        query_result=QueryResult(intent=Intent(display_name="greet"))
    )
    observer.on_response_intent(MagicMock(), response)
    observer.on_complete(MagicMock())

    assert "Intent detected: greet" in caplog.text
    assert "Stream complete" in caplog.text
