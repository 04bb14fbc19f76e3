"""Console observer and run loop shared by the realtime clients."""

import sys
import time
from typing import List, Optional

from intent_detector import IntentDetector, LoggingObserver, get_intent_string
from intent_detector.audio.producer import AudioProducer
from intent_detector.transport.messages import StreamingDetectIntentResponse


class ConsoleObserver(LoggingObserver):
    """Print transcripts and the detected intent to stdout."""

    def __init__(self) -> None:
        super().__init__()
        self.intent: Optional[str] = None
        self.failed = False

    def on_start(self, detector: IntentDetector) -> None:
        super().on_start(detector)
        print(f"[STREAM] session={detector.session_name} opened")

    def on_response(
        self, detector: IntentDetector, response: StreamingDetectIntentResponse
    ) -> None:
        super().on_response(detector, response)
        result = response.recognition_result
        if result.transcript:
            kind = "[FINAL]" if result.is_final else "[PARTIAL]"
            print(f"{kind} {result.transcript}")

    def on_response_intent(
        self, detector: IntentDetector, response: StreamingDetectIntentResponse
    ) -> None:
        super().on_response_intent(detector, response)
        self.intent = get_intent_string(response)
        query = response.query_result
        print(
            f"[INTENT] {self.intent} "
            f"(confidence={query.intent_detection_confidence:.2f}) "
            f"query={query.query_text!r}"
        )
        if query.fulfillment_text:
            print(f"[REPLY] {query.fulfillment_text}")

    def on_response_end_of_utterance(
        self, detector: IntentDetector, response: StreamingDetectIntentResponse
    ) -> None:
        super().on_response_end_of_utterance(detector, response)
        print("[STREAM] end of utterance")

    def on_error(self, detector: IntentDetector, error: BaseException) -> None:
        super().on_error(detector, error)
        self.failed = True
        print(f"[STREAM] terminated by error: {error}", file=sys.stderr)

    def on_complete(self, detector: IntentDetector) -> None:
        super().on_complete(detector)
        print("[STREAM] completed")


def run_once(detector: IntentDetector, report_metrics: bool = False) -> None:
    """Run a single session until it returns to idle; Ctrl+C stops it."""
    producers: List[AudioProducer] = []
    start = time.perf_counter()
    detector.start_session(producers.append)
    try:
        while not detector.wait_until_idle(timeout=0.5):
            pass
    except KeyboardInterrupt:
        print("\n[STREAM] interrupted by user")
        detector.stop()
        detector.wait_until_idle(timeout=5.0)
    finally:
        cause = detector.last_cause
        print(f"[SESSION] ended (cause={cause.value if cause else 'none'})")
        if report_metrics and producers:
            total_wall = time.perf_counter() - start
            audio_duration = producers[0].duration_seconds
            rtf = total_wall / audio_duration if audio_duration > 0 else float("inf")
            print(
                f"[METRIC] audio_duration={audio_duration:.2f}s "
                f"wall_clock={total_wall:.2f}s real_time_factor={rtf:.2f}"
            )


__all__ = ["ConsoleObserver", "run_once"]
