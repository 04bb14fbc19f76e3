import argparse

from intent_client.realtime.console import ConsoleObserver, run_once
from intent_client.realtime.mic import add_common_arguments, build_config
from intent_detector import IntentDetector
from intent_detector.audio.wav_file import WavFileProducer
from intent_detector.config import DetectorConfig
from intent_detector.utils.logger import configure_logging


def run(path: str, config: DetectorConfig, realtime: bool, report_metrics: bool) -> int:
    configure_logging(config.log_level, config.log_file)
    observer = ConsoleObserver()

    def producer_factory() -> WavFileProducer:
        return WavFileProducer(path, chunk_ms=int(config.chunk_ms), realtime=realtime)

    with IntentDetector(
        config, observer, producer_factory=producer_factory
    ) as detector:
        print(f"[STREAM] streaming {path} ({config.chunk_ms} ms chunks)")
        run_once(detector, report_metrics=report_metrics)
    return 1 if observer.failed else 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Streaming intent detection from an audio file"
    )
    parser.add_argument("path", help="Audio file (WAV/FLAC/OGG) to stream")
    add_common_arguments(parser)
    parser.add_argument(
        "--no-realtime",
        action="store_true",
        help="Send chunks as fast as possible instead of at playback speed",
    )
    args = parser.parse_args()

    config = build_config(
        config_path=args.config,
        target=args.server,
        credentials=args.credentials,
        language=args.language,
        sample_rate=None,
        chunk_ms=args.chunk_ms,
        device=None,
        insecure=args.insecure,
        log_level=args.log_level,
    )
    raise SystemExit(
        run(
            args.path,
            config,
            realtime=not args.no_realtime,
            report_metrics=args.metrics,
        )
    )


if __name__ == "__main__":
    main()
