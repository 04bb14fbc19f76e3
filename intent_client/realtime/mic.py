import argparse
from pathlib import Path
from typing import Optional

from intent_client.realtime.console import ConsoleObserver, run_once
from intent_detector import IntentDetector
from intent_detector.config import DetectorConfig, load_config
from intent_detector.utils.logger import configure_logging


def build_config(
    config_path: Optional[str],
    target: Optional[str],
    credentials: Optional[str],
    language: Optional[str],
    sample_rate: Optional[int],
    chunk_ms: Optional[int],
    device: Optional[str],
    insecure: bool,
    log_level: Optional[str],
) -> DetectorConfig:
    config = load_config(Path(config_path) if config_path else None)
    if target:
        config.target = target
    if credentials:
        config.credentials_file = credentials
    if language:
        config.language_code = language
    if sample_rate:
        config.sample_rate = sample_rate
    if chunk_ms:
        config.chunk_ms = chunk_ms
    if device:
        config.input_device = device
    if insecure:
        config.tls_enabled = False
    if log_level:
        config.log_level = log_level
    return config


def run(config: DetectorConfig, report_metrics: bool) -> int:
    configure_logging(config.log_level, config.log_file)
    observer = ConsoleObserver()
    with IntentDetector(config, observer) as detector:
        print(
            f"[STREAM] microphone streaming at {config.sample_rate} Hz "
            f"({config.chunk_ms} ms chunks). Speak now; Ctrl+C to stop."
        )
        run_once(detector, report_metrics=report_metrics)
    return 1 if observer.failed else 0


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Detector YAML config (default: the bundled detector.yaml)",
    )
    parser.add_argument(
        "--server",
        default=None,
        help="gRPC target in host:port format",
    )
    parser.add_argument(
        "--credentials",
        default=None,
        help="Service account JSON file",
    )
    parser.add_argument(
        "--language",
        default=None,
        help="Agent language code (BCP-47, e.g. en-US)",
    )
    parser.add_argument(
        "--chunk-ms",
        type=int,
        default=None,
        help="Chunk size in milliseconds",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Use a plaintext channel (local test servers only)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (TRACE, DEBUG, INFO, ...)",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Print capture duration and real-time factor on exit",
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Streaming intent detection from the microphone"
    )
    add_common_arguments(parser)
    parser.add_argument(
        "--sample-rate",
        type=int,
        default=None,
        help="Microphone capture sample rate",
    )
    parser.add_argument(
        "--device",
        default=None,
        help="Input device name/index (defaults to system mic)",
    )
    args = parser.parse_args()

    config = build_config(
        config_path=args.config,
        target=args.server,
        credentials=args.credentials,
        language=args.language,
        sample_rate=args.sample_rate,
        chunk_ms=args.chunk_ms,
        device=args.device,
        insecure=args.insecure,
        log_level=args.log_level,
    )
    raise SystemExit(run(config, report_metrics=args.metrics))


if __name__ == "__main__":
    main()
