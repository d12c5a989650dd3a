"""Main entry point for the violin tuner CLI."""

import sys
import argparse
import statistics
import time
from typing import List, Optional

from ..logger import get_logger
from ..logging_config import setup_logging
from ..exceptions import TunerError
from ..tuning_types import ViolinString, TuningResult
from ..readout import format_reading, format_status
from ..core.config import ConfigManager
from ..core.factory import ComponentFactory

logger = get_logger(__name__)

POLL_INTERVAL = 0.05  # seconds between process_events calls


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Violin Tuner - tune G, D, A and E strings")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--config-dir", default=None, help="Configuration directory (default: ~/.config/violin_tuner)"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    string_names = [s.name for s in ViolinString]

    listen_parser = subparsers.add_parser("listen", help="Tune from the microphone")
    listen_parser.add_argument(
        "--string", type=str.upper, choices=string_names, default=None, help="String to tune"
    )
    listen_parser.add_argument("--device", type=int, default=None, help="Audio input device ID")
    listen_parser.add_argument("--sample-rate", type=int, default=None, help="Sample rate in Hz")
    listen_parser.add_argument("--block-size", type=int, default=None, help="Samples per block")
    listen_parser.add_argument(
        "--auto-stop", type=float, default=None, help="Stop after this many seconds"
    )
    listen_parser.add_argument(
        "--sine",
        type=float,
        default=None,
        metavar="HZ",
        help="Listen to a synthetic sine wave instead of the microphone",
    )

    analyze_parser = subparsers.add_parser("analyze", help="Tune from an audio file")
    analyze_parser.add_argument("file", help="Path to a WAV (or other libsndfile) file")
    analyze_parser.add_argument(
        "--string", type=str.upper, choices=string_names, default=None, help="String to tune"
    )
    analyze_parser.add_argument(
        "--realtime", action="store_true", help="Read the file at playback speed"
    )

    tone_parser = subparsers.add_parser("tone", help="Play a reference tone")
    tone_parser.add_argument("string", type=str.upper, choices=string_names, help="String to play")
    tone_parser.add_argument("--duration-ms", type=int, default=None, help="Tone length in ms")
    tone_parser.add_argument("--device", type=int, default=None, help="Audio output device ID")

    subparsers.add_parser("strings", help="Show the reference frequencies")
    subparsers.add_parser("devices", help="List audio devices")

    return parser


def _session_kwargs(args) -> dict:
    kwargs = {}
    if getattr(args, "string", None):
        kwargs["default_string"] = args.string
    return kwargs


def run_session(session) -> List[TuningResult]:
    """Listen until the session stops, printing each reading.

    Returns:
        All results applied during the run
    """
    results: List[TuningResult] = []
    session.start_listening()
    try:
        while session.is_listening():
            for result in session.process_events():
                results.append(result)
                print(format_reading(session.reference, result), flush=True)
            time.sleep(POLL_INTERVAL)
        # Pick up anything queued after the loop ended
        for result in session.process_events():
            results.append(result)
            print(format_reading(session.reference, result), flush=True)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        session.stop_listening()
    return results


def cmd_listen(args, factory: ComponentFactory) -> int:
    if args.sine is not None:
        sine_params = {"realtime": True}
        if args.sample_rate:
            sine_params["sample_rate"] = args.sample_rate
        if args.block_size:
            sine_params["block_size"] = args.block_size
        source = factory.create_sine_source(args.sine, **sine_params)
    else:
        source = factory.create_audio_input(
            device_id=args.device,
            sample_rate=args.sample_rate,
            frames_per_buffer=args.block_size,
        )

    session_kwargs = _session_kwargs(args)
    if args.auto_stop is not None:
        session_kwargs["auto_stop_seconds"] = args.auto_stop
    session = factory.create_session(source, **session_kwargs)

    print(f"Tuning {session.reference}. Press Ctrl+C to stop.")
    run_session(session)
    if session.auto_stopped:
        print("Stopped listening automatically.")
    if session.last_error is not None:
        print(f"Audio input failed: {session.last_error}", file=sys.stderr)
        return 1
    return 0


def cmd_analyze(args, factory: ComponentFactory) -> int:
    source = factory.create_file_source(args.file, realtime=args.realtime)
    session_kwargs = _session_kwargs(args)
    session_kwargs["auto_stop_seconds"] = None
    session = factory.create_session(source, **session_kwargs)

    results = run_session(session)
    if session.last_error is not None:
        print(f"Could not read {args.file}: {session.last_error}", file=sys.stderr)
        return 1
    if not results:
        print("No pitch detected.")
        return 0

    median = statistics.median(r.frequency_hz for r in results)
    summary = session.evaluator.evaluate(median, session.reference.frequency)
    print(
        f"{len(results)} readings, median {median:.2f} Hz, "
        f"{summary.cents_deviation:+.1f} cents: {format_status(summary)}"
    )
    return 0


def cmd_tone(args, factory: ComponentFactory) -> int:
    string = ViolinString.lookup(args.string)
    duration_ms = args.duration_ms or factory.config_manager.get_config("tone")["duration_ms"]
    player = factory.create_tone_player(device_id=args.device)
    print(f"Playing {string.reference}")
    player.play(string.frequency, duration_ms).join()
    return 0


def cmd_strings(_args, _factory: ComponentFactory) -> int:
    for string in ViolinString:
        print(f"{string.name}: {string.frequency:.2f} Hz")
    return 0


def cmd_devices(_args, _factory: ComponentFactory) -> int:
    from ..audio.audio_input import describe_devices

    print("Available audio devices:")
    print("-" * 70)
    for device in describe_devices():
        print(f"Device {device['index']}: {device['name']}")
        print(f"  Max input channels: {device['max_input_channels']}")
        print(f"  Max output channels: {device['max_output_channels']}")
        print(f"  Default sample rate: {device['default_samplerate']} Hz")
        if device["supported_input_rates"]:
            rates = ", ".join(str(r) for r in device["supported_input_rates"])
            print(f"  Supported input rates: {rates}")
        print()
    return 0


COMMANDS = {
    "listen": cmd_listen,
    "analyze": cmd_analyze,
    "tone": cmd_tone,
    "strings": cmd_strings,
    "devices": cmd_devices,
}


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command line arguments, or None to use sys.argv

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    parsed_args = parser.parse_args(args)

    if parsed_args.command not in COMMANDS:
        parser.print_help()
        return 1

    setup_logging(level="DEBUG" if parsed_args.debug else None)

    try:
        factory = ComponentFactory(ConfigManager(parsed_args.config_dir))
        return COMMANDS[parsed_args.command](parsed_args, factory)
    except TunerError as e:
        logger.error(f"{parsed_args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
