"""
Command-line interface for driver extraction.
"""

import argparse
import json
import sys
from pathlib import Path

from audiodrivers.errors import InvalidArgument, UnsupportedVersion
from audiodrivers.params import AudioProcessorParams, from_export_settings
from audiodrivers.pipeline import AudioPipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="audio-drivers",
        description="Replay an audio file through the driver pipeline",
    )

    parser.add_argument(
        "input",
        type=Path,
        help="Input audio file (wav, mp3, flac)",
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output manifest file path (default: <input>_drivers.json)",
    )

    parser.add_argument(
        "--format",
        choices=["json", "numpy"],
        default="json",
        help="Output format (default: json)",
    )

    parser.add_argument(
        "-s", "--sample-rate",
        type=int,
        default=44100,
        help="Audio sample rate for analysis (default: 44100)",
    )

    parser.add_argument(
        "-b", "--buckets",
        type=int,
        default=36,
        help="Number of frequency buckets (default: 36)",
    )

    parser.add_argument(
        "-l", "--length",
        type=int,
        default=60,
        help="Amplitude history length in frames (default: 60)",
    )

    parser.add_argument(
        "--fft-size",
        type=int,
        default=1024,
        help="FFT window length in samples (default: 1024)",
    )

    parser.add_argument(
        "--frame-size",
        type=int,
        default=512,
        help="Samples per processed frame (default: 512)",
    )

    parser.add_argument(
        "--settings",
        type=str,
        default=None,
        help='Exported settings as JSON, e.g. \'["v0.1", 2, ...]\'',
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress progress output",
    )

    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print manifest summary to stdout",
    )

    return parser


def load_params(settings: str | None) -> AudioProcessorParams:
    if settings is None:
        return AudioProcessorParams()
    return from_export_settings(json.loads(settings))


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    # Validate input
    if not args.input.exists():
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        return 1

    try:
        params = load_params(args.settings)
    except (json.JSONDecodeError, InvalidArgument, UnsupportedVersion) as e:
        print(f"Error: Invalid settings: {e}", file=sys.stderr)
        return 1

    # Determine output path
    output_path = args.output
    if output_path is None:
        suffix = ".npz" if args.format == "numpy" else ".json"
        output_path = args.input.with_name(f"{args.input.stem}_drivers{suffix}")

    pipeline = AudioPipeline(
        sample_rate=args.sample_rate,
        fft_size=args.fft_size,
        frame_size=args.frame_size,
        buckets=args.buckets,
        length=args.length,
        params=params,
    )

    # Catch bad sizes before decoding the whole file
    try:
        pipeline.make_processor()
    except InvalidArgument as e:
        print(f"Error: Invalid options: {e}", file=sys.stderr)
        return 1

    if not args.quiet:
        print(f"Processing: {args.input}")
        print(f"Buckets: {args.buckets}, FPS: {pipeline.fps:.2f}")

    result = pipeline.process(
        args.input,
        output_path=output_path,
        format=args.format,
    )

    if not args.quiet:
        print(f"Duration: {result['duration']:.2f}s")
        print(f"Frames: {result['n_frames']}")
        print(f"Output: {result['output_path']}")

    if args.summary:
        manifest = result["manifest"]
        print("\n--- Manifest Summary ---")
        print(json.dumps(manifest["metadata"], indent=2))

        frames = manifest["frames"]
        if len(frames) > 0:
            last = frames[-1]
            print(f"\nLast frame ({last['frame_index']}): mean={last['mean']}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
