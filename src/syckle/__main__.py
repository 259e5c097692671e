from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import config
from .operations.blur import blur_run
from .operations.listing import list_run
from .operations.vector import vector_run


def _abs_path(p: str) -> Path:
    return Path(p).expanduser().resolve()


def _existing_file(p: str) -> Path:
    path = _abs_path(p)
    if not path.is_file():
        raise argparse.ArgumentTypeError(f"File does not exist: {p}")
    return path


def _int_in_range(lo: int, hi: int):
    def _parse(s: str) -> int:
        try:
            v = int(s)
        except ValueError:
            raise argparse.ArgumentTypeError(f"Not an integer: {s!r}") from None
        if not lo <= v <= hi:
            raise argparse.ArgumentTypeError(f"Value {v} not in range [{lo} - {hi}]")
        return v

    return _parse


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser (global options + ls / vector / blur / nn subcommands)."""
    parser = argparse.ArgumentParser(
        prog="syckle",
        description="syckle - OpenCL-based tool for device capabilities, image processing, and neural networks",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output.")
    parser.add_argument(
        "-d",
        "--device",
        default=config.default_device_preference(),
        choices=list(config.DEVICE_PREFERENCES),
        help=f"Compute device preference (default: gpu, or ${config.DEVICE_ENV_VAR}).",
    )
    parser.add_argument("--verify", action="store_true", help="Check device output against the host reference kernel.")
    parser.add_argument("--profile-out", type=_abs_path, default=None, help="Write profile.json + README.md into this directory.")

    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("ls", help="List available OpenCL platforms and devices.")

    vector = sub.add_parser("vector", help="Add two integer vectors on the selected device.")
    vector.add_argument("-i", "--input", type=_existing_file, required=True, help="Input file: two lines of integers.")
    vector.add_argument(
        "-o",
        "--output",
        type=_abs_path,
        default=_abs_path(config.DEFAULT_VECTOR_OUTPUT),
        help=f"Output vector file path (default: {config.DEFAULT_VECTOR_OUTPUT}).",
    )

    blur = sub.add_parser("blur", help="Apply a box blur to an image on the selected device.")
    blur.add_argument("-i", "--input", type=_existing_file, required=True, help="Input image file path.")
    blur.add_argument(
        "-o",
        "--output",
        type=_abs_path,
        default=_abs_path(config.DEFAULT_BLUR_OUTPUT),
        help=f"Output image file path (default: {config.DEFAULT_BLUR_OUTPUT}).",
    )
    blur.add_argument(
        "-r",
        "--radius",
        type=_int_in_range(config.RADIUS_MIN, config.RADIUS_MAX),
        default=config.DEFAULT_RADIUS,
        help=f"Blur radius in [{config.RADIUS_MIN}, {config.RADIUS_MAX}] (default: {config.DEFAULT_RADIUS}).",
    )

    nn = sub.add_parser("nn", help="Run neural network inference (not implemented).")
    nn.add_argument("-m", "--model", type=_existing_file, required=True, help="Path to neural network model file.")
    nn.add_argument("-i", "--input", type=_existing_file, required=True, help="Input data file or image.")
    nn.add_argument("-o", "--output", type=_abs_path, default=_abs_path(config.DEFAULT_NN_OUTPUT))
    nn.add_argument("-f", "--framework", default="custom", choices=list(config.NN_FRAMEWORKS))
    nn.add_argument("-b", "--batch-size", type=_int_in_range(config.NN_BATCH_MIN, config.NN_BATCH_MAX), default=1)

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint. Returns process exit code."""
    try:
        parser = build_parser()
    except ValueError as e:
        # Bad SYCKLE_DEVICE value.
        print(str(e), file=sys.stderr)
        return 2
    ns = parser.parse_args(argv)
    _configure_logging(ns.verbose)

    settings = config.RunSettings(
        device=config.normalize_device_preference(ns.device),
        verify=ns.verify,
        profile_out=str(ns.profile_out) if ns.profile_out is not None else None,
    )

    if ns.cmd == "ls":
        print("Executing device listing...")
        return list_run()
    if ns.cmd == "vector":
        print("Executing vector operations...")
        return vector_run(input_path=ns.input, output_path=ns.output, settings=settings)
    if ns.cmd == "blur":
        print(f"Applying blur with radius {ns.radius} to image '{ns.input}' and saving to '{ns.output}'")
        return blur_run(input_path=ns.input, output_path=ns.output, radius=ns.radius, settings=settings)
    if ns.cmd == "nn":
        print("nn: neural network inference is not implemented", file=sys.stderr)
        return 2
    if ns.cmd is None:
        parser.print_help()
        return 0

    raise AssertionError(f"Unhandled cmd: {ns.cmd}")


if __name__ == "__main__":
    raise SystemExit(main())
