from __future__ import annotations

import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any, TextIO

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..config import RunSettings
from ..dispatch.runner import run_box_blur
from .reporting import check_profile_out, export_profile, print_profile

_NATIVE_MODES = ("L", "RGB", "RGBA")


def _normalize_mode(img: Image.Image) -> Image.Image:
    """Convert to one of the interleaved 8-bit modes the kernel works on."""
    if img.mode in _NATIVE_MODES:
        return img
    if img.mode in ("1", "I", "I;16", "F"):
        return img.convert("L")
    if "A" in img.mode or (img.mode == "P" and "transparency" in img.info):
        return img.convert("RGBA")
    return img.convert("RGB")


def load_image(path: Path) -> np.ndarray:
    """Decode `path` into a row-major `height x width x channels` uint8 array."""
    with Image.open(path) as img:
        img.load()
        arr = np.asarray(_normalize_mode(img), dtype=np.uint8)
    if arr.ndim == 2:
        arr = arr[:, :, np.newaxis]
    return np.ascontiguousarray(arr)


def save_image(path: Path, pixels: np.ndarray) -> None:
    arr = pixels[:, :, 0] if pixels.ndim == 3 and pixels.shape[2] == 1 else pixels
    Image.fromarray(np.ascontiguousarray(arr, dtype=np.uint8)).save(path)


def blur_run(
    *,
    input_path: Path,
    output_path: Path,
    radius: int,
    settings: RunSettings,
    platforms: Iterable[Any] | None = None,
    out: TextIO | None = None,
) -> int:
    """Blur `input_path` and save the result; nothing is written on failure."""
    stream = sys.stdout if out is None else out
    if not check_profile_out(settings):
        return 1

    try:
        pixels = load_image(input_path)
    except (OSError, UnidentifiedImageError, Image.DecompressionBombError) as e:
        print(f"Error reading input image: {input_path} ({e})", file=sys.stderr)
        return 1

    height, width, channels = pixels.shape
    print(f"Image: {width}x{height} with {channels} channels, blur radius: {radius}", file=stream)

    result = run_box_blur(pixels, radius, device=settings.device, platforms=platforms, out=stream, verify_output=settings.verify)
    if result.failure is not None:
        print(f"Blur failed ({result.failure.kind}): {result.failure.message}", file=sys.stderr)
        return 1

    details = {
        "Image Size": f"{width}x{height} ({width * height} pixels)",
        "Channels": channels,
        "Blur Radius": radius,
    }
    if not export_profile(result, operation="blur", details=details, settings=settings, out=stream):
        return 1
    try:
        save_image(output_path, result.output)
    except (OSError, ValueError) as e:
        # ValueError: Pillow cannot infer a format from the output extension.
        print(f"Error writing output image: {output_path} ({e})", file=sys.stderr)
        return 1
    print(f"Blurred image saved to: {output_path}", file=stream)

    print_profile(result, title="BLUR PROFILING RESULTS", details=details, out=stream)
    return 0
