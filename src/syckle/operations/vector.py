from __future__ import annotations

import sys
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any, TextIO

import numpy as np

from ..config import RunSettings
from ..dispatch.errors import InvalidInputError
from ..dispatch.runner import run_vector_add
from .reporting import check_profile_out, export_profile, print_profile


def parse_vector_line(line: str, *, name: str) -> list[int]:
    values: list[int] = []
    for tok in line.split():
        try:
            values.append(int(tok))
        except ValueError:
            raise InvalidInputError(f"Vector {name}: not an integer: {tok!r}") from None
    return values


def read_vectors(path: Path) -> tuple[list[int], list[int]]:
    """Read vectors `a` and `b` from the first two lines of `path`."""
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except UnicodeDecodeError as e:
        raise InvalidInputError(f"Input file {path} is not valid UTF-8 text ({e.reason} at byte {e.start})") from None
    if len(lines) < 2:
        raise InvalidInputError(f"Expected two lines (vectors a and b) in {path}, got {len(lines)}")
    return parse_vector_line(lines[0], name="a"), parse_vector_line(lines[1], name="b")


def format_vector(values: Iterable[int]) -> str:
    return " ".join(str(int(v)) for v in values)


def write_vector(path: Path, values: Sequence[int] | np.ndarray) -> None:
    path.write_text(format_vector(values) + "\n")


def vector_run(
    *,
    input_path: Path,
    output_path: Path,
    settings: RunSettings,
    platforms: Iterable[Any] | None = None,
    out: TextIO | None = None,
) -> int:
    """Add the two vectors in `input_path` and write the sum to `output_path`.

    The output file is only created when the whole job succeeded.
    """
    stream = sys.stdout if out is None else out
    if not check_profile_out(settings):
        return 1

    try:
        a, b = read_vectors(input_path)
    except OSError as e:
        print(f"Error opening input file: {input_path} ({e})", file=sys.stderr)
        return 1
    except InvalidInputError as e:
        print(str(e), file=sys.stderr)
        return 1

    print(f"Vector a: {format_vector(a)}", file=stream)
    print(f"Vector b: {format_vector(b)}", file=stream)

    result = run_vector_add(a, b, device=settings.device, platforms=platforms, out=stream, verify_output=settings.verify)
    if result.failure is not None:
        print(f"Vector operation failed ({result.failure.kind}): {result.failure.message}", file=sys.stderr)
        return 1

    print(f"Result vector c: {format_vector(result.output)}", file=stream)
    details = {"Vector Size": f"{len(a)} elements", "Output": str(output_path)}
    if not export_profile(result, operation="vector_add", details=details, settings=settings, out=stream):
        return 1
    try:
        write_vector(output_path, result.output)
    except OSError as e:
        print(f"Error opening output file: {output_path} ({e})", file=sys.stderr)
        return 1

    print_profile(result, title="PROFILING RESULTS", details=details, out=stream)
    return 0
