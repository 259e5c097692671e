from __future__ import annotations

import os
from typing import Literal, cast

import attrs

DevicePreference = Literal["auto", "gpu", "cpu", "accelerator"]

DEVICE_PREFERENCES: tuple[str, ...] = ("auto", "gpu", "cpu", "accelerator")
DEFAULT_DEVICE: DevicePreference = "gpu"
DEVICE_ENV_VAR = "SYCKLE_DEVICE"

# Blur radius accepted at the CLI. The kernel itself accepts any radius >= 0.
RADIUS_MIN = 1
RADIUS_MAX = 20
DEFAULT_RADIUS = 2

DEFAULT_VECTOR_OUTPUT = "output_vector.txt"
DEFAULT_BLUR_OUTPUT = "output_blurred.png"
DEFAULT_NN_OUTPUT = "nn_output.txt"

NN_FRAMEWORKS: tuple[str, ...] = ("custom", "onnx", "tensorflow")
NN_BATCH_MIN = 1
NN_BATCH_MAX = 1024

PROFILE_JSON_NAME = "profile.json"
PROFILE_README_NAME = "README"


@attrs.define(frozen=True, slots=True)
class RunSettings:
    """Options shared by every dispatching subcommand."""

    device: DevicePreference = DEFAULT_DEVICE
    verify: bool = False
    profile_out: str | None = None


def normalize_device_preference(token: str) -> DevicePreference:
    s = token.strip().lower()
    if s not in DEVICE_PREFERENCES:
        raise ValueError(f"Unknown device preference {token!r}. Known: {list(DEVICE_PREFERENCES)}")
    return cast(DevicePreference, s)


def default_device_preference() -> DevicePreference:
    """Return the default device preference, honoring `SYCKLE_DEVICE` when set."""
    env = os.environ.get(DEVICE_ENV_VAR)
    if env:
        return normalize_device_preference(env)
    return DEFAULT_DEVICE
