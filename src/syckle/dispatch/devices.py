from __future__ import annotations

import logging
import sys
from collections.abc import Iterable, Sequence
from typing import Any, TextIO

import pyopencl as cl

from .errors import DeviceUnavailableError
from .model import Device, DeviceType, Platform

logger = logging.getLogger(__name__)

BACKEND_NAME = "OpenCL"

# Ranking used by the best-available policy (higher wins, ties keep platform order).
_TYPE_SCORE: dict[DeviceType, int] = {"gpu": 3, "accelerator": 2, "cpu": 1, "other": 0}

# Preferences that ask for the first device of one concrete type.
_TYPED_PREFERENCES: dict[str, DeviceType] = {"gpu": "gpu", "cpu": "cpu"}


def classify_device_type(type_bits: int) -> DeviceType:
    """Map an OpenCL `device_type` bitfield onto the device-type classification."""
    if type_bits & cl.device_type.GPU:
        return "gpu"
    if type_bits & cl.device_type.CPU:
        return "cpu"
    if type_bits & cl.device_type.ACCELERATOR:
        return "accelerator"
    return "other"


def _native_platforms() -> list[Any]:
    try:
        return list(cl.get_platforms())
    except cl.Error as e:
        # No ICD loader / no installed platform.
        logger.debug("OpenCL platform query failed: %s", e)
        return []


def _describe(platform: Any, dev: Any) -> Device:
    return Device(
        name=str(dev.name).strip(),
        vendor=str(dev.vendor).strip(),
        device_type=classify_device_type(int(dev.type)),
        backend=BACKEND_NAME,
        platform=str(platform.name).strip(),
        handle=dev,
    )


def enumerate_platforms(platforms: Iterable[Any] | None = None) -> list[Platform]:
    """Return every platform with its devices as immutable descriptors.

    `platforms` defaults to `pyopencl.get_platforms()`; tests pass stand-ins
    exposing the same attributes.
    """
    raw = _native_platforms() if platforms is None else list(platforms)
    out: list[Platform] = []
    for plat in raw:
        try:
            devs = list(plat.get_devices())
        except cl.Error as e:
            logger.warning("Failed to query devices of platform %r: %s", getattr(plat, "name", "?"), e)
            devs = []
        out.append(
            Platform(
                name=str(plat.name).strip(),
                vendor=str(plat.vendor).strip(),
                version=str(plat.version).strip(),
                devices=tuple(_describe(plat, d) for d in devs),
            )
        )
    return out


def list_devices(platforms: Iterable[Any] | None = None) -> list[Device]:
    return [d for p in enumerate_platforms(platforms) for d in p.devices]


def best_available(devices: Sequence[Device]) -> Device:
    if not devices:
        raise DeviceUnavailableError("No OpenCL device available on any platform")
    best = devices[0]
    for d in devices[1:]:
        if _TYPE_SCORE[d.device_type] > _TYPE_SCORE[best.device_type]:
            best = d
    return best


def select_device(preference: str, devices: Sequence[Device]) -> Device:
    """Pick a device for `preference` from an already-enumerated device list.

    `gpu`/`cpu` pick the first device of that type and fall back to the
    best-available device when none exists. Every other token (including
    `auto` and `accelerator`) goes straight to the best-available policy.
    """
    wanted = _TYPED_PREFERENCES.get(preference.strip().lower())
    if wanted is not None:
        for d in devices:
            if d.device_type == wanted:
                return d
        fallback = best_available(devices)
        logger.warning("No %s device found; falling back to default device %r", wanted.upper(), fallback.name)
        return fallback
    return best_available(devices)


def resolve_device(
    preference: str,
    *,
    platforms: Iterable[Any] | None = None,
    out: TextIO | None = None,
) -> Device:
    """Resolve a preference token to a concrete device and announce it."""
    device = select_device(preference, list_devices(platforms))
    stream = sys.stdout if out is None else out
    print(f"Using Device: {device.name}", file=stream)
    logger.debug("Resolved preference %r to %s", preference, device)
    return device
