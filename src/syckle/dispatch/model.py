from __future__ import annotations

from typing import Any, Literal

import attrs
import numpy as np

from .errors import InvalidInputError, SizeMismatchError

DeviceType = Literal["cpu", "gpu", "accelerator", "other"]
AccessMode = Literal["read", "write"]
QueueState = Literal["uninitialized", "bound", "submitted", "completed", "failed"]

VECTOR_DTYPE = np.int32
PIXEL_DTYPE = np.uint8


@attrs.define(frozen=True, slots=True)
class Device:
    name: str
    vendor: str
    device_type: DeviceType
    backend: str
    platform: str
    handle: Any = attrs.field(default=None, eq=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "vendor": self.vendor,
            "device_type": self.device_type,
            "backend": self.backend,
            "platform": self.platform,
        }


@attrs.define(frozen=True, slots=True)
class Platform:
    name: str
    vendor: str
    version: str
    devices: tuple[Device, ...] = ()


@attrs.define(frozen=True, slots=True)
class ProfilingSample:
    """One dual-clock measurement, both durations in nanoseconds."""

    wall_ns: int
    device_ns: int

    def __attrs_post_init__(self) -> None:
        if self.wall_ns < 0 or self.device_ns < 0:
            raise ValueError(f"Durations must be non-negative: {self}")
        if self.device_ns > self.wall_ns:
            raise ValueError(f"device_ns ({self.device_ns}) exceeds wall_ns ({self.wall_ns})")

    @property
    def wall_us(self) -> int:
        return self.wall_ns // 1_000

    @property
    def wall_ms(self) -> int:
        return self.wall_ns // 1_000_000

    @property
    def device_us(self) -> int:
        return self.device_ns // 1_000

    @property
    def device_ms(self) -> int:
        return self.device_ns // 1_000_000

    def to_dict(self) -> dict[str, Any]:
        return {
            "wall": {"ns": self.wall_ns, "us": self.wall_us, "ms": self.wall_ms},
            "device": {"ns": self.device_ns, "us": self.device_us, "ms": self.device_ms},
        }


def _as_vector(values: Any, name: str) -> np.ndarray:
    arr = np.asarray(values)
    if arr.ndim != 1:
        raise InvalidInputError(f"Vector {name} must be one-dimensional, got shape {arr.shape}")
    if arr.size and not np.issubdtype(arr.dtype, np.integer):
        raise InvalidInputError(f"Vector {name} must hold integers, got dtype {arr.dtype}")
    info = np.iinfo(VECTOR_DTYPE)
    if arr.size and (arr.min() < info.min or arr.max() > info.max):
        raise InvalidInputError(f"Vector {name} has values outside the int32 range")
    return np.ascontiguousarray(arr, dtype=VECTOR_DTYPE)


@attrs.define(frozen=True, slots=True, eq=False)
class VectorAddJob:
    a: np.ndarray
    b: np.ndarray
    c: np.ndarray

    kind = "vector_add"

    @staticmethod
    def create(a: Any, b: Any) -> "VectorAddJob":
        """Validate inputs and allocate the output vector."""
        a_arr = _as_vector(a, "a")
        b_arr = _as_vector(b, "b")
        if a_arr.shape != b_arr.shape:
            raise SizeMismatchError(f"Vectors must be of the same size! (a: {a_arr.size}, b: {b_arr.size})")
        if a_arr.size == 0:
            raise InvalidInputError("Vectors must not be empty")
        return VectorAddJob(a=a_arr, b=b_arr, c=np.zeros_like(a_arr))

    @property
    def size(self) -> int:
        return int(self.a.size)


@attrs.define(frozen=True, slots=True, eq=False)
class BlurJob:
    """Box blur of a `height x width x channels` uint8 image."""

    input: np.ndarray
    output: np.ndarray
    radius: int

    kind = "blur"

    @staticmethod
    def create(image: Any, radius: int) -> "BlurJob":
        arr = np.asarray(image)
        if arr.ndim == 2:
            arr = arr[:, :, np.newaxis]
        if arr.ndim != 3:
            raise InvalidInputError(f"Image must be HxW or HxWxC, got shape {arr.shape}")
        if arr.dtype != PIXEL_DTYPE:
            raise InvalidInputError(f"Image must be uint8, got dtype {arr.dtype}")
        if 0 in arr.shape:
            raise InvalidInputError(f"Image must not be empty, got shape {arr.shape}")
        if radius < 0:
            raise InvalidInputError(f"Blur radius must be >= 0, got {radius}")
        arr = np.ascontiguousarray(arr)
        return BlurJob(input=arr, output=np.zeros_like(arr), radius=int(radius))

    @property
    def height(self) -> int:
        return int(self.input.shape[0])

    @property
    def width(self) -> int:
        return int(self.input.shape[1])

    @property
    def channels(self) -> int:
        return int(self.input.shape[2])


KernelJob = VectorAddJob | BlurJob
