from __future__ import annotations

from typing import Any

import attrs
import pyopencl as cl
import pytest


@attrs.define
class FakeDevice:
    """Stand-in for `pyopencl.Device` (only the attributes the selector reads)."""

    name: str
    vendor: str
    type: int


@attrs.define
class FakePlatform:
    name: str
    vendor: str
    version: str
    devices: list[FakeDevice] = attrs.field(factory=list)

    def get_devices(self) -> list[FakeDevice]:
        return list(self.devices)


class UntouchablePlatforms:
    """Platform layer that fails the test if anything enumerates it."""

    def __iter__(self) -> Any:
        raise AssertionError("platform layer must not be queried")


@pytest.fixture
def gpu_only_platforms() -> list[FakePlatform]:
    return [
        FakePlatform(
            name="NVIDIA CUDA",
            vendor="NVIDIA Corporation",
            version="OpenCL 3.0 CUDA",
            devices=[FakeDevice(name="Test GPU", vendor="NVIDIA Corporation", type=cl.device_type.GPU)],
        )
    ]


@pytest.fixture
def mixed_platforms() -> list[FakePlatform]:
    return [
        FakePlatform(
            name="Portable Computing Language",
            vendor="The pocl project",
            version="OpenCL 3.0 PoCL",
            devices=[FakeDevice(name="pthread-cpu", vendor="GenuineIntel", type=cl.device_type.CPU)],
        ),
        FakePlatform(
            name="Acme Accel",
            vendor="Acme",
            version="OpenCL 1.2",
            devices=[
                FakeDevice(name="Acme FPGA", vendor="Acme", type=cl.device_type.ACCELERATOR),
                FakeDevice(name="Acme GPU", vendor="Acme", type=cl.device_type.GPU),
                FakeDevice(name="Acme GPU 2", vendor="Acme", type=cl.device_type.GPU),
            ],
        ),
    ]


@pytest.fixture
def untouchable_platforms() -> UntouchablePlatforms:
    return UntouchablePlatforms()
