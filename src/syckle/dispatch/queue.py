"""
Profiling-enabled compute queue and host/device buffer staging.

A `ComputeQueue` is bound to one device for its lifetime and accepts exactly one
kernel job. Data movement is explicit:

- `bind()` stages a host array in (read) or allocates device storage (write)
- `submit()` enqueues the kernel, `wait()` blocks until the device is done
- `stage_out()` copies a write buffer back into its host array
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import attrs
import numpy as np
import pyopencl as cl

from .errors import InvalidInputError, QueueStateError
from .model import AccessMode, Device, QueueState

logger = logging.getLogger(__name__)


@attrs.define(slots=True, eq=False)
class HostDeviceBuffer:
    host: np.ndarray
    access: AccessMode
    device_buffer: Any = attrs.field(default=None, repr=False)
    released: bool = False

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(self.host.shape)

    @property
    def nbytes(self) -> int:
        return int(self.host.nbytes)

    def release(self) -> None:
        if self.released:
            return
        if self.device_buffer is not None:
            self.device_buffer.release()
        self.device_buffer = None
        self.released = True


class ComputeQueue:
    """Execution context bound to a single device, one job per lifetime."""

    def __init__(self, device: Device) -> None:
        if device.handle is None:
            raise QueueStateError(f"Device {device.name!r} has no native handle")
        self.device = device
        self._state: QueueState = "uninitialized"
        self._buffers: list[HostDeviceBuffer] = []
        self.context = cl.Context([device.handle])
        self.queue = cl.CommandQueue(
            self.context,
            device.handle,
            properties=cl.command_queue_properties.PROFILING_ENABLE,
        )
        self._state = "bound"

    @property
    def state(self) -> QueueState:
        return self._state

    @property
    def profiling_enabled(self) -> bool:
        return bool(self.queue.properties & cl.command_queue_properties.PROFILING_ENABLE)

    def _require(self, *states: QueueState) -> None:
        if self._state not in states:
            raise QueueStateError(f"Queue is {self._state!r}; expected one of {list(states)}")

    def bind(self, host: np.ndarray, *, access: AccessMode, shape: tuple[int, ...] | None = None) -> HostDeviceBuffer:
        """Bind a contiguous host array to a device buffer.

        `shape` is the kernel's iteration range for this buffer; it must match
        the host array exactly.
        """
        self._require("bound")
        if not host.flags["C_CONTIGUOUS"]:
            raise InvalidInputError("Host array must be C-contiguous")
        if shape is not None and tuple(host.shape) != tuple(shape):
            raise InvalidInputError(f"Buffer shape {tuple(host.shape)} does not match kernel range {tuple(shape)}")
        if host.nbytes == 0:
            raise InvalidInputError("Cannot bind an empty host array")

        mf = cl.mem_flags
        if access == "read":
            dev_buf = cl.Buffer(self.context, mf.READ_ONLY | mf.COPY_HOST_PTR, hostbuf=host)
        elif access == "write":
            dev_buf = cl.Buffer(self.context, mf.WRITE_ONLY, size=host.nbytes)
        else:
            raise InvalidInputError(f"Unknown access mode: {access!r}")

        buf = HostDeviceBuffer(host=host, access=access, device_buffer=dev_buf)
        self._buffers.append(buf)
        logger.debug("Bound %s buffer shape=%s nbytes=%d", access, buf.shape, buf.nbytes)
        return buf

    def build(self, source: str) -> Any:
        self._require("bound")
        return cl.Program(self.context, source).build()

    def submit(self, kernel: Any, global_size: tuple[int, ...], *args: Any) -> Any:
        """Enqueue `kernel` over `global_size` and return its completion event."""
        self._require("bound")
        self._state = "submitted"
        try:
            native = [a.device_buffer if isinstance(a, HostDeviceBuffer) else a for a in args]
            return kernel(self.queue, global_size, None, *native)
        except Exception:
            self._state = "failed"
            raise

    def wait(self, event: Any) -> None:
        self._require("submitted")
        try:
            event.wait()
        except Exception:
            self._state = "failed"
            raise
        self._state = "completed"

    def stage_out(self, buf: HostDeviceBuffer) -> np.ndarray:
        """Copy a write buffer back into its host array (blocking)."""
        self._require("completed")
        if buf.access != "write":
            raise QueueStateError("Only write buffers are staged out")
        if buf.released:
            raise QueueStateError("Buffer already released")
        cl.enqueue_copy(self.queue, buf.host, buf.device_buffer).wait()
        return buf.host

    def release(self) -> None:
        for buf in self._buffers:
            buf.release()
        self._buffers.clear()
        self.queue.finish()

    def __enter__(self) -> "ComputeQueue":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc is not None:
            self._state = "failed"
        self.release()
