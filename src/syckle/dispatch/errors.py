"""
Failure taxonomy and the error boundary around device work.

Every failure raised while selecting a device, binding buffers, or running a
kernel is classified into a `FailureKind` and returned inside a `JobResult`;
callers check `result.ok` instead of catching device-level exceptions.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Literal

import attrs
import pyopencl as cl

if TYPE_CHECKING:
    from .model import Device, ProfilingSample

logger = logging.getLogger(__name__)

FailureKind = Literal[
    "device_unavailable",
    "io_error",
    "size_mismatch",
    "invalid_input",
    "backend_failure",
    "verification_failure",
    "runtime_failure",
    "unknown_failure",
]


class SyckleError(Exception):
    """Base class for failures the dispatch core knows how to classify."""

    kind: FailureKind = "runtime_failure"


class DeviceUnavailableError(SyckleError):
    kind: FailureKind = "device_unavailable"


class SizeMismatchError(SyckleError):
    kind: FailureKind = "size_mismatch"


class InvalidInputError(SyckleError):
    kind: FailureKind = "invalid_input"


class VerificationError(SyckleError):
    kind: FailureKind = "verification_failure"


class QueueStateError(SyckleError):
    """Raised when a compute queue operation is invoked in the wrong state."""

    kind: FailureKind = "runtime_failure"


@attrs.define(frozen=True, slots=True)
class Failure:
    kind: FailureKind
    message: str
    code: int | None = None


@attrs.define(frozen=True, slots=True)
class JobResult:
    """Outcome of one dispatched operation.

    Exactly one of `output` / `failure` is meaningful: a failed job never
    carries (partial) output.
    """

    output: Any = attrs.field(default=None, eq=False, repr=False)
    sample: ProfilingSample | None = None
    device: Device | None = None
    failure: Failure | None = None
    verified: bool = False

    @property
    def ok(self) -> bool:
        return self.failure is None

    @staticmethod
    def failed(failure: Failure, *, device: Device | None = None) -> "JobResult":
        return JobResult(output=None, sample=None, device=device, failure=failure)


def _cl_error_code(e: cl.Error) -> int | None:
    # pyopencl stores an ErrorRecord as the first argument.
    if e.args and hasattr(e.args[0], "code"):
        try:
            return int(e.args[0].code())
        except Exception:
            return None
    return None


def classify(e: Exception) -> Failure:
    """Map an exception onto the failure taxonomy."""
    if isinstance(e, SyckleError):
        return Failure(kind=e.kind, message=str(e))
    if isinstance(e, cl.Error):
        return Failure(kind="backend_failure", message=str(e), code=_cl_error_code(e))
    if isinstance(e, OSError):
        return Failure(kind="io_error", message=str(e), code=e.errno)
    if isinstance(e, RuntimeError):
        return Failure(kind="runtime_failure", message=str(e))
    return Failure(kind="unknown_failure", message=f"{type(e).__name__}: {e}")


def _log_failure(operation: str, failure: Failure) -> None:
    if failure.kind == "backend_failure":
        logger.error("%s: OpenCL exception: %s (error code: %s)", operation, failure.message, failure.code)
    elif failure.kind == "runtime_failure":
        logger.error("%s: runtime exception: %s", operation, failure.message)
    elif failure.kind == "unknown_failure":
        logger.error("%s: unknown exception occurred: %s", operation, failure.message)
    else:
        logger.error("%s failed (%s): %s", operation, failure.kind, failure.message)


def run_guarded(fn: Callable[[], JobResult], *, operation: str) -> JobResult:
    """Run `fn` and convert any raised exception into a failed `JobResult`."""
    try:
        return fn()
    except Exception as e:
        failure = classify(e)
        _log_failure(operation, failure)
        logger.debug("%s traceback", operation, exc_info=True)
        return JobResult.failed(failure)
