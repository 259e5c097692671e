from __future__ import annotations

import logging

import pytest

from syckle.dispatch.errors import (
    DeviceUnavailableError,
    JobResult,
    SizeMismatchError,
    classify,
    run_guarded,
)


@pytest.mark.parametrize(
    "exc,kind",
    [
        (SizeMismatchError("a vs b"), "size_mismatch"),
        (DeviceUnavailableError("none"), "device_unavailable"),
        (FileNotFoundError(2, "missing"), "io_error"),
        (RuntimeError("boom"), "runtime_failure"),
        (KeyError("x"), "unknown_failure"),
    ],
)
def test_classify(exc: Exception, kind: str) -> None:
    assert classify(exc).kind == kind


def test_run_guarded_passes_through_success() -> None:
    ok = JobResult(output=[1])
    assert run_guarded(lambda: ok, operation="op") is ok


def test_run_guarded_turns_exceptions_into_failed_results(caplog: pytest.LogCaptureFixture) -> None:
    def _boom() -> JobResult:
        raise RuntimeError("device lost")

    with caplog.at_level(logging.ERROR):
        result = run_guarded(_boom, operation="blur")

    assert not result.ok
    assert result.output is None
    assert result.failure is not None
    assert result.failure.kind == "runtime_failure"
    assert "blur: runtime exception: device lost" in caplog.text
