from __future__ import annotations

import io
from pathlib import Path

import numpy as np
import pytest

from syckle.config import RunSettings
from syckle.dispatch.devices import list_devices, resolve_device
from syckle.dispatch.errors import QueueStateError
from syckle.dispatch.kernels import VECTOR_ADD_SOURCE, dispatch, reference_box_blur
from syckle.dispatch.model import BlurJob, VectorAddJob
from syckle.dispatch.queue import ComputeQueue
from syckle.dispatch.runner import run_box_blur, run_vector_add
from syckle.operations.vector import vector_run

pytestmark = pytest.mark.integration


@pytest.fixture(scope="module", autouse=True)
def _require_opencl_device() -> None:
    if not list_devices():
        pytest.skip("requires an OpenCL platform with at least one device")


def test_vector_add_on_device() -> None:
    result = run_vector_add([1, 2, 3], [4, 5, 6], device="auto", out=io.StringIO(), verify_output=True)
    assert result.ok, result.failure
    assert result.output.tolist() == [5, 7, 9]
    assert 0 <= result.sample.device_ns <= result.sample.wall_ns


def test_uniform_image_blur_on_device() -> None:
    img = np.full((3, 3, 1), 100, dtype=np.uint8)
    result = run_box_blur(img, 1, device="auto", out=io.StringIO())
    assert result.ok, result.failure
    assert np.array_equal(result.output, img)


@pytest.mark.parametrize("radius", [0, 1, 4])
def test_blur_matches_host_reference(radius: int) -> None:
    img = np.random.default_rng(radius).integers(0, 256, size=(17, 23, 3), dtype=np.uint8)
    result = run_box_blur(img, radius, device="auto", out=io.StringIO())
    assert result.ok, result.failure
    assert result.output.shape == img.shape
    assert np.array_equal(result.output, reference_box_blur(img, radius))


def test_queue_accepts_one_job_per_lifetime() -> None:
    dev = resolve_device("auto", out=io.StringIO())
    with ComputeQueue(dev) as queue:
        assert queue.state == "bound"
        assert queue.profiling_enabled
        dispatch(queue, VectorAddJob.create([1], [2]))
        assert queue.state == "completed"
        with pytest.raises(QueueStateError):
            queue.build(VECTOR_ADD_SOURCE)
        with pytest.raises(QueueStateError):
            dispatch(queue, BlurJob.create(np.zeros((2, 2, 1), dtype=np.uint8), 1))


def test_bind_rejects_shape_mismatch() -> None:
    dev = resolve_device("auto", out=io.StringIO())
    with ComputeQueue(dev) as queue:
        with pytest.raises(Exception, match="does not match kernel range"):
            queue.bind(np.zeros(4, dtype=np.int32), access="read", shape=(5,))


def test_vector_run_writes_output(tmp_path: Path) -> None:
    inp = tmp_path / "in.txt"
    inp.write_text("1 2 3\n4 5 6\n")
    out_path = tmp_path / "out.txt"
    rc = vector_run(input_path=inp, output_path=out_path, settings=RunSettings(device="auto", verify=True), out=io.StringIO())
    assert rc == 0
    assert out_path.read_text() == "5 7 9\n"
