from __future__ import annotations

import numpy as np
import pytest

from syckle.dispatch.errors import InvalidInputError, SizeMismatchError
from syckle.dispatch.model import BlurJob, ProfilingSample, VectorAddJob


def test_vector_job_allocates_int32_output() -> None:
    job = VectorAddJob.create([1, 2, 3], [4, 5, 6])
    assert job.a.dtype == np.int32
    assert job.c.shape == (3,)
    assert job.size == 3
    assert not job.c.any()


def test_vector_job_rejects_mismatched_lengths() -> None:
    with pytest.raises(SizeMismatchError):
        VectorAddJob.create([1, 2], [1, 2, 3])


@pytest.mark.parametrize(
    "a,b",
    [
        ([], []),
        ([1.5], [2.0]),
        ([[1, 2]], [[3, 4]]),
        ([2**31], [0]),
    ],
)
def test_vector_job_rejects_invalid_input(a, b) -> None:
    with pytest.raises(InvalidInputError):
        VectorAddJob.create(a, b)


def test_blur_job_promotes_grayscale_to_single_channel() -> None:
    job = BlurJob.create(np.zeros((4, 5), dtype=np.uint8), 1)
    assert (job.height, job.width, job.channels) == (4, 5, 1)
    assert job.output.shape == job.input.shape


@pytest.mark.parametrize(
    "image,radius",
    [
        (np.zeros((0, 3, 3), dtype=np.uint8), 1),
        (np.zeros((3, 3, 3), dtype=np.float32), 1),
        (np.zeros((3,), dtype=np.uint8), 1),
        (np.zeros((3, 3, 3), dtype=np.uint8), -1),
    ],
)
def test_blur_job_rejects_invalid_input(image: np.ndarray, radius: int) -> None:
    with pytest.raises(InvalidInputError):
        BlurJob.create(image, radius)


def test_profiling_sample_unit_views_truncate() -> None:
    s = ProfilingSample(wall_ns=2_345_678, device_ns=1_999_999)
    assert (s.wall_us, s.wall_ms) == (2_345, 2)
    assert (s.device_us, s.device_ms) == (1_999, 1)
    assert s.to_dict()["device"] == {"ns": 1_999_999, "us": 1_999, "ms": 1}


def test_profiling_sample_rejects_device_longer_than_wall() -> None:
    with pytest.raises(ValueError):
        ProfilingSample(wall_ns=10, device_ns=11)
