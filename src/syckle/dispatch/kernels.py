from __future__ import annotations

import logging

import numpy as np

from ..profiling.recorder import ProfilingRecorder
from .errors import VerificationError
from .model import BlurJob, KernelJob, ProfilingSample, VectorAddJob
from .queue import ComputeQueue

logger = logging.getLogger(__name__)

VECTOR_ADD_SOURCE = r"""
__kernel void vector_add(__global const int *a,
                         __global const int *b,
                         __global int *c)
{
    const size_t i = get_global_id(0);
    c[i] = a[i] + b[i];
}
"""

# Buffers are laid out as [height][width * channels] (row-major, interleaved channels).
BOX_BLUR_SOURCE = r"""
__kernel void box_blur(__global const uchar *src,
                       __global uchar *dst,
                       const int height,
                       const int width,
                       const int channels,
                       const int radius)
{
    const int y = (int)get_global_id(0);
    const int x = (int)get_global_id(1);
    const int row_pitch = width * channels;

    for (int c = 0; c < channels; ++c) {
        uint sum = 0;
        uint count = 0;
        for (int dy = -radius; dy <= radius; ++dy) {
            const int ny = y + dy;
            if (ny < 0 || ny >= height) {
                continue;
            }
            for (int dx = -radius; dx <= radius; ++dx) {
                const int nx = x + dx;
                if (nx < 0 || nx >= width) {
                    continue;
                }
                sum += src[ny * row_pitch + nx * channels + c];
                ++count;
            }
        }
        const int idx = y * row_pitch + x * channels + c;
        dst[idx] = count > 0 ? (uchar)(sum / count) : src[idx];
    }
}
"""


def reference_vector_add(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Host reference for the vector-add kernel (int32, wrapping on overflow)."""
    return np.add(a.astype(np.int32), b.astype(np.int32), dtype=np.int32)


def reference_box_blur(image: np.ndarray, radius: int) -> np.ndarray:
    """Host reference for the box-blur kernel.

    Uses a summed-area table so every pixel averages exactly the in-bounds
    window `[y-r, y+r] x [x-r, x+r]`, with the divisor shrinking near edges.
    """
    img = image if image.ndim == 3 else image[:, :, np.newaxis]
    h, w, _ = img.shape
    if radius <= 0:
        return img.copy()
    sat = np.zeros((h + 1, w + 1, img.shape[2]), dtype=np.int64)
    sat[1:, 1:, :] = img.astype(np.int64).cumsum(axis=0).cumsum(axis=1)

    ys = np.arange(h)
    xs = np.arange(w)
    y0 = np.clip(ys - radius, 0, h)[:, None]
    y1 = np.clip(ys + radius + 1, 0, h)[:, None]
    x0 = np.clip(xs - radius, 0, w)[None, :]
    x1 = np.clip(xs + radius + 1, 0, w)[None, :]

    total = sat[y1, x1] - sat[y0, x1] - sat[y1, x0] + sat[y0, x0]
    count = ((y1 - y0) * (x1 - x0))[:, :, None]
    return (total // count).astype(np.uint8)


def _dispatch_vector_add(queue: ComputeQueue, job: VectorAddJob, recorder: ProfilingRecorder) -> ProfilingSample:
    program = queue.build(VECTOR_ADD_SOURCE)
    rng = (job.size,)
    with recorder.measure():
        a_buf = queue.bind(job.a, access="read", shape=rng)
        b_buf = queue.bind(job.b, access="read", shape=rng)
        c_buf = queue.bind(job.c, access="write", shape=rng)
        event = queue.submit(program.vector_add, rng, a_buf, b_buf, c_buf)
        queue.wait(event)
    sample = recorder.sample(event)
    queue.stage_out(c_buf)
    return sample


def _dispatch_blur(queue: ComputeQueue, job: BlurJob, recorder: ProfilingRecorder) -> ProfilingSample:
    program = queue.build(BOX_BLUR_SOURCE)
    h, w, ch = job.height, job.width, job.channels
    # 2D staging view [rows][columns * channels]; shares memory with the job arrays.
    src = job.input.reshape(h, w * ch)
    dst = job.output.reshape(h, w * ch)
    with recorder.measure():
        in_buf = queue.bind(src, access="read", shape=(h, w * ch))
        out_buf = queue.bind(dst, access="write", shape=(h, w * ch))
        event = queue.submit(
            program.box_blur,
            (h, w),
            in_buf,
            out_buf,
            np.int32(h),
            np.int32(w),
            np.int32(ch),
            np.int32(job.radius),
        )
        queue.wait(event)
    sample = recorder.sample(event)
    queue.stage_out(out_buf)
    return sample


def dispatch(queue: ComputeQueue, job: KernelJob, *, recorder: ProfilingRecorder | None = None) -> ProfilingSample:
    """Run one job on `queue`, blocking until its output is back in host memory."""
    recorder = ProfilingRecorder() if recorder is None else recorder
    if isinstance(job, VectorAddJob):
        return _dispatch_vector_add(queue, job, recorder)
    if isinstance(job, BlurJob):
        return _dispatch_blur(queue, job, recorder)
    raise TypeError(f"Unsupported kernel job: {type(job).__name__}")


def verify(job: KernelJob) -> None:
    """Compare a completed job's output with the host reference."""
    if isinstance(job, VectorAddJob):
        expected = reference_vector_add(job.a, job.b)
        actual = job.c
    elif isinstance(job, BlurJob):
        expected = reference_box_blur(job.input, job.radius)
        actual = job.output
    else:
        raise TypeError(f"Unsupported kernel job: {type(job).__name__}")

    mismatches = int(np.count_nonzero(expected != actual))
    if mismatches:
        raise VerificationError(f"{job.kind}: {mismatches} element(s) differ from the host reference")
    logger.info("%s: output matches host reference (%d elements)", job.kind, int(actual.size))
