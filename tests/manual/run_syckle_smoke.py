from __future__ import annotations

import subprocess
import sys
import tempfile
from pathlib import Path

import numpy as np
from PIL import Image

from syckle.dispatch.devices import list_devices


def main() -> int:
    if not list_devices():
        print("Skipping: no OpenCL device available")
        return 0

    with tempfile.TemporaryDirectory(prefix="syckle-smoke-") as d:
        tmp = Path(d)
        vec_in = tmp / "vectors.txt"
        vec_in.write_text("1 2 3\n4 5 6\n")
        img_in = tmp / "noise.png"
        Image.fromarray(np.random.default_rng(0).integers(0, 256, size=(64, 96, 3), dtype=np.uint8)).save(img_in)

        cmds = [
            [sys.executable, "-m", "syckle", "ls"],
            [sys.executable, "-m", "syckle", "-d", "auto", "--verify", "--profile-out", str(tmp / "prof_vec"),
             "vector", "-i", str(vec_in), "-o", str(tmp / "sum.txt")],
            [sys.executable, "-m", "syckle", "-d", "auto", "--verify", "--profile-out", str(tmp / "prof_blur"),
             "blur", "-i", str(img_in), "-o", str(tmp / "blurred.png"), "-r", "3"],
        ]
        for cmd in cmds:
            rc = subprocess.call(cmd)
            if rc != 0:
                print(f"FAILED ({rc}): {' '.join(cmd)}")
                return rc
        print(f"Sum: {(tmp / 'sum.txt').read_text().strip()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
