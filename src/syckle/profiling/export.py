"""
Profiling record export.

A dispatched job can write its sample into a user-specified directory:

`<out_dir>/profile.json` — machine-readable record validated against the
packaged JSON schema

`<out_dir>/README.md` — short human-readable summary
"""

from __future__ import annotations

import json
import platform
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator
from mdutils.mdutils import MdUtils  # type: ignore[import-untyped]

from ..config import PROFILE_JSON_NAME, PROFILE_README_NAME
from ..dispatch.model import Device, ProfilingSample

SCHEMA_VERSION = "0.1.0"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _default_schema_path() -> Path:
    return Path(__file__).resolve().parent / "schemas" / "profile.schema.json"


def build_profile_record(
    *,
    operation: str,
    device: Device,
    sample: ProfilingSample,
    details: dict[str, Any],
    verified: bool | None = None,
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "operation": operation,
        "timestamp_utc": _utc_now_iso(),
        "host": {"platform": platform.platform(), "machine": platform.machine()},
        "device": device.to_dict(),
        "timing": sample.to_dict(),
        "details": dict(details),
    }
    if verified is not None:
        record["verified"] = verified
    return record


def validate_profile_record(record: dict[str, Any], *, schema_path: Path | None = None) -> None:
    schema_path = _default_schema_path() if schema_path is None else schema_path
    schema = json.loads(schema_path.read_text())
    Draft202012Validator(schema).validate(record)


def _write_json(path: Path, obj: Any) -> None:
    path.write_text(json.dumps(obj, indent=2, sort_keys=True) + "\n")


def _write_readme(out_dir: Path, record: dict[str, Any]) -> Path:
    dev = record["device"]
    timing = record["timing"]
    md = MdUtils(file_name=str(out_dir / PROFILE_README_NAME), title=f"Profiling: {record['operation']}")
    md.new_paragraph(f"Captured at `{record['timestamp_utc']}` on `{dev['name']}` ({dev['device_type']}, {dev['backend']}).")
    md.new_header(level=1, title="Timing")
    md.new_list(
        [
            f"Wall clock (host + device + transfers): {timing['wall']['ns']} ns / {timing['wall']['ms']} ms",
            f"Device execution (kernel only): {timing['device']['ns']} ns / {timing['device']['ms']} ms",
        ]
    )
    md.new_header(level=1, title="Details")
    md.new_list([f"{k}: `{v}`" for k, v in sorted(record["details"].items())])
    md.new_header(level=1, title="Outputs")
    md.new_list([f"`{PROFILE_JSON_NAME}`: profiling record (JSON)"])
    md.create_md_file()
    return out_dir / f"{PROFILE_README_NAME}.md"


def write_profile(out_dir: Path, record: dict[str, Any]) -> Path:
    """Validate and write `record` under `out_dir`; return the JSON path.

    Refuses to overwrite an existing `profile.json`.
    """
    validate_profile_record(record)
    out_dir.mkdir(parents=True, exist_ok=True)
    json_path = out_dir / PROFILE_JSON_NAME
    if json_path.exists():
        raise FileExistsError(f"Refusing to overwrite existing profile: {json_path}")
    _write_json(json_path, record)
    _write_readme(out_dir, record)
    return json_path
