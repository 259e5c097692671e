"""File-level operations behind the CLI subcommands (vector, blur, ls)."""

from __future__ import annotations
