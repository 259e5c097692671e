"""
Profiling utilities for dispatched kernel jobs.

This package captures one dual-clock sample per job (host wall time vs. device
execution time), renders it as text, and optionally writes it into a
deterministic on-disk layout (`profile.json` + `README.md`) for later analysis.
"""
