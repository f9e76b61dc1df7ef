"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MosaicConfig:
    """All tuneable parameters for a mosaic run.

    Attributes:
        tile_side:       Side length of a square tile in pixels.
        algorithm:       "serial", "parallel" or "slow_parallel".
        benchmark_runs:  Iterations per stage when benchmarking (0 = off).
        compare_runs:    Iterations per stage for the ``compare`` command.
        isolated_stages: Feed reference stage outputs into the candidate
                         when checking correctness.
    """

    # Tiling
    tile_side: int = 32

    # Strategy
    algorithm: str = "serial"  # "serial" | "parallel" | "slow_parallel"

    # Verification / timing
    benchmark_runs: int = 0
    compare_runs: int = 5
    isolated_stages: bool = False

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp", ".gif"}
    )
