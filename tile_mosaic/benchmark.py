"""Per-stage wall-clock timing of a strategy."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from tile_mosaic.engine import MosaicEngine
from tile_mosaic.strategy_base import MosaicStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BenchmarkReport:
    """Mean duration of each stage, in nanoseconds."""

    strategy: str
    runs: int
    sum_ns: int
    average_ns: int
    mosaic_ns: int

    @property
    def total_ns(self) -> int:
        return self.sum_ns + self.average_ns + self.mosaic_ns

    @property
    def sum_s(self) -> float:
        return self.sum_ns / 1e9

    @property
    def average_s(self) -> float:
        return self.average_ns / 1e9

    @property
    def mosaic_s(self) -> float:
        return self.mosaic_ns / 1e9

    @property
    def total_s(self) -> float:
        return self.total_ns / 1e9


def run_benchmark(
    engine: MosaicEngine,
    strategy: MosaicStrategy,
    runs: int,
) -> BenchmarkReport:
    """Run each stage of *strategy* *runs* times and average the timings.

    Outputs are not validated here; see :func:`tile_mosaic.checker.check_correctness`.

    Raises:
        ValueError: *runs* is not positive.
    """
    if runs <= 0:
        raise ValueError(f"Benchmark runs must be positive, got {runs}")

    sum_ns = average_ns = mosaic_ns = 0
    logger.info("Benchmarking %s over %d runs ...", strategy.name, runs)

    for _ in range(runs):
        t0 = time.perf_counter_ns()
        tile_sums = strategy.sum_tile_channels(engine)
        sum_ns += time.perf_counter_ns() - t0

        t0 = time.perf_counter_ns()
        tile_averages, _ = strategy.calc_tile_average(engine, tile_sums)
        average_ns += time.perf_counter_ns() - t0

        t0 = time.perf_counter_ns()
        strategy.create_mosaic(engine, tile_averages)
        mosaic_ns += time.perf_counter_ns() - t0

    return BenchmarkReport(
        strategy=strategy.name,
        runs=runs,
        sum_ns=sum_ns // runs,
        average_ns=average_ns // runs,
        mosaic_ns=mosaic_ns // runs,
    )
