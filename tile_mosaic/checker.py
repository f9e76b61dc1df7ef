"""Cross-check a strategy against the serial reference, stage by stage."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from tile_mosaic.engine import MosaicEngine, PipelineResult
from tile_mosaic.strategy_base import MosaicStrategy
from tile_mosaic.strategy_serial import SerialStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorrectnessReport:
    """Mismatch counts per pipeline output (0 everywhere = identical)."""

    tile_sum: int
    tile_average: int
    global_average: int
    mosaic: int

    @property
    def ok(self) -> bool:
        return not (self.tile_sum or self.tile_average or self.global_average or self.mosaic)

    def as_dict(self) -> dict[str, int]:
        return {
            "tile_sum": self.tile_sum,
            "tile_average": self.tile_average,
            "global_average": self.global_average,
            "mosaic": self.mosaic,
        }


def count_mismatches(a: np.ndarray, b: np.ndarray) -> int:
    """Unequal elements when *a* and *b* are zipped position-wise.

    Like ``zip``, trailing elements of the longer buffer are ignored.
    """
    a = np.asarray(a).reshape(-1)
    b = np.asarray(b).reshape(-1)
    n = min(len(a), len(b))
    return int(np.count_nonzero(a[:n] != b[:n]))


def check_correctness(
    engine: MosaicEngine,
    candidate: MosaicStrategy,
    *,
    isolated_stages: bool = False,
) -> CorrectnessReport:
    """Compare *candidate* against :class:`SerialStrategy` on *engine*.

    Args:
        engine:          The engine both strategies run on.
        candidate:       Strategy under test.
        isolated_stages: When true, the candidate's average and scatter
            stages receive the reference inputs, so a fault in one stage
            does not show up as mismatches in the stages after it. When
            false the candidate runs its own pipeline end to end.
    """
    reference = engine.run_pipeline(SerialStrategy())

    if isolated_stages:
        tile_sums = candidate.sum_tile_channels(engine)
        tile_averages, global_average = candidate.calc_tile_average(
            engine, reference.tile_sums,
        )
        mosaic = candidate.create_mosaic(engine, reference.tile_averages)
        result = PipelineResult(tile_sums, tile_averages, global_average, mosaic)
    else:
        result = engine.run_pipeline(candidate)

    report = CorrectnessReport(
        tile_sum=count_mismatches(result.tile_sums, reference.tile_sums),
        tile_average=count_mismatches(result.tile_averages, reference.tile_averages),
        global_average=count_mismatches(result.global_average, reference.global_average),
        mosaic=count_mismatches(result.mosaic, reference.mosaic),
    )
    logger.debug("Correctness of %s: %s", candidate.name, report.as_dict())
    return report
