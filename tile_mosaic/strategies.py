"""The closed set of execution strategies, selectable by name."""

from __future__ import annotations

from enum import Enum

from tile_mosaic.strategy_base import MosaicStrategy
from tile_mosaic.strategy_locked import LockedParallelStrategy
from tile_mosaic.strategy_parallel import DisjointParallelStrategy
from tile_mosaic.strategy_serial import SerialStrategy


class Algorithm(str, Enum):
    SERIAL = "serial"
    PARALLEL = "parallel"
    SLOW_PARALLEL = "slow_parallel"


STRATEGIES: dict[Algorithm, type[MosaicStrategy]] = {
    Algorithm.SERIAL: SerialStrategy,
    Algorithm.PARALLEL: DisjointParallelStrategy,
    Algorithm.SLOW_PARALLEL: LockedParallelStrategy,
}


def get_strategy(algorithm: Algorithm | str) -> MosaicStrategy:
    """Instantiate the strategy for *algorithm*.

    Raises:
        ValueError: *algorithm* names no known strategy.
    """
    try:
        key = Algorithm(algorithm)
    except ValueError:
        valid = ", ".join(a.value for a in Algorithm)
        raise ValueError(f"Unknown algorithm {algorithm!r}; choose from {valid}") from None
    return STRATEGIES[key]()
