"""Parallel strategy funnelling every write through a shared lock.

Only the outer loop over rows of tiles runs in parallel. All tasks write
into the same buffers, so each update takes the buffer's single lock. This
serialises most of the work and exists to measure what lock contention
costs next to :mod:`tile_mosaic.strategy_parallel`.
"""

from __future__ import annotations

import threading

import numpy as np

from tile_mosaic.engine import MosaicEngine
from tile_mosaic.strategy_base import MosaicStrategy
from tile_mosaic.thread_pool import get_pool


class LockedBuffer:
    """A flat NumPy buffer guarded by one coarse lock."""

    def __init__(self, length: int, dtype: type[np.generic]) -> None:
        self._data = np.zeros(length, dtype=dtype)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._data)

    def add(self, start: int, values: np.ndarray | np.generic) -> None:
        values = np.atleast_1d(values)
        with self._lock:
            self._data[start:start + len(values)] += values

    def put(self, start: int, values: np.ndarray | np.generic) -> None:
        values = np.atleast_1d(values)
        with self._lock:
            self._data[start:start + len(values)] = values

    def to_array(self) -> np.ndarray:
        """Return the guarded array; call once every writer has finished."""
        with self._lock:
            return self._data


class LockedParallelStrategy(MosaicStrategy):
    """Row-of-tiles tasks writing through :class:`LockedBuffer`.

    The lock is taken once per pixel channel when summing, once per tile
    channel when averaging and once per pixel when scattering.
    """

    name = "slow_parallel"

    def sum_tile_channels(self, engine: MosaicEngine) -> np.ndarray:
        shared = LockedBuffer(engine.tile_buffer_length, np.uint32)
        c = engine.channels

        def sum_row(tile_y: int) -> None:
            for tile_x in range(engine.tiles_x):
                start = engine.tile_offset(tile_x, tile_y)
                for pixel_row in engine.tile_block(tile_x, tile_y):
                    for pixel in pixel_row:
                        for channel in range(c):
                            shared.add(start + channel, pixel[channel])

        for _ in get_pool().map(sum_row, range(engine.tiles_y)):
            pass
        return shared.to_array()

    def calc_tile_average(
        self,
        engine: MosaicEngine,
        tile_sums: np.ndarray,
    ) -> tuple[np.ndarray, np.ndarray]:
        averages = LockedBuffer(engine.tile_buffer_length, np.uint8)
        global_sum = LockedBuffer(engine.channels, np.uint64)
        c = engine.channels

        def average_row(tile_y: int) -> None:
            for tile_x in range(engine.tiles_x):
                start = engine.tile_offset(tile_x, tile_y)
                for channel in range(c):
                    tile_average = np.uint8(tile_sums[start + channel] // engine.tile_pixels)
                    averages.put(start + channel, tile_average)
                    global_sum.add(channel, tile_average)

        for _ in get_pool().map(average_row, range(engine.tiles_y)):
            pass
        return averages.to_array(), engine.global_average_from_sum(global_sum.to_array())

    def create_mosaic(
        self,
        engine: MosaicEngine,
        tile_averages: np.ndarray,
    ) -> np.ndarray:
        mosaic = LockedBuffer(engine.height * engine.width * engine.channels, np.uint8)
        s, c = engine.tile_side, engine.channels

        def fill_row(tile_y: int) -> None:
            for tile_x in range(engine.tiles_x):
                start = engine.tile_offset(tile_x, tile_y)
                tile_average = tile_averages[start:start + c]
                for pixel_y in range(tile_y * s, (tile_y + 1) * s):
                    for pixel_x in range(tile_x * s, (tile_x + 1) * s):
                        mosaic.put(engine.pixel_offset(pixel_x, pixel_y), tile_average)

        for _ in get_pool().map(fill_row, range(engine.tiles_y)):
            pass
        return mosaic.to_array()
