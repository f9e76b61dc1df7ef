"""Parallel strategy over disjoint output partitions.

Each task receives the slice of the output buffer it owns and nothing else
writable, so no locking is needed and the result does not depend on the
order in which tasks run.
"""

from __future__ import annotations

import numpy as np

from tile_mosaic.engine import MosaicEngine
from tile_mosaic.strategy_base import MosaicStrategy
from tile_mosaic.thread_pool import get_pool


class DisjointParallelStrategy(MosaicStrategy):
    """One task per tile (sum stage) or per row of tiles (other stages)."""

    name = "parallel"

    def sum_tile_channels(self, engine: MosaicEngine) -> np.ndarray:
        tile_sums = np.zeros(engine.tile_buffer_length, dtype=np.uint32)
        c = engine.channels

        def sum_tile(tile: int, out: np.ndarray) -> None:
            tile_y, tile_x = divmod(tile, engine.tiles_x)
            out[:] = engine.tile_block(tile_x, tile_y).sum(axis=(0, 1), dtype=np.uint32)

        tiles = range(engine.tile_count)
        chunks = [tile_sums[t * c:(t + 1) * c] for t in tiles]
        for _ in get_pool().map(sum_tile, tiles, chunks):
            pass
        return tile_sums

    def calc_tile_average(
        self,
        engine: MosaicEngine,
        tile_sums: np.ndarray,
    ) -> tuple[np.ndarray, np.ndarray]:
        tile_averages = np.zeros(engine.tile_buffer_length, dtype=np.uint8)
        c = engine.channels
        row_len = engine.tiles_x * c

        def average_row(tile_y: int, out: np.ndarray) -> np.ndarray:
            row = tile_sums[tile_y * row_len:(tile_y + 1) * row_len]
            out[:] = row // engine.tile_pixels
            return out.reshape(-1, c).sum(axis=0, dtype=np.uint64)

        rows = range(engine.tiles_y)
        chunks = [tile_averages[y * row_len:(y + 1) * row_len] for y in rows]
        global_sum = np.zeros(c, dtype=np.uint64)
        for partial in get_pool().map(average_row, rows, chunks):
            global_sum += partial
        return tile_averages, engine.global_average_from_sum(global_sum)

    def create_mosaic(
        self,
        engine: MosaicEngine,
        tile_averages: np.ndarray,
    ) -> np.ndarray:
        mosaic = np.empty(engine.height * engine.width * engine.channels, dtype=np.uint8)
        canvas = mosaic.reshape(engine.height, engine.width, engine.channels)
        s, c = engine.tile_side, engine.channels
        row_len = engine.tiles_x * c

        def fill_row(tile_y: int, band: np.ndarray) -> None:
            averages = tile_averages[tile_y * row_len:(tile_y + 1) * row_len]
            # (s, tiles_x * s, c) band viewed as (s, tiles_x, s, c) blocks
            band.reshape(s, engine.tiles_x, s, c)[:] = averages.reshape(1, engine.tiles_x, 1, c)

        rows = range(engine.tiles_y)
        bands = [canvas[y * s:(y + 1) * s] for y in rows]
        for _ in get_pool().map(fill_row, rows, bands):
            pass
        return mosaic
