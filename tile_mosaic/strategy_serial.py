"""Single-threaded reference strategy."""

from __future__ import annotations

import numpy as np

from tile_mosaic.engine import MosaicEngine
from tile_mosaic.strategy_base import MosaicStrategy


class SerialStrategy(MosaicStrategy):
    """Walks the tiles in row-major order on the calling thread.

    Defines the reference output every other strategy must reproduce
    byte for byte.
    """

    name = "serial"

    def sum_tile_channels(self, engine: MosaicEngine) -> np.ndarray:
        tile_sums = np.zeros(engine.tile_buffer_length, dtype=np.uint32)
        c = engine.channels
        for tile_y in range(engine.tiles_y):
            for tile_x in range(engine.tiles_x):
                start = engine.tile_offset(tile_x, tile_y)
                block = engine.tile_block(tile_x, tile_y)
                tile_sums[start:start + c] = block.sum(axis=(0, 1), dtype=np.uint32)
        return tile_sums

    def calc_tile_average(
        self,
        engine: MosaicEngine,
        tile_sums: np.ndarray,
    ) -> tuple[np.ndarray, np.ndarray]:
        # Integer floor division: averages truncate, never round.
        tile_averages = (tile_sums // engine.tile_pixels).astype(np.uint8)
        global_sum = tile_averages.reshape(-1, engine.channels).sum(axis=0, dtype=np.uint64)
        return tile_averages, engine.global_average_from_sum(global_sum)

    def create_mosaic(
        self,
        engine: MosaicEngine,
        tile_averages: np.ndarray,
    ) -> np.ndarray:
        mosaic = np.empty(engine.height * engine.width * engine.channels, dtype=np.uint8)
        canvas = mosaic.reshape(engine.height, engine.width, engine.channels)
        s, c = engine.tile_side, engine.channels
        for tile_y in range(engine.tiles_y):
            for tile_x in range(engine.tiles_x):
                start = engine.tile_offset(tile_x, tile_y)
                canvas[tile_y * s:(tile_y + 1) * s, tile_x * s:(tile_x + 1) * s] = (
                    tile_averages[start:start + c]
                )
        return mosaic
