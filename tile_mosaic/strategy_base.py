"""Contract shared by every execution strategy."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from tile_mosaic.engine import MosaicEngine


class MosaicStrategy(ABC):
    """The three pipeline stages: sum -> average -> scatter.

    Implementations are stateless; every stage reads only the engine and
    its argument and returns a freshly allocated buffer.
    """

    name: str = "abstract"

    @abstractmethod
    def sum_tile_channels(self, engine: MosaicEngine) -> np.ndarray:
        """Per tile and channel, the sum of raw byte values.

        Returns:
            Flat uint32 array of length ``tiles_x * tiles_y * channels``,
            indexed ``(tile_y * tiles_x + tile_x) * channels + channel``.
        """

    @abstractmethod
    def calc_tile_average(
        self,
        engine: MosaicEngine,
        tile_sums: np.ndarray,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Truncating per-tile averages and the global average.

        The global average is the truncating mean of the tile averages,
        not of the raw pixels.

        Returns:
            ``(tile_averages, global_average)``, both uint8; the first has
            the shape of *tile_sums*, the second one entry per channel.
        """

    @abstractmethod
    def create_mosaic(
        self,
        engine: MosaicEngine,
        tile_averages: np.ndarray,
    ) -> np.ndarray:
        """Scatter every tile's average over all of its pixels.

        Returns:
            Flat uint8 array the size of the input pixel buffer.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
