"""Tiling geometry and the three-stage mosaic pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from tile_mosaic.errors import InvalidTileSizeError
from tile_mosaic.image_io import (
    ImageDescriptor,
    check_tile_side,
    crop_to_tiles,
    save_mosaic,
)
from tile_mosaic.strategy_base import MosaicStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class PipelineResult:
    """Every buffer produced by one pass of the pipeline."""

    tile_sums: np.ndarray
    tile_averages: np.ndarray
    global_average: np.ndarray
    mosaic: np.ndarray


class MosaicEngine:
    """Read-only tiling of a tile-aligned image.

    Args:
        image:     Descriptor whose width and height are multiples of
                   *tile_side* (see :func:`crop_to_tiles`).
        tile_side: Side of a square tile in pixels.

    Raises:
        InvalidTileSizeError: *tile_side* is not positive, above
            ``MAX_TILE_SIDE``, larger than the image, or does not divide
            both sides.
    """

    def __init__(self, image: ImageDescriptor, tile_side: int) -> None:
        check_tile_side(tile_side, image.width, image.height)
        if image.width % tile_side or image.height % tile_side:
            raise InvalidTileSizeError(
                f"Image {image.width}x{image.height} is not aligned to "
                f"{tile_side}px tiles; crop it first"
            )

        self.image = image
        self.tile_side = tile_side
        self.tile_pixels = tile_side * tile_side
        self.tiles_x = image.width // tile_side
        self.tiles_y = image.height // tile_side

    @classmethod
    def from_image(cls, image: ImageDescriptor, tile_side: int) -> MosaicEngine:
        """Crop *image* to whole tiles, then build the engine."""
        return cls(crop_to_tiles(image, tile_side), tile_side)

    # -- geometry ------------------------------------------------------

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def channels(self) -> int:
        return self.image.channels

    @property
    def tile_count(self) -> int:
        return self.tiles_x * self.tiles_y

    @property
    def tile_buffer_length(self) -> int:
        """Length of the tile sum / tile average buffers."""
        return self.tile_count * self.channels

    def tile_block(self, tile_x: int, tile_y: int) -> np.ndarray:
        """(tile_side, tile_side, channels) view of one tile's pixels."""
        s = self.tile_side
        return self.image.pixels[tile_y * s:(tile_y + 1) * s, tile_x * s:(tile_x + 1) * s]

    def tile_offset(self, tile_x: int, tile_y: int) -> int:
        """Index of the tile's first channel in a tile buffer."""
        return (tile_y * self.tiles_x + tile_x) * self.channels

    def pixel_offset(self, x: int, y: int) -> int:
        """Index of pixel (x, y)'s first channel in a pixel buffer."""
        return (y * self.width + x) * self.channels

    def global_average_from_sum(self, global_sum: np.ndarray) -> np.ndarray:
        """Truncating per-channel mean of summed tile averages, as uint8."""
        return (np.asarray(global_sum, dtype=np.uint64) // self.tile_count).astype(np.uint8)

    def mosaic_image(self, mosaic: np.ndarray) -> np.ndarray:
        """Reshape a flat mosaic buffer to (height, width, channels)."""
        return np.asarray(mosaic, dtype=np.uint8).reshape(
            self.height, self.width, self.channels,
        )

    # -- pipeline ------------------------------------------------------

    def run_pipeline(self, strategy: MosaicStrategy) -> PipelineResult:
        """Run sum -> average -> scatter and keep every intermediate buffer."""
        tile_sums = strategy.sum_tile_channels(self)
        tile_averages, global_average = strategy.calc_tile_average(self, tile_sums)
        mosaic = strategy.create_mosaic(self, tile_averages)
        return PipelineResult(tile_sums, tile_averages, global_average, mosaic)

    def generate_mosaic(self, strategy: MosaicStrategy) -> np.ndarray:
        """Run the pipeline with *strategy* and return the mosaic buffer."""
        result = self.run_pipeline(strategy)
        logger.info("Image global average: %s", result.global_average.tolist())
        return result.mosaic

    def save(self, mosaic: np.ndarray, path: str | Path) -> Path:
        """Encode *mosaic* with this image's geometry and colour format."""
        return save_mosaic(
            mosaic, path, self.width, self.height, self.image.color_format,
        )

    def generate_and_export(self, strategy: MosaicStrategy, path: str | Path) -> Path:
        """Generate the mosaic and hand it to the codec for saving."""
        return self.save(self.generate_mosaic(strategy), path)

    def __repr__(self) -> str:
        return (
            f"MosaicEngine({self.width}x{self.height}x{self.channels}, "
            f"tile_side={self.tile_side}, tiles={self.tiles_x}x{self.tiles_y})"
        )
