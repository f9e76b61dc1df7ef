"""
Tile Mosaic
===========

Partition an image into square tiles, flatten each tile to its per-channel
average colour and paint the tile with it. Ships three interchangeable
execution strategies:

- **serial** (reference)
- **parallel** (disjoint output partitions, no locking)
- **slow_parallel** (one shared lock per buffer, for comparison)

plus a correctness checker and a per-stage benchmark.
"""

__version__ = "1.0.0"

from tile_mosaic.benchmark import BenchmarkReport, run_benchmark
from tile_mosaic.checker import CorrectnessReport, check_correctness
from tile_mosaic.config import MosaicConfig
from tile_mosaic.engine import MosaicEngine, PipelineResult
from tile_mosaic.errors import (
    DecodeError,
    EncodeError,
    InputNotFoundError,
    InvalidTileSizeError,
    MosaicError,
    UnsupportedOutputExtensionError,
)
from tile_mosaic.image_io import (
    ColorFormat,
    ImageDescriptor,
    crop_to_tiles,
    load_image,
    save_mosaic,
)
from tile_mosaic.strategies import Algorithm, get_strategy
from tile_mosaic.strategy_base import MosaicStrategy
from tile_mosaic.strategy_locked import LockedParallelStrategy
from tile_mosaic.strategy_parallel import DisjointParallelStrategy
from tile_mosaic.strategy_serial import SerialStrategy

__all__ = [
    "Algorithm",
    "BenchmarkReport",
    "ColorFormat",
    "CorrectnessReport",
    "DecodeError",
    "DisjointParallelStrategy",
    "EncodeError",
    "ImageDescriptor",
    "InputNotFoundError",
    "InvalidTileSizeError",
    "LockedParallelStrategy",
    "MosaicConfig",
    "MosaicEngine",
    "MosaicError",
    "MosaicStrategy",
    "PipelineResult",
    "SerialStrategy",
    "UnsupportedOutputExtensionError",
    "check_correctness",
    "crop_to_tiles",
    "get_strategy",
    "load_image",
    "run_benchmark",
    "save_mosaic",
]
