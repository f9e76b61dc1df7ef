"""Image decoding, tile-aligned cropping and encoding.

The codec itself is Pillow; this module is the boundary that turns a file
into an :class:`ImageDescriptor` and a pixel buffer back into a file.
"""

from __future__ import annotations

import io
import logging
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from tile_mosaic.errors import (
    DecodeError,
    EncodeError,
    InputNotFoundError,
    InvalidTileSizeError,
    UnsupportedOutputExtensionError,
)

logger = logging.getLogger(__name__)


class ColorFormat(str, Enum):
    """8-bit Pillow modes the pipeline works on."""

    L = "L"
    LA = "LA"
    RGB = "RGB"
    RGBA = "RGBA"

    @property
    def channels(self) -> int:
        return len(self.value)

    @classmethod
    def from_channels(cls, channels: int) -> ColorFormat:
        for fmt in cls:
            if fmt.channels == channels:
                return fmt
        raise ValueError(f"No colour format with {channels} channels")


# Largest side whose full-white tile still sums into a uint32 channel:
# 4104**2 * 255 = 4_294_918_080 <= 2**32 - 1.
MAX_TILE_SIDE = 4104

# Modes that collapse to single-channel greyscale when decoded.
_GREY_MODES = frozenset({"1", "I", "I;16", "I;16B", "I;16L", "I;16N", "F"})


@dataclass(frozen=True, eq=False)
class ImageDescriptor:
    """Decoded pixels plus their geometry.

    ``pixels`` is a read-only ``(height, width, channels)`` uint8 array;
    flattened it is the row-major, channel-interleaved byte sequence.
    """

    width: int
    height: int
    channels: int
    color_format: ColorFormat
    pixels: np.ndarray

    def __post_init__(self) -> None:
        expected = (self.height, self.width, self.channels)
        if self.pixels.shape != expected:
            raise ValueError(
                f"Pixel array shape {self.pixels.shape} does not match {expected}"
            )
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"Pixel array must be uint8, got {self.pixels.dtype}")
        if self.color_format.channels != self.channels:
            raise ValueError(
                f"{self.color_format.value} has {self.color_format.channels} "
                f"channels, descriptor has {self.channels}"
            )

    @classmethod
    def from_array(
        cls,
        array: np.ndarray,
        color_format: ColorFormat | None = None,
    ) -> ImageDescriptor:
        """Wrap an (H, W) or (H, W, C) uint8 array in a read-only descriptor."""
        arr = np.asarray(array, dtype=np.uint8)
        if arr.ndim == 2:
            arr = arr[:, :, np.newaxis]
        if arr.ndim != 3:
            raise ValueError(f"Expected a 2-D or 3-D array, got {arr.ndim}-D")
        arr = np.ascontiguousarray(arr).copy()
        arr.flags.writeable = False
        h, w, c = arr.shape
        fmt = color_format if color_format is not None else ColorFormat.from_channels(c)
        return cls(width=w, height=h, channels=c, color_format=fmt, pixels=arr)

    @property
    def flat(self) -> np.ndarray:
        """The pixel bytes as a 1-D view."""
        return self.pixels.reshape(-1)

    def to_pil(self) -> Image.Image:
        return array_to_pil(self.pixels)


def array_to_pil(array: np.ndarray) -> Image.Image:
    """(H, W, C) uint8 array -> Pillow image, single channel as mode L."""
    if array.ndim == 3 and array.shape[2] == 1:
        array = array[:, :, 0]
    return Image.fromarray(np.ascontiguousarray(array))


def _normalise_mode(img: Image.Image) -> Image.Image:
    if img.mode in ColorFormat.__members__:
        return img
    if img.mode in _GREY_MODES:
        return img.convert("L")
    if img.mode == "P" and "transparency" in img.info:
        return img.convert("RGBA")
    if img.mode == "PA":
        return img.convert("RGBA")
    return img.convert("RGB")


def load_image(path: str | Path) -> ImageDescriptor:
    """Decode *path* into an :class:`ImageDescriptor`.

    Raises:
        InputNotFoundError: *path* does not exist or is not a regular file.
        DecodeError: Pillow cannot read the file.
    """
    path = Path(path)
    if not path.is_file():
        raise InputNotFoundError(f"Input image does not exist: {path}")

    return _decode(path, str(path))


def decode_image_bytes(data: bytes, name: str = "<bytes>") -> ImageDescriptor:
    """Decode an in-memory encoded image (e.g. an upload)."""
    return _decode(io.BytesIO(data), name)


def _decode(source: Path | io.BytesIO, name: str) -> ImageDescriptor:
    try:
        with Image.open(source) as img:
            img = _normalise_mode(img)
            img.load()
            arr = np.array(img, dtype=np.uint8)
            fmt = ColorFormat(img.mode)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise DecodeError(f"Cannot decode {name}: {exc}") from exc

    logger.debug("Decoded %s: %dx%d %s", name, arr.shape[1], arr.shape[0], fmt.value)
    return ImageDescriptor.from_array(arr, fmt)


def check_tile_side(tile_side: int, width: int, height: int) -> None:
    """Reject tile sides that are non-positive, overflow a uint32 tile sum,
    or exceed the image.

    Raises:
        InvalidTileSizeError: on any of the above.
    """
    if tile_side <= 0:
        raise InvalidTileSizeError(f"Tile side must be positive, got {tile_side}")
    if tile_side > MAX_TILE_SIDE:
        raise InvalidTileSizeError(
            f"Tile side {tile_side} exceeds the maximum of {MAX_TILE_SIDE}"
        )
    if tile_side > width or tile_side > height:
        raise InvalidTileSizeError(
            f"Tile side {tile_side} exceeds image size {width}x{height}"
        )


def crop_to_tiles(image: ImageDescriptor, tile_side: int) -> ImageDescriptor:
    """Crop *image* so both sides are multiples of *tile_side*.

    The margin removed on each axis is split in two, the smaller half
    (``margin // 2``) taken from the left/top.

    Raises:
        InvalidTileSizeError: *tile_side* is not positive, above
            :data:`MAX_TILE_SIDE`, or larger than the image on either axis.
    """
    check_tile_side(tile_side, image.width, image.height)

    margin_x = image.width % tile_side
    margin_y = image.height % tile_side
    if margin_x == 0 and margin_y == 0:
        return image

    left = margin_x // 2
    top = margin_y // 2
    width = image.width - margin_x
    height = image.height - margin_y
    logger.debug(
        "Cropping %dx%d -> %dx%d (offset %d, %d)",
        image.width, image.height, width, height, left, top,
    )
    cropped = image.pixels[top:top + height, left:left + width]
    return ImageDescriptor.from_array(cropped, image.color_format)


def output_format(path: str | Path) -> str:
    """Pillow format name for the extension of *path*.

    Raises:
        UnsupportedOutputExtensionError: no extension, or no Pillow encoder.
    """
    path = Path(path)
    ext = path.suffix.lower()
    if not ext:
        raise UnsupportedOutputExtensionError(
            f"Missing extension on output image path: {path}"
        )
    fmt = Image.registered_extensions().get(ext)
    if fmt is None or fmt not in Image.SAVE:
        raise UnsupportedOutputExtensionError(
            f"Unsupported extension {ext!r} on output image path: {path}"
        )
    return fmt


def save_mosaic(
    buffer: np.ndarray,
    path: str | Path,
    width: int,
    height: int,
    color_format: ColorFormat,
) -> Path:
    """Encode a flat pixel *buffer* to *path*.

    The file is written next to the target under a temporary name and moved
    into place only once Pillow succeeds.
    """
    path = Path(path)
    fmt = output_format(path)
    channels = color_format.channels
    img = array_to_pil(
        np.asarray(buffer, dtype=np.uint8).reshape(height, width, channels)
    )

    tmp_path: Path | None = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.stem}-", suffix=path.suffix, dir=path.parent,
        )
        os.close(fd)
        tmp_path = Path(tmp_name)
        img.save(tmp_path, format=fmt)
        os.replace(tmp_path, path)
    except (OSError, ValueError, KeyError) as exc:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise EncodeError(f"Cannot write {path}: {exc}") from exc

    logger.info("Saved %s (%dx%d %s)", path, width, height, color_format.value)
    return path
