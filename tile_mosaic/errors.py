"""Exceptions raised at the boundaries of the mosaic pipeline."""

from __future__ import annotations


class MosaicError(Exception):
    """Base class for every error the tool reports to the user."""


class InputNotFoundError(MosaicError, FileNotFoundError):
    """The input path is missing or is not a regular file."""


class InvalidTileSizeError(MosaicError, ValueError):
    """The tile side is not positive or does not fit the image."""


class DecodeError(MosaicError):
    """The image codec could not decode the input file."""


class UnsupportedOutputExtensionError(MosaicError, ValueError):
    """The output path has no extension or no encoder for it."""


class EncodeError(MosaicError):
    """The image codec could not write the output file."""
