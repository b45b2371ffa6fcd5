# stagio - Image formats
"""
The closed set of supported container formats and their identification by
file extension or content.
"""

from __future__ import annotations

import logging
import os
from enum import IntEnum

import filetype

from .errors import ImageDecodeError, UnsupportedFormatError

logger = logging.getLogger(__name__)


class Format(IntEnum):
    """
    Supported image container formats.

    Integers outside of the defined values are still accepted and produce an
    unsupported pseudo member, e.g. ``Format(-1)``, which prints as
    "Unsupported" and is rejected by every codec lookup.
    """

    JPEG = 0
    PNG = 1
    GIF = 2
    BMP = 3
    TIFF = 4

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            pseudo_member = int.__new__(cls, value)
            pseudo_member._name_ = "UNSUPPORTED"
            pseudo_member._value_ = value
            return pseudo_member
        return None

    @property
    def is_supported(self) -> bool:
        """True for the defined formats, False for pseudo members."""
        return self._name_ in _FORMAT_NAMES

    def __str__(self) -> str:
        return _FORMAT_NAMES.get(self._name_, "Unsupported")


_FORMAT_NAMES = {
    "JPEG": "JPEG",
    "PNG": "PNG",
    "GIF": "GIF",
    "BMP": "BMP",
    "TIFF": "TIFF",
}

FORMAT_EXTENSIONS: dict[str, Format] = {
    "jpg": Format.JPEG,
    "jpeg": Format.JPEG,
    "png": Format.PNG,
    "gif": Format.GIF,
    "bmp": Format.BMP,
    "tif": Format.TIFF,
    "tiff": Format.TIFF,
}
"File extensions (lower case, without dot) of the supported formats"

_MIME_FORMATS = {
    "image/jpeg": Format.JPEG,
    "image/png": Format.PNG,
    "image/gif": Format.GIF,
    "image/bmp": Format.BMP,
    "image/x-ms-bmp": Format.BMP,
    "image/tiff": Format.TIFF,
}


def format_from_extension(ext: str) -> Format:
    """
    Resolves a format from a file extension

    :param ext: The extension with or without leading dot, e.g. ".JPG"
    :return: The format
    :raises UnsupportedFormatError: For any other extension
    """
    fmt = FORMAT_EXTENSIONS.get(ext.lower().lstrip(".")) if ext else None
    if fmt is None:
        raise UnsupportedFormatError(f"unsupported image format: {ext!r}")
    return fmt


def format_from_filename(filename: str | os.PathLike) -> Format:
    """
    Resolves a format from a file name's extension

    :param filename: The file name or path
    :return: The format
    :raises UnsupportedFormatError: If the name has no supported extension
    """
    ext = os.path.splitext(os.fspath(filename))[1]
    fmt = format_from_extension(ext)
    logger.debug("Resolved %s to %s", filename, fmt)
    return fmt


def detect_format(data: bytes) -> Format:
    """
    Identifies the container format of encoded image data by its magic bytes

    :param data: The encoded data or at least its first bytes
    :return: The format
    :raises ImageDecodeError: If the data is not recognized at all
    :raises UnsupportedFormatError: If the data is a known container which is
        not one of the supported formats, e.g. WebP
    """
    kind = filetype.guess(data)
    if kind is None:
        raise ImageDecodeError("image data of unknown format")
    fmt = _MIME_FORMATS.get(kind.mime)
    if fmt is None:
        raise UnsupportedFormatError(f"unsupported image format: {kind.mime}")
    return fmt
