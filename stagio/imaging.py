# stagio - Facade
"""
The public verbs: open, save, encode, decode, new and clone.

:class:`ImageIO` binds the storage and settings the named-file operations
use. The module level functions operate on the process wide defaults, see
:mod:`stagio.storage` and :mod:`stagio.config`.

Example::

    import stagio

    image = stagio.open("photo.jpg")          # source representation
    canonical = stagio.clone(image)           # 8-bit straight RGBA
    stagio.save(canonical, "photo.png")
    stagio.save(canonical, "small.jpg", jpeg_quality=70)
"""

from __future__ import annotations

import logging
import os
from typing import BinaryIO

import PIL.Image

from .codecs import decode_image, encode_image
from .config import Settings
from .convert import clone, new
from .errors import ImageEncodeError
from .formats import Format, format_from_filename
from .options import DecodeOptions, EncodeOptions
from .pixels import PixelSource, SourceImage
from .storage import Storage, get_default_storage

logger = logging.getLogger(__name__)

ImageTypes = PixelSource | PIL.Image.Image
"Anything which can be encoded"


class ImageIO:
    """
    Image reading and writing bound to a storage.

    Each call to :meth:`open` or :meth:`save` acquires exactly one stream and
    releases it before returning. Failures are not retried.
    """

    def __init__(self, storage: Storage | None = None, settings: Settings | None = None):
        """
        :param storage: The storage named images are read from and written to.
            None uses the process wide default at call time.
        :param settings: Provides the option defaults. None uses the process
            wide settings.
        """
        self._storage = storage
        self.settings = settings

    @property
    def storage(self) -> Storage:
        """The storage in effect."""
        return self._storage if self._storage is not None else get_default_storage()

    def open(self, name: str | os.PathLike, **options) -> SourceImage:
        """
        Loads an image

        :param name: The name, its extension selects the decoder
        :param options: See :class:`~stagio.options.DecodeOptions`
        :return: The decoded pixel representation, not canonicalized
        :raises UnsupportedFormatError: If the extension is not supported
        :raises ImageDecodeError: If the data can not be decoded
        """
        decode_options = DecodeOptions.create(self.settings, **options)
        name = os.fspath(name)
        fmt = format_from_filename(name)
        with self.storage.open(name) as stream:
            return decode_image(stream, decode_options, self.settings, fmt=fmt)

    def save(self, image: ImageTypes, name: str | os.PathLike, **options) -> None:
        """
        Stores an image

        The stream is closed after encoding. If closing fails the image is
        not considered written and the close error is raised even though
        encoding succeeded. If encoding fails, the stream is still closed and
        the encoding error is raised.

        :param image: The image
        :param name: The name, its extension selects the encoder
        :param options: See :class:`~stagio.options.EncodeOptions`
        :raises UnsupportedFormatError: If the extension is not supported
        :raises ImageEncodeError: If the image is empty or can not be encoded
        """
        encode_options = EncodeOptions.create(self.settings, **options)
        name = os.fspath(name)
        fmt = format_from_filename(name)
        canonical = clone(image)
        if canonical.rect.empty():
            raise ImageEncodeError(f"Can not save an empty image as {name}")
        stream = self.storage.create(name)
        try:
            encode_image(stream, canonical, fmt, encode_options)
        except BaseException:
            try:
                stream.close()
            except Exception as close_error:
                logger.warning("Failed to close %s after encoding error: %s", name, close_error)
            raise
        stream.close()
        logger.debug("Saved %s", name)

    def encode(self, writer: BinaryIO, image: ImageTypes, fmt: Format | int, **options) -> None:
        """
        Encodes an image into a stream

        :param writer: The target stream. It is not closed.
        :param image: The image
        :param fmt: The target format
        :param options: See :class:`~stagio.options.EncodeOptions`
        :raises UnsupportedFormatError: If fmt is not a supported format
        """
        encode_options = EncodeOptions.create(self.settings, **options)
        encode_image(writer, clone(image), fmt, encode_options)

    def decode(self, reader: BinaryIO, **options) -> SourceImage:
        """
        Decodes an image from a stream, the format is detected from the data

        :param reader: The source stream. It is not closed.
        :param options: See :class:`~stagio.options.DecodeOptions`
        :return: The decoded pixel representation
        :raises ImageDecodeError: For unknown, malformed or truncated data
        """
        decode_options = DecodeOptions.create(self.settings, **options)
        return decode_image(reader, decode_options, self.settings)


def open(name: str | os.PathLike, storage: Storage | None = None, **options) -> SourceImage:
    """
    Loads an image, see :meth:`ImageIO.open`

    :param name: The name, its extension selects the decoder
    :param storage: The storage to read from, the default storage if None
    :param options: See :class:`~stagio.options.DecodeOptions`
    :return: The decoded pixel representation
    """
    return ImageIO(storage).open(name, **options)


def save(image: ImageTypes, name: str | os.PathLike, storage: Storage | None = None, **options) -> None:
    """
    Stores an image, see :meth:`ImageIO.save`

    :param image: The image
    :param name: The name, its extension selects the encoder
    :param storage: The storage to write to, the default storage if None
    :param options: See :class:`~stagio.options.EncodeOptions`
    """
    ImageIO(storage).save(image, name, **options)


def encode(writer: BinaryIO, image: ImageTypes, fmt: Format | int, **options) -> None:
    """Encodes an image into a stream, see :meth:`ImageIO.encode`"""
    ImageIO().encode(writer, image, fmt, **options)


def decode(reader: BinaryIO, **options) -> SourceImage:
    """Decodes an image from a stream, see :meth:`ImageIO.decode`"""
    return ImageIO().decode(reader, **options)


__all__ = ["ImageIO", "ImageTypes", "open", "save", "encode", "decode", "new", "clone"]
