# stagio - Codec registry
"""
Maps each :class:`~stagio.formats.Format` onto the Pillow plugin which
reads and writes it.

Encoding always starts from the canonical representation; decoding returns
the source representation closest to what the file stores, see
:func:`stagio.adapters.from_pil`.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import BinaryIO, Callable

import PIL.Image
import PIL.ImageOps

from .adapters import from_pil
from .config import Settings, get_settings
from .errors import ImageDecodeError, ImageEncodeError, UnsupportedFormatError
from .formats import Format, detect_format
from .options import DecodeOptions, EncodeOptions
from .pixels import NRGBAImage, SourceImage

logger = logging.getLogger(__name__)

WriteFunction = Callable[[NRGBAImage, BinaryIO, EncodeOptions], None]


@dataclass(frozen=True)
class Codec:
    """The encoder and decoder of a single container format."""

    format: Format
    pil_format: str
    "The format name of the Pillow plugin"
    mime_type: str
    write: WriteFunction
    "Writes a canonical image to a binary stream"


_CODECS: dict[Format, Codec] = {}


def register_codec(fmt: Format, pil_format: str, mime_type: str):
    """Decorator to register the write function of a format.

    Example:
        @register_codec(Format.PNG, "PNG", "image/png")
        def write_png(image, stream, options):
            ...
    """

    def decorator(func: WriteFunction) -> WriteFunction:
        _CODECS[fmt] = Codec(fmt, pil_format, mime_type, func)
        return func

    return decorator


def get_codec(fmt: Format | int) -> Codec:
    """
    Returns the codec of a format

    :param fmt: The format identifier
    :return: The codec
    :raises UnsupportedFormatError: For identifiers without codec
    """
    fmt = Format(fmt)
    codec = _CODECS.get(fmt) if fmt.is_supported else None
    if codec is None:
        raise UnsupportedFormatError(f"unsupported image format: {fmt!s} ({int(fmt)})")
    return codec


def registered_formats() -> list[Format]:
    """Returns the formats a codec is registered for."""
    return sorted(_CODECS)


def _flattened(image: NRGBAImage) -> PIL.Image.Image:
    """
    Returns an RGB PIL image, translucent pixels composed onto black

    :param image: The canonical image
    :return: The PIL image
    """
    handle = image.to_pil()
    if image.opaque():
        return handle.convert("RGB")
    background = PIL.Image.new("RGB", handle.size, (0, 0, 0))
    background.paste(handle, (0, 0), handle)
    return background


def _keep_alpha(image: NRGBAImage) -> PIL.Image.Image:
    handle = image.to_pil()
    return handle.convert("RGB") if image.opaque() else handle


@register_codec(Format.JPEG, "JPEG", "image/jpeg")
def _write_jpeg(image: NRGBAImage, stream: BinaryIO, options: EncodeOptions):
    _flattened(image).save(
        stream,
        format="JPEG",
        quality=options.jpeg_quality,
        subsampling=options.pil_jpeg_subsampling,
    )


@register_codec(Format.PNG, "PNG", "image/png")
def _write_png(image: NRGBAImage, stream: BinaryIO, options: EncodeOptions):
    _keep_alpha(image).save(
        stream, format="PNG", compress_level=options.png_compression_level
    )


@register_codec(Format.GIF, "GIF", "image/gif")
def _write_gif(image: NRGBAImage, stream: BinaryIO, options: EncodeOptions):
    handle = image.to_pil()
    if image.opaque():
        handle = handle.convert("RGB").convert(
            "P", palette=PIL.Image.Palette.ADAPTIVE, colors=options.gif_num_colors
        )
    handle.save(stream, format="GIF")


@register_codec(Format.BMP, "BMP", "image/bmp")
def _write_bmp(image: NRGBAImage, stream: BinaryIO, options: EncodeOptions):
    _flattened(image).save(stream, format="BMP")


@register_codec(Format.TIFF, "TIFF", "image/tiff")
def _write_tiff(image: NRGBAImage, stream: BinaryIO, options: EncodeOptions):
    _keep_alpha(image).save(
        stream, format="TIFF", compression=options.tiff_compression
    )


def encode_image(
    writer: BinaryIO,
    image: NRGBAImage,
    fmt: Format | int,
    options: EncodeOptions,
) -> None:
    """
    Encodes a canonical image and writes it to a stream

    The image is encoded into memory first, so errors of the writer itself
    reach the caller unchanged.

    :param writer: The target stream
    :param image: The canonical image
    :param fmt: The target format
    :param options: The encoding options
    :raises UnsupportedFormatError: If no codec handles fmt
    :raises ImageEncodeError: If Pillow fails to encode the image
    """
    codec = get_codec(fmt)
    if image.rect.empty():
        raise ImageEncodeError(f"Can not encode an empty image as {codec.format!s}")
    output_stream = io.BytesIO()
    try:
        codec.write(image, output_stream, options)
    except (OSError, ValueError, KeyError) as err:
        raise ImageEncodeError(f"Failed to encode {codec.format!s}: {err}") from err
    data = output_stream.getvalue()
    logger.debug("Encoded %dx%d image as %s (%d bytes)", image.width, image.height, codec.format, len(data))
    writer.write(data)


def decode_image(
    reader: BinaryIO,
    options: DecodeOptions,
    settings: Settings | None = None,
    fmt: Format | int | None = None,
) -> SourceImage:
    """
    Reads and decodes an image from a stream

    :param reader: The source stream, read to its end
    :param options: The decoding options
    :param settings: Provides the pixel limit. Process wide settings by default.
    :param fmt: The format whose decoder is used. Detected from the data
        if not given.
    :return: The decoded pixel representation, JPEGs as luma/chroma image
    :raises ImageDecodeError: For unknown, malformed or truncated data
    :raises UnsupportedFormatError: For recognized but unsupported containers
    """
    settings = settings or get_settings()
    data = reader.read()
    codec = get_codec(detect_format(data) if fmt is None else fmt)
    try:
        handle = PIL.Image.open(io.BytesIO(data), formats=[codec.pil_format])
        max_pixels = settings.MAX_IMAGE_PIXELS
        if max_pixels is not None and handle.width * handle.height > max_pixels:
            raise ImageDecodeError(
                f"Image of {handle.width}x{handle.height} pixels exceeds the "
                f"limit of {max_pixels} pixels"
            )
        if codec.format == Format.JPEG and handle.mode == "RGB":
            # keep the stored luma/chroma samples, color conversion happens in clone
            handle.draft("YCbCr", handle.size)
        handle.load()
        if options.auto_orientation:
            handle = PIL.ImageOps.exif_transpose(handle)
    except ImageDecodeError:
        raise
    except (OSError, SyntaxError, EOFError, ValueError, PIL.Image.DecompressionBombError) as err:
        raise ImageDecodeError(f"Invalid or damaged {codec.format!s} data: {err}") from err
    logger.debug("Decoded %s image of %dx%d pixels in mode %s", codec.format, handle.width, handle.height, handle.mode)
    return from_pil(handle)
