# stagio - Color model conversion
"""
Conversion of every supported pixel representation into the canonical
8-bit, non-premultiplied RGBA representation (:class:`NRGBAImage`).

Each :class:`~stagio.pixels.PixelModel` has exactly one conversion rule in
``_CONVERTERS``. A rule receives the source and returns a
(height, width, 4) uint8 array in source row order; :func:`clone` moves the
result to the origin and packs it with a stride of 4 * width.
"""

from __future__ import annotations

from typing import Any, Callable

import numpy as np
import PIL.Image

from .adapters import from_pil
from .color import NRGBA, RGBA, ColorTypes, high_byte, to_nrgba, unpremultiply8, unpremultiply16
from .errors import UnsupportedPixelModelError
from .geometry import Rect
from .pixels import (
    Alpha16Image,
    AlphaImage,
    CMYKImage,
    Gray16Image,
    GrayImage,
    NRGBA64Image,
    NRGBAImage,
    PalettedImage,
    PixelModel,
    PixelSource,
    RGBA64Image,
    RGBAImage,
    YCbCrImage,
)

Converter = Callable[[Any], np.ndarray]


def _empty_canvas(src: PixelSource) -> np.ndarray:
    return np.empty((src.height, src.width, 4), dtype=np.uint8)


def _from_nrgba(src: NRGBAImage) -> np.ndarray:
    return src.rows()


def _from_nrgba64(src: NRGBA64Image) -> np.ndarray:
    return high_byte(src.samples16())


def _from_rgba(src: RGBAImage) -> np.ndarray:
    rows = src.rows()
    out = _empty_canvas(src)
    out[..., 3] = rows[..., 3]
    out[..., :3] = unpremultiply8(rows[..., :3], rows[..., 3:4])
    return out


def _from_rgba64(src: RGBA64Image) -> np.ndarray:
    samples = src.samples16()
    straight = unpremultiply16(samples[..., :3], samples[..., 3:4])
    out = _empty_canvas(src)
    out[..., :3] = high_byte(straight)
    out[..., 3] = high_byte(samples[..., 3])
    return out


def _from_gray(src: GrayImage) -> np.ndarray:
    out = _empty_canvas(src)
    out[..., :3] = src.rows()
    out[..., 3] = 0xFF
    return out


def _from_gray16(src: Gray16Image) -> np.ndarray:
    out = _empty_canvas(src)
    out[..., :3] = high_byte(src.samples16())
    out[..., 3] = 0xFF
    return out


def _from_alpha(src: AlphaImage) -> np.ndarray:
    out = _empty_canvas(src)
    out[..., :3] = 0xFF
    out[..., 3] = src.rows()[..., 0]
    return out


def _from_alpha16(src: Alpha16Image) -> np.ndarray:
    out = _empty_canvas(src)
    out[..., :3] = 0xFF
    out[..., 3] = high_byte(src.samples16()[..., 0])
    return out


def _from_cmyk(src: CMYKImage) -> np.ndarray:
    rows = src.rows().astype(np.uint64)
    white = 0xFFFF - rows[..., 3:4] * 0x101
    rgb16 = (0xFFFF - rows[..., :3] * 0x101) * white // 0xFFFF
    out = _empty_canvas(src)
    out[..., :3] = high_byte(rgb16)
    out[..., 3] = 0xFF
    return out


def _from_ycbcr(src: YCbCrImage) -> np.ndarray:
    rect = src.rect
    hf, vf = src.subsample_ratio.factors
    xs = np.arange(rect.min_x, rect.max_x)
    ys = np.arange(rect.min_y, rect.max_y)
    y_index = (ys - rect.min_y)[:, None] * src.y_stride + (xs - rect.min_x)[None, :]
    c_index = (ys // vf - rect.min_y // vf)[:, None] * src.c_stride + (
        xs // hf - rect.min_x // hf
    )[None, :]
    # JFIF full range transform in 16.16 fixed point
    yy = src.y[y_index].astype(np.int32) * 0x10101
    cb = src.cb[c_index].astype(np.int32) - 128
    cr = src.cr[c_index].astype(np.int32) - 128
    rgb = np.stack(
        [
            yy + 91881 * cr,
            yy - 22554 * cb - 46802 * cr,
            yy + 116130 * cb,
        ],
        axis=-1,
    )
    out = _empty_canvas(src)
    out[..., :3] = np.clip(rgb >> 16, 0, 0xFF)
    out[..., 3] = 0xFF
    return out


def resolve_palette(palette: tuple[NRGBA | RGBA, ...]) -> np.ndarray:
    """
    Converts a color table to straight colors

    :param palette: The palette entries
    :return: A (256, 4) uint8 lookup table. Entries beyond the palette's
        length are transparent black.
    """
    table = np.zeros((256, 4), dtype=np.uint8)
    for index, entry in enumerate(palette):
        table[index] = to_nrgba(entry)
    return table


def _from_paletted(src: PalettedImage) -> np.ndarray:
    return resolve_palette(src.palette)[src.rows()[..., 0]]


_CONVERTERS: dict[PixelModel, Converter] = {
    PixelModel.NRGBA: _from_nrgba,
    PixelModel.NRGBA64: _from_nrgba64,
    PixelModel.RGBA: _from_rgba,
    PixelModel.RGBA64: _from_rgba64,
    PixelModel.GRAY: _from_gray,
    PixelModel.GRAY16: _from_gray16,
    PixelModel.ALPHA: _from_alpha,
    PixelModel.ALPHA16: _from_alpha16,
    PixelModel.CMYK: _from_cmyk,
    PixelModel.YCBCR: _from_ycbcr,
    PixelModel.PALETTED: _from_paletted,
}

assert set(_CONVERTERS) == set(PixelModel), "every pixel model needs a converter"


def clone(src: PixelSource | PIL.Image.Image) -> NRGBAImage:
    """
    Converts an image into the canonical representation.

    The result never shares memory with the source, starts at the origin and
    has the source's width and height. Zero area sources result in an empty
    image at Rect(0, 0, 0, 0).

    :param src: Any supported pixel representation or a PIL image
    :return: The canonical image
    :raises UnsupportedPixelModelError: If src is neither
    """
    if isinstance(src, PIL.Image.Image):
        src = from_pil(src)
    if not isinstance(src, PixelSource):
        raise UnsupportedPixelModelError(
            f"Can not convert {type(src).__name__} to NRGBA"
        )
    rect = src.rect.at_origin()
    if rect.empty():
        return NRGBAImage(rect, 0, b"")
    pixels = _CONVERTERS[src.model](src)
    return NRGBAImage(rect, rect.width * 4, pixels)


def new(width: int, height: int, color: ColorTypes) -> NRGBAImage:
    """
    Creates an image filled with a single color

    :param width: The width in pixels
    :param height: The height in pixels
    :param color: The fill color. Plain tuples are non-premultiplied.
    :return: The canonical image. Empty if width or height is not positive.
    """
    fill = to_nrgba(color)
    rect = Rect.from_size(width, height)
    if rect.empty():
        return NRGBAImage(rect, 0, b"")
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[...] = fill
    return NRGBAImage(rect, width * 4, pixels)
