# stagio - PIL adapters
"""
Maps decoded PIL images onto the source pixel representations of
:mod:`stagio.pixels`.

Pillow is the external codec stack: whatever mode it decodes into is
translated into the closest representation so that the actual color math
happens in :func:`stagio.convert.clone`.
"""

from __future__ import annotations

import logging

import numpy as np
import PIL.Image

from .color import NRGBA
from .geometry import Rect
from .pixels import (
    CMYKImage,
    Gray16Image,
    GrayImage,
    NRGBAImage,
    PalettedImage,
    RGBAImage,
    SourceImage,
    SubsampleRatio,
    YCbCrImage,
)

logger = logging.getLogger(__name__)

_GRAY16_MODES = {"I;16", "I;16L", "I;16B", "I;16N", "I", "F"}
"Modes stored as 16-bit gray, values beyond 16 bit are clipped"


def _palette_of(image: PIL.Image.Image) -> tuple[NRGBA, ...]:
    """
    Extracts the color table of a mode P image including its transparency

    :param image: The PIL image
    :return: The palette entries as straight colors
    """
    raw = image.getpalette() or []
    count = len(raw) // 3
    alpha = [0xFF] * count
    transparency = image.info.get("transparency")
    if isinstance(transparency, int):
        if transparency < count:
            alpha[transparency] = 0
    elif isinstance(transparency, (bytes, bytearray)):
        for index, value in enumerate(transparency[:count]):
            alpha[index] = value
    return tuple(
        NRGBA(raw[index * 3], raw[index * 3 + 1], raw[index * 3 + 2], alpha[index])
        for index in range(count)
    )


def from_pil(image: PIL.Image.Image) -> SourceImage:
    """
    Converts a PIL image into a source pixel representation

    :param image: The PIL image. It will be loaded if it is not yet.
    :return: The representation matching the image's mode best
    """
    rect = Rect.from_size(image.width, image.height)
    width = rect.width
    mode = image.mode
    if mode == "RGBA":
        return NRGBAImage(rect, width * 4, np.asarray(image))
    if mode == "RGBa":
        return RGBAImage(rect, width * 4, np.asarray(image))
    if mode == "L":
        return GrayImage(rect, width, np.asarray(image))
    if mode in _GRAY16_MODES:
        samples = np.clip(np.asarray(image), 0, 0xFFFF).astype(">u2")
        return Gray16Image(rect, width * 2, samples.tobytes())
    if mode == "P":
        return PalettedImage(rect, width, np.asarray(image), palette=_palette_of(image))
    if mode == "YCbCr":
        planes = np.asarray(image)
        return YCbCrImage(
            rect,
            y=planes[..., 0],
            cb=planes[..., 1],
            cr=planes[..., 2],
            y_stride=width,
            c_stride=width,
            subsample_ratio=SubsampleRatio.RATIO_444,
        )
    if mode == "CMYK":
        return CMYKImage(rect, width * 4, np.asarray(image))
    if mode not in ("RGB", "RGBX", "LA", "PA", "1"):
        logger.debug("Converting PIL mode %s via RGBA", mode)
    return NRGBAImage(rect, width * 4, np.asarray(image.convert("RGBA")))
