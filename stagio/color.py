# stagio - Colors
"""
8-bit color values and the alpha (un)premultiplication primitives shared by
all conversion paths.

Two color flavours exist:

- :class:`NRGBA`: straight (non-premultiplied) alpha, the canonical space.
  An alpha of 0 does not force the color channels to 0.
- :class:`RGBA`: premultiplied alpha, each color channel is already scaled by
  alpha and has to be divided out to recover the true color.
"""

from __future__ import annotations

from typing import NamedTuple, Union

import numpy as np


class NRGBA(NamedTuple):
    """Non-premultiplied 8-bit color."""

    r: int
    g: int
    b: int
    a: int = 0xFF


class RGBA(NamedTuple):
    """Alpha-premultiplied 8-bit color."""

    r: int
    g: int
    b: int
    a: int = 0xFF


ColorTypes = Union[NRGBA, RGBA, tuple[int, int, int], tuple[int, int, int, int]]
"The valid color types. Plain tuples are interpreted as non-premultiplied."

TRANSPARENT = NRGBA(0, 0, 0, 0)
"Fully transparent black"


def unpremultiply8(channels: np.ndarray, alpha: np.ndarray) -> np.ndarray:
    """
    Divides premultiplied 8-bit channels by their alpha value.

    Channels with alpha 0xFF are copied, channels with alpha 0 become 0, all
    others are computed as ``round(c * 255 / a)`` and clamped to 255.

    :param channels: The premultiplied channel values
    :param alpha: The alpha values, broadcastable against channels
    :return: The straight channel values as uint8 array
    """
    c = np.asarray(channels, dtype=np.uint32)
    a = np.asarray(alpha, dtype=np.uint32)
    divisor = np.where(a == 0, 1, a)
    result = np.minimum((c * 0xFF + divisor // 2) // divisor, 0xFF)
    result = np.where(a == 0xFF, c, result)
    result = np.where(a == 0, 0, result)
    return result.astype(np.uint8)


def unpremultiply16(channels: np.ndarray, alpha: np.ndarray) -> np.ndarray:
    """
    16-bit variant of :func:`unpremultiply8`.

    :param channels: The premultiplied 16-bit channel values
    :param alpha: The 16-bit alpha values, broadcastable against channels
    :return: The straight channel values as uint16 array
    """
    c = np.asarray(channels, dtype=np.uint64)
    a = np.asarray(alpha, dtype=np.uint64)
    divisor = np.where(a == 0, 1, a)
    result = np.minimum((c * 0xFFFF + divisor // 2) // divisor, 0xFFFF)
    result = np.where(a == 0xFFFF, c, result)
    result = np.where(a == 0, 0, result)
    return result.astype(np.uint16)


def high_byte(values: np.ndarray) -> np.ndarray:
    """
    Reduces 16-bit samples to 8 bit by keeping bits [15:8].

    This is a truncation, not a division by 257.

    :param values: The 16-bit samples
    :return: The 8-bit samples
    """
    return (np.asarray(values, dtype=np.uint16) >> 8).astype(np.uint8)


def to_nrgba(color: ColorTypes) -> NRGBA:
    """
    Converts a color to its non-premultiplied representation

    :param color: An NRGBA, an RGBA or a plain (r, g, b[, a]) tuple
    :return: The non-premultiplied color
    :raises ValueError: If a channel is outside of 0..255
    """
    if len(color) not in (3, 4):
        raise ValueError(f"Expected 3 or 4 channels, got {len(color)}")
    values = tuple(int(value) for value in color)
    if any(value < 0 or value > 0xFF for value in values):
        raise ValueError(f"Channel values out of range: {values}")
    if isinstance(color, RGBA):
        straight = unpremultiply8(np.array(values[:3]), np.array(values[3]))
        return NRGBA(*(int(value) for value in straight), values[3])
    return NRGBA(*values)
