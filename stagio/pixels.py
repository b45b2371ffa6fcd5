# stagio - Source pixel representations
"""
The pixel representations a decoder may produce.

Every representation is an immutable dataclass carrying its own bounds, its
stride(s) and flat ``uint8`` buffer(s). 16-bit samples are stored big-endian,
two bytes per sample. The set of representations is closed: each class tags
itself with a :class:`PixelModel` and the converter in :mod:`stagio.convert`
handles every model explicitly.

The first pixel of a buffer always belongs to the minimum corner of ``rect``,
which does not have to be the origin.

:class:`NRGBAImage` doubles as the canonical representation: 8-bit,
non-premultiplied RGBA, see :func:`stagio.convert.clone`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, ClassVar, Sequence, Union

import numpy as np
import PIL.Image

from .color import NRGBA, RGBA
from .geometry import Rect


class PixelModel(Enum):
    """Tags of the supported source pixel representations."""

    NRGBA = auto()
    NRGBA64 = auto()
    RGBA = auto()
    RGBA64 = auto()
    GRAY = auto()
    GRAY16 = auto()
    ALPHA = auto()
    ALPHA16 = auto()
    CMYK = auto()
    YCBCR = auto()
    PALETTED = auto()


class SubsampleRatio(Enum):
    """Chroma subsampling ratio of a luma/chroma image."""

    RATIO_444 = "4:4:4"
    RATIO_422 = "4:2:2"
    RATIO_420 = "4:2:0"
    RATIO_440 = "4:4:0"
    RATIO_411 = "4:1:1"
    RATIO_410 = "4:1:0"

    @classmethod
    def parse(cls, value: SubsampleRatio | str) -> SubsampleRatio:
        """
        Parses a ratio given as enum, "4:2:0" or "420"

        :param value: The ratio
        :return: The ratio enum
        """
        if isinstance(value, SubsampleRatio):
            return value
        text = str(value).strip()
        if ":" not in text and len(text) == 3:
            text = ":".join(text)
        return cls(text)

    @property
    def factors(self) -> tuple[int, int]:
        """The (horizontal, vertical) chroma subsampling factors."""
        return _SUBSAMPLE_FACTORS[self]

    def chroma_size(self, rect: Rect) -> tuple[int, int]:
        """
        Size of a chroma plane covering given luma bounds

        :param rect: The bounds of the luma plane
        :return: The chroma plane's size as (width, height)
        """
        hf, vf = self.factors
        width = -(-rect.max_x // hf) - rect.min_x // hf
        height = -(-rect.max_y // vf) - rect.min_y // vf
        return max(width, 0), max(height, 0)


_SUBSAMPLE_FACTORS = {
    SubsampleRatio.RATIO_444: (1, 1),
    SubsampleRatio.RATIO_422: (2, 1),
    SubsampleRatio.RATIO_420: (2, 2),
    SubsampleRatio.RATIO_440: (1, 2),
    SubsampleRatio.RATIO_411: (4, 1),
    SubsampleRatio.RATIO_410: (4, 2),
}


def _as_buffer(data: Any) -> np.ndarray:
    """
    Copies pixel data into a flat, read-only uint8 array

    :param data: bytes, bytearray, a sequence of ints or a numpy array
    :return: The buffer
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        buffer = np.frombuffer(bytes(data), dtype=np.uint8).copy()
    else:
        buffer = np.array(data if data is not None else [], dtype=np.uint8).ravel()
    buffer.flags.writeable = False
    return buffer


def _as_rect(rect: Rect | Sequence[int]) -> Rect:
    return rect if isinstance(rect, Rect) else Rect(*rect)


@dataclass(frozen=True, eq=False)
class PixelSource:
    """Base class of all pixel representations."""

    rect: Rect

    model: ClassVar[PixelModel]

    def __post_init__(self):
        object.__setattr__(self, "rect", _as_rect(self.rect))

    @property
    def width(self) -> int:
        """The image's width in pixels"""
        return self.rect.width

    @property
    def height(self) -> int:
        """The image's height in pixels"""
        return self.rect.height

    @property
    def size(self) -> tuple[int, int]:
        """The size as tuple (width, height)"""
        return self.rect.size


@dataclass(frozen=True, eq=False)
class PackedPixelSource(PixelSource):
    """A representation storing all channels of a pixel next to each other in
    a single buffer with a fixed row stride."""

    stride: int
    pix: np.ndarray = field(repr=False)

    bytes_per_pixel: ClassVar[int] = 1

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "pix", _as_buffer(self.pix))
        row_bytes = self.width * self.bytes_per_pixel
        if self.rect.empty():
            return
        if self.stride < row_bytes:
            raise ValueError(
                f"Stride {self.stride} is smaller than a row of {row_bytes} bytes"
            )
        required = self.stride * (self.height - 1) + row_bytes
        if len(self.pix) < required:
            raise ValueError(
                f"Pixel buffer holds {len(self.pix)} bytes, {required} required "
                f"for bounds {self.rect}"
            )

    def rows(self) -> np.ndarray:
        """
        Returns the visible pixel bytes without row padding

        :return: A (height, width, bytes_per_pixel) uint8 array
        """
        height, width, bpp = self.height, self.width, self.bytes_per_pixel
        if self.rect.empty():
            return np.zeros((height, width, bpp), dtype=np.uint8)
        index = (
            np.arange(height)[:, None] * self.stride
            + np.arange(width * bpp)[None, :]
        )
        return self.pix[index].reshape(height, width, bpp)

    def samples16(self) -> np.ndarray:
        """
        Returns the visible pixels as big-endian decoded 16-bit samples

        :return: A (height, width, bytes_per_pixel // 2) uint16 array
        """
        rows = self.rows().astype(np.uint16)
        return (rows[..., 0::2] << 8) | rows[..., 1::2]


@dataclass(frozen=True, eq=False)
class NRGBAImage(PackedPixelSource):
    """
    8-bit, non-premultiplied RGBA pixels, stored as R, G, B, A.

    This is the canonical representation every conversion targets. Images
    returned by :func:`stagio.convert.clone` and :func:`stagio.convert.new`
    always start at the origin and use a stride of exactly 4 * width.
    """

    model: ClassVar[PixelModel] = PixelModel.NRGBA
    bytes_per_pixel: ClassVar[int] = 4

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> NRGBAImage:
        """
        Creates a canonical image from an array of straight RGBA pixels

        :param pixels: A (height, width, 4) uint8 array
        :return: The image
        """
        pixels = np.asarray(pixels)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Expected a (height, width, 4) array, got {pixels.shape}")
        height, width = pixels.shape[0:2]
        rect = Rect.from_size(width, height)
        if rect.empty():
            return cls(rect, 0, b"")
        return cls(rect, width * 4, pixels.astype(np.uint8, copy=False))

    def to_array(self) -> np.ndarray:
        """
        Returns the pixels as array

        :return: A read-only (height, width, 4) uint8 array
        """
        if self.stride == self.width * 4 and not self.rect.empty():
            return self.pix[: self.stride * self.height].reshape(
                self.height, self.width, 4
            )
        return self.rows()

    def at(self, x: int, y: int) -> NRGBA:
        """
        Returns the color at given position

        :param x: The x coordinate within rect
        :param y: The y coordinate within rect
        :return: The color. Transparent black outside of the bounds.
        """
        if not (self.rect.min_x <= x < self.rect.max_x) or not (
            self.rect.min_y <= y < self.rect.max_y
        ):
            return NRGBA(0, 0, 0, 0)
        offset = (y - self.rect.min_y) * self.stride + (x - self.rect.min_x) * 4
        return NRGBA(*(int(value) for value in self.pix[offset : offset + 4]))

    def opaque(self) -> bool:
        """Returns True if every pixel has an alpha value of 0xFF."""
        return bool(np.all(self.rows()[..., 3] == 0xFF))

    def to_pil(self) -> PIL.Image.Image:
        """
        Converts the image to a PIL image in mode RGBA

        :return: The PIL image
        """
        if self.rect.empty():
            return PIL.Image.new("RGBA", (0, 0))
        return PIL.Image.fromarray(np.array(self.to_array()))


@dataclass(frozen=True, eq=False)
class NRGBA64Image(PackedPixelSource):
    """16-bit, non-premultiplied RGBA pixels."""

    model: ClassVar[PixelModel] = PixelModel.NRGBA64
    bytes_per_pixel: ClassVar[int] = 8


@dataclass(frozen=True, eq=False)
class RGBAImage(PackedPixelSource):
    """8-bit, alpha-premultiplied RGBA pixels."""

    model: ClassVar[PixelModel] = PixelModel.RGBA
    bytes_per_pixel: ClassVar[int] = 4


@dataclass(frozen=True, eq=False)
class RGBA64Image(PackedPixelSource):
    """16-bit, alpha-premultiplied RGBA pixels."""

    model: ClassVar[PixelModel] = PixelModel.RGBA64
    bytes_per_pixel: ClassVar[int] = 8


@dataclass(frozen=True, eq=False)
class GrayImage(PackedPixelSource):
    """8-bit single channel gray pixels."""

    model: ClassVar[PixelModel] = PixelModel.GRAY
    bytes_per_pixel: ClassVar[int] = 1


@dataclass(frozen=True, eq=False)
class Gray16Image(PackedPixelSource):
    """16-bit single channel gray pixels."""

    model: ClassVar[PixelModel] = PixelModel.GRAY16
    bytes_per_pixel: ClassVar[int] = 2


@dataclass(frozen=True, eq=False)
class AlphaImage(PackedPixelSource):
    """8-bit alpha-only pixels, the color is implicitly white."""

    model: ClassVar[PixelModel] = PixelModel.ALPHA
    bytes_per_pixel: ClassVar[int] = 1


@dataclass(frozen=True, eq=False)
class Alpha16Image(PackedPixelSource):
    """16-bit alpha-only pixels, the color is implicitly white."""

    model: ClassVar[PixelModel] = PixelModel.ALPHA16
    bytes_per_pixel: ClassVar[int] = 2


@dataclass(frozen=True, eq=False)
class CMYKImage(PackedPixelSource):
    """8-bit C, M, Y, K pixels as produced by print oriented JPEGs and TIFFs."""

    model: ClassVar[PixelModel] = PixelModel.CMYK
    bytes_per_pixel: ClassVar[int] = 4


@dataclass(frozen=True, eq=False)
class YCbCrImage(PixelSource):
    """
    Luma/chroma planes as stored by JPEG.

    The Cb and Cr planes share ``c_stride`` and are subsampled according to
    ``subsample_ratio``. The chroma sample of the pixel (x, y) is found at
    column ``x // hf - min_x // hf`` and row ``y // vf - min_y // vf`` of the
    chroma planes, hf and vf being the ratio's subsampling factors.
    Floor division keeps chroma blocks aligned to multiples of the factors
    even left of or above the origin. For odd negative origins this layout
    therefore differs from decoders which truncate toward zero.
    """

    y: np.ndarray = field(repr=False)
    cb: np.ndarray = field(repr=False)
    cr: np.ndarray = field(repr=False)
    y_stride: int = 0
    c_stride: int = 0
    subsample_ratio: SubsampleRatio = SubsampleRatio.RATIO_444

    model: ClassVar[PixelModel] = PixelModel.YCBCR

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "y", _as_buffer(self.y))
        object.__setattr__(self, "cb", _as_buffer(self.cb))
        object.__setattr__(self, "cr", _as_buffer(self.cr))
        object.__setattr__(
            self, "subsample_ratio", SubsampleRatio.parse(self.subsample_ratio)
        )
        if self.rect.empty():
            return
        required = self.y_stride * (self.height - 1) + self.width
        if len(self.y) < required:
            raise ValueError(
                f"Luma plane holds {len(self.y)} bytes, {required} required"
            )
        c_width, c_height = self.subsample_ratio.chroma_size(self.rect)
        c_required = self.c_stride * (c_height - 1) + c_width
        if len(self.cb) < c_required or len(self.cr) < c_required:
            raise ValueError(
                f"Chroma planes hold {len(self.cb)}/{len(self.cr)} bytes, "
                f"{c_required} required"
            )


@dataclass(frozen=True, eq=False)
class PalettedImage(PackedPixelSource):
    """
    8-bit palette indices and their color table.

    Palette entries may be straight (:class:`NRGBA`) or premultiplied
    (:class:`RGBA`) colors; plain tuples are treated as straight colors.
    """

    palette: tuple[NRGBA | RGBA, ...] = ()

    model: ClassVar[PixelModel] = PixelModel.PALETTED
    bytes_per_pixel: ClassVar[int] = 1

    def __post_init__(self):
        super().__post_init__()
        entries = tuple(
            entry if isinstance(entry, (NRGBA, RGBA)) else NRGBA(*entry)
            for entry in self.palette
        )
        if len(entries) > 256:
            raise ValueError(f"Palette holds {len(entries)} entries, at most 256 allowed")
        object.__setattr__(self, "palette", entries)


SourceImage = Union[
    NRGBAImage,
    NRGBA64Image,
    RGBAImage,
    RGBA64Image,
    GrayImage,
    Gray16Image,
    AlphaImage,
    Alpha16Image,
    CMYKImage,
    YCbCrImage,
    PalettedImage,
]
"Any of the supported source pixel representations"

CanonicalImage = NRGBAImage
"The canonical, 8-bit non-premultiplied RGBA representation"
