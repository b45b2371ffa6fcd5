# stagio - Codec options
"""
Options accepted by the encoding and decoding operations.

Options are passed as keyword arguments, e.g.
``save(image, "out.jpg", jpeg_quality=100)``, and are validated once when
the operation starts. Options not relevant for the target format are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace

from .config import Settings, get_settings
from .pixels import SubsampleRatio

_JPEG_SUBSAMPLING = {
    SubsampleRatio.RATIO_444: 0,
    SubsampleRatio.RATIO_422: 1,
    SubsampleRatio.RATIO_420: 2,
}
"Pillow's subsampling codes of the ratios JPEG writing supports"


@dataclass(frozen=True)
class EncodeOptions:
    """Options of the image encoders."""

    jpeg_quality: int = 95
    "JPEG quality between 1 (worst) and 100 (best)"
    jpeg_subsampling: SubsampleRatio = SubsampleRatio.RATIO_444
    "Chroma subsampling of written JPEGs, 4:4:4, 4:2:2 or 4:2:0"
    png_compression_level: int = 6
    "zlib compression level between 0 and 9"
    gif_num_colors: int = 256
    "Maximum number of palette entries of written GIFs"
    tiff_compression: str | None = "tiff_deflate"
    "Pillow compression name for TIFFs, None for uncompressed data"

    def __post_init__(self):
        object.__setattr__(
            self, "jpeg_subsampling", SubsampleRatio.parse(self.jpeg_subsampling)
        )
        if not 1 <= self.jpeg_quality <= 100:
            raise ValueError(f"jpeg_quality must be within 1..100, got {self.jpeg_quality}")
        if self.jpeg_subsampling not in _JPEG_SUBSAMPLING:
            raise ValueError(
                f"JPEG does not support chroma subsampling {self.jpeg_subsampling.value}"
            )
        if not 0 <= self.png_compression_level <= 9:
            raise ValueError(
                f"png_compression_level must be within 0..9, got {self.png_compression_level}"
            )
        if not 1 <= self.gif_num_colors <= 256:
            raise ValueError(
                f"gif_num_colors must be within 1..256, got {self.gif_num_colors}"
            )

    @property
    def pil_jpeg_subsampling(self) -> int:
        """The subsampling code Pillow's JPEG writer expects."""
        return _JPEG_SUBSAMPLING[self.jpeg_subsampling]

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> EncodeOptions:
        """
        Creates the default options from the configuration

        :param settings: The settings. The process wide settings by default.
        :return: The options
        """
        settings = settings or get_settings()
        return cls(
            jpeg_quality=settings.JPEG_QUALITY,
            jpeg_subsampling=SubsampleRatio.parse(settings.JPEG_SUBSAMPLING),
            png_compression_level=settings.PNG_COMPRESSION_LEVEL,
            gif_num_colors=settings.GIF_NUM_COLORS,
            tiff_compression=settings.TIFF_COMPRESSION,
        )

    @classmethod
    def create(cls, settings: Settings | None = None, **options) -> EncodeOptions:
        """
        Creates options from keyword arguments on top of the configured
        defaults

        :param settings: The settings providing the defaults
        :param options: The options to override, see the class' fields
        :return: The options
        :raises TypeError: For unknown option names
        :raises ValueError: For out of range values
        """
        return replace(cls.from_settings(settings), **_checked(cls, options))


@dataclass(frozen=True)
class DecodeOptions:
    """Options of the image decoders."""

    auto_orientation: bool = False
    "Rotate/flip the image according to its EXIF orientation tag"

    @classmethod
    def create(cls, settings: Settings | None = None, **options) -> DecodeOptions:
        """
        Creates options from keyword arguments on top of the configured
        defaults

        :param settings: The settings providing the defaults
        :param options: The options to override
        :return: The options
        :raises TypeError: For unknown option names
        """
        settings = settings or get_settings()
        defaults = cls(auto_orientation=settings.AUTO_ORIENTATION)
        return replace(defaults, **_checked(cls, options))


def _checked(cls: type, options: dict) -> dict:
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(options) - known)
    if unknown:
        raise TypeError(f"Unknown {cls.__name__} option(s): {', '.join(unknown)}")
    return options
