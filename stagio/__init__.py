"""
stagio - Image I/O and canonical pixel normalization for Python
"""

from .color import NRGBA, RGBA, ColorTypes, to_nrgba
from .config import Settings, get_settings, settings
from .convert import clone, new
from .errors import (
    ImageDecodeError,
    ImageEncodeError,
    StagioError,
    UnsupportedFormatError,
    UnsupportedPixelModelError,
)
from .formats import (
    FORMAT_EXTENSIONS,
    Format,
    detect_format,
    format_from_extension,
    format_from_filename,
)
from .geometry import Rect
from .imaging import ImageIO, ImageTypes, decode, encode, open, save
from .options import DecodeOptions, EncodeOptions
from .pixels import (
    Alpha16Image,
    AlphaImage,
    CanonicalImage,
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
    SourceImage,
    SubsampleRatio,
    YCbCrImage,
)
from .storage import (
    FileSystemStorage,
    MemoryStorage,
    Storage,
    get_default_storage,
    set_default_storage,
    use_storage,
)

__all__ = [
    # Facade
    "ImageIO",
    "ImageTypes",
    "open",
    "save",
    "encode",
    "decode",
    "new",
    "clone",
    # Pixel representations
    "PixelModel",
    "PixelSource",
    "SourceImage",
    "CanonicalImage",
    "NRGBAImage",
    "NRGBA64Image",
    "RGBAImage",
    "RGBA64Image",
    "GrayImage",
    "Gray16Image",
    "AlphaImage",
    "Alpha16Image",
    "CMYKImage",
    "YCbCrImage",
    "PalettedImage",
    "SubsampleRatio",
    # Geometry and colors
    "Rect",
    "NRGBA",
    "RGBA",
    "ColorTypes",
    "to_nrgba",
    # Formats
    "Format",
    "FORMAT_EXTENSIONS",
    "format_from_extension",
    "format_from_filename",
    "detect_format",
    # Options and configuration
    "EncodeOptions",
    "DecodeOptions",
    "Settings",
    "settings",
    "get_settings",
    # Storage
    "Storage",
    "FileSystemStorage",
    "MemoryStorage",
    "get_default_storage",
    "set_default_storage",
    "use_storage",
    # Errors
    "StagioError",
    "UnsupportedFormatError",
    "ImageDecodeError",
    "ImageEncodeError",
    "UnsupportedPixelModelError",
]

__version__ = "0.1.0"
