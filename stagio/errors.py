"""Exception classes for stagio."""


class StagioError(Exception):
    """Base exception for stagio errors."""

    pass


class UnsupportedFormatError(StagioError, ValueError):
    """Raised when a file extension, container or format identifier can not be
    mapped to one of the supported image formats."""

    def __init__(self, message: str = "unsupported image format"):
        super().__init__(message)


class ImageDecodeError(StagioError, ValueError):
    """Raised for malformed, truncated or otherwise undecodable image data."""

    pass


class ImageEncodeError(StagioError):
    """Raised when the image codec fails to write an image."""

    pass


class UnsupportedPixelModelError(StagioError, TypeError):
    """Raised when an object can not be converted to the canonical pixel
    representation."""

    pass
