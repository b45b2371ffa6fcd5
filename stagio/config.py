"""Library configuration."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Default codec settings, overridable via STAGIO_* environment variables."""

    # Encoding
    JPEG_QUALITY: int = 95  # 1 (worst) .. 100 (best)
    JPEG_SUBSAMPLING: str = "4:4:4"  # chroma subsampling of written JPEGs
    PNG_COMPRESSION_LEVEL: int = 6  # 0 (none) .. 9 (best)
    GIF_NUM_COLORS: int = 256  # palette size of written GIFs
    TIFF_COMPRESSION: str | None = "tiff_deflate"  # None writes raw TIFFs

    # Decoding
    AUTO_ORIENTATION: bool = False  # apply the EXIF orientation tag
    MAX_IMAGE_PIXELS: int | None = 178_956_970  # decompression bomb guard

    model_config = {"env_prefix": "STAGIO_"}


settings = Settings()


def get_settings() -> Settings:
    """Returns the process wide settings."""
    return settings
