"""
Tests opening, saving, encoding and decoding images
"""

import io

import PIL.Image
import pytest

import stagio
from stagio import (
    Format,
    GrayImage,
    ImageDecodeError,
    ImageEncodeError,
    ImageIO,
    NRGBA,
    PalettedImage,
    Rect,
    UnsupportedFormatError,
    YCbCrImage,
    clone,
    new,
    use_storage,
)
from stagio.codecs import Codec

from conftest import assert_nrgba_close


@pytest.mark.parametrize("ext", ["jpg", "jpeg", "png", "gif", "bmp", "tif", "tiff"])
def test_open_save_round_trip(tmp_path, ext, opaque_image, translucent_image):
    """
    Tests that saved images are reproduced by opening them again
    """
    filename = tmp_path / f"test.{ext}"
    image = translucent_image if ext == "png" else opaque_image

    stagio.save(image, filename, jpeg_quality=100)
    reopened = stagio.open(filename)
    got = clone(reopened)

    delta = 3 if ext in ("jpg", "jpeg", "gif") else 0
    assert_nrgba_close(got, image, delta)


def test_open_keeps_source_representation(tmp_path, opaque_image):
    """
    Tests that open does not canonicalize the decoded data
    """
    stagio.save(opaque_image, tmp_path / "test.jpg")
    stagio.save(opaque_image, tmp_path / "test.gif")
    assert isinstance(stagio.open(tmp_path / "test.jpg"), YCbCrImage)
    assert isinstance(stagio.open(tmp_path / "test.gif"), PalettedImage)


def test_round_trip_gray_png(memory_storage):
    """
    Tests that gray PNGs decode into the gray representation
    """
    stream = io.BytesIO()
    PIL.Image.new("L", (3, 2), 0x42).save(stream, format="PNG")
    memory_storage.put("gray.png", stream.getvalue())
    image = stagio.open("gray.png", storage=memory_storage)
    assert isinstance(image, GrayImage)
    assert clone(image).at(2, 1) == NRGBA(0x42, 0x42, 0x42, 0xff)


def test_encode_translucent_jpeg(translucent_image):
    """
    Tests that images with alpha can be written to formats without alpha
    """
    buffer = io.BytesIO()
    stagio.encode(buffer, translucent_image, Format.JPEG)
    assert buffer.getvalue()[:3] == b"\xff\xd8\xff"

    buffer = io.BytesIO()
    stagio.encode(buffer, translucent_image, Format.BMP)
    decoded = clone(stagio.decode(io.BytesIO(buffer.getvalue())))
    # fully transparent pixels become black
    assert decoded.at(0, 5) == NRGBA(0, 0, 0, 0xff)
    assert decoded.at(0, 0) == NRGBA(0, 0, 0, 0xff)
    assert decoded.at(2, 0) == NRGBA(0xff, 0xff, 0xff, 0xff)


def test_encode_decode_streams(opaque_image):
    """
    Tests encoding to and decoding from streams without storage
    """
    for fmt in (Format.PNG, Format.BMP, Format.TIFF):
        buffer = io.BytesIO()
        stagio.encode(buffer, opaque_image, fmt)
        buffer.seek(0)
        assert_nrgba_close(clone(stagio.decode(buffer)), opaque_image)


def test_encode_pil_and_source_images():
    """
    Tests that every encodable type is canonicalized first
    """
    buffer = io.BytesIO()
    stagio.encode(buffer, GrayImage(Rect(-1, -1, 1, 0), 2, [0x10, 0x20]), Format.PNG)
    buffer.seek(0)
    got = clone(stagio.decode(buffer))
    assert got.rect == Rect(0, 0, 2, 1)
    assert got.at(1, 0) == NRGBA(0x20, 0x20, 0x20, 0xff)

    buffer = io.BytesIO()
    stagio.encode(buffer, PIL.Image.new("RGB", (2, 2), (1, 2, 3)), 1)
    buffer.seek(0)
    assert clone(stagio.decode(buffer)).at(1, 1) == NRGBA(1, 2, 3, 0xff)


def test_encode_unsupported_format(translucent_image):
    """
    Tests that out of range format identifiers are rejected
    """
    with pytest.raises(UnsupportedFormatError):
        stagio.encode(io.BytesIO(), translucent_image, Format(100))
    with pytest.raises(UnsupportedFormatError):
        stagio.encode(io.BytesIO(), translucent_image, -1)


def test_encode_empty_image():
    """
    Tests that images without pixels can not be encoded
    """
    with pytest.raises(ImageEncodeError, match="as PNG"):
        stagio.encode(io.BytesIO(), new(0, 0, NRGBA(0, 0, 0)), Format.PNG)


def test_decode_bad_data():
    """
    Tests that unknown, damaged and unsupported data is rejected
    """
    with pytest.raises(ImageDecodeError):
        stagio.decode(io.BytesIO(b"bad data"))

    stream = io.BytesIO()
    PIL.Image.new("RGB", (16, 16), (1, 2, 3)).save(stream, format="PNG")
    truncated = stream.getvalue()[:45]
    with pytest.raises(ImageDecodeError):
        stagio.decode(io.BytesIO(truncated))

    with pytest.raises(UnsupportedFormatError):
        stagio.decode(io.BytesIO(b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n" + b"\x00" * 32))


def test_decode_pixel_limit(opaque_image):
    """
    Tests that images beyond the configured pixel limit are rejected
    """
    buffer = io.BytesIO()
    stagio.encode(buffer, opaque_image, Format.PNG)
    image_io = ImageIO(settings=stagio.Settings(MAX_IMAGE_PIXELS=10))
    with pytest.raises(ImageDecodeError):
        image_io.decode(io.BytesIO(buffer.getvalue()))


def test_decode_auto_orientation():
    """
    Tests that the EXIF orientation is applied on request only
    """
    exif = PIL.Image.Exif()
    exif[0x0112] = 6  # rotated by 90 degrees
    stream = io.BytesIO()
    PIL.Image.new("RGB", (8, 2), (200, 10, 10)).save(stream, format="JPEG", exif=exif)
    data = stream.getvalue()

    assert stagio.decode(io.BytesIO(data)).size == (8, 2)
    assert stagio.decode(io.BytesIO(data), auto_orientation=True).size == (2, 8)


def test_save_unsupported_extension(tmp_path, translucent_image, memory_storage):
    """
    Tests that unknown extensions fail before any stream is acquired
    """
    with pytest.raises(UnsupportedFormatError):
        stagio.save(translucent_image, tmp_path / "test.unknown")
    assert not (tmp_path / "test.unknown").exists()
    with pytest.raises(UnsupportedFormatError):
        stagio.open("test.unknown", storage=memory_storage)


def test_storage_errors_propagate(bad_storage, translucent_image):
    """
    Tests that create, close and open failures reach the caller unchanged
    """
    with use_storage(bad_storage):
        with pytest.raises(OSError) as excinfo:
            stagio.save(translucent_image, "test.jpg")
        assert excinfo.value is bad_storage.create_error

        with pytest.raises(OSError) as excinfo:
            stagio.save(translucent_image, "badFile.jpg")
        assert excinfo.value is bad_storage.close_error
        # the image was fully encoded before closing failed
        assert bad_storage.streams[-1].getvalue()[:3] == b"\xff\xd8\xff"

        with pytest.raises(OSError) as excinfo:
            stagio.open("test.jpg")
        assert excinfo.value is bad_storage.open_error


def test_encode_error_takes_precedence_over_close_error(bad_storage, opaque_image, monkeypatch):
    """
    Tests that a failed close does not hide the encoding error
    """

    def failing_write(image, stream, options):
        raise OSError("encoder failure")

    codec = Codec(Format.JPEG, "JPEG", "image/jpeg", failing_write)
    monkeypatch.setitem(stagio.codecs._CODECS, Format.JPEG, codec)
    image_io = ImageIO(bad_storage)
    with pytest.raises(ImageEncodeError):
        image_io.save(opaque_image, "badFile.jpg")
    assert bad_storage.streams[-1].close_attempts == 1


def test_save_empty_image(tmp_path):
    """
    Tests that empty images are rejected before a file is created
    """
    filename = tmp_path / "empty.png"
    with pytest.raises(ImageEncodeError):
        stagio.save(new(0, 0, NRGBA(0, 0, 0)), filename)
    assert not filename.exists()


def test_open_decodes_with_extension_format(memory_storage, opaque_image):
    """
    Tests that the extension, not the content, selects the decoder
    """
    buffer = io.BytesIO()
    stagio.encode(buffer, opaque_image, Format.JPEG)
    memory_storage.put("photo.png", buffer.getvalue())
    with pytest.raises(ImageDecodeError):
        stagio.open("photo.png", storage=memory_storage)
    memory_storage.put("photo.jpg", buffer.getvalue())
    assert isinstance(stagio.open("photo.jpg", storage=memory_storage), YCbCrImage)


def test_image_io_with_memory_storage(memory_storage, translucent_image):
    """
    Tests an explicitly injected storage
    """
    image_io = ImageIO(memory_storage)
    image_io.save(translucent_image, "images/test.png")
    assert memory_storage.names() == ["images/test.png"]
    assert_nrgba_close(clone(image_io.open("images/test.png")), translucent_image)
    with pytest.raises(FileNotFoundError):
        image_io.open("images/missing.png")


def test_open_releases_stream_on_decode_error(memory_storage):
    """
    Tests that the stream is closed when decoding fails
    """
    streams = []
    real_open = memory_storage.open

    def tracking_open(name):
        stream = real_open(name)
        streams.append(stream)
        return stream

    memory_storage.open = tracking_open
    memory_storage.put("broken.png", b"\x89PNG\r\n\x1a\n broken")
    with pytest.raises(ImageDecodeError):
        stagio.open("broken.png", storage=memory_storage)
    assert streams and streams[0].closed
