"""
Pytest fixtures for stagio tests
"""

import io

import numpy as np
import pytest

from stagio import MemoryStorage, NRGBAImage, Rect, Storage


class CreateError(OSError):
    """Injected failure of Storage.create"""


class CloseError(OSError):
    """Injected failure of closing a written stream"""


class OpenError(OSError):
    """Injected failure of Storage.open"""


class ClosingFailsStream(io.BytesIO):
    """Accepts all data but fails to close."""

    def __init__(self, error: Exception):
        super().__init__()
        self.error = error
        self.close_attempts = 0

    def close(self):
        self.close_attempts += 1
        if self.close_attempts == 1:
            raise self.error
        super().close()


class BadStorage(Storage):
    """
    Storage failing on purpose: "badFile.jpg" can be created but not closed,
    everything else can neither be created nor opened.
    """

    def __init__(self):
        self.create_error = CreateError("failed to create file")
        self.close_error = CloseError("failed to close file")
        self.open_error = OpenError("failed to open file")
        self.streams: list[ClosingFailsStream] = []

    def create(self, name: str):
        if name == "badFile.jpg":
            stream = ClosingFailsStream(self.close_error)
            self.streams.append(stream)
            return stream
        raise self.create_error

    def open(self, name: str):
        raise self.open_error


def make_nrgba(width: int, height: int, pix: list[int]) -> NRGBAImage:
    return NRGBAImage(Rect(0, 0, width, height), width * 4, pix)


def assert_nrgba_close(got: NRGBAImage, want: NRGBAImage, delta: int = 0):
    """
    Asserts that two canonical images have the same bounds and that all
    channels differ by at most delta
    """
    assert isinstance(got, NRGBAImage)
    assert got.rect == want.rect
    got_pixels = got.to_array().astype(np.int16)
    want_pixels = want.to_array().astype(np.int16)
    assert got_pixels.shape == want_pixels.shape
    difference = np.abs(got_pixels - want_pixels)
    assert difference.max(initial=0) <= delta, f"got {got.pix.tolist()} want {want.pix.tolist()}"


@pytest.fixture
def opaque_image() -> NRGBAImage:
    """4x6 image of 2x2 blocks in black, white, red, green, blue and gray."""
    return make_nrgba(
        4,
        6,
        [
            0x00, 0x00, 0x00, 0xff, 0x00, 0x00, 0x00, 0xff, 0xff, 0xff, 0xff, 0xff, 0xff, 0xff, 0xff, 0xff,
            0x00, 0x00, 0x00, 0xff, 0x00, 0x00, 0x00, 0xff, 0xff, 0xff, 0xff, 0xff, 0xff, 0xff, 0xff, 0xff,
            0xff, 0x00, 0x00, 0xff, 0xff, 0x00, 0x00, 0xff, 0x00, 0xff, 0x00, 0xff, 0x00, 0xff, 0x00, 0xff,
            0xff, 0x00, 0x00, 0xff, 0xff, 0x00, 0x00, 0xff, 0x00, 0xff, 0x00, 0xff, 0x00, 0xff, 0x00, 0xff,
            0x00, 0x00, 0xff, 0xff, 0x00, 0x00, 0xff, 0xff, 0x88, 0x88, 0x88, 0xff, 0x88, 0x88, 0x88, 0xff,
            0x00, 0x00, 0xff, 0xff, 0x00, 0x00, 0xff, 0xff, 0x88, 0x88, 0x88, 0xff, 0x88, 0x88, 0x88, 0xff,
        ],
    )


@pytest.fixture
def translucent_image() -> NRGBAImage:
    """Same layout as opaque_image with half and fully transparent rows."""
    return make_nrgba(
        4,
        6,
        [
            0x00, 0x00, 0x00, 0xff, 0x00, 0x00, 0x00, 0xff, 0xff, 0xff, 0xff, 0xff, 0xff, 0xff, 0xff, 0xff,
            0x00, 0x00, 0x00, 0xff, 0x00, 0x00, 0x00, 0xff, 0xff, 0xff, 0xff, 0xff, 0xff, 0xff, 0xff, 0xff,
            0xff, 0x00, 0x00, 0x80, 0xff, 0x00, 0x00, 0x80, 0x00, 0xff, 0x00, 0x80, 0x00, 0xff, 0x00, 0x80,
            0xff, 0x00, 0x00, 0x80, 0xff, 0x00, 0x00, 0x80, 0x00, 0xff, 0x00, 0x80, 0x00, 0xff, 0x00, 0x80,
            0x00, 0x00, 0xff, 0x00, 0x00, 0x00, 0xff, 0x00, 0x88, 0x88, 0x88, 0x00, 0x88, 0x88, 0x88, 0x00,
            0x00, 0x00, 0xff, 0x00, 0x00, 0x00, 0xff, 0x00, 0x88, 0x88, 0x88, 0x00, 0x88, 0x88, 0x88, 0x00,
        ],
    )


@pytest.fixture
def memory_storage() -> MemoryStorage:
    """An empty in-memory storage."""
    return MemoryStorage()


@pytest.fixture
def bad_storage() -> BadStorage:
    """A storage injecting create, close and open failures."""
    return BadStorage()
