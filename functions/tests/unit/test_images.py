"""Unit tests for embedded image decoding."""

import base64
import io
import struct
import zlib

import pytest
from PIL import Image

from renderer.images import IMAGE_FAILED, IMAGE_MISSING, IMAGE_OK, load_image, strip_data_uri


def _encoded(fmt: str, mode: str = "RGB") -> str:
    buffer = io.BytesIO()
    Image.new(mode, (5, 2), color=0).save(buffer, format=fmt)
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def _oversized_png(width: int = 30000, height: int = 30000) -> str:
    """A 1x1 PNG whose header claims far larger dimensions."""
    buffer = io.BytesIO()
    Image.new("RGB", (1, 1)).save(buffer, format="PNG")
    raw = bytearray(buffer.getvalue())
    # IHDR data starts after the 8 byte signature and the chunk length and type
    raw[16:24] = struct.pack(">II", width, height)
    raw[29:33] = struct.pack(">I", zlib.crc32(bytes(raw[12:29])) & 0xFFFFFFFF)
    return base64.b64encode(bytes(raw)).decode("ascii")


class TestLoadImage:

    @pytest.mark.parametrize("data", [None, "", "   "])
    def test_blank_is_missing(self, data):
        assert load_image(data).status == IMAGE_MISSING

    @pytest.mark.parametrize("data", ["not base64 at all!", base64.b64encode(b"plain text").decode("ascii")])
    def test_undecodable_is_failed(self, data):
        loaded = load_image(data)

        assert loaded.status == IMAGE_FAILED
        assert loaded.src is None

    def test_oversized_dimensions_are_failed(self):
        loaded = load_image(_oversized_png())

        assert loaded.status == IMAGE_FAILED
        assert loaded.src is None

    def test_png_passes_through(self, png_base64):
        loaded = load_image(png_base64)

        assert loaded.status == IMAGE_OK
        assert loaded.src == f"data:image/png;base64,{png_base64}"
        assert (loaded.width_px, loaded.height_px) == (4, 3)

    def test_jpeg_keeps_its_mime_type(self):
        loaded = load_image(_encoded("JPEG"))

        assert loaded.src.startswith("data:image/jpeg;base64,")

    @pytest.mark.parametrize("fmt,mode", [("GIF", "P"), ("BMP", "RGB")])
    def test_other_formats_are_converted_to_png(self, fmt, mode):
        loaded = load_image(_encoded(fmt, mode))

        assert loaded.status == IMAGE_OK
        assert loaded.src.startswith("data:image/png;base64,")
        assert (loaded.width_px, loaded.height_px) == (5, 2)

    def test_data_uri_prefix_is_stripped(self, png_base64):
        loaded = load_image(f"data:image/png;base64,{png_base64}")

        assert loaded.status == IMAGE_OK


def test_strip_data_uri():
    assert strip_data_uri("data:image/png;base64,QUJD") == "QUJD"
    assert strip_data_uri("QUJD") == "QUJD"
