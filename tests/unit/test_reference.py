"""Unit tests for reference image helpers."""

import base64
import io
from pathlib import Path

import pytest
from PIL import Image

from pixelforge.core.reference import (
    PNG_MAGIC,
    create_image_data_url,
    extension_for_mime,
    load_reference_image,
    parse_data_url,
    to_png_bytes,
)
from pixelforge.utils.exceptions import ImageProcessingError, ValidationError


def _image_bytes(fmt: str) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (2, 2), color=(128, 64, 32)).save(buf, format=fmt)
    return buf.getvalue()


@pytest.mark.unit
class TestDataUrls:
    def test_create(self):
        assert create_image_data_url("QUJD") == "data:image/png;base64,QUJD"
        assert create_image_data_url("QUJD", "image/jpeg") == "data:image/jpeg;base64,QUJD"

    def test_parse(self):
        data, mime = parse_data_url("data:image/jpeg;base64,QUJD")
        assert data == b"ABC"
        assert mime == "image/jpeg"

    def test_parse_not_data_url(self):
        with pytest.raises(ValidationError):
            parse_data_url("https://example.com/a.png")

    def test_parse_missing_base64_marker(self):
        with pytest.raises(ValidationError):
            parse_data_url("data:image/png,QUJD")

    def test_parse_invalid_base64(self):
        with pytest.raises(ValidationError):
            parse_data_url("data:image/png;base64,!!!")

    def test_extension_for_mime(self):
        assert extension_for_mime("image/png") == "png"
        assert extension_for_mime("image/jpeg") == "jpg"
        assert extension_for_mime("application/octet-stream") == "png"


@pytest.mark.unit
class TestToPngBytes:
    def test_png_unchanged(self):
        png = _image_bytes("PNG")
        assert to_png_bytes(png) is png

    def test_jpeg_converted(self):
        out = to_png_bytes(_image_bytes("JPEG"))
        assert out[:8] == PNG_MAGIC

    def test_garbage_raises(self):
        with pytest.raises(ImageProcessingError):
            to_png_bytes(b"not an image")


@pytest.mark.unit
class TestLoadReferenceImage:
    def test_from_path(self, tmp_path: Path):
        path = tmp_path / "ref.jpg"
        path.write_bytes(_image_bytes("JPEG"))
        assert load_reference_image(path)[:8] == PNG_MAGIC

    def test_from_data_url(self):
        url = "data:image/png;base64," + base64.b64encode(_image_bytes("PNG")).decode()
        assert load_reference_image(url)[:8] == PNG_MAGIC

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_reference_image(tmp_path / "missing.png")

    def test_unsupported_suffix(self, tmp_path: Path):
        path = tmp_path / "ref.txt"
        path.write_text("hello")
        with pytest.raises(ValidationError) as exc_info:
            load_reference_image(path)
        assert exc_info.value.field == "image_format"

    def test_corrupt_file_reports_path(self, tmp_path: Path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"not really a png")
        with pytest.raises(ImageProcessingError) as exc_info:
            load_reference_image(path)
        assert exc_info.value.image_path == str(path)
