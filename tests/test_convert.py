import base64
import io

import numpy as np
import pytest
from PIL import Image, features

from edit_core import (
    EditIOError,
    ImageFormat,
    ImageValue,
    InvalidImageData,
    InvalidParameters,
    UnsupportedFormat,
    convert_file,
    convert_format,
)


@pytest.fixture
def red_png(make_image):
    return make_image(Image.new("RGBA", (100, 100), (255, 0, 0, 255)), path="photos/red.png")


def test_png_to_jpeg(red_png):
    out = convert_format(red_png, "JPEG", 90)
    assert out.format is ImageFormat.JPEG
    assert (out.width, out.height) == (100, 100)
    assert out.path == "photos/red.jpg"
    assert Image.open(io.BytesIO(base64.b64decode(out.data))).format == "JPEG"


def test_round_trip_keeps_dimensions(make_image, gradient):
    src = make_image(gradient(120, 80))
    back = convert_format(convert_format(src, "JPEG"), "PNG")
    assert back.format is ImageFormat.PNG
    assert (back.width, back.height) == (120, 80)
    assert back.path.endswith(".png")


@pytest.mark.parametrize("quality", [1, 100])
def test_jpeg_quality_bounds_are_valid(red_png, quality):
    out = convert_format(red_png, "JPEG", quality)
    img = Image.open(io.BytesIO(base64.b64decode(out.data)))
    img.load()
    assert img.size == (100, 100)


def test_lower_quality_gives_smaller_file(make_image):
    rng = np.random.default_rng(1)
    noise = make_image(rng.integers(0, 256, (64, 64, 3), dtype=np.uint8))
    low = convert_format(noise, "JPEG", 5)
    high = convert_format(noise, "JPEG", 95)
    assert len(low.data) < len(high.data)


@pytest.mark.parametrize("quality", [0, 101, 150])
def test_bad_quality_fails_before_decode(quality):
    # payload is not even base64; the quality check must come first
    broken = ImageValue("x.png", 1, 1, ImageFormat.PNG, "%%%", False)
    with pytest.raises(InvalidParameters, match="Quality parameter must be between 1 and 100"):
        convert_format(broken, "JPEG", quality)


def test_unknown_target(red_png):
    with pytest.raises(UnsupportedFormat, match="Unsupported target format"):
        convert_format(red_png, "INVALID")


@pytest.mark.parametrize("target", ["SVG", "HEIC"])
def test_no_encode_path(red_png, target):
    with pytest.raises(UnsupportedFormat):
        convert_format(red_png, target)


def test_bad_payload(red_png):
    broken = ImageValue("x.png", 1, 1, ImageFormat.PNG, "%%%", False)
    with pytest.raises(InvalidImageData):
        convert_format(broken, "PNG")


@pytest.mark.parametrize("target", ["JPEG", "BMP", "WEBP", "TIFF", "GIF", "ICO", "PNG"])
def test_multiple_targets(make_image, gradient, target):
    out = convert_format(make_image(gradient(48, 32)), target)
    assert out.format.value == target
    assert (out.width, out.height) == (48, 32)
    assert out.path.endswith(ImageFormat.parse(target).extension)


@pytest.mark.skipif(not features.check("avif"), reason="Pillow built without AVIF")
def test_avif_ignores_quality(red_png):
    a = convert_format(red_png, "AVIF", 10)
    b = convert_format(red_png, "AVIF", 90)
    assert a.data == b.data


def test_webp_ignores_quality(make_image, gradient):
    src = make_image(gradient(64, 64))
    assert convert_format(src, "WEBP", 5).data == convert_format(src, "WEBP", 95).data


def test_transparency_dropped_by_jpeg(make_image):
    src = make_image(Image.new("RGBA", (10, 10), (0, 0, 0, 0)))
    assert src.has_alpha is True
    assert convert_format(src, "JPEG").has_alpha is False
    assert convert_format(src, "WEBP").has_alpha is True



def test_convert_file(tmp_path):
    Image.new("RGBA", (6, 4), (0, 255, 0, 200)).save(tmp_path / "b.png")
    out = convert_file(tmp_path / "b.png", tmp_path / "b.jpg", "jpg", quality=80)
    assert out == tmp_path / "b.jpg"
    with Image.open(out) as img:
        assert (img.format, img.size) == ("JPEG", (6, 4))


def test_convert_file_does_not_overwrite_by_default(tmp_path):
    Image.new("RGB", (4, 4)).save(tmp_path / "a.png")
    (tmp_path / "a.bmp").write_bytes(b"keep")
    with pytest.raises(EditIOError, match="Refusing to overwrite"):
        convert_file(tmp_path / "a.png", tmp_path / "a.bmp", "BMP")
    assert (tmp_path / "a.bmp").read_bytes() == b"keep"
