import base64
from io import BytesIO

import pytest
from PIL import Image

from core.errors import ImageDecodeError, ValidationError
from core.image_pipeline import (
    check_upload_size,
    compress_image,
    decode_data_uri,
    image_size,
    load_upload,
    prepare_upload,
    scaled_size,
    to_data_uri,
)


def test_wide_image_is_scaled_to_max_width(image_bytes):
    asset = compress_image(image_bytes(1600, 900), max_width=800, quality=0.7)

    assert (asset.width, asset.height) == (800, 450)
    with Image.open(BytesIO(asset.encoded_bytes)) as img:
        assert img.format == "JPEG"
        assert img.size == (800, 450)


def test_small_image_keeps_its_size(image_bytes):
    asset = compress_image(image_bytes(120, 80), max_width=800)

    assert (asset.width, asset.height) == (120, 80)
    assert asset.compressed
    assert asset.mime_type == "image/jpeg"


def test_preview_uri_matches_encoded_bytes(image_bytes):
    asset = compress_image(image_bytes(50, 50), filename="logo.png")

    mime, data = decode_data_uri(asset.preview_data_uri)
    assert mime == "image/jpeg"
    assert data == asset.encoded_bytes
    assert asset.filename == "logo.jpg"
    assert asset.as_file_tuple() == ("logo.jpg", asset.encoded_bytes, "image/jpeg")


def test_transparent_png_is_flattened(image_bytes):
    asset = compress_image(image_bytes(40, 40, mode="RGBA"))

    with Image.open(BytesIO(asset.encoded_bytes)) as img:
        assert img.mode == "RGB"


def test_lower_quality_gives_smaller_output():
    # Noisy content so quality actually matters
    img = Image.effect_noise((400, 400), 80).convert("RGB")
    buf = BytesIO()
    img.save(buf, format="PNG")
    source = buf.getvalue()

    low = compress_image(source, quality=0.1)
    high = compress_image(source, quality=0.9)

    assert low.size < high.size


@pytest.mark.parametrize("width, height, expected", [
    (1600, 900, (800, 450)),
    (801, 3, (800, 3)),       # 2.996 rounds up
    (1600, 1, (800, 1)),      # 0.5 rounds half up
    (3000, 1, (800, 1)),      # never below one pixel
    (800, 600, (800, 600)),
])
def test_scaled_size(width, height, expected):
    assert scaled_size(width, height, 800) == expected


def test_garbage_bytes_raise_decode_error():
    with pytest.raises(ImageDecodeError):
        compress_image(b"definitely not an image")


@pytest.mark.parametrize("kwargs", [{"max_width": 0}, {"quality": 1.5}, {"quality": -0.1}])
def test_invalid_arguments_are_rejected(image_bytes, kwargs):
    with pytest.raises(ValidationError):
        compress_image(image_bytes(10, 10), **kwargs)


def test_prepare_upload_falls_back_to_original_bytes():
    raw = b"GIF89a-but-broken"

    asset = prepare_upload(raw, "banner.gif")

    assert not asset.compressed
    assert asset.encoded_bytes == raw
    assert asset.mime_type == "image/gif"
    assert asset.filename == "banner.gif"
    assert asset.preview_data_uri == "data:image/gif;base64," + base64.b64encode(raw).decode()


def test_upload_size_limit():
    check_upload_size(5 * 1024 * 1024)
    with pytest.raises(ValidationError, match="5MB"):
        check_upload_size(5 * 1024 * 1024 + 1)


def test_load_upload_reads_and_compresses(tmp_path, image_bytes):
    path = tmp_path / "dish.png"
    path.write_bytes(image_bytes(1000, 500))

    asset = load_upload(str(path))

    assert (asset.width, asset.height) == (800, 400)
    assert asset.filename == "dish.jpg"


def test_load_upload_rejects_large_file_before_reading(tmp_path, monkeypatch):
    path = tmp_path / "huge.jpg"
    path.write_bytes(b"x" * 16)
    monkeypatch.setattr("core.image_pipeline.os.path.getsize", lambda p: 6 * 1024 * 1024)

    with pytest.raises(ValidationError):
        load_upload(str(path))


def test_data_uri_helpers(image_bytes):
    data = image_bytes(3, 2)

    assert decode_data_uri(to_data_uri(data, "image/png")) == ("image/png", data)
    assert image_size(data) == (3, 2)
    with pytest.raises(ValueError):
        decode_data_uri("https://example.com/a.png")
