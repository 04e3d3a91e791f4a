"""
Tests for data URI helpers
"""
import base64

import pytest

from atelier.services.imaging import (
    ImageDecodeError,
    decode_image,
    encode_png,
    hex_to_rgb,
    normalize_upload,
    strip_data_url,
)

from conftest import make_data_uri, make_header_only_png


def test_hex_to_rgb():
    assert hex_to_rgb("#ff2fb3") == (255, 47, 179)
    assert hex_to_rgb("000000") == (0, 0, 0)


def test_strip_data_url():
    assert strip_data_url("data:image/png;base64,QUJD") == "QUJD"
    assert strip_data_url("QUJD") == "QUJD"


def test_decode_data_uri():
    image = decode_image(make_data_uri(size=(10, 8), color=(1, 2, 3)))
    assert image.mode == "RGB"
    assert image.size == (10, 8)
    assert image.getpixel((0, 0)) == (1, 2, 3)


def test_encode_png_is_decodable():
    image = decode_image(make_data_uri(size=(5, 5)))
    encoded = encode_png(image)
    assert encoded.startswith("data:image/png;base64,")
    assert decode_image(encoded).size == (5, 5)


@pytest.mark.parametrize(
    "payload",
    [
        "data:image/png;base64,%%%not-base64%%%",
        "data:image/png;base64,",
        "data:image/png;base64," + base64.b64encode(b"plain text").decode(),
    ],
)
def test_decode_rejects_garbage(payload):
    with pytest.raises(ImageDecodeError):
        decode_image(payload)


def test_decode_rejects_oversized_payload():
    with pytest.raises(ImageDecodeError, match="limit"):
        decode_image(make_data_uri(size=(64, 64)), max_bytes=10)


def test_normalize_upload_adds_prefix_to_raw_base64():
    raw = make_data_uri().split(",", 1)[1]
    normalized = normalize_upload(raw)
    assert normalized == f"data:image/png;base64,{raw}"


def test_normalize_upload_keeps_data_uri():
    uri = make_data_uri()
    assert normalize_upload(uri) == uri


def test_decode_rejects_decompression_bomb():
    # Pillow refuses this size outright while opening
    with pytest.raises(ImageDecodeError, match="Unreadable"):
        decode_image(make_header_only_png(30000, 30000))


def test_decode_checks_pixel_ceiling_before_loading():
    # Small enough for Pillow, too large for the configured ceiling
    with pytest.raises(ImageDecodeError, match="pixels"):
        decode_image(make_header_only_png(5000, 5000))


def test_normalize_upload_rejects_comma_without_data_prefix():
    raw = make_data_uri().split(",", 1)[1]
    with pytest.raises(ImageDecodeError, match="data URI"):
        normalize_upload("abc," + raw)


def test_normalize_upload_rebuilds_prefix_from_detected_format():
    raw = make_data_uri().split(",", 1)[1]
    assert normalize_upload(f"data:text/plain;base64,{raw}") == f"data:image/png;base64,{raw}"
