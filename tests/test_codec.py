"""
圖片編解碼測試
"""

import io

import numpy as np
import pytest
from PIL import Image

from image_fanout.common.codec import decode_image, encode_image
from image_fanout.common.exceptions import DecodeError, EncodeError
from image_fanout.common.pixels import ChannelOrder, PixelBuffer


class TestDecode:
    """decode_image 測試"""

    @pytest.mark.unit
    def test_rgb_png(self, rgb_png_bytes: bytes) -> None:
        buffer = decode_image(rgb_png_bytes)
        assert (buffer.width, buffer.height) == (64, 48)
        assert buffer.has_alpha is False
        assert buffer.format == "PNG"
        assert len(buffer.pixels) == 64 * 48

    @pytest.mark.unit
    def test_rgba_png(self, rgba_png_bytes: bytes) -> None:
        buffer = decode_image(rgba_png_bytes)
        assert buffer.has_alpha is True
        assert len(buffer.pixels) == buffer.width * buffer.height

    @pytest.mark.unit
    def test_packs_argb(self) -> None:
        img = Image.new("RGBA", (1, 1), color=(1, 2, 3, 4))
        data = io.BytesIO()
        img.save(data, format="PNG")
        buffer = decode_image(data.getvalue())
        assert int(buffer.pixels[0]) == 0x04010203

    @pytest.mark.unit
    def test_packs_abgr(self) -> None:
        img = Image.new("RGBA", (1, 1), color=(1, 2, 3, 4))
        data = io.BytesIO()
        img.save(data, format="PNG")
        buffer = decode_image(data.getvalue(), channel_order=ChannelOrder.ABGR)
        assert int(buffer.pixels[0]) == 0x04030201

    @pytest.mark.unit
    def test_invalid_bytes(self) -> None:
        with pytest.raises(DecodeError, match="Cannot decode"):
            decode_image(b"definitely not an image", transform_name="sepia")

    @pytest.mark.unit
    def test_empty_bytes(self) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decode_image(b"", transform_name="tint")
        assert exc_info.value.transform_name == "tint"


class TestEncode:
    """encode_image 測試"""

    @pytest.mark.unit
    def test_round_trip_rgba(self, rgba_png_bytes: bytes) -> None:
        buffer = decode_image(rgba_png_bytes)
        restored = decode_image(encode_image(buffer))
        assert (restored.width, restored.height) == (buffer.width, buffer.height)
        assert np.array_equal(restored.pixels, buffer.pixels)

    @pytest.mark.unit
    def test_round_trip_rgb(self, rgb_png_bytes: bytes) -> None:
        buffer = decode_image(rgb_png_bytes)
        restored = decode_image(encode_image(buffer))
        assert restored.has_alpha is False
        assert np.array_equal(restored.pixels, buffer.pixels)

    @pytest.mark.unit
    def test_keeps_source_format(self, jpeg_bytes: bytes) -> None:
        buffer = decode_image(jpeg_bytes)
        output = encode_image(buffer)
        with Image.open(io.BytesIO(output)) as img:
            assert img.format == "JPEG"

    @pytest.mark.unit
    def test_unknown_format_uses_default(self) -> None:
        pixels = np.full(4, 0xFF808080, dtype=np.uint32)
        buffer = PixelBuffer(2, 2, False, pixels, format=None)
        output = encode_image(buffer)
        with Image.open(io.BytesIO(output)) as img:
            assert img.format == "PNG"

    @pytest.mark.unit
    def test_alpha_falls_back_from_jpeg(self) -> None:
        pixels = np.full(4, 0x80808080, dtype=np.uint32)
        buffer = PixelBuffer(2, 2, True, pixels, format="JPEG")
        output = encode_image(buffer)
        with Image.open(io.BytesIO(output)) as img:
            assert img.format == "PNG"
            assert img.mode == "RGBA"

    @pytest.mark.unit
    def test_empty_buffer_raises(self) -> None:
        buffer = PixelBuffer(0, 0, False, np.array([], dtype=np.uint32))
        with pytest.raises(EncodeError):
            encode_image(buffer, transform_name="grayscale")


class TestPixelBuffer:
    """PixelBuffer 不變式"""

    @pytest.mark.unit
    def test_length_mismatch(self) -> None:
        with pytest.raises(ValueError, match="does not match"):
            PixelBuffer(2, 2, False, np.zeros(3, dtype=np.uint32))
