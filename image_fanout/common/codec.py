"""
圖片編解碼模組

圖片位元組 ⇄ PixelBuffer，容器格式交由 Pillow 處理
"""

import io
import logging
from typing import Final

import numpy as np
from PIL import Image, UnidentifiedImageError

from .exceptions import DecodeError, EncodeError
from .pixels import ChannelOrder, PixelBuffer, pack_channels, unpack_channels


logger = logging.getLogger(__name__)

DEFAULT_FORMAT: Final[str] = "PNG"

# 無法保存 alpha 的容器格式
_OPAQUE_FORMATS: Final[frozenset[str]] = frozenset({"JPEG", "BMP"})


def decode_image(
    image_bytes: bytes,
    *,
    channel_order: ChannelOrder = ChannelOrder.ARGB,
    transform_name: str | None = None,
) -> PixelBuffer:
    """
    將圖片位元組解碼為 PixelBuffer

    Args:
        image_bytes: 圖片位元組 (PNG, JPEG, ...)
        channel_order: 打包像素的通道順序
        transform_name: 用於錯誤訊息的轉換名稱

    Returns:
        解碼後的像素緩衝區

    Raises:
        DecodeError: 位元組不是有效的圖片
    """
    if not image_bytes:
        raise DecodeError("Empty image payload", transform_name=transform_name)

    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            image.load()
            source_format = image.format
            has_alpha = image.has_transparency_data
            rgba = np.asarray(image.convert("RGBA"), dtype=np.uint8)
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise DecodeError(
            f"Cannot decode image: {exc}", transform_name=transform_name
        ) from exc

    height, width = rgba.shape[:2]
    channels = rgba.reshape(-1, 4).astype(np.int64)
    pixels = pack_channels(
        channels[:, 0],
        channels[:, 1],
        channels[:, 2],
        channels[:, 3],
        channel_order,
    )

    logger.debug(
        "Decoded %s image %dx%d (alpha=%s)", source_format, width, height, has_alpha
    )
    return PixelBuffer(
        width,
        height,
        has_alpha,
        pixels,
        channel_order=channel_order,
        format=source_format,
    )


def _resolve_format(buffer: PixelBuffer, default_format: str) -> str:
    """決定輸出容器格式：沿用來源格式，無法寫出時回退到預設格式"""
    Image.init()
    candidate = (buffer.format or default_format).upper()
    if candidate not in Image.SAVE:
        return default_format.upper()
    if buffer.has_alpha and candidate in _OPAQUE_FORMATS:
        return default_format.upper()
    return candidate


def encode_image(
    buffer: PixelBuffer,
    *,
    default_format: str = DEFAULT_FORMAT,
    transform_name: str | None = None,
) -> bytes:
    """
    將 PixelBuffer 重新編碼為圖片位元組

    Args:
        buffer: 像素緩衝區
        default_format: 來源格式未知或無法寫出時使用的格式
        transform_name: 用於錯誤訊息的轉換名稱

    Returns:
        圖片位元組

    Raises:
        EncodeError: 無法序列化
    """
    if buffer.width == 0 or buffer.height == 0:
        raise EncodeError(
            f"Cannot encode empty image {buffer.width}x{buffer.height}",
            transform_name=transform_name,
        )

    r, g, b, a = unpack_channels(buffer.pixels, buffer.channel_order)
    rgba = (
        np.stack([r, g, b, a], axis=-1)
        .astype(np.uint8)
        .reshape(buffer.height, buffer.width, 4)
    )

    image = Image.fromarray(rgba)
    if not buffer.has_alpha:
        image = image.convert("RGB")

    fmt = _resolve_format(buffer, default_format)
    output = io.BytesIO()
    try:
        image.save(output, format=fmt)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodeError(
            f"Cannot encode image as {fmt}: {exc}", transform_name=transform_name
        ) from exc

    return output.getvalue()
