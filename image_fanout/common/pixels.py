"""
像素緩衝區模組

以 32 位元打包整數表示每個像素，提供打包 / 拆解色彩通道的工具
"""

from array import array
from collections.abc import MutableSequence
from enum import StrEnum
from typing import Final

import numpy as np


# 常數定義
CHANNEL_MAX: Final[int] = 255
ALPHA_SHIFT: Final[int] = 24
GREEN_SHIFT: Final[int] = 8
PACKED_MASK: Final[int] = 0xFFFFFFFF

_SIGNED_TYPECODES: Final[frozenset[str]] = frozenset("bhilq")

PixelArray = np.ndarray | MutableSequence[int]


class ChannelOrder(StrEnum):
    """打包像素的通道順序"""

    ARGB = "argb"  # 0xAARRGGBB
    ABGR = "abgr"  # 0xAABBGGRR

    @property
    def red_shift(self) -> int:
        return 16 if self is ChannelOrder.ARGB else 0

    @property
    def blue_shift(self) -> int:
        return 0 if self is ChannelOrder.ARGB else 16


class PixelBuffer:
    """
    解碼後的圖片

    Attributes:
        width: 圖片寬度
        height: 圖片高度
        has_alpha: 是否含有 alpha 通道
        pixels: 打包像素 (uint32)，列優先，長度為 width * height
        channel_order: 通道順序
        format: 來源容器格式（如 "PNG"），未知時為 None
    """

    __slots__ = ("width", "height", "has_alpha", "pixels", "channel_order", "format")

    def __init__(
        self,
        width: int,
        height: int,
        has_alpha: bool,
        pixels: np.ndarray,
        *,
        channel_order: ChannelOrder = ChannelOrder.ARGB,
        format: str | None = None,
    ) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"Invalid buffer size: {width}x{height}")
        if len(pixels) != width * height:
            raise ValueError(
                f"Pixel count {len(pixels)} does not match {width}x{height}"
            )
        self.width = width
        self.height = height
        self.has_alpha = has_alpha
        self.pixels = pixels
        self.channel_order = channel_order
        self.format = format

    def __repr__(self) -> str:
        return (
            f"PixelBuffer({self.width}x{self.height}, has_alpha={self.has_alpha}, "
            f"order={self.channel_order.value}, format={self.format})"
        )


def unpack_channels(
    pixels: PixelArray,
    channel_order: ChannelOrder = ChannelOrder.ARGB,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    拆解打包像素為 R、G、B、A 四個通道

    接受有號整數（例如 Java 風格的負值 ARGB），一律以 32 位元遮罩處理

    Args:
        pixels: 打包像素
        channel_order: 通道順序

    Returns:
        (r, g, b, a)，皆為 int64 陣列
    """
    values = np.asarray(pixels, dtype=np.int64) & PACKED_MASK
    r = (values >> channel_order.red_shift) & CHANNEL_MAX
    g = (values >> GREEN_SHIFT) & CHANNEL_MAX
    b = (values >> channel_order.blue_shift) & CHANNEL_MAX
    a = (values >> ALPHA_SHIFT) & CHANNEL_MAX
    return r, g, b, a


def pack_channels(
    r: np.ndarray,
    g: np.ndarray,
    b: np.ndarray,
    a: np.ndarray,
    channel_order: ChannelOrder = ChannelOrder.ARGB,
) -> np.ndarray:
    """
    將四個通道打包為 uint32 像素

    呼叫端需先將各通道限制在 0-255

    Returns:
        打包後的 uint32 陣列
    """
    packed = (
        (a.astype(np.uint32) << ALPHA_SHIFT)
        | (r.astype(np.uint32) << channel_order.red_shift)
        | (g.astype(np.uint32) << GREEN_SHIFT)
        | (b.astype(np.uint32) << channel_order.blue_shift)
    )
    return packed.astype(np.uint32)


def clamp_channel(values: np.ndarray) -> np.ndarray:
    """將通道值限制在 0-255"""
    return np.clip(values, 0, CHANNEL_MAX).astype(np.int64)


def store_pixels(pixels: PixelArray, packed: np.ndarray) -> None:
    """
    就地寫回打包像素

    NumPy 陣列以切片賦值寫回；list / array.array 以 Python int 寫回，
    有號型別保留 32 位元的位元樣式

    Args:
        pixels: 目標像素序列
        packed: uint32 打包像素
    """
    if isinstance(pixels, np.ndarray):
        pixels[...] = packed.astype(pixels.dtype, copy=False)
        return

    if isinstance(pixels, array):
        if pixels.typecode in _SIGNED_TYPECODES:
            packed = packed.astype(np.int32)
        # array 切片只接受同型別的 array
        pixels[:] = array(pixels.typecode, packed.tolist())
        return

    pixels[:] = packed.tolist()
