"""
像素轉換引擎

對打包像素陣列就地套用色彩轉換，不做任何 I/O

每個函式的簽名皆為 (pixels, has_alpha, ...)：
- pixels: 打包像素（NumPy 陣列、array.array 或 list），會被就地修改
- has_alpha: True 時 alpha 通道逐位元保留；False 時 alpha 寫為 0xFF

所有計算結果都會限制在 0-255，不會溢位回繞
"""

import logging
from typing import Final

import numpy as np

from image_fanout.common.pixels import (
    CHANNEL_MAX,
    ChannelOrder,
    PixelArray,
    clamp_channel,
    pack_channels,
    store_pixels,
    unpack_channels,
)


logger = logging.getLogger(__name__)

# ITU-R BT.601 亮度權重（千分比，整數運算確保灰階冪等）
LUMA_WEIGHTS: Final[tuple[int, int, int]] = (299, 587, 114)
LUMA_SCALE: Final[int] = 1000

# Sepia 色彩矩陣（列：輸出 R/G/B，欄：輸入 R/G/B）
SEPIA_MATRIX: Final[tuple[tuple[float, float, float], ...]] = (
    (0.393, 0.769, 0.189),
    (0.349, 0.686, 0.168),
    (0.272, 0.534, 0.131),
)

# 預設目標色（黑）
DEFAULT_TINT_TARGET: Final[tuple[int, int, int]] = (0, 0, 0)


def check_tint_weights(
    weights: tuple[float, float, float],
) -> tuple[float, float, float]:
    """
    檢查 tint 權重皆在 [0.0, 1.0]

    Raises:
        ValueError: 任一權重超出範圍
    """
    for weight in weights:
        if not 0.0 <= weight <= 1.0:
            raise ValueError(f"Tint weight must be within [0.0, 1.0], got {weight}")
    return weights


def _alpha(a: np.ndarray, has_alpha: bool) -> np.ndarray:
    return a if has_alpha else np.full_like(a, CHANNEL_MAX)


def grayscale(
    pixels: PixelArray,
    has_alpha: bool,
    *,
    channel_order: ChannelOrder = ChannelOrder.ARGB,
) -> None:
    """
    灰階轉換

    以 BT.601 亮度加權取代 R/G/B，每個像素獨立計算

    Args:
        pixels: 打包像素（就地修改）
        has_alpha: 是否保留 alpha 通道
        channel_order: 通道順序
    """
    if len(pixels) == 0:
        return

    r, g, b, a = unpack_channels(pixels, channel_order)
    wr, wg, wb = LUMA_WEIGHTS
    gray = (wr * r + wg * g + wb * b + LUMA_SCALE // 2) // LUMA_SCALE
    gray = clamp_channel(gray)

    store_pixels(pixels, pack_channels(gray, gray, gray, _alpha(a, has_alpha), channel_order))


def sepia(
    pixels: PixelArray,
    has_alpha: bool,
    *,
    channel_order: ChannelOrder = ChannelOrder.ARGB,
) -> None:
    """
    Sepia 轉換

    以固定的線性色彩矩陣轉換 R/G/B，輸出截斷為整數後限制在 0-255

    Args:
        pixels: 打包像素（就地修改）
        has_alpha: 是否保留 alpha 通道
        channel_order: 通道順序
    """
    if len(pixels) == 0:
        return

    r, g, b, a = unpack_channels(pixels, channel_order)
    rgb = np.stack([r, g, b]).astype(np.float64)
    # (3, 3) @ (3, N) -> (3, N)
    toned = np.asarray(SEPIA_MATRIX) @ rgb
    sr, sg, sb = (clamp_channel(np.floor(channel)) for channel in toned)

    store_pixels(pixels, pack_channels(sr, sg, sb, _alpha(a, has_alpha), channel_order))


def tint(
    pixels: PixelArray,
    has_alpha: bool,
    r_weight: float,
    g_weight: float,
    b_weight: float,
    *,
    target: tuple[int, int, int] = DEFAULT_TINT_TARGET,
    channel_order: ChannelOrder = ChannelOrder.ARGB,
) -> None:
    """
    色調轉換

    每個通道依權重朝目標色混合：c' = c + (target - c) * weight
    權重 0 不變，權重 1 完全取代為目標值

    Args:
        pixels: 打包像素（就地修改）
        has_alpha: 是否保留 alpha 通道
        r_weight: 紅色權重 (0.0-1.0)
        g_weight: 綠色權重 (0.0-1.0)
        b_weight: 藍色權重 (0.0-1.0)
        target: 目標色 (R, G, B)
        channel_order: 通道順序

    Raises:
        ValueError: 權重超出 [0.0, 1.0]
    """
    weights = check_tint_weights((r_weight, g_weight, b_weight))

    if len(pixels) == 0:
        return

    r, g, b, a = unpack_channels(pixels, channel_order)
    blended = [
        clamp_channel(np.rint(channel + (goal - channel) * weight))
        for channel, goal, weight in zip((r, g, b), target, weights, strict=True)
    ]

    store_pixels(pixels, pack_channels(*blended, _alpha(a, has_alpha), channel_order))
