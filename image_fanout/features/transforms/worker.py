"""
轉換 Worker

將像素轉換引擎包裝為單一操作：對圖片位元組套用指定名稱的轉換
解碼 → 依名稱派送 → 寫回像素 → 重新編碼
"""

import logging

from image_fanout.common.codec import DEFAULT_FORMAT, decode_image, encode_image
from image_fanout.common.pixels import ChannelOrder, PixelBuffer
from image_fanout.data_model import TransformedImage, TransformName

from . import engine
from .registry import TransformOptions, TransformRegistry


logger = logging.getLogger(__name__)


@TransformRegistry.register(TransformName.GRAYSCALE)
def _apply_grayscale(buffer: PixelBuffer, options: TransformOptions) -> None:
    engine.grayscale(buffer.pixels, buffer.has_alpha, channel_order=buffer.channel_order)


@TransformRegistry.register(TransformName.SEPIA)
def _apply_sepia(buffer: PixelBuffer, options: TransformOptions) -> None:
    engine.sepia(buffer.pixels, buffer.has_alpha, channel_order=buffer.channel_order)


@TransformRegistry.register(TransformName.TINT)
def _apply_tint(buffer: PixelBuffer, options: TransformOptions) -> None:
    r_weight, g_weight, b_weight = options.tint_weights
    engine.tint(
        buffer.pixels,
        buffer.has_alpha,
        r_weight,
        g_weight,
        b_weight,
        target=options.tint_target,
        channel_order=buffer.channel_order,
    )


class TransformWorker:
    """
    轉換 Worker

    無共享可變狀態，可在多執行緒中並行呼叫
    """

    def __init__(
        self,
        options: TransformOptions | None = None,
        default_format: str = DEFAULT_FORMAT,
        channel_order: ChannelOrder = ChannelOrder.ARGB,
    ) -> None:
        """
        初始化 Worker

        Args:
            options: 轉換參數（預設 tint 權重為 (0, 0, 0.9)）
            default_format: 來源格式不明時的輸出格式
            channel_order: 解碼時使用的通道順序
        """
        self.options = options or TransformOptions()
        self.default_format = default_format
        self.channel_order = channel_order

    def apply(
        self, transform_name: str, file_name: str, image_bytes: bytes
    ) -> TransformedImage:
        """
        對圖片套用指定的轉換

        Args:
            transform_name: 轉換名稱（不分大小寫）
            file_name: 原始檔名
            image_bytes: 圖片位元組

        Returns:
            轉換後的圖片

        Raises:
            DecodeError: 無法解碼
            UnsupportedTransformError: 轉換名稱未註冊
            EncodeError: 無法重新編碼
        """
        buffer = decode_image(
            image_bytes,
            channel_order=self.channel_order,
            transform_name=transform_name,
        )

        transform = TransformRegistry.get(transform_name)
        transform(buffer, self.options)

        output = encode_image(
            buffer,
            default_format=self.default_format,
            transform_name=transform_name,
        )

        logger.debug(
            "Applied %s to %s (%dx%d, %d bytes)",
            transform_name,
            file_name,
            buffer.width,
            buffer.height,
            len(output),
        )
        return TransformedImage(
            image_name=file_name,
            transform_name=transform_name,
            image_bytes=output,
        )

    def info(self) -> dict[str, object]:
        """Worker 資訊（類別名稱與支援的轉換）"""
        return {
            "name": type(self).__name__,
            "transforms": TransformRegistry.list_transforms(),
        }
