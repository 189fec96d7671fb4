"""
轉換註冊表

以裝飾器註冊轉換名稱與對應的像素操作，名稱比對不分大小寫
"""

import logging
from collections.abc import Callable
from typing import ClassVar

from image_fanout.common.exceptions import UnsupportedTransformError
from image_fanout.common.pixels import PixelBuffer

from .engine import DEFAULT_TINT_TARGET, check_tint_weights


logger = logging.getLogger(__name__)

# (buffer, options) -> None，就地修改 buffer.pixels
TransformFunc = Callable[[PixelBuffer, "TransformOptions"], None]


class TransformOptions:
    """
    轉換參數

    Attributes:
        tint_weights: tint 的 (R, G, B) 權重
        tint_target: tint 的目標色
    """

    __slots__ = ("tint_weights", "tint_target")

    def __init__(
        self,
        tint_weights: tuple[float, float, float] = (0.0, 0.0, 0.9),
        tint_target: tuple[int, int, int] = DEFAULT_TINT_TARGET,
    ) -> None:
        """
        Raises:
            ValueError: tint 權重超出 [0.0, 1.0]
        """
        self.tint_weights = check_tint_weights(tint_weights)
        self.tint_target = tint_target


class TransformRegistry:
    """
    轉換註冊表

    用法::

        @TransformRegistry.register("grayscale")
        def _grayscale(buffer, options): ...
    """

    _transforms: ClassVar[dict[str, TransformFunc]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[TransformFunc], TransformFunc]:
        """
        註冊轉換的裝飾器

        Args:
            name: 轉換名稱

        Returns:
            裝飾器
        """

        def decorator(func: TransformFunc) -> TransformFunc:
            key = name.lower()
            if key in cls._transforms:
                logger.warning("Transform %s re-registered", key)
            cls._transforms[key] = func
            return func

        return decorator

    @classmethod
    def unregister(cls, name: str) -> None:
        """移除已註冊的轉換"""
        cls._transforms.pop(name.lower(), None)

    @classmethod
    def get(cls, name: str) -> TransformFunc:
        """
        取得轉換函式

        Args:
            name: 轉換名稱（不分大小寫）

        Returns:
            轉換函式

        Raises:
            UnsupportedTransformError: 名稱未註冊
        """
        func = cls._transforms.get(name.lower())
        if func is None:
            raise UnsupportedTransformError(name)
        return func

    @classmethod
    def has_transform(cls, name: str) -> bool:
        """檢查名稱是否已註冊"""
        return name.lower() in cls._transforms

    @classmethod
    def list_transforms(cls) -> list[str]:
        """列出所有已註冊的轉換名稱"""
        return sorted(cls._transforms)
