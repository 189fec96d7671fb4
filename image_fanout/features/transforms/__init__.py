"""
圖片轉換功能

提供像素轉換引擎、轉換註冊表與 TransformWorker
"""

from . import engine
from .registry import TransformOptions, TransformRegistry
from .worker import TransformWorker


__all__ = [
    "TransformOptions",
    "TransformRegistry",
    "TransformWorker",
    "engine",
]
