"""
核心模組 - 定義介面與 fan-out 派送邏輯
"""

from image_fanout.data_model import FanOutResult, TransformedImage, TransformFailure

from .dispatcher import Dispatcher, FanOutStream
from .interfaces import (
    LocatingServiceDirectory,
    ServiceDirectory,
    WorkerClient,
    WorkerClientFactory,
)


__all__ = [
    "Dispatcher",
    "FanOutResult",
    "FanOutStream",
    "LocatingServiceDirectory",
    "ServiceDirectory",
    "TransformFailure",
    "TransformedImage",
    "WorkerClient",
    "WorkerClientFactory",
]
