"""
圖片轉換 fan-out 閘道

將上傳的圖片分派給多個具名轉換 worker 並行處理，再彙整所有結果
"""

from image_fanout.common.exceptions import (
    DecodeError,
    EncodeError,
    ImageFanoutError,
    ServiceDirectoryError,
    TransformError,
    UnsupportedTransformError,
    WorkerUnreachableError,
)
from image_fanout.core.dispatcher import Dispatcher, FanOutStream
from image_fanout.data_model import (
    FanOutResult,
    TransformedImage,
    TransformFailure,
    TransformName,
)
from image_fanout.features.transforms import TransformWorker


__version__ = "0.1.0"

__all__ = [
    "DecodeError",
    "Dispatcher",
    "EncodeError",
    "FanOutResult",
    "FanOutStream",
    "ImageFanoutError",
    "ServiceDirectoryError",
    "TransformError",
    "TransformFailure",
    "TransformName",
    "TransformWorker",
    "TransformedImage",
    "UnsupportedTransformError",
    "WorkerUnreachableError",
]
