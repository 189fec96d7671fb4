"""
共用模組

提供像素緩衝區、編解碼與例外定義
"""

from .codec import DEFAULT_FORMAT, decode_image, encode_image
from .exceptions import (
    DecodeError,
    EncodeError,
    ImageFanoutError,
    ServiceDirectoryError,
    TransformError,
    UnsupportedTransformError,
    WorkerUnreachableError,
)
from .pixels import ChannelOrder, PixelBuffer, pack_channels, unpack_channels


__all__ = [
    "DEFAULT_FORMAT",
    "ChannelOrder",
    "DecodeError",
    "EncodeError",
    "ImageFanoutError",
    "PixelBuffer",
    "ServiceDirectoryError",
    "TransformError",
    "UnsupportedTransformError",
    "WorkerUnreachableError",
    "decode_image",
    "encode_image",
    "pack_channels",
    "unpack_channels",
]
