"""
例外定義模組

提供轉換流程中各階段的錯誤類型，單次轉換呼叫的錯誤都繼承自 TransformError
"""


class ImageFanoutError(Exception):
    """所有 image_fanout 錯誤的基底類別"""


class TransformError(ImageFanoutError):
    """
    單一轉換呼叫失敗

    只影響發生錯誤的那一個轉換，不會中斷其他並行中的呼叫

    Attributes:
        transform_name: 發生錯誤的轉換名稱（可能為 None）
    """

    def __init__(self, message: str, transform_name: str | None = None) -> None:
        self.transform_name = transform_name
        super().__init__(message)


class DecodeError(TransformError):
    """輸入位元組不是有效的圖片"""


class EncodeError(TransformError):
    """轉換後的像素無法重新編碼為圖片"""


class UnsupportedTransformError(TransformError):
    """轉換名稱無法辨識"""

    def __init__(self, transform_name: str) -> None:
        super().__init__(
            f"Unsupported transform type: {transform_name}",
            transform_name=transform_name,
        )


class WorkerUnreachableError(TransformError):
    """
    遠端 worker 呼叫失敗或逾時

    Attributes:
        location: 嘗試連線的 worker 位址
    """

    def __init__(
        self,
        message: str,
        transform_name: str | None = None,
        location: str | None = None,
    ) -> None:
        self.location = location
        if location:
            message = f"{message} (worker: {location})"
        super().__init__(message, transform_name=transform_name)


class ServiceDirectoryError(ImageFanoutError):
    """無法取得服務目錄快照"""


# 依類別名稱還原遠端回傳的錯誤
TRANSFORM_ERRORS: dict[str, type[TransformError]] = {
    cls.__name__: cls
    for cls in (DecodeError, EncodeError, UnsupportedTransformError, WorkerUnreachableError)
}


def rebuild_transform_error(
    error_type: str, detail: str, transform_name: str
) -> TransformError:
    """
    依錯誤類別名稱重建例外

    Args:
        error_type: 例外類別名稱
        detail: 錯誤訊息
        transform_name: 轉換名稱

    Returns:
        對應的 TransformError 實例（未知類型時回傳 TransformError）
    """
    if error_type == UnsupportedTransformError.__name__:
        return UnsupportedTransformError(transform_name)
    error_cls = TRANSFORM_ERRORS.get(error_type, TransformError)
    return error_cls(detail, transform_name=transform_name)
