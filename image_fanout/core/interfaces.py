"""
介面定義模組

Dispatcher 只依賴這些抽象介面，具體實作在建構時注入，遵循依賴反轉原則 (DIP)
"""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from image_fanout.data_model import TransformedImage


@runtime_checkable
class ServiceDirectory(Protocol):
    """
    服務目錄

    提供目前存活 worker 名稱的即時快照，名稱與轉換名稱比對時不分大小寫
    """

    def list_registered_names(self) -> set[str]:
        """
        取得目前已註冊的 worker 名稱

        Returns:
            名稱集合（快照，呼叫端不應修改）

        Raises:
            ServiceDirectoryError: 無法讀取目錄
        """
        ...


@runtime_checkable
class LocatingServiceDirectory(ServiceDirectory, Protocol):
    """可解析 worker 位址的服務目錄"""

    def location(self, name: str) -> str:
        """
        取得 worker 的網路位址

        Raises:
            ServiceDirectoryError: 名稱未註冊
        """
        ...


@runtime_checkable
class WorkerClient(Protocol):
    """
    Worker 呼叫介面

    本機或遠端語意相同，呼叫端不可假設為本機延遲
    """

    def invoke(
        self, transform_name: str, file_name: str, image_bytes: bytes
    ) -> TransformedImage:
        """
        呼叫 worker 套用轉換

        Raises:
            TransformError: 單次呼叫失敗
        """
        ...


# 依 worker 名稱建立呼叫端
WorkerClientFactory = Callable[[str], WorkerClient]
