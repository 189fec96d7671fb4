"""
記憶體服務目錄

執行期可註冊 / 移除 worker，適用於本機部署與測試
"""

import logging
import threading

from image_fanout.common.exceptions import ServiceDirectoryError


logger = logging.getLogger(__name__)


class InMemoryServiceDirectory:
    """
    記憶體服務目錄

    register / unregister 與快照讀取之間以鎖保護
    """

    def __init__(self, registrations: dict[str, str] | None = None) -> None:
        self._lock = threading.Lock()
        self._registrations: dict[str, str] = {}
        for name, location in (registrations or {}).items():
            self.register(name, location)

    def register(self, name: str, location: str = "local") -> None:
        """
        註冊 worker

        Args:
            name: worker 名稱（不分大小寫）
            location: worker 位址
        """
        with self._lock:
            self._registrations[name.lower()] = location.rstrip("/")
        logger.info("Worker registered: %s -> %s", name, location)

    def unregister(self, name: str) -> None:
        """移除 worker，未註冊時不做任何事"""
        with self._lock:
            removed = self._registrations.pop(name.lower(), None)
        if removed is not None:
            logger.info("Worker unregistered: %s", name)

    def list_registered_names(self) -> set[str]:
        """取得已註冊名稱的快照"""
        with self._lock:
            return set(self._registrations)

    def location(self, name: str) -> str:
        """
        取得 worker 位址（名稱不分大小寫）

        Raises:
            ServiceDirectoryError: 名稱未註冊
        """
        with self._lock:
            location = self._registrations.get(name.lower())
        if location is None:
            raise ServiceDirectoryError(f"No worker registered for {name!r}")
        return location
