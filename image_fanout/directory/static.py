"""
靜態服務目錄

由設定檔提供 worker 名稱與位址，內容在建構後不會改變
"""

import logging
from collections.abc import Mapping

from image_fanout.common.exceptions import ServiceDirectoryError


logger = logging.getLogger(__name__)


class StaticServiceDirectory:
    """
    靜態服務目錄

    Attributes:
        registrations: 小寫名稱 -> 位址
    """

    def __init__(self, registrations: Mapping[str, str]) -> None:
        """
        初始化目錄

        Args:
            registrations: worker 名稱 -> 基底 URL
        """
        self.registrations: dict[str, str] = {
            name.lower(): location.rstrip("/") for name, location in registrations.items()
        }
        logger.debug("Static directory with %d workers", len(self.registrations))

    def list_registered_names(self) -> set[str]:
        """取得已註冊名稱的快照"""
        return set(self.registrations)

    def location(self, name: str) -> str:
        """
        取得 worker 位址（名稱不分大小寫）

        Raises:
            ServiceDirectoryError: 名稱未註冊
        """
        try:
            return self.registrations[name.lower()]
        except KeyError:
            raise ServiceDirectoryError(f"No worker registered for {name!r}") from None
