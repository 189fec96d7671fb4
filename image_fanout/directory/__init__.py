"""
服務目錄實作

提供靜態（設定檔）與記憶體兩種 ServiceDirectory
"""

from .memory import InMemoryServiceDirectory
from .static import StaticServiceDirectory


__all__ = ["InMemoryServiceDirectory", "StaticServiceDirectory"]
