"""應用程式設定"""

from .app import AppSettings, settings


__all__ = ["AppSettings", "settings"]
