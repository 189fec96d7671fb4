"""
HTTP 介面

gateway 與 worker 的 FastAPI app 工廠
"""

from .app import create_gateway_app, create_worker_app


__all__ = ["create_gateway_app", "create_worker_app"]
