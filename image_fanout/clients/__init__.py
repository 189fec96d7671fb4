"""
Worker 呼叫端

本機（同行程）與遠端（HTTP）兩種 WorkerClient 實作
"""

from .http_worker import HttpWorkerClient, HttpWorkerClientFactory, http_client_factory
from .local import LocalWorkerClient, local_client_factory


__all__ = [
    "HttpWorkerClient",
    "HttpWorkerClientFactory",
    "LocalWorkerClient",
    "http_client_factory",
    "local_client_factory",
]
