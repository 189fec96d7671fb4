"""
本機 Worker 呼叫端

在同一個行程中直接呼叫 TransformWorker
"""

from image_fanout.core.interfaces import WorkerClientFactory
from image_fanout.data_model import TransformedImage
from image_fanout.features.transforms import TransformWorker


class LocalWorkerClient:
    """以 WorkerClient 介面包裝本機的 TransformWorker"""

    def __init__(self, worker: TransformWorker | None = None) -> None:
        self.worker = worker or TransformWorker()

    def invoke(
        self, transform_name: str, file_name: str, image_bytes: bytes
    ) -> TransformedImage:
        return self.worker.apply(transform_name, file_name, image_bytes)


def local_client_factory(worker: TransformWorker | None = None) -> WorkerClientFactory:
    """建立所有名稱共用同一個本機 Worker 的呼叫端工廠"""
    client = LocalWorkerClient(worker)

    def factory(name: str) -> LocalWorkerClient:
        return client

    return factory
