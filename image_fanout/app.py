"""
應用程式服務層

依設定組裝服務目錄、Worker 呼叫端與派送器，所有協作物件以建構參數注入
"""

import logging

from image_fanout.clients import http_client_factory, local_client_factory
from image_fanout.core.dispatcher import Dispatcher
from image_fanout.directory import InMemoryServiceDirectory, StaticServiceDirectory
from image_fanout.features.transforms import (
    TransformOptions,
    TransformRegistry,
    TransformWorker,
)
from image_fanout.settings import AppSettings


logger = logging.getLogger(__name__)


def build_worker(settings: AppSettings) -> TransformWorker:
    """
    依設定建立 TransformWorker

    Args:
        settings: 應用程式設定

    Returns:
        轉換 Worker
    """
    options = TransformOptions(tint_weights=settings.tint_weights)
    return TransformWorker(options=options, default_format=settings.default_format)


def build_dispatcher(settings: AppSettings) -> Dispatcher:
    """
    依設定建立派送器

    有設定 worker_registrations 時呼叫遠端 worker，
    否則所有已註冊的轉換都由本機 Worker 執行

    Args:
        settings: 應用程式設定

    Returns:
        派送器
    """
    if settings.worker_registrations:
        directory = StaticServiceDirectory(settings.worker_registrations)
        client_factory = http_client_factory(directory, timeout=settings.call_timeout)
        logger.info(
            "Using remote workers: %s", ", ".join(sorted(directory.registrations))
        )
    else:
        local_directory = InMemoryServiceDirectory()
        for name in TransformRegistry.list_transforms():
            local_directory.register(name, "local")
        directory = local_directory
        client_factory = local_client_factory(build_worker(settings))
        logger.info("Using in-process worker")

    return Dispatcher(directory, client_factory, max_workers=settings.max_workers)
