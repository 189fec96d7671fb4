"""
FastAPI 應用程式工廠

gateway 與 worker 各自有獨立的 app，協作物件以參數注入
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from image_fanout.common.exceptions import (
    DecodeError,
    EncodeError,
    TransformError,
    UnsupportedTransformError,
    WorkerUnreachableError,
)
from image_fanout.core.dispatcher import Dispatcher
from image_fanout.features.transforms import TransformWorker

from .dependencies import STATE_KEY, AppState
from .routes import gateway_router, worker_router


logger = logging.getLogger(__name__)

# 轉換錯誤 -> HTTP 狀態碼
ERROR_STATUS: dict[type[TransformError], int] = {
    DecodeError: status.HTTP_400_BAD_REQUEST,
    UnsupportedTransformError: status.HTTP_404_NOT_FOUND,
    EncodeError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    WorkerUnreachableError: status.HTTP_502_BAD_GATEWAY,
}


async def transform_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """將轉換錯誤轉為 {"error_type", "detail"} 回應，供遠端呼叫端還原例外"""
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.warning("Transform request failed (%d): %s", status_code, exc)
    return JSONResponse(
        status_code=status_code,
        content={"error_type": type(exc).__name__, "detail": str(exc)},
    )


@asynccontextmanager
async def gateway_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """gateway 關閉時釋放派送器資源"""
    yield
    state: AppState = getattr(app.state, STATE_KEY)
    if state.dispatcher is not None:
        state.dispatcher.close()
        logger.info("Gateway shut down, dispatcher closed")


def create_gateway_app(
    dispatcher: Dispatcher, fan_out_deadline: float | None = None
) -> FastAPI:
    """
    建立 gateway app

    Args:
        dispatcher: fan-out 派送器
        fan_out_deadline: 每個請求的整體期限（秒）

    Returns:
        FastAPI app
    """
    app = FastAPI(
        title="Image Fan-out Gateway",
        description="Apply a set of named transforms to an uploaded image",
        version="0.1.0",
        lifespan=gateway_lifespan,
    )
    setattr(
        app.state,
        STATE_KEY,
        AppState(dispatcher=dispatcher, fan_out_deadline=fan_out_deadline),
    )
    app.include_router(gateway_router)
    return app


def create_worker_app(worker: TransformWorker) -> FastAPI:
    """
    建立 worker app

    Args:
        worker: 轉換 Worker

    Returns:
        FastAPI app
    """
    app = FastAPI(
        title="Image Transform Worker",
        description="Apply a single named transform to an uploaded image",
        version="0.1.0",
    )
    setattr(app.state, STATE_KEY, AppState(worker=worker))
    app.add_exception_handler(TransformError, transform_error_handler)
    app.include_router(worker_router)
    return app
