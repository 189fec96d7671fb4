"""
HTTP 路由

gateway：接收圖片與轉換名稱列表，回傳所有轉換結果
worker：對圖片套用單一轉換
"""

import logging
from collections.abc import Iterable
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse

from image_fanout.common.exceptions import ServiceDirectoryError
from image_fanout.core.dispatcher import Dispatcher
from image_fanout.features.transforms import TransformWorker

from .dependencies import AppState, get_app_state, get_dispatcher, get_worker


logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "image"


def _header_list(names: Iterable[str]) -> str:
    """
    以逗號串接名稱作為標頭值

    名稱來自呼叫端，先做百分比編碼：標頭值只能是 latin-1 且不可含換行
    """
    return ",".join(quote(name, safe="") for name in names)


gateway_router = APIRouter(tags=["gateway"])
worker_router = APIRouter(tags=["worker"])


@gateway_router.post("/apply-transforms")
def apply_transforms(
    transforms: list[str] = Form(...),
    image: UploadFile = File(...),
    dispatcher: Dispatcher = Depends(get_dispatcher),
    state: AppState = Depends(get_app_state),
) -> JSONResponse:
    """
    套用所有請求的轉換並回傳結果列表

    結果順序為完成順序，呼叫端應以 transformName 對應；
    失敗與未註冊的名稱列在回應標頭中
    """
    file_name = image.filename or DEFAULT_FILE_NAME
    image_bytes = image.file.read()

    try:
        result = dispatcher.collect(
            transforms, file_name, image_bytes, deadline=state.fan_out_deadline
        )
    except ServiceDirectoryError as exc:
        logger.error("Service directory unavailable: %s", exc)
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, str(exc)) from exc

    headers = {}
    if result.failures:
        headers["X-Failed-Transforms"] = _header_list(
            f.transform_name for f in result.failures
        )
    if result.unregistered:
        headers["X-Unregistered-Transforms"] = _header_list(result.unregistered)

    body = [item.model_dump(mode="json", by_alias=True) for item in result.images]
    return JSONResponse(content=body, headers=headers)


@worker_router.post("/apply-transform")
def apply_transform(
    transform: str = Form(...),
    image: UploadFile = File(...),
    worker: TransformWorker = Depends(get_worker),
) -> JSONResponse:
    """對上傳的圖片套用單一轉換"""
    result = worker.apply(transform, image.filename or DEFAULT_FILE_NAME, image.file.read())
    return JSONResponse(content=result.model_dump(mode="json", by_alias=True))


@worker_router.get("/actuator/info")
def info(worker: TransformWorker = Depends(get_worker)) -> dict[str, object]:
    """Worker 名稱與支援的轉換"""
    return worker.info()


@gateway_router.get("/health")
@worker_router.get("/health")
def health() -> dict[str, str]:
    """存活檢查"""
    return {"status": "ok"}
