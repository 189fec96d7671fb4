"""
FastAPI 依賴注入

協作物件由 app 工廠建立一次並掛在 app.state，路由透過這些依賴取得
"""

from dataclasses import dataclass

from fastapi import Depends, Request

from image_fanout.core.dispatcher import Dispatcher
from image_fanout.features.transforms import TransformWorker


@dataclass
class AppState:
    """掛在 app.state 的應用程式狀態容器"""

    dispatcher: Dispatcher | None = None
    worker: TransformWorker | None = None
    fan_out_deadline: float | None = None


# app.state 上的屬性名稱
STATE_KEY = "image_fanout_state"


def get_app_state(request: Request) -> AppState:
    """從請求取得應用程式狀態"""
    state = getattr(request.app.state, STATE_KEY, None)
    if state is None:
        raise RuntimeError("Application state not initialized")
    return state


def get_dispatcher(state: AppState = Depends(get_app_state)) -> Dispatcher:
    """取得 fan-out 派送器（僅 gateway）"""
    if state.dispatcher is None:
        raise RuntimeError("Dispatcher not initialized")
    return state.dispatcher


def get_worker(state: AppState = Depends(get_app_state)) -> TransformWorker:
    """取得轉換 Worker（僅 worker）"""
    if state.worker is None:
        raise RuntimeError("Worker not initialized")
    return state.worker
