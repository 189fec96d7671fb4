"""
Pytest 配置和共用 fixtures
"""

import io
import threading
import time

import numpy as np
import pytest
from PIL import Image, ImageDraw

from image_fanout.common.exceptions import TransformError
from image_fanout.data_model import TransformedImage
from image_fanout.directory import InMemoryServiceDirectory


def _to_bytes(img: Image.Image, fmt: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture(scope="session")
def rgb_png_bytes() -> bytes:
    """
    生成 RGB 測試圖片（白底彩色圖形）

    模擬：沒有 alpha 通道的一般照片
    """
    img = Image.new("RGB", (64, 48), color=(255, 255, 255))
    draw = ImageDraw.Draw(img)
    draw.rectangle([(8, 8), (30, 40)], fill=(200, 40, 40))
    draw.ellipse([(32, 10), (60, 38)], fill=(40, 160, 220))
    return _to_bytes(img)


@pytest.fixture(scope="session")
def rgba_png_bytes() -> bytes:
    """
    生成含半透明像素的 RGBA 測試圖片

    每一列的 alpha 值不同，用於驗證 alpha 通道不受轉換影響
    """
    rng = np.random.default_rng(42)
    data = rng.integers(0, 256, size=(32, 32, 4), dtype=np.uint8)
    data[:, :, 3] = np.arange(32, dtype=np.uint8)[:, None] * 8
    return _to_bytes(Image.fromarray(data))


@pytest.fixture(scope="session")
def jpeg_bytes() -> bytes:
    """生成 JPEG 測試圖片"""
    img = Image.new("RGB", (40, 40), color=(30, 90, 150))
    draw = ImageDraw.Draw(img)
    draw.line([(0, 0), (39, 39)], fill=(250, 250, 0), width=3)
    return _to_bytes(img, "JPEG")


@pytest.fixture
def directory() -> InMemoryServiceDirectory:
    """已註冊 grayscale / sepia / tint 的服務目錄（名稱大小寫混用）"""
    return InMemoryServiceDirectory(
        {"GRAYSCALE": "http://grayscale", "Sepia": "http://sepia", "tint": "http://tint"}
    )


class FakeWorkerClient:
    """
    測試用 Worker 呼叫端

    依名稱設定延遲與失敗，記錄所有呼叫
    """

    def __init__(
        self,
        delays: dict[str, float] | None = None,
        failures: dict[str, Exception] | None = None,
    ) -> None:
        self.delays = delays or {}
        self.failures = failures or {}
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def invoke(
        self, transform_name: str, file_name: str, image_bytes: bytes
    ) -> TransformedImage:
        with self._lock:
            self.calls.append(transform_name)
        time.sleep(self.delays.get(transform_name.lower(), 0.0))
        error = self.failures.get(transform_name.lower())
        if error is not None:
            raise error
        return TransformedImage(
            image_name=file_name,
            transform_name=transform_name,
            image_bytes=image_bytes + transform_name.encode(),
        )

    def factory(self, name: str) -> "FakeWorkerClient":
        return self


@pytest.fixture
def fake_client() -> FakeWorkerClient:
    """不延遲、不失敗的假 Worker"""
    return FakeWorkerClient()


@pytest.fixture
def failing_tint_client() -> FakeWorkerClient:
    """tint 呼叫固定失敗的假 Worker"""
    return FakeWorkerClient(
        failures={"tint": TransformError("boom", transform_name="tint")}
    )
