"""
HTTP 介面測試（使用 FastAPI TestClient）
"""

import base64
from unittest.mock import MagicMock
from urllib.parse import unquote

import pytest
from fastapi.testclient import TestClient

from image_fanout.api import create_gateway_app, create_worker_app
from image_fanout.clients import HttpWorkerClient, local_client_factory
from image_fanout.common.exceptions import ServiceDirectoryError, UnsupportedTransformError
from image_fanout.core.dispatcher import Dispatcher
from image_fanout.core.interfaces import ServiceDirectory
from image_fanout.data_model import TransformedImage
from image_fanout.directory import InMemoryServiceDirectory
from image_fanout.features.transforms import TransformWorker

from conftest import FakeWorkerClient


@pytest.fixture
def worker_client() -> TestClient:
    return TestClient(create_worker_app(TransformWorker()))


class TestWorkerApp:
    """worker app 測試"""

    @pytest.mark.integration
    def test_apply_transform(self, worker_client: TestClient, rgb_png_bytes: bytes) -> None:
        response = worker_client.post(
            "/apply-transform",
            data={"transform": "grayscale"},
            files={"image": ("cat.png", rgb_png_bytes, "image/png")},
        )
        assert response.status_code == 200  # noqa: PLR2004
        body = response.json()
        assert body["imageName"] == "cat.png"
        assert body["transformName"] == "grayscale"
        assert base64.b64decode(body["imageBytes"]) != rgb_png_bytes

        result = TransformedImage.model_validate_json(response.content)
        assert result.image_bytes.startswith(b"\x89PNG")

    @pytest.mark.integration
    def test_unsupported_transform(
        self, worker_client: TestClient, rgb_png_bytes: bytes
    ) -> None:
        response = worker_client.post(
            "/apply-transform",
            data={"transform": "bogus"},
            files={"image": ("cat.png", rgb_png_bytes, "image/png")},
        )
        assert response.status_code == 404  # noqa: PLR2004
        assert response.json()["error_type"] == "UnsupportedTransformError"
        assert "bogus" in response.json()["detail"]

    @pytest.mark.integration
    def test_decode_error(self, worker_client: TestClient) -> None:
        response = worker_client.post(
            "/apply-transform",
            data={"transform": "sepia"},
            files={"image": ("cat.png", b"garbage", "image/png")},
        )
        assert response.status_code == 400  # noqa: PLR2004
        assert response.json()["error_type"] == "DecodeError"

    @pytest.mark.unit
    def test_info(self, worker_client: TestClient) -> None:
        response = worker_client.get("/actuator/info")
        assert response.status_code == 200  # noqa: PLR2004
        assert response.json()["name"] == "TransformWorker"
        assert response.json()["transforms"] == ["grayscale", "sepia", "tint"]

    @pytest.mark.integration
    def test_http_client_against_worker_app(
        self, worker_client: TestClient, rgb_png_bytes: bytes
    ) -> None:
        """HttpWorkerClient 與 worker app 的錯誤語意一致"""
        client = HttpWorkerClient("http://testserver", client=worker_client)

        result = client.invoke("sepia", "cat.png", rgb_png_bytes)
        assert result.transform_name == "sepia"

        with pytest.raises(UnsupportedTransformError):
            client.invoke("bogus", "cat.png", rgb_png_bytes)


class TestGatewayApp:
    """gateway app 測試"""

    @pytest.mark.integration
    def test_apply_transforms(self, rgb_png_bytes: bytes) -> None:
        directory = InMemoryServiceDirectory(
            {"grayscale": "local", "sepia": "local", "tint": "local"}
        )
        app = create_gateway_app(Dispatcher(directory, local_client_factory()))
        client = TestClient(app)

        response = client.post(
            "/apply-transforms",
            data={"transforms": ["grayscale", "sepia", "tint", "bogus"]},
            files={"image": ("cat.png", rgb_png_bytes, "image/png")},
        )

        assert response.status_code == 200  # noqa: PLR2004
        body = response.json()
        assert len(body) == 3  # noqa: PLR2004
        assert {item["transformName"] for item in body} == {"grayscale", "sepia", "tint"}
        assert response.headers["X-Unregistered-Transforms"] == "bogus"
        assert "X-Failed-Transforms" not in response.headers

    @pytest.mark.integration
    def test_non_latin1_name_is_dropped(self, rgb_png_bytes: bytes) -> None:
        """未註冊的中文名稱不影響回應，標頭以百分比編碼列出"""
        directory = InMemoryServiceDirectory({"grayscale": "local"})
        client = TestClient(create_gateway_app(Dispatcher(directory, local_client_factory())))

        response = client.post(
            "/apply-transforms",
            data={"transforms": ["grayscale", "灰階"]},
            files={"image": ("cat.png", rgb_png_bytes, "image/png")},
        )

        assert response.status_code == 200  # noqa: PLR2004
        assert [item["transformName"] for item in response.json()] == ["grayscale"]
        header = response.headers["X-Unregistered-Transforms"]
        assert header == "%E7%81%B0%E9%9A%8E"
        assert unquote(header) == "灰階"

    @pytest.mark.unit
    def test_header_names_are_encoded(self, directory: InMemoryServiceDirectory) -> None:
        fake = FakeWorkerClient(failures={"tint": RuntimeError("down")})
        client = TestClient(create_gateway_app(Dispatcher(directory, fake.factory)))

        response = client.post(
            "/apply-transforms",
            data={"transforms": ["tint", "bad\nname", "a,b"]},
            files={"image": ("cat.png", b"x", "image/png")},
        )

        assert response.status_code == 200  # noqa: PLR2004
        assert response.headers["X-Failed-Transforms"] == "tint"
        names = response.headers["X-Unregistered-Transforms"].split(",")
        assert names == ["bad%0Aname", "a%2Cb"]
        assert [unquote(name) for name in names] == ["bad\nname", "a,b"]

    @pytest.mark.unit
    def test_failed_transforms_header(self, directory: InMemoryServiceDirectory) -> None:
        fake = FakeWorkerClient(failures={"sepia": RuntimeError("down")})
        client = TestClient(create_gateway_app(Dispatcher(directory, fake.factory)))

        response = client.post(
            "/apply-transforms",
            data={"transforms": ["grayscale", "sepia"]},
            files={"image": ("cat.png", b"x", "image/png")},
        )

        assert response.status_code == 200  # noqa: PLR2004
        assert [item["transformName"] for item in response.json()] == ["grayscale"]
        assert response.headers["X-Failed-Transforms"] == "sepia"

    @pytest.mark.unit
    def test_directory_unavailable(self, fake_client: FakeWorkerClient) -> None:
        directory = MagicMock(spec=ServiceDirectory)
        directory.list_registered_names.side_effect = ServiceDirectoryError("registry down")
        client = TestClient(create_gateway_app(Dispatcher(directory, fake_client.factory)))

        response = client.post(
            "/apply-transforms",
            data={"transforms": ["sepia"]},
            files={"image": ("cat.png", b"x", "image/png")},
        )
        assert response.status_code == 503  # noqa: PLR2004

    @pytest.mark.integration
    def test_gateway_to_remote_worker(self, rgb_png_bytes: bytes) -> None:
        """gateway 透過 HTTP 呼叫 worker app"""
        worker_http = TestClient(create_worker_app(TransformWorker()))

        directory = InMemoryServiceDirectory({"sepia": "http://testserver"})

        def factory(name: str) -> HttpWorkerClient:
            return HttpWorkerClient(directory.location(name), client=worker_http)

        client = TestClient(create_gateway_app(Dispatcher(directory, factory)))
        response = client.post(
            "/apply-transforms",
            data={"transforms": ["SEPIA"]},
            files={"image": ("cat.png", rgb_png_bytes, "image/png")},
        )

        assert response.status_code == 200  # noqa: PLR2004
        assert [item["transformName"] for item in response.json()] == ["SEPIA"]

    @pytest.mark.unit
    def test_shutdown_closes_dispatcher(self) -> None:
        dispatcher = MagicMock(spec=Dispatcher)
        with TestClient(create_gateway_app(dispatcher)):
            dispatcher.close.assert_not_called()
        dispatcher.close.assert_called_once()

    @pytest.mark.unit
    def test_health(self, fake_client: FakeWorkerClient) -> None:
        app = create_gateway_app(Dispatcher(InMemoryServiceDirectory(), fake_client.factory))
        assert TestClient(app).get("/health").json() == {"status": "ok"}
