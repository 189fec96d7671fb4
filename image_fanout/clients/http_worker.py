"""
HTTP Worker 呼叫端

以 multipart POST 呼叫遠端 worker 的 /apply-transform 端點
遠端回傳的錯誤會還原為對應的本機例外，讓本機與遠端語意一致
"""

import logging

import httpx
from pydantic import ValidationError

from image_fanout.common.exceptions import (
    TransformError,
    WorkerUnreachableError,
    rebuild_transform_error,
)
from image_fanout.core.interfaces import LocatingServiceDirectory
from image_fanout.data_model import TransformedImage


logger = logging.getLogger(__name__)

APPLY_TRANSFORM_PATH = "/apply-transform"


class HttpWorkerClient:
    """
    遠端 Worker 呼叫端

    Attributes:
        base_url: worker 基底 URL
        timeout: 單次呼叫逾時（秒）
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        """
        初始化呼叫端

        Args:
            base_url: worker 基底 URL（如 http://grayscale:8080）
            timeout: 單次呼叫逾時（秒）
            client: 共用的 httpx.Client（未提供時自行建立並負責關閉）
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def __enter__(self) -> "HttpWorkerClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    def close(self) -> None:
        """關閉自行建立的 httpx.Client"""
        if self._owns_client:
            self._client.close()

    def invoke(
        self, transform_name: str, file_name: str, image_bytes: bytes
    ) -> TransformedImage:
        """
        呼叫遠端 worker

        Raises:
            WorkerUnreachableError: 連線失敗、逾時或非預期的回應
            TransformError: 遠端回報的轉換錯誤（DecodeError 等）
        """
        url = f"{self.base_url}{APPLY_TRANSFORM_PATH}"
        logger.debug("POST %s (transform=%s, file=%s)", url, transform_name, file_name)

        try:
            response = self._client.post(
                url,
                data={"transform": transform_name},
                files={"image": (file_name, image_bytes, "application/octet-stream")},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as exc:
            raise WorkerUnreachableError(
                f"Worker timed out after {self.timeout:.1f}s",
                transform_name=transform_name,
                location=self.base_url,
            ) from exc
        except httpx.TransportError as exc:
            raise WorkerUnreachableError(
                f"Cannot connect to worker: {exc}",
                transform_name=transform_name,
                location=self.base_url,
            ) from exc

        if response.is_error:
            raise self._error_from_response(response, transform_name)

        try:
            return TransformedImage.model_validate_json(response.content)
        except ValidationError as exc:
            raise TransformError(
                f"Invalid worker response from {self.base_url}: {exc.error_count()} errors",
                transform_name=transform_name,
            ) from exc

    def _error_from_response(
        self, response: httpx.Response, transform_name: str
    ) -> TransformError:
        """將錯誤回應轉為例外"""
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and "error_type" in body:
            return rebuild_transform_error(
                str(body["error_type"]), str(body.get("detail", "")), transform_name
            )

        return WorkerUnreachableError(
            f"Worker responded with HTTP {response.status_code}",
            transform_name=transform_name,
            location=self.base_url,
        )


class HttpWorkerClientFactory:
    """
    依服務目錄位址建立 HttpWorkerClient 的工廠

    所有呼叫端共用一個 httpx.Client；工廠自行建立的 client 由 close() 關閉
    """

    def __init__(
        self,
        directory: LocatingServiceDirectory,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.directory = directory
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def __call__(self, name: str) -> HttpWorkerClient:
        return HttpWorkerClient(
            self.directory.location(name), timeout=self.timeout, client=self._client
        )

    def __enter__(self) -> "HttpWorkerClientFactory":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """關閉自行建立的共用 httpx.Client"""
        if self._owns_client and not self._client.is_closed:
            self._client.close()
            logger.debug("Shared worker HTTP client closed")


def http_client_factory(
    directory: LocatingServiceDirectory,
    timeout: float = 30.0,
    client: httpx.Client | None = None,
) -> HttpWorkerClientFactory:
    """
    建立依目錄位址呼叫遠端 worker 的工廠

    Args:
        directory: 可解析位址的服務目錄
        timeout: 單次呼叫逾時（秒）
        client: 所有呼叫共用的 httpx.Client（未提供時由工廠建立並負責關閉）

    Returns:
        name -> HttpWorkerClient
    """
    return HttpWorkerClientFactory(directory, timeout=timeout, client=client)
