"""
Fan-out 派送模組

依請求的轉換名稱查詢服務目錄，並行呼叫對應的 worker，
以完成順序輸出結果；每個存活的請求名稱恰好產生一個結果（成功或失敗紀錄）
"""

import logging
import threading
import time
from collections.abc import Iterable, Iterator
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait

from image_fanout.common.exceptions import ServiceDirectoryError
from image_fanout.data_model import (
    CANCELLED_ERROR_TYPE,
    FanOutResult,
    TransformedImage,
    TransformFailure,
    TransformOutcome,
)

from .interfaces import ServiceDirectory, WorkerClientFactory


logger = logging.getLogger(__name__)


class FanOutStream:
    """
    無序、完整的結果串流

    建立時所有呼叫已經送出；迭代時依完成順序取得 TransformedImage 或
    TransformFailure。期限到期、取消事件觸發或提前 close() 時，
    未完成的名稱各自以 error_type="Cancelled" 的失敗紀錄結束

    用法::

        with dispatcher.fan_out(names, "cat.png", data) as stream:
            for outcome in stream:
                ...
    """

    def __init__(
        self,
        *,
        file_name: str,
        requested: tuple[str, ...],
        unregistered: tuple[str, ...],
        executor: ThreadPoolExecutor | None,
        futures: dict[Future[TransformedImage], str],
        deadline: float | None = None,
        cancel_event: threading.Event | None = None,
        poll_interval: float = 0.05,
    ) -> None:
        self.file_name = file_name
        self.requested = requested
        self.unregistered = unregistered
        self.dispatched: tuple[str, ...] = tuple(futures.values())
        self._executor = executor
        self._futures = futures
        self._deadline_at = time.monotonic() + deadline if deadline is not None else None
        self._cancel_event = cancel_event
        self._poll_interval = poll_interval
        self._outcomes = self._drain()

    def __iter__(self) -> Iterator[TransformOutcome]:
        return self

    def __next__(self) -> TransformOutcome:
        return next(self._outcomes)

    def __enter__(self) -> "FanOutStream":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    def close(self) -> None:
        """放棄尚未取得的結果並釋放執行緒池"""
        self._outcomes.close()
        self._shutdown()

    def _shutdown(self) -> None:
        if self._executor is not None:
            # 不等待進行中的呼叫，尚未開始的直接取消
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    def _interrupted(self) -> bool:
        if self._cancel_event is not None and self._cancel_event.is_set():
            return True
        return self._deadline_at is not None and time.monotonic() >= self._deadline_at

    def _wait_timeout(self) -> float | None:
        timeouts: list[float] = []
        if self._cancel_event is not None:
            timeouts.append(self._poll_interval)
        if self._deadline_at is not None:
            timeouts.append(max(0.0, self._deadline_at - time.monotonic()))
        return min(timeouts) if timeouts else None

    def _drain(self) -> Iterator[TransformOutcome]:
        pending = set(self._futures)
        try:
            while pending and not self._interrupted():
                done, pending = wait(
                    pending, timeout=self._wait_timeout(), return_when=FIRST_COMPLETED
                )
                for future in done:
                    yield self._outcome(future)

            # 中斷前已完成的結果仍然輸出
            finished = {future for future in pending if future.done()}
            for future in finished:
                yield self._outcome(future)
            pending -= finished

            if pending:
                names = sorted(self._futures[future] for future in pending)
                logger.warning(
                    "Fan-out for %s interrupted, %d transforms did not complete: %s",
                    self.file_name,
                    len(names),
                    ", ".join(names),
                )
                for future in pending:
                    future.cancel()
                for name in names:
                    yield TransformFailure(
                        image_name=self.file_name,
                        transform_name=name,
                        error_type=CANCELLED_ERROR_TYPE,
                        message="Transform did not complete before cancellation",
                    )
        finally:
            self._shutdown()

    def _outcome(self, future: Future[TransformedImage]) -> TransformOutcome:
        name = self._futures[future]
        try:
            return future.result()
        except Exception as exc:
            # 失敗只影響這一個轉換
            logger.warning("Transform %s failed for %s: %s", name, self.file_name, exc)
            return TransformFailure(
                image_name=self.file_name,
                transform_name=name,
                error_type=type(exc).__name__,
                message=str(exc),
            )


class Dispatcher:
    """
    Fan-out / fan-in 派送器

    服務目錄與 worker 呼叫端工廠皆於建構時注入
    """

    def __init__(
        self,
        directory: ServiceDirectory,
        client_factory: WorkerClientFactory,
        max_workers: int = 8,
        poll_interval: float = 0.05,
    ) -> None:
        """
        初始化派送器

        Args:
            directory: 服務目錄
            client_factory: 依名稱建立 WorkerClient 的工廠
            max_workers: 每次 fan-out 的最大並行呼叫數
            poll_interval: 監看取消事件的間隔（秒）
        """
        self._directory = directory
        self._client_factory = client_factory
        self._max_workers = max(1, max_workers)
        self._poll_interval = poll_interval

    def __enter__(self) -> "Dispatcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """釋放呼叫端工廠持有的資源（如共用的 HTTP 連線）"""
        close = getattr(self._client_factory, "close", None)
        if callable(close):
            close()

    def snapshot(self) -> set[str]:
        """
        讀取一次服務目錄快照（小寫名稱）

        Raises:
            ServiceDirectoryError: 目錄無法讀取
        """
        try:
            names = self._directory.list_registered_names()
        except ServiceDirectoryError:
            raise
        except Exception as exc:
            raise ServiceDirectoryError(f"Cannot read service directory: {exc}") from exc
        return {name.lower() for name in names}

    @staticmethod
    def select(
        requested: Iterable[str], registered: set[str]
    ) -> tuple[list[str], list[str]]:
        """
        將請求名稱分為有存活 worker 與未註冊兩組

        比對不分大小寫，重複名稱只保留第一次出現的寫法

        Args:
            requested: 請求的轉換名稱
            registered: 小寫的已註冊名稱

        Returns:
            (selected, unregistered)
        """
        selected: list[str] = []
        unregistered: list[str] = []
        seen: set[str] = set()

        for name in requested:
            key = name.lower()
            if key in seen:
                continue
            seen.add(key)
            if key in registered:
                selected.append(name)
            else:
                unregistered.append(name)

        return selected, unregistered

    def _call(self, name: str, file_name: str, image_bytes: bytes) -> TransformedImage:
        client = self._client_factory(name)
        return client.invoke(name, file_name, image_bytes)

    def fan_out(
        self,
        requested_transforms: Iterable[str],
        file_name: str,
        image_bytes: bytes,
        *,
        deadline: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> FanOutStream:
        """
        並行呼叫所有請求且已註冊的轉換

        Args:
            requested_transforms: 請求的轉換名稱（順序不影響結果）
            file_name: 原始檔名
            image_bytes: 圖片位元組
            deadline: 整體期限（秒），到期後未完成者以取消紀錄結束
            cancel_event: 外部取消訊號

        Returns:
            依完成順序輸出結果的串流

        Raises:
            ServiceDirectoryError: 目錄無法讀取（尚未呼叫任何 worker）
        """
        requested = tuple(requested_transforms)
        selected, unregistered = self.select(requested, self.snapshot())

        if unregistered:
            logger.info(
                "No live worker for %s, dropped: %s",
                file_name,
                ", ".join(unregistered),
            )

        executor: ThreadPoolExecutor | None = None
        futures: dict[Future[TransformedImage], str] = {}
        if selected:
            executor = ThreadPoolExecutor(
                max_workers=min(self._max_workers, len(selected)),
                thread_name_prefix="fanout",
            )
            futures = {
                executor.submit(self._call, name, file_name, image_bytes): name
                for name in selected
            }

        logger.info(
            "Fan-out %s: %d dispatched, %d unregistered",
            file_name,
            len(selected),
            len(unregistered),
        )
        return FanOutStream(
            file_name=file_name,
            requested=requested,
            unregistered=tuple(unregistered),
            executor=executor,
            futures=futures,
            deadline=deadline,
            cancel_event=cancel_event,
            poll_interval=self._poll_interval,
        )

    def collect(
        self,
        requested_transforms: Iterable[str],
        file_name: str,
        image_bytes: bytes,
        *,
        deadline: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> FanOutResult:
        """
        執行 fan-out 並彙整所有結果

        Returns:
            彙整結果（成功、失敗與未註冊名稱分開記錄）
        """
        with self.fan_out(
            requested_transforms,
            file_name,
            image_bytes,
            deadline=deadline,
            cancel_event=cancel_event,
        ) as stream:
            outcomes = list(stream)

        return FanOutResult(
            requested=stream.requested,
            images=tuple(o for o in outcomes if isinstance(o, TransformedImage)),
            failures=tuple(o for o in outcomes if isinstance(o, TransformFailure)),
            unregistered=stream.unregistered,
        )
