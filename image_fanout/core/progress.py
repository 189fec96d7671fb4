"""
fan-out 進度顯示

在 CLI 中依完成順序顯示每個轉換的結果
"""

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
)

from image_fanout.data_model import TransformOutcome


class FanOutProgressBar:
    """
    fan-out 結果進度條

    用法::

        with FanOutProgressBar(total=len(stream.dispatched)) as bar:
            for outcome in stream:
                bar.advance(outcome)
    """

    def __init__(self, total: int, description: str = "Transforming") -> None:
        self._progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("[red]{task.fields[failed]} failed"),
            TimeElapsedColumn(),
        )
        self._task_id = self._progress.add_task(description, total=total, failed=0)
        self._label = description
        self._counts = {True: 0, False: 0}

    def __enter__(self) -> "FanOutProgressBar":
        self._progress.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._progress.stop()

    def advance(self, outcome: TransformOutcome) -> None:
        """依結果推進進度，描述欄顯示最近完成的轉換"""
        self._counts[outcome.succeeded] += 1
        if outcome.succeeded:
            status = "[green]OK[/green]"
        else:
            status = f"[red]{outcome.error_type}[/red]"
        self._progress.update(
            self._task_id,
            advance=1,
            description=f"{self._label}: {outcome.transform_name} {status}",
            failed=self.failed_count,
        )

    @property
    def success_count(self) -> int:
        return self._counts[True]

    @property
    def failed_count(self) -> int:
        """失敗數量（含取消）"""
        return self._counts[False]
