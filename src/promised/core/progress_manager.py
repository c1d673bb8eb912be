"""进度管理器模块

负责下载进度的跟踪和显示，提供Rich进度条和回调支持。
"""

from typing import Callable, Dict, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TransferSpeedColumn,
)

from ..models import DownloadProgress

ProgressCallback = Callable[[DownloadProgress], None]
Tracker = Callable[[int, int], None]


class ProgressManager:
    """进度管理器

    为每个文件生成一个跟踪函数 track(downloaded, total)，
    同时驱动可选的回调函数和可选的Rich进度条。
    """

    def __init__(
        self,
        progress_callback: Optional[ProgressCallback] = None,
        show_progress: bool = False,
        console: Optional[Console] = None,
    ):
        """初始化进度管理器

        Args:
            progress_callback: 可选的进度回调函数
            show_progress: 是否显示Rich进度条
            console: Rich控制台，默认新建
        """
        self.progress_callback = progress_callback
        self.show_progress = show_progress
        self.console = console
        self._progress_display: Optional[Progress] = None
        self._task_ids: Dict[str, TaskID] = {}

    def create_progress_bar(self) -> Progress:
        """创建Rich进度条"""
        return Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            "[progress.percentage]{task.percentage:>3.1f}%",
            "•",
            DownloadColumn(),
            "•",
            TransferSpeedColumn(),
            console=self.console,
            refresh_per_second=4,
        )

    def __enter__(self) -> "ProgressManager":
        if self.show_progress:
            self._progress_display = self.create_progress_bar()
            self._progress_display.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._progress_display is not None:
            self._progress_display.stop()
            self._progress_display = None
        self._task_ids.clear()

    def tracker(self, filename: str) -> Tracker:
        """创建某个文件的进度跟踪函数

        Args:
            filename: 文件名，同时作为进度条描述

        Returns:
            track(downloaded, total) 函数
        """

        def track(downloaded: int, total: int) -> None:
            if self._progress_display is not None:
                task_id = self._task_ids.get(filename)
                if task_id is None:
                    task_id = self._progress_display.add_task(filename, total=total or None)
                    self._task_ids[filename] = task_id
                self._progress_display.update(
                    task_id, completed=downloaded, total=total or None
                )

            if self.progress_callback:
                self.progress_callback(
                    DownloadProgress(filename=filename, downloaded=downloaded, total=total)
                )

        return track

    @property
    def active(self) -> bool:
        """是否需要跟踪进度"""
        return self.progress_callback is not None or self._progress_display is not None
