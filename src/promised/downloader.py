"""下载编排模块

实现 Downloader 主类：单文件下载带重试，批量下载通过有界并发调度，
单个条目的失败记录在条目上，不影响其他条目。
"""

import functools
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from yarl import URL

from .async_adapter import smart_run
from .codecs import Capabilities, default_capabilities
from .config import get_config
from .core.file_manager import FileManager, build_target_path, filename_from_url
from .core.network_client import HTTPClient
from .core.progress_manager import ProgressCallback, ProgressManager
from .log import logger as default_logger, trace
from .models import Config, DownloadItem, HlsMode
from .retry import try_operation
from .scheduler import AggregationPolicy, all_limit
from .transforms import HlsStream, Transform, Tracker, hls, pipe_to_file

UrlLike = Union[str, URL]
PathLike = Union[str, Path]


class Downloader:
    """并行文件下载器 - 异步版本

    支持依赖注入（配置、logger、解析能力）和进度回调
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        logger: Any = default_logger,
        capabilities: Optional[Capabilities] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """初始化下载器

        Args:
            config: 配置对象，如果为None则使用全局配置
            logger: 任何带 debug 方法的对象
            capabilities: 编解码能力，如果为None则使用默认能力
            progress_callback: 进度回调函数
        """
        self.config = config or get_config()
        self.logger = logger
        self.capabilities = capabilities or default_capabilities
        self.progress_callback = progress_callback

        self.client = HTTPClient(self.config)
        self.file_manager = FileManager(self.config.chunk_size)

    async def __aenter__(self) -> "Downloader":
        """异步上下文管理器入口"""
        await self.client.__aenter__()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """异步上下文管理器退出"""
        await self.client.close()

    async def fetch(
        self,
        url: UrlLike,
        transform: Transform,
        max_attempts: Optional[int] = None,
        delay: Optional[float] = None,
    ) -> Any:
        """带重试地 GET 一个地址，再把响应交给 transform

        重试只覆盖请求本身（连接错误、非2xx），transform 的失败直接抛出。
        """
        if max_attempts is None:
            max_attempts = self.config.download_max_attempts
        if delay is None:
            delay = self.config.download_retry_delay

        response = await try_operation(
            self.client.get,
            (url,),
            max_attempts=max_attempts,
            delay=delay,
            logger=self.logger,
        )
        return await transform(response)

    async def fetch_hls(
        self,
        url: UrlLike,
        mode: Union[HlsMode, str] = HlsMode.BEST,
        base_url: Optional[UrlLike] = None,
    ) -> List[HlsStream]:
        """拉取 HLS 主播放列表并按 mode 选择变体流"""
        transform = hls(mode, base_url, client=self.client, capabilities=self.capabilities)
        return await self.fetch(url, transform)

    async def download_file(
        self,
        url: UrlLike,
        filename: Optional[str] = None,
        target_directory: Optional[PathLike] = None,
        progress: Optional[Tracker] = None,
    ) -> str:
        """下载单个文件

        Args:
            url: 文件地址
            filename: 文件名，默认取URL路径最后一段
            target_directory: 目标目录，需已存在
            progress: 可选的进度跟踪函数

        Returns:
            写入的文件路径

        Raises:
            ValidationError: 无法从URL推导文件名
            NetworkError: 重试耗尽后的最后一次网络错误
            StorageError: 写文件失败
        """
        path = build_target_path(filename or filename_from_url(url), target_directory)

        if progress is None and self.progress_callback is not None:
            progress = ProgressManager(self.progress_callback).tracker(path)

        trace(self.logger, "Downloading %s -> %s", url, path)
        return await self.fetch(url, pipe_to_file(path, self.config.chunk_size, progress))

    async def _download_item(self, item: DownloadItem, progress: ProgressManager) -> str:
        """下载一个条目，把结果或错误写回条目"""
        try:
            path = build_target_path(
                item.filename or filename_from_url(item.url), item.target_directory
            )
            resolved = await self.download_file(
                item.url,
                item.filename,
                item.target_directory,
                progress=progress.tracker(path) if progress.active else None,
            )
        except Exception as e:
            item.error = e
            trace(self.logger, "Download #%d failed: %r", item.index, e)
            raise

        item.resolved_filename = resolved
        return resolved

    async def download_files(
        self,
        urls: Sequence[UrlLike],
        filenames: Optional[Sequence[Optional[str]]] = None,
        target_directory: Optional[PathLike] = None,
        width: Optional[int] = None,
        show_progress: bool = False,
    ) -> List[DownloadItem]:
        """并行下载多个文件

        Args:
            urls: 文件地址列表
            filenames: 与 urls 一一对应的文件名，缺省项从URL推导
            target_directory: 目标目录
            width: 并发通道数，默认使用 config.max_parallel_downloads
            show_progress: 是否显示Rich进度条

        Returns:
            按原始顺序排列的 DownloadItem 列表，每个条目要么有
            resolved_filename，要么有 error
        """
        if width is None:
            width = self.config.max_parallel_downloads
        names = list(filenames or [])

        items = [
            DownloadItem(
                url=str(url),
                filename=names[index] if index < len(names) else None,
                target_directory=str(target_directory) if target_directory else None,
                index=index,
            )
            for index, url in enumerate(urls)
        ]

        with ProgressManager(self.progress_callback, show_progress) as progress:
            tasks = [functools.partial(self._download_item, item, progress) for item in items]
            await all_limit(tasks, width, AggregationPolicy.SETTLE_ALL)

        failed = sum(1 for item in items if item.error is not None)
        trace(self.logger, "Downloaded %d/%d files", len(items) - failed, len(items))
        return sorted(items, key=lambda item: item.index)


# 便捷函数
async def download_file(
    url: UrlLike,
    filename: Optional[str] = None,
    target_directory: Optional[PathLike] = None,
    config: Optional[Config] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> str:
    """便捷的单文件下载函数"""
    async with Downloader(config=config, progress_callback=progress_callback) as downloader:
        return await downloader.download_file(url, filename, target_directory)


async def download_files(
    urls: Sequence[UrlLike],
    filenames: Optional[Sequence[Optional[str]]] = None,
    target_directory: Optional[PathLike] = None,
    width: Optional[int] = None,
    config: Optional[Config] = None,
    progress_callback: Optional[ProgressCallback] = None,
    show_progress: bool = False,
) -> List[DownloadItem]:
    """便捷的批量下载函数"""
    async with Downloader(config=config, progress_callback=progress_callback) as downloader:
        return await downloader.download_files(
            urls, filenames, target_directory, width, show_progress=show_progress
        )


def download_file_sync(*args: Any, **kwargs: Any) -> str:
    """同步版本的 download_file，可在已有事件循环的环境中调用"""
    return smart_run(download_file(*args, **kwargs))


def download_files_sync(*args: Any, **kwargs: Any) -> List[DownloadItem]:
    """同步版本的 download_files，可在已有事件循环的环境中调用"""
    return smart_run(download_files(*args, **kwargs))
