"""promised - 异步工具包

围绕可手动完成的 Future 构建：有界并发调度、固定间隔重试、
并行文件下载以及流式响应转换。
"""

from .deferred import Deferred, defer, delay
from .retry import RetryConfig, RetryStats, retrying, try_operation
from .scheduler import AggregationPolicy, Settled, all_limit, partition_lanes
from .downloader import (
    Downloader,
    download_file,
    download_file_sync,
    download_files,
    download_files_sync,
)
from .transforms import (
    HlsStream,
    gunzip,
    hls,
    parse_xml,
    pipe_to_file,
    to_buffer,
    to_headers,
    to_json,
    to_playlist,
    to_text,
    to_xml,
)
from .codecs import Capabilities
from .core import FileManager, HTTPClient
from .models import Config, DownloadItem, DownloadProgress, HlsMode
from .config import get_config, reset_config
from .exceptions import (
    PromisedError,
    ValidationError,
    ConfigurationError,
    CapabilityNotConfiguredError,
    NetworkError,
    TransportError,
    StatusError,
    StorageError,
    CodecError,
)

# 版本信息
__version__ = "1.0.0"
__title__ = "promised"
__description__ = "Async toolkit: bounded concurrency, retries and parallel downloads"
__license__ = "MIT"

# 公共API
__all__ = [
    # Future 与组合子
    "Deferred",
    "defer",
    "delay",
    "try_operation",
    "retrying",
    "RetryConfig",
    "RetryStats",
    "all_limit",
    "partition_lanes",
    "AggregationPolicy",
    "Settled",
    # 下载
    "Downloader",
    "download_file",
    "download_files",
    "download_file_sync",
    "download_files_sync",
    # 响应转换
    "to_text",
    "to_buffer",
    "to_json",
    "to_xml",
    "parse_xml",
    "to_headers",
    "to_playlist",
    "gunzip",
    "pipe_to_file",
    "hls",
    "HlsStream",
    "Capabilities",
    # 传输与存储
    "HTTPClient",
    "FileManager",
    # 数据模型
    "Config",
    "DownloadItem",
    "DownloadProgress",
    "HlsMode",
    # 配置管理
    "get_config",
    "reset_config",
    # 异常类
    "PromisedError",
    "ValidationError",
    "ConfigurationError",
    "CapabilityNotConfiguredError",
    "NetworkError",
    "TransportError",
    "StatusError",
    "StorageError",
    "CodecError",
    # 元数据
    "__version__",
]


def get_version() -> str:
    """获取版本号"""
    return __version__
