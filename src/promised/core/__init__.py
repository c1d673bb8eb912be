"""核心模块

这个包包含与外部世界打交道的功能模块：
- network_client: HTTP传输客户端
- file_manager: 文件系统操作
- progress_manager: 下载进度跟踪
"""

from .network_client import HTTPClient
from .file_manager import FileManager, build_target_path, filename_from_url
from .progress_manager import ProgressManager

__all__ = [
    "HTTPClient",
    "FileManager",
    "ProgressManager",
    "build_target_path",
    "filename_from_url",
]
