"""文件管理器模块

负责下载流程用到的文件系统操作：写文件、列目录、删除文件和目录、
计算校验和。所有 OSError 都被包装为 StorageError。
"""

import asyncio
import hashlib
import os
from pathlib import Path
from typing import List, Optional, Union

import aiofiles
import aiofiles.os
from yarl import URL

from ..exceptions import StorageError, ValidationError

PathLike = Union[str, Path]


def filename_from_url(url: Union[str, URL]) -> str:
    """取URL路径的最后一段作为文件名

    Raises:
        ValidationError: URL路径没有可用的文件名
    """
    name = URL(str(url)).name
    if not name or name in (".", ".."):
        raise ValidationError(f"Cannot derive a filename from URL: {url}")
    return name


def build_target_path(filename: str, target_directory: Optional[PathLike] = None) -> str:
    """把文件名放到目标目录下"""
    if target_directory:
        return str(Path(target_directory) / filename)
    return filename


class FileManager:
    """文件管理器

    负责所有文件操作，包括:
    - 目录创建和遍历
    - 文件读写
    - 目录及其内容的删除
    - MD5 校验和
    """

    def __init__(self, chunk_size: int = 8192):
        """初始化文件管理器

        Args:
            chunk_size: 读取文件时的块大小
        """
        self.chunk_size = chunk_size

    async def ensure_directory(self, directory: PathLike) -> Path:
        """确保目录存在"""
        try:
            await aiofiles.os.makedirs(directory, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Failed to create directory: {e}", file_path=str(directory), operation="mkdir"
            ) from e
        return Path(directory)

    def open_write(self, path: PathLike):
        """以二进制写模式打开文件，返回 aiofiles 的异步上下文管理器"""
        return aiofiles.open(path, "wb")

    async def write_bytes(self, path: PathLike, data: bytes) -> None:
        try:
            async with self.open_write(path) as f:
                await f.write(data)
        except OSError as e:
            raise StorageError(
                f"Couldn't write {path}: {e}", file_path=str(path), operation="write"
            ) from e

    async def read_bytes(self, path: PathLike) -> bytes:
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise StorageError(
                f"Couldn't read {path}: {e}", file_path=str(path), operation="read"
            ) from e

    async def list_directory(self, directory: PathLike) -> List[str]:
        """列出目录下的条目名"""
        try:
            return await aiofiles.os.listdir(directory)
        except OSError as e:
            raise StorageError(
                f"Failed to read directory: {e}", file_path=str(directory), operation="readdir"
            ) from e

    async def remove_file(self, path: PathLike) -> None:
        try:
            await aiofiles.os.remove(path)
        except OSError as e:
            raise StorageError(
                f"Failed to remove file: {e}", file_path=str(path), operation="unlink"
            ) from e

    async def remove_directory(self, directory: PathLike) -> None:
        try:
            await aiofiles.os.rmdir(directory)
        except OSError as e:
            raise StorageError(
                f"Failed to remove directory: {e}", file_path=str(directory), operation="rmdir"
            ) from e

    async def remove_dir_and_contents(self, directory: PathLike) -> None:
        """删除目录下的所有文件，然后删除这个空目录

        不处理子目录；目录在执行期间被外部修改时结果不确定。
        """
        entries = await self.list_directory(directory)
        await asyncio.gather(
            *(self.remove_file(os.path.join(directory, entry)) for entry in entries)
        )
        await self.remove_directory(directory)

    async def md5sum(self, path: PathLike) -> str:
        """计算文件的MD5，返回十六进制字符串"""
        md5 = hashlib.md5()
        try:
            async with aiofiles.open(path, "rb") as f:
                chunk = await f.read(self.chunk_size)
                while chunk:
                    md5.update(chunk)
                    chunk = await f.read(self.chunk_size)
        except OSError as e:
            raise StorageError(
                f"Couldn't read {path}: {e}", file_path=str(path), operation="md5sum"
            ) from e
        return md5.hexdigest()
