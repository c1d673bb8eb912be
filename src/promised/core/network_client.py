"""网络客户端模块

负责HTTP请求的发送：会话管理、代理、请求体编码，以及把
aiohttp 的错误和非2xx状态码转换为工具包自己的异常。
"""

import asyncio
import json
import ssl
import urllib.parse
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional, Union

import aiofiles
import aiohttp
from yarl import URL

from ..exceptions import StatusError, TransportError
from ..models import Config

UrlLike = Union[str, URL]


def _sanitize_url_for_logging(url: UrlLike) -> str:
    """清理URL中的敏感信息用于日志记录

    Args:
        url: 原始URL

    Returns:
        清理后的URL，隐藏查询参数和敏感信息
    """
    try:
        parsed = urllib.parse.urlparse(str(url))
        sanitized = f"{parsed.scheme}://{parsed.hostname}{parsed.path}"
        return sanitized
    except Exception:
        return "[URL]"


async def _file_sender(path: Path, chunk_size: int) -> AsyncIterator[bytes]:
    """按块读取文件作为请求体"""
    async with aiofiles.open(path, "rb") as f:
        chunk = await f.read(chunk_size)
        while chunk:
            yield chunk
            chunk = await f.read(chunk_size)


class HTTPClient:
    """HTTP客户端

    负责创建和管理HTTP会话，包括:
    - SSL验证配置
    - 上游代理
    - 请求体编码 (dict/list -> JSON, str/bytes 原样, Path 流式上传)
    - 错误分类 (TransportError / StatusError)
    """

    def __init__(self, config: Config):
        """初始化HTTP客户端

        Args:
            config: 配置对象
        """
        self.config = config
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "HTTPClient":
        """异步上下文管理器入口"""
        await self._create_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """异步上下文管理器退出"""
        await self.close()

    async def _create_session(self) -> None:
        """创建HTTP会话"""
        if self._session is not None:
            return

        self._session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(ssl=self._create_ssl_context()),
            timeout=aiohttp.ClientTimeout(total=self.config.timeout),
            headers={"User-Agent": self.config.user_agent},
            auto_decompress=True,
            raise_for_status=False,
        )

    def _create_ssl_context(self) -> Union[ssl.SSLContext, bool]:
        """创建SSL上下文配置

        Returns:
            ssl.SSLContext: 默认的SSL上下文（当ssl_verify=True时）
            False: 禁用SSL验证
        """
        if not self.config.ssl_verify:
            return False
        return ssl.create_default_context()

    async def close(self) -> None:
        """关闭HTTP会话"""
        if self._session:
            await self._session.close()
            self._session = None

    def _encode_body(self, data: Any, headers: Dict[str, str]) -> Any:
        """根据数据类型编码请求体"""
        if data is None:
            return None
        if isinstance(data, (dict, list)):
            headers.setdefault("Content-Type", "application/json")
            return json.dumps(data)
        if isinstance(data, (str, bytes)):
            return data
        if isinstance(data, Path):
            return _file_sender(data, self.config.chunk_size)
        return data

    async def request(
        self,
        method: str,
        url: UrlLike,
        data: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> aiohttp.ClientResponse:
        """发送HTTP请求

        返回的响应尚未读取，由调用方（通常是 transforms 中的某个转换）负责消费并释放。

        Args:
            method: HTTP方法
            url: 请求URL
            data: 可选请求体
            headers: 额外的请求头

        Returns:
            HTTP响应对象

        Raises:
            TransportError: 连接层错误
            StatusError: 非2xx状态码
        """
        if self._session is None:
            await self._create_session()

        request_headers = dict(headers or {})
        body = self._encode_body(data, request_headers)

        try:
            response = await self._session.request(
                method,
                url,
                data=body,
                headers=request_headers,
                proxy=self.config.proxy,
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(
                f"{method} request failed: {e!r}",
                url=_sanitize_url_for_logging(url),
            ) from e

        if response.status < 200 or response.status >= 300:
            response.release()
            raise StatusError(
                f"{response.status} - {response.reason} : {_sanitize_url_for_logging(url)}",
                status_code=response.status,
                url=_sanitize_url_for_logging(url),
            )

        return response

    async def get(self, url: UrlLike, headers: Optional[Dict[str, str]] = None) -> aiohttp.ClientResponse:
        return await self.request("GET", url, headers=headers)

    async def head(self, url: UrlLike, headers: Optional[Dict[str, str]] = None) -> aiohttp.ClientResponse:
        return await self.request("HEAD", url, headers=headers)

    async def post(
        self, url: UrlLike, data: Any = None, headers: Optional[Dict[str, str]] = None
    ) -> aiohttp.ClientResponse:
        return await self.request("POST", url, data=data, headers=headers)

    async def put(
        self, url: UrlLike, data: Any = None, headers: Optional[Dict[str, str]] = None
    ) -> aiohttp.ClientResponse:
        return await self.request("PUT", url, data=data, headers=headers)
