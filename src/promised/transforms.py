"""响应转换模块

每个转换只消费一次 aiohttp 响应流并在结束时释放连接：
拼接为文本/字节、解析 JSON/XML/M3U8、gzip 解压、写入文件、HLS 变体选择。
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Union

import aiofiles
import aiohttp
import m3u8
from yarl import URL

from .codecs import Capabilities, decode_json, decompress_gzip, default_capabilities
from .core.network_client import HTTPClient, _sanitize_url_for_logging
from .exceptions import CodecError, StatusError, StorageError, TransportError
from .models import HlsMode

DEFAULT_CHUNK_SIZE = 8192

Transform = Callable[[aiohttp.ClientResponse], Awaitable[Any]]
Tracker = Callable[[int, int], None]


def _transport_error(response: aiohttp.ClientResponse, error: BaseException) -> TransportError:
    return TransportError(
        f"Response stream interrupted: {error!r}",
        url=_sanitize_url_for_logging(response.url),
    )


async def to_buffer(response: aiohttp.ClientResponse) -> bytes:
    """读取全部响应块并拼接为 bytes"""
    chunks = []
    try:
        async for chunk in response.content.iter_chunked(DEFAULT_CHUNK_SIZE):
            chunks.append(chunk)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise _transport_error(response, e) from e
    finally:
        response.release()
    return b"".join(chunks)


async def to_text(response: aiohttp.ClientResponse) -> str:
    """读取全部响应块并解码为 str，默认 UTF-8"""
    data = await to_buffer(response)
    encoding = response.charset or "utf-8"
    try:
        return data.decode(encoding)
    except (UnicodeDecodeError, LookupError) as e:
        raise CodecError(f"Cannot decode response body as {encoding}: {e}", codec="text") from e


async def to_json(response: aiohttp.ClientResponse) -> Any:
    return decode_json(await to_text(response))


def parse_xml(text: str, capabilities: Optional[Capabilities] = None) -> Any:
    """用注入的 XML 解析器解析文本"""
    parser = (capabilities or default_capabilities).require("xml_parser")
    return parser(text)


async def to_xml(
    response: aiohttp.ClientResponse, capabilities: Optional[Capabilities] = None
) -> Any:
    return parse_xml(await to_text(response), capabilities)


async def to_headers(response: aiohttp.ClientResponse) -> Mapping[str, str]:
    """只返回响应头，不读取响应体"""
    headers = response.headers
    response.release()
    return headers


async def gunzip(response: aiohttp.ClientResponse) -> bytes:
    return decompress_gzip(await to_buffer(response))


async def to_playlist(
    response: aiohttp.ClientResponse, capabilities: Optional[Capabilities] = None
) -> m3u8.M3U8:
    """解析 M3U8 播放列表，相对地址以响应URL为基准"""
    parser = (capabilities or default_capabilities).require("playlist_parser")
    if response.status != 200:
        response.close()
        raise StatusError(
            f"Couldn't get m3u8 playlist : {response.status}",
            status_code=response.status,
            url=_sanitize_url_for_logging(response.url),
        )
    text = await to_text(response)
    return parser(text, str(response.url))


def pipe_to_file(
    path: Union[str, Path],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress: Optional[Tracker] = None,
) -> Transform:
    """创建把响应流写入 path 的转换

    Args:
        path: 目标文件路径
        chunk_size: 读取块大小
        progress: 可选的进度跟踪函数 track(downloaded, total)

    Returns:
        转换函数，成功时返回 path
    """

    async def transform(response: aiohttp.ClientResponse) -> str:
        if response.status != 200:
            # 关闭底层连接，不再读取响应体
            response.close()
            raise StatusError(
                f"Couldn't get file '{path}' statusCode : {response.status}",
                status_code=response.status,
                url=_sanitize_url_for_logging(response.url),
            )

        total = response.content_length or 0
        downloaded = 0
        try:
            async with aiofiles.open(path, "wb") as f:
                async for chunk in response.content.iter_chunked(chunk_size):
                    await f.write(chunk)
                    downloaded += len(chunk)
                    if progress is not None:
                        progress(downloaded, total)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise _transport_error(response, e) from e
        except OSError as e:
            response.close()
            raise StorageError(
                f"Couldn't write {path}: {e}", file_path=str(path), operation="write"
            ) from e
        finally:
            response.release()

        return str(path)

    return transform


@dataclass
class HlsStream:
    """主播放列表中的一个变体流"""

    uri: str
    bandwidth: int
    variant: Any
    media: Optional[m3u8.M3U8] = None

    @property
    def segments(self) -> List[Any]:
        """媒体分片列表，未拉取时为空"""
        if self.media is None:
            return []
        return list(self.media.segments)


def _coerce_mode(mode: Union[HlsMode, str, None]) -> HlsMode:
    if isinstance(mode, HlsMode):
        return mode
    try:
        return HlsMode(str(mode).upper())
    except ValueError:
        return HlsMode.BEST


def hls(
    mode: Union[HlsMode, str, None] = HlsMode.BEST,
    base_url: Union[str, URL, None] = None,
    *,
    client: HTTPClient,
    capabilities: Optional[Capabilities] = None,
) -> Transform:
    """创建 HLS 变体选择转换

    变体按带宽升序排列后按 mode 选择：
    STREAMS 只返回变体列表；FULL/ALL 全部；WORST 最低带宽；BEST(默认) 最高带宽。
    选中的变体按顺序逐个拉取各自的媒体播放列表，同一时刻只有一个请求。

    Args:
        mode: 选择模式，未知值按 BEST 处理
        base_url: 解析变体相对地址的基准URL，默认为主播放列表的URL
        client: 用于拉取媒体播放列表的HTTP客户端
        capabilities: 播放列表解析能力
    """
    selected_mode = _coerce_mode(mode)

    async def transform(response: aiohttp.ClientResponse) -> List[HlsStream]:
        master = await to_playlist(response, capabilities)
        base = URL(str(base_url)) if base_url else response.url

        streams = [
            HlsStream(
                uri=playlist.uri,
                bandwidth=int(playlist.stream_info.bandwidth or 0),
                variant=playlist,
            )
            for playlist in master.playlists
        ]
        streams.sort(key=lambda stream: stream.bandwidth)

        if selected_mode is HlsMode.STREAMS:
            return streams
        if selected_mode in (HlsMode.FULL, HlsMode.ALL):
            selected = streams
        elif selected_mode is HlsMode.WORST:
            selected = streams[:1]
        else:
            selected = streams[-1:]

        for stream in selected:
            stream_url = base.join(URL(stream.uri))
            media_response = await client.get(stream_url)
            stream.media = await to_playlist(media_response, capabilities)

        return selected

    return transform
