"""编解码能力模块

JSON、gzip 使用标准库；XML 使用 xmltodict，M3U8 使用 m3u8。
XML 和 M3U8 解析器通过 Capabilities 注入，置为 None 的能力在调用时
抛出 CapabilityNotConfiguredError。
"""

import gzip
import json
import zlib
from dataclasses import dataclass
from typing import Any, Callable, Optional
from xml.parsers.expat import ExpatError

import m3u8
import xmltodict
from m3u8.parser import ParseError as PlaylistParseError

from .exceptions import CapabilityNotConfiguredError, CodecError


def decode_json(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError as e:
        raise CodecError(f"Invalid JSON document: {e}", codec="json") from e


def decompress_gzip(data: bytes) -> bytes:
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise CodecError(f"Invalid gzip data: {e}", codec="gzip") from e


def _normalize_xml(path: Any, key: str, value: Any):
    """标签名转小写，文本去掉首尾空白并合并连续空白"""
    if isinstance(value, str):
        value = " ".join(value.split())
    return key.lower(), value


def parse_xml_document(text: str) -> Any:
    """把XML文本解析为字典

    单个子元素不会被包装成列表，多个同名子元素才会得到列表。
    """
    try:
        return xmltodict.parse(text, postprocessor=_normalize_xml)
    except ExpatError as e:
        raise CodecError(f"Invalid XML document: {e}", codec="xml") from e


def parse_playlist(text: str, base_uri: Optional[str] = None) -> m3u8.M3U8:
    """解析M3U8播放列表"""
    try:
        return m3u8.loads(text, uri=base_uri)
    except (PlaylistParseError, ValueError) as e:
        raise CodecError(f"Invalid M3U8 playlist: {e}", codec="m3u8") from e


@dataclass
class Capabilities:
    """可注入的解析能力

    使用示例:
    ```python
    capabilities = Capabilities(xml_parser=None)
    capabilities.require("xml_parser")  # 抛出 CapabilityNotConfiguredError
    ```
    """

    playlist_parser: Optional[Callable[..., Any]] = parse_playlist
    xml_parser: Optional[Callable[[str], Any]] = parse_xml_document

    def require(self, name: str) -> Callable[..., Any]:
        """获取已配置的能力"""
        parser = getattr(self, name, None)
        if parser is None:
            raise CapabilityNotConfiguredError(name)
        return parser


default_capabilities = Capabilities()
