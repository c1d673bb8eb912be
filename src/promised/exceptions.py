"""异常定义模块

定义工具包专用的异常类，覆盖传输、状态码、存储、编解码等错误类型
"""

from typing import Any, Dict, Optional


class PromisedError(Exception):
    """promised 基础异常类"""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def _context_part(self) -> Optional[str]:
        if not self.context:
            return None
        context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"Context: {context_str}"

    def __str__(self) -> str:
        context_part = self._context_part()
        if context_part:
            return f"{self.message} ({context_part})"
        return self.message


class ValidationError(PromisedError):
    """参数验证异常"""

    pass


class ConfigurationError(PromisedError):
    """配置异常"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.config_key = config_key

    def __str__(self) -> str:
        parts = [self.message]
        if self.config_key:
            parts.append(f"Key: {self.config_key}")
        context_part = self._context_part()
        if context_part:
            parts.append(context_part)
        return " | ".join(parts)


class CapabilityNotConfiguredError(ConfigurationError):
    """未配置的编解码能力（播放列表解析器、XML解析器等）"""

    def __init__(self, capability: str):
        super().__init__(
            f"Capability '{capability}' is not configured", config_key=capability
        )
        self.capability = capability


class NetworkError(PromisedError):
    """网络请求异常基类"""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.url = url
        self.status_code = status_code

    def __str__(self) -> str:
        parts = [self.message]
        if self.url:
            parts.append(f"URL: {self.url}")
        if self.status_code:
            parts.append(f"Status: {self.status_code}")
        context_part = self._context_part()
        if context_part:
            parts.append(context_part)
        return " | ".join(parts)


class TransportError(NetworkError):
    """连接层错误 - DNS解析失败、连接被拒绝、连接重置等"""

    pass


class StatusError(NetworkError):
    """非2xx的HTTP状态码"""

    def __init__(
        self,
        message: str,
        status_code: int,
        url: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, url=url, status_code=status_code, context=context)


class StorageError(PromisedError):
    """文件系统操作异常"""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.file_path = file_path
        self.operation = operation

    def __str__(self) -> str:
        parts = [self.message]
        if self.operation:
            parts.append(f"Operation: {self.operation}")
        if self.file_path:
            parts.append(f"File: {self.file_path}")
        context_part = self._context_part()
        if context_part:
            parts.append(context_part)
        return " | ".join(parts)


class CodecError(PromisedError):
    """JSON/XML/gzip/M3U8 解码异常"""

    def __init__(
        self,
        message: str,
        codec: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.codec = codec

    def __str__(self) -> str:
        parts = [self.message]
        if self.codec:
            parts.append(f"Codec: {self.codec}")
        context_part = self._context_part()
        if context_part:
            parts.append(context_part)
        return " | ".join(parts)
