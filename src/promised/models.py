"""数据模型定义

使用 Pydantic 进行类型安全的数据验证和模型定义
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HlsMode(str, Enum):
    """HLS 变体流选择模式"""

    STREAMS = "STREAMS"  # 只返回变体流列表，不拉取子播放列表
    FULL = "FULL"
    ALL = "ALL"
    WORST = "WORST"
    BEST = "BEST"


class DownloadItem(BaseModel):
    """批量下载中的单个条目

    下载成功时写入 resolved_filename，失败时写入 error，两者不会同时存在。
    """

    url: str = Field(..., description="下载地址")
    filename: Optional[str] = Field(default=None, description="请求的文件名")
    target_directory: Optional[str] = Field(default=None, description="目标目录")
    index: int = Field(..., ge=0, description="在原始请求中的位置")
    resolved_filename: Optional[str] = Field(default=None, description="实际写入的文件路径")
    error: Optional[Exception] = Field(default=None, description="下载失败的原因")

    @property
    def success(self) -> bool:
        """是否下载成功"""
        return self.error is None and self.resolved_filename is not None

    model_config = ConfigDict(arbitrary_types_allowed=True)


class DownloadProgress(BaseModel):
    """下载进度模型"""

    filename: str = Field(..., description="文件名")
    downloaded: int = Field(default=0, description="已下载字节数")
    total: int = Field(default=0, description="总字节数")

    @property
    def percentage(self) -> float:
        """下载百分比"""
        if self.total > 0:
            return (self.downloaded / self.total) * 100
        return 0.0

    @property
    def is_complete(self) -> bool:
        """是否下载完成"""
        return self.total > 0 and self.downloaded >= self.total

    model_config = ConfigDict(extra="forbid")


class Config(BaseModel):
    """应用配置模型"""

    # 网络配置
    timeout: Optional[float] = Field(default=None, description="请求总超时(秒)，None表示不限制")
    chunk_size: int = Field(default=8192, description="流式读取块大小")
    user_agent: str = Field(default="promised/1.0", description="HTTP用户代理")
    proxy: Optional[str] = Field(default=None, description="上游HTTP代理地址")
    ssl_verify: bool = Field(default=True, description="是否校验SSL证书")

    # 下载设置
    max_parallel_downloads: int = Field(default=3, description="批量下载的并发通道数")
    download_max_attempts: int = Field(default=10, description="单个文件下载失败后的重试次数")
    download_retry_delay: float = Field(default=0.0, description="重试间隔(秒)")

    @field_validator("chunk_size", "max_parallel_downloads")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """验证必须为正数"""
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @field_validator("download_max_attempts", "download_retry_delay")
    @classmethod
    def validate_non_negative(cls, v):
        """验证不能为负数"""
        if v < 0:
            raise ValueError("Value cannot be negative")
        return v

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("timeout must be positive")
        return v

    model_config = ConfigDict(extra="allow")
