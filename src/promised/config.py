"""配置管理模块

从环境变量、.env 文件加载配置，组件之间通过 Config 对象显式传递
"""

import os
from typing import Any, Dict, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .models import Config


class Settings(BaseSettings):
    """应用设置类，继承自 Pydantic BaseSettings"""

    # 网络配置
    promised_timeout: Optional[float] = None
    promised_chunk_size: int = 8192
    promised_user_agent: str = "promised/1.0"
    promised_ssl_verify: bool = True

    # 下载设置
    promised_max_parallel_downloads: int = 3
    promised_download_max_attempts: int = 10
    promised_download_retry_delay: float = 0.0

    # 约定俗成的代理环境变量 (http_proxy / HTTP_PROXY)
    http_proxy: Optional[str] = None

    def to_config(self) -> Config:
        """转换为 Config 模型"""
        return Config(
            timeout=self.promised_timeout,
            chunk_size=self.promised_chunk_size,
            user_agent=self.promised_user_agent,
            ssl_verify=self.promised_ssl_verify,
            max_parallel_downloads=self.promised_max_parallel_downloads,
            download_max_attempts=self.promised_download_max_attempts,
            download_retry_delay=self.promised_download_retry_delay,
            proxy=self.http_proxy or None,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class ConfigManager:
    """配置管理器"""

    def __init__(self):
        self._config: Optional[Config] = None

    def get_config(self) -> Config:
        """获取配置，优先环境变量，然后使用默认值"""
        if self._config is not None:
            return self._config

        try:
            self._config = Settings().to_config()
        except Exception as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e
        return self._config

    def reset(self) -> None:
        """丢弃缓存的配置，下次获取时重新读取环境变量"""
        self._config = None


# 全局配置管理器实例
config_manager = ConfigManager()


def get_config() -> Config:
    """获取全局配置"""
    return config_manager.get_config()


def reset_config() -> None:
    """重置全局配置"""
    config_manager.reset()


def check_environment() -> Dict[str, Any]:
    """列出与本工具包相关的环境变量"""
    env_vars = {}

    for key in os.environ:
        if key.upper().startswith("PROMISED_") or key in ("http_proxy", "HTTP_PROXY"):
            env_vars[key] = os.environ[key]

    return env_vars
