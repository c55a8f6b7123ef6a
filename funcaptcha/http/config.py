"""
HTTP 传输配置

提供超时、代理、连接池等设置
支持从环境变量和字典加载
"""

import copy
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from ..exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64; rv:114.0) Gecko/20100101 Firefox/114.0"


@dataclass
class ProxyConfig:
    """代理配置"""

    http_proxy: Optional[str] = None
    https_proxy: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ProxyConfig":
        """从环境变量加载代理配置"""
        shared = os.environ.get("FUNCAPTCHA_PROXY")
        return cls(
            http_proxy=shared or os.environ.get("HTTP_PROXY") or os.environ.get("http_proxy"),
            https_proxy=shared or os.environ.get("HTTPS_PROXY") or os.environ.get("https_proxy"),
        )

    def to_dict(self) -> Dict[str, str]:
        """转换为 requests 代理配置格式"""
        proxies: Dict[str, str] = {}
        if self.http_proxy:
            proxies["http"] = self.http_proxy
        if self.https_proxy:
            proxies["https"] = self.https_proxy
        return proxies


@dataclass
class PoolConfig:
    """连接池配置"""

    pool_connections: int = 10  # 缓存的主机连接池数量
    pool_maxsize: int = 20  # 单个主机的最大连接数


@dataclass
class HTTPConfig:
    """HTTP 传输统一配置"""

    # 超时配置 (秒)，必须有界，避免验证端无响应时无限挂起
    connect_timeout: float = 10.0
    read_timeout: float = 30.0

    verify_ssl: bool = True

    # 验证端的 302 视为非 2xx 响应，不跟随
    follow_redirects: bool = False

    default_headers: Dict[str, str] = field(
        default_factory=lambda: {
            "User-Agent": DEFAULT_USER_AGENT,
            "Accept": "*/*",
            "Accept-Encoding": "gzip, deflate",
            "Connection": "keep-alive",
        }
    )

    proxy: ProxyConfig = field(default_factory=ProxyConfig)
    pool: PoolConfig = field(default_factory=PoolConfig)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        校验配置

        Raises:
            ConfigError: 超时不是正数
        """
        for name in ("connect_timeout", "read_timeout"):
            value = getattr(self, name)
            if value is None or value <= 0:
                raise ConfigError("超时必须是正数", details={name: value})

    @property
    def timeout(self) -> Tuple[float, float]:
        """requests 使用的 (connect, read) 超时元组"""
        return (self.connect_timeout, self.read_timeout)

    @property
    def user_agent(self) -> str:
        return self.default_headers.get("User-Agent", DEFAULT_USER_AGENT)

    def set_user_agent(self, user_agent: str) -> None:
        """设置 User-Agent"""
        self.default_headers["User-Agent"] = user_agent

    def set_proxy(self, proxy: str) -> None:
        """
        设置统一代理

        Args:
            proxy: 代理地址 (如 http://127.0.0.1:8080 或 socks5://127.0.0.1:1080)
        """
        self.proxy.http_proxy = proxy
        self.proxy.https_proxy = proxy

    @classmethod
    def from_env(cls) -> "HTTPConfig":
        """
        从环境变量加载配置

        支持的环境变量:
        - FUNCAPTCHA_TIMEOUT: 同时设置连接和读取超时
        - FUNCAPTCHA_CONNECT_TIMEOUT: 连接超时
        - FUNCAPTCHA_READ_TIMEOUT: 读取超时
        - FUNCAPTCHA_VERIFY_SSL: 是否验证 SSL (true/false)
        - FUNCAPTCHA_USER_AGENT: 默认 User-Agent
        - FUNCAPTCHA_PROXY / HTTP_PROXY / HTTPS_PROXY: 代理配置
        """
        config = cls()

        try:
            if timeout := os.environ.get("FUNCAPTCHA_TIMEOUT"):
                config.connect_timeout = float(timeout)
                config.read_timeout = float(timeout)
            if connect_timeout := os.environ.get("FUNCAPTCHA_CONNECT_TIMEOUT"):
                config.connect_timeout = float(connect_timeout)
            if read_timeout := os.environ.get("FUNCAPTCHA_READ_TIMEOUT"):
                config.read_timeout = float(read_timeout)
        except ValueError as e:
            raise ConfigError("超时环境变量不是数字", cause=e)

        if verify_ssl := os.environ.get("FUNCAPTCHA_VERIFY_SSL"):
            config.verify_ssl = verify_ssl.lower() in ("true", "1", "yes")

        if user_agent := os.environ.get("FUNCAPTCHA_USER_AGENT"):
            config.set_user_agent(user_agent)

        config.proxy = ProxyConfig.from_env()
        config.validate()

        logger.debug(
            "从环境变量加载 HTTP 配置: timeout=%s, verify_ssl=%s",
            config.timeout,
            config.verify_ssl,
        )
        return config

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HTTPConfig":
        """
        从字典加载配置

        Args:
            data: 配置字典

        Returns:
            HTTPConfig 实例
        """
        config = cls()

        try:
            if "timeout" in data:
                config.connect_timeout = float(data["timeout"])
                config.read_timeout = float(data["timeout"])
            if "connect_timeout" in data:
                config.connect_timeout = float(data["connect_timeout"])
            if "read_timeout" in data:
                config.read_timeout = float(data["read_timeout"])
        except (TypeError, ValueError) as e:
            raise ConfigError("超时配置不是数字", cause=e)

        if "verify_ssl" in data:
            config.verify_ssl = bool(data["verify_ssl"])
        if "follow_redirects" in data:
            config.follow_redirects = bool(data["follow_redirects"])

        if "headers" in data:
            config.default_headers.update(data["headers"])
        if "user_agent" in data:
            config.set_user_agent(data["user_agent"])

        if "proxy" in data:
            proxy_data = data["proxy"]
            if isinstance(proxy_data, str):
                config.set_proxy(proxy_data)
            elif isinstance(proxy_data, dict):
                config.proxy.http_proxy = proxy_data.get("http")
                config.proxy.https_proxy = proxy_data.get("https")

        if "pool" in data:
            pool_data = data["pool"]
            if "pool_connections" in pool_data:
                config.pool.pool_connections = int(pool_data["pool_connections"])
            if "pool_maxsize" in pool_data:
                config.pool.pool_maxsize = int(pool_data["pool_maxsize"])

        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        """导出为字典"""
        return {
            "connect_timeout": self.connect_timeout,
            "read_timeout": self.read_timeout,
            "verify_ssl": self.verify_ssl,
            "follow_redirects": self.follow_redirects,
            "headers": self.default_headers.copy(),
            "proxy": {
                "http": self.proxy.http_proxy,
                "https": self.proxy.https_proxy,
            },
            "pool": {
                "pool_connections": self.pool.pool_connections,
                "pool_maxsize": self.pool.pool_maxsize,
            },
        }

    def copy(self) -> "HTTPConfig":
        """创建配置副本"""
        return copy.deepcopy(self)


__all__ = [
    "DEFAULT_USER_AGENT",
    "HTTPConfig",
    "ProxyConfig",
    "PoolConfig",
]
