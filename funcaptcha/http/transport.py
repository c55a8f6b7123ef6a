"""
共享 HTTP 传输

TransportClient 持有一个 requests.Session (连接池 + Cookie)，由调用方创建一次并显式传入
各个操作。requests.Session 未声明线程安全，因此所有请求通过互斥锁串行发送。

使用示例:
    from funcaptcha.http import HTTPConfig, TransportClient

    with TransportClient(HTTPConfig.from_env()) as transport:
        response = transport.send("POST", url, headers=headers, body=body)
"""

import logging
import threading
import time
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter

from ..exceptions import ConnectionError, ProxyError, SSLError, TimeoutError, TransportError
from .config import HTTPConfig

logger = logging.getLogger(__name__)


class TransportClient:
    """进程级共享的 HTTP 传输客户端"""

    def __init__(
        self,
        config: Optional[HTTPConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        初始化传输客户端

        Args:
            config: HTTP 配置，默认 HTTPConfig()
            session: 预先创建的 requests.Session (测试时注入)
        """
        self.config = config or HTTPConfig()
        self._session = session or self._create_session(self.config)
        self._lock = threading.Lock()
        self._created_at = time.time()
        self._request_count = 0

    @staticmethod
    def _create_session(config: HTTPConfig) -> requests.Session:
        """创建 Session，不挂载重试策略"""
        session = requests.Session()
        session.verify = config.verify_ssl

        adapter = HTTPAdapter(
            pool_connections=config.pool.pool_connections,
            pool_maxsize=config.pool.pool_maxsize,
            max_retries=0,
        )
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update(config.default_headers)
        session.proxies.update(config.proxy.to_dict())
        return session

    @property
    def cookies(self) -> requests.cookies.RequestsCookieJar:
        return self._session.cookies

    def send(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[str] = None,
        proxy: Optional[str] = None,
    ) -> requests.Response:
        """
        发送请求

        Args:
            method: HTTP 方法
            url: 完整 URL
            headers: 请求头
            body: 已编码的请求体
            proxy: 本次请求使用的代理，覆盖配置中的代理

        Returns:
            requests.Response (已读取完整响应体)

        Raises:
            TransportError: 连接、超时、代理、TLS 错误
        """
        proxies = {"http": proxy, "https": proxy} if proxy else None
        data = body.encode("utf-8") if body is not None else None

        with self._lock:
            start = time.time()
            try:
                response = self._session.request(
                    method,
                    url,
                    headers=headers,
                    data=data,
                    timeout=self.config.timeout,
                    allow_redirects=self.config.follow_redirects,
                    proxies=proxies,
                )
            except requests.exceptions.ProxyError as e:
                raise ProxyError(url=url, proxy=proxy, cause=e)
            except requests.exceptions.SSLError as e:
                raise SSLError(url=url, cause=e)
            except requests.exceptions.Timeout as e:
                raise TimeoutError(url=url, timeout=self.config.timeout, cause=e)
            except requests.exceptions.ConnectionError as e:
                raise ConnectionError(url=url, cause=e)
            except requests.exceptions.RequestException as e:
                raise TransportError(f"请求失败: {e}", url=url, cause=e)
            self._request_count += 1

        logger.debug(
            "%s %s -> %d (%.2fs)", method, url, response.status_code, time.time() - start
        )
        return response

    def close(self) -> None:
        """关闭连接池"""
        self._session.close()

    def __enter__(self) -> "TransportClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def get_stats(self) -> Dict[str, Any]:
        """获取传输统计信息"""
        return {
            "created_at": self._created_at,
            "request_count": self._request_count,
            "cookie_count": len(self._session.cookies),
            "uptime": time.time() - self._created_at,
        }

    def __repr__(self) -> str:
        return (
            f"TransportClient(requests={self._request_count}, "
            f"cookies={len(self._session.cookies)})"
        )


__all__ = ["TransportClient"]
