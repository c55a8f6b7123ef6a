"""
Pytest 配置文件

为测试设置 Python 路径，确保能正确导入项目模块
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

# 添加项目根目录到 Python 路径
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest
import requests

# 固定时间点: 2023-11-14 22:13:20 UTC，所在窗口起点 1699984800
FIXED_NOW = 1700000000.0


# ==================== Fixtures ====================


@pytest.fixture
def fixed_clock():
    """返回固定 unix 时间的时钟"""
    return lambda: FIXED_NOW


@pytest.fixture
def registry():
    """内置 profile 注册表"""
    from funcaptcha.profiles import ProfileRegistry

    return ProfileRegistry.default()


@pytest.fixture
def generic_profile(registry):
    return registry.get("generic")


@pytest.fixture
def openai_profile(registry):
    return registry.get("openai")


@pytest.fixture
def fixed_salt() -> bytes:
    return bytes.fromhex("0102030405060708")


@pytest.fixture
def mock_http_response():
    """提供模拟 requests.Response 工厂"""

    def _make(
        status_code: int = 200,
        text: Optional[str] = None,
        json_data: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> MagicMock:
        response = MagicMock(spec=requests.Response)
        response.status_code = status_code
        if text is None:
            text = json.dumps(json_data) if json_data is not None else ""
        response.text = text
        response.content = text.encode("utf-8")
        response.headers = headers or {"Content-Type": "application/json"}
        return response

    return _make


@pytest.fixture
def mock_session(mock_http_response):
    """提供模拟 requests.Session，默认返回一个合法的 token 响应"""
    session = MagicMock(spec=requests.Session)
    session.cookies = requests.cookies.RequestsCookieJar()
    session.request.return_value = mock_http_response(
        json_data={
            "token": "5016a3b2c1d0e9f8.1234567|r=us-east-1|meta=3|pk=TESTKEY",
            "challenge_url": "",
            "challenge_url_cdn": "https://client-api.arkoselabs.com/cdn/fc/assets/ec-game-core/bootstrap.js",
            "noscript": "Disable",
            "disable_default_styling": False,
            "iframe_height": None,
            "iframe_width": None,
            "kbio": False,
            "mbio": False,
            "tbio": False,
        }
    )
    return session


@pytest.fixture
def transport(mock_session):
    """使用模拟 Session 的 TransportClient"""
    from funcaptcha.http import TransportClient

    client = TransportClient(session=mock_session)
    yield client
    client.close()
