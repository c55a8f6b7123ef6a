#!/usr/bin/env python3
"""
请求组装器 - 按集成 profile 参数化

生成 POST <base_url>/fc/gt2/public_key/<public_key> 的请求体和请求头。
通用集成与固定集成共用同一套逻辑，差异全部来自 profile 数据:

    通用字段: bda, public_key, site (为空时整个省略), userbrowser, rnd, data[<key>]
    固定集成额外字段: profile.request.fields (capi_version, capi_mode, style_theme)

表单编码在标准编码之后做两处修正 (验证端对 + 更严格、对括号更宽松):
    "+" -> "%20", "%28" -> "(", "%29" -> ")"
"""

import logging
import random
import re
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote_plus, urlencode, urlparse

from requests.structures import CaseInsensitiveDict

from ..exceptions import RequestConstructionError
from ..profiles import IntegrationProfile
from .config import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

TOKEN_PATH = "/fc/gt2/public_key/"

# 强制覆盖调用方同名请求头
REQUIRED_HEADERS = {
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
    "Content-Type": "application/x-www-form-urlencoded; charset=UTF-8",
    "Sec-Fetch-Mode": "cors",
    "Sec-Fetch-Site": "same-origin",
}

_PUBLIC_KEY_RE = re.compile(r"^[^/?#\s]+$")


@dataclass
class RequestOptions:
    """调用方请求参数"""

    public_key: str = ""
    base_url: Optional[str] = None  # None 时使用 profile 的 base_url
    site: Optional[str] = None
    data: Dict[str, str] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    location: str = ""
    proxy: Optional[str] = None
    profile: str = "generic"
    # 追加到描述符末尾的条目，不得与模板保留键冲突
    extra_entries: Dict[str, Any] = field(default_factory=dict)

    @property
    def user_agent(self) -> Optional[str]:
        return CaseInsensitiveDict(self.headers).get("User-Agent")


@dataclass
class ComposedRequest:
    """组装完成的 HTTP 请求描述"""

    method: str
    url: str
    body: str
    headers: Dict[str, str]
    fields: List[Tuple[str, str]] = field(default_factory=list)
    proxy: Optional[str] = None

    def get_field(self, name: str) -> Optional[str]:
        for key, value in self.fields:
            if key == name:
                return value
        return None


def encode_form(fields: List[Tuple[str, str]]) -> str:
    """
    标准表单编码 (按 key 排序) + 验证端兼容修正

    >>> encode_form([("v", "a b(c)d")])
    'v=a%20b(c)d'
    """
    pairs = sorted(fields, key=lambda kv: kv[0])
    form = urlencode(pairs, quote_via=quote_plus)
    form = form.replace("+", "%20")
    form = form.replace("%28", "(")
    form = form.replace("%29", ")")
    return form


def format_rnd(value: float) -> str:
    """最短往返精度的十进制小数，不使用科学计数法"""
    return format(Decimal(repr(value)), "f")


class RequestComposer:
    """
    请求组装器

    Usage:
        composer = RequestComposer(registry.get("generic"))
        options = composer.resolve(RequestOptions(public_key="...", site="https://example.com"))
        headers = composer.build_headers(options)
        request = composer.compose(options, bda, headers)
    """

    def __init__(
        self,
        profile: IntegrationProfile,
        rng: Any = random,
        default_user_agent: str = DEFAULT_USER_AGENT,
    ):
        """
        Args:
            profile: 集成 profile
            rng: 随机源，需提供 random() 和 getrandbits()；默认 random 模块
            default_user_agent: 调用方和 profile 都未指定 User-Agent 时使用
        """
        self.profile = profile
        self._rng = rng
        self.default_user_agent = default_user_agent

    def resolve(self, options: RequestOptions) -> RequestOptions:
        """
        用 profile 的请求变体参数补全调用方未指定的字段并校验

        Raises:
            RequestConstructionError: base URL 或 public key 不合法
        """
        variant = self.profile.request
        resolved = replace(
            options,
            public_key=options.public_key or variant.public_key or "",
            base_url=(options.base_url or variant.base_url).rstrip("/"),
            site=options.site if options.site is not None else variant.site,
            data=dict(options.data),
            headers=dict(options.headers),
            extra_entries=dict(options.extra_entries),
        )
        self.validate(resolved)
        return resolved

    @staticmethod
    def validate(options: RequestOptions) -> None:
        parsed = urlparse(options.base_url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise RequestConstructionError(
                "base URL 不合法", field="base_url", value=options.base_url
            )
        if not options.public_key or not _PUBLIC_KEY_RE.match(options.public_key):
            raise RequestConstructionError(
                "public key 不合法", field="public_key", value=options.public_key
            )

    def user_agent_for(self, options: RequestOptions) -> str:
        return options.user_agent or self.profile.request.user_agent or self.default_user_agent

    def enforcement_url(self, options: RequestOptions) -> str:
        """enforcement 框架页地址，用作 Referer 和描述符中的 referer"""
        if self.profile.request.referer:
            return self.profile.request.referer
        token = "%032x" % self._rng.getrandbits(128)
        return (
            f"{options.base_url}/v2/{options.public_key}/"
            f"{self.profile.request.enforcement_version}/enforcement.{token}.html"
        )

    def build_headers(self, options: RequestOptions) -> Dict[str, str]:
        """
        合并调用方请求头与必需请求头

        仅在指定了 site 时添加 Origin 和合成的 Referer。
        """
        headers = CaseInsensitiveDict(options.headers)
        headers["User-Agent"] = self.user_agent_for(options)
        for name, value in REQUIRED_HEADERS.items():
            headers[name] = value

        if options.site:
            headers["Origin"] = options.base_url
            headers["Referer"] = self.enforcement_url(options)

        return dict(headers.items())

    def build_fields(
        self, options: RequestOptions, bda: str, user_agent: str
    ) -> List[Tuple[str, str]]:
        fields: List[Tuple[str, str]] = [
            ("bda", bda),
            ("public_key", options.public_key),
        ]
        if options.site:
            fields.append(("site", options.site))
        fields.append(("userbrowser", user_agent))

        for name, value in self.profile.request.fields.items():
            fields.append((name, value))

        fields.append(("rnd", format_rnd(self._rng.random())))

        for key, value in options.data.items():
            fields.append((f"data[{key}]", str(value)))
        return fields

    def compose(
        self,
        options: RequestOptions,
        bda: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> ComposedRequest:
        """
        组装请求

        Args:
            options: resolve() 之后的请求参数
            bda: CipherEngine 生成的 BDA
            headers: build_headers() 的结果；为空时重新生成

        Returns:
            ComposedRequest
        """
        if headers is None:
            headers = self.build_headers(options)
        user_agent = CaseInsensitiveDict(headers).get("User-Agent") or self.user_agent_for(options)

        fields = self.build_fields(options, bda, user_agent)
        request = ComposedRequest(
            method="POST",
            url=f"{options.base_url}{TOKEN_PATH}{options.public_key}",
            body=encode_form(fields),
            headers=headers,
            fields=fields,
            proxy=options.proxy,
        )
        logger.debug(
            "组装请求: profile=%s, url=%s, 字段=%s",
            self.profile.name,
            request.url,
            [name for name, _ in fields],
        )
        return request


__all__ = [
    "TOKEN_PATH",
    "REQUIRED_HEADERS",
    "RequestOptions",
    "ComposedRequest",
    "encode_form",
    "format_rnd",
    "RequestComposer",
]
