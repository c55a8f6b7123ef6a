#!/usr/bin/env python3
"""
集成 Profile 注册表

每个集成 (通用调用方 / 固定的已知站点) 对应一份 YAML 数据:
    - descriptor: 指纹描述符模板 (条目顺序即序列化顺序)
    - request: 请求变体参数 (base_url、public_key、site、固定表单字段)

新增集成只需新增 YAML 文件，不需要新增代码。
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

import yaml

from ..exceptions import ConfigError, ProfileNotFound

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://client-api.arkoselabs.com"
DEFAULT_ENFORCEMENT_VERSION = "1.4.3"

# 模板中 derive 字段支持的派生来源
DERIVE_SOURCES = (
    "timestamp_b64",  # base64(十进制 unix 秒)
    "user_agent",
    "referer",
    "location",
    "site",
    "base_url",
)

BUILTIN_PROFILE_DIR = Path(__file__).parent / "data"


@dataclass
class RequestVariant:
    """请求变体参数"""

    base_url: str = DEFAULT_BASE_URL
    public_key: Optional[str] = None
    site: Optional[str] = None
    user_agent: Optional[str] = None
    enforcement_version: str = DEFAULT_ENFORCEMENT_VERSION
    # 固定的 enforcement 框架页地址；为空时按 enforcement_version 随机生成
    referer: Optional[str] = None
    # 除通用字段外的固定表单字段 (capi_version/capi_mode/style_theme)
    fields: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RequestVariant":
        fields = data.get("fields") or {}
        if not isinstance(fields, dict):
            raise ConfigError("request.fields 必须是映射", details={"fields": fields})
        return cls(
            base_url=str(data.get("base_url") or DEFAULT_BASE_URL).rstrip("/"),
            public_key=data.get("public_key"),
            site=data.get("site"),
            user_agent=data.get("user_agent"),
            enforcement_version=str(data.get("enforcement_version") or DEFAULT_ENFORCEMENT_VERSION),
            referer=data.get("referer"),
            fields={str(k): str(v) for k, v in fields.items()},
        )


@dataclass
class IntegrationProfile:
    """集成 Profile"""

    name: str
    version: int = 1
    description: str = ""
    request: RequestVariant = field(default_factory=RequestVariant)
    descriptor: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_fixed(self) -> bool:
        """固定集成 (自带 public_key) 还是通用集成"""
        return bool(self.request.public_key)

    def reserved_keys(self) -> Set[str]:
        """模板中所有层级的 key，调用方附加条目不得与之冲突"""
        return set(_collect_keys(self.descriptor))

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: str = "<dict>") -> "IntegrationProfile":
        """
        从字典构建 Profile 并校验模板

        Raises:
            ConfigError: 缺少 name、模板结构错误或 derive 来源未知
        """
        if not isinstance(data, dict):
            raise ConfigError("profile 必须是映射", details={"source": source})
        name = data.get("name")
        if not name:
            raise ConfigError("profile 缺少 name", details={"source": source})

        descriptor = data.get("descriptor") or []
        _validate_template(descriptor, source)

        return cls(
            name=str(name),
            version=int(data.get("version", 1)),
            description=str(data.get("description", "")),
            request=RequestVariant.from_dict(data.get("request") or {}),
            descriptor=descriptor,
        )


def _collect_keys(template: List[Dict[str, Any]]) -> List[str]:
    keys: List[str] = []
    for item in template:
        keys.append(item["key"])
        if _is_nested(item):
            keys.extend(_collect_keys(item["value"]))
    return keys


def _is_nested(item: Dict[str, Any]) -> bool:
    value = item.get("value")
    return (
        isinstance(value, list)
        and len(value) > 0
        and all(isinstance(v, dict) and "key" in v for v in value)
    )


def _validate_template(template: Any, source: str) -> None:
    if not isinstance(template, list):
        raise ConfigError("descriptor 模板必须是列表", details={"source": source})

    seen: Set[str] = set()
    for item in template:
        if not isinstance(item, dict) or "key" not in item:
            raise ConfigError("descriptor 条目缺少 key", details={"source": source, "entry": item})
        key = item["key"]
        if key in seen:
            raise ConfigError("descriptor 条目重复", details={"source": source, "key": key})
        seen.add(key)

        if "derive" in item:
            if "value" in item:
                raise ConfigError(
                    "条目不能同时指定 value 和 derive", details={"source": source, "key": key}
                )
            if item["derive"] not in DERIVE_SOURCES:
                raise ConfigError(
                    "未知的 derive 来源",
                    details={"source": source, "key": key, "derive": item["derive"]},
                )
        elif _is_nested(item):
            _validate_template(item["value"], source)


class ProfileRegistry:
    """
    Profile 注册表

    Usage:
        registry = ProfileRegistry.default()
        profile = registry.get("generic")

        registry.load_directory("/etc/funcaptcha/profiles")
    """

    def __init__(self):
        self._profiles: Dict[str, IntegrationProfile] = {}

    def register(self, profile: IntegrationProfile) -> None:
        if profile.name in self._profiles:
            logger.debug("覆盖已注册的 profile: %s", profile.name)
        self._profiles[profile.name] = profile

    def get(self, name: str) -> IntegrationProfile:
        try:
            return self._profiles[name]
        except KeyError:
            raise ProfileNotFound(profile=name, details={"available": self.names()}) from None

    def names(self) -> List[str]:
        return sorted(self._profiles)

    def __contains__(self, name: object) -> bool:
        return name in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)

    def load_file(self, path: Union[str, Path]) -> IntegrationProfile:
        """加载单个 YAML profile 文件"""
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigError("profile 文件不存在", details={"path": str(path)}, cause=e)
        except yaml.YAMLError as e:
            raise ConfigError("profile 文件格式错误", details={"path": str(path)}, cause=e)

        profile = IntegrationProfile.from_dict(data, source=str(path))
        self.register(profile)
        logger.debug("加载 profile %s v%d (%s)", profile.name, profile.version, path)
        return profile

    def load_directory(self, directory: Union[str, Path]) -> List[IntegrationProfile]:
        """加载目录下的所有 *.yaml / *.yml 文件"""
        directory = Path(directory)
        if not directory.is_dir():
            raise ConfigError("profile 目录不存在", details={"path": str(directory)})

        loaded = []
        for path in sorted(directory.iterdir()):
            if path.suffix in (".yaml", ".yml"):
                loaded.append(self.load_file(path))
        return loaded

    @classmethod
    def default(cls) -> "ProfileRegistry":
        """内置 profile 注册表 (generic + 已知固定集成)"""
        registry = cls()
        registry.load_directory(BUILTIN_PROFILE_DIR)
        return registry


__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_ENFORCEMENT_VERSION",
    "DERIVE_SOURCES",
    "BUILTIN_PROFILE_DIR",
    "RequestVariant",
    "IntegrationProfile",
    "ProfileRegistry",
]
