#!/usr/bin/env python3
"""
指纹描述符构建器

根据集成 profile 的模板生成描述符。模板中的值都是静态常量
(与真实浏览器脚本在通用环境下输出的值一致)，只有标记了 derive
的条目由调用方输入或时钟填充。

附加条目策略:
    调用方附加条目的 key 若与模板中任意层级的 key 冲突，直接拒绝 (BuildError)，
    不做静默覆盖。不冲突的附加条目按调用方顺序追加在所有固定条目之后。
"""

import base64
import copy
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping

from ..exceptions import BuildError
from ..profiles import IntegrationProfile
from .descriptor import MISSING, FingerprintDescriptor, is_entry_list

logger = logging.getLogger(__name__)


@dataclass
class BuildContext:
    """构建描述符所需的调用方输入"""

    user_agent: str
    referer: str = ""
    location: str = ""
    site: str = ""
    base_url: str = ""
    extra_entries: Mapping[str, Any] = field(default_factory=dict)


class FingerprintBuilder:
    """
    指纹描述符构建器

    Usage:
        builder = FingerprintBuilder(registry.get("generic"))
        descriptor = builder.build(BuildContext(user_agent="Mozilla/5.0 ..."))
    """

    def __init__(
        self,
        profile: IntegrationProfile,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            profile: 集成 profile
            clock: 时钟函数，返回 unix 秒 (测试时可注入)
        """
        self.profile = profile
        self._clock = clock

    def build(self, context: BuildContext) -> FingerprintDescriptor:
        """
        构建描述符

        Raises:
            BuildError: User-Agent 为空或附加条目与保留键冲突
        """
        if not context.user_agent:
            raise BuildError("User-Agent 不能为空", details={"profile": self.profile.name})

        self._check_extra_entries(context.extra_entries)

        sources = self._derive_sources(context)
        descriptor = self._render(self.profile.descriptor, sources)

        for key, value in context.extra_entries.items():
            descriptor.add(key, value)

        logger.debug(
            "构建描述符: profile=%s, 固定条目=%d, 附加条目=%d",
            self.profile.name,
            len(descriptor) - len(context.extra_entries),
            len(context.extra_entries),
        )
        return descriptor

    def _check_extra_entries(self, extra_entries: Mapping[str, Any]) -> None:
        reserved = self.profile.reserved_keys()
        collisions = [key for key in extra_entries if key in reserved]
        if collisions:
            raise BuildError(
                "附加条目与保留键冲突",
                code="RESERVED_KEY",
                details={"keys": collisions, "profile": self.profile.name},
            )

    def _derive_sources(self, context: BuildContext) -> Dict[str, Any]:
        timestamp = str(int(self._clock()))
        return {
            "timestamp_b64": base64.b64encode(timestamp.encode("ascii")).decode("ascii"),
            "user_agent": context.user_agent,
            "referer": context.referer,
            "location": context.location,
            "site": context.site,
            "base_url": context.base_url,
        }

    def _render(self, template: List[Dict[str, Any]], sources: Dict[str, Any]) -> FingerprintDescriptor:
        descriptor = FingerprintDescriptor()
        for item in template:
            key = item["key"]
            if "derive" in item:
                descriptor.add(key, sources[item["derive"]])
            elif "value" not in item:
                descriptor.add(key, MISSING)
            elif is_entry_list(item["value"]):
                descriptor.add(key, self._render(item["value"], sources))
            else:
                # 模板数据与注册表共享，避免调用方修改列表值
                descriptor.add(key, copy.deepcopy(item["value"]))
        return descriptor


__all__ = ["BuildContext", "FingerprintBuilder"]
