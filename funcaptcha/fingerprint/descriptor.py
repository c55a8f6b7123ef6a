#!/usr/bin/env python3
"""
指纹描述符 - Fingerprint Descriptor

有序的 {"key": ..., "value": ...} 条目序列，对应浏览器脚本提交给验证服务的遥测结构。
条目顺序是加密内容的一部分，序列化时必须原样保留。

值的类型:
    - 标量 (str/int/float/bool)
    - None (显式 null，表示"无法确定")
    - 标量列表 (例如 fe、window__tree_index)
    - 嵌套描述符 (例如 enhanced_fp)
    - MISSING (条目没有 value 字段，例如 mobile_sdk__is_sdk)
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from ..exceptions import EncryptionError

logger = logging.getLogger(__name__)


class _Missing:
    """条目无 value 字段的哨兵值"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


@dataclass
class Entry:
    """描述符条目"""

    key: str
    value: Any = MISSING

    @property
    def is_nested(self) -> bool:
        return isinstance(self.value, FingerprintDescriptor)

    def to_obj(self) -> Dict[str, Any]:
        """转换为可 JSON 序列化的对象，保持 key 在 value 之前"""
        obj: Dict[str, Any] = {"key": self.key}
        if self.value is MISSING:
            return obj
        if isinstance(self.value, FingerprintDescriptor):
            obj["value"] = self.value.to_list()
        elif isinstance(self.value, (list, tuple)):
            obj["value"] = list(self.value)
        else:
            obj["value"] = self.value
        return obj


class FingerprintDescriptor:
    """
    有序指纹描述符

    Usage:
        descriptor = FingerprintDescriptor()
        descriptor.add("api_type", "js")
        descriptor.add("p", 1)
        text = descriptor.serialize()
    """

    def __init__(self, entries: Optional[List[Entry]] = None):
        self._entries: List[Entry] = []
        for entry in entries or []:
            self.add(entry.key, entry.value)

    def add(self, key: str, value: Any = MISSING) -> "FingerprintDescriptor":
        """追加条目，同一层级内 key 必须唯一"""
        if key in self:
            raise ValueError(f"duplicate descriptor key: {key}")
        self._entries.append(Entry(key=key, value=value))
        return self

    def set(self, key: str, value: Any) -> None:
        """原位替换已有条目的值，不改变顺序"""
        for entry in self._entries:
            if entry.key == key:
                entry.value = value
                return
        raise KeyError(key)

    def get(self, key: str, default: Any = None) -> Any:
        for entry in self._entries:
            if entry.key == key:
                return entry.value
        return default

    def find(self, key: str) -> Any:
        """在所有嵌套层级中深度优先查找 key，未找到返回 MISSING"""
        for entry in self._entries:
            if entry.key == key:
                return entry.value
            if entry.is_nested:
                found = entry.value.find(key)
                if found is not MISSING:
                    return found
        return MISSING

    def keys(self) -> List[str]:
        return [entry.key for entry in self._entries]

    def all_keys(self) -> List[str]:
        """所有层级的 key (深度优先)"""
        result: List[str] = []
        for entry in self._entries:
            result.append(entry.key)
            if entry.is_nested:
                result.extend(entry.value.all_keys())
        return result

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return any(entry.key == key for entry in self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FingerprintDescriptor):
            return NotImplemented
        return self.to_list() == other.to_list()

    def __repr__(self) -> str:
        return f"FingerprintDescriptor({len(self)} entries)"

    def to_list(self) -> List[Dict[str, Any]]:
        return [entry.to_obj() for entry in self._entries]

    def serialize(self) -> str:
        """
        序列化为紧凑 JSON 文本

        Returns:
            无空白、保留顺序、非 ASCII 字符原样输出的 JSON 字符串

        Raises:
            EncryptionError: 描述符包含无法编码的值
        """
        try:
            text = json.dumps(
                self.to_list(),
                separators=(",", ":"),
                ensure_ascii=False,
                allow_nan=False,
            )
        except (TypeError, ValueError) as e:
            raise EncryptionError("描述符包含无法编码的值", operation="serialize", cause=e)
        logger.debug("描述符序列化完成: %d 条目, %d 字符", len(self), len(text))
        return text

    @classmethod
    def from_list(cls, data: List[Dict[str, Any]]) -> "FingerprintDescriptor":
        """从 [{"key": ..., "value": ...}, ...] 结构还原描述符"""
        descriptor = cls()
        for item in data:
            if not isinstance(item, dict) or "key" not in item:
                raise ValueError(f"invalid descriptor entry: {item!r}")
            value = item.get("value", MISSING)
            if is_entry_list(value):
                value = cls.from_list(value)
            descriptor.add(str(item["key"]), value)
        return descriptor

    @classmethod
    def parse(cls, text: str) -> "FingerprintDescriptor":
        """从序列化文本还原描述符"""
        return cls.from_list(json.loads(text))


def is_entry_list(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) > 0
        and all(isinstance(item, dict) and "key" in item for item in value)
    )


__all__ = [
    "MISSING",
    "Entry",
    "FingerprintDescriptor",
]
