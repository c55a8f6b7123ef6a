"""
指纹模块 - 合成浏览器/设备遥测描述符
"""

from .builder import BuildContext, FingerprintBuilder
from .descriptor import MISSING, Entry, FingerprintDescriptor

__all__ = [
    "MISSING",
    "Entry",
    "FingerprintDescriptor",
    "BuildContext",
    "FingerprintBuilder",
]
