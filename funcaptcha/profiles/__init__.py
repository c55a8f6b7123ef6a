"""
集成 Profile 模块

提供版本化、可外部加载的描述符模板和请求变体参数

使用示例:
    from funcaptcha.profiles import ProfileRegistry

    registry = ProfileRegistry.default()
    print(registry.names())          # ['generic', 'openai']
    profile = registry.get("openai")
"""

from .registry import (
    BUILTIN_PROFILE_DIR,
    DEFAULT_BASE_URL,
    DEFAULT_ENFORCEMENT_VERSION,
    DERIVE_SOURCES,
    IntegrationProfile,
    ProfileRegistry,
    RequestVariant,
)

__all__ = [
    "BUILTIN_PROFILE_DIR",
    "DEFAULT_BASE_URL",
    "DEFAULT_ENFORCEMENT_VERSION",
    "DERIVE_SOURCES",
    "IntegrationProfile",
    "ProfileRegistry",
    "RequestVariant",
]
