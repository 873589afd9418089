"""Configurações do aplicativo."""

from .settings import (
    AppConfig,
    CacheConfig,
    DSLConfig,
    KnowledgeConfig,
    Settings,
    get_settings,
    reset_settings,
)

__all__ = [
    "AppConfig",
    "CacheConfig",
    "DSLConfig",
    "KnowledgeConfig",
    "Settings",
    "get_settings",
    "reset_settings",
]
