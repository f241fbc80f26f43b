"""Configuration for deepchain."""

from .settings import (
    CacheSettings,
    DeepchainSettings,
    ExecutorSettings,
    LoggingSettings,
    UpstreamSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "DeepchainSettings",
    "CacheSettings",
    "LoggingSettings",
    "UpstreamSettings",
    "ExecutorSettings",
    "get_settings",
    "clear_settings_cache",
]
