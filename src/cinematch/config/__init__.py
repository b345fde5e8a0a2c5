"""Configuration management module."""

from .config_manager import ConfigManager
from .models import ChatConfig, Config, LLMConfig, RecommendationConfig, StoreConfig

__all__ = [
    "ConfigManager",
    "Config",
    "LLMConfig",
    "StoreConfig",
    "RecommendationConfig",
    "ChatConfig",
]
