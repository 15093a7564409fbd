"""Configuration package for Cosmos Reader."""

from cosmos.config.app_config import (
    AppConfig,
    ProviderConfig,
    ReaderConfig,
    clear_config_cache,
    get_provider_config,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "ProviderConfig",
    "ReaderConfig",
    "clear_config_cache",
    "get_provider_config",
    "load_app_config",
]
