"""Configuration module."""

from src.config.configuration import (
    AppConfig,
    ConfigurationError,
    DatabaseConfig,
    LoggingConfig,
    ProductPolicyConfig,
    SessionConfig,
    StorageConfig,
    UploadConfig,
    get_config,
    load_config,
)
from src.config.logging_setup import configure_logging

__all__ = [
    "AppConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "LoggingConfig",
    "ProductPolicyConfig",
    "SessionConfig",
    "StorageConfig",
    "UploadConfig",
    "configure_logging",
    "get_config",
    "load_config",
]
