"""Configuration module for the product listings service.

Loads settings from environment-specific config files:
- APP_ENV=dev  → config_dev.yaml
- APP_ENV=test → config_test.yaml
- Default      → config.yaml

Secrets (the session signing key) are loaded from the .env file.
Fails fast with clear error messages if required configuration is missing.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import yaml
from dotenv import load_dotenv


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def _get_project_root() -> Path:
    """Get the project root directory (where config.yaml lives)."""
    # Navigate from src/config/ up to project root
    return Path(__file__).parent.parent.parent


def _get_config_filename() -> str:
    """Get config filename based on APP_ENV environment variable."""
    app_env = os.environ.get("APP_ENV", "").lower()

    if app_env == "dev":
        return "config_dev.yaml"
    elif app_env == "test":
        return "config_test.yaml"
    else:
        return "config.yaml"


def _load_yaml_config() -> dict:
    """Load configuration from environment-specific config file."""
    config_filename = _get_config_filename()
    config_path = _get_project_root() / config_filename

    if not config_path.exists():
        raise ConfigurationError(
            f"Configuration file not found: {config_path}. "
            f"Set APP_ENV to 'dev' or 'test', or create {config_filename}."
        )

    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def _get_required_env(key: str) -> str:
    """Get required environment variable or raise ConfigurationError."""
    value = os.environ.get(key)
    if not value:
        raise ConfigurationError(
            f"Required environment variable '{key}' is not set. "
            f"Please add it to your .env file."
        )
    return value


def _get_bool(section: dict, section_name: str, key: str, default: bool) -> bool:
    """Get a boolean setting, rejecting anything that is not a YAML boolean."""
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ConfigurationError(
            f"{section_name}.{key} must be true or false, got {value!r}"
        )
    return value


@dataclass(frozen=True)
class DatabaseConfig:
    """Database configuration."""
    path: str


@dataclass(frozen=True)
class StorageConfig:
    """Blob storage configuration for uploaded images."""
    root: str
    area: str
    public_prefix: str


@dataclass(frozen=True)
class UploadConfig:
    """Limits applied to uploaded product images."""
    max_image_kb: int
    allowed_image_types: Tuple[str, ...]


@dataclass(frozen=True)
class ProductPolicyConfig:
    """Policies for the product image lifecycle."""
    update_requires_image: bool
    delete_replaced_image: bool


@dataclass(frozen=True)
class SessionConfig:
    """Cookie session configuration."""
    secret_key: str
    cookie_name: str


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""
    level: str


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration container."""
    database: DatabaseConfig
    storage: StorageConfig
    uploads: UploadConfig
    products: ProductPolicyConfig
    session: SessionConfig
    logging: LoggingConfig


def load_config() -> AppConfig:
    """
    Load and validate all application configuration.

    Returns:
        AppConfig: Validated application configuration.

    Raises:
        ConfigurationError: If required configuration is missing or invalid.
    """
    load_dotenv()

    yaml_config = _load_yaml_config()

    db_section = yaml_config.get("database", {})
    database_config = DatabaseConfig(
        path=db_section.get("path", "products.db"),
    )

    storage_section = yaml_config.get("storage", {})
    storage_config = StorageConfig(
        root=storage_section.get("root", "storage/app/public"),
        area=storage_section.get("area", "product_images"),
        public_prefix=storage_section.get("public_prefix", "storage"),
    )

    uploads_section = yaml_config.get("uploads", {})
    max_image_kb = uploads_section.get("max_image_kb", 2048)
    if not isinstance(max_image_kb, int) or max_image_kb <= 0:
        raise ConfigurationError(
            f"uploads.max_image_kb must be a positive integer, got {max_image_kb!r}"
        )
    upload_config = UploadConfig(
        max_image_kb=max_image_kb,
        allowed_image_types=tuple(
            uploads_section.get("allowed_image_types", ["jpeg", "png", "jpg", "gif", "svg"])
        ),
    )

    products_section = yaml_config.get("products", {})
    product_policy_config = ProductPolicyConfig(
        update_requires_image=_get_bool(products_section, "products", "update_requires_image", True),
        delete_replaced_image=_get_bool(products_section, "products", "delete_replaced_image", True),
    )

    session_section = yaml_config.get("session", {})
    session_config = SessionConfig(
        secret_key=_get_required_env("SESSION_SECRET_KEY"),
        cookie_name=session_section.get("cookie_name", "listings_session"),
    )

    logging_section = yaml_config.get("logging", {})
    logging_config = LoggingConfig(
        level=logging_section.get("level", "INFO"),
    )

    return AppConfig(
        database=database_config,
        storage=storage_config,
        uploads=upload_config,
        products=product_policy_config,
        session=session_config,
        logging=logging_config,
    )


# Module-level singleton for convenience
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the application configuration singleton.

    Lazy-loads configuration on first access.

    Raises:
        ConfigurationError: If required configuration is missing.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config
