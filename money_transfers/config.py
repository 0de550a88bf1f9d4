"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class TransfersConfig(BaseSettings):
    """Money transfers service configuration"""

    model_config = SettingsConfigDict(
        env_prefix="MONEY_TRANSFERS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Database configuration
    database_url: str = "sqlite:///money_transfers.db"  # memory://, sqlite:///..., postgresql://...
    database_pool_size: int = 10

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text


# Global configuration instance
config = TransfersConfig()


def get_config() -> TransfersConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> TransfersConfig:
    """Reload configuration from environment"""
    global config
    config = TransfersConfig()
    return config
