"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerConfig(BaseSettings):
    """Bank ledger configuration"""

    model_config = SettingsConfigDict(
        env_prefix="BANK_LEDGER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Display configuration
    currency_symbol: str = "$"

    # Business rules configuration
    amount_precision: int = 2  # Decimal places accepted on amounts and balances
    max_amount: str = "1000000000000.00"  # Largest accepted amount or starting balance

    # API configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8090


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
