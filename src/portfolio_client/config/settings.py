"""Application settings and configuration."""

from decimal import Decimal
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory based on platform."""
    return Path.home() / "Documents" / "Portfolio Client Data"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Portfolio Client"
    app_version: str = "0.1.0"

    # Data directory (local cache and offline ledger live here)
    data_dir: Optional[Path] = None

    # Database URL (derived from data_dir if not set explicitly)
    database_url: Optional[str] = None

    log_level: str = "INFO"
    log_to_file: bool = False
    timezone: str = "US/Eastern"

    # Backend collaborator
    backend_url: str = "http://localhost:54321"
    backend_api_key: str = ""
    request_timeout_seconds: float = 30.0
    keyring_service_name: str = "portfolio-client"

    # Ledger behavior
    base_currency: str = "USD"
    allow_zero_net_dividend: bool = True

    # Refresh and fetch limits
    price_refresh_interval_seconds: int = 20 * 60
    stock_transaction_fetch_limit: int = 500
    cash_transaction_fetch_limit: int = 50
    transaction_group_fetch_limit: int = 50

    # Analysis
    snapshot_page_size: int = 1000
    snapshot_max_pages: int = 20
    risk_free_rate: Decimal = Decimal("0.04")

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "portfolio_client.db"
        return f"sqlite:///{db_path}"

    def get_log_dir(self) -> Path:
        """Get the log directory, creating it if needed."""
        log_dir = self.get_data_dir() / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        return log_dir


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
