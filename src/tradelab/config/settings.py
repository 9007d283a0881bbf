"""Application settings and configuration management using Pydantic."""

from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Main application settings combining all configuration sections."""

    # Environment and deployment
    environment: str = "development"
    debug: bool = False

    # Oracle (text generation) settings
    anthropic_api_key: Optional[str] = None
    anthropic_api_url: str = "https://api.anthropic.com/v1/messages"
    anthropic_version: str = "2023-06-01"
    oracle_model: str = "claude-3-5-sonnet-20241022"
    oracle_max_tokens: int = 4096
    oracle_timeout_seconds: float = 120.0

    # Proxy settings
    api_base_url: str = "http://localhost:3001"
    frontend_url: str = "http://localhost:5173"
    endpoint_host: str = "0.0.0.0"
    endpoint_port: int = 3001
    api_reload: bool = False
    api_log_level: str = "INFO"

    # Simulation settings
    base_day_interval_ms: int = 5000
    volatility_multiplier: float = 1.0
    price_history_days: int = 30
    default_initial_cash: float = 100000.0

    # Upload settings
    max_upload_size_bytes: int = 10 * 1024 * 1024
    allowed_upload_extensions: List[str] = ["pdf", "doc", "docx", "txt"]

    # Database settings
    database_url: Optional[str] = None
    data_directory: str = "data"
    database_echo_sql: bool = False
    database_pool_pre_ping: bool = True
    database_pool_recycle: int = 3600

    # Scheduler settings
    scheduler_max_workers: int = 3

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "structured"  # 'structured' or 'plain'
    log_file_enabled: bool = True
    log_file_path: str = "data/tradelab.log"
    log_max_file_size: str = "10MB"
    log_backup_count: int = 5

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        valid_environments = ["development", "testing", "production"]
        if v.lower() not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v.lower()

    @field_validator("endpoint_port")
    @classmethod
    def validate_port(cls, v):
        """Validate port number is in valid range."""
        if v < 1 or v > 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("base_day_interval_ms", "price_history_days")
    @classmethod
    def validate_positive_int(cls, v):
        """Validate simulation timing values are positive."""
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @field_validator("volatility_multiplier", "default_initial_cash")
    @classmethod
    def validate_positive_float(cls, v):
        """Validate simulation scale values are positive."""
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @field_validator("allowed_upload_extensions")
    @classmethod
    def normalize_extensions(cls, v):
        """Store extensions lower-case without the leading dot."""
        return [ext.lower().lstrip(".") for ext in v]

    @field_validator("log_level", "api_log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Validate log format."""
        valid_formats = ["structured", "plain"]
        if v.lower() not in valid_formats:
            raise ValueError(f"Log format must be one of: {valid_formats}")
        return v.lower()

    def get_database_url(self) -> str:
        """Get the complete database URL."""
        if self.database_url:
            return self.database_url

        # Default to SQLite in data directory
        from pathlib import Path

        db_dir = Path(self.data_directory)
        db_dir.mkdir(exist_ok=True)
        db_path = db_dir / "tradelab.db"
        return f"sqlite:///{db_path}"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration instance
    """
    return Settings()


def validate_required_settings() -> bool:
    """
    Validate that the oracle credential is configured.

    The proxy still starts without it; every forwarded request then fails
    with a 500 until the key is set.

    Returns:
        bool: True if all required settings are present, False otherwise
    """
    settings = get_settings()
    return bool(settings.anthropic_api_key)


def get_required_env_vars() -> list[str]:
    """
    Get list of required environment variables.

    Returns:
        list: List of required environment variable names
    """
    return ["ANTHROPIC_API_KEY"]
