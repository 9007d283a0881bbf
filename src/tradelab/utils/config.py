"""Configuration and environment utilities."""

from pathlib import Path

from ..config.logging import get_logger, setup_logging
from ..config.settings import (
    get_required_env_vars,
    get_settings,
    validate_required_settings,
)


def ensure_data_directory() -> None:
    """Ensure the data directory and document tables are initialized."""
    logger = get_logger(__name__)

    settings = get_settings()
    data_path = Path(settings.data_directory)
    data_path.mkdir(exist_ok=True)

    logger.info("Ensured data directory exists", path=str(data_path))

    from ..ormdb.database import create_tables

    create_tables()
    logger.info("Ensured document tables exist")


def initialize_application() -> None:
    """Initialize application configuration and logging."""
    settings = get_settings()

    setup_logging(
        level=settings.log_level,
        format_type=settings.log_format,
        file_enabled=settings.log_file_enabled,
        file_path=settings.log_file_path,
        max_file_size=settings.log_max_file_size,
        backup_count=settings.log_backup_count,
    )

    ensure_data_directory()

    logger = get_logger(__name__)
    logger.info(
        "Application initialized successfully",
        environment=settings.environment,
        debug=settings.debug,
        data_dir=settings.data_directory,
    )


def validate_environment() -> bool:
    """
    Check that the oracle credential is set, warning about each missing variable.

    Returns:
        True if all required variables are set, False otherwise
    """
    if validate_required_settings():
        return True

    logger = get_logger(__name__)
    for name in get_required_env_vars():
        logger.warning("Required environment variable not set", variable=name)
    return False
