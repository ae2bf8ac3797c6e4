"""
Application setup and initialization.

Runs before the FastAPI application is created:

1. Load ``.env`` so every settings class sees it
2. Initialize Sentry, early enough to catch import-time errors
3. Configure logging from the loaded settings
"""
from dotenv import load_dotenv

from billharmony.config.sentry import init_sentry
from billharmony.config.settings import get_settings
from billharmony.utils.logger import configure_logging, get_logger


def setup_application() -> None:
    """Initialize environment, error tracking and logging. Call once per process."""
    load_dotenv()

    init_sentry()

    settings = get_settings()
    configure_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file or ("app.log" if settings.environment == "production" else None),
        log_dir=settings.log_dir,
    )

    logger = get_logger(__name__)
    logger.info(
        "Application configured",
        environment=settings.environment,
        reference_data_dir=str(settings.reference_data_dir),
    )
