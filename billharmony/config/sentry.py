"""Sentry error tracking configuration."""
import os
from typing import Any, Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from billharmony.utils.logger import get_logger

logger = get_logger(__name__)


class SentrySettings(BaseSettings):
    """Sentry configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    dsn: Optional[str] = Field(None, alias="SENTRY_DSN")
    environment: str = Field("development", alias="SENTRY_ENVIRONMENT")
    release: Optional[str] = Field(None, alias="SENTRY_RELEASE")
    traces_sample_rate: float = Field(0.1, alias="SENTRY_TRACES_SAMPLE_RATE")
    # Household income and family size never leave the process
    send_default_pii: bool = Field(False, alias="SENTRY_SEND_DEFAULT_PII")
    sensitive_keys: str = Field(
        "household_income,income,family_size,employment_status,zip_code,ai_query",
        alias="SENTRY_SENSITIVE_KEYS",
    )

    enable_alerts: bool = Field(True, alias="SENTRY_ENABLE_ALERTS")
    alert_on_errors: bool = Field(False, alias="SENTRY_ALERT_ON_ERRORS")


settings = SentrySettings()


def init_sentry() -> None:
    """
    Initialize Sentry error tracking.

    Does nothing when ``SENTRY_DSN`` is unset or when running under tests.
    """
    if not settings.dsn:
        logger.info("Sentry DSN not configured, error tracking disabled")
        return

    if os.getenv("TESTING") == "true":
        logger.info("Skipping Sentry initialization in test environment")
        return

    import sentry_sdk
    from sentry_sdk.integrations.logging import LoggingIntegration

    sentry_sdk.init(
        dsn=settings.dsn,
        environment=settings.environment,
        release=settings.release,
        traces_sample_rate=settings.traces_sample_rate,
        send_default_pii=settings.send_default_pii,
        integrations=[LoggingIntegration(level=None, event_level=None)],
        before_send=filter_sensitive_data,
    )

    logger.info(
        "Sentry initialized",
        environment=settings.environment,
        release=settings.release,
    )


def _sensitive_keys() -> list:
    return [key.strip().lower() for key in settings.sensitive_keys.split(",") if key.strip()]


def filter_sensitive_data(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Strip household financial data from a Sentry event before it is sent.

    Removes request bodies entirely and drops ``extra`` keys matching
    ``SENTRY_SENSITIVE_KEYS``.
    """
    request = event.get("request")
    if isinstance(request, dict):
        request.pop("data", None)
        request.pop("cookies", None)

    extra = event.get("extra")
    if isinstance(extra, dict):
        for key in list(extra.keys()):
            if any(sensitive in key.lower() for sensitive in _sensitive_keys()):
                extra.pop(key, None)

    return event


def capture_exception(
    exception: Exception,
    level: str = "error",
    context: Optional[Dict[str, Any]] = None,
    tags: Optional[Dict[str, str]] = None,
) -> Optional[str]:
    """
    Capture an exception to Sentry with additional context.

    Returns:
        Event ID if Sentry is configured, None otherwise
    """
    if not settings.dsn:
        return None

    import sentry_sdk

    with sentry_sdk.new_scope() as scope:
        scope.set_level(level)
        for key, value in (context or {}).items():
            scope.set_context(key, value if isinstance(value, dict) else {"value": value})
        for key, value in (tags or {}).items():
            scope.set_tag(key, value)
        return sentry_sdk.capture_exception(exception)


def add_breadcrumb(
    message: str,
    category: str = "default",
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
) -> None:
    """Add a breadcrumb to Sentry. No-op when Sentry is not configured."""
    if not settings.dsn:
        return

    import sentry_sdk

    sentry_sdk.add_breadcrumb(message=message, category=category, level=level, data=data or {})
