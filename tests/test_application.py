"""Tests for application setup, the app factory and logging configuration."""
import logging
from logging.handlers import RotatingFileHandler

import pytest
from fastapi.testclient import TestClient

from billharmony.core.application import create_application
from billharmony.core.setup import setup_application
from billharmony.utils.logger import REDACTED_KEYS, configure_logging, redact_household_fields
from billharmony.utils.sanitize import hash_value


@pytest.mark.unit
class TestSetupApplication:
    """Tests for process setup."""

    def test_initializes_sentry_and_logging(self, mocker):
        init_sentry = mocker.patch("billharmony.core.setup.init_sentry")
        configure = mocker.patch("billharmony.core.setup.configure_logging")
        mocker.patch("billharmony.core.setup.load_dotenv")

        setup_application()

        init_sentry.assert_called_once()
        configure.assert_called_once()
        assert configure.call_args.kwargs["log_format"] in ("json", "console")


@pytest.mark.unit
class TestCreateApplication:
    """Tests for the FastAPI app factory."""

    def test_routes_registered(self):
        app = create_application(preload_catalog=False)
        paths = {route.path for route in app.routes}

        assert {
            "/api/v1/health",
            "/api/v1/ai-search",
            "/api/v1/search",
            "/api/v1/charity-eligibility",
            "/api/v1/procedures",
            "/api/v1/insurances",
            "/api/v1/insurances/{insurer_id}",
            "/api/v1/hospitals/{hospital_id}",
        } <= paths

    def test_catalog_preloaded_at_startup(self, mocker):
        load = mocker.patch("billharmony.core.application.get_default_catalog")

        with TestClient(create_application(preload_catalog=True)):
            pass

        load.assert_called_once()

    def test_preload_can_be_skipped(self, mocker):
        load = mocker.patch("billharmony.core.application.get_default_catalog")

        with TestClient(create_application(preload_catalog=False)):
            pass

        load.assert_not_called()


@pytest.fixture
def restore_logging():
    yield
    configure_logging(log_level="WARNING", log_format="console")


@pytest.mark.unit
class TestLogging:
    """Tests for logging configuration."""

    def test_household_fields_redacted(self):
        event = {"event": "Eligibility scored", "household_income": 45000, "score": 70}

        redacted = redact_household_fields(None, "info", event)

        assert redacted["household_income"] == hash_value(45000)
        assert redacted["score"] == 70

    def test_other_fields_untouched(self):
        event = {"event": "Facility search complete", "result_count": 3}

        assert redact_household_fields(None, "info", dict(event)) == event

    def test_redacted_keys(self):
        assert "household_income" in REDACTED_KEYS
        assert "income" in REDACTED_KEYS

    def test_configure_sets_level(self, restore_logging):
        configure_logging(log_level="WARNING", log_format="console")

        assert logging.getLogger().level == logging.WARNING
        assert len(logging.getLogger().handlers) == 1

    def test_configure_with_file(self, tmp_path, restore_logging):
        configure_logging(log_level="INFO", log_format="json", log_file="test.log", log_dir=str(tmp_path / "logs"))

        assert (tmp_path / "logs").is_dir()
        assert any(isinstance(h, RotatingFileHandler) for h in logging.getLogger().handlers)
