"""Pytest configuration and shared fixtures."""
import os
from typing import Generator

import pytest

# Set test environment variables BEFORE any app imports
os.environ["TESTING"] = "true"
os.environ["ENVIRONMENT"] = "test"
os.environ.pop("SENTRY_DSN", None)
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("AUDIT_HASH_SALT", "test-salt")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:3000")

from fastapi.testclient import TestClient

from billharmony.api.dependencies import get_catalog
from billharmony.config.fpl import get_fpl_table
from billharmony.config.settings import DEFAULT_DATA_DIR
from billharmony.core.application import create_application
from billharmony.services.catalog import ReferenceCatalog, load_catalog
from billharmony.services.eligibility import EligibilityScorer
from billharmony.services.location import LocationResolver
from billharmony.services.query import QueryInterpreter
from billharmony.services.matching import AISearchService, FacilityMatcher


@pytest.fixture(scope="session")
def catalog() -> ReferenceCatalog:
    """The bundled reference data."""
    return load_catalog(DEFAULT_DATA_DIR)


@pytest.fixture
def interpreter(catalog: ReferenceCatalog) -> QueryInterpreter:
    return QueryInterpreter(catalog)


@pytest.fixture
def resolver(catalog: ReferenceCatalog) -> LocationResolver:
    return LocationResolver(catalog.zip_codes)


@pytest.fixture
def matcher() -> FacilityMatcher:
    return FacilityMatcher()


@pytest.fixture
def scorer() -> EligibilityScorer:
    return EligibilityScorer(get_fpl_table())


@pytest.fixture
def ai_search_service(catalog, interpreter, resolver, matcher) -> AISearchService:
    return AISearchService(catalog, interpreter, resolver, matcher)


@pytest.fixture(scope="function")
def client(catalog: ReferenceCatalog) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    app = create_application(preload_catalog=False)
    app.dependency_overrides[get_catalog] = lambda: catalog
    # Set raise_server_exceptions=False so that 500 errors return responses instead of raising
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()
