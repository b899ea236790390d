"""
Test Configuration
==================

Pytest fixtures for CRCS tests.
"""

import os

import pytest

# Set test environment before settings are first read
os.environ["CRCS_ENVIRONMENT"] = "testing"
os.environ["CRCS_LOG_LEVEL"] = "WARNING"

from crcs.config import get_settings  # noqa: E402
from crcs.issuer import CredentialIssuer  # noqa: E402
from crcs.logger import setup_logging  # noqa: E402
from crcs.models import Credential  # noqa: E402
from crcs.randomness import SeededRandom  # noqa: E402
from crcs.session import SessionBinder  # noqa: E402


@pytest.fixture(autouse=True)
def _quiet_logging():
    """Rebind logging to the current stderr around every test."""
    setup_logging("WARNING")
    yield
    setup_logging("WARNING")


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Drop the cached settings so env changes in a test take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def rng() -> SeededRandom:
    """Deterministic randomness."""
    return SeededRandom(1234)


@pytest.fixture
def issuer() -> CredentialIssuer:
    return CredentialIssuer()


@pytest.fixture
def credential(issuer: CredentialIssuer, rng: SeededRandom) -> Credential:
    """Credential for age=22, income=600000."""
    return issuer.issue({"age": 22, "income": 600_000}, rng=rng)


@pytest.fixture
def binder() -> SessionBinder:
    return SessionBinder()
