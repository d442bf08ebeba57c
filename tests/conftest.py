"""Pytest configuration.

Provides:
1. Marker registration (unit, api)
2. Automatic asyncio marker for coroutine tests
3. Certificate credential fixtures (PEM, PFX, expired, not yet valid)
4. Directory config built on the PEM fixture
"""

import inspect
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from dlmembership.infrastructure.directory import DirectoryConfig
from tests.utils.builders import CLIENT_ID, TENANT_ID
from tests.utils.certificates import (
    generate_certificate,
    generate_rsa_key,
    write_pem,
    write_pfx,
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line("markers", "api: API tests through the FastAPI TestClient")


def pytest_collection_modifyitems(items):
    """Mark coroutine tests for pytest-asyncio."""
    for item in items:
        function = getattr(item, "function", None)
        if function is not None and inspect.iscoroutinefunction(function):
            item.add_marker(pytest.mark.asyncio)


# =============================================================================
# Certificates
# =============================================================================


@pytest.fixture(scope="session")
def rsa_key():
    """One RSA key per session (key generation is slow)."""
    return generate_rsa_key()


@pytest.fixture(scope="session")
def valid_certificate(rsa_key):
    return generate_certificate(rsa_key)


@pytest.fixture
def pem_credential_path(tmp_path: Path, valid_certificate, rsa_key) -> Path:
    """Unencrypted PEM bundle, certificate first."""
    return write_pem(tmp_path / "app.pem", valid_certificate, rsa_key)


@pytest.fixture
def pfx_credential_path(tmp_path: Path, valid_certificate, rsa_key) -> Path:
    """Password-protected PFX bundle (password: "s3cret")."""
    return write_pfx(
        tmp_path / "app.pfx", valid_certificate, rsa_key, password="s3cret"
    )


@pytest.fixture
def expired_credential_path(tmp_path: Path, rsa_key) -> Path:
    now = datetime.now(UTC)
    certificate = generate_certificate(
        rsa_key,
        not_before=now - timedelta(days=400),
        not_after=now - timedelta(days=1),
    )
    return write_pem(tmp_path / "expired.pem", certificate, rsa_key)


@pytest.fixture
def future_credential_path(tmp_path: Path, rsa_key) -> Path:
    now = datetime.now(UTC)
    certificate = generate_certificate(
        rsa_key,
        not_before=now + timedelta(days=1),
        not_after=now + timedelta(days=400),
    )
    return write_pem(tmp_path / "future.pem", certificate, rsa_key)


# =============================================================================
# Directory
# =============================================================================


@pytest.fixture
def directory_config(pem_credential_path: Path) -> DirectoryConfig:
    return DirectoryConfig(
        tenant_id=TENANT_ID,
        client_id=CLIENT_ID,
        certificate_path=str(pem_credential_path),
        timeout=5.0,
    )

