"""Root pytest configuration for root-s3 tests."""
import pytest

from root_s3 import Client
from root_s3.settings import Settings

from tests.fakes.fake_s3 import FakeS3Backend, FakeS3Transport


# Configure pytest markers
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow (may take significant time)"
    )


# Keep the developer's environment out of the tests
@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Automatically clear root-s3 environment variables."""
    for name in (
        "ROOTS3_URL", "ROOTS3_API_KEY", "ROOTS3_PROJECT_ID", "ROOTS3_REGION",
        "ROOTS3_ORG_ID", "ROOTS3_HTTP_TIMEOUT", "ROOTS3_CONNECT_TIMEOUT",
        "ROOTS3_HTTP_RETRY", "ROOTS3_MAX_CONCURRENCY", "ROOTS3_CHUNK_SIZE", "ROOTS3_LOG",
    ):
        monkeypatch.delenv(name, raising=False)


# Standardized test fixtures
@pytest.fixture
def endpoint_url():
    """Backend URL the test clients point at."""
    return "http://localhost:9000"


@pytest.fixture
def api_key():
    return "test-api-key"


@pytest.fixture
def project_id():
    return 42


@pytest.fixture
def settings():
    """Test settings with a small chunk size so streams span several chunks."""
    return Settings(chunk_size=4)


@pytest.fixture
def backend():
    """In-memory S3 backend state."""
    return FakeS3Backend()


@pytest.fixture
def transport(backend):
    """Fake transport over the shared backend."""
    return FakeS3Transport(backend)


@pytest.fixture
def client(settings, transport, endpoint_url, api_key, project_id):
    """Client wired to the fake transport."""
    return Client(endpoint_url, api_key, project_id, settings=settings, transport=transport)
