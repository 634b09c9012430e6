"""Pytest configuration and fixtures for lifeline.

Env is set before lifeline.main is imported because the app (and its
settings) are built at import time. Storage tests run against the
in-process fakes in tests.fakes; no cloud credentials are needed.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-lifeline-tests")
os.environ.setdefault("ENCRYPTION_SALT", "test-encryption-salt")
os.environ.setdefault("SNAPSHOT_STORAGE_TYPE", "s3")
os.environ.setdefault("SNAPSHOT_BUCKET", "test-bucket")
os.environ.setdefault("SNAPSHOT_REGION", "us-east-1")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from lifeline.core.config import get_settings  # noqa: E402
from lifeline.infrastructure.external.storage.gcs_client import GCSBlobClient  # noqa: E402
from lifeline.infrastructure.external.storage.gcs_storage import GCSStorageAdapter  # noqa: E402
from lifeline.infrastructure.external.storage.s3_client import S3BlobClient  # noqa: E402
from lifeline.infrastructure.external.storage.s3_storage import S3StorageAdapter  # noqa: E402
from lifeline.main import app  # noqa: E402
from tests.fakes import FakeGCSClient, FakeS3Client  # noqa: E402

TEST_BUCKET = "test-bucket"


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Each test sees settings built from the current env."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI). Lifespan does not run."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def fake_s3() -> FakeS3Client:
    return FakeS3Client(buckets=(TEST_BUCKET,))


@pytest.fixture
def fake_gcs() -> FakeGCSClient:
    return FakeGCSClient()


@pytest.fixture
def s3_adapter(fake_s3: FakeS3Client) -> S3StorageAdapter:
    return S3StorageAdapter(S3BlobClient(client=fake_s3), TEST_BUCKET)


@pytest.fixture
def gcs_adapter(fake_gcs: FakeGCSClient) -> GCSStorageAdapter:
    return GCSStorageAdapter(GCSBlobClient(client=fake_gcs), TEST_BUCKET)


@pytest.fixture(params=["s3", "gcs"])
def adapter(request: pytest.FixtureRequest):
    """Each backend adapter in turn, for contract tests every backend must pass."""
    if request.param == "s3":
        return request.getfixturevalue("s3_adapter")
    return request.getfixturevalue("gcs_adapter")
