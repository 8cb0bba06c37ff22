"""Root-level pytest fixtures: testcontainer-backed object storage."""

from __future__ import annotations

import uuid

import pytest


@pytest.fixture(scope="session")
def minio_container():
    """Single MinIO container for the test session."""
    from testcontainers.minio import MinioContainer

    with MinioContainer() as minio:
        yield minio


@pytest.fixture
def minio_secrets(minio_container):
    """Secrets pointing a MinioBlobStore at a fresh bucket in the session container."""
    from event_batcher.services.secrets.env_secrets import EnvSecrets

    config = minio_container.get_config()
    return EnvSecrets(overrides={
        "BLOB_MINIO_ENDPOINT": config["endpoint"],
        "BLOB_MINIO_ACCESS_KEY": config["access_key"],
        "BLOB_MINIO_SECRET_KEY": config["secret_key"],
        "BLOB_MINIO_BUCKET": f"events-{uuid.uuid4().hex[:8]}",
        "BLOB_MINIO_SECURE": "false",
        "BLOB_MINIO_CREATE_BUCKET": "true",
    })
