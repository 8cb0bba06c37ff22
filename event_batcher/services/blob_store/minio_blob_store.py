"""S3-compatible blob store built on the MinIO client.

Works against AWS S3 (the default endpoint) as well as MinIO or any other
S3-compatible service.
"""

from __future__ import annotations

import io

from event_batcher.services.blob_store.interface import BlobStoreInterface
from event_batcher.services.secrets.interface import SecretsInterface

_MISSING_KEY_CODES = {"NoSuchKey", "NoSuchObject"}


class MinioBlobStore(BlobStoreInterface):
    """Blob store backed by an S3 bucket.

    Config (via secrets):
        BLOB_MINIO_BUCKET        - Bucket name (required)
        BLOB_MINIO_ENDPOINT      - Host[:port] (default: s3.amazonaws.com)
        BLOB_MINIO_REGION        - Region (default: us-east-1)
        BLOB_MINIO_ACCESS_KEY    - Access key (optional)
        BLOB_MINIO_SECRET_KEY    - Secret key (optional)
        BLOB_MINIO_SECURE        - Use HTTPS (default: true)
        BLOB_MINIO_TIMEOUT       - Connect/read timeout in seconds (default: 10)
        BLOB_MINIO_CREATE_BUCKET - Create the bucket on startup if missing (default: false)

    Without explicit keys, credentials come from the AWS chain: environment
    variables, ``~/.aws/credentials``, then the instance IAM role.
    """

    def __init__(self, secrets: SecretsInterface) -> None:
        import urllib3
        from minio import Minio
        from minio.credentials import (
            AWSConfigProvider,
            ChainedProvider,
            EnvAWSProvider,
            IamAwsProvider,
        )

        self._bucket = secrets.require("BLOB_MINIO_BUCKET")
        self._endpoint = secrets.get_or_default("BLOB_MINIO_ENDPOINT", "s3.amazonaws.com")
        self._region = secrets.get_or_default("BLOB_MINIO_REGION", "us-east-1")
        secure = secrets.get_bool("BLOB_MINIO_SECURE", default=True)
        timeout = secrets.get_float("BLOB_MINIO_TIMEOUT", 10.0)

        # One attempt per call; a timed-out put surfaces as a failure to the flush engine
        http_client = urllib3.PoolManager(
            timeout=urllib3.Timeout(connect=timeout, read=timeout),
            retries=False,
        )

        access_key = secrets.get("BLOB_MINIO_ACCESS_KEY")
        secret_key = secrets.get("BLOB_MINIO_SECRET_KEY")
        if access_key and secret_key:
            self._credential_source = "explicit"
            self._client = Minio(
                endpoint=self._endpoint,
                access_key=access_key,
                secret_key=secret_key,
                secure=secure,
                region=self._region,
                http_client=http_client,
            )
        else:
            self._credential_source = "aws-chain"
            self._client = Minio(
                endpoint=self._endpoint,
                secure=secure,
                region=self._region,
                http_client=http_client,
                credentials=ChainedProvider(
                    [EnvAWSProvider(), AWSConfigProvider(), IamAwsProvider()]
                ),
            )

        if secrets.get_bool("BLOB_MINIO_CREATE_BUCKET", default=False):
            self._ensure_bucket()

    def _ensure_bucket(self) -> None:
        if not self._client.bucket_exists(bucket_name=self._bucket):
            self._client.make_bucket(bucket_name=self._bucket)

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        self._client.put_object(
            bucket_name=self._bucket,
            object_name=key,
            data=io.BytesIO(data),
            length=len(data),
            content_type=content_type,
        )

    def get(self, key: str) -> bytes:
        from minio.error import S3Error

        try:
            response = self._client.get_object(bucket_name=self._bucket, object_name=key)
        except S3Error as exc:
            if exc.code in _MISSING_KEY_CODES:
                raise FileNotFoundError(f"Object not found: {key}") from exc
            raise
        try:
            return response.read()
        finally:
            response.close()
            response.release_conn()

    def list(self, prefix: str) -> list[str]:
        objects = self._client.list_objects(bucket_name=self._bucket, prefix=prefix, recursive=True)
        return sorted(obj.object_name for obj in objects if obj.object_name)

    def exists(self, key: str) -> bool:
        from minio.error import S3Error

        try:
            self._client.stat_object(bucket_name=self._bucket, object_name=key)
            return True
        except S3Error as exc:
            if exc.code in _MISSING_KEY_CODES:
                return False
            raise

    def health_check(self) -> bool:
        try:
            return self._client.bucket_exists(bucket_name=self._bucket)
        except Exception:
            return False

    @property
    def destination(self) -> str:
        return self._bucket

    def describe(self) -> dict[str, str]:
        return {
            "bucket": self._bucket,
            "region": self._region,
            "endpoint": self._endpoint,
            "credentials": self._credential_source,
        }
