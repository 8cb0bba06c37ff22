import os
import tempfile
from pathlib import Path

from event_batcher.services.blob_store.interface import BlobStoreInterface
from event_batcher.services.secrets.interface import SecretsInterface


class LocalBlobStore(BlobStoreInterface):
    """Blob store backed by a local directory; keys map to relative paths.

    Config (via secrets):
        BLOB_LOCAL_ROOT - Root directory (default: /tmp/event-batcher)

    Content types are not persisted; the file extension carries the format.
    """

    def __init__(self, secrets: SecretsInterface) -> None:
        self._root = Path(secrets.get_or_default("BLOB_LOCAL_ROOT", "/tmp/event-batcher"))

    def _resolve(self, key: str) -> Path:
        """Resolve a key against root, rejecting traversal attempts."""
        if ".." in key.split("/") or key.startswith("/"):
            raise ValueError(f"Path traversal not allowed: {key}")
        return self._root / key

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        full = self._resolve(key)
        full.parent.mkdir(parents=True, exist_ok=True)
        # Atomic write: temp file + rename, so readers never see half a batch
        fd, tmp = tempfile.mkstemp(dir=full.parent)
        closed = False
        try:
            os.write(fd, data)
            os.fsync(fd)
            os.close(fd)
            closed = True
            os.replace(tmp, full)
        except BaseException:
            if not closed:
                os.close(fd)
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get(self, key: str) -> bytes:
        full = self._resolve(key)
        if not full.is_file():
            raise FileNotFoundError(f"Object not found: {key}")
        return full.read_bytes()

    def list(self, prefix: str) -> list[str]:
        if not self._root.exists():
            return []
        keys = (p.relative_to(self._root).as_posix() for p in self._root.rglob("*") if p.is_file())
        return sorted(k for k in keys if k.startswith(prefix))

    def exists(self, key: str) -> bool:
        return self._resolve(key).is_file()

    def health_check(self) -> bool:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            return self._root.is_dir() and os.access(self._root, os.W_OK)
        except OSError:
            return False

    @property
    def destination(self) -> str:
        return str(self._root)

    def describe(self) -> dict[str, str]:
        return {"root": str(self._root)}
