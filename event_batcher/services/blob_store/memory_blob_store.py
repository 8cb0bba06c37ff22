from event_batcher.services.blob_store.interface import BlobStoreInterface


class MemoryBlobStore(BlobStoreInterface):
    """In-memory blob store for unit testing.

    Set ``fail_with`` to an exception instance to make every ``put`` raise it,
    simulating an unreachable or rejecting object store.
    """

    def __init__(self) -> None:
        self._objects: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.put_attempts: list[str] = []
        self.fail_with: Exception | None = None

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        self.put_attempts.append(key)
        if self.fail_with is not None:
            raise self.fail_with
        self._objects[key] = bytes(data)
        self.content_types[key] = content_type

    def get(self, key: str) -> bytes:
        if key not in self._objects:
            raise FileNotFoundError(f"Object not found: {key}")
        return self._objects[key]

    def list(self, prefix: str) -> list[str]:
        return sorted(k for k in self._objects if k.startswith(prefix))

    def exists(self, key: str) -> bool:
        return key in self._objects

    def health_check(self) -> bool:
        return self.fail_with is None

    @property
    def destination(self) -> str:
        return "memory"
