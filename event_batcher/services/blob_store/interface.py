from abc import ABC, abstractmethod


class BlobStoreInterface(ABC):
    """Key-addressed object storage used as the flush destination.

    Implementations perform a single attempt per call and raise on failure;
    retry policy belongs to the caller.
    """

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        """Store *data* under *key*, replacing any existing object. Raises on failure."""
        ...

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Return the object body. Raises FileNotFoundError if missing."""
        ...

    @abstractmethod
    def list(self, prefix: str) -> list[str]:
        """List all keys under the given prefix, sorted."""
        ...

    @abstractmethod
    def exists(self, key: str) -> bool: ...

    @abstractmethod
    def health_check(self) -> bool: ...

    @property
    @abstractmethod
    def destination(self) -> str:
        """Short destination identity reported with flush results (bucket, root dir)."""
        ...

    def describe(self) -> dict[str, str]:
        """Destination details for the status endpoint."""
        return {"bucket": self.destination}
