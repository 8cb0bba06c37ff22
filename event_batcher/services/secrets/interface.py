from abc import ABC, abstractmethod


class SecretsInterface(ABC):
    """Provides access to credentials and deployment settings (bucket, region, ...)."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Get a value by key. Returns None if not found."""
        ...

    @abstractmethod
    def get_or_default(self, key: str, default: str) -> str:
        """Get a value, returning default if not found or blank."""
        ...

    @abstractmethod
    def require(self, key: str) -> str:
        """Get a value, raising KeyError if not found."""
        ...

    def get_bool(self, key: str, default: bool) -> bool:
        raw = self.get(key)
        if raw is None or not raw.strip():
            return default
        return raw.strip().lower() in ("true", "1", "yes")

    def get_float(self, key: str, default: float) -> float:
        raw = self.get(key)
        if raw is None or not raw.strip():
            return default
        try:
            return float(raw)
        except ValueError as exc:
            raise ValueError(f"Setting '{key}' must be a number, got {raw!r}") from exc
