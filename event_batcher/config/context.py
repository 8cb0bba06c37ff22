from typing import Any


class ModuleConfig:
    """Wrapper around parsed module arguments with typed access."""

    def __init__(self, args: dict[str, Any]) -> None:
        self._args = args

    def get(self, key: str, default: Any = None) -> Any:
        return self._args.get(key, default)

    def get_positive_int(self, key: str, default: int) -> int:
        """Integer argument that must be >= 1; raises ValueError otherwise."""
        raw = self._args.get(key, default)
        try:
            value = int(raw)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"--{key} must be a positive integer, got {raw!r}") from exc
        if isinstance(raw, float) and raw != value:
            raise ValueError(f"--{key} must be a positive integer, got {raw!r}")
        if value < 1:
            raise ValueError(f"--{key} must be a positive integer, got {raw!r}")
        return value

    def get_positive_float(self, key: str, default: float) -> float:
        raw = self._args.get(key, default)
        try:
            value = float(raw)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"--{key} must be a positive number, got {raw!r}") from exc
        if value <= 0:
            raise ValueError(f"--{key} must be a positive number, got {raw!r}")
        return value

    def __contains__(self, key: str) -> bool:
        return key in self._args

    def __repr__(self) -> str:
        return f"ModuleConfig({self._args})"
