import inspect
from typing import Any, TypeVar, get_type_hints

T = TypeVar("T")


class Container:
    """Holds one shared instance per type and builds classes from them.

    ``resolve(cls)`` reads the constructor's type hints and passes the
    registered instance for each. A parameter whose type is not registered
    keeps its default if it has one; otherwise resolving fails.
    """

    def __init__(self) -> None:
        self._registry: dict[type, Any] = {}

    def register_instance(self, type_key: type, instance: Any) -> None:
        self._registry[type_key] = instance

    def has(self, type_key: type) -> bool:
        return type_key in self._registry

    def get(self, type_key: type[T]) -> T:
        try:
            return self._registry[type_key]
        except KeyError:
            raise KeyError(f"No registration found for type {type_key.__name__!r}") from None

    def resolve(self, cls: type[T]) -> T:
        init = cls.__init__
        try:
            hints = get_type_hints(init)
        except Exception as exc:
            raise TypeError(f"Cannot read type hints for {cls.__name__}.__init__: {exc}") from exc

        kwargs: dict[str, Any] = {}
        params = list(inspect.signature(init).parameters.values())[1:]
        for param in params:
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            if param.name not in hints:
                raise TypeError(f"Parameter '{param.name}' of {cls.__name__}.__init__ has no type hint")
            hint = hints[param.name]
            if self.has(hint):
                kwargs[param.name] = self._registry[hint]
            elif param.default is param.empty:
                raise TypeError(
                    f"No registration found for type {getattr(hint, '__name__', hint)!r} "
                    f"(parameter '{param.name}' of {cls.__name__}.__init__)"
                )
        return cls(**kwargs)
