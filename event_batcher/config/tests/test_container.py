import pytest

from event_batcher.config.container import Container


class Clock:
    pass


class Tracer:
    pass


class Standalone:
    def __init__(self) -> None:
        self.value = 42


class NeedsClock:
    def __init__(self, dep: Clock) -> None:
        self.clock = dep


class OptionalTracer:
    def __init__(self, dep: Clock, other: Tracer | None = None) -> None:
        self.clock = dep
        self.tracer = other


class Untyped:
    def __init__(self, dep) -> None:  # noqa: ANN001
        self.clock = dep


def test_resolve_injected_instance():
    container = Container()
    dep = Clock()
    container.register_instance(Clock, dep)
    obj = container.resolve(NeedsClock)
    assert obj.clock is dep


def test_resolve_no_dependencies():
    assert Container().resolve(Standalone).value == 42


def test_unregistered_parameter_with_default_uses_default():
    container = Container()
    container.register_instance(Clock, Clock())
    obj = container.resolve(OptionalTracer)
    assert obj.tracer is None


def test_raises_on_missing_registration():
    with pytest.raises(TypeError, match="No registration found for type 'Clock'"):
        Container().resolve(NeedsClock)


def test_raises_on_missing_type_hint():
    with pytest.raises(TypeError, match="has no type hint"):
        Container().resolve(Untyped)


def test_get_and_has():
    container = Container()
    assert container.has(Clock) is False
    with pytest.raises(KeyError, match="Clock"):
        container.get(Clock)
    dep = Clock()
    container.register_instance(Clock, dep)
    assert container.has(Clock) is True
    assert container.get(Clock) is dep
