"""``python -m event_batcher run <module> [global flags] [module args]``.

Global flags pick service implementations and environment; everything else
is checked against the module's ``module.json``. The module class is built
through the DI container, so its constructor type hints decide what it gets.
"""

from __future__ import annotations

import asyncio
import importlib
import json
import sys
from typing import Any

from event_batcher.cli.descriptor import ModuleDescriptor
from event_batcher.config.container import Container
from event_batcher.config.context import ModuleConfig
from event_batcher.config.env_loader import load_env_file
from event_batcher.modules.base import Module
from event_batcher.services.lifecycle.lifecycle_manager import LifecycleManager
from event_batcher.services.logger.factory import LoggerFactory
from event_batcher.services.metrics.interface import MetricsInterface
from event_batcher.services.metrics.noop_metrics import NoopMetrics
from event_batcher.services.registry import resolve_implementation, resolve_interface_type
from event_batcher.services.secrets.env_secrets import EnvSecrets
from event_batcher.services.secrets.interface import SecretsInterface

USAGE = "Usage: python -m event_batcher run <module_name> [flags] [module args]"

# Implementation flags and their defaults; None means "not registered unless asked for"
_IMPL_DEFAULTS: dict[str, str | None] = {
    "blob": "local",
    "metrics": None,
    "log": "pretty",
}
_ENV_FLAGS = ("env", "env-file")

_GLOBAL_HELP = [
    ("blob", "Blob store: memory, local, minio [default: local]"),
    ("metrics", "Metrics: noop, memory, prometheus [default: noop]"),
    ("log", "Logging format: pretty, json, memory [default: pretty]"),
    ("env", "JSON object of env var overrides"),
    ("env-file", "Environment file name (loads .env/<name>.env)"),
]

# Module types that get signal handling and the shutdown sequence
_SERVICE_TYPES = {"service"}


def _parse_env_json(raw: str) -> dict[str, str]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"--env value is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("--env value must be a JSON object")
    if not all(isinstance(k, str) and isinstance(v, str) for k, v in data.items()):
        raise ValueError("--env JSON must have string keys and string values")
    return data


def _extract_global_flags(args: list[str]) -> tuple[dict[str, str], dict[str, str], list[str]]:
    """Split global flags from module args.

    Returns (impl_flags, env_overrides, module_args). impl_flags already holds
    the defaults. ``--env`` values win over ``--env-file`` values.
    """
    impl_flags = {name: default for name, default in _IMPL_DEFAULTS.items() if default is not None}
    env_json: dict[str, str] = {}
    env_file: str | None = None
    module_args: list[str] = []
    log_given = False

    tokens = iter(args)
    for token in tokens:
        name = token[2:] if token.startswith("--") else None
        if name not in _IMPL_DEFAULTS and name not in _ENV_FLAGS:
            module_args.append(token)
            continue
        value = next(tokens, None)
        if value is None:
            raise ValueError(f"--{name} needs a value")
        if name == "env":
            env_json.update(_parse_env_json(value))
        elif name == "env-file":
            env_file = value
        else:
            impl_flags[name] = value
            log_given = log_given or name == "log"

    env_overrides = load_env_file(env_file) if env_file else {}
    env_overrides.update(env_json)

    if not log_given and env_overrides.get("LOG_IMPL"):
        impl_flags["log"] = env_overrides["LOG_IMPL"]

    return impl_flags, env_overrides, module_args


def _build_container(
    impl_flags: dict[str, str],
    env_overrides: dict[str, str],
    module_args: dict[str, Any],
) -> Container:
    container = Container()

    secrets = EnvSecrets(overrides=env_overrides)
    container.register_instance(SecretsInterface, secrets)
    container.register_instance(ModuleConfig, ModuleConfig(module_args))

    logger_factory = LoggerFactory(
        default_impl=impl_flags.get("log", "pretty"),
        level=secrets.get_or_default("LOG_LEVEL", "INFO"),
    )
    container.register_instance(LoggerFactory, logger_factory)
    container.register_instance(LifecycleManager, LifecycleManager(log=logger_factory.create()))

    for flag_name, impl_name in impl_flags.items():
        if flag_name == "log":
            continue
        instance = container.resolve(resolve_implementation(flag_name, impl_name))
        container.register_instance(resolve_interface_type(flag_name), instance)

    if not container.has(MetricsInterface):
        container.register_instance(MetricsInterface, NoopMetrics())

    return container


async def _run_service(module: Module, lifecycle: LifecycleManager) -> int:
    lifecycle.install_signal_handlers(loop=asyncio.get_running_loop())
    try:
        return await module.run()
    finally:
        await lifecycle.shutdown()


def run_module(argv: list[str]) -> tuple[int, Module | None]:
    """Testable entry point: parses args, builds container, runs module, returns (exit_code, module)."""
    if len(argv) < 2 or argv[0] != "run":
        raise ValueError(USAGE)

    descriptor = ModuleDescriptor.load(argv[1])
    rest = argv[2:]

    if "--help" in rest or "-h" in rest:
        print(descriptor.help_text(_GLOBAL_HELP))
        return (0, None)

    impl_flags, env_overrides, module_argv = _extract_global_flags(rest)
    container = _build_container(impl_flags, env_overrides, descriptor.parse_args(module_argv))

    dotted = f"event_batcher.modules.{descriptor.name}.main"
    module_class = getattr(importlib.import_module(dotted), "module_class", None)
    if module_class is None:
        raise AttributeError(f"Module '{dotted}' must define a 'module_class' attribute")
    module = container.resolve(module_class)

    if descriptor.type in _SERVICE_TYPES:
        exit_code = asyncio.run(_run_service(module, container.get(LifecycleManager)))
    else:
        exit_code = asyncio.run(module.run())
    return (exit_code, module)


def run_cli(argv: list[str] | None = None) -> None:
    try:
        exit_code, _ = run_module(sys.argv[1:] if argv is None else argv)
    except (ValueError, FileNotFoundError, KeyError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)
