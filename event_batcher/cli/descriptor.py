"""Typed view of a module's ``module.json``.

A descriptor names the module, says whether it is a long-running service,
and declares the ``--flag value`` arguments it accepts::

    {"name": "batching_server", "type": "service",
     "args": [{"name": "batch-size", "type": "integer", "default": 100}]}
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

MODULES_DIR = Path(__file__).resolve().parent.parent / "modules"

_CASTS = {
    "string": str,
    "integer": int,
    "float": float,
    "boolean": lambda raw: raw.lower() in ("true", "1", "yes"),
}

_NO_DEFAULT = object()


@dataclass(frozen=True)
class ArgSpec:
    name: str
    description: str = ""
    type: str = "string"
    default: Any = _NO_DEFAULT
    required: bool = False
    choices: tuple[Any, ...] = ()

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> ArgSpec:
        kind = raw.get("type", "string")
        if kind not in _CASTS:
            raise ValueError(f"Argument --{raw['name']} has unsupported type '{kind}'")
        return cls(
            name=raw["name"],
            description=raw.get("description", ""),
            type=kind,
            default=raw.get("default", _NO_DEFAULT),
            required=raw.get("required", False),
            choices=tuple(raw.get("choices", ())),
        )

    @property
    def has_default(self) -> bool:
        return self.default is not _NO_DEFAULT

    def cast(self, raw: str) -> Any:
        try:
            value = _CASTS[self.type](raw)
        except ValueError:
            raise ValueError(f"Invalid value for --{self.name}: '{raw}' (expected {self.type})") from None
        if self.choices and value not in self.choices:
            options = ", ".join(str(c) for c in self.choices)
            raise ValueError(f"Invalid value for --{self.name}: '{raw}' (choices: {options})")
        return value


@dataclass(frozen=True)
class ModuleDescriptor:
    name: str
    display_name: str
    description: str
    version: str = ""
    type: str = "job"
    args: tuple[ArgSpec, ...] = field(default_factory=tuple)

    @classmethod
    def load(cls, module_name: str, modules_dir: Path = MODULES_DIR) -> ModuleDescriptor:
        path = modules_dir / module_name / "module.json"
        if not path.exists():
            raise FileNotFoundError(f"module '{module_name}' not found at {path}")
        raw = json.loads(path.read_text())
        return cls(
            name=raw["name"],
            display_name=raw.get("display_name", raw["name"]),
            description=raw.get("description", ""),
            version=raw.get("version", ""),
            type=raw.get("type", "job"),
            args=tuple(ArgSpec.from_json(a) for a in raw.get("args", [])),
        )

    def parse_args(self, raw_args: list[str]) -> dict[str, Any]:
        """Turn ``--name value`` pairs into a dict of typed values, defaults filled in.

        A flag with no value following it is read as boolean ``true``. All
        problems are collected and raised together as one ValueError.
        """
        by_name = {arg.name: arg for arg in self.args}
        given: dict[str, str] = {}
        rest = list(raw_args)
        while rest:
            token = rest.pop(0)
            if not token.startswith("--"):
                raise ValueError(f"Unexpected argument: '{token}'")
            name = token[2:]
            if name not in by_name:
                raise ValueError(f"Unknown argument: --{name}")
            given[name] = rest.pop(0) if rest and not rest[0].startswith("--") else "true"

        values: dict[str, Any] = {}
        problems: list[str] = []
        for arg in self.args:
            if arg.name in given:
                try:
                    values[arg.name] = arg.cast(given[arg.name])
                except ValueError as exc:
                    problems.append(str(exc))
            elif arg.has_default:
                values[arg.name] = arg.default
            elif arg.required:
                problems.append(f"Missing required argument: --{arg.name}")

        if problems:
            raise ValueError("; ".join(problems))
        return values

    def help_text(self, global_flags: list[tuple[str, str]]) -> str:
        title = f"{self.display_name} v{self.version}" if self.version else self.display_name
        lines = ["", f"  {title}", f"  {self.description}", "", f"  Type: {self.type}", ""]
        if self.args:
            lines.append("  Module arguments:")
            for arg in self.args:
                suffix = " (required)" if arg.required else ""
                if arg.has_default:
                    suffix += f" [default: {arg.default}]"
                lines.append(f"    --{arg.name:20s} {arg.description}{suffix}")
            lines.append("")
        lines.append("  Global flags:")
        lines.extend(f"    --{flag:20s} {text}" for flag, text in global_flags)
        lines.append("")
        return "\n".join(lines)
