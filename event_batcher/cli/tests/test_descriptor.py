import json
from pathlib import Path

import pytest

from event_batcher.cli.descriptor import ModuleDescriptor


def _write_module(root: Path, args: list[dict]) -> Path:
    module_dir = root / "demo"
    module_dir.mkdir()
    (module_dir / "module.json").write_text(json.dumps({
        "name": "demo",
        "display_name": "Demo",
        "description": "Demo module",
        "type": "job",
        "args": args,
    }))
    return root


def test_boolean_flag_without_value(tmp_path: Path):
    root = _write_module(tmp_path, [{"name": "dry-run", "type": "boolean", "default": False}])
    desc = ModuleDescriptor.load("demo", modules_dir=root)
    assert desc.parse_args(["--dry-run"]) == {"dry-run": True}
    assert desc.parse_args([]) == {"dry-run": False}


def test_choices_enforced(tmp_path: Path):
    root = _write_module(tmp_path, [{"name": "mode", "choices": ["a", "b"], "default": "a"}])
    desc = ModuleDescriptor.load("demo", modules_dir=root)
    assert desc.parse_args(["--mode", "b"]) == {"mode": "b"}
    with pytest.raises(ValueError, match="choices: a, b"):
        desc.parse_args(["--mode", "c"])


def test_problems_are_reported_together(tmp_path: Path):
    root = _write_module(tmp_path, [
        {"name": "bucket", "required": True},
        {"name": "count", "type": "integer", "default": 1},
    ])
    desc = ModuleDescriptor.load("demo", modules_dir=root)
    with pytest.raises(ValueError) as exc_info:
        desc.parse_args(["--count", "many"])
    message = str(exc_info.value)
    assert "Invalid value for --count: 'many' (expected integer)" in message
    assert "Missing required argument: --bucket" in message


def test_positional_argument_rejected(tmp_path: Path):
    desc = ModuleDescriptor.load("demo", modules_dir=_write_module(tmp_path, []))
    with pytest.raises(ValueError, match="Unexpected argument"):
        desc.parse_args(["stray"])


def test_unsupported_arg_type(tmp_path: Path):
    root = _write_module(tmp_path, [{"name": "when", "type": "date"}])
    with pytest.raises(ValueError, match="unsupported type 'date'"):
        ModuleDescriptor.load("demo", modules_dir=root)


def test_help_text_lists_args_and_flags(tmp_path: Path):
    root = _write_module(tmp_path, [{"name": "count", "type": "integer", "default": 3, "description": "How many"}])
    text = ModuleDescriptor.load("demo", modules_dir=root).help_text([("log", "Logging format")])
    assert "Demo" in text
    assert "How many [default: 3]" in text
    assert "--log" in text
