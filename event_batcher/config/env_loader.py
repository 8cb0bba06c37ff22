"""``.env/<name>.env`` files for ``--env-file``.

One ``KEY=VALUE`` per line. ``#`` comment lines, blank lines and lines
without ``=`` are skipped, a leading ``export`` is allowed so the same file
can be sourced by a shell, and one pair of matching quotes around the value
is removed. Everything after the first ``=`` is the value, so inline ``#``
stays part of it.
"""

import re
from pathlib import Path

# Repository root, above the event_batcher package
_PROJECT_ROOT = Path(__file__).resolve().parents[2]

_ASSIGNMENT = re.compile(r"^(?:export\s+)?(?P<key>[^=\s]+)\s*=\s*(?P<value>.*)$")
_QUOTED = re.compile(r"""^(?P<q>["'])(?P<inner>.*)(?P=q)$""")


def load_env_file(env_name: str = "local", project_root: Path | None = None) -> dict[str, str]:
    """Settings from ``<root>/.env/<env_name>.env``; empty when the file does not exist."""
    path = (project_root or _PROJECT_ROOT) / ".env" / f"{env_name}.env"
    if not path.is_file():
        return {}
    values: dict[str, str] = {}
    for raw in path.read_text().splitlines():
        line = raw.strip()
        if line.startswith("#"):
            continue
        match = _ASSIGNMENT.match(line)
        if match is None:
            continue
        value = match["value"].strip()
        quoted = _QUOTED.match(value)
        values[match["key"]] = quoted["inner"] if quoted else value
    return values
