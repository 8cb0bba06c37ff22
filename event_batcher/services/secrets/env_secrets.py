from __future__ import annotations

import os

from event_batcher.services.secrets.interface import SecretsInterface


class EnvSecrets(SecretsInterface):
    """Reads settings from environment variables with optional overrides.

    Overrides come from ``--env`` JSON and ``--env-file`` on the command line
    and take precedence over the process environment.
    """

    def __init__(self, overrides: dict[str, str] | None = None) -> None:
        self._env = dict(os.environ)
        if overrides:
            self._env.update(overrides)

    def get(self, key: str) -> str | None:
        return self._env.get(key)

    def get_or_default(self, key: str, default: str) -> str:
        value = self._env.get(key)
        # An exported-but-empty variable counts as unset
        if value is None or not value.strip():
            return default
        return value

    def require(self, key: str) -> str:
        value = self._env.get(key)
        if value is None or not value.strip():
            raise KeyError(f"Required secret '{key}' is not set")
        return value
