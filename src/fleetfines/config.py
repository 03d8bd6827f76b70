"""Store configuration for fleetfines."""

from __future__ import annotations

import dataclasses
import os
import re
from pathlib import Path
from typing import Any

from fleetfines._constants import CODE_LOOKUP_MIN_LENGTH, DEFAULT_KEY_PREFIX, SAFE_KEY_PATTERN
from fleetfines.exceptions import FleetConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on", "sim"}:
        return True
    if normalized in {"0", "false", "no", "n", "off", "nao", "não"}:
        return False
    return default


def _env_int(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise FleetConfigError(f"{name} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class FleetConfig:
    """Store configuration.

    Parameters
    ----------
    storage_dir : Path or None
        Directory holding one JSON file per collection. ``None`` keeps
        everything in memory.
    key_prefix : str
        Namespace prepended to every collection key so the collections
        cannot collide with unrelated data sharing the same backend.
    code_lookup_min_length : int
        Minimum length a fine's infraction code must reach before it is
        looked up in the Detran base.
    enforce_unique_on_update : bool
        When true, ``update_by_id`` refuses updates that would duplicate
        another record's unique field.
    """

    storage_dir: Path | None = None
    key_prefix: str = DEFAULT_KEY_PREFIX
    code_lookup_min_length: int = CODE_LOOKUP_MIN_LENGTH
    enforce_unique_on_update: bool = False

    def __post_init__(self) -> None:
        if not self.key_prefix:
            raise FleetConfigError("key_prefix must be non-empty")
        if not re.fullmatch(SAFE_KEY_PATTERN, self.key_prefix):
            raise FleetConfigError(
                f"key_prefix may only contain letters, digits, '_', '.' and '-', got {self.key_prefix!r}"
            )
        if self.code_lookup_min_length < 1:
            raise FleetConfigError("code_lookup_min_length must be at least 1")

    def storage_key(self, collection: str) -> str:
        """Namespaced backend key for *collection*."""
        return f"{self.key_prefix}{collection}"

    @classmethod
    def from_env(cls, **overrides: Any) -> FleetConfig:
        """Create configuration from ``FLEET_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        storage_dir = env.get("FLEET_STORAGE_DIR")
        if storage_dir:
            config_kwargs["storage_dir"] = Path(storage_dir).expanduser()

        prefix = env.get("FLEET_KEY_PREFIX")
        if prefix is not None:
            config_kwargs["key_prefix"] = prefix

        min_length = env.get("FLEET_CODE_LOOKUP_MIN_LENGTH")
        if min_length is not None and "code_lookup_min_length" not in overrides:
            config_kwargs["code_lookup_min_length"] = _env_int("FLEET_CODE_LOOKUP_MIN_LENGTH", min_length)

        if "enforce_unique_on_update" not in overrides:
            config_kwargs["enforce_unique_on_update"] = _env_bool(
                env.get("FLEET_ENFORCE_UNIQUE_ON_UPDATE"),
                False,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
