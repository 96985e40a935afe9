"""Scoped configuration values and the application config loader."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from .io_utils import read_yaml
from .models import AppConfig, ScopedConfigValues

SCOPE_DEFAULT = "default"
SCOPE_STORE = "store"

XML_PATH_MODULE_OUTPUT_DISABLED = "advanced/modules_disable_output/Cms"

_FALSY = {"", "0", "false", "no", "off"}


def load_app_config(path: Path) -> AppConfig:
    """Load and validate config/app.yaml."""

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    try:
        payload = read_yaml(path)
        return AppConfig.model_validate(payload or {})
    except (yaml.YAMLError, ValidationError) as exc:
        raise SystemExit(f"Invalid config file {path}: {exc}") from exc


class ScopeConfig:
    """Read config values with store scope falling back to the default scope."""

    def __init__(self, values: ScopedConfigValues | None = None) -> None:
        self.values = values or ScopedConfigValues()

    @classmethod
    def from_config(cls, config: AppConfig) -> "ScopeConfig":
        return cls(config.config)

    def get_value(
        self,
        path: str,
        scope_type: str = SCOPE_DEFAULT,
        scope_code: str | int | None = None,
    ) -> Any:
        if scope_type == SCOPE_STORE and scope_code is not None:
            store_values: Dict[str, Any] = self.values.stores.get(str(scope_code), {})
            if path in store_values:
                return store_values[path]
        elif scope_type not in (SCOPE_DEFAULT, SCOPE_STORE):
            raise ValueError(f"Unknown scope type: {scope_type}")
        return self.values.default.get(path)

    def is_set_flag(
        self,
        path: str,
        scope_type: str = SCOPE_DEFAULT,
        scope_code: str | int | None = None,
    ) -> bool:
        value = self.get_value(path, scope_type, scope_code)
        if value is None:
            return False
        if isinstance(value, str):
            return value.strip().lower() not in _FALSY
        return bool(value)
