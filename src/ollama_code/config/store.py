from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from .models import APP_NAME, DEFAULT_CONFIG, PROJECT_CONFIG_NAME, Scope

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    pass


def global_config_path() -> Path:
    return Path(user_config_dir(APP_NAME)) / "config.json"


def _load_json(p: Path) -> dict[str, Any]:
    if not p.exists():
        return {}
    try:
        obj = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"Cannot read config file {p}: {e}") from e
    if not isinstance(obj, dict):
        raise ConfigError(f"Config file {p} must contain a JSON object")
    return obj


class ConfigStore:
    """Two-tier JSON settings: global (user-wide) and project (per directory).

    Reads without an explicit scope merge project over global over defaults.
    Writes default to the project tier.
    """

    def __init__(self, global_path: Path, project_path: Path):
        self.global_path = global_path
        self.project_path = project_path

    @staticmethod
    def open(cwd: Path) -> "ConfigStore":
        store = ConfigStore(global_path=global_config_path(), project_path=cwd / PROJECT_CONFIG_NAME)
        if not store.global_path.exists():
            store._write("global", copy.deepcopy(DEFAULT_CONFIG))
        return store

    def _path(self, scope: Scope) -> Path:
        if scope == "global":
            return self.global_path
        if scope == "project":
            return self.project_path
        raise ConfigError(f"Unknown config scope: {scope}")

    def _read(self, scope: Scope) -> dict[str, Any]:
        data = _load_json(self._path(scope))
        if scope == "global":
            merged = copy.deepcopy(DEFAULT_CONFIG)
            merged.update(data)
            return merged
        return data

    def _write(self, scope: Scope, data: dict[str, Any]) -> None:
        p = self._path(scope)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
        logger.debug("Wrote %s config to %s", scope, p)

    def list(self, scope: Scope | None = None) -> dict[str, Any]:
        if scope is not None:
            return self._read(scope)
        merged = self._read("global")
        merged.update(self._read("project"))
        return merged

    def get(self, key: str, scope: Scope | None = None) -> Any:
        return self.list(scope).get(key)

    def set(self, key: str, value: Any, scope: Scope = "project") -> None:
        data = _load_json(self._path(scope))
        data[key] = value
        self._write(scope, data)

    def _list_value(self, data: dict[str, Any], key: str, scope: Scope) -> list[Any]:
        current = data.get(key)
        if current is None and scope == "global":
            current = copy.deepcopy(DEFAULT_CONFIG.get(key))
        if current is None:
            return []
        if not isinstance(current, list):
            raise ConfigError(f"Config key {key} is not a list")
        return current

    def append_to_list(self, key: str, value: Any, scope: Scope = "project") -> None:
        data = _load_json(self._path(scope))
        current = self._list_value(data, key, scope)
        if value in current:
            return
        data[key] = [*current, value]
        self._write(scope, data)

    def remove_from_list(self, key: str, value: Any, scope: Scope = "project") -> None:
        data = _load_json(self._path(scope))
        current = self._list_value(data, key, scope)
        data[key] = [item for item in current if item != value]
        self._write(scope, data)
