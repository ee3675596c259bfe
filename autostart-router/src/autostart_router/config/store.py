"""File-backed configuration store.

A `ConfigStore` is constructed explicitly and handed to whoever needs it;
there is no module-level instance. The lifecycle is `open()` -> reads and
writes -> `close()`, which flushes pending changes. Both YAML and JSON files
are accepted; the top level must be an object that validates against
`schemas/router_config.schema.json`.
"""

from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from jsonschema import Draft202012Validator

ENV_SERIAL = "AUTOSTART_ROUTER_SERIAL"
ENV_ADB_PATH = "AUTOSTART_ROUTER_ADB"

_SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "router_config.schema.json"


class ConfigStoreError(RuntimeError):
    pass


@dataclass(frozen=True)
class RouterConfig:
    package_name: Optional[str]
    adb_path: str = "adb"
    serial: Optional[str] = None
    timeout_s: float = 15.0
    debug: bool = False


def load_schema(schema_path: Path = _SCHEMA_PATH) -> Dict[str, Any]:
    schema = json.loads(schema_path.read_text(encoding="utf-8"))
    if not isinstance(schema, dict):
        raise ConfigStoreError(f"Schema must be an object: {schema_path}")
    return schema


def load_yaml_or_json(path: Path) -> Dict[str, Any]:
    """Load a YAML/JSON file into a dict.

    An empty YAML file is an empty object; any other non-object top level is
    rejected.
    """
    if path.suffix.lower() in {".yaml", ".yml"}:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        if data is None:
            data = {}
    elif path.suffix.lower() == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
    else:
        raise ConfigStoreError(f"Unsupported config file extension: {path}")

    if not isinstance(data, dict):
        raise ConfigStoreError(f"Top-level config must be an object: {path}")
    return data


def validate_against_schema(
    instance: Mapping[str, Any],
    schema: Dict[str, Any],
    *,
    where: str,
) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(dict(instance)), key=lambda e: list(e.path))
    if errors:
        msgs = []
        for e in errors[:20]:
            loc = "/".join([str(p) for p in e.path])
            msgs.append(f"- {where}:{loc}: {e.message}")
        if len(errors) > 20:
            msgs.append(f"... ({len(errors)-20} more)")
        raise ConfigStoreError("\n".join(msgs))


class ConfigStore:
    def __init__(self, path: Optional[Path] = None, *, schema: Optional[Dict[str, Any]] = None):
        self._path = Path(path) if path is not None else None
        self._schema = schema if schema is not None else load_schema()
        self._data: Dict[str, Any] = {}
        self._dirty = False
        self._state = "new"

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._state == "open"

    def open(self) -> "ConfigStore":
        if self._state == "open":
            return self
        if self._state == "closed":
            raise ConfigStoreError("config store was closed; construct a new one")

        data: Dict[str, Any] = {}
        if self._path is not None and self._path.exists():
            data = load_yaml_or_json(self._path)
        validate_against_schema(data, self._schema, where=str(self._path or "<memory>"))
        self._data = data
        self._dirty = False
        self._state = "open"
        return self

    def close(self) -> None:
        if self._state != "open":
            self._state = "closed"
            return
        try:
            if self._dirty and self._path is not None:
                self._write(self._path)
        finally:
            self._state = "closed"
            self._data = {}

    def __enter__(self) -> "ConfigStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require_open(self) -> None:
        if self._state != "open":
            raise ConfigStoreError(f"config store is not open (state={self._state})")

    def _write(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix.lower() == ".json":
            text = json.dumps(self._data, indent=2, ensure_ascii=False) + "\n"
        else:
            text = yaml.safe_dump(self._data, sort_keys=False, allow_unicode=True)
        path.write_text(text, encoding="utf-8")

    def get(self, key: str, default: Any = None) -> Any:
        self._require_open()
        return copy.deepcopy(self._data.get(key, default))

    def set(self, key: str, value: Any) -> None:
        self._require_open()
        candidate = dict(self._data)
        candidate[key] = value
        validate_against_schema(candidate, self._schema, where=key)
        self._data = candidate
        self._dirty = True

    def remove(self, key: str) -> bool:
        self._require_open()
        if key not in self._data:
            return False
        del self._data[key]
        self._dirty = True
        return True

    def as_dict(self) -> Dict[str, Any]:
        self._require_open()
        return copy.deepcopy(self._data)

    def load_config(
        self,
        *,
        environ: Optional[Mapping[str, str]] = None,
        require_package: bool = True,
        **overrides: Any,
    ) -> RouterConfig:
        """Resolve a RouterConfig: overrides > environment > file > defaults.

        Overrides whose value is None are ignored.
        """

        self._require_open()
        env = os.environ if environ is None else environ

        merged: Dict[str, Any] = dict(self._data)
        if env.get(ENV_SERIAL):
            merged["serial"] = env[ENV_SERIAL]
        if env.get(ENV_ADB_PATH):
            merged["adb_path"] = env[ENV_ADB_PATH]
        for key, value in overrides.items():
            if value is not None:
                merged[key] = value

        validate_against_schema(merged, self._schema, where="config")
        if require_package and not merged.get("package_name"):
            raise ConfigStoreError(
                "package_name is required (set it in the config file or pass --package)"
            )

        return RouterConfig(
            package_name=merged.get("package_name") or None,
            adb_path=str(merged.get("adb_path") or "adb"),
            serial=merged.get("serial") or None,
            timeout_s=float(merged.get("timeout_s", 15.0)),
            debug=bool(merged.get("debug", False)),
        )
