from __future__ import annotations

import importlib
import json
import re
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..errors import CSVImporterError
from ..models.column_definition import AttributeName, ColumnDefinition
from ..models.config_models import ImporterConfig

"""Config loader: YAML importer definitions -> ImporterConfig.

Responsibilities:
- Load YAML (``yaml.safe_load``)
- Validate against importer_schema.json (jsonschema)
- Resolve ``"package.module:name"`` references (model, transforms, hooks, derived identifiers)
- Build the immutable ImporterConfig, applying keyword overrides last

Example::

    model: myapp.models:User
    columns:
      - name: email
        required: true
        to: myapp.transforms:downcase
      - name: first_name
        to: f_name
        as: ["First Name", {regex: "pr(é|e)nom", ignore_case: true}]
    identifiers: [email]
    when_invalid: skip
    sql_transaction: each_row
"""

__all__ = [
    "ConfigError",
    "SCHEMA_PATH",
    "load_config",
    "parse_config",
    "resolve_import_path",
]

SCHEMA_PATH = Path(__file__).with_name("importer_schema.json")

_IMPORT_PATH = re.compile(r"^[A-Za-z_][\w.]*:[A-Za-z_][\w.]*$")


class ConfigError(CSVImporterError):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the packaged JSON schema.

    Raises:
        ConfigError: schema file missing or not valid JSON, or ``data`` violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigError(f"config validation failed at {location}: {e.message}") from e


def resolve_import_path(path: str) -> Any:
    """Import ``"package.module:attr.sub"`` and return the referenced object."""
    module_name, _, qualname = path.partition(":")
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"cannot import module '{module_name}' for '{path}': {e}") from e
    for part in qualname.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ConfigError(f"'{module_name}' has no attribute '{qualname}'") from e
    return obj


def _query(raw: Any) -> Any:
    if isinstance(raw, list):
        return [_query(item) for item in raw]
    if isinstance(raw, dict) and "attribute" in raw:
        return AttributeName(raw["attribute"])
    if isinstance(raw, dict):
        flags = re.IGNORECASE if raw.get("ignore_case") else 0
        try:
            return re.compile(raw["regex"], flags)
        except re.error as e:
            raise ConfigError(f"invalid regex {raw['regex']!r}: {e}") from e
    return raw


def _transform(raw: str | None) -> Any:
    if raw is not None and _IMPORT_PATH.match(raw):
        return resolve_import_path(raw)
    return raw


def _identifiers(raw: Any) -> Any:
    if isinstance(raw, str) and _IMPORT_PATH.match(raw):
        return resolve_import_path(raw)
    return raw


def parse_config(data: dict[str, Any], **overrides: Any) -> ImporterConfig:
    """Build an ImporterConfig from already-loaded config data."""
    _validate_config_schema(data)

    try:
        columns = [
            ColumnDefinition(
                name=col["name"],
                to=_transform(col.get("to")),
                as_=_query(col["as"]) if "as" in col else None,
                required=col.get("required", False),
            )
            for col in data["columns"]
        ]
        config = ImporterConfig(
            model=resolve_import_path(data["model"]),
            column_definitions=tuple(columns),
            identifiers=_identifiers(data.get("identifiers")),
            when_invalid=data.get("when_invalid", "skip"),
            sql_transaction=data.get("sql_transaction", "none"),
            after_build=tuple(resolve_import_path(p) for p in data.get("after_build", [])),
            after_save=tuple(resolve_import_path(p) for p in data.get("after_save", [])),
        )
    except ConfigError:
        raise
    except CSVImporterError as e:
        raise ConfigError(str(e)) from e
    return config.merge(**overrides)


def load_config(path: Path, **overrides: Any) -> ImporterConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")
    return parse_config(data, **overrides)
