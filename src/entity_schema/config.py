"""
Compile-time configuration for entities.

An EntityConfig is passed explicitly to ``Entity(...)`` and inherited by every
entity derived from it (inline sub-schemas, clones, picks). It controls:

- types: per primitive tag implicit ``default`` and ``format``, applied to a
  field before its own explicit options (which always win).
- renames: declared field name -> canonical output name, skipped when a field
  carries an explicit ``as``.
- max_depth: nesting depth at which parse() stops descending into
  sub-entities (guards self-referencing schemas).

Configuration can be resolved from several sources with this precedence
(highest to lowest):
1. Keyword overrides passed to load_config()
2. Environment variables (ENTITY_SCHEMA_CONFIG, ENTITY_SCHEMA_MAX_DEPTH)
3. YAML file
4. Defaults

Example YAML:
    types:
      string:
        default: ""
      date:
        format: iso
    renames:
      _id: id
    max_depth: 32
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigError
from .field_spec import DATE_FORMATS, PRIMITIVE_TYPES

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64

ENV_CONFIG_PATH = "ENTITY_SCHEMA_CONFIG"
ENV_MAX_DEPTH = "ENTITY_SCHEMA_MAX_DEPTH"


class TypeDefaults(BaseModel):
    """Implicit options for every field of one primitive type."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    default: Any = Field(None, description="Implicit default value")
    format: Optional[str] = Field(None, description="Implicit date format")

    @field_validator("format")
    @classmethod
    def _check_format(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value.lower() not in DATE_FORMATS:
            raise ValueError(f"format must be one of {list(DATE_FORMATS)}, got {value!r}")
        return value

    def as_options(self) -> Dict[str, Any]:
        """Options explicitly set on this entry, ready to merge under field options."""
        return {key: getattr(self, key) for key in self.model_fields_set}


class EntityConfig(BaseModel):
    """
    Immutable configuration consulted while compiling entities.

    Attributes:
        types: Primitive tag -> TypeDefaults.
        renames: Declared field name -> canonical output name.
        max_depth: Maximum sub-entity nesting evaluated by parse().
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    types: Dict[str, TypeDefaults] = Field(default_factory=dict)
    renames: Dict[str, str] = Field(default_factory=dict)
    max_depth: int = Field(DEFAULT_MAX_DEPTH, ge=1)

    @field_validator("types")
    @classmethod
    def _check_type_keys(cls, value: Dict[str, TypeDefaults]) -> Dict[str, TypeDefaults]:
        unknown = [key for key in value if key not in PRIMITIVE_TYPES]
        if unknown:
            raise ValueError(
                f"Unknown type(s) {unknown}. Must be one of: {', '.join(PRIMITIVE_TYPES)}"
            )
        return value

    @classmethod
    def from_yaml(cls, yaml_dict: Optional[Dict[str, Any]]) -> "EntityConfig":
        """
        Build a config from a parsed YAML mapping.

        Args:
            yaml_dict: Mapping with optional ``types``, ``renames`` and ``max_depth``.

        Returns:
            EntityConfig instance.

        Raises:
            ConfigError: If the mapping does not describe a valid config.
        """
        if not yaml_dict:
            return cls()
        if not isinstance(yaml_dict, dict):
            raise ConfigError(f"Entity config must be a mapping, got {type(yaml_dict).__name__}")
        try:
            return cls.model_validate(yaml_dict)
        except ValidationError as e:
            raise ConfigError(f"Invalid entity config: {e}") from e

    def type_options(self, type_tag: str) -> Dict[str, Any]:
        """Implicit options for ``type_tag`` (empty when not configured)."""
        entry = self.types.get(type_tag)
        return entry.as_options() if entry is not None else {}

    def type_default(self, type_tag: str) -> Any:
        entry = self.types.get(type_tag)
        return entry.default if entry is not None else None


DEFAULT_CONFIG = EntityConfig()


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read entity config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in entity config {path}: {e}") from e


def load_config(path: Optional[str] = None, **overrides: Any) -> EntityConfig:
    """
    Resolve an EntityConfig from a YAML file, the environment and overrides.

    Args:
        path: YAML file to read. Falls back to $ENTITY_SCHEMA_CONFIG.
        **overrides: Top-level keys (types, renames, max_depth) that win over
            every other source. None values are ignored.

    Returns:
        Resolved EntityConfig.

    Raises:
        ConfigError: If the file cannot be read or the result is invalid.
    """
    settings: Dict[str, Any] = {}

    config_path = path or os.getenv(ENV_CONFIG_PATH)
    if config_path:
        file_settings = _read_yaml(Path(config_path))
        if not isinstance(file_settings, dict):
            raise ConfigError(f"Entity config {config_path} must contain a mapping")
        settings.update(file_settings)

    env_depth = os.getenv(ENV_MAX_DEPTH)
    if env_depth:
        try:
            settings["max_depth"] = int(env_depth)
        except ValueError as e:
            raise ConfigError(f"{ENV_MAX_DEPTH} must be an integer, got {env_depth!r}") from e

    for key, value in overrides.items():
        if value is not None:
            settings[key] = value

    config = EntityConfig.from_yaml(settings)
    logger.debug(
        f"Entity config resolved: types={sorted(config.types)}, "
        f"renames={len(config.renames)}, max_depth={config.max_depth}"
    )
    return config
