"""
entity-schema: declarative schemas that shape internal objects into output data.

An Entity declares which fields an object exposes and how each is produced:
renamed, defaulted, computed, conditionally included, coerced to a type,
formatted as a date, or delegated to a nested Entity.

Example:
    >>> from entity_schema import Entity
    >>> child = Entity({"id": int, "name": str})
    >>> user = Entity({
    ...     "name": str,
    ...     "age": {"type": "number", "default": 16},
    ...     "children": [child],
    ... })
    >>> user.parse({"name": "felix"})
    {'name': 'felix', 'age': 16, 'children': []}
    >>> user.pick("name: nickname").parse({"name": "felix"})
    {'nickname': 'felix'}
"""

from .config import EntityConfig, TypeDefaults, load_config
from .declarations import (
    ArrayOf,
    Computed,
    Declaration,
    EntityRef,
    Expose,
    Literal,
    Multi,
    NestedSchema,
    Options,
    TypeMarker,
    array_of,
    classify,
    computed,
    nested,
    options,
)
from .diagnostics import Diagnostic
from .entity import Entity, is_entity
from .exceptions import (
    CoercionError,
    ConfigError,
    EntityDefinitionError,
    EntityError,
    SelectionError,
    SelectorSyntaxError,
)
from .field_spec import FieldAct, FieldSpec
from .normalizer import coerce, format_date
from .selector import parse_selector

__version__ = "0.3.0"

__all__ = [
    # Core
    "Entity",
    "is_entity",
    "FieldSpec",
    "FieldAct",
    # Declarations
    "Declaration",
    "Expose",
    "Computed",
    "Multi",
    "Literal",
    "TypeMarker",
    "EntityRef",
    "NestedSchema",
    "Options",
    "ArrayOf",
    "classify",
    "options",
    "computed",
    "nested",
    "array_of",
    # Configuration
    "EntityConfig",
    "TypeDefaults",
    "load_config",
    # Collaborators
    "coerce",
    "format_date",
    "parse_selector",
    # Errors
    "Diagnostic",
    "EntityError",
    "EntityDefinitionError",
    "SelectionError",
    "SelectorSyntaxError",
    "CoercionError",
    "ConfigError",
]
