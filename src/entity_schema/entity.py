"""
Entity: a declarative schema that shapes raw objects into output dicts.

Example:
    >>> from entity_schema import Entity
    >>> profile = Entity({"city": str})
    >>> user = Entity({
    ...     "name": str,
    ...     "age": {"type": "number", "default": 16},
    ...     "sex": {"type": "string", "as": "gender"},
    ...     "profile": profile,
    ... })
    >>> user.parse({"name": "felix", "sex": "male", "profile": {"city": "SH", "zip": 1}})
    {'name': 'felix', 'age': 16, 'gender': 'male', 'profile': {'city': 'SH'}}

Options accepted by add()/expose() and by option mappings in a declaration:

- type: string, number, boolean, date, object, any (case ignored), a type
  marker such as ``str``, or a one-element list of either for arrays
- as: expose the source property under another name
- value: fixed literal value
- default: value used when the raw value is None
- format: ``iso`` or ``timestamp`` rendering for date values (type becomes string)
- if: ``(source, options, field_name) -> bool``; false omits the field
- using: nested Entity the value is evaluated against
- example: value used by to_example()
- get: compute function, same as passing a trailing callable

Option priority while parsing: if -> function/value -> default -> using.
"""

import logging
from collections.abc import Mapping, MutableMapping
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Optional

from .compiler import build_field_spec, compile_declaration, split_add_arguments
from .config import DEFAULT_CONFIG, EntityConfig
from .evaluator import evaluate
from .example import to_example as build_example
from .exceptions import EntityDefinitionError
from .field_spec import FieldSpec
from .projector import pick as pick_fields

logger = logging.getLogger(__name__)


class Entity:
    """
    Ordered mapping of output field names to FieldSpecs.

    add()/remove() mutate the entity and return it for chaining; clone(),
    extend(), safe_add() and pick() return new entities. clone() and
    extend() also work unbound: ``Entity.clone(entity)``.

    Subclasses may override get(), set() and is_array() to support special
    source objects.
    """

    def __init__(
        self,
        declaration: Optional[Mapping] = None,
        config: Optional[EntityConfig] = None,
    ):
        """
        Create an entity, optionally compiling a declaration mapping.

        Args:
            declaration: Field name -> declaration (shorthand or variant).
            config: Compile-time configuration; inherited by derived entities.

        Raises:
            EntityDefinitionError: If the declaration is invalid.
        """
        self.config = config if config is not None else DEFAULT_CONFIG
        self._mappings: Dict[str, FieldSpec] = {}
        self._keys: List[str] = []

        if declaration is None:
            return
        if not isinstance(declaration, Mapping):
            raise EntityDefinitionError(f"{declaration!r} is not a valid object")

        compile_declaration(self, declaration)

    @staticmethod
    def is_entity(obj: Any) -> bool:
        """Check whether ``obj`` is an Entity instance."""
        return isinstance(obj, Entity)

    @property
    def fields(self) -> List[str]:
        """Output field names in evaluation order."""
        return list(self._keys)

    @property
    def mappings(self) -> Mapping:
        """Read-only view of field name -> FieldSpec."""
        return MappingProxyType(self._mappings)

    def get_field(self, name: str) -> Optional[FieldSpec]:
        return self._mappings.get(name)

    def _set_field(self, name: str, spec: FieldSpec) -> None:
        self._mappings[name] = spec
        self._keys = list(self._mappings)

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __contains__(self, name: object) -> bool:
        return name in self._mappings

    def __repr__(self) -> str:
        return f"Entity(fields={self._keys!r})"

    # Accessor hooks

    def get(self, obj: Any, key: str) -> Any:
        """Read ``key`` from a source object: mapping item or attribute."""
        if isinstance(obj, Mapping):
            return obj.get(key)
        return getattr(obj, key, None)

    def set(self, obj: Any, key: str, value: Any) -> None:
        """Write ``key`` on a source object (used by the overwrite option)."""
        if isinstance(obj, MutableMapping):
            obj[key] = value
        elif not isinstance(obj, Mapping):
            setattr(obj, key, value)

    def is_array(self, obj: Any) -> bool:
        return isinstance(obj, (list, tuple))

    # Definition

    def add(self, *args: Any) -> "Entity":
        """
        Add fields, chainable.

        Args:
            *args: One or more field names, then an optional options mapping
                and/or a compute function ``fn(source, options, field_name)``.

        Returns:
            This entity.

        Raises:
            EntityDefinitionError: If names or options are invalid.

        Example:
            entity.add("name", {"type": "string", "as": "fullname"})
            entity.add("age", {"type": "number", "default": 0})
            entity.add("sex", {"type": "string", "value": "male"})
            entity.add("is_adult", {"type": "boolean"}, lambda obj, *_: obj["age"] >= 18)
            entity.add("activities", {"type": ["object"], "using": activity_entity})
        """
        fields, options, fn = split_add_arguments(args)
        for field in fields:
            key, spec = build_field_spec(field, options, fn, self.config)
            self._set_field(key, spec)
        return self

    expose = add

    def remove(self, *names: Any) -> "Entity":
        """Remove fields by name; unknown or non-string names are ignored."""
        for name in names:
            if isinstance(name, str):
                self._mappings.pop(name, None)
        self._keys = list(self._mappings)
        return self

    unexpose = remove

    def clone(self) -> "Entity":
        """Shallow copy: same FieldSpecs, independent field map."""
        if not isinstance(self, Entity):
            raise EntityDefinitionError("entity must be a valid Entity object")
        cloned = type(self)(config=self.config)
        cloned._mappings = dict(self._mappings)
        cloned._keys = list(self._keys)
        return cloned

    copy = clone

    def extend(self, declaration: Any = None) -> "Entity":
        """
        Clone this entity and compile ``declaration`` onto the clone.

        A declaration that is not a mapping is ignored.
        """
        extended = Entity.clone(self)
        if isinstance(declaration, Mapping):
            compile_declaration(extended, declaration)
        elif declaration is not None:
            logger.debug(f"Ignoring non-mapping extend declaration {declaration!r}")
        return extended

    def safe_add(self, *args: Any) -> "Entity":
        """Like add(), but on a clone; this entity is never mutated."""
        return self.clone().add(*args)

    safe_expose = safe_add

    def pick(self, selector: Any = None) -> "Entity":
        """New entity limited to the fields in ``selector`` (tree or text)."""
        return pick_fields(self, selector)

    # Evaluation

    def parse(
        self,
        data: Any,
        options: Any = None,
        converter: Optional[Callable[[Any, Dict[str, Any], str], Any]] = None,
    ) -> Any:
        """
        Shape ``data`` according to this entity.

        Args:
            data: Source object, list/tuple of them, or None.
            options: Dict of parse options, or the converter itself.

                - overwrite: write applied defaults back onto the source
                - fields: selection tree or selector text
                - on_diagnostic: callable receiving each Diagnostic
                - coerce: split comma-separated strings for list types

                Other keys are passed through to user functions.
            converter: ``(value, options, field_name) -> value`` applied to
                every field value before type coercion.

        Returns:
            Output dict, or list of dicts for list/tuple input.
        """
        if callable(options) and not isinstance(options, Mapping):
            converter, options = options, None
        return evaluate(self, data, options, converter)

    def to_example(self) -> Dict[str, Any]:
        """Representative output skeleton for documentation."""
        return build_example(self)


def is_entity(obj: Any) -> bool:
    """Check whether ``obj`` is an Entity instance."""
    return isinstance(obj, Entity)
