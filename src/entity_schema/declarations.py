"""
Declaration variants for entity fields.

A raw declaration such as ``String``-like markers, literals, option dicts or
inline sub-schemas is first classified into one of the variants below, then
compiled into FieldSpecs by the compiler. Callers can pass variants directly
to skip shape inference:

    Entity({
        "name": options(type="string", as_="full_name"),
        "is_adult": computed(lambda obj, *_: obj["age"] >= 18, type="boolean"),
        "friends": array_of(nested({"name": str})),
    })

classify() applies the shorthand rules in this order:

1. list/tuple of 2+ items         -> Multi
2. one-element list/tuple         -> ArrayOf(classify(item))
3. ``True``                       -> Expose
4. str/int/float/bool/date value  -> Literal
5. str/int/float/bool/datetime    -> TypeMarker
6. any other callable             -> Computed
7. Entity instance                -> EntityRef
8. inline sub-schema mapping      -> NestedSchema
9. options mapping                -> Options
"""

import datetime
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Tuple

from .exceptions import EntityDefinitionError
from .field_spec import guess_type


class Declaration:
    """Base class of all declaration variants."""

    pass


@dataclass(frozen=True)
class Expose(Declaration):
    """Expose the source property as-is, any type."""

    pass


@dataclass(frozen=True)
class Computed(Declaration):
    """Compute the value with ``fn(source, options, field_name)``."""

    fn: Callable[..., Any]
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Multi(Declaration):
    """Arguments forwarded to ``Entity.add(name, *args)``."""

    args: Tuple[Any, ...]


@dataclass(frozen=True)
class Literal(Declaration):
    """A primitive literal: its kind is the type, the literal is the default."""

    value: Any


@dataclass(frozen=True)
class TypeMarker(Declaration):
    """Type only, no default."""

    type: str


@dataclass(frozen=True)
class EntityRef(Declaration):
    """An object field evaluated against an existing Entity."""

    entity: Any


@dataclass(frozen=True)
class NestedSchema(Declaration):
    """An inline sub-schema compiled into an anonymous Entity."""

    declaration: Mapping[str, Any]


@dataclass(frozen=True)
class Options(Declaration):
    """Explicit field options (type, as, value, default, format, if, using, example, get)."""

    options: Mapping[str, Any]


@dataclass(frozen=True)
class ArrayOf(Declaration):
    """Array wrapper: the inner type becomes ``[type]`` with default ``[]``."""

    inner: Declaration


_RESERVED_KEYWORDS = {"as_": "as", "if_": "if"}


def _option_dict(kwargs: Dict[str, Any]) -> Dict[str, Any]:
    return {_RESERVED_KEYWORDS.get(key, key): value for key, value in kwargs.items()}


def options(**kwargs: Any) -> Options:
    """
    Build an Options declaration.

    ``as_`` and ``if_`` stand for the reserved ``as`` and ``if`` keys.

    Example:
        >>> options(type="string", as_="nickname").options
        {'type': 'string', 'as': 'nickname'}
    """
    return Options(_option_dict(kwargs))


def computed(fn: Callable[..., Any], **kwargs: Any) -> Computed:
    """Build a Computed declaration with optional extra options."""
    return Computed(fn, _option_dict(kwargs))


def nested(declaration: Mapping[str, Any]) -> NestedSchema:
    return NestedSchema(declaration)


def array_of(inner: Any) -> ArrayOf:
    """Wrap a declaration (raw or variant) as an array field."""
    return ArrayOf(inner if isinstance(inner, Declaration) else _classify_item(inner))


def _is_entity(obj: Any) -> bool:
    from .entity import Entity

    return isinstance(obj, Entity)


def _is_literal(value: Any) -> bool:
    return isinstance(value, (str, bool, int, float, datetime.date, datetime.datetime))


def _is_falsy(value: Any) -> bool:
    # empty containers are truthy in the shorthand rules, only scalars count
    if isinstance(value, (list, tuple, dict)):
        return False
    return not value


def might_be_sub_entity(obj: Any) -> bool:
    """
    Decide whether a mapping declares an inline sub-schema rather than options.

    The rule is shape based: a mapping is options when it carries ``using``
    with an Entity, or a ``type`` that is a type name (string), a list
    starting with a string, or a type marker; otherwise it is a sub-schema.
    A one-element list is judged by its single mapping.
    """
    if obj is True or callable(obj):
        return False

    candidate = None
    if isinstance(obj, Mapping):
        candidate = obj
    if isinstance(obj, (list, tuple)):
        if len(obj) != 1:
            return False
        candidate = obj[0] if isinstance(obj[0], Mapping) else obj

    if candidate is None or not isinstance(candidate, Mapping):
        # a one-element list holding a non-mapping has neither using nor type
        return candidate is not None

    using = candidate.get("using")
    if using is not None and _is_entity(using):
        return False

    type_ = candidate.get("type")
    if _is_falsy(type_):
        return True

    if isinstance(type_, str):
        return False
    if isinstance(type_, (list, tuple)) and type_ and isinstance(type_[0], str):
        return False

    base = type_[0] if isinstance(type_, (list, tuple)) and type_ else type_
    if guess_type(base):
        return False

    return True


def _classify_item(value: Any) -> Declaration:
    if isinstance(value, Declaration):
        return value
    if value is True:
        return Expose()
    if _is_literal(value):
        return Literal(value)
    if callable(value):
        marker = guess_type(value)
        if marker:
            return TypeMarker(marker)
        return Computed(value)
    if _is_entity(value):
        return EntityRef(value)
    if isinstance(value, Mapping):
        if might_be_sub_entity(value):
            return NestedSchema(value)
        return Options(value)
    raise EntityDefinitionError(f"Unsupported field declaration {value!r}")


def classify(value: Any) -> Declaration:
    """
    Classify a raw field declaration into a declaration variant.

    Args:
        value: Raw declaration from an entity definition mapping.

    Returns:
        The matching Declaration variant.

    Raises:
        EntityDefinitionError: If the declaration is None, an empty list or
            of an unsupported kind.
    """
    if isinstance(value, Declaration):
        return value
    if value is None or (isinstance(value, (list, tuple)) and len(value) == 0):
        raise EntityDefinitionError(f"Invalid field declaration {value!r}")

    if isinstance(value, (list, tuple)):
        if len(value) > 1:
            return Multi(tuple(value))
        return ArrayOf(_classify_item(value[0]))

    return _classify_item(value)
