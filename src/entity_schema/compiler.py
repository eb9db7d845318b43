"""
Schema compiler: turns declarations and add() arguments into FieldSpecs.

All validation happens here and is fatal: an entity that compiled
successfully never fails while parsing data.
"""

import datetime
import logging
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .config import EntityConfig
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
    classify,
)
from .exceptions import EntityDefinitionError
from .field_spec import ANY_TYPE, PRIMITIVE_TYPES, FieldAct, FieldSpec, guess_type

logger = logging.getLogger(__name__)

FIELD_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
FORMAT_PATTERN = re.compile(r"^(iso|timestamp)$", re.IGNORECASE)


def _is_entity(obj: Any) -> bool:
    from .entity import Entity

    return isinstance(obj, Entity)


def split_add_arguments(
    args: Tuple[Any, ...]
) -> Tuple[List[Any], Dict[str, Any], Optional[Callable[..., Any]]]:
    """
    Split ``add(*args)`` into field names, options and compute function.

    The trailing callable (if any) is the compute function, the mapping
    before it (if any) the options. An options ``get`` entry supplies the
    function as well.

    Raises:
        EntityDefinitionError: On missing names or options not allowed for
            several fields at once.
    """
    if not args:
        raise EntityDefinitionError("fields should be provided")

    fields = list(args)
    options: Dict[str, Any] = {}
    fn = None

    if len(fields) > 1:
        last = fields[-1]
        if callable(last) and not isinstance(last, Mapping):
            fn = fields.pop()

        last = fields[-1]
        if isinstance(last, Options):
            options.update(fields.pop().options)
        elif isinstance(last, Mapping):
            options.update(fields.pop())

        if options.get("get") is not None:
            getter = options.pop("get")
            if not callable(getter):
                raise EntityDefinitionError("options.get must be a function")
            fn = getter
        options.pop("get", None)

        if not fields:
            raise EntityDefinitionError("fields should be provided")

        if len(fields) > 1:
            if options.get("as") is not None:
                raise EntityDefinitionError("using :as option on multi-fields exposure not allowed")
            if fn is not None:
                raise EntityDefinitionError("using function on multi-fields exposure not allowed")

    return fields, options, fn


def _resolve_type_tag(base: Any) -> Tuple[Optional[str], bool]:
    """Return (tag, explicit) for a declared type; tag is None when unrecognized."""
    if base is None or base == "":
        return ANY_TYPE, False
    if isinstance(base, str):
        tag = base.lower()
        return tag, tag == ANY_TYPE
    marker = guess_type(base)
    if marker:
        return marker, False
    return None, False


def build_field_spec(
    field: Any,
    options: Mapping[str, Any],
    fn: Optional[Callable[..., Any]],
    config: EntityConfig,
) -> Tuple[str, FieldSpec]:
    """
    Build the FieldSpec for one field name.

    Args:
        field: Declared field name.
        options: Field options (type, as, value, default, format, if, using, example).
        fn: Optional compute function.
        config: Config providing type defaults and renames.

    Returns:
        Tuple of (output key, FieldSpec).

    Raises:
        EntityDefinitionError: If the name or the option combination is invalid.
    """
    if not isinstance(field, str) or not FIELD_NAME_PATTERN.match(field):
        raise EntityDefinitionError(
            f"field {field!r} must be a string of letters, digits or underscores", str(field)
        )

    alias = options.get("as")
    literal = options.get("value")
    if alias is not None and fn is not None:
        raise EntityDefinitionError("using :as option with function not allowed", field)
    if literal is not None and fn is not None:
        raise EntityDefinitionError("using :value option with function not allowed", field)
    if literal is not None and alias is not None:
        raise EntityDefinitionError("using :value option with :as option not allowed", field)

    raw_type = options.get("type")
    is_array = isinstance(raw_type, (list, tuple))
    base = (raw_type[0] if raw_type else None) if is_array else raw_type
    tag, explicit = _resolve_type_tag(base)

    if tag in PRIMITIVE_TYPES:
        options = {**config.type_options(tag), **options}

    fmt = options.get("format") or None
    if fmt is not None:
        if not isinstance(fmt, str) or not FORMAT_PATTERN.match(fmt):
            raise EntityDefinitionError(
                'format must be one of ["iso", "timestamp"] value, case ignored', field
            )
        fmt = fmt.lower()
        tag, explicit, is_array = "string", False, False

    predicate = options.get("if")
    if predicate is not None and not callable(predicate):
        raise EntityDefinitionError("if condition must be a function", field)

    using = options.get("using")
    if using is not None and not _is_entity(using):
        raise EntityDefinitionError("using must be an Entity", field)

    if using is None and predicate is None:
        if tag not in PRIMITIVE_TYPES and not (tag == ANY_TYPE and explicit):
            raise EntityDefinitionError(f"field {field} missing type field or incorrect value", field)

    tag = tag or ANY_TYPE
    type_ = [tag] if is_array else tag

    default = options.get("default")
    if "default" not in options and is_array and using is not None:
        default = []

    key = field
    act = FieldAct.ALIAS
    value: Any = field
    if alias is not None:
        if not isinstance(alias, str):
            raise EntityDefinitionError("as must be a string", field)
        key = alias
    elif literal is not None:
        act = FieldAct.VALUE
        value = literal
    elif fn is not None:
        act = FieldAct.FUNCTION
        value = fn

    if alias is None and config.renames.get(key):
        key = config.renames[key]

    spec = FieldSpec(
        type=type_,
        act=act,
        value=value,
        default=default,
        format=fmt,
        predicate=predicate,
        using=using,
        example=options.get("example"),
    )
    return key, spec


def _literal_type(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (datetime.date, datetime.datetime)):
        return "date"
    return "number"


def _field_options(entity, declaration: Declaration) -> Dict[str, Any]:
    if isinstance(declaration, Expose):
        return {"type": ANY_TYPE}
    if isinstance(declaration, Literal):
        return {"type": _literal_type(declaration.value), "default": declaration.value}
    if isinstance(declaration, TypeMarker):
        return {"type": declaration.type}
    if isinstance(declaration, EntityRef):
        return {"type": "object", "using": declaration.entity}
    if isinstance(declaration, NestedSchema):
        sub_entity = type(entity)(declaration.declaration, config=entity.config)
        return {"type": "object", "using": sub_entity}
    if isinstance(declaration, Options):
        return dict(declaration.options)
    raise EntityDefinitionError(f"Unsupported field declaration {declaration!r}")


def compile_field(entity, key: str, declaration: Declaration) -> None:
    """Compile one classified declaration onto ``entity`` under ``key``."""
    if isinstance(declaration, Multi):
        entity.add(key, *declaration.args)
        return

    is_array = isinstance(declaration, ArrayOf)
    inner = declaration.inner if is_array else declaration

    if isinstance(inner, Computed):
        options = {"type": ANY_TYPE, **inner.options}
        args = (options, inner.fn)
    else:
        options = _field_options(entity, inner)
        args = (options,)

    if is_array:
        type_ = options.get("type")
        options["type"] = list(type_) if isinstance(type_, (list, tuple)) else [type_]
        if isinstance(inner, Computed):
            options.setdefault("default", [])
        else:
            options["default"] = []
    entity.add(key, *args)


def compile_declaration(entity, declaration: Mapping[str, Any]) -> None:
    """
    Compile every entry of a declaration mapping onto ``entity``.

    Raises:
        EntityDefinitionError: If any entry is invalid.
    """
    for key, raw in declaration.items():
        try:
            classified = classify(raw)
        except EntityDefinitionError as e:
            raise EntityDefinitionError(
                f"Entity definition: value for key {key!r} is invalid, {raw!r}", key
            ) from e
        logger.debug(f"Compiling field '{key}' as {type(classified).__name__}")
        compile_field(entity, key, classified)
