"""
Evaluator: applies an Entity to raw input data.

Per field, in declaration (or selector) order:

    predicate -> raw value (function / alias / literal) -> default
    -> converter -> date format -> type coercion -> output key
    -> sub-entity (skipped when the default was applied) -> store

Failures of user functions and of coercion never propagate; they are
reported as diagnostics and the field degrades to None or its unconverted
value.
"""

import copy
import logging
from typing import Any, Callable, Dict, Optional

from .diagnostics import (
    STAGE_COERCE,
    STAGE_COMPUTE,
    STAGE_DEPTH,
    STAGE_PREDICATE,
    Diagnostic,
    report,
    safe_call,
)
from .field_spec import FieldAct, FieldSpec
from .normalizer import coerce, format_date, is_date
from .selector import normalize_selector, sub_selection

logger = logging.getLogger(__name__)

Converter = Callable[[Any, Dict[str, Any], str], Any]


def _prepare_options(options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    prepared = {"coerce": False}
    prepared.update(options or {})
    prepared["fields"] = normalize_selector(prepared.get("fields")) if prepared.get("fields") else {}
    return prepared


def _default_for(spec: FieldSpec) -> Any:
    # fresh containers per parse so outputs never share a mutable default
    if isinstance(spec.default, (list, dict)):
        return copy.copy(spec.default)
    return spec.default


def _raw_value(entity, spec: FieldSpec, source: Any, options: Dict[str, Any], key: str) -> Any:
    if spec.act == FieldAct.FUNCTION:
        outcome = safe_call(spec.value, source, options, key, field=key, stage=STAGE_COMPUTE)
        if not outcome.ok:
            report(outcome.diagnostic, options)
        return outcome.value_or(None)
    if spec.act == FieldAct.VALUE:
        return spec.value
    return entity.get(source, spec.value)


def _evaluate_object(
    entity,
    source: Any,
    options: Dict[str, Any],
    converter: Optional[Converter],
    depth: int,
) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    if not entity.fields:
        return result

    selection = options["fields"]
    keys = list(selection) if selection else entity.fields

    for key in keys:
        spec = entity.get_field(key)
        if spec is None:
            continue

        if spec.predicate is not None:
            outcome = safe_call(spec.predicate, source, options, key, field=key, stage=STAGE_PREDICATE)
            if not outcome.ok:
                report(outcome.diagnostic, options)
            if not outcome.value_or(False):
                logger.debug(f"Field '{key}' excluded by predicate")
                continue

        value = _raw_value(entity, spec, source, options, key)

        defaulted = False
        if value is None:
            value = _default_for(spec)
            if options.get("overwrite"):
                entity.set(source, key, _default_for(spec))
            defaulted = True

        if converter is not None:
            value = converter(value, options, key)

        if spec.format and is_date(value):
            value = format_date(value, spec.format)

        try:
            value = coerce(value, spec.type, options)
        except Exception as e:
            report(Diagnostic(key, STAGE_COERCE, str(e), e), options)

        out_key = key
        renamed = selection.get(key)
        if isinstance(renamed, str):
            out_key = renamed

        if spec.using is not None and not defaulted:
            if depth >= entity.config.max_depth:
                report(
                    Diagnostic(key, STAGE_DEPTH, f"max_depth {entity.config.max_depth} reached"),
                    options,
                )
                value = None
            else:
                sub_options = dict(options)
                sub_options["fields"] = sub_selection(selection, out_key)
                value = evaluate(spec.using, value, sub_options, converter, depth + 1)

        result[out_key] = value

    return result


def evaluate(
    entity,
    data: Any,
    options: Optional[Dict[str, Any]] = None,
    converter: Optional[Converter] = None,
    depth: int = 0,
) -> Any:
    """
    Evaluate ``entity`` against ``data``.

    Args:
        entity: Entity describing the output.
        data: Source object, list/tuple of source objects, or None.
        options: Parse options (overwrite, fields, on_diagnostic, coerce and
            any pass-through values for user functions).
        converter: Optional ``(value, options, field_name) -> value`` hook.
        depth: Current sub-entity nesting depth.

    Returns:
        A dict, or a list of dicts when ``data`` is a list/tuple.
    """
    options = _prepare_options(options)
    source = {} if data is None else data

    if entity.is_array(source):
        return [evaluate(entity, item, options, converter, depth) for item in source]

    return _evaluate_object(entity, source, options, converter, depth)
