"""Example generation: a representative output skeleton for an Entity."""

import datetime
import logging
from typing import Any, Dict, Tuple

from .normalizer import format_date, is_date

logger = logging.getLogger(__name__)

ZERO_VALUES = {
    "string": "",
    "number": 0,
    "boolean": False,
    "object": None,
}


def _zero_value(type_tag: str) -> Any:
    if type_tag == "date":
        return datetime.datetime.now()
    return ZERO_VALUES.get(type_tag)


def to_example(entity, _ancestors: Tuple[Any, ...] = ()) -> Dict[str, Any]:
    """
    Build an example object for ``entity``.

    Per field: the sub-entity example when ``using`` is set, else the
    declared ``example``, else the ``default``, else a zero value for the
    type (overridable through the config's type defaults). Array fields wrap
    the value in a one-element list.

    A sub-entity that is already being expanded higher up, or that sits
    ``config.max_depth`` levels deep, is shown as None (``[]`` for array
    fields), so self-referencing entities terminate.
    """
    ancestors = _ancestors + (entity,)
    example: Dict[str, Any] = {}
    for key in entity.fields:
        spec = entity.get_field(key)

        if spec.using is not None:
            recursive = any(spec.using is seen for seen in ancestors)
            if recursive or len(ancestors) > entity.config.max_depth:
                logger.debug(f"Field '{key}' example cut to stop recursion")
                example[key] = [] if spec.is_array else None
                continue
            value = to_example(spec.using, ancestors)
            example[key] = [value] if spec.is_array else value
            continue

        if spec.example is not None:
            example[key] = spec.example
            continue
        if spec.default is not None:
            example[key] = spec.default
            continue

        type_tag = "date" if spec.format else spec.base_type
        value = entity.config.type_default(type_tag)
        if value is None:
            value = _zero_value(type_tag)
        if spec.format and is_date(value):
            value = format_date(value, spec.format)
        example[key] = [value] if spec.is_array else value

    return example
