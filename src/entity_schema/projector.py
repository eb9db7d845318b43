"""
Projector: derive a reduced and possibly renamed Entity from a selector.
"""

import logging
from typing import Any

from .exceptions import SelectionError
from .selector import normalize_selector, sub_selection

logger = logging.getLogger(__name__)


def pick(entity, selector: Any = None):
    """
    Build a new Entity holding only the selected fields.

    Args:
        entity: Source Entity (left untouched).
        selector: Selection tree or selector text. None or empty selects
            every field and returns a clone.

    Returns:
        New Entity with the selected, possibly renamed, fields. Sub-entities
        are picked recursively with their sub-selection.

    Raises:
        SelectionError: If a selected field does not exist and is not the
            rename target of another selected field.
        SelectorSyntaxError: If selector text is malformed.

    Example:
        >>> user = Entity({"name": str, "age": int})
        >>> user.pick("name: nickname").parse({"name": "ada", "age": 36})
        {'nickname': 'ada'}
    """
    selection = normalize_selector(selector)
    if not selection:
        return entity.clone()

    picked = type(entity)(config=entity.config)
    for key, target in selection.items():
        spec = entity.get_field(key)
        if spec is None:
            is_rename_target = any(value == key for value in selection.values())
            if not is_rename_target:
                raise SelectionError(f"Cannot pick unknown field '{key}'")
            continue

        out_key = target if isinstance(target, str) else key
        update = {}
        if spec.using is not None:
            update["using"] = pick(spec.using, sub_selection(selection, out_key))
        picked._set_field(out_key, spec.model_copy(update=update))

    logger.debug(f"Picked fields {picked.fields} from {entity.fields}")
    return picked
