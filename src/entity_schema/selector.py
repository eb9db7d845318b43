"""
Field selector grammar.

A selector chooses, renames and narrows the fields an entity exposes. It is
either a selection tree (a dict) or a compact text form parsed here:

    name age                  -> {"name": 1, "age": 1}
    name: nickname            -> {"name": "nickname"}
    profile{location}         -> {"profile": {"location": 1}}
    children: babies {name}   -> {"children": "babies", "babies": {"name": 1}}

Tree values mean: ``1`` include as-is, a string include and rename, a dict
include and recurse with that sub-selection. When a field is both renamed and
narrowed, the sub-selection is stored under the new name, which is how both
pick() and parse() look it up.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from lark import Lark, Token, Tree
from lark.exceptions import LarkError

from .exceptions import SelectionError, SelectorSyntaxError

logger = logging.getLogger(__name__)

SelectionTree = Dict[str, Union[int, str, Dict[str, Any]]]

SELECTOR_GRAMMAR = r"""
    start: item*
    item: NAME (":" NAME)? block?
    block: "{" item* "}"

    NAME: /[A-Za-z0-9_$]+/

    %import common.WS
    %ignore WS
"""

_parser = Lark(SELECTOR_GRAMMAR, parser="lalr")


def _build_tree(items: List[Tree]) -> SelectionTree:
    tree: SelectionTree = {}
    for item in items:
        names = [str(child) for child in item.children if isinstance(child, Token)]
        blocks = [child for child in item.children if isinstance(child, Tree)]

        field = names[0]
        alias = names[1] if len(names) > 1 else None
        sub = _build_tree(blocks[0].children) if blocks else None

        if alias is not None:
            tree[field] = alias
            if sub is not None:
                tree[alias] = sub
        elif sub is not None:
            tree[field] = sub
        else:
            tree[field] = 1
    return tree


def parse_selector(text: str) -> SelectionTree:
    """
    Parse the compact selector syntax into a selection tree.

    Args:
        text: Selector text, e.g. ``"name children: babies { name }"``.

    Returns:
        Selection tree; empty for blank text (meaning "select everything").

    Raises:
        SelectorSyntaxError: If the text is malformed.

    Example:
        >>> parse_selector("name: nickname profile{city}")
        {'name': 'nickname', 'profile': {'city': 1}}
    """
    try:
        parsed = _parser.parse(text)
    except LarkError as e:
        raise SelectorSyntaxError(f"Failed to parse field selector {text!r}: {e}", text) from e

    tree = _build_tree(parsed.children)
    logger.debug(f"Parsed field selector {text!r} into {tree}")
    return tree


def normalize_selector(selector: Any) -> SelectionTree:
    """
    Turn any accepted selector form into a selection tree.

    None and empty values select everything (empty tree); strings are parsed;
    mappings are copied.

    Raises:
        SelectionError: If the selector is neither a string nor a mapping.
        SelectorSyntaxError: If a string selector is malformed.
    """
    if selector is None:
        return {}
    if isinstance(selector, str):
        return parse_selector(selector)
    if isinstance(selector, Mapping):
        return dict(selector)
    raise SelectionError(
        f"Field selector must be a string or a mapping, got {type(selector).__name__}"
    )


def sub_selection(tree: Optional[Mapping[str, Any]], key: str) -> SelectionTree:
    """Sub-selection stored under ``key``; empty (select all) unless it is a mapping."""
    value = (tree or {}).get(key)
    return dict(value) if isinstance(value, Mapping) else {}
