"""
Best-effort value normalization by primitive type tag.

coerce() is permissive: values already of the right kind, None and values
declared with an unknown tag pass through unchanged. Only values that cannot
be represented in the requested type raise CoercionError, which the evaluator
catches and reports.

Example:
    >>> coerce(123, "string")
    '123'
    >>> coerce(["1", 2, True], ["number"])
    [1, 2, 1]
    >>> coerce("off", "boolean")
    False
"""

import datetime
import math
from typing import Any, Callable, Dict, Optional, Union

from .exceptions import CoercionError

TRUE_STRINGS = ("true", "1", "yes", "on", "y")
FALSE_STRINGS = ("false", "0", "no", "off", "n", "")

_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)


def _as_datetime(value: Union[datetime.date, datetime.datetime]) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    return datetime.datetime.combine(value, datetime.time())


def format_date(value: Union[datetime.date, datetime.datetime], fmt: Optional[str]) -> Any:
    """
    Render a date according to a format token.

    Args:
        value: date or datetime instance.
        fmt: ``iso`` for an ISO-8601 string, ``timestamp`` for integer epoch
            milliseconds. Any other token returns the value unchanged.

    Returns:
        Rendered value.
    """
    if fmt == "iso":
        return value.isoformat()
    if fmt == "timestamp":
        # naive datetimes are interpreted in local time, like datetime.timestamp()
        return int(round(_as_datetime(value).timestamp() * 1000))
    return value


def is_date(value: Any) -> bool:
    return isinstance(value, (datetime.date, datetime.datetime))


def _to_string(value: Any, options: Dict[str, Any]) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return str(value)
    if is_date(value):
        return value.isoformat()
    raise CoercionError(value, "string")


def _to_number(value: Any, options: Dict[str, Any]) -> Union[int, float]:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            raise CoercionError(value, "number") from None
    if is_date(value):
        return format_date(value, "timestamp")
    raise CoercionError(value, "number")


def _to_boolean(value: Any, options: Dict[str, Any]) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
    raise CoercionError(value, "boolean")


def _to_date(value: Any, options: Dict[str, Any]) -> datetime.datetime:
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value
    if isinstance(value, bool):
        raise CoercionError(value, "date")
    if isinstance(value, (int, float)):
        return _EPOCH + datetime.timedelta(milliseconds=value)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.datetime.fromisoformat(text)
        except ValueError:
            raise CoercionError(value, "date") from None
    raise CoercionError(value, "date")


_CONVERTERS: Dict[str, Callable[[Any, Dict[str, Any]], Any]] = {
    "string": _to_string,
    "number": _to_number,
    "boolean": _to_boolean,
    "date": _to_date,
}


def coerce(value: Any, type_tag: Any, options: Optional[Dict[str, Any]] = None) -> Any:
    """
    Convert ``value`` to the type described by ``type_tag``.

    Args:
        value: Value to convert.
        type_tag: Primitive tag (string, number, boolean, date, object, any)
            or a one-element list of one, meaning "each element of a list".
        options: Parse options. When ``options["coerce"]`` is true, a string
            given for a list tag is split on commas first.

    Returns:
        Converted value; unchanged for None, object/any and unknown tags.

    Raises:
        CoercionError: If the value cannot be represented in the type.
    """
    options = options or {}
    if value is None:
        return None

    if isinstance(type_tag, (list, tuple)):
        item_tag = type_tag[0] if type_tag else "any"
        if isinstance(value, str) and options.get("coerce"):
            value = [part.strip() for part in value.split(",")] if value.strip() else []
        if isinstance(value, (list, tuple)):
            return [coerce(item, item_tag, options) for item in value]
        return value

    converter = _CONVERTERS.get(type_tag)
    if converter is None:
        return value
    return converter(value, options)
