"""
Diagnostics for recoverable evaluation failures.

User supplied functions (compute functions, predicates) and the type
normalizer may fail while an entity is parsing data. Such failures must not
abort the parse, so they are captured as an Outcome: either a value or a
Diagnostic describing what went wrong. The evaluator collapses an Outcome to
"value or None" and hands the diagnostic to the logger and to an optional
``on_diagnostic`` hook supplied in the parse options.

Example:
    >>> outcome = safe_call(lambda: 1 / 0, field="ratio", stage="compute")
    >>> outcome.ok
    False
    >>> outcome.diagnostic.to_dict()["stage"]
    'compute'
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

STAGE_COMPUTE = "compute"
STAGE_PREDICATE = "predicate"
STAGE_COERCE = "coerce"
STAGE_DEPTH = "depth"


class Diagnostic:
    """
    A single recoverable failure observed during parse().

    Attributes:
        field: Name of the field being evaluated.
        stage: Where the failure happened (compute, predicate, coerce, depth).
        message: Human-readable description.
        error: The original exception, when there is one.
    """

    def __init__(
        self,
        field: str,
        stage: str,
        message: str,
        error: Optional[BaseException] = None,
    ):
        self.field = field
        self.stage = stage
        self.message = message
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        result = {
            "field": self.field,
            "stage": self.stage,
            "message": self.message,
        }
        if self.error is not None:
            result["error"] = type(self.error).__name__
        return result

    def __repr__(self) -> str:
        return f"Diagnostic(field={self.field!r}, stage={self.stage!r}, message={self.message!r})"


@dataclass
class Outcome:
    """Result of a fallible step: a value, or a diagnostic explaining the failure."""

    value: Any = None
    diagnostic: Optional[Diagnostic] = None

    @property
    def ok(self) -> bool:
        return self.diagnostic is None

    def value_or(self, fallback: Any) -> Any:
        return self.value if self.ok else fallback


def safe_call(fn: Callable[..., Any], *args, field: str, stage: str) -> Outcome:
    """
    Call ``fn(*args)`` and capture any exception as a diagnostic.

    Args:
        fn: Callable to invoke.
        *args: Positional arguments for the callable.
        field: Field name, recorded on the diagnostic.
        stage: Evaluation stage, recorded on the diagnostic.

    Returns:
        Outcome holding either the return value or a Diagnostic.
    """
    try:
        return Outcome(value=fn(*args))
    except Exception as e:
        return Outcome(diagnostic=Diagnostic(field, stage, str(e) or repr(e), e))


def report(diagnostic: Diagnostic, options: Optional[Dict[str, Any]] = None) -> None:
    """
    Publish a diagnostic to the log and to the ``on_diagnostic`` hook.

    A failing hook is logged and otherwise ignored.
    """
    if diagnostic.stage == STAGE_COERCE:
        logger.debug(f"Field '{diagnostic.field}' kept unconverted: {diagnostic.message}")
    else:
        logger.warning(
            f"Field '{diagnostic.field}' failed during {diagnostic.stage}: {diagnostic.message}"
        )

    hook = (options or {}).get("on_diagnostic")
    if callable(hook):
        try:
            hook(diagnostic)
        except Exception as e:
            logger.warning(f"on_diagnostic hook raised: {e}")
