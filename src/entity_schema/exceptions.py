"""
Exception classes for entity-schema.

Two disjoint families are defined here:

- Definition-time errors (EntityDefinitionError, SelectionError) are raised
  immediately while a schema is being built or projected. They signal a
  programming mistake and are never caught by the library.
- Evaluation-time errors (CoercionError) are raised by collaborators during
  parse() and are always caught by the evaluator, which turns them into
  diagnostics instead of failing the whole call.

This module has no dependencies so every other module can import it.
"""


class EntityError(Exception):
    """Base class for all entity-schema errors."""

    pass


class EntityDefinitionError(EntityError, ValueError):
    """
    Raised when a schema declaration is invalid.

    Examples: an invalid field name, conflicting options (``as`` together
    with a function), an unknown ``format`` or a field whose type cannot be
    resolved.
    """

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)


class SelectionError(EntityError, ValueError):
    """Raised when a field selector cannot be applied to an entity."""

    pass


class SelectorSyntaxError(SelectionError):
    """Raised when a textual field selector cannot be parsed."""

    def __init__(self, message: str, text: str = None):
        self.text = text
        super().__init__(message)


class CoercionError(EntityError, ValueError):
    """Raised by the normalizer when a value cannot be converted to a type."""

    def __init__(self, value, type_tag):
        self.value = value
        self.type_tag = type_tag
        super().__init__(f"Cannot convert {value!r} to {type_tag}")


class ConfigError(EntityError, ValueError):
    """Raised when an entity configuration cannot be loaded or validated."""

    pass
