"""Runtime type tags and value helpers for Grubby.

Grubby values are plain Python objects: ``int``, ``float``, ``str``,
``bool`` (produced by comparisons) and ``list`` for arrays. Each value
carries a coarse runtime type tag that the interpreter uses to enforce that
a variable's type never changes after it is initialized.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


INT = 'Int'
FLOAT = 'Float'
STRING = 'String'
ARRAY = 'Array'
BOOL = 'Bool'

TYPE_NAMES = {
    'Int': INT,
    'Integer': INT,
    'Float': FLOAT,
    'Double': FLOAT,
    'String': STRING,
    'Str': STRING,
    'Array': ARRAY,
    'Bool': BOOL,
    'Boolean': BOOL,
}


@dataclass
class ErrorVal:
    """Describes a Grubby failure.

    ``name`` classifies the failure (``TypeError``, ``NameError`` ...) and
    ``message`` names the offending construct.
    """
    name: str
    message: str

    def __repr__(self) -> str:
        return f"Error(name={self.name!r}, message={self.message!r})"


def canonical_type(name: str) -> Optional[str]:
    """Return the canonical tag for a declared type name, or None if unknown."""
    return TYPE_NAMES.get(name)


def type_tag(value: Any) -> str:
    """Return the runtime type tag of a value."""
    # bool first: it is a subclass of int
    if isinstance(value, bool):
        return BOOL
    if isinstance(value, int):
        return INT
    if isinstance(value, float):
        return FLOAT
    if isinstance(value, str):
        return STRING
    if isinstance(value, list):
        return ARRAY
    return type(value).__name__


def check_value(value: Any, type_name: Optional[str]) -> bool:
    """Check that a runtime value carries the given type tag.

    Returns True on success. On mismatch raises a Python ``TypeError`` (not
    a Grubby error); callers convert it into a ``GrubbyError``. A missing
    type name accepts any value.
    """
    if type_name is None:
        return True
    actual = type_tag(value)
    if actual != type_name:
        raise TypeError(f"expected {type_name}, got {actual} ({to_string(value)})")
    return True


def to_string(value: Any) -> str:
    """Convert a Grubby value to the text written by ``println``."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return '[' + ', '.join(to_string(item) for item in value) + ']'
    return str(value)


def equal_values(a: Any, b: Any) -> bool:
    """Structural equality; values with different type tags are unequal."""
    if type_tag(a) != type_tag(b):
        return False
    if isinstance(a, list):
        if len(a) != len(b):
            return False
        return all(equal_values(x, y) for x, y in zip(a, b))
    return a == b
