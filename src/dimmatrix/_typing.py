"""
dimmatrix Type Definitions and Protocols.

This module provides the structural protocol shared by every matrix-like
entity (concrete matrices and region views) plus the element conversion
rules used whenever a value is stored into a matrix.

Element types:
    An element type is any callable that builds an element from a value,
    usually a class (``int``, ``float``, ``Fraction``, a user class with a
    copying constructor). Storing a value always goes through
    ``element_type(value)``, mirroring a converting constructor.

    ``None`` and ``object`` mean "untyped": values are stored as-is and the
    default value is ``None``.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, TypeVar, Union, runtime_checkable

__all__ = [
    "T",
    "ElementType",
    "MatrixLike",
    "is_matrix_like",
    "is_untyped",
    "convert_element",
    "default_element",
    "type_name",
]


T = TypeVar("T")

ElementType = Optional[Union[type, Callable[..., Any]]]


@runtime_checkable
class MatrixLike(Protocol):
    """Protocol for matrix-like objects.

    Anything with row/column counts and positional element access can take
    part in comparisons and assignments.
    """

    def rows(self) -> int:
        ...

    def cols(self) -> int:
        ...

    def element_at(self, row: int, col: int) -> Any:
        ...


def is_matrix_like(obj: Any) -> bool:
    """Check whether obj is a matrix-like operand (as opposed to a scalar)."""
    if isinstance(obj, type):
        return False
    return isinstance(obj, MatrixLike)


def is_untyped(element_type: ElementType) -> bool:
    """Untyped matrices store values as-is."""
    return element_type is None or element_type is object


def convert_element(element_type: ElementType, value: Any) -> Any:
    """Build an element of element_type from value."""
    if is_untyped(element_type):
        return value
    return element_type(value)


def default_element(element_type: ElementType) -> Any:
    """Default-construct an element of element_type."""
    if is_untyped(element_type):
        return None
    return element_type()


def type_name(element_type: ElementType) -> str:
    if is_untyped(element_type):
        return "object"
    return getattr(element_type, "__name__", repr(element_type))
