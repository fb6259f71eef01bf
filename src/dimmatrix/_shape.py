"""
Shape-Compatibility Layer

Every comparison or assignment that crosses matrix boundaries is checked
here before any element is read or written.

Shapes come in two kinds:

    FIXED     - the shape is part of the operand's type (FixedMatrix and its
                views). A bare scalar counts as a fixed 1x1.
    VARIABLE  - the shape is only known at run time (VariableMatrix and its
                views, and foreign matrix-like objects).

Checks run in two phases:

1. Static phase: looks only at fixed-kind operands, i.e. at information that
   is carried by the operand types. Violations raise StaticShapeError (a
   TypeError). Results are cached per shape pair.
2. Run-time phase: compares the actual shapes. Violations raise
   IncompatibleOperands carrying both shape descriptors and the operator.

Ordering operators are only defined between 1x1 operands.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Tuple

from ._errors import IncompatibleOperands, StaticShapeError
from ._typing import is_matrix_like

__all__ = [
    'ShapeKind',
    'ShapeDescriptor',
    'SCALAR_SHAPE',
    'EQUALITY_OPS',
    'ORDERING_OPS',
    'ASSIGNMENT_OP',
    'describe',
    'check_shapes',
    'check_operands',
    'check_scalar',
    'element_of',
]


EQUALITY_OPS = frozenset({'==', '!='})
ORDERING_OPS = frozenset({'<', '>', '<=', '>='})
ASSIGNMENT_OP = '='


class ShapeKind(Enum):
    """Whether an operand's shape is static (type-level) or run-time."""
    FIXED = 'fixed'
    VARIABLE = 'variable'


@dataclass(frozen=True)
class ShapeDescriptor:
    """
    Shape of one operand, as reported in errors.

    Attributes:
        kind: FIXED or VARIABLE
        rows: Row count
        cols: Column count
        scalar: True if the operand is a bare value rather than a matrix
    """
    kind: ShapeKind
    rows: int
    cols: int
    scalar: bool = False

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    @property
    def is_fixed(self) -> bool:
        return self.kind is ShapeKind.FIXED

    @property
    def is_1x1(self) -> bool:
        return self.rows == 1 and self.cols == 1

    def to_dict(self) -> dict:
        return {'kind': self.kind.value, 'rows': self.rows, 'cols': self.cols}

    def __str__(self) -> str:
        if self.scalar:
            return "scalar"
        return f"{self.kind.value} {self.rows}x{self.cols}"


SCALAR_SHAPE = ShapeDescriptor(ShapeKind.FIXED, 1, 1, scalar=True)


def describe(obj: Any) -> ShapeDescriptor:
    """Shape descriptor of a matrix-like operand or a bare scalar."""
    if not is_matrix_like(obj):
        return SCALAR_SHAPE
    kind = getattr(obj, 'shape_kind', ShapeKind.VARIABLE)
    return ShapeDescriptor(kind, obj.rows(), obj.cols())


def element_of(obj: Any, row: int, col: int) -> Any:
    """Element of a matrix-like operand, or the scalar itself."""
    if is_matrix_like(obj):
        return obj.element_at(row, col)
    return obj


@lru_cache(maxsize=1024)
def _check_static(lhs: ShapeDescriptor, op: str, rhs: ShapeDescriptor) -> None:
    if op in ORDERING_OPS:
        for operand in (lhs, rhs):
            if operand.is_fixed and not operand.is_1x1:
                raise StaticShapeError(
                    f"Ordering '{op}' requires 1x1 operands, got static shape {operand}", op)
    if lhs.is_fixed and rhs.is_fixed and lhs.shape != rhs.shape:
        raise StaticShapeError(
            f"Static shapes {lhs} and {rhs} are incompatible for '{op}'", op)


def check_shapes(lhs: ShapeDescriptor, op: str, rhs: ShapeDescriptor) -> None:
    """
    Check two shape descriptors for operator op.

    Raises:
        StaticShapeError: If the static shapes can never satisfy op
        IncompatibleOperands: If the run-time shapes do not satisfy op
    """
    _check_static(lhs, op, rhs)
    if lhs.shape != rhs.shape:
        raise IncompatibleOperands(lhs, op, rhs)
    if op in ORDERING_OPS and not lhs.is_1x1:
        raise IncompatibleOperands(lhs, op, rhs)


def check_operands(lhs: Any, op: str, rhs: Any) -> Tuple[ShapeDescriptor, ShapeDescriptor]:
    """Describe both operands and check them for op."""
    ld, rd = describe(lhs), describe(rhs)
    check_shapes(ld, op, rd)
    return ld, rd


def check_scalar(obj: Any, op: str = ASSIGNMENT_OP) -> None:
    """Check that obj may stand in for (or be replaced by) a single value."""
    check_shapes(describe(obj), op, SCALAR_SHAPE)
