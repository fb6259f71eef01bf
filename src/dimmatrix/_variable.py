"""
Variable-Dimension Matrix

VariableMatrix[T] has its shape set at construction and never changed
afterwards. Elements live in a row-major list of rows * cols values
(index = row * cols + col). Every comparison or assignment against another
matrix-like checks shapes at run time and raises IncompatibleOperands on
mismatch.

The unparameterized VariableMatrix stores values as-is (element type
``object``, default ``None``).

Example:

    m = VariableMatrix[int](3, 2, [[1], [2, 3, 4]])
    m.tolist()                  # [[1, 0], [2, 3], [0, 0]]
    m[drange(2, 1)][1]          # 2x1 view of column 1, rows 1..2
    m == VariableMatrix[int](2, 3)   # IncompatibleOperands
"""

from __future__ import annotations

import logging
import operator
from typing import Any, ClassVar, Dict, List, Sequence

from ._base import DRange, OwningMatrix
from ._ownership import OwnershipTracker, ensure_alive
from ._shape import ShapeKind
from ._typing import ElementType, convert_element, default_element, is_matrix_like, type_name
from ._views import AreaView, RowsView

__all__ = ['VariableMatrix', 'VariableRowsView', 'VariableAreaView']

logger = logging.getLogger("dimmatrix.matrix")


# =============================================================================
# Views
# =============================================================================

class VariableRowsView(RowsView):
    """Row view into a VariableMatrix; takes drange ranges."""
    __slots__ = ()
    shape_kind = ShapeKind.VARIABLE
    _range_type = DRange


class VariableAreaView(AreaView):
    """Area view into a VariableMatrix; takes drange ranges."""
    __slots__ = ()
    shape_kind = ShapeKind.VARIABLE
    _range_type = DRange


VariableRowsView._area_view_cls = VariableAreaView
VariableAreaView._rows_view_cls = VariableRowsView
VariableAreaView._area_view_cls = VariableAreaView
VariableRowsView._rows_view_cls = VariableRowsView


# =============================================================================
# VariableMatrix
# =============================================================================

class VariableMatrix(OwningMatrix):
    """
    Matrix with a run-time shape, parameterized as VariableMatrix[T].

    Constructors:
        VariableMatrix[T](rows, cols)          - default element everywhere
        VariableMatrix[T](rows, cols, nested)  - rows padded/truncated to cols,
                                                 missing rows default-filled,
                                                 extra rows ignored
        VariableMatrix[T](nested)              - rows = len(nested),
                                                 cols = longest inner list
        VariableMatrix[T](matrix_like)         - converting copy
        VariableMatrix[T].take(other)          - move from another matrix

    Attributes:
        element_type: Element constructor (class attribute)
    """

    __slots__ = ('_rows', '_cols', '_buffer', '_ownership')

    element_type: ClassVar[ElementType] = object

    shape_kind = ShapeKind.VARIABLE
    _range_type = DRange
    _rows_view_cls = VariableRowsView
    _area_view_cls = VariableAreaView

    _parameterized: ClassVar[Dict[Any, type]] = {}

    def __class_getitem__(cls, element_type: ElementType) -> type:
        if cls is not VariableMatrix:
            raise TypeError(f"{cls.__name__} is already parameterized")
        specialized = cls._parameterized.get(element_type)
        if specialized is None:
            specialized = type(cls)(f"VariableMatrix[{type_name(element_type)}]", (cls,), {
                '__slots__': (),
                '__module__': cls.__module__,
                'element_type': element_type,
            })
            cls._parameterized[element_type] = specialized
        return specialized

    def __init__(self, *args: Any):
        self._buffer = None
        self._ownership = OwnershipTracker.owned()
        self._rows = 0
        self._cols = 0

        if len(args) == 1 and is_matrix_like(args[0]):
            source = args[0]
            ensure_alive(source)
            self._rows, self._cols = source.rows(), source.cols()
            self._buffer = [convert_element(self.element_type, source.element_at(r, c))
                            for r in range(self._rows) for c in range(self._cols)]
        elif len(args) == 1:
            nested = _as_rows(args[0])
            n_cols = max((len(row) for row in nested), default=0)
            self._fill(len(nested), n_cols, nested)
        elif len(args) == 2:
            self._fill(args[0], args[1], ())
        elif len(args) == 3:
            self._fill(args[0], args[1], _as_rows(args[2]))
        else:
            raise TypeError(f"{type(self).__name__} takes (rows, cols[, nested]), (nested) "
                            f"or (matrix_like); got {len(args)} arguments")

    def _fill(self, n_rows: int, n_cols: int, nested: Sequence[Sequence[Any]]) -> None:
        n_rows, n_cols = operator.index(n_rows), operator.index(n_cols)
        if n_rows < 0 or n_cols < 0:
            raise ValueError(f"VariableMatrix dimensions must be non-negative, got {n_rows}x{n_cols}")
        element_type = self.element_type
        buffer: List[Any] = []
        for r in range(n_rows):
            row = nested[r] if r < len(nested) else ()
            for c in range(n_cols):
                if c < len(row):
                    buffer.append(convert_element(element_type, row[c]))
                else:
                    buffer.append(default_element(element_type))
        self._rows, self._cols, self._buffer = n_rows, n_cols, buffer

    @classmethod
    def take(cls, other: 'VariableMatrix') -> 'VariableMatrix':
        """
        Adopt the elements of other without copying or converting them.

        other must be a VariableMatrix with the same element type; it is left
        destroyed (views into it become dangling).
        """
        if not isinstance(other, VariableMatrix):
            raise TypeError(f"{cls.__name__}.take() requires a VariableMatrix, got {type(other).__name__}")
        if other.element_type != cls.element_type:
            raise TypeError(f"{cls.__name__}.take() requires element type "
                            f"{type_name(cls.element_type)}, got {type_name(other.element_type)}")
        ensure_alive(other)
        matrix = cls.__new__(cls)
        matrix._ownership = OwnershipTracker.owned()
        matrix._rows, matrix._cols, matrix._buffer = other._rows, other._cols, other._buffer
        other._buffer = None
        logger.debug(f"Moved {other._rows}x{other._cols} buffer into {cls.__name__}")
        return matrix

    # -------------------------------------------------------------------------
    # Shape and storage
    # -------------------------------------------------------------------------

    def rows(self) -> int:
        return self._rows

    def cols(self) -> int:
        return self._cols

    @property
    def is_alive(self) -> bool:
        return self._buffer is not None

    def _raw_get(self, row: int, col: int) -> Any:
        return self._buffer[row * self._cols + col]

    def _raw_put(self, row: int, col: int, value: Any) -> None:
        self._buffer[row * self._cols + col] = value

    def _region_copy(self, view) -> 'VariableMatrix':
        return type(self)(view)

    def destroy(self) -> None:
        """Drop every element; views into this matrix become dangling."""
        if self._buffer is not None:
            logger.debug(f"Releasing {type(self).__name__} of {self._rows}x{self._cols}")
            self._buffer = None


def _as_rows(nested: Any) -> Sequence[Sequence[Any]]:
    if not isinstance(nested, (list, tuple)):
        raise TypeError(f"Expected a nested list of rows, got {type(nested).__name__}")
    for r, row in enumerate(nested):
        if not isinstance(row, (list, tuple)):
            raise TypeError(f"Row {r} must be a list or tuple, got {type(row).__name__}")
    return nested
