"""
Matrix Base Classes

This module defines the abstract base classes for the dimmatrix type system
and the generic algorithms that work on any matrix-like entity.

Type Hierarchy:

    MatrixBase (ABC)
    ├── OwningMatrix (ABC) - owns its element storage
    │   ├── FixedMatrix[T, R, C]   - shape is part of the class
    │   └── VariableMatrix[T]      - shape set at construction
    └── RegionView (ABC)   - aliasing view into an owning matrix
        ├── RowsView       - indexing selects columns
        └── AreaView       - indexing selects rows

Design Philosophy:

1. Unified Interface: matrices and views share rows()/cols()/element_at(),
   comparisons and indexing, so a view behaves as a matrix in every place a
   matrix is accepted.

2. Static vs Run-time Shapes: every class declares a ``shape_kind``. Fixed
   shapes are checked from types alone (StaticShapeError); variable shapes
   are checked at run time (IncompatibleOperands).

3. Raw vs Checked Access: ``_raw_get``/``_raw_put`` are the unchecked
   primitives each class implements; the public element_at/set_element add
   liveness checks, optional bounds checks and element conversion.

Example:

    m = VariableMatrix[int]([[1, 2, 3], [4, 5, 6]])
    row = m[1]            # RowsView, aliases m
    row[2] = 60           # writes m.element_at(1, 2)
    m[0][ALL] == m[1]     # element-wise, shape-checked
"""

from __future__ import annotations

import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Iterator, List, Optional, Tuple

import numpy as np

from ._config import config
from ._ownership import OwnershipTracker, ensure_alive
from ._shape import (
    ASSIGNMENT_OP,
    ShapeKind,
    check_operands,
    check_scalar,
    element_of,
)
from ._typing import convert_element, default_element

__all__ = [
    'MatrixBase',
    'OwningMatrix',
    'ALL',
    'SRange',
    'DRange',
    'srange',
    'drange',
    'rows',
    'cols',
    'element_at',
    'equal_to',
    'for_each_element',
    'move_to',
]


# =============================================================================
# Index Markers
# =============================================================================

class _AllMarker(Enum):
    """Selects every remaining row or column."""
    ALL = 'all'

    def __repr__(self) -> str:
        return 'ALL'


ALL = _AllMarker.ALL


@dataclass(frozen=True)
class _Range:
    count: int
    first: int = 0

    def __post_init__(self):
        if self.count < 0 or self.first < 0:
            raise ValueError(f"{type(self).__name__} bounds must be non-negative, "
                             f"got count={self.count}, first={self.first}")


@dataclass(frozen=True)
class SRange(_Range):
    """Static range: accepted by fixed-dimension matrices and their views."""


@dataclass(frozen=True)
class DRange(_Range):
    """Dynamic range: accepted by variable-dimension matrices and their views."""


def srange(count: int, first: int = 0) -> SRange:
    """Range of count rows/columns starting at first, for fixed matrices."""
    return SRange(operator.index(count), operator.index(first))


def drange(count: int, first: int = 0) -> DRange:
    """Range of count rows/columns starting at first, for variable matrices."""
    return DRange(operator.index(count), operator.index(first))


_ORDERING = {
    '<': operator.lt,
    '>': operator.gt,
    '<=': operator.le,
    '>=': operator.ge,
}


# =============================================================================
# MatrixBase
# =============================================================================

class MatrixBase(ABC):
    """
    Abstract base class for all matrix-like entities.

    Required (subclasses must implement):
        rows(), cols(): Dimensions
        element_type: Element constructor
        is_alive: Whether the underlying storage still exists
        _raw_get(row, col), _raw_put(row, col, value): Unchecked access

    Class attributes:
        shape_kind: ShapeKind.FIXED or ShapeKind.VARIABLE
        _range_type: Range type accepted by indexing (SRange or DRange)
        _rows_view_cls / _area_view_cls: View classes produced by indexing
    """

    __slots__ = ()

    shape_kind: ClassVar[ShapeKind] = ShapeKind.VARIABLE
    _range_type: ClassVar[type] = DRange
    _rows_view_cls: ClassVar[Optional[type]] = None
    _area_view_cls: ClassVar[Optional[type]] = None

    # Matrices define equality element-wise, so they cannot be hashed
    __hash__ = None

    # =========================================================================
    # Abstract Interface
    # =========================================================================

    @abstractmethod
    def rows(self) -> int:
        ...

    @abstractmethod
    def cols(self) -> int:
        ...

    @property
    @abstractmethod
    def is_alive(self) -> bool:
        ...

    @abstractmethod
    def _raw_get(self, row: int, col: int) -> Any:
        ...

    @abstractmethod
    def _raw_put(self, row: int, col: int, value: Any) -> None:
        ...

    # =========================================================================
    # Derived Properties
    # =========================================================================

    @property
    def shape(self) -> Tuple[int, int]:
        """Matrix dimensions (rows, cols)."""
        return (self.rows(), self.cols())

    @property
    def size(self) -> int:
        """Total number of elements (rows * cols)."""
        return self.rows() * self.cols()

    @property
    def is_view(self) -> bool:
        return False

    # =========================================================================
    # Element Access
    # =========================================================================

    def _check_position(self, row: int, col: int) -> None:
        if not (0 <= row < self.rows() and 0 <= col < self.cols()):
            raise IndexError(f"Position ({row}, {col}) out of bounds for shape {self.shape}")

    def element_at(self, row: int, col: int) -> Any:
        """Element at (row, col)."""
        ensure_alive(self)
        if config.checks.bounds:
            self._check_position(row, col)
        return self._raw_get(row, col)

    def set_element(self, row: int, col: int, value: Any) -> None:
        """Store value at (row, col), converted through the element type."""
        ensure_alive(self)
        if config.checks.bounds:
            self._check_position(row, col)
        self._raw_put(row, col, convert_element(self.element_type, value))

    def item(self) -> Any:
        """
        The single element of a 1x1 matrix-like.

        Raises:
            StaticShapeError: If a fixed-kind operand is not 1x1
            IncompatibleOperands: If a variable-kind operand is not 1x1
        """
        check_scalar(self, ASSIGNMENT_OP)
        return self.element_at(0, 0)

    def __int__(self) -> int:
        return int(self.item())

    def __float__(self) -> float:
        return float(self.item())

    def tolist(self) -> List[List[Any]]:
        """Elements as a nested row-major list."""
        ensure_alive(self)
        return [[self._raw_get(r, c) for c in range(self.cols())] for r in range(self.rows())]

    def to_numpy(self, dtype: Any = None) -> np.ndarray:
        """Copy the elements into a 2-D numpy array."""
        if dtype is None:
            element_type = self.element_type
            dtype = element_type if element_type in (int, float, complex, bool) else object
        out = np.empty(self.shape, dtype=dtype)
        for r, row in enumerate(self.tolist()):
            for c, value in enumerate(row):
                out[r, c] = value
        return out

    def __array__(self, dtype: Any = None, copy: Any = None) -> np.ndarray:
        return self.to_numpy(dtype)

    # =========================================================================
    # Indexing
    # =========================================================================

    def _resolve(self, index: Any, extent: int) -> Tuple[int, int]:
        """Translate an index (int, range or ALL) into (count, first)."""
        if index is ALL:
            return extent, 0
        if isinstance(index, _Range):
            if not isinstance(index, self._range_type):
                raise TypeError(f"{type(self).__name__} takes {self._range_type.__name__} ranges, "
                                f"got {type(index).__name__}")
            if index.first + index.count > extent:
                raise IndexError(f"Range of {index.count} starting at {index.first} "
                                 f"exceeds extent {extent}")
            return index.count, index.first
        if isinstance(index, bool):
            raise TypeError("Boolean indices are not supported")
        try:
            position = operator.index(index)
        except TypeError:
            raise TypeError(f"Unsupported index type: {type(index).__name__}") from None
        if not 0 <= position < extent:
            raise IndexError(f"Index {position} out of bounds [0, {extent})")
        return 1, position

    def _origin(self) -> Tuple['MatrixBase', int, int]:
        """Root owner and offset of this entity's (0, 0) element."""
        return self, 0, 0

    def _select_rows(self, index: Any) -> 'MatrixBase':
        count, first = self._resolve(index, self.rows())
        owner, first_row, first_col = self._origin()
        return self._rows_view_cls(owner, count, self.cols(), first_row + first, first_col)

    def _select_cols(self, index: Any) -> 'MatrixBase':
        count, first = self._resolve(index, self.cols())
        owner, first_row, first_col = self._origin()
        return self._area_view_cls(owner, self.rows(), count, first_row, first_col + first)

    def row(self, index: int) -> 'MatrixBase':
        """Single-row view (row index relative to this entity)."""
        return self._select_rows(index)

    def __setitem__(self, index: Any, value: Any) -> None:
        self[index].assign(value)

    def __iter__(self) -> Iterator['MatrixBase']:
        for r in range(self.rows()):
            yield self.row(r)

    def __len__(self) -> int:
        return self.rows()

    # =========================================================================
    # Comparison
    # =========================================================================

    def _compare(self, other: Any, op: str) -> bool:
        check_operands(self, op, other)
        if op == '==':
            return equal_to(self, other)
        if op == '!=':
            return not equal_to(self, other)
        return _ORDERING[op](self.element_at(0, 0), element_of(other, 0, 0))

    def __eq__(self, other: Any) -> bool:
        return self._compare(other, '==')

    def __ne__(self, other: Any) -> bool:
        return self._compare(other, '!=')

    def __lt__(self, other: Any) -> bool:
        return self._compare(other, '<')

    def __gt__(self, other: Any) -> bool:
        return self._compare(other, '>')

    def __le__(self, other: Any) -> bool:
        return self._compare(other, '<=')

    def __ge__(self, other: Any) -> bool:
        return self._compare(other, '>=')

    def __repr__(self) -> str:
        if not self.is_alive:
            return f"{type(self).__name__}(<destroyed>)"
        return f"{type(self).__name__}({self.tolist()!r})"


# =============================================================================
# OwningMatrix
# =============================================================================

class OwningMatrix(MatrixBase):
    """
    Base class for matrices that own their element storage.

    Provides row indexing, explicit destruction (also on ``with`` exit) and
    numpy conversion.
    """

    __slots__ = ()

    @property
    def ownership(self) -> OwnershipTracker:
        return self._ownership

    def __getitem__(self, index: Any) -> 'MatrixBase':
        """
        Row selection.

        Args:
            index: Row index, range (srange for fixed, drange for variable)
                or ALL

        Returns:
            RowsView spanning every column of the selected rows
        """
        ensure_alive(self)
        return self._select_rows(index)

    def copy(self) -> 'OwningMatrix':
        """Deep copy with the same type and shape."""
        return type(self)(self)

    @abstractmethod
    def destroy(self) -> None:
        ...

    def __enter__(self) -> 'OwningMatrix':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.destroy()

    @classmethod
    def from_numpy(cls, array: Any, **kwargs) -> 'OwningMatrix':
        """Build a matrix from a 2-D array-like."""
        array = np.asarray(array)
        if array.ndim != 2:
            raise ValueError(f"Expected a 2-D array, got {array.ndim}-D")
        return cls(array.tolist(), **kwargs)


# =============================================================================
# Generic Algorithms
# =============================================================================

def rows(m: MatrixBase) -> int:
    """Number of rows of a matrix-like."""
    return m.rows()


def cols(m: MatrixBase) -> int:
    """Number of columns of a matrix-like."""
    return m.cols()


def element_at(m: MatrixBase, row: int, col: int) -> Any:
    """Element of a matrix-like at (row, col)."""
    return m.element_at(row, col)


def equal_to(lhs: MatrixBase, rhs: Any) -> bool:
    """
    Element-wise equality over lhs's shape.

    No shape check is performed; rhs may be a matrix-like of at least the
    same shape or a scalar compared against every element.
    """
    for r in range(lhs.rows()):
        for c in range(lhs.cols()):
            if lhs.element_at(r, c) != element_of(rhs, r, c):
                return False
    return True


def for_each_element(func: Callable[..., Any], m: MatrixBase, *others: Any) -> None:
    """
    Call func with the elements of m and others at every position.

    Positions are visited in row-major order over m's shape. Non-matrix
    operands are passed unchanged at every position.
    """
    for r in range(m.rows()):
        for c in range(m.cols()):
            func(m.element_at(r, c), *(element_of(o, r, c) for o in others))


def move_to(to: MatrixBase, source: MatrixBase) -> None:
    """
    Move every element of source into to.

    Elements are transferred as-is (no conversion, identity preserved) and
    each source position is reset to a freshly built default. Shapes are checked
    first, so nothing is written on mismatch.
    """
    check_operands(to, ASSIGNMENT_OP, source)
    ensure_alive(to)
    ensure_alive(source)
    n_rows, n_cols = to.rows(), to.cols()
    values = [[source._raw_get(r, c) for c in range(n_cols)] for r in range(n_rows)]
    element_type = source.element_type
    for r in range(n_rows):
        for c in range(n_cols):
            source._raw_put(r, c, default_element(element_type))
    for r in range(n_rows):
        for c in range(n_cols):
            to._raw_put(r, c, values[r][c])
