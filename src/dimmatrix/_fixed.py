"""
Fixed-Dimension Matrix

FixedMatrix[T, R, C] is a matrix whose element type and shape are part of
its class. Each parameterization is created once and cached, so

    FixedMatrix[int, 2, 3] is FixedMatrix[int, 2, 3]

holds, and the shape of any instance (or view into one) is known from its
type alone. Shape mismatches between two fixed operands are rejected from
the types with StaticShapeError before any element is touched.

Storage is one StagedArray of R * C elements in row-major order
(index = row * C + col), so construction is all-or-nothing: if building any
element fails, the elements built so far are destructed in reverse order and
the error propagates.

Example:

    Mat23 = FixedMatrix[int, 2, 3]
    m = Mat23([[1, 2, 3], [4, 5, 6]])
    m.element_at(1, 2)          # 6
    m[srange(1, 1)][ALL]        # fixed 1x3 view of the second row
    m == Mat23()                # False
    m == FixedMatrix[int, 3, 2]()   # StaticShapeError
"""

from __future__ import annotations

import logging
import operator
from typing import Any, Callable, ClassVar, Dict, Optional, Sequence, Tuple

from ._array import StagedArray
from ._base import OwningMatrix, SRange
from ._errors import StaticShapeError
from ._ownership import OwnershipTracker, ensure_alive
from ._shape import ASSIGNMENT_OP, ShapeDescriptor, ShapeKind, check_operands, check_shapes, describe
from ._storage import Finalizer
from ._typing import ElementType, default_element, is_matrix_like, type_name
from ._views import AreaView, RowsView

__all__ = ['FixedMatrix', 'FixedRowsView', 'FixedAreaView']

logger = logging.getLogger("dimmatrix.matrix")


# =============================================================================
# Views
# =============================================================================

class FixedRowsView(RowsView):
    """Row view into a FixedMatrix; takes srange ranges."""
    __slots__ = ()
    shape_kind = ShapeKind.FIXED
    _range_type = SRange


class FixedAreaView(AreaView):
    """Area view into a FixedMatrix; takes srange ranges."""
    __slots__ = ()
    shape_kind = ShapeKind.FIXED
    _range_type = SRange


FixedRowsView._area_view_cls = FixedAreaView
FixedAreaView._rows_view_cls = FixedRowsView
FixedAreaView._area_view_cls = FixedAreaView
FixedRowsView._rows_view_cls = FixedRowsView


# =============================================================================
# FixedMatrix
# =============================================================================

class FixedMatrix(OwningMatrix):
    """
    Matrix with a static shape, parameterized as FixedMatrix[T, R, C].

    Constructors:
        FixedMatrix[T, R, C]()                 - default element everywhere
        FixedMatrix[T, R, C](rows_list)        - literal rows; missing values
                                                 are default-filled
        FixedMatrix[T, R, C](matrix_like)      - converting copy of the same shape
        FixedMatrix[T, R, C].generate(fn)      - element (r, c) is fn(r, c)
        FixedMatrix[T, R, C].take(other)       - move from a same-shape matrix

    Args:
        verified: Build storage from VerifiedStorage slots (default from
            config.storage.verified)
        finalizer: Hook run on each element when the matrix is destroyed

    Attributes:
        element_type: Element constructor (class attribute)
        ROWS, COLS: Static shape (class attributes)
    """

    __slots__ = ('_array', '_ownership')

    element_type: ClassVar[ElementType] = None
    ROWS: ClassVar[Optional[int]] = None
    COLS: ClassVar[Optional[int]] = None

    shape_kind = ShapeKind.FIXED
    _range_type = SRange
    _rows_view_cls = FixedRowsView
    _area_view_cls = FixedAreaView

    _parameterized: ClassVar[Dict[Tuple[Any, int, int], type]] = {}

    def __class_getitem__(cls, params: Tuple[ElementType, int, int]) -> type:
        if cls.ROWS is not None:
            raise TypeError(f"{cls.__name__} is already parameterized")
        if not isinstance(params, tuple) or len(params) != 3:
            raise TypeError("FixedMatrix takes three parameters: FixedMatrix[T, rows, cols]")
        element_type, n_rows, n_cols = params
        n_rows, n_cols = operator.index(n_rows), operator.index(n_cols)
        if n_rows < 0 or n_cols < 0:
            raise ValueError(f"FixedMatrix dimensions must be non-negative, got {n_rows}x{n_cols}")

        key = (element_type, n_rows, n_cols)
        specialized = cls._parameterized.get(key)
        if specialized is None:
            name = f"FixedMatrix[{type_name(element_type)}, {n_rows}, {n_cols}]"
            specialized = type(cls)(name, (cls,), {
                '__slots__': (),
                '__module__': cls.__module__,
                'element_type': element_type,
                'ROWS': n_rows,
                'COLS': n_cols,
            })
            cls._parameterized[key] = specialized
        return specialized

    def __init__(self, source: Any = None, *, verified: Optional[bool] = None,
                 finalizer: Optional[Finalizer] = None):
        self._array = None
        self._ownership = OwnershipTracker.owned()
        cls = type(self)
        if cls.ROWS is None:
            raise TypeError("FixedMatrix must be parameterized: FixedMatrix[T, rows, cols]")

        n_rows, n_cols = cls.ROWS, cls.COLS
        element_type = cls.element_type
        size = n_rows * n_cols

        if source is None:
            generator = None
        elif is_matrix_like(source):
            check_operands(self, ASSIGNMENT_OP, source)
            ensure_alive(source)

            def generator(i):
                return source.element_at(*divmod(i, n_cols))
        elif isinstance(source, (list, tuple)):
            generator = _literal_generator(source, n_rows, n_cols, element_type)
        else:
            raise TypeError(f"Cannot build {cls.__name__} from {type(source).__name__}")

        self._array = StagedArray(size, generator, element_type,
                                  verified=verified, finalizer=finalizer)

    @classmethod
    def _from_array(cls, array: StagedArray) -> 'FixedMatrix':
        matrix = cls.__new__(cls)
        matrix._ownership = OwnershipTracker.owned()
        matrix._array = array
        return matrix

    @classmethod
    def generate(cls, fn: Callable[[int, int], Any], *, verified: Optional[bool] = None,
                 finalizer: Optional[Finalizer] = None) -> 'FixedMatrix':
        """
        Build each element from fn(row, col), in row-major order.

        If fn or an element constructor raises, the elements already built
        are destructed in reverse order and the error propagates.
        """
        if cls.ROWS is None:
            raise TypeError("FixedMatrix must be parameterized: FixedMatrix[T, rows, cols]")
        n_cols = cls.COLS
        array = StagedArray(cls.ROWS * n_cols, lambda i: fn(*divmod(i, n_cols)), cls.element_type,
                            verified=verified, finalizer=finalizer)
        return cls._from_array(array)

    @classmethod
    def take(cls, other: 'FixedMatrix') -> 'FixedMatrix':
        """
        Move the elements of other into a new matrix.

        other must be a FixedMatrix of the same shape and element type; it is
        left destroyed (views into it become dangling).
        """
        if cls.ROWS is None:
            raise TypeError("FixedMatrix must be parameterized: FixedMatrix[T, rows, cols]")
        if not isinstance(other, FixedMatrix):
            raise TypeError(f"{cls.__name__}.take() requires a FixedMatrix, got {type(other).__name__}")
        check_shapes(cls.shape_descriptor(), ASSIGNMENT_OP, describe(other))
        if other.element_type != cls.element_type:
            raise TypeError(f"{cls.__name__}.take() requires element type "
                            f"{type_name(cls.element_type)}, got {type_name(other.element_type)}")
        ensure_alive(other)
        logger.debug(f"Moving {type(other).__name__} into {cls.__name__}")
        return cls._from_array(StagedArray.take(other._array))

    @classmethod
    def shape_descriptor(cls) -> ShapeDescriptor:
        """Static shape of this parameterization."""
        return ShapeDescriptor(ShapeKind.FIXED, cls.ROWS, cls.COLS)

    # -------------------------------------------------------------------------
    # Shape
    # -------------------------------------------------------------------------

    @classmethod
    def rows(cls) -> int:
        return cls.ROWS

    @classmethod
    def cols(cls) -> int:
        return cls.COLS

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------

    @property
    def verified(self) -> bool:
        return self._array is not None and self._array.verified

    @property
    def is_alive(self) -> bool:
        return self._array is not None and self._array.is_alive

    def _raw_get(self, row: int, col: int) -> Any:
        return self._array.at(row * self.COLS + col)

    def _raw_put(self, row: int, col: int, value: Any) -> None:
        self._array.set_at(row * self.COLS + col, value)

    def _region_copy(self, view) -> 'FixedMatrix':
        region_type = FixedMatrix[self.element_type, view.rows(), view.cols()]
        return region_type(view, verified=self.verified)

    def copy(self) -> 'FixedMatrix':
        return type(self)(self, verified=self.verified)

    def destroy(self) -> None:
        """Destruct every element; views into this matrix become dangling."""
        if self._array is not None:
            self._array.destroy()


def _literal_generator(source: Sequence[Sequence[Any]], n_rows: int, n_cols: int,
                       element_type: ElementType) -> Callable[[int], Any]:
    """Row-major generator over a literal with aggregate-initialization padding."""
    if len(source) > n_rows:
        raise StaticShapeError(f"Too many rows in initializer: {len(source)} > {n_rows}")
    for r, row in enumerate(source):
        if not isinstance(row, (list, tuple)):
            raise TypeError(f"Initializer row {r} must be a list or tuple, got {type(row).__name__}")
        if len(row) > n_cols:
            raise StaticShapeError(f"Too many values in initializer row {r}: {len(row)} > {n_cols}")

    def generator(i):
        r, c = divmod(i, n_cols)
        if r < len(source) and c < len(source[r]):
            return source[r][c]
        return default_element(element_type)

    return generator
