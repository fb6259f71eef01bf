"""
Region Views

Non-owning rectangular windows into a matrix. A view stores its root owner
and the placement of its region within it; every element access is
translated by the region offset and delegated to the owner, so writes
through a view are visible in the owner and in every other overlapping view.

    RowsView  - produced by indexing a matrix (selects rows across all
                columns) or by indexing an AreaView. Indexing it selects
                columns and yields an AreaView.
    AreaView  - produced by indexing a RowsView. Indexing it selects rows
                and yields a RowsView.

Alternating the two therefore narrows rows and columns in turn:

    m[1:]          -> RowsView   (rows)
    m[1][2]        -> AreaView   (rows, then columns)
    m[1][2][0]     -> RowsView   (rows, then columns, then rows)

Views of views always refer to the root owner with composed offsets, never
to the intermediate view. A view holds a strong reference to its owner and
raises DanglingViewError if the owner is destroyed or moved from.
"""

from __future__ import annotations

from typing import Any

from ._base import MatrixBase, move_to
from ._ownership import OwnershipTracker, ensure_alive
from ._shape import ASSIGNMENT_OP, check_operands, check_scalar
from ._typing import convert_element, is_matrix_like

__all__ = ['RegionView', 'RowsView', 'AreaView']


class RegionView(MatrixBase):
    """
    Rectangular window of rows x cols elements starting at
    (first_row, first_col) of the owner.

    Views are only created by indexing; they are cheap to copy and never
    own elements.
    """

    __slots__ = ('_ownership', '_owner', '_rows', '_cols', '_first_row', '_first_col')

    def __init__(self, owner: MatrixBase, rows: int, cols: int, first_row: int, first_col: int):
        self._ownership = OwnershipTracker.view(owner)
        self._owner = self._ownership.owner
        self._rows = rows
        self._cols = cols
        self._first_row = first_row
        self._first_col = first_col

    # -------------------------------------------------------------------------
    # Matrix-like Interface
    # -------------------------------------------------------------------------

    def rows(self) -> int:
        return self._rows

    def cols(self) -> int:
        return self._cols

    @property
    def element_type(self):
        return self._owner.element_type

    @property
    def owner(self) -> MatrixBase:
        """Root matrix this view aliases."""
        return self._owner

    @property
    def offset(self):
        """Position (first_row, first_col) of the region within the owner."""
        return (self._first_row, self._first_col)

    @property
    def is_view(self) -> bool:
        return True

    @property
    def is_alive(self) -> bool:
        return self._ownership.is_valid

    def _origin(self):
        return self._owner, self._first_row, self._first_col

    def _raw_get(self, row: int, col: int) -> Any:
        return self._owner._raw_get(self._first_row + row, self._first_col + col)

    def _raw_put(self, row: int, col: int, value: Any) -> None:
        self._owner._raw_put(self._first_row + row, self._first_col + col, value)

    # -------------------------------------------------------------------------
    # Assignment
    # -------------------------------------------------------------------------

    def assign(self, value: Any, move: bool = False) -> 'RegionView':
        """
        Overwrite the region with value.

        Args:
            value: Matrix-like of the same shape, or a scalar for a 1x1 region
            move: Transfer elements as-is and reset the source positions to
                their default. Falls back to a copy when the element types
                differ or value is not a dimmatrix matrix.

        Returns:
            self

        Raises:
            StaticShapeError: If both shapes are static and differ
            IncompatibleOperands: If the run-time shapes differ
        """
        ensure_alive(self)
        if not is_matrix_like(value):
            check_scalar(self, ASSIGNMENT_OP)
            self._raw_put(0, 0, convert_element(self.element_type, value))
            return self

        if move and isinstance(value, MatrixBase) and value.element_type == self.element_type:
            move_to(self, value)
            return self

        check_operands(self, ASSIGNMENT_OP, value)
        element_type = self.element_type
        # Every element is read and converted before the first write
        values = [[convert_element(element_type, value.element_at(r, c))
                   for c in range(self._cols)]
                  for r in range(self._rows)]
        for r, row in enumerate(values):
            for c, element in enumerate(row):
                self._raw_put(r, c, element)
        return self

    def to_matrix(self):
        """Independent copy of the region with the owner's matrix type family."""
        return self._owner._region_copy(self)

    def __repr__(self) -> str:
        if not self.is_alive:
            return f"{type(self).__name__}(<dangling>)"
        return (f"{type(self).__name__}({self.tolist()!r}, "
                f"offset={self.offset}, owner={type(self._owner).__name__})")


class RowsView(RegionView):
    """View whose indexing selects columns."""

    __slots__ = ()

    def __getitem__(self, index: Any) -> 'AreaView':
        """
        Column selection.

        Args:
            index: Column index, range or ALL

        Returns:
            AreaView over the selected columns of this view's rows
        """
        ensure_alive(self)
        return self._select_cols(index)


class AreaView(RegionView):
    """View whose indexing selects rows."""

    __slots__ = ()

    def __getitem__(self, index: Any) -> 'RowsView':
        """
        Row selection.

        Args:
            index: Row index, range or ALL

        Returns:
            RowsView over the selected rows of this view's columns
        """
        ensure_alive(self)
        return self._select_rows(index)
