"""
dimmatrix - Dimension-Parameterized Matrices

Generic matrix containers with aliasing region views and shape checking:
- FixedMatrix[T, R, C]: shape is part of the type, built on rollback-safe
  staged storage
- VariableMatrix[T]: shape chosen at construction
- Region views (RowsView / AreaView) that read, write, compare and slice a
  sub-rectangle of a matrix without copying
- Shape checks on every comparison and assignment between matrix-likes

Components:
- Storage / VerifiedStorage: typed slots, optionally state-checked
- StagedArray: all-or-nothing bulk construction over slots
- config: global configuration with thread-local overrides

Architecture:
    ┌──────────────────────────────────────────────┐
    │   FixedMatrix[T, R, C]  │  VariableMatrix[T] │
    ├──────────────────────────────────────────────┤
    │  Views: RowsView <-> AreaView (aliasing)     │
    │  Shape: FIXED (static) | VARIABLE (run-time) │
    └──────────────────────────────────────────────┘

Example:
    >>> from dimmatrix import FixedMatrix, VariableMatrix, ALL, drange
    >>>
    >>> m = FixedMatrix[int, 2, 3]([[1, 2, 3], [4, 5, 6]])
    >>> m.element_at(1, 2)
    6
    >>> v = VariableMatrix[int](3, 2, [[1], [2, 3, 4]])
    >>> v.tolist()
    [[1, 0], [2, 3], [0, 0]]
    >>>
    >>> row = v[1]               # aliases v
    >>> row[0] = 20
    >>> v.element_at(1, 0)
    20
    >>> v[drange(2)] == VariableMatrix[int](2, 3)
    Traceback (most recent call last):
        ...
    dimmatrix._errors.IncompatibleOperands: Incompatible operands: variable 2x2 == variable 2x3
"""

__version__ = '0.1.0'

from ._errors import (
    MatrixError,
    StorageStateError,
    IncompatibleOperands,
    StaticShapeError,
    DanglingViewError,
)
from ._config import (
    StorageConfig,
    CheckConfig,
    MatrixConfig,
    config,
    get_config,
    set_verified,
    set_bounds_check,
)
from ._typing import MatrixLike, is_matrix_like
from ._storage import Storage, VerifiedStorage
from ._array import StagedArray
from ._ownership import OwnershipTracker
from ._shape import (
    ShapeKind,
    ShapeDescriptor,
    describe,
    check_shapes,
    check_operands,
)
from ._base import (
    MatrixBase,
    OwningMatrix,
    ALL,
    SRange,
    DRange,
    srange,
    drange,
    rows,
    cols,
    element_at,
    equal_to,
    for_each_element,
    move_to,
)
from ._views import RegionView, RowsView, AreaView
from ._fixed import FixedMatrix, FixedRowsView, FixedAreaView
from ._variable import VariableMatrix, VariableRowsView, VariableAreaView

__all__ = [
    # Version
    '__version__',

    # Matrices
    'FixedMatrix',
    'VariableMatrix',
    'MatrixBase',
    'OwningMatrix',

    # Views
    'RegionView',
    'RowsView',
    'AreaView',
    'FixedRowsView',
    'FixedAreaView',
    'VariableRowsView',
    'VariableAreaView',

    # Indexing
    'ALL',
    'SRange',
    'DRange',
    'srange',
    'drange',

    # Generic algorithms
    'rows',
    'cols',
    'element_at',
    'equal_to',
    'for_each_element',
    'move_to',

    # Storage
    'Storage',
    'VerifiedStorage',
    'StagedArray',
    'OwnershipTracker',

    # Shape checking
    'ShapeKind',
    'ShapeDescriptor',
    'describe',
    'check_shapes',
    'check_operands',

    # Type checking
    'MatrixLike',
    'is_matrix_like',

    # Errors
    'MatrixError',
    'StorageStateError',
    'IncompatibleOperands',
    'StaticShapeError',
    'DanglingViewError',

    # Configuration
    'StorageConfig',
    'CheckConfig',
    'MatrixConfig',
    'config',
    'get_config',
    'set_verified',
    'set_bounds_check',
]
