"""
Tests for FixedMatrix.
"""

import logging

import numpy as np
import pytest

from dimmatrix import (
    ALL,
    DanglingViewError,
    FixedMatrix,
    IncompatibleOperands,
    StaticShapeError,
    VariableMatrix,
    drange,
    srange,
)


class TestFixedMatrixParameterization:
    """Test FixedMatrix[T, R, C] class creation."""

    def test_parameterization_is_cached(self):
        """Test the same parameters give the same class."""
        assert FixedMatrix[int, 2, 3] is FixedMatrix[int, 2, 3]
        assert FixedMatrix[int, 2, 3] is not FixedMatrix[int, 3, 2]
        assert FixedMatrix[int, 2, 3] is not FixedMatrix[float, 2, 3]

    def test_class_attributes(self):
        """Test element type and shape class attributes."""
        Mat = FixedMatrix[float, 4, 5]
        assert Mat.element_type is float
        assert Mat.ROWS == 4
        assert Mat.COLS == 5
        assert Mat.rows() == 4
        assert Mat.cols() == 5
        assert Mat.__name__ == "FixedMatrix[float, 4, 5]"
        assert issubclass(Mat, FixedMatrix)

    def test_unparameterized_cannot_be_instantiated(self):
        """Test bare FixedMatrix cannot be built."""
        with pytest.raises(TypeError):
            FixedMatrix()

    def test_cannot_parameterize_twice(self):
        """Test parameterizing a specialized class."""
        with pytest.raises(TypeError):
            FixedMatrix[int, 2, 2][int, 2, 2]

    def test_wrong_parameter_count(self):
        """Test parameter count validation."""
        with pytest.raises(TypeError):
            FixedMatrix[int, 2]

    def test_negative_dimension(self):
        """Test negative dimensions are rejected."""
        with pytest.raises(ValueError):
            FixedMatrix[int, -1, 2]


class TestFixedMatrixCreation:
    """Test FixedMatrix constructors."""

    def test_literal(self, fixed23):
        """Test construction from nested rows."""
        assert fixed23.rows() == 2
        assert fixed23.cols() == 3
        assert fixed23.element_at(1, 2) == 6
        assert fixed23.element_at(0, 0) == 1
        assert fixed23.shape == (2, 3)
        assert fixed23.size == 6

    def test_default(self):
        """Test default construction."""
        m = FixedMatrix[int, 2, 2]()
        assert m.tolist() == [[0, 0], [0, 0]]

    def test_default_untyped(self):
        """Test untyped default construction."""
        m = FixedMatrix[None, 1, 2]()
        assert m.tolist() == [[None, None]]

    def test_literal_padding(self):
        """Test short literals are default-filled."""
        m = FixedMatrix[int, 3, 3]([[1], [2, 3]])
        assert m.tolist() == [[1, 0, 0], [2, 3, 0], [0, 0, 0]]

    def test_literal_too_many_rows(self):
        """Test literal with too many rows."""
        with pytest.raises(StaticShapeError):
            FixedMatrix[int, 1, 2]([[1, 2], [3, 4]])

    def test_literal_too_many_columns(self):
        """Test literal with too many columns."""
        with pytest.raises(StaticShapeError):
            FixedMatrix[int, 2, 2]([[1, 2, 3]])

    def test_literal_converts_elements(self):
        """Test literal values go through the element type."""
        m = FixedMatrix[float, 1, 2]([[1, "2.5"]])
        assert m.tolist() == [[1.0, 2.5]]
        assert isinstance(m.element_at(0, 0), float)

    def test_unsupported_source(self):
        """Test unsupported source types."""
        with pytest.raises(TypeError):
            FixedMatrix[int, 1, 1](5)

    def test_converting_copy_from_fixed(self, fixed23):
        """Test converting copy from another fixed matrix."""
        m = FixedMatrix[float, 2, 3](fixed23)
        assert m.tolist() == [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]]
        assert isinstance(m.element_at(1, 1), float)

    def test_copy_from_wrong_static_shape(self, fixed23):
        """Test copy from a different static shape."""
        with pytest.raises(StaticShapeError):
            FixedMatrix[int, 3, 2](fixed23)

    def test_copy_from_variable(self, variable23):
        """Test copy from a variable matrix."""
        m = FixedMatrix[int, 2, 3](variable23)
        assert m.tolist() == [[1, 2, 3], [4, 5, 6]]

    def test_copy_from_variable_wrong_shape(self, variable23):
        """Test copy from a variable matrix of the wrong shape."""
        with pytest.raises(IncompatibleOperands) as excinfo:
            FixedMatrix[int, 3, 2](variable23)
        assert excinfo.value.op == "="

    def test_generate(self):
        """Test generate from a function of (row, col)."""
        m = FixedMatrix[int, 2, 3].generate(lambda r, c: 10 * r + c)
        assert m.tolist() == [[0, 1, 2], [10, 11, 12]]

    def test_generate_rolls_back(self, trace_log):
        """Test generate rolls back on failure."""
        Traced = trace_log.element_type(fail_on=4)
        with pytest.raises(trace_log.error):
            FixedMatrix[Traced, 2, 3].generate(lambda r, c: 3 * r + c, verified=True,
                                              finalizer=trace_log.finalizer)
        assert trace_log.destructed() == [3, 2, 1, 0]

    def test_copy_is_independent(self, fixed23):
        """Test copy does not alias the original."""
        dup = fixed23.copy()
        dup.set_element(0, 0, 100)
        assert fixed23.element_at(0, 0) == 1
        assert type(dup) is type(fixed23)

    def test_take(self, fixed23):
        """Test take moves elements and kills the source."""
        view = fixed23[0]
        moved = FixedMatrix[int, 2, 3].take(fixed23)
        assert moved.tolist() == [[1, 2, 3], [4, 5, 6]]
        assert not fixed23.is_alive
        with pytest.raises(DanglingViewError):
            view.element_at(0, 0)

    def test_take_logs(self, fixed23, caplog):
        """Test take is logged."""
        with caplog.at_level(logging.DEBUG, logger="dimmatrix.matrix"):
            FixedMatrix[int, 2, 3].take(fixed23)
        assert "Moving" in caplog.text

    def test_take_requires_same_shape_and_type(self, fixed23):
        """Test take validation."""
        with pytest.raises(StaticShapeError):
            FixedMatrix[int, 3, 2].take(fixed23)
        with pytest.raises(TypeError):
            FixedMatrix[float, 2, 3].take(fixed23)
        with pytest.raises(TypeError):
            FixedMatrix[int, 2, 3].take(VariableMatrix[int](2, 3))

    def test_verified_storage(self):
        """Test verified storage option."""
        m = FixedMatrix[int, 1, 1](verified=True)
        assert m.verified


class TestFixedMatrixAccess:
    """Test element access and indexing."""

    def test_set_element(self, fixed23):
        """Test element write."""
        fixed23.set_element(1, 0, "40")
        assert fixed23.element_at(1, 0) == 40

    def test_bounds_check(self, fixed23):
        """Test bounds checking on element access."""
        with pytest.raises(IndexError):
            fixed23.element_at(2, 0)
        with pytest.raises(IndexError):
            fixed23.set_element(0, 3, 1)

    def test_row_index(self, fixed23):
        """Test integer row index."""
        row = fixed23[1]
        assert row.shape == (1, 3)
        assert row.tolist() == [[4, 5, 6]]

    def test_srange_index(self, fixed23):
        """Test srange row selection."""
        block = fixed23[srange(1, 1)][srange(2, 1)]
        assert block.shape == (1, 2)
        assert block.tolist() == [[5, 6]]

    def test_all_index(self, fixed23):
        """Test ALL selects every row."""
        assert fixed23[ALL].shape == (2, 3)

    def test_drange_rejected(self, fixed23):
        """Test drange on a fixed matrix."""
        with pytest.raises(TypeError):
            fixed23[drange(1)]

    def test_out_of_range(self, fixed23):
        """Test out-of-range selections."""
        with pytest.raises(IndexError):
            fixed23[2]
        with pytest.raises(IndexError):
            fixed23[srange(2, 1)]
        with pytest.raises(IndexError):
            fixed23[-1]

    def test_element_through_chained_index(self, fixed23):
        """Test single element reached by chained indexing."""
        assert fixed23[1][2].item() == 6
        assert int(fixed23[0][1]) == 2

    def test_setitem_row(self, fixed23):
        """Test assigning a row through indexing."""
        fixed23[0] = FixedMatrix[int, 1, 3]([[7, 8, 9]])
        assert fixed23.tolist() == [[7, 8, 9], [4, 5, 6]]

    def test_setitem_element(self, fixed23):
        """Test assigning one element through indexing."""
        fixed23[0][0] = 11
        assert fixed23.element_at(0, 0) == 11

    def test_iteration_yields_rows(self, fixed23):
        """Test iteration yields row views."""
        assert [row.tolist() for row in fixed23] == [[[1, 2, 3]], [[4, 5, 6]]]
        assert len(fixed23) == 2

    def test_numpy_roundtrip(self, fixed23):
        """Test numpy export and import."""
        arr = np.asarray(fixed23)
        assert arr.dtype == np.int_
        np.testing.assert_array_equal(arr, [[1, 2, 3], [4, 5, 6]])
        back = FixedMatrix[int, 2, 3].from_numpy(arr)
        assert back == fixed23

    def test_repr(self, fixed23):
        """Test string representation."""
        assert repr(fixed23) == "FixedMatrix[int, 2, 3]([[1, 2, 3], [4, 5, 6]])"


class TestFixedMatrixComparison:
    """Static shape checks on comparisons."""

    def test_equal(self, fixed23):
        """Test element-wise equality."""
        other = FixedMatrix[int, 2, 3]([[1, 2, 3], [4, 5, 6]])
        assert fixed23 == other
        assert not fixed23 != other
        other.set_element(1, 2, 0)
        assert fixed23 != other

    def test_equal_across_element_types(self, fixed23):
        """Test equality between element types."""
        assert fixed23 == FixedMatrix[float, 2, 3](fixed23)

    def test_equal_wrong_static_shape(self, fixed23):
        """Test equality with a different static shape."""
        with pytest.raises(StaticShapeError):
            fixed23 == FixedMatrix[int, 3, 2]()

    def test_static_error_is_type_error(self, fixed23):
        """Test StaticShapeError is a TypeError."""
        with pytest.raises(TypeError):
            fixed23 == FixedMatrix[int, 3, 2]()

    def test_compare_with_scalar_requires_1x1(self, fixed23):
        """Test scalar comparison needs a 1x1 matrix."""
        with pytest.raises(StaticShapeError):
            fixed23 == 1
        one = FixedMatrix[int, 1, 1]([[5]])
        assert one == 5
        assert one != 4

    def test_ordering_1x1(self):
        """Test ordering operators on 1x1 matrices."""
        a = FixedMatrix[int, 1, 1]([[1]])
        b = FixedMatrix[int, 1, 1]([[2]])
        assert a < b
        assert a <= b
        assert b > a
        assert b >= a
        assert a < 3
        assert 3 > a

    def test_ordering_non_1x1(self, fixed23):
        """Test ordering on larger matrices."""
        with pytest.raises(StaticShapeError):
            fixed23 < fixed23

    def test_against_variable_checks_at_run_time(self, fixed23, variable23):
        """Test comparison with a variable matrix."""
        assert fixed23 == variable23
        with pytest.raises(IncompatibleOperands):
            fixed23 == VariableMatrix[int](3, 2)

    def test_unhashable(self, fixed23):
        """Test matrices are unhashable."""
        with pytest.raises(TypeError):
            hash(fixed23)


class TestFixedMatrixLifetime:
    """Explicit destruction and context manager support."""

    def test_destroy_runs_finalizers_in_reverse(self, trace_log):
        """Test destroy order."""
        Traced = trace_log.element_type()
        m = FixedMatrix[Traced, 2, 2].generate(lambda r, c: 2 * r + c, finalizer=trace_log.finalizer)
        m.destroy()
        assert trace_log.destructed() == [3, 2, 1, 0]
        assert not m.is_alive

    def test_context_manager(self):
        """Test context manager exit destroys the matrix."""
        with FixedMatrix[int, 1, 2]([[1, 2]]) as m:
            view = m[0]
            assert view.tolist() == [[1, 2]]
        with pytest.raises(DanglingViewError):
            view.tolist()
        assert repr(m) == "FixedMatrix[int, 1, 2](<destroyed>)"
