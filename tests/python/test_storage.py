"""
Tests for typed slot storage.
"""

import logging

import pytest
from fractions import Fraction

from dimmatrix import Storage, VerifiedStorage, StorageStateError, MatrixError


class TestStorageLifecycle:
    """Construct / destruct on optimized slots."""

    def test_construct_converts_through_element_type(self):
        """Test construct calls the element type."""
        s = Storage(int)
        s.construct("42")
        assert s.value == 42

    def test_construct_without_args_default_constructs(self):
        """Test construct with no arguments."""
        s = Storage(float)
        s.construct()
        assert s.value == 0.0

    def test_construct_forwards_multiple_args(self):
        """Test construct forwards every argument."""
        s = Storage(Fraction)
        s.construct(3, 4)
        assert s.value == Fraction(3, 4)

    def test_untyped_stores_value_as_is(self):
        """Test untyped slot keeps the value unchanged."""
        marker = object()
        s = Storage()
        s.construct(marker)
        assert s.value is marker

    def test_untyped_rejects_multiple_args(self):
        """Test untyped slot takes one value."""
        s = Storage(object)
        with pytest.raises(TypeError):
            s.construct(1, 2)

    def test_destruct_runs_finalizer(self):
        """Test destruct runs the finalizer."""
        seen = []
        s = Storage(int, finalizer=seen.append)
        s.construct(5)
        s.destruct()
        assert seen == [5]
        assert s.value is None

    def test_value_setter(self):
        """Test value write."""
        s = Storage(int)
        s.construct(1)
        s.value = 9
        assert s.value == 9

    def test_release_skips_finalizer(self):
        """Test release bypasses the finalizer."""
        seen = []
        s = Storage(int, finalizer=seen.append)
        s.construct(5)
        assert s.release() == 5
        assert seen == []

    def test_optimized_slot_performs_no_checks(self):
        """Test optimized slot allows misuse."""
        s = Storage(int)
        s.construct(1)
        s.construct(2)
        s.destruct()
        s.destruct()
        assert not s.is_verified

    def test_optimized_slot_tracks_no_state(self):
        """Test optimized slot has no holding flag."""
        s = Storage(object)
        s.construct(None)
        assert not hasattr(s, "is_holding")


class TestVerifiedStorage:
    """State checking on verified slots."""

    def test_holding_flag_tracks_state(self):
        """Test holding flag transitions."""
        s = VerifiedStorage(int)
        assert not s.is_holding
        s.construct(3)
        assert s.is_holding
        s.destruct()
        assert not s.is_holding

    def test_zero_value_counts_as_holding(self):
        """Test falsy values still count as held."""
        s = VerifiedStorage(int)
        s.construct(0)
        assert s.is_holding
        assert s.value == 0
        s.destruct()

    def test_double_construct_raises(self):
        """Test double construct."""
        s = VerifiedStorage(int)
        s.construct(1)
        with pytest.raises(StorageStateError, match="expected to be not constructed"):
            s.construct(2)
        assert s.value == 1
        s.destruct()

    def test_destruct_while_empty_raises(self):
        """Test destruct on an empty slot."""
        s = VerifiedStorage(int)
        with pytest.raises(StorageStateError, match="expected to be constructed"):
            s.destruct()

    def test_double_destruct_raises(self):
        """Test double destruct."""
        s = VerifiedStorage(int)
        s.construct(1)
        s.destruct()
        with pytest.raises(StorageStateError):
            s.destruct()

    def test_read_while_empty_raises(self):
        """Test read on an empty slot."""
        s = VerifiedStorage(int)
        with pytest.raises(StorageStateError):
            _ = s.value

    def test_write_while_empty_raises(self):
        """Test write on an empty slot."""
        s = VerifiedStorage(int)
        with pytest.raises(StorageStateError):
            s.value = 1

    def test_adopt_and_release_are_checked(self):
        """Test adopt and release state checks."""
        s = VerifiedStorage(list)
        payload = [1, 2]
        s.adopt(payload)
        assert s.value is payload
        with pytest.raises(StorageStateError):
            s.adopt([])
        assert s.release() is payload
        with pytest.raises(StorageStateError):
            s.release()

    def test_failed_construct_leaves_slot_empty(self):
        """Test failed construct keeps the slot empty."""
        s = VerifiedStorage(int)
        with pytest.raises(ValueError):
            s.construct("not a number")
        assert not s.is_holding
        s.construct(7)
        assert s.value == 7
        s.destruct()

    def test_error_code(self):
        """Test storage error code."""
        s = VerifiedStorage(int)
        with pytest.raises(MatrixError) as excinfo:
            s.destruct()
        assert excinfo.value.code == MatrixError.ERROR_INVALID_STATE

    def test_collected_while_holding_logs_warning(self, caplog):
        """Test warning for a slot collected while holding."""
        s = VerifiedStorage(int)
        s.construct(1)
        with caplog.at_level(logging.WARNING, logger="dimmatrix.storage"):
            s.__del__()
        assert "still holding" in caplog.text
        s.destruct()
