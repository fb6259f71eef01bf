"""Typed Slot Storage.

A slot is a single storage cell holding zero or one element, with an
explicit construct/destruct lifecycle driven by its owner.

Two modes are provided:

    Storage          - optimized: no state flag, no checks. Misuse is the
                       owner's responsibility, as with raw storage.
    VerifiedStorage  - verified: tracks Empty/Holding and raises
                       StorageStateError on double construct, double
                       destruct or access while empty.

The verified mode exists so that owners (StagedArray) can be instrumented
to prove that their rollback protocol never misuses a slot.

Example:
    >>> s = VerifiedStorage(int)
    >>> s.construct(7)
    >>> s.value
    7
    >>> s.destruct()
    >>> s.value
    Traceback (most recent call last):
        ...
    StorageStateError: The object was expected to be constructed
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from ._errors import StorageStateError
from ._typing import ElementType, convert_element, is_untyped

__all__ = ['Storage', 'VerifiedStorage', 'Finalizer']

logger = logging.getLogger("dimmatrix.storage")

Finalizer = Callable[[Any], None]


class Storage:
    """
    Optimized single-element slot.

    Attributes:
        _value: Held element (None while empty).
        _element_type: Callable used to construct the element.
        _finalizer: Optional hook run on the element when it is destructed.
    """

    __slots__ = ('_value', '_element_type', '_finalizer')

    def __init__(self, element_type: ElementType = None, finalizer: Optional[Finalizer] = None):
        self._value = None
        self._element_type = element_type
        self._finalizer = finalizer

    @property
    def element_type(self) -> ElementType:
        return self._element_type

    @property
    def is_verified(self) -> bool:
        return False

    def construct(self, *args, **kwargs) -> None:
        """Construct the element in place from args."""
        if is_untyped(self._element_type):
            if len(args) > 1 or kwargs:
                raise TypeError("Untyped storage is constructed from at most one value")
            self._value = convert_element(self._element_type, args[0]) if args else None
        else:
            self._value = self._element_type(*args, **kwargs)

    def adopt(self, value: Any) -> None:
        """Construct by taking an already-built element as-is (move)."""
        self._value = value

    def destruct(self) -> None:
        """Destroy the held element."""
        value, self._value = self._value, None
        if self._finalizer is not None:
            self._finalizer(value)

    def release(self) -> Any:
        """Give up the held element without destroying it."""
        value, self._value = self._value, None
        return value

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, new_value: Any) -> None:
        self._value = new_value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class VerifiedStorage(Storage):
    """
    Single-element slot with run-time state verification.

    Every transition is checked against the tracked state; illegal ones raise
    StorageStateError before anything is touched.
    """

    __slots__ = ('_holding',)

    def __init__(self, element_type: ElementType = None, finalizer: Optional[Finalizer] = None):
        super().__init__(element_type, finalizer)
        self._holding = False

    def __del__(self):
        if getattr(self, '_holding', False):
            logger.warning(f"Slot of type {type(self._value).__name__} collected while still holding a value")

    @property
    def is_verified(self) -> bool:
        return True

    @property
    def is_holding(self) -> bool:
        return self._holding

    def _verify_holding(self, expected: bool) -> None:
        if self._holding != expected:
            msg = ("The object was expected to be constructed" if expected
                   else "The object was expected to be not constructed")
            raise StorageStateError(msg)

    def construct(self, *args, **kwargs) -> None:
        self._verify_holding(False)
        super().construct(*args, **kwargs)
        self._holding = True

    def adopt(self, value: Any) -> None:
        self._verify_holding(False)
        super().adopt(value)
        self._holding = True

    def destruct(self) -> None:
        self._verify_holding(True)
        self._holding = False
        super().destruct()

    def release(self) -> Any:
        self._verify_holding(True)
        self._holding = False
        return super().release()

    @property
    def value(self) -> Any:
        self._verify_holding(True)
        return self._value

    @value.setter
    def value(self, new_value: Any) -> None:
        self._verify_holding(True)
        self._value = new_value
