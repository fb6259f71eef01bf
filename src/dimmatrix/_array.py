"""
Staged Array Container

Fixed-length owning sequence of storage slots built element by element,
with all-or-nothing construction.

Construction contract:
    generator(i) is called for i = 0..N-1 in ascending order and slot i is
    constructed from its result immediately afterwards. If the generator or
    the construction of slot k fails, slots k-1..0 are destructed in
    descending order and the original exception propagates. Slot k is never
    left constructed, and no slot is destructed twice.

Destruction:
    destroy() destructs all N slots in descending order, exactly once.
    It is idempotent and also runs on garbage collection and on leaving a
    ``with`` block.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, List, Optional, Sequence

from ._config import config
from ._storage import Finalizer, Storage, VerifiedStorage
from ._typing import ElementType, type_name

__all__ = ['StagedArray']

logger = logging.getLogger("dimmatrix.array")


class StagedArray:
    """
    Owning sequence of N slots built through a generator.

    Attributes:
        size (int): Number of elements
        element_type: Callable used to construct each element
        verified (bool): Whether slots track and check their state
        is_alive (bool): False once destroyed, moved from or rolled back

    Example:
        >>> arr = StagedArray(3, lambda i: i * 10, element_type=int)
        >>> arr[2]
        20
        >>> arr[1] = 7
        >>> arr.tolist()
        [0, 7, 20]
    """

    def __init__(
        self,
        size: int,
        generator: Optional[Callable[[int], Any]],
        element_type: ElementType = None,
        *,
        verified: Optional[bool] = None,
        finalizer: Optional[Finalizer] = None,
        convert: bool = True,
    ):
        """
        Build the array from generator.

        Args:
            size: Number of elements
            generator: Called with each index in ascending order; its result
                is passed to the element type's constructor. None
                default-constructs every element.
            element_type: Element constructor (None stores values as-is)
            verified: Use VerifiedStorage slots (default from config)
            finalizer: Hook run on each element when it is destructed
            convert: If False, generator results are adopted as-is (move)

        Raises:
            Whatever generator or the element constructor raised, after
            rolling back every element already constructed.
        """
        # Set before anything can fail so that __del__ sees a consistent state
        self._slots: Optional[List[Storage]] = None
        self._constructed = 0

        if size < 0:
            raise ValueError(f"StagedArray size must be non-negative, got {size}")
        if verified is None:
            verified = config.storage.verified

        self._size = size
        self._element_type = element_type
        self._verified = verified
        self._finalizer = finalizer

        slot_type = VerifiedStorage if verified else Storage
        self._slots = [slot_type(element_type, finalizer) for _ in range(size)]

        index = 0
        try:
            for index in range(size):
                slot = self._slots[index]
                if generator is None:
                    slot.construct()
                elif convert:
                    slot.construct(generator(index))
                else:
                    slot.adopt(generator(index))
                self._constructed = index + 1
        except BaseException as e:
            logger.debug(f"Construction failed at index {index} ({type(e).__name__}), "
                         f"rolling back {self._constructed} element(s)")
            self._rollback(self._constructed)
            self._slots = None
            raise

    # -------------------------------------------------------------------------
    # Alternate Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def default(cls, size: int, element_type: ElementType = None, **kwargs) -> 'StagedArray':
        """Create array of default-constructed elements."""
        return cls(size, None, element_type, **kwargs)

    @classmethod
    def from_list(cls, values: Sequence[Any], element_type: ElementType = None, **kwargs) -> 'StagedArray':
        """Create array from a Python sequence."""
        return cls(len(values), values.__getitem__, element_type, **kwargs)

    @classmethod
    def copy_of(cls, other: 'StagedArray', element_type: ElementType = None, **kwargs) -> 'StagedArray':
        """
        Converting copy of another array.

        Args:
            other: Source array (left untouched)
            element_type: Target element type (default: other's element type)
        """
        if element_type is None:
            element_type = other.element_type
        kwargs.setdefault('verified', other.verified)
        return cls(len(other), other.at, element_type, **kwargs)

    @classmethod
    def take(cls, other: 'StagedArray', **kwargs) -> 'StagedArray':
        """
        Move the elements of other into a new array.

        Elements are transferred as-is (no conversion). The source gives up
        its elements without finalizing them and is no longer alive.
        """
        values = other.tolist()
        kwargs.setdefault('verified', other.verified)
        kwargs.setdefault('finalizer', other._finalizer)
        moved = cls(len(values), values.__getitem__, other.element_type, convert=False, **kwargs)
        other._release()
        return moved

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def size(self) -> int:
        """Number of elements."""
        return self._size

    @property
    def element_type(self) -> ElementType:
        return self._element_type

    @property
    def verified(self) -> bool:
        return self._verified

    @property
    def is_alive(self) -> bool:
        return self._slots is not None

    # -------------------------------------------------------------------------
    # Element Access
    # -------------------------------------------------------------------------

    def at(self, index: int) -> Any:
        """Element at index (delegates to the slot's value)."""
        return self._slots[index].value

    def set_at(self, index: int, value: Any) -> None:
        """Replace the element at index with an already-built value."""
        self._slots[index].value = value

    def __getitem__(self, index: int) -> Any:
        return self._checked_slot(index).value

    def __setitem__(self, index: int, value: Any) -> None:
        self._checked_slot(index).value = value

    def _checked_slot(self, index: int) -> Storage:
        if self._slots is None:
            raise IndexError("StagedArray has been destroyed")
        if not isinstance(index, int):
            raise TypeError(f"StagedArray indices must be integers, got {type(index).__name__}")
        if index < 0 or index >= self._size:
            raise IndexError(f"Index {index} out of bounds [0, {self._size})")
        return self._slots[index]

    def __len__(self) -> int:
        return self._size if self._slots is not None else 0

    def __iter__(self) -> Iterator[Any]:
        for index in range(len(self)):
            yield self._slots[index].value

    def tolist(self) -> List[Any]:
        return list(self)

    # -------------------------------------------------------------------------
    # Destruction
    # -------------------------------------------------------------------------

    def _destruct(self, count: int) -> None:
        """Destruct slots count-1..0 in descending order."""
        while count > 0:
            count -= 1
            self._constructed = count
            self._slots[count].destruct()

    def _rollback(self, count: int) -> None:
        """
        Destruct slots count-1..0 after a failed construction.

        A finalizer error is logged and the remaining slots are still
        destructed, so the construction error is the one that propagates.
        """
        while count > 0:
            count -= 1
            self._constructed = count
            try:
                self._slots[count].destruct()
            except Exception as e:
                logger.warning(f"Finalizer failed on element {count} during rollback: {e!r}")

    def _release(self) -> None:
        """Give up all elements without destructing them (moved-from)."""
        count = self._constructed
        while count > 0:
            count -= 1
            self._slots[count].release()
        self._constructed = 0
        self._slots = None

    def destroy(self) -> None:
        """
        Destruct every element in descending order.

        Safe to call more than once: the second call finds nothing to do.
        """
        if self._slots is None:
            return
        if self._constructed:
            logger.debug(f"Destroying StagedArray[{type_name(self._element_type)}] "
                         f"of {self._constructed} element(s)")
        self._destruct(self._constructed)
        self._slots = None

    def __del__(self):
        if getattr(self, '_slots', None) is not None:
            self.destroy()

    def __enter__(self) -> 'StagedArray':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.destroy()

    def __repr__(self) -> str:
        if self._slots is None:
            return f"StagedArray(<destroyed>, element_type={type_name(self._element_type)})"
        return (f"StagedArray({self.tolist()!r}, "
                f"element_type={type_name(self._element_type)}, verified={self._verified})")
