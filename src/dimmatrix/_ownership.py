"""Ownership and Reference Management.

This module tracks who owns matrix storage and lets region views detect
that their owner has gone away.

Key Concepts:
    - Owner: a concrete matrix exclusively owns its element storage.
    - View: a region view borrows its owner. It holds a strong reference,
      so garbage collection can never free the owner underneath it, and it
      checks the owner's liveness before every element access, so explicit
      destruction (destroy(), ``with`` exit, being moved from) is detected.
    - Flattening: a view of a view always refers to the root owner, never
      to the intermediate view.

Safety Model:
    1. OWNED data: No external dependencies, always safe
    2. VIEW data: Valid exactly as long as the owner is alive
"""

from __future__ import annotations

from typing import Any, Optional

from ._errors import DanglingViewError

__all__ = [
    'OwnershipTracker',
    'ensure_alive',
]


class OwnershipTracker:
    """Tracks ownership and validity of borrowed storage.

    Attributes:
        _is_owned: Whether we own the data.
        _owner: Strong reference to the owning matrix (views only).

    Example:
        >>> tracker = OwnershipTracker.view(matrix)
        >>> matrix.destroy()
        >>> tracker.is_valid
        False
    """

    __slots__ = ('_is_owned', '_owner')

    def __init__(self, owner: Optional[Any] = None, owned: bool = True):
        self._is_owned = owned
        self._owner = None if owned else owner

    @classmethod
    def owned(cls) -> 'OwnershipTracker':
        """Create tracker for owned data."""
        return cls(owner=None, owned=True)

    @classmethod
    def view(cls, owner: Any) -> 'OwnershipTracker':
        """Create tracker for view data (strong ref to the root owner)."""
        # Flatten: a view's tracker refers to the owner, not to the view
        while hasattr(owner, '_ownership') and owner._ownership.is_view:
            owner = owner._ownership.owner
        return cls(owner=owner, owned=False)

    @property
    def is_owned(self) -> bool:
        return self._is_owned

    @property
    def is_view(self) -> bool:
        return not self._is_owned

    @property
    def owner(self) -> Optional[Any]:
        """Owning matrix (None for owned data)."""
        return self._owner

    @property
    def is_valid(self) -> bool:
        """Check if the owner is still alive.

        Returns:
            True if owned, or if the owner has not been destroyed.
        """
        if self._is_owned:
            return True
        return bool(getattr(self._owner, 'is_alive', True))

    def ensure_valid(self) -> None:
        """Raise if the owner is no longer alive.

        Raises:
            DanglingViewError: If the owner was destroyed or moved from.
        """
        if not self.is_valid:
            raise DanglingViewError(
                f"Owner {type(self._owner).__name__} was destroyed; "
                "this view is no longer valid."
            )

    def __repr__(self) -> str:
        if self._is_owned:
            return "OwnershipTracker(owned)"
        alive = "alive" if self.is_valid else "dead"
        return f"OwnershipTracker(view of {type(self._owner).__name__}, {alive})"


def ensure_alive(obj: Any) -> None:
    """Ensure object's storage is still valid.

    Args:
        obj: Matrix or view to check.

    Raises:
        DanglingViewError: If the storage was destroyed.
    """
    tracker = getattr(obj, '_ownership', None)
    if tracker is not None:
        tracker.ensure_valid()
    if not getattr(obj, 'is_alive', True):
        raise DanglingViewError(f"{type(obj).__name__} has been destroyed")
