"""
Error handling for dimmatrix.

Two error families are raised by the package:

- Construction-lifecycle violations (verified storage only): double construct,
  double destruct, access while empty. These are programmer errors.
- Shape violations: operands whose shapes do not satisfy an operation.
  Mismatches between two static (fixed-dimension) shapes are type errors;
  mismatches detected on run-time shapes raise IncompatibleOperands.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ._shape import ShapeDescriptor


# =============================================================================
# Error Codes
# =============================================================================

MATRIX_OK = 0

# General errors (1-9)
MATRIX_ERROR_UNKNOWN = 1
MATRIX_ERROR_INTERNAL = 2

# Shape errors (10-19)
MATRIX_ERROR_INCOMPATIBLE_OPERANDS = 10
MATRIX_ERROR_STATIC_SHAPE = 11

# Lifecycle errors (20-29)
MATRIX_ERROR_INVALID_STATE = 20
MATRIX_ERROR_DANGLING_VIEW = 21


_ERROR_MESSAGES = {
    MATRIX_OK: "Success",
    MATRIX_ERROR_UNKNOWN: "Unknown error",
    MATRIX_ERROR_INTERNAL: "Internal error",
    MATRIX_ERROR_INCOMPATIBLE_OPERANDS: "Incompatible operands",
    MATRIX_ERROR_STATIC_SHAPE: "Static shape mismatch",
    MATRIX_ERROR_INVALID_STATE: "Invalid storage state",
    MATRIX_ERROR_DANGLING_VIEW: "View outlived its owner",
}


# =============================================================================
# Exception Classes
# =============================================================================

class MatrixError(Exception):
    """
    Base exception for all dimmatrix errors.

    Attributes:
        code: One of the MATRIX_ERROR_* constants
        message: Human readable description
    """

    OK = MATRIX_OK
    ERROR_UNKNOWN = MATRIX_ERROR_UNKNOWN
    ERROR_INTERNAL = MATRIX_ERROR_INTERNAL
    ERROR_INCOMPATIBLE_OPERANDS = MATRIX_ERROR_INCOMPATIBLE_OPERANDS
    ERROR_STATIC_SHAPE = MATRIX_ERROR_STATIC_SHAPE
    ERROR_INVALID_STATE = MATRIX_ERROR_INVALID_STATE
    ERROR_DANGLING_VIEW = MATRIX_ERROR_DANGLING_VIEW

    default_code = MATRIX_ERROR_UNKNOWN

    def __init__(self, message: Optional[str] = None, code: Optional[int] = None):
        if code is None:
            code = self.default_code
        self.code = code
        if message is None:
            message = _ERROR_MESSAGES.get(code, f"Unknown error (code={code})")
        self.message = message
        super().__init__(message)

    @classmethod
    def from_code(cls, code: int, context: str = "") -> "MatrixError":
        """Create exception from error code with optional context."""
        base_msg = _ERROR_MESSAGES.get(code, "Unknown error")
        msg = f"{context}: {base_msg}" if context else base_msg
        return cls(msg, code)


class StorageStateError(MatrixError):
    """
    A slot was driven through an illegal state transition.

    Only raised by verified storage.
    """

    default_code = MATRIX_ERROR_INVALID_STATE


class IncompatibleOperands(MatrixError, ValueError):
    """
    Run-time shape check failed.

    Attributes:
        op: Operator symbol that was attempted ("==", "<", "=", ...)
        lhs: Shape descriptor of the left operand
        rhs: Shape descriptor of the right operand
    """

    default_code = MATRIX_ERROR_INCOMPATIBLE_OPERANDS

    def __init__(self, lhs: "ShapeDescriptor", op: str, rhs: "ShapeDescriptor"):
        self.lhs = lhs
        self.op = op
        self.rhs = rhs
        super().__init__(f"Incompatible operands: {lhs} {op} {rhs}")


class StaticShapeError(MatrixError, TypeError):
    """
    Two static shapes cannot satisfy an operation.

    Fixed-dimension shapes are part of the matrix type, so this is raised
    from the operand types alone, before any element is looked at.
    """

    default_code = MATRIX_ERROR_STATIC_SHAPE

    def __init__(self, message: str, op: Optional[str] = None):
        self.op = op
        super().__init__(message)


class DanglingViewError(MatrixError, RuntimeError):
    """A view was used after its owning matrix was destroyed or moved from."""

    default_code = MATRIX_ERROR_DANGLING_VIEW


__all__ = [
    "MATRIX_OK",
    "MATRIX_ERROR_UNKNOWN",
    "MATRIX_ERROR_INTERNAL",
    "MATRIX_ERROR_INCOMPATIBLE_OPERANDS",
    "MATRIX_ERROR_STATIC_SHAPE",
    "MATRIX_ERROR_INVALID_STATE",
    "MATRIX_ERROR_DANGLING_VIEW",
    "MatrixError",
    "StorageStateError",
    "IncompatibleOperands",
    "StaticShapeError",
    "DanglingViewError",
]
