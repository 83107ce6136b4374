"""
Error handling for LLA.

LAPACK routines report their status through the trailing INFO argument:

    INFO == 0   success
    INFO <  0   argument number -INFO had an illegal value
    INFO >  0   the computation could not be completed (singular factor,
                non positive definite leading minor, no convergence, ...)

check_info() translates a non-zero status into InvalidArgument or
NumericalFailure. Both derive from KernelError, which carries the resolved
procedure name and the raw code.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple


logger = logging.getLogger("lla.kernel")


# =============================================================================
# Status Codes
# =============================================================================

INFO_OK = 0


# =============================================================================
# Exception Classes
# =============================================================================

class LLAError(Exception):
    """Base exception for all LLA errors."""
    pass


class IndexOutOfRange(LLAError, IndexError):
    """
    Coordinate outside the matrix bounds.

    Attributes:
        row, col: Requested coordinate
        shape: (nrow, ncol) of the matrix
    """

    def __init__(self, row: int, col: int, shape: Tuple[int, int]):
        self.row = row
        self.col = col
        self.shape = shape
        super().__init__(f"Index ({row}, {col}) out of range for {shape[0]}x{shape[1]} matrix")


class ReadOnlyViolation(LLAError):
    """
    Non-zero write into the implied-zero half of a triangular matrix.

    Attributes:
        row, col: Target coordinate
        value: Rejected value
        kind: Name of the structural kind
    """

    def __init__(self, row: int, col: int, value, kind: str):
        self.row = row
        self.col = col
        self.value = value
        self.kind = kind
        super().__init__(
            f"Cannot set ({row}, {col}) of {kind} matrix to {value!r}: "
            f"element is in the implied zero region"
        )


class LengthMismatch(LLAError, ValueError):
    """
    Sequence or buffer length incompatible with the requested shape.

    Attributes:
        length: Actual length
        expected: Required length or divisor
    """

    def __init__(self, length: int, expected: int, message: Optional[str] = None):
        self.length = length
        self.expected = expected
        if message is None:
            message = f"Length {length} is not compatible with {expected}"
        super().__init__(message)


class UnrepresentableTypeCombination(LLAError, TypeError):
    """
    No element type can represent every operand.

    Attributes:
        flags: OR of the operand capability flags
    """

    def __init__(self, flags: int, message: Optional[str] = None):
        self.flags = flags
        if message is None:
            message = f"No element type represents capability flags {flags:#x}"
        super().__init__(message)


class KernelError(LLAError):
    """
    Native kernel reported a non-zero INFO status.

    Attributes:
        procedure: Resolved kernel name (e.g. 'dgesv')
        info: Raw INFO value
    """

    def __init__(self, procedure: str, info: int, message: Optional[str] = None):
        self.procedure = procedure
        self.info = info
        if message is None:
            message = f"{procedure} returned INFO={info}"
        super().__init__(message)


class InvalidArgument(KernelError):
    """Kernel rejected argument number -INFO (caller fault)."""

    @property
    def argument(self) -> int:
        """1-based index of the offending argument."""
        return -self.info


class NumericalFailure(KernelError):
    """Kernel could not complete the computation (INFO > 0)."""
    pass


class LibraryNotFoundError(LLAError):
    """Raised when a kernel library cannot be imported or has no capsule table."""
    pass


class KernelNotFoundError(LLAError):
    """
    Raised when a library does not export the requested kernel.

    Attributes:
        procedure: Resolved kernel name
    """

    def __init__(self, procedure: str, library: str):
        self.procedure = procedure
        self.library = library
        super().__init__(f"Kernel {procedure!r} not found in {library}")


# =============================================================================
# Error Checking
# =============================================================================

def check_info(procedure: str, info: int) -> None:
    """
    Check a kernel status code and raise if it is not INFO_OK.

    Args:
        procedure: Resolved kernel name, used in the error
        info: INFO value written by the kernel

    Raises:
        InvalidArgument: If info < 0
        NumericalFailure: If info > 0
    """
    info = int(info)
    if info == INFO_OK:
        return

    logger.warning("%s returned INFO=%d", procedure, info)
    if info < 0:
        raise InvalidArgument(
            procedure, info,
            f"{procedure}: argument {-info} had an illegal value (INFO={info})",
        )
    raise NumericalFailure(
        procedure, info,
        f"{procedure}: computation failed (INFO={info})",
    )


__all__ = [
    "INFO_OK",
    "LLAError",
    "IndexOutOfRange",
    "ReadOnlyViolation",
    "LengthMismatch",
    "UnrepresentableTypeCombination",
    "KernelError",
    "InvalidArgument",
    "NumericalFailure",
    "LibraryNotFoundError",
    "KernelNotFoundError",
    "check_info",
]
