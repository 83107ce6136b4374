"""Column-Major Storage and Ownership.

Every matrix kind is backed by the same flat buffer layout: element
(row, col) of an nrow x ncol matrix lives at offset ``row + col * nrow``.
The kinds differ only in which offsets they treat as stored.

Ownership Model:
    - OWNED: storage was allocated by LLA (construction, forced copy)
    - BORROWED: storage wraps a caller buffer without copying; the caller
      keeps responsibility for its contents and invariants
    - VIEW: storage is shared with another matrix; writes through either
      are visible through both
"""

from __future__ import annotations

import numbers
from enum import Enum
from typing import Any, Iterator, Optional, Tuple

import numpy as np

from .._dtypes import ElementType, validate_element_type
from ..core.error import IndexOutOfRange, LengthMismatch

__all__ = [
    'Ownership',
    'Storage',
    'flat_index',
    'check_bounds',
]


# =============================================================================
# Addressing
# =============================================================================

def flat_index(row: int, col: int, nrow: int) -> int:
    """Column-major offset of (row, col)."""
    return row + col * nrow


def check_bounds(row: int, col: int, shape: Tuple[int, int]) -> None:
    """Raise IndexOutOfRange unless row and col are integers within shape."""
    for coord in (row, col):
        if isinstance(coord, bool) or not isinstance(coord, numbers.Integral):
            raise IndexOutOfRange(row, col, shape)
    if not (0 <= row < shape[0] and 0 <= col < shape[1]):
        raise IndexOutOfRange(row, col, shape)


# =============================================================================
# Ownership
# =============================================================================

class Ownership(Enum):
    """Data ownership of a matrix's storage.

    Attributes:
        OWNED: Matrix storage was allocated by LLA.
               Created by: make_matrix(), create_matrix_from_sequence(),
               copy_matrix(force_copy=True)
        BORROWED: Matrix wraps a caller buffer.
                  Created by: make_matrix_from_buffer(), from_numpy(copy=False)
        VIEW: Matrix shares storage with another matrix.
              Created by: copy_matrix() without a copy
    """
    OWNED = 'owned'
    BORROWED = 'borrowed'
    VIEW = 'view'


# =============================================================================
# Storage
# =============================================================================

class Storage:
    """Typed flat buffer backing one or more matrices.

    Wraps a contiguous one-dimensional NumPy array whose dtype matches
    ``element_type``. The array is handed to kernels as-is.

    Attributes:
        data: The underlying 1-D array.
        element_type: Element type of the buffer.
    """

    __slots__ = ('_data', '_element_type')

    def __init__(self, data: np.ndarray, element_type: Optional[ElementType] = None):
        if not isinstance(data, np.ndarray):
            raise TypeError(f"Storage requires a numpy array, got {type(data).__name__}")
        if data.ndim != 1:
            raise ValueError(f"Storage buffer must be one-dimensional, got shape {data.shape}")
        if not data.flags.c_contiguous:
            raise ValueError("Storage buffer must be contiguous")

        etype = ElementType.from_dtype(data.dtype)
        if element_type is not None and validate_element_type(element_type) != etype:
            raise TypeError(
                f"Buffer dtype {data.dtype} does not match element type {element_type}"
            )
        self._data = data
        self._element_type = etype

    @classmethod
    def allocate(cls, size: int, element_type: Any, fill: Any = 0) -> 'Storage':
        """Allocate a new buffer filled with ``fill``."""
        etype = validate_element_type(element_type)
        if size < 0:
            raise ValueError(f"Storage size must be non-negative, got {size}")
        return cls(np.full(size, fill, dtype=etype.numpy_dtype), etype)

    @property
    def data(self) -> np.ndarray:
        return self._data

    @property
    def element_type(self) -> ElementType:
        return self._element_type

    @property
    def size(self) -> int:
        return self._data.shape[0]

    def __len__(self) -> int:
        return self.size

    def read(self, offset: int) -> Any:
        """Raw read by flat offset."""
        return self._data[offset]

    def write(self, offset: int, value: Any) -> None:
        """Raw write by flat offset."""
        self._data[offset] = value

    def copy(self, element_type: Any = None) -> 'Storage':
        """Independent copy, optionally converted to another element type.

        Converting complex data to a real type discards the imaginary part.
        """
        etype = self._element_type if element_type is None else validate_element_type(element_type)
        if etype.is_complex or not self._element_type.is_complex:
            data = self._data.astype(etype.numpy_dtype, copy=True)
        else:
            data = self._data.real.astype(etype.numpy_dtype, copy=True)
        return Storage(data, etype)

    def check_length(self, nrow: int, ncol: int) -> None:
        """Raise LengthMismatch unless the buffer holds exactly nrow * ncol elements."""
        if self.size != nrow * ncol:
            raise LengthMismatch(
                self.size, nrow * ncol,
                f"Buffer of length {self.size} cannot back a {nrow}x{ncol} matrix",
            )

    def __iter__(self) -> Iterator[Any]:
        return iter(self._data)

    def __repr__(self) -> str:
        return f"Storage(size={self.size}, element_type={self._element_type})"
