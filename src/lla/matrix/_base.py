"""
Structural Matrix Base Class

Defines the interface shared by the four structural kinds. Every kind uses
the same column-major storage; they differ in which coordinates are stored
(the canonical region) and in what the remaining coordinates read as.

Type Hierarchy:

    MatrixBase (ABC)
    ├── Dense              every coordinate stored
    ├── UpperTriangular    row <= col stored, row > col reads 0
    ├── LowerTriangular    row >= col stored, row < col reads 0
    └── Hermitian          row <= col stored, row > col reads conj(stored(col, row))

The set of kinds is closed. Code that needs per-kind behaviour dispatches on
``matrix.kind`` through matrix_class() rather than subclassing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional, Tuple

import numpy as np

from .._dtypes import ElementType
from ._storage import Ownership, Storage, check_bounds, flat_index

__all__ = [
    'Kind',
    'MatrixBase',
]


class Kind(Enum):
    """Structural kind of a matrix view."""
    DENSE = 'dense'
    UPPER = 'upper'
    LOWER = 'lower'
    HERMITIAN = 'hermitian'

    @classmethod
    def coerce(cls, kind: Any) -> 'Kind':
        """Accept a Kind or its name ('dense', 'upper', ...)."""
        if isinstance(kind, Kind):
            return kind
        if isinstance(kind, str):
            key = kind.lower().lstrip(':')
            for member in cls:
                if key in (member.value, member.name.lower()):
                    return member
            aliases = {
                'upper-triangular': cls.UPPER,
                'upper_triangular': cls.UPPER,
                'lower-triangular': cls.LOWER,
                'lower_triangular': cls.LOWER,
                'symmetric': cls.HERMITIAN,
            }
            if key in aliases:
                return aliases[key]
        raise ValueError(f"Unknown matrix kind: {kind!r}")


class MatrixBase(ABC):
    """
    Column-major matrix view over a Storage.

    Subclasses supply the element access rules of one structural kind:

        _get(row, col)          read a bounds-checked coordinate
        _set(row, col, value)   write a bounds-checked coordinate
        is_canonical(row, col)  whether the coordinate is stored
        _fill_implied()         rewrite the implied region from the stored one

    Attributes:
        nrow, ncol: Matrix dimensions
        storage: Backing buffer, possibly shared with other matrices
        ownership: How the storage was obtained
    """

    kind: Kind

    __slots__ = ('_nrow', '_ncol', '_storage', '_ownership', '_source')

    def __init__(
        self,
        nrow: int,
        ncol: int,
        storage: Storage,
        ownership: Ownership = Ownership.OWNED,
        source: Optional['MatrixBase'] = None,
    ):
        if nrow < 0 or ncol < 0:
            raise ValueError(f"Matrix dimensions must be non-negative, got {nrow}x{ncol}")
        storage.check_length(nrow, ncol)
        self._nrow = nrow
        self._ncol = ncol
        self._storage = storage
        self._ownership = ownership
        # Keeps the matrix we share storage with reachable
        self._source = source

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def nrow(self) -> int:
        return self._nrow

    @property
    def ncol(self) -> int:
        return self._ncol

    @property
    def shape(self) -> Tuple[int, int]:
        return (self._nrow, self._ncol)

    @property
    def element_type(self) -> ElementType:
        return self._storage.element_type

    @property
    def dtype(self) -> np.dtype:
        return self._storage.element_type.numpy_dtype

    @property
    def storage(self) -> Storage:
        return self._storage

    @property
    def data(self) -> np.ndarray:
        """Flat column-major buffer (shared, not a copy)."""
        return self._storage.data

    @property
    def ownership(self) -> Ownership:
        return self._ownership

    @property
    def source(self) -> Optional['MatrixBase']:
        """Matrix this one shares storage with, if any."""
        return self._source

    def shares_storage(self, other: 'MatrixBase') -> bool:
        return self._storage is other._storage

    # =========================================================================
    # Element Access
    # =========================================================================

    def get(self, row: int, col: int) -> Any:
        """Element (row, col) according to the kind's invariant.

        Raises:
            IndexOutOfRange: If the coordinate is outside the matrix
        """
        check_bounds(row, col, self.shape)
        return self._get(row, col)

    def set(self, row: int, col: int, value: Any) -> None:
        """Set element (row, col) according to the kind's invariant.

        Raises:
            IndexOutOfRange: If the coordinate is outside the matrix
            ReadOnlyViolation: Non-zero write into a triangular zero region
        """
        check_bounds(row, col, self.shape)
        self._set(row, col, value)

    def __getitem__(self, index: Tuple[int, int]) -> Any:
        row, col = index
        return self.get(row, col)

    def __setitem__(self, index: Tuple[int, int], value: Any) -> None:
        row, col = index
        self.set(row, col, value)

    def _read(self, row: int, col: int) -> Any:
        return self._storage.read(flat_index(row, col, self._nrow))

    def _write(self, row: int, col: int, value: Any) -> None:
        self._storage.write(flat_index(row, col, self._nrow), value)

    def _as_2d(self) -> np.ndarray:
        """2-D Fortran-ordered view of the storage (no copy)."""
        return self._storage.data.reshape((self._nrow, self._ncol), order='F')

    # =========================================================================
    # Kind-specific Interface
    # =========================================================================

    @abstractmethod
    def is_canonical(self, row: int, col: int) -> bool:
        """Whether (row, col) is backed by storage for this kind."""
        ...

    @abstractmethod
    def _get(self, row: int, col: int) -> Any:
        ...

    @abstractmethod
    def _set(self, row: int, col: int, value: Any) -> None:
        ...

    @abstractmethod
    def _fill_implied(self) -> None:
        """Rewrite the implied region in place so it satisfies the invariant."""
        ...

    @abstractmethod
    def _materialize(self, full: np.ndarray) -> np.ndarray:
        """Apply the invariant to a 2-D copy of the raw storage."""
        ...

    # =========================================================================
    # Conversion
    # =========================================================================

    def to_numpy(self) -> np.ndarray:
        """2-D array of the logical values (always a copy).

        The implied region is computed from the stored one; the raw buffer
        is not modified.
        """
        return self._materialize(np.array(self._as_2d(), copy=True))

    def __array__(self, dtype=None, copy=None):
        arr = self.to_numpy()
        return arr if dtype is None else arr.astype(dtype)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(shape={self._nrow}x{self._ncol}, "
                f"element_type={self.element_type}, ownership={self._ownership.value})")
