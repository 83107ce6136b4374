"""Triangular matrices.

The unstored half of a triangular matrix is a read-only zero region:
reading it yields zero, writing zero to it is accepted as a no-op (the value
matches what is implied), writing anything else raises ReadOnlyViolation.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from ..core.error import ReadOnlyViolation
from ._base import Kind, MatrixBase

__all__ = ['UpperTriangular', 'LowerTriangular']


class _Triangular(MatrixBase):
    """Shared access rules; subclasses define the canonical half."""

    __slots__ = ()

    def _get(self, row: int, col: int) -> Any:
        if self.is_canonical(row, col):
            return self._read(row, col)
        return self.element_type.numpy_dtype.type(0)

    def _set(self, row: int, col: int, value: Any) -> None:
        if self.is_canonical(row, col):
            self._write(row, col, value)
        elif value != 0:
            raise ReadOnlyViolation(row, col, value, self.kind.value)


class UpperTriangular(_Triangular):
    """Upper triangular matrix: entries with row <= col are stored."""

    kind = Kind.UPPER

    __slots__ = ()

    def is_canonical(self, row: int, col: int) -> bool:
        return row <= col

    def _fill_implied(self) -> None:
        full = self._as_2d()
        for col in range(min(self._ncol, self._nrow)):
            full[col + 1:, col] = 0

    def _materialize(self, full: np.ndarray) -> np.ndarray:
        return np.triu(full)


class LowerTriangular(_Triangular):
    """Lower triangular matrix: entries with row >= col are stored."""

    kind = Kind.LOWER

    __slots__ = ()

    def is_canonical(self, row: int, col: int) -> bool:
        return row >= col

    def _fill_implied(self) -> None:
        full = self._as_2d()
        for col in range(1, self._ncol):
            full[:col, col] = 0

    def _materialize(self, full: np.ndarray) -> np.ndarray:
        return np.tril(full)
