"""Hermitian matrices.

Only the upper triangle (row <= col) is stored. Every coordinate is
writable: a write below the diagonal stores the conjugate in the mirrored
upper cell, so a Hermitian view never raises ReadOnlyViolation. For real
element types conjugation is the identity and the view is symmetric.
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np

from ._base import Kind, MatrixBase
from ._storage import Ownership, Storage

__all__ = ['Hermitian']


class Hermitian(MatrixBase):
    """Square matrix equal to its conjugate transpose."""

    kind = Kind.HERMITIAN

    __slots__ = ()

    def __init__(
        self,
        nrow: int,
        ncol: int,
        storage: Storage,
        ownership: Ownership = Ownership.OWNED,
        source: Optional[MatrixBase] = None,
    ):
        if nrow != ncol:
            raise ValueError(f"Hermitian matrix must be square, got {nrow}x{ncol}")
        super().__init__(nrow, ncol, storage, ownership, source)

    def is_canonical(self, row: int, col: int) -> bool:
        return row <= col

    def _get(self, row: int, col: int) -> Any:
        if row <= col:
            return self._read(row, col)
        return np.conj(self._read(col, row))

    def _set(self, row: int, col: int, value: Any) -> None:
        if row <= col:
            self._write(row, col, value)
        else:
            self._write(col, row, np.conj(value))

    def _fill_implied(self) -> None:
        full = self._as_2d()
        for col in range(self._ncol):
            full[col + 1:, col] = np.conj(full[col, col + 1:])

    def _materialize(self, full: np.ndarray) -> np.ndarray:
        upper = np.triu(full)
        return upper + np.conj(np.triu(full, 1)).T
