"""Dense matrices: every coordinate is stored."""

from __future__ import annotations

from typing import Any

import numpy as np

from ._base import Kind, MatrixBase

__all__ = ['Dense']


class Dense(MatrixBase):
    """Dense column-major matrix without structural invariant."""

    kind = Kind.DENSE

    __slots__ = ()

    def is_canonical(self, row: int, col: int) -> bool:
        return True

    def _get(self, row: int, col: int) -> Any:
        return self._read(row, col)

    def _set(self, row: int, col: int, value: Any) -> None:
        self._write(row, col, value)

    def _fill_implied(self) -> None:
        pass

    def _materialize(self, full: np.ndarray) -> np.ndarray:
        return full
