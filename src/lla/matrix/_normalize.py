"""Structural Normalization.

Kernels that factor or decompose a matrix usually write only one triangle
of their output and leave whatever was in the other half. normalize()
recomputes the implied region of a view from its canonical region:

    UpperTriangular   zero every entry with row > col
    LowerTriangular   zero every entry with row < col
    Hermitian         entry (row, col), row > col := conj(entry (col, row))
    Dense             nothing to do

Normalization mutates the storage in place, so every matrix sharing that
storage sees the change. It is never applied by construction; force a copy
first when the source must stay untouched.
"""

from __future__ import annotations

from typing import TypeVar

from ._base import MatrixBase

__all__ = ['normalize']


M = TypeVar('M', bound=MatrixBase)


def normalize(matrix: M) -> M:
    """Restore the structural invariant of ``matrix`` in place.

    Args:
        matrix: Any structural view.

    Returns:
        The same matrix, for chaining.
    """
    matrix._fill_implied()
    return matrix
