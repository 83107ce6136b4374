"""LLA Structural Matrices.

Column-major matrices with structural views sharing one addressing scheme.

Type Hierarchy:

    MatrixBase (ABC)
    ├── Dense
    ├── UpperTriangular
    ├── LowerTriangular
    └── Hermitian

Quick Start:
    >>> from lla.matrix import create_matrix_from_sequence, normalize, Kind
    >>>
    >>> m = create_matrix_from_sequence(3, [1, 2, 3, 4, 5, 6])
    >>> m.shape, m[1, 2]
    ((2, 3), 6.0)
    >>>
    >>> # Kernel output holding only the upper triangle
    >>> u = create_matrix_from_sequence(2, [1, 2, 9, 4], kind=Kind.UPPER)
    >>> normalize(u).data
    array([1., 0., 2., 4.])
"""

from ._storage import (
    Ownership,
    Storage,
    flat_index,
    check_bounds,
)
from ._base import Kind, MatrixBase
from ._dense import Dense
from ._triangular import UpperTriangular, LowerTriangular
from ._hermitian import Hermitian
from ._normalize import normalize
from ._construct import (
    matrix_class,
    make_matrix,
    make_matrix_from_buffer,
    create_matrix_from_sequence,
    copy_matrix,
    from_numpy,
)

__all__ = [
    'Ownership',
    'Storage',
    'flat_index',
    'check_bounds',
    'Kind',
    'MatrixBase',
    'Dense',
    'UpperTriangular',
    'LowerTriangular',
    'Hermitian',
    'normalize',
    'matrix_class',
    'make_matrix',
    'make_matrix_from_buffer',
    'create_matrix_from_sequence',
    'copy_matrix',
    'from_numpy',
]
