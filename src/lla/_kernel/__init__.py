"""LLA Private Kernel Bindings (_kernel).

Low-level access to the native LAPACK/BLAS kernels.

Architecture:
    - lib_loader: locate and cache the capsule tables exported by SciPy
    - types: procedure-name resolution, Fortran argument marshalling, Kernel
    - workspace: two-phase workspace query protocol

Usage (Internal only):
    >>> from lla._kernel.types import get_kernel
    >>> gesv = get_kernel('gesv', ElementType.DOUBLE)
    >>> gesv.invoke(n, nrhs, a, lda, ipiv, b, ldb)
"""

from . import lib_loader
from . import types
from . import workspace

__all__ = [
    'lib_loader',
    'types',
    'workspace',
]
