"""
LLA - Typed Matrices over LAPACK

Typed matrix layer between application code and the LAPACK build that
ships with SciPy:
- Column-major storage with structural views (dense, triangular, Hermitian)
- Explicit ownership tracking (OWNED, BORROWED, VIEW)
- Kernel resolution by element type (s/d/c/z variants)
- Two-phase workspace negotiation
- LAPACK INFO codes translated into typed errors

Modules:
- matrix: storage, structural views, normalization, construction
- linalg: solve, least squares, Cholesky and eigenvalue call sites
- assembly: turning kernel output buffers into results

Architecture:
    ┌──────────────────────────────────────────────┐
    │   Dense | UpperTriangular | LowerTriangular  │
    │                 | Hermitian                  │
    ├──────────────────────────────────────────────┤
    │  Storage: flat column-major buffer           │
    │  Ownership: OWNED | BORROWED | VIEW          │
    ├──────────────────────────────────────────────┤
    │  Kernel: common_type -> ?name -> workspace   │
    │          -> invoke -> check_info -> assemble │
    └──────────────────────────────────────────────┘

Example:
    >>> import lla
    >>>
    >>> a = lla.create_matrix_from_sequence(2, [4.0, 2.0, 2.0, 3.0], kind='hermitian')
    >>> u = lla.cholesky(a)
    >>> u[1, 0]
    0.0
    >>>
    >>> lla.resolve_procedure_name('gesv', lla.ElementType.COMPLEX_DOUBLE)
    'zgesv'
"""

__version__ = '0.1.0'

from . import matrix
from . import linalg
from . import assembly

from ._dtypes import (
    ElementType,
    float32,
    float64,
    complex64,
    complex128,
    common_type,
    infer_element_type,
)

from .core import (
    Config,
    default_config,
    LLAError,
    IndexOutOfRange,
    ReadOnlyViolation,
    LengthMismatch,
    UnrepresentableTypeCombination,
    KernelError,
    InvalidArgument,
    NumericalFailure,
    LibraryNotFoundError,
    KernelNotFoundError,
    check_info,
)

from .matrix import (
    Kind,
    Ownership,
    Storage,
    MatrixBase,
    Dense,
    UpperTriangular,
    LowerTriangular,
    Hermitian,
    normalize,
    make_matrix,
    make_matrix_from_buffer,
    create_matrix_from_sequence,
    copy_matrix,
    from_numpy,
)

from ._kernel.types import (
    resolve_procedure_name,
    resolve_procedure_name2,
    get_kernel,
    get_kernel2,
)
from ._kernel.workspace import WorkspaceSpec, with_work_query

from .assembly import (
    matrix_from_first_rows,
    sum_last_rows,
    complex_from_split,
    complex_from_pair,
)

from .linalg import (
    solve,
    least_squares,
    cholesky,
    eigenvalues,
    hermitian_eigen,
    hermitian_eigen_dc,
)

__all__ = [
    # Version
    '__version__',

    # Submodules
    'matrix',
    'linalg',
    'assembly',

    # Element types
    'ElementType',
    'float32',
    'float64',
    'complex64',
    'complex128',
    'common_type',
    'infer_element_type',

    # Configuration
    'Config',
    'default_config',

    # Errors
    'LLAError',
    'IndexOutOfRange',
    'ReadOnlyViolation',
    'LengthMismatch',
    'UnrepresentableTypeCombination',
    'KernelError',
    'InvalidArgument',
    'NumericalFailure',
    'LibraryNotFoundError',
    'KernelNotFoundError',
    'check_info',

    # Matrices
    'Kind',
    'Ownership',
    'Storage',
    'MatrixBase',
    'Dense',
    'UpperTriangular',
    'LowerTriangular',
    'Hermitian',
    'normalize',
    'make_matrix',
    'make_matrix_from_buffer',
    'create_matrix_from_sequence',
    'copy_matrix',
    'from_numpy',

    # Kernels
    'resolve_procedure_name',
    'resolve_procedure_name2',
    'get_kernel',
    'get_kernel2',
    'WorkspaceSpec',
    'with_work_query',

    # Result assembly
    'matrix_from_first_rows',
    'sum_last_rows',
    'complex_from_split',
    'complex_from_pair',

    # Linear algebra
    'solve',
    'least_squares',
    'cholesky',
    'eigenvalues',
    'hermitian_eigen',
    'hermitian_eigen_dc',
]
