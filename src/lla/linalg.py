"""
Dense Linear Algebra through LAPACK.

Thin call sites over LAPACK routines that run the whole calling convention:
common type inference, procedure resolution, private input copies (LAPACK
overwrites its arguments), workspace negotiation, INFO checking and result
assembly.

Implemented Operations:
    - solve: general linear system (?gesv)
    - least_squares: over/under-determined system (?gels)
    - cholesky: Cholesky factor (?potrf)
    - eigenvalues: eigenvalues of a general matrix (?geev)
    - hermitian_eigen: symmetric/Hermitian eigenproblem (?syev / ?heev)
    - hermitian_eigen_dc: divide and conquer variant (?syevd / ?heevd)

All functions accept lla matrices or 2-D array-likes and never modify their
inputs.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple, Union

import numpy as np

from ._dtypes import ElementType, common_type
from ._kernel.types import get_kernel, get_kernel2, lapack_int, resolve_procedure_name2
from ._kernel.workspace import WorkspaceSpec, iwork, with_work_query
from .assembly import (
    complex_from_pair,
    complex_from_split,
    matrix_from_first_rows,
    sum_last_rows,
)
from .core.config import Config
from .core.error import LengthMismatch
from .matrix import (
    Kind,
    MatrixBase,
    copy_matrix,
    from_numpy,
    Ownership,
    make_matrix_from_buffer,
    matrix_class,
    normalize,
)

__all__ = [
    'solve',
    'least_squares',
    'cholesky',
    'eigenvalues',
    'hermitian_eigen',
    'hermitian_eigen_dc',
]


MatrixInput = Union[MatrixBase, np.ndarray, Any]


# =============================================================================
# Input Preparation
# =============================================================================

def _as_matrix(x: MatrixInput, config: Optional[Config]) -> MatrixBase:
    """Matrix for an lla matrix or array-like (vectors become one column)."""
    if isinstance(x, MatrixBase):
        return x
    arr = np.asarray(x)
    if arr.ndim == 1:
        arr = arr.reshape((arr.shape[0], 1))
    return from_numpy(arr, config=config)


def _working_copy(matrix: MatrixBase, etype: ElementType) -> MatrixBase:
    """Private dense copy of the logical values of ``matrix`` in ``etype``.

    Structured inputs are normalized on the copy first, so the kernel sees
    every element, not only the canonical region.
    """
    work = copy_matrix(matrix, element_type=etype, force_copy=True)
    if work.kind is Kind.DENSE:
        return work
    normalize(work)
    return matrix_class(Kind.DENSE)(work.nrow, work.ncol, work.storage, Ownership.OWNED)


def _check_square(matrix: MatrixBase, name: str) -> int:
    if matrix.nrow != matrix.ncol:
        raise ValueError(f"{name} must be square, got {matrix.nrow}x{matrix.ncol}")
    return matrix.nrow


def _check_rows(b: MatrixBase, m: int) -> None:
    if b.nrow != m:
        raise LengthMismatch(b.nrow, m, f"Right-hand side has {b.nrow} rows, expected {m}")


# =============================================================================
# Linear Systems
# =============================================================================

def solve(a: MatrixInput, b: MatrixInput, config: Optional[Config] = None) -> MatrixBase:
    """Solve A X = B for square A.

    Uses LU factorization with partial pivoting (?gesv).

    Args:
        a: Square coefficient matrix (n x n).
        b: Right-hand side (n x nrhs, or a length-n vector).
        config: Kernel module selection and literal policy.

    Returns:
        Dense n x nrhs solution in the common element type of a and b.

    Raises:
        NumericalFailure: If A is exactly singular (INFO = i > 0 means
            U(i, i) is zero).
        LengthMismatch: If b does not have n rows.

    Examples:
        >>> x = solve([[3., 1.], [1., 2.]], [9., 8.])
        >>> x.to_numpy().ravel()
        array([2., 3.])
    """
    A = _as_matrix(a, config)
    B = _as_matrix(b, config)
    n = _check_square(A, "a")
    _check_rows(B, n)

    etype = common_type(A, B)
    gesv = get_kernel('gesv', etype, config=config)

    a_work = _working_copy(A, etype)
    x = _working_copy(B, etype)
    ipiv = np.zeros(max(1, n), dtype=lapack_int)
    gesv.invoke(n, B.ncol, a_work, max(1, n), ipiv, x, max(1, n))
    return x


def least_squares(
    a: MatrixInput,
    b: MatrixInput,
    config: Optional[Config] = None,
) -> Tuple[MatrixBase, np.ndarray]:
    """Least-squares or minimum-norm solution of A X = B for full-rank A.

    Uses QR or LQ factorization (?gels). B is passed in a buffer of
    max(m, n) rows; the solution comes back in its first n rows and, for
    over-determined systems, the residuals in the rows below.

    Args:
        a: Coefficient matrix (m x n) of full rank.
        b: Right-hand side (m x nrhs, or a length-m vector).
        config: Kernel module selection and literal policy.

    Returns:
        (solution, residual_sums): the n x nrhs solution and, when m > n, the
        residual sum of squares of each column in the common element type.
        Empty when m <= n.

    Raises:
        NumericalFailure: If A is not of full rank.
        LengthMismatch: If b does not have m rows.
    """
    A = _as_matrix(a, config)
    B = _as_matrix(b, config)
    m, n = A.shape
    nrhs = B.ncol
    _check_rows(B, m)

    etype = common_type(A, B)
    gels = get_kernel('gels', etype, config=config)

    a_work = _working_copy(A, etype)
    ldb = max(1, m, n)
    padded = np.zeros((ldb, nrhs), dtype=etype.numpy_dtype, order='F')
    padded[:m, :] = B.to_numpy()
    b_work = make_matrix_from_buffer(etype, ldb, nrhs, padded.ravel(order='F'))

    def body(ws):
        work = ws['work']
        gels.invoke('N', m, n, nrhs, a_work, max(1, m), b_work, ldb, work.buffer, work.size)

    with_work_query(body, WorkspaceSpec('work', etype))

    solution = matrix_from_first_rows(b_work, ldb, nrhs, n)
    if m > n:
        residuals = sum_last_rows(b_work, ldb, nrhs, n)
    else:
        residuals = np.zeros(0, dtype=etype.numpy_dtype)
    return solution, residuals


# =============================================================================
# Factorizations
# =============================================================================

def cholesky(a: MatrixInput, config: Optional[Config] = None) -> MatrixBase:
    """Upper Cholesky factor U with A = U^H U.

    Only the upper triangle of A is read (?potrf with UPLO = 'U'). The
    kernel leaves the strictly lower part of its buffer untouched; the
    result is normalized so that region reads and stores zero.

    Returns:
        UpperTriangular n x n factor.

    Raises:
        NumericalFailure: If A is not positive definite (INFO = order of
            the failing leading minor).
    """
    A = _as_matrix(a, config)
    n = _check_square(A, "a")

    etype = common_type(A)
    potrf = get_kernel('potrf', etype, config=config)

    work = _working_copy(A, etype)
    potrf.invoke('U', n, work, max(1, n))
    factor = matrix_class(Kind.UPPER)(n, n, work.storage, Ownership.OWNED)
    return normalize(factor)


# =============================================================================
# Eigenvalues
# =============================================================================

def eigenvalues(
    a: MatrixInput,
    check_real: bool = False,
    config: Optional[Config] = None,
) -> np.ndarray:
    """Eigenvalues of a general square matrix (?geev, no eigenvectors).

    Real kernels report real and imaginary parts in separate arrays (WR,
    WI); complex kernels report one complex array (W).

    Args:
        a: Square matrix.
        check_real: Return a real vector when every eigenvalue has an exactly
            zero imaginary part.
        config: Kernel module selection and literal policy.

    Returns:
        Eigenvalues in the order LAPACK reports them; complex unless
        narrowed by check_real.

    Raises:
        NumericalFailure: If the QR algorithm failed to converge.
    """
    A = _as_matrix(a, config)
    n = _check_square(A, "a")

    etype = common_type(A)
    geev = get_kernel('geev', etype, config=config)
    a_work = _working_copy(A, etype)
    lda = max(1, n)
    # VL/VR are not referenced with JOBVL = JOBVR = 'N'
    vl = np.zeros(1, dtype=etype.numpy_dtype)
    vr = np.zeros(1, dtype=etype.numpy_dtype)

    if etype.is_complex:
        w = np.zeros(n, dtype=etype.numpy_dtype)
        rwork = np.zeros(max(1, 2 * n), dtype=etype.real_type.numpy_dtype)

        def body(ws):
            work = ws['work']
            geev.invoke('N', 'N', n, a_work, lda, w, vl, 1, vr, 1,
                        work.buffer, work.size, rwork)

        with_work_query(body, WorkspaceSpec('work', etype))
        return complex_from_pair(w.real, w.imag, check_real)

    # WR and WI back to back
    split = np.zeros(max(1, 2 * n), dtype=etype.numpy_dtype)
    wr, wi = split[:n], split[n:2 * n]

    def body(ws):
        work = ws['work']
        geev.invoke('N', 'N', n, a_work, lda, wr, wi, vl, 1, vr, 1,
                    work.buffer, work.size)

    with_work_query(body, WorkspaceSpec('work', etype))
    return complex_from_split(split, n, etype, check_real)


def hermitian_eigen(
    a: MatrixInput,
    vectors: bool = False,
    config: Optional[Config] = None,
) -> Union[np.ndarray, Tuple[np.ndarray, MatrixBase]]:
    """Eigen-decomposition of a real symmetric or complex Hermitian matrix.

    Dispatches to ?syev for real and ?heev for complex element types. Only
    the upper triangle is read.

    Args:
        a: Symmetric/Hermitian matrix (a Hermitian view, or any square
            matrix whose upper triangle defines it).
        vectors: Also compute eigenvectors.
        config: Kernel module selection and literal policy.

    Returns:
        Ascending eigenvalues (real type), or ``(eigenvalues, vectors)``
        with the eigenvectors as columns of a Dense matrix.

    Raises:
        NumericalFailure: If the algorithm failed to converge.
    """
    A = _as_matrix(a, config)
    n = _check_square(A, "a")

    etype = common_type(A)
    resolved = resolve_procedure_name2('syev', 'heev', etype)
    kernel = get_kernel2('syev', 'heev', etype, config=config)

    a_work = _working_copy(A, etype)
    lda = max(1, n)
    jobz = 'V' if vectors else 'N'
    w = np.zeros(n, dtype=etype.real_type.numpy_dtype)

    if resolved.is_complex:
        rwork = np.zeros(max(1, 3 * n - 2), dtype=etype.real_type.numpy_dtype)

        def body(ws):
            work = ws['work']
            kernel.invoke(jobz, 'U', n, a_work, lda, w, work.buffer, work.size, rwork)
    else:
        def body(ws):
            work = ws['work']
            kernel.invoke(jobz, 'U', n, a_work, lda, w, work.buffer, work.size)

    with_work_query(body, WorkspaceSpec('work', etype))
    if vectors:
        return w, a_work
    return w


def hermitian_eigen_dc(
    a: MatrixInput,
    vectors: bool = False,
    config: Optional[Config] = None,
) -> Union[np.ndarray, Tuple[np.ndarray, MatrixBase]]:
    """hermitian_eigen() using the divide and conquer drivers (?syevd / ?heevd).

    These drivers negotiate several scratch arrays at once: WORK and IWORK
    for real types, WORK, RWORK and IWORK for complex types.
    """
    A = _as_matrix(a, config)
    n = _check_square(A, "a")

    etype = common_type(A)
    resolved = resolve_procedure_name2('syevd', 'heevd', etype)
    kernel = get_kernel2('syevd', 'heevd', etype, config=config)

    a_work = _working_copy(A, etype)
    lda = max(1, n)
    jobz = 'V' if vectors else 'N'
    w = np.zeros(n, dtype=etype.real_type.numpy_dtype)

    if resolved.is_complex:
        specs = (WorkspaceSpec('work', etype), WorkspaceSpec('rwork', etype.real_type), iwork())

        def body(ws):
            work, rwork, iw = ws['work'], ws['rwork'], ws['iwork']
            kernel.invoke(jobz, 'U', n, a_work, lda, w,
                          work.buffer, work.size, rwork.buffer, rwork.size, iw.buffer, iw.size)
    else:
        specs = (WorkspaceSpec('work', etype), iwork())

        def body(ws):
            work, iw = ws['work'], ws['iwork']
            kernel.invoke(jobz, 'U', n, a_work, lda, w,
                          work.buffer, work.size, iw.buffer, iw.size)

    with_work_query(body, *specs)
    if vectors:
        return w, a_work
    return w
