"""
Result Assembly for Kernel Output Buffers.

LAPACK routines return results in the buffers they were handed, laid out for
the routine's convenience rather than the caller's. This module turns those
buffers into matrices and vectors.

Implemented Operations:
    - Padded-solution extraction (least-squares B holds the solution in its
      first n rows)
    - Residual sums from the trailing rows of the same buffer
    - Real/complex disambiguation of eigenvalues reported as real and
      imaginary parts
"""

from __future__ import annotations

from typing import Any, Union

import numpy as np

from ._dtypes import ElementType, validate_element_type
from .core.error import LengthMismatch
from .matrix import Kind, MatrixBase, Ownership, Storage, matrix_class

__all__ = [
    'matrix_from_first_rows',
    'sum_last_rows',
    'complex_from_split',
    'complex_from_pair',
]


BufferLike = Union[np.ndarray, Storage, MatrixBase]


def _as_flat(buffer: BufferLike) -> np.ndarray:
    if isinstance(buffer, MatrixBase):
        return buffer.data
    if isinstance(buffer, Storage):
        return buffer.data
    arr = np.asarray(buffer)
    if arr.ndim == 2:
        return arr.ravel(order='F')
    return arr


def _padded_columns(buffer: BufferLike, m: int, nrhs: int, n: int) -> np.ndarray:
    """``m x nrhs`` column-major 2-D view of ``buffer``."""
    flat = _as_flat(buffer)
    if flat.size != m * nrhs:
        raise LengthMismatch(flat.size, m * nrhs,
                             f"Buffer of length {flat.size} is not {m} x {nrhs}")
    if not 0 <= n <= m:
        raise ValueError(f"Row count n={n} must lie in [0, {m}]")
    return flat.reshape((m, nrhs), order='F')


# =============================================================================
# Padded Solutions
# =============================================================================

def matrix_from_first_rows(
    buffer: BufferLike,
    m: int,
    nrhs: int,
    n: int,
    kind: Any = Kind.DENSE,
) -> MatrixBase:
    """Extract the leading ``n`` rows of an ``m x nrhs`` column-major buffer.

    Least-squares kernels overwrite the right-hand side B (``m x nrhs``)
    with the ``n x nrhs`` solution stored in the first ``n`` rows of each
    column. The rows below hold residual information (see sum_last_rows).

    Args:
        buffer: Flat column-major buffer, Storage or matrix of m * nrhs elements.
        m: Leading dimension (rows per column) of the buffer.
        nrhs: Number of columns.
        n: Number of leading rows to keep (n <= m).
        kind: Structural kind of the result.

    Returns:
        New ``n x nrhs`` matrix owning a copy of the extracted rows.

    Raises:
        LengthMismatch: If the buffer does not hold m * nrhs elements.
        ValueError: If n is outside [0, m].

    Examples:
        >>> buf = np.array([1., 2., 3., 4., 5., 6., 7., 8.])  # 4 x 2
        >>> x = matrix_from_first_rows(buf, 4, 2, 2)
        >>> x.to_numpy()
        array([[1., 5.],
               [2., 6.]])
    """
    cols = _padded_columns(buffer, m, nrhs, n)
    etype = ElementType.from_dtype(cols.dtype)
    data = np.array(cols[:n, :], dtype=etype.numpy_dtype).ravel(order='F')
    return matrix_class(kind)(n, nrhs, Storage(data, etype), Ownership.OWNED)


def sum_last_rows(buffer: BufferLike, m: int, nrhs: int, n: int) -> np.ndarray:
    """Per-column sum of squared magnitudes over rows ``n..m-1``.

    For an over-determined least-squares solve (m > n) this is the residual
    sum of squares of each right-hand side.

    Returns:
        Vector of length ``nrhs`` in the element type of the buffer, with
        zero imaginary parts for complex buffers. Zero for every column
        when n == m.

    Raises:
        LengthMismatch: If the buffer does not hold m * nrhs elements.
        ValueError: If n is outside [0, m].
    """
    cols = _padded_columns(buffer, m, nrhs, n)
    etype = ElementType.from_dtype(cols.dtype)
    tail = cols[n:, :]
    if np.iscomplexobj(tail):
        squares = tail.real ** 2 + tail.imag ** 2
    else:
        squares = tail ** 2
    return np.sum(squares, axis=0).astype(etype.numpy_dtype)


# =============================================================================
# Real / Complex Disambiguation
# =============================================================================

def complex_from_pair(real: Any, imag: Any, check_real: bool = False) -> np.ndarray:
    """Combine real and imaginary parts reported separately (e.g. WR/WI).

    Args:
        real: Real parts.
        imag: Imaginary parts, same length.
        check_real: If True and every imaginary part is exactly zero, return
            the real parts in the real type instead of a complex vector.

    Returns:
        Complex vector of the complex counterpart of the input type, or a
        copy of ``real`` when narrowed.
    """
    re = np.asarray(real)
    im = np.asarray(imag)
    if re.shape != im.shape:
        raise LengthMismatch(im.size, re.size,
                             f"Imaginary parts ({im.size}) do not match real parts ({re.size})")
    etype = ElementType.from_dtype(re.dtype)

    if check_real and not np.any(im):
        return np.array(re, dtype=etype.real_type.numpy_dtype)

    out = np.empty(re.shape, dtype=etype.complex_type.numpy_dtype)
    out.real = re
    out.imag = im
    return out


def complex_from_split(
    buffer: BufferLike,
    n: int,
    element_type: Any,
    check_real: bool = False,
) -> np.ndarray:
    """Assemble ``n`` values from a buffer of ``n`` real then ``n`` imaginary parts.

    Args:
        buffer: At least 2n values.
        n: Number of values.
        element_type: Element type the values belong to; the real parts are
            read in its real type.
        check_real: Narrow to the real type when all imaginary parts are zero.

    Raises:
        LengthMismatch: If the buffer holds fewer than 2n values.
    """
    etype = validate_element_type(element_type)
    flat = _as_flat(buffer)
    if flat.size < 2 * n:
        raise LengthMismatch(flat.size, 2 * n,
                             f"Buffer of length {flat.size} cannot hold {n} split values")
    parts = np.asarray(flat[:2 * n], dtype=etype.real_type.numpy_dtype)
    return complex_from_pair(parts[:n], parts[n:], check_real)
