"""Matrix Construction and Conversion.

Aliasing contract of each constructor:

    make_matrix                  new OWNED storage
    make_matrix_from_buffer      wraps the caller buffer (BORROWED), no copy,
                                 no invariant check
    create_matrix_from_sequence  new OWNED storage
    copy_matrix                  shares storage (VIEW) unless the element
                                 type changes or force_copy is set (OWNED)
    from_numpy                   OWNED copy, or BORROWED when copy=False and
                                 the array is already Fortran-ordered
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Type, Union

import numpy as np

from .._dtypes import ElementType, infer_element_type, validate_element_type
from ..core.config import Config, resolve_config
from ..core.error import LengthMismatch, UnrepresentableTypeCombination
from ._base import Kind, MatrixBase
from ._dense import Dense
from ._hermitian import Hermitian
from ._storage import Ownership, Storage
from ._triangular import LowerTriangular, UpperTriangular

__all__ = [
    'matrix_class',
    'make_matrix',
    'make_matrix_from_buffer',
    'create_matrix_from_sequence',
    'copy_matrix',
    'from_numpy',
]


KindLike = Union[Kind, str]

_KIND_CLASSES: Dict[Kind, Type[MatrixBase]] = {
    Kind.DENSE: Dense,
    Kind.UPPER: UpperTriangular,
    Kind.LOWER: LowerTriangular,
    Kind.HERMITIAN: Hermitian,
}


def matrix_class(kind: KindLike) -> Type[MatrixBase]:
    """Concrete class implementing a structural kind."""
    return _KIND_CLASSES[Kind.coerce(kind)]


def make_matrix(
    element_type: Any,
    nrow: int,
    ncol: int,
    kind: KindLike = Kind.DENSE,
    initial_value: Any = 0,
) -> MatrixBase:
    """Allocate a matrix with every element of the buffer set to ``initial_value``.

    The whole buffer is filled, including the implied region of triangular
    and Hermitian kinds; reads still follow the kind's invariant.

    Args:
        element_type: Element type of the new storage.
        nrow, ncol: Dimensions.
        kind: Structural kind.
        initial_value: Fill value.

    Returns:
        Matrix with OWNED storage.
    """
    etype = validate_element_type(element_type)
    storage = Storage.allocate(nrow * ncol, etype, initial_value)
    return matrix_class(kind)(nrow, ncol, storage, Ownership.OWNED)


def make_matrix_from_buffer(
    element_type: Any,
    nrow: int,
    ncol: int,
    elements: Union[np.ndarray, Storage],
    kind: KindLike = Kind.DENSE,
) -> MatrixBase:
    """Wrap a flat column-major buffer without copying it.

    No invariant is enforced: call normalize() if the buffer only holds a
    valid canonical region.

    Args:
        element_type: Expected element type of the buffer.
        nrow, ncol: Dimensions; the buffer must hold exactly nrow * ncol elements.
        elements: 1-D NumPy array or existing Storage.
        kind: Structural kind.

    Raises:
        LengthMismatch: If the buffer length is not nrow * ncol.
        TypeError: If the buffer dtype differs from element_type.
    """
    etype = validate_element_type(element_type)
    if isinstance(elements, Storage):
        if elements.element_type != etype:
            raise TypeError(f"Storage element type {elements.element_type} does not match {etype}")
        storage, ownership = elements, Ownership.VIEW
    else:
        storage, ownership = Storage(elements, etype), Ownership.BORROWED
    return matrix_class(kind)(nrow, ncol, storage, ownership)


def _flatten_rows(contents: Any, ncol: int) -> list:
    """Row-major flat list from a flat sequence, nested rows or a 2-D array."""
    if isinstance(contents, np.ndarray):
        return list(contents.ravel(order='C'))
    values = list(contents)
    if values and isinstance(values[0], (list, tuple, np.ndarray)):
        flat = []
        for i, row in enumerate(values):
            row = list(row)
            if len(row) != ncol:
                raise LengthMismatch(len(row), ncol, f"Row {i} has {len(row)} elements, expected {ncol}")
            flat.extend(row)
        return flat
    return values


def create_matrix_from_sequence(
    ncol: int,
    contents: Sequence[Any],
    kind: KindLike = Kind.DENSE,
    element_type: Any = None,
    config: Optional[Config] = None,
) -> MatrixBase:
    """Build a matrix from row-major contents.

    ``create_matrix_from_sequence(3, [1, 2, 3, 4, 5, 6])`` is the 2x3 matrix
    with rows [1, 2, 3] and [4, 5, 6], stored column-major.

    Args:
        ncol: Number of columns; nrow is inferred from the length.
        contents: Flat row-major sequence, sequence of rows or 2-D array.
        kind: Structural kind. The contents are stored as given, including
            the implied region.
        element_type: Element type, inferred from the literals if None.
        config: Policy for literal type inference.

    Raises:
        LengthMismatch: If the length is not a multiple of ncol.
        UnrepresentableTypeCombination: If the literals cannot be typed.
    """
    values = _flatten_rows(contents, ncol)
    if ncol <= 0 or len(values) % ncol != 0:
        raise LengthMismatch(
            len(values), ncol,
            f"Sequence of length {len(values)} cannot be split into rows of {ncol} columns",
        )
    nrow = len(values) // ncol

    if element_type is not None:
        etype = validate_element_type(element_type)
    elif values:
        etype = infer_element_type(values, resolve_config(config))
    else:
        etype = ElementType.DOUBLE

    grid = np.array(values, dtype=etype.numpy_dtype).reshape((nrow, ncol))
    storage = Storage(grid.ravel(order='F'), etype)
    return matrix_class(kind)(nrow, ncol, storage, Ownership.OWNED)


def copy_matrix(
    matrix: MatrixBase,
    kind: Optional[KindLike] = None,
    element_type: Any = None,
    force_copy: bool = False,
) -> MatrixBase:
    """Convert a matrix to another kind and/or element type.

    Without a type change or ``force_copy`` the result shares storage with
    ``matrix`` (Ownership.VIEW): writes and normalize() through either are
    visible through both. Otherwise the result owns a fresh buffer.

    The raw buffer is carried over as-is; converting to a narrower kind does
    not zero or mirror anything until normalize() is called.
    """
    target_kind = matrix.kind if kind is None else Kind.coerce(kind)
    etype = matrix.element_type if element_type is None else validate_element_type(element_type)
    cls = matrix_class(target_kind)

    if force_copy or etype != matrix.element_type:
        return cls(matrix.nrow, matrix.ncol, matrix.storage.copy(etype), Ownership.OWNED)
    return cls(matrix.nrow, matrix.ncol, matrix.storage, Ownership.VIEW, source=matrix)


def from_numpy(
    array: Any,
    kind: KindLike = Kind.DENSE,
    copy: bool = True,
    config: Optional[Config] = None,
) -> MatrixBase:
    """Matrix from a 2-D array-like.

    Integer and boolean arrays are floated to DOUBLE under the force-float
    policy.

    Args:
        array: 2-D array-like.
        kind: Structural kind.
        copy: If False and the array is Fortran-contiguous with a supported
            dtype, wrap its memory (BORROWED).
        config: Policy for non-floating dtypes.
    """
    arr = np.asarray(array)
    if arr.ndim != 2:
        raise ValueError(f"Expected a 2-D array, got {arr.ndim} dimensions")
    nrow, ncol = arr.shape

    try:
        etype = ElementType.from_dtype(arr.dtype)
    except TypeError:
        if arr.dtype.kind in 'biu' and resolve_config(config).force_float:
            etype = ElementType.DOUBLE
        elif arr.dtype.kind == 'f':
            etype = ElementType.DOUBLE if arr.dtype.itemsize > 4 else ElementType.SINGLE
        elif arr.dtype.kind == 'c':
            etype = ElementType.COMPLEX_DOUBLE if arr.dtype.itemsize > 8 else ElementType.COMPLEX_SINGLE
        else:
            raise UnrepresentableTypeCombination(
                0, message=f"Cannot represent dtype {arr.dtype} as a floating element type"
            ) from None

    if not copy and arr.dtype == etype.numpy_dtype and arr.flags.f_contiguous:
        storage = Storage(arr.ravel(order='F'), etype)
        return matrix_class(kind)(nrow, ncol, storage, Ownership.BORROWED)

    flat = np.array(arr, dtype=etype.numpy_dtype).ravel(order='F')
    return matrix_class(kind)(nrow, ncol, Storage(flat, etype), Ownership.OWNED)
