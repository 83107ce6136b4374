"""Kernel resolution and argument marshalling.

LAPACK routines exist in four variants selected by a one-letter prefix:

    s  real single      c  complex single
    d  real double      z  complex double

resolve_procedure_name() builds the qualified name of a root for an element
type. Some algorithms are named differently for real and complex data
(symmetric vs Hermitian variants, e.g. syev/heev); resolve_procedure_name2()
handles those and also reports the precision and domain callers need to lay
out arguments.

Kernels follow the Fortran convention: every argument is passed by address
and the status is written to a trailing INFO integer. Kernel.__call__
converts Python values as follows:

    numpy.ndarray       address of its (Fortran-ordered) data
    MatrixBase/Storage  address of the column-major buffer
    ctypes instance     its address (use for out-parameters)
    int                 temporary INTEGER
    str                 temporary CHARACTER
    float / complex     temporary scalar of the kernel's precision
"""

import ctypes
import logging
from collections import namedtuple
from functools import lru_cache
from typing import Any, List, Optional

import numpy as np

from .._dtypes import ElementType, validate_element_type
from ..core.config import Config
from ..core.error import check_info
from ..matrix import MatrixBase, Storage
from .lib_loader import get_lib


__all__ = [
    'c_lapack_int',
    'lapack_int',
    'ResolvedName',
    'resolve_procedure_name',
    'resolve_procedure_name2',
    'Kernel',
    'get_kernel',
    'get_kernel2',
    'as_address',
]

logger = logging.getLogger("lla.kernel")


# =============================================================================
# Fortran Type Aliases
# =============================================================================

# INTEGER as compiled into SciPy's LAPACK
c_lapack_int = ctypes.c_int
lapack_int = np.dtype(np.intc)


# =============================================================================
# Procedure Resolution
# =============================================================================

ResolvedName = namedtuple('ResolvedName', ['name', 'precision', 'is_complex'])


def resolve_procedure_name(root: str, element_type: Any) -> str:
    """Qualified kernel name for ``root`` and an element type.

    Example:
        >>> resolve_procedure_name('gesv', ElementType.DOUBLE)
        'dgesv'
        >>> resolve_procedure_name('gesv', ElementType.COMPLEX_DOUBLE)
        'zgesv'
    """
    etype = validate_element_type(element_type)
    return etype.prefix + root.lower()


def resolve_procedure_name2(real_root: str, complex_root: str, element_type: Any) -> ResolvedName:
    """Qualified name for operations named differently in the complex case.

    Example:
        >>> resolve_procedure_name2('syev', 'heev', ElementType.COMPLEX_SINGLE)
        ResolvedName(name='cheev', precision='single', is_complex=True)

    Returns:
        ResolvedName(name, precision, is_complex)
    """
    etype = validate_element_type(element_type)
    root = complex_root if etype.is_complex else real_root
    return ResolvedName(resolve_procedure_name(root, etype), etype.precision, etype.is_complex)


# =============================================================================
# Argument Marshalling
# =============================================================================

@lru_cache(maxsize=None)
def _prototype(nargs: int):
    """C function type taking ``nargs`` pointers and returning void."""
    return ctypes.CFUNCTYPE(None, *([ctypes.c_void_p] * nargs))


def as_address(arg: Any, element_type: ElementType, keep: List[Any]) -> int:
    """Address to pass for ``arg``; temporaries are appended to ``keep``.

    Raises:
        ValueError: For arrays that are not Fortran-contiguous.
        TypeError: For values with no Fortran counterpart.
    """
    if isinstance(arg, MatrixBase):
        arg = arg.storage
    if isinstance(arg, Storage):
        arg = arg.data

    if isinstance(arg, np.ndarray):
        if not arg.flags.f_contiguous:
            raise ValueError("Kernel arrays must be Fortran-contiguous")
        keep.append(arg)
        return arg.ctypes.data
    if isinstance(arg, (ctypes._SimpleCData, ctypes.Array)):
        keep.append(arg)
        return ctypes.addressof(arg)
    if isinstance(arg, (bool, np.bool_)):
        raise TypeError("Pass LOGICAL arguments as ctypes values")
    if isinstance(arg, (int, np.integer)):
        value = c_lapack_int(int(arg))
        keep.append(value)
        return ctypes.addressof(value)
    if isinstance(arg, str):
        value = ctypes.create_string_buffer(arg.encode('ascii'))
        keep.append(value)
        return ctypes.addressof(value)
    if isinstance(arg, (float, complex, np.floating, np.complexfloating)):
        etype = element_type.complex_type if isinstance(arg, (complex, np.complexfloating)) \
            else element_type.real_type
        value = np.array([arg], dtype=etype.numpy_dtype)
        keep.append(value)
        return value.ctypes.data
    raise TypeError(f"Cannot pass {type(arg).__name__} to a kernel")


# =============================================================================
# Kernel
# =============================================================================

class Kernel:
    """Callable native kernel.

    Attributes:
        name: Resolved name (e.g. 'zgesv').
        element_type: Element type the variant operates on.
        address: Native function address.
    """

    __slots__ = ('name', 'element_type', 'address')

    def __init__(self, name: str, element_type: ElementType, address: int):
        self.name = name
        self.element_type = element_type
        self.address = address

    def __call__(self, *args: Any) -> None:
        """Call the kernel with the given arguments (INFO included, if any)."""
        keep: List[Any] = []
        addresses = [as_address(arg, self.element_type, keep) for arg in args]
        func = _prototype(len(addresses))(self.address)
        func(*addresses)

    def invoke(self, *args: Any) -> int:
        """Call with a trailing INFO argument and check it.

        Returns:
            The INFO value (always 0).

        Raises:
            InvalidArgument: If INFO < 0.
            NumericalFailure: If INFO > 0.
        """
        info = c_lapack_int(0)
        logger.debug("Invoking %s with %d arguments", self.name, len(args) + 1)
        self(*args, info)
        check_info(self.name, info.value)
        return info.value

    def __repr__(self) -> str:
        return f"Kernel({self.name!r}, element_type={self.element_type})"


def get_kernel(
    root: str,
    element_type: Any,
    family: str = 'lapack',
    config: Optional[Config] = None,
) -> Kernel:
    """Resolve ``root`` for an element type and look it up in the library.

    Raises:
        KernelNotFoundError: If the resolved name is not exported.
        LibraryNotFoundError: If the library cannot be loaded.
    """
    etype = validate_element_type(element_type)
    name = resolve_procedure_name(root, etype)
    address = get_lib(family, config).address(name)
    logger.debug("Resolved %s for %s", name, etype)
    return Kernel(name, etype, address)


def get_kernel2(
    real_root: str,
    complex_root: str,
    element_type: Any,
    family: str = 'lapack',
    config: Optional[Config] = None,
) -> Kernel:
    """get_kernel() for operations named differently in the complex case."""
    etype = validate_element_type(element_type)
    resolved = resolve_procedure_name2(real_root, complex_root, etype)
    address = get_lib(family, config).address(resolved.name)
    logger.debug("Resolved %s for %s", resolved.name, etype)
    return Kernel(resolved.name, etype, address)
