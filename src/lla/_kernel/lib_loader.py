"""Kernel library loader.

LAPACK and BLAS are taken from the builds SciPy ships. Their Cython
modules (scipy.linalg.cython_lapack, scipy.linalg.cython_blas) export every
routine as a PyCapsule in ``__pyx_capi__``; the capsule holds the address of
a C function following the Fortran convention (all arguments by address).

Libraries are loaded lazily and cached per module name.
"""

import ctypes
import importlib
import logging
from typing import Dict, List, Optional

from ..core.config import Config, resolve_config
from ..core.error import KernelNotFoundError, LibraryNotFoundError


__all__ = ['KernelLibrary', 'get_lib', 'clear_cache', 'LibraryNotFoundError']

logger = logging.getLogger("lla.kernel")


# Capsule accessors from the C API
_capsule_name = ctypes.pythonapi.PyCapsule_GetName
_capsule_name.restype = ctypes.c_char_p
_capsule_name.argtypes = [ctypes.py_object]

_capsule_pointer = ctypes.pythonapi.PyCapsule_GetPointer
_capsule_pointer.restype = ctypes.c_void_p
_capsule_pointer.argtypes = [ctypes.py_object, ctypes.c_char_p]


class KernelLibrary:
    """Table of native kernel addresses exported by one module.

    Attributes:
        module_name: Importable module exporting the capsules.
        family: 'lapack' or 'blas'.
    """

    def __init__(self, module_name: str, family: str, capsules: Dict[str, object]):
        self.module_name = module_name
        self.family = family
        self._capsules = capsules
        self._addresses: Dict[str, int] = {}

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._capsules

    def names(self) -> List[str]:
        """Sorted names of all exported kernels."""
        return sorted(self._capsules)

    def address(self, name: str) -> int:
        """Address of the native function ``name``.

        Raises:
            KernelNotFoundError: If the library does not export it.
        """
        key = name.lower()
        if key in self._addresses:
            return self._addresses[key]
        capsule = self._capsules.get(key)
        if capsule is None:
            raise KernelNotFoundError(key, self.module_name)
        address = _capsule_pointer(capsule, _capsule_name(capsule))
        if not address:
            raise KernelNotFoundError(key, self.module_name)
        self._addresses[key] = address
        return address

    def __repr__(self) -> str:
        return f"KernelLibrary({self.module_name!r}, kernels={len(self._capsules)})"


# Global library cache
_lib_cache: Dict[str, KernelLibrary] = {}


def _load(module_name: str, family: str) -> KernelLibrary:
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise LibraryNotFoundError(f"Cannot import kernel module {module_name!r}: {e}") from e

    capsules = getattr(module, '__pyx_capi__', None)
    if not capsules:
        raise LibraryNotFoundError(
            f"Module {module_name!r} does not export a capsule table (__pyx_capi__)"
        )
    logger.debug("Loaded %s kernels from %s (%d routines)", family, module_name, len(capsules))
    return KernelLibrary(module_name, family, dict(capsules))


def get_lib(family: str = 'lapack', config: Optional[Config] = None) -> KernelLibrary:
    """Get a kernel library with lazy initialization.

    Args:
        family: 'lapack' or 'blas'.
        config: Selects the module for the family (default_config() if None).

    Returns:
        Cached KernelLibrary.

    Raises:
        LibraryNotFoundError: If the module cannot be imported or exports
            no capsules.

    Example:
        >>> lib = get_lib()
        >>> 'dgesv' in lib
        True
    """
    module_name = resolve_config(config).module_for(family)
    if module_name not in _lib_cache:
        _lib_cache[module_name] = _load(module_name, family)
    return _lib_cache[module_name]


def clear_cache() -> None:
    """Forget loaded libraries."""
    _lib_cache.clear()
