"""
Configuration for LLA.

Provides:
- The force-float policy used when inferring element types from literals
- Names of the modules exporting the native LAPACK/BLAS kernels

Configuration is an immutable value passed to construction functions.
default_config() builds one from the environment on first use:

    LLA_FORCE_FLOAT     '0', 'false', 'no' or 'off' disables force-float
    LLA_LAPACK_MODULE   module exporting LAPACK capsules
    LLA_BLAS_MODULE     module exporting BLAS capsules
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Mapping, Optional


DEFAULT_LAPACK_MODULE = "scipy.linalg.cython_lapack"
DEFAULT_BLAS_MODULE = "scipy.linalg.cython_blas"

_FALSE_STRINGS = ("0", "false", "no", "off")


@dataclass(frozen=True)
class Config:
    """
    Construction and kernel-loading policy.

    Attributes:
        force_float: Float integer/rational literals to DOUBLE when
            inferring element types (otherwise they are rejected)
        lapack_module: Importable module exporting LAPACK as PyCapsules
        blas_module: Importable module exporting BLAS as PyCapsules
    """
    force_float: bool = True
    lapack_module: str = DEFAULT_LAPACK_MODULE
    blas_module: str = DEFAULT_BLAS_MODULE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """Build a configuration from LLA_* environment variables."""
        if environ is None:
            environ = os.environ
        force = environ.get("LLA_FORCE_FLOAT")
        return cls(
            force_float=True if force is None else force.strip().lower() not in _FALSE_STRINGS,
            lapack_module=environ.get("LLA_LAPACK_MODULE", DEFAULT_LAPACK_MODULE),
            blas_module=environ.get("LLA_BLAS_MODULE", DEFAULT_BLAS_MODULE),
        )

    def replace(self, **changes: Any) -> "Config":
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)

    def module_for(self, family: str) -> str:
        """Module name for a kernel family ('lapack' or 'blas')."""
        if family == "lapack":
            return self.lapack_module
        if family == "blas":
            return self.blas_module
        raise ValueError(f"Unknown kernel family: {family!r}. Use 'lapack' or 'blas'.")


@lru_cache(maxsize=1)
def default_config() -> Config:
    """Configuration read from the environment (cached)."""
    return Config.from_env()


def resolve_config(config: Optional[Config]) -> Config:
    """Return config, or the default configuration when None."""
    return default_config() if config is None else config


__all__ = [
    "Config",
    "DEFAULT_LAPACK_MODULE",
    "DEFAULT_BLAS_MODULE",
    "default_config",
    "resolve_config",
]
