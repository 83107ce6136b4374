"""
LLA core: error taxonomy and configuration.
"""

from .error import (
    INFO_OK,
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
from .config import Config, default_config, resolve_config

__all__ = [
    "INFO_OK",
    "LLAError",
    "IndexOutOfRange",
    "ReadOnlyViolation",
    "LengthMismatch",
    "UnrepresentableTypeCombination",
    "KernelError",
    "InvalidArgument",
    "NumericalFailure",
    "LibraryNotFoundError",
    "KernelNotFoundError",
    "check_info",
    "Config",
    "default_config",
    "resolve_config",
]
