"""
LLA Element Types

Defines the four floating element types understood by LAPACK and the
promotion rules used to pick a kernel variant for a set of operands.

Each type maps to a capability flag. Double precision and complex are
independent bits of the encoding, so the common type of several operands is
the bitwise OR of their flags mapped back to the smallest type covering
every bit:

    SINGLE          = 1   (real float32,     LAPACK prefix 's')
    DOUBLE          = 2   (real float64,     LAPACK prefix 'd')
    COMPLEX_SINGLE  = 4   (complex64,        LAPACK prefix 'c')
    COMPLEX_DOUBLE  = 8   (complex128,       LAPACK prefix 'z')
"""

from __future__ import annotations

import numbers
from enum import IntEnum
from typing import Any, Dict, Iterable, Optional, TYPE_CHECKING

import numpy as np

from .core.error import UnrepresentableTypeCombination

if TYPE_CHECKING:
    from .core.config import Config


# =============================================================================
# Element Type Enumeration
# =============================================================================

class ElementType(IntEnum):
    """
    Supported element types.

    Each type has a NumPy dtype, a LAPACK prefix letter and a precision tag.
    """
    SINGLE = 1
    DOUBLE = 2
    COMPLEX_SINGLE = 4
    COMPLEX_DOUBLE = 8

    @property
    def numpy_dtype(self) -> np.dtype:
        """Corresponding NumPy dtype."""
        return np.dtype(_TYPE_INFO[self]["dtype"])

    @property
    def prefix(self) -> str:
        """LAPACK/BLAS precision and domain prefix."""
        return _TYPE_INFO[self]["prefix"]

    @property
    def precision(self) -> str:
        """Precision tag, 'single' or 'double'."""
        return "double" if self & _DOUBLE_BITS else "single"

    @property
    def is_complex(self) -> bool:
        return bool(self & _COMPLEX_BITS)

    @property
    def itemsize(self) -> int:
        """Size in bytes of one element."""
        return self.numpy_dtype.itemsize

    @property
    def real_type(self) -> "ElementType":
        """Real type of the same precision."""
        return ElementType.DOUBLE if self & _DOUBLE_BITS else ElementType.SINGLE

    @property
    def complex_type(self) -> "ElementType":
        """Complex type of the same precision."""
        return ElementType.COMPLEX_DOUBLE if self & _DOUBLE_BITS else ElementType.COMPLEX_SINGLE

    @classmethod
    def from_dtype(cls, dtype: Any) -> "ElementType":
        """Get ElementType from a NumPy dtype (or anything np.dtype accepts)."""
        dtype = np.dtype(dtype)
        for etype, info in _TYPE_INFO.items():
            if np.dtype(info["dtype"]) == dtype:
                return etype
        raise TypeError(f"No element type for dtype {dtype}")

    @classmethod
    def from_name(cls, name: str) -> "ElementType":
        """Get ElementType from a name, NumPy dtype name or LAPACK prefix."""
        key = name.lower()
        for etype, info in _TYPE_INFO.items():
            if key in (etype.name.lower(), info["prefix"], np.dtype(info["dtype"]).name):
                return etype
        aliases = {
            "float": cls.DOUBLE,
            "real": cls.DOUBLE,
            "complex": cls.COMPLEX_DOUBLE,
            "real-single": cls.SINGLE,
            "real-double": cls.DOUBLE,
            "complex-single": cls.COMPLEX_SINGLE,
            "complex-double": cls.COMPLEX_DOUBLE,
        }
        if key in aliases:
            return aliases[key]
        raise ValueError(f"Unknown element type name: {name}")

    def __str__(self) -> str:
        return self.name.lower()


_DOUBLE_BITS = ElementType.DOUBLE | ElementType.COMPLEX_DOUBLE
_COMPLEX_BITS = ElementType.COMPLEX_SINGLE | ElementType.COMPLEX_DOUBLE
_ALL_BITS = 1 | 2 | 4 | 8

_TYPE_INFO: Dict[ElementType, Dict[str, Any]] = {
    ElementType.SINGLE: {"dtype": np.float32, "prefix": "s"},
    ElementType.DOUBLE: {"dtype": np.float64, "prefix": "d"},
    ElementType.COMPLEX_SINGLE: {"dtype": np.complex64, "prefix": "c"},
    ElementType.COMPLEX_DOUBLE: {"dtype": np.complex128, "prefix": "z"},
}

# Module-level constants
float32 = ElementType.SINGLE
float64 = ElementType.DOUBLE
complex64 = ElementType.COMPLEX_SINGLE
complex128 = ElementType.COMPLEX_DOUBLE


# =============================================================================
# Validation
# =============================================================================

def validate_element_type(etype: Any, default: Optional[ElementType] = None) -> ElementType:
    """
    Validate and normalize an element type given in any accepted form.

    Args:
        etype: ElementType, name string, NumPy dtype or None
        default: Returned when etype is None

    Returns:
        Validated ElementType
    """
    if etype is None:
        if default is None:
            raise TypeError("An element type is required")
        return default
    if isinstance(etype, ElementType):
        return etype
    if isinstance(etype, str):
        try:
            return ElementType.from_name(etype)
        except ValueError:
            pass
    try:
        return ElementType.from_dtype(etype)
    except TypeError:
        raise TypeError(f"Cannot convert {etype!r} to ElementType") from None


def element_type_of(obj: Any) -> ElementType:
    """Element type of a matrix, storage, array, dtype or type name."""
    etype = getattr(obj, "element_type", None)
    if isinstance(etype, ElementType):
        return etype
    if isinstance(obj, np.ndarray):
        return ElementType.from_dtype(obj.dtype)
    return validate_element_type(obj)


# =============================================================================
# Promotion
# =============================================================================

def flags_to_type(flags: int) -> ElementType:
    """
    Map an OR of capability flags to the minimal covering type.

    Raises:
        UnrepresentableTypeCombination: If flags is empty or has unknown bits
    """
    if flags == 0 or flags & ~_ALL_BITS:
        raise UnrepresentableTypeCombination(flags)
    double = bool(flags & _DOUBLE_BITS)
    if flags & _COMPLEX_BITS:
        return ElementType.COMPLEX_DOUBLE if double else ElementType.COMPLEX_SINGLE
    return ElementType.DOUBLE if double else ElementType.SINGLE


def common_type(*operands: Any) -> ElementType:
    """
    Common element type of all operands.

    Promotes toward double precision and toward complex, never the reverse:

        >>> common_type(ElementType.SINGLE, ElementType.COMPLEX_DOUBLE)
        <ElementType.COMPLEX_DOUBLE: 8>
        >>> common_type(ElementType.SINGLE, ElementType.DOUBLE)
        <ElementType.DOUBLE: 2>

    Args:
        *operands: ElementTypes, dtypes, matrices or arrays

    Raises:
        UnrepresentableTypeCombination: If no operand is given
    """
    flags = 0
    for operand in operands:
        flags |= int(element_type_of(operand))
    return flags_to_type(flags)


# =============================================================================
# Literal Inference
# =============================================================================

def _literal_flag(value: Any, force_float: bool) -> int:
    if isinstance(value, np.complexfloating):
        return ElementType.COMPLEX_SINGLE if value.dtype.itemsize <= 8 else ElementType.COMPLEX_DOUBLE
    if isinstance(value, np.floating):
        return ElementType.SINGLE if value.dtype.itemsize <= 4 else ElementType.DOUBLE
    if isinstance(value, (numbers.Rational, np.bool_)):
        # int, bool, Fraction, NumPy integers
        if force_float:
            return ElementType.DOUBLE
    elif isinstance(value, numbers.Real):
        return ElementType.DOUBLE
    elif isinstance(value, numbers.Complex):
        return ElementType.COMPLEX_DOUBLE
    raise UnrepresentableTypeCombination(
        0, message=f"Cannot represent literal {value!r} ({type(value).__name__}) "
                   f"as a floating element type (force_float={force_float})"
    )


def infer_element_type(values: Iterable[Any], config: Optional["Config"] = None) -> ElementType:
    """
    Infer the element type of raw numeric literals.

    Python floats give DOUBLE and complex numbers COMPLEX_DOUBLE; NumPy
    scalars keep their precision. Integers, rationals and booleans are
    floated to DOUBLE when ``config.force_float`` is set and rejected
    otherwise.

    Args:
        values: Numeric literals
        config: Construction policy (default_config() if None)

    Raises:
        UnrepresentableTypeCombination: For empty input or literals that
            cannot be floated under the policy
    """
    if config is None:
        from .core.config import default_config
        config = default_config()
    flags = 0
    for value in values:
        flags |= int(_literal_flag(value, config.force_float))
    if flags == 0:
        raise UnrepresentableTypeCombination(0, message="Cannot infer an element type from no values")
    return flags_to_type(flags)


__all__ = [
    "ElementType",
    "float32",
    "float64",
    "complex64",
    "complex128",
    "validate_element_type",
    "element_type_of",
    "flags_to_type",
    "common_type",
    "infer_element_type",
]
