"""
Tests for element types and type inference.
"""

import itertools
from fractions import Fraction

import pytest
import numpy as np

from lla import ElementType, UnrepresentableTypeCombination
from lla._dtypes import (
    common_type,
    element_type_of,
    flags_to_type,
    infer_element_type,
    validate_element_type,
)
from lla.matrix import make_matrix

from conftest import ALL_TYPES


class TestElementType:
    """Test ElementType properties."""

    def test_capability_flags(self):
        """Test flag values of the four types."""
        assert int(ElementType.SINGLE) == 1
        assert int(ElementType.DOUBLE) == 2
        assert int(ElementType.COMPLEX_SINGLE) == 4
        assert int(ElementType.COMPLEX_DOUBLE) == 8

    def test_prefixes(self):
        """Test LAPACK prefixes."""
        assert [t.prefix for t in ALL_TYPES] == ['s', 'd', 'c', 'z']

    def test_numpy_dtypes(self):
        """Test NumPy dtype mapping."""
        assert ElementType.SINGLE.numpy_dtype == np.float32
        assert ElementType.DOUBLE.numpy_dtype == np.float64
        assert ElementType.COMPLEX_SINGLE.numpy_dtype == np.complex64
        assert ElementType.COMPLEX_DOUBLE.numpy_dtype == np.complex128

    def test_precision_and_domain(self):
        """Test precision tag and is_complex."""
        assert ElementType.SINGLE.precision == 'single'
        assert ElementType.COMPLEX_DOUBLE.precision == 'double'
        assert not ElementType.DOUBLE.is_complex
        assert ElementType.COMPLEX_SINGLE.is_complex

    def test_counterparts(self):
        """Test real/complex counterparts keep precision."""
        assert ElementType.COMPLEX_SINGLE.real_type == ElementType.SINGLE
        assert ElementType.COMPLEX_DOUBLE.real_type == ElementType.DOUBLE
        assert ElementType.SINGLE.complex_type == ElementType.COMPLEX_SINGLE
        assert ElementType.DOUBLE.complex_type == ElementType.COMPLEX_DOUBLE
        assert ElementType.DOUBLE.real_type == ElementType.DOUBLE

    def test_from_name(self):
        """Test lookup by name, prefix and NumPy name."""
        assert ElementType.from_name('double') == ElementType.DOUBLE
        assert ElementType.from_name('z') == ElementType.COMPLEX_DOUBLE
        assert ElementType.from_name('complex64') == ElementType.COMPLEX_SINGLE
        assert ElementType.from_name('real-single') == ElementType.SINGLE
        with pytest.raises(ValueError):
            ElementType.from_name('quad')

    def test_from_dtype(self):
        """Test lookup by NumPy dtype."""
        assert ElementType.from_dtype(np.float32) == ElementType.SINGLE
        assert ElementType.from_dtype('complex128') == ElementType.COMPLEX_DOUBLE
        with pytest.raises(TypeError):
            ElementType.from_dtype(np.int64)

    def test_validate_element_type(self):
        """Test validation of names, dtypes and defaults."""
        assert validate_element_type('d') == ElementType.DOUBLE
        assert validate_element_type(np.dtype(np.complex64)) == ElementType.COMPLEX_SINGLE
        assert validate_element_type(None, default=ElementType.SINGLE) == ElementType.SINGLE
        with pytest.raises(TypeError):
            validate_element_type(None)
        with pytest.raises(TypeError):
            validate_element_type(object())


class TestCommonType:
    """Test common type inference."""

    def test_single_and_complex_double(self):
        """Test promotion to complex double."""
        assert common_type(ElementType.SINGLE, ElementType.COMPLEX_DOUBLE) == ElementType.COMPLEX_DOUBLE

    def test_single_and_double(self):
        """Test promotion to double."""
        assert common_type(ElementType.SINGLE, ElementType.DOUBLE) == ElementType.DOUBLE

    def test_double_and_complex_single(self):
        """Test promotion toward both double and complex."""
        assert common_type(ElementType.DOUBLE, ElementType.COMPLEX_SINGLE) == ElementType.COMPLEX_DOUBLE

    def test_single_operand(self):
        """Test that a single operand is its own common type."""
        for etype in ALL_TYPES:
            assert common_type(etype) == etype

    def test_commutative_and_covering(self):
        """Test that the result is order independent and never narrower."""
        for a, b in itertools.product(ALL_TYPES, repeat=2):
            result = common_type(a, b)
            assert result == common_type(b, a)
            for operand in (a, b):
                assert result.itemsize >= operand.itemsize
                if operand.is_complex:
                    assert result.is_complex

    def test_mixed_operands(self):
        """Test matrices, arrays and dtypes as operands."""
        m = make_matrix(ElementType.SINGLE, 2, 2)
        arr = np.zeros(3, dtype=np.complex64)
        assert common_type(m, arr) == ElementType.COMPLEX_SINGLE
        assert common_type(m, np.float64) == ElementType.DOUBLE
        assert element_type_of(m) == ElementType.SINGLE

    def test_no_operands(self):
        """Test that no operand raises."""
        with pytest.raises(UnrepresentableTypeCombination):
            common_type()

    def test_unknown_flags(self):
        """Test flags outside the lattice."""
        with pytest.raises(UnrepresentableTypeCombination) as exc_info:
            flags_to_type(16)
        assert exc_info.value.flags == 16
        assert isinstance(exc_info.value, TypeError)


class TestInferElementType:
    """Test literal type inference."""

    def test_python_floats(self, config):
        """Test Python floats infer DOUBLE."""
        assert infer_element_type([1.0, 2.5], config) == ElementType.DOUBLE

    def test_python_complex(self, config):
        """Test a complex literal makes the result complex."""
        assert infer_element_type([1.0, 2j], config) == ElementType.COMPLEX_DOUBLE

    def test_integers_forced_to_double(self, config):
        """Test integer literals under force-float."""
        assert infer_element_type([1, 2, 3], config) == ElementType.DOUBLE
        assert infer_element_type([True, Fraction(1, 2)], config) == ElementType.DOUBLE
        assert infer_element_type([np.int32(1)], config) == ElementType.DOUBLE

    def test_integers_rejected_without_force_float(self, strict_config):
        """Test integer literals without force-float."""
        with pytest.raises(UnrepresentableTypeCombination):
            infer_element_type([1, 2, 3], strict_config)
        with pytest.raises(UnrepresentableTypeCombination):
            infer_element_type([1.0, 2], strict_config)

    def test_floats_accepted_without_force_float(self, strict_config):
        """Test that floating literals do not depend on the policy."""
        assert infer_element_type([1.0, 2.0], strict_config) == ElementType.DOUBLE

    def test_numpy_scalars_keep_precision(self, config):
        """Test NumPy scalar precision."""
        assert infer_element_type([np.float32(1)], config) == ElementType.SINGLE
        assert infer_element_type([np.float32(1), np.complex64(1)], config) == ElementType.COMPLEX_SINGLE
        assert infer_element_type([np.float32(1), 1.0], config) == ElementType.DOUBLE
        assert infer_element_type([np.complex128(1)], config) == ElementType.COMPLEX_DOUBLE

    def test_empty(self, config):
        """Test that no literals cannot be typed."""
        with pytest.raises(UnrepresentableTypeCombination):
            infer_element_type([], config)

    def test_non_numeric(self, config):
        """Test non-numeric literals."""
        with pytest.raises(UnrepresentableTypeCombination):
            infer_element_type([1.0, 'a'], config)
