"""
Tests for result assembly.
"""

import pytest
import numpy as np

from lla import ElementType, LengthMismatch
from lla.assembly import (
    complex_from_pair,
    complex_from_split,
    matrix_from_first_rows,
    sum_last_rows,
)
from lla.matrix import Kind, Ownership, UpperTriangular, make_matrix_from_buffer


class TestMatrixFromFirstRows:
    """Test padded-solution extraction."""

    def test_4x2_first_two_rows(self):
        """Test extracting 2 rows of a 4x2 buffer."""
        buf = np.array([1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0])
        x = matrix_from_first_rows(buf, 4, 2, 2)
        assert x.shape == (2, 2)
        full = buf.reshape((4, 2), order='F')
        np.testing.assert_array_equal(x.to_numpy(), full[:2, :])
        assert x.get(0, 1) == 5.0
        assert x.get(1, 0) == 2.0

    def test_result_owns_copy(self):
        """Test the result does not alias the buffer."""
        buf = np.arange(6, dtype=np.float64)
        x = matrix_from_first_rows(buf, 3, 2, 1)
        assert x.ownership is Ownership.OWNED
        buf[0] = 99.0
        assert x.get(0, 0) == 0.0

    def test_from_matrix(self):
        """Test a matrix as the buffer."""
        m = make_matrix_from_buffer(ElementType.COMPLEX_SINGLE, 3, 1,
                                    np.array([1j, 2, 3], dtype=np.complex64))
        x = matrix_from_first_rows(m, 3, 1, 2)
        assert x.element_type == ElementType.COMPLEX_SINGLE
        np.testing.assert_array_equal(x.data, [1j, 2])

    def test_kind(self):
        """Test the requested kind."""
        buf = np.arange(9, dtype=np.float64)
        x = matrix_from_first_rows(buf, 3, 3, 3, kind=Kind.UPPER)
        assert isinstance(x, UpperTriangular)

    def test_all_rows(self):
        """Test n == m copies everything."""
        buf = np.arange(4, dtype=np.float32)
        np.testing.assert_array_equal(matrix_from_first_rows(buf, 2, 2, 2).data, buf)

    def test_bad_length(self):
        """Test the buffer must be m x nrhs."""
        with pytest.raises(LengthMismatch):
            matrix_from_first_rows(np.zeros(7), 4, 2, 2)

    def test_bad_row_count(self):
        """Test n cannot exceed m."""
        with pytest.raises(ValueError):
            matrix_from_first_rows(np.zeros(8), 4, 2, 5)


class TestSumLastRows:
    """Test residual extraction."""

    def test_real(self):
        """Test squared trailing rows per column."""
        buf = np.array([1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0])
        np.testing.assert_allclose(sum_last_rows(buf, 4, 2, 2), [9 + 16, 49 + 64])

    def test_complex_keeps_element_type(self):
        """Test complex buffers give complex sums with zero imaginary parts."""
        buf = np.array([0, 3 + 4j, 0, 1j], dtype=np.complex128)
        result = sum_last_rows(buf, 2, 2, 1)
        assert result.dtype == np.complex128
        np.testing.assert_array_equal(result.imag, 0.0)
        np.testing.assert_allclose(result, [25.0, 1.0])

    def test_complex_trailing_rows(self):
        """Test squared magnitudes of a complex 4x1 buffer."""
        buf = np.array([1, 2, 3 + 4j, 5j], dtype=np.complex128)
        result = sum_last_rows(buf, 4, 1, 2)
        assert result.dtype == np.complex128
        np.testing.assert_allclose(result, [50.0])

    def test_single_precision(self):
        """Test the result follows the buffer precision."""
        buf = np.ones(4, dtype=np.complex64)
        assert sum_last_rows(buf, 2, 2, 1).dtype == np.complex64
        assert sum_last_rows(np.ones(4, dtype=np.float32), 2, 2, 1).dtype == np.float32

    def test_no_trailing_rows(self):
        """Test n == m gives zeros."""
        np.testing.assert_array_equal(sum_last_rows(np.ones(4), 2, 2, 2), [0.0, 0.0])


class TestComplexFromSplit:
    """Test real/complex disambiguation."""

    def test_complex_result(self):
        """Test n real parts followed by n imaginary parts."""
        buf = np.array([1.0, 2.0, 0.5, -0.5])
        result = complex_from_split(buf, 2, ElementType.DOUBLE)
        assert result.dtype == np.complex128
        np.testing.assert_array_equal(result, [1 + 0.5j, 2 - 0.5j])

    def test_check_real_narrows(self):
        """Test all-zero imaginary parts give a real vector on request."""
        buf = np.array([1.0, 2.0, 0.0, 0.0])
        result = complex_from_split(buf, 2, ElementType.DOUBLE, check_real=True)
        assert result.dtype == np.complex128
        np.testing.assert_array_equal(result.imag, 0.0)
        np.testing.assert_array_equal(result, [1.0, 2.0])

    def test_no_narrowing_without_request(self):
        """Test narrowing is never automatic."""
        buf = np.array([1.0, 2.0, 0.0, 0.0])
        assert complex_from_split(buf, 2, ElementType.DOUBLE).dtype == np.complex128

    def test_check_real_keeps_complex(self):
        """Test a single non-zero imaginary part keeps the complex type."""
        buf = np.array([1.0, 2.0, 0.0, 1e-300])
        assert complex_from_split(buf, 2, ElementType.DOUBLE, check_real=True).dtype == np.complex128

    def test_single_precision(self):
        """Test single precision maps to complex64."""
        buf = np.array([1.0, 2.0], dtype=np.float32)
        assert complex_from_split(buf, 1, ElementType.SINGLE).dtype == np.complex64
        assert complex_from_split(buf, 1, 's', check_real=False)[0] == 1 + 2j

    def test_short_buffer(self):
        """Test the buffer must hold 2n values."""
        with pytest.raises(LengthMismatch):
            complex_from_split(np.zeros(3), 2, ElementType.DOUBLE)


class TestComplexFromPair:
    """Test assembly from separate arrays."""

    def test_pair(self):
        """Test WR/WI style arrays."""
        result = complex_from_pair(np.array([1.0, 1.0]), np.array([2.0, -2.0]))
        np.testing.assert_array_equal(result, [1 + 2j, 1 - 2j])

    def test_pair_check_real(self):
        """Test narrowing from a pair."""
        result = complex_from_pair(np.array([3.0], dtype=np.float32),
                                   np.array([0.0], dtype=np.float32), check_real=True)
        assert result.dtype == np.float32

    def test_shape_mismatch(self):
        """Test parts must have the same length."""
        with pytest.raises(LengthMismatch):
            complex_from_pair(np.zeros(2), np.zeros(3))
