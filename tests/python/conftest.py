"""
Pytest configuration and shared fixtures for LLA tests.
"""

import importlib

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root / "src"))

from lla import Config, ElementType
from lla.core.config import DEFAULT_LAPACK_MODULE


# Check that SciPy's LAPACK capsule module can be imported
try:
    importlib.import_module(DEFAULT_LAPACK_MODULE)
    HAS_LAPACK = True
except ImportError as e:
    HAS_LAPACK = False
    LAPACK_IMPORT_ERROR = str(e)


ALL_TYPES = [
    ElementType.SINGLE,
    ElementType.DOUBLE,
    ElementType.COMPLEX_SINGLE,
    ElementType.COMPLEX_DOUBLE,
]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def requires_lapack():
    """Skip test if the LAPACK kernels are not available."""
    if not HAS_LAPACK:
        pytest.skip(f"LAPACK not available: {LAPACK_IMPORT_ERROR}")


@pytest.fixture
def config():
    """Default policy, independent of LLA_* environment variables."""
    return Config()


@pytest.fixture
def strict_config():
    """Policy rejecting integer literals."""
    return Config(force_float=False)


@pytest.fixture(params=ALL_TYPES, ids=lambda t: t.name.lower())
def element_type(request):
    """Each of the four element types."""
    return request.param


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def spd_matrix(rng):
    """Random 4x4 symmetric positive definite matrix."""
    x = rng.standard_normal((4, 4))
    return x @ x.T + 4.0 * np.eye(4)


@pytest.fixture
def hpd_matrix(rng):
    """Random 4x4 Hermitian positive definite matrix."""
    x = rng.standard_normal((4, 4)) + 1j * rng.standard_normal((4, 4))
    return x @ x.conj().T + 4.0 * np.eye(4)


# =============================================================================
# Helper Functions
# =============================================================================

def tolerance(etype):
    """rtol suited to the precision of an element type."""
    return 1e-4 if etype.precision == 'single' else 1e-10


def random_matrix(rng, shape, etype):
    """Random array of the given element type."""
    a = rng.standard_normal(shape)
    if etype.is_complex:
        a = a + 1j * rng.standard_normal(shape)
    return a.astype(etype.numpy_dtype)
