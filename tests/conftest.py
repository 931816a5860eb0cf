import jax.numpy as jnp
import pytest

from projax.config import set_dtype


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test.

    Tests that switch dtype (e.g. test_config.py) would otherwise leak their
    setting into later tests in the same worker process.
    """
    set_dtype(jnp.float64)
