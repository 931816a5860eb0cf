"""Module-wide floating-point precision configuration.

Provides ``set_dtype`` and ``get_dtype`` to control the float dtype used
throughout projax.  The default is ``jnp.float64``: the projection series
are only accurate to the reference values in double precision, so JAX's
64-bit mode (``jax_enable_x64``) is switched on when this module is
imported.  Lower precisions are accepted for throughput-bound batch work.

Call ``set_dtype`` **before** any JIT compilation, just like JAX's own
``jax.config.update("jax_enable_x64", True)``.  Under JIT, ``get_dtype()``
runs during tracing and its result is baked into the compiled program.

Projection constants derived in ``initialize()`` are stored with the dtype
active at that time; re-run ``initialize()`` after switching dtype.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

_VALID_DTYPES = (jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64)

jax.config.update("jax_enable_x64", True)
_dtype = jnp.float64


def set_dtype(dtype) -> None:
    """Set the module-wide float dtype for projax.

    Must be called **before** any ``jax.jit`` compilation.  In eager mode
    the change takes effect immediately.

    If *dtype* is ``jnp.float64``, JAX's 64-bit mode is enabled via
    ``jax.config.update("jax_enable_x64", True)``.

    Args:
        dtype: One of ``jnp.float16``, ``jnp.bfloat16``, ``jnp.float32``,
            or ``jnp.float64``.

    Raises:
        ValueError: If *dtype* is not a supported float type.
    """
    global _dtype
    if dtype not in _VALID_DTYPES:
        raise ValueError(
            f"Unsupported dtype {dtype}. Must be one of: "
            f"jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64"
        )
    if dtype == jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Return the current module-wide float dtype.

    Returns:
        The active float dtype (default ``jnp.float64``).
    """
    return _dtype


def get_roundtrip_tolerance() -> float:
    """Return the dtype-adaptive angular tolerance for round-trip checks.

    The tolerance scales with the precision of the configured float dtype:

    - ``float16``:  1e-2 rad
    - ``bfloat16``: 1e-2 rad
    - ``float32``:  1e-4 rad
    - ``float64``:  1e-9 rad

    Returns:
        float: Tolerance in radians.
    """
    if _dtype == jnp.float64:
        return 1e-9
    if _dtype == jnp.float32:
        return 1e-4
    # float16 and bfloat16
    return 1e-2
