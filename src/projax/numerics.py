"""Accurate elementary functions and Clenshaw series summation.

Numerical kernels used by the extended transverse Mercator projection.
All functions are pure, elementwise over array arguments, and traceable
under ``jax.jit``, ``jax.vmap`` and ``jax.grad``.

Coefficient arrays are short and of static length, so the Clenshaw
recurrences are unrolled at trace time.  Coefficients are ordered from the
lowest harmonic upwards (``coeffs[0]`` multiplies ``sin(2x)`` or
``sin(x)``), and the recurrences run from the highest harmonic down.

References:
    1. G. Poder and K. Engsager, *Some conformal mapping formulas*,
       ICC 2007.
    2. C. W. Clenshaw, *A note on the summation of Chebyshev series*,
       Math. Tables Aids Comput. 9, 1955.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike


def log1py(x: ArrayLike) -> Array:
    """Compute ``log(1 + x)`` accurately for small ``x``.

    With ``y = 1 + x`` rounded and ``z = y - 1`` exact, ``log(y)/z`` is
    nearly constant near ``z = 0`` and ``x * log(y)/z`` recovers the digits
    lost when forming ``1 + x``.

    Args:
        x: Argument, ``x > -1``.

    Returns:
        jax.Array: ``log(1 + x)``.
    """
    x = jnp.asarray(x)
    y = 1.0 + x
    z = y - 1.0
    z_safe = jnp.where(z == 0.0, 1.0, z)
    return jnp.where(z == 0.0, x, x * jnp.log(y) / z_safe)


def asinhy(x: ArrayLike) -> Array:
    """Compute ``asinh(x)`` accurately, with exact odd symmetry.

    Args:
        x: Argument.

    Returns:
        jax.Array: ``asinh(x)``.
    """
    x = jnp.asarray(x)
    y = jnp.abs(x)
    y = log1py(y * (1.0 + y / (jnp.hypot(1.0, y) + 1.0)))
    return jnp.where(x < 0, -y, y)


def gatg(coeffs: ArrayLike, B: ArrayLike) -> Array:
    """Apply a latitude-correction series ``B + sum_k p_k sin(2kB)``.

    Used to convert between geodetic and Gaussian latitude.

    Args:
        coeffs: Series coefficients ``p_1 .. p_N``.
        B: Latitude [rad].

    Returns:
        jax.Array: Corrected latitude [rad].
    """
    p = jnp.asarray(coeffs)
    B = jnp.asarray(B)
    cos_2B = 2.0 * jnp.cos(2.0 * B)

    h = h1 = p[-1]
    h2 = 0.0
    for k in range(p.shape[0] - 2, -1, -1):
        h = -h2 + cos_2B * h1 + p[k]
        h2 = h1
        h1 = h

    return B + h * jnp.sin(2.0 * B)


def clens(coeffs: ArrayLike, arg_r: ArrayLike) -> Array:
    """Sum the sine series ``sum_k a_k sin(k arg_r)`` by Clenshaw recurrence.

    Args:
        coeffs: Series coefficients ``a_1 .. a_N``.
        arg_r: Real argument [rad].

    Returns:
        jax.Array: Series value.  Zero whenever ``sin(arg_r)`` is zero.
    """
    a = jnp.asarray(coeffs)
    arg_r = jnp.asarray(arg_r)
    r = 2.0 * jnp.cos(arg_r)

    hr1 = 0.0
    hr = a[-1]
    for k in range(a.shape[0] - 2, -1, -1):
        hr2 = hr1
        hr1 = hr
        hr = -hr2 + r * hr1 + a[k]

    return jnp.sin(arg_r) * hr


def clen_s(coeffs: ArrayLike, arg_r: ArrayLike, arg_i: ArrayLike) -> tuple[Array, Array]:
    """Sum the sine series at the complex argument ``arg_r + i arg_i``.

    Evaluates ``sum_k a_k sin(k (arg_r + i arg_i))`` with the complex
    Clenshaw recurrence, carrying real and imaginary parts separately.

    Args:
        coeffs: Series coefficients ``a_1 .. a_N``.
        arg_r: Real part of the argument.
        arg_i: Imaginary part of the argument.

    Returns:
        tuple[jax.Array, jax.Array]: Real and imaginary parts of the sum.
    """
    a = jnp.asarray(coeffs)
    arg_r = jnp.asarray(arg_r)
    arg_i = jnp.asarray(arg_i)

    sin_arg_r = jnp.sin(arg_r)
    cos_arg_r = jnp.cos(arg_r)
    sinh_arg_i = jnp.sinh(arg_i)
    cosh_arg_i = jnp.cosh(arg_i)
    r = 2.0 * cos_arg_r * cosh_arg_i
    i = -2.0 * sin_arg_r * sinh_arg_i

    hr1 = 0.0
    hi1 = 0.0
    hi = 0.0
    hr = a[-1]
    for k in range(a.shape[0] - 2, -1, -1):
        hr2 = hr1
        hi2 = hi1
        hr1 = hr
        hi1 = hi
        hr = -hr2 + r * hr1 - i * hi1 + a[k]
        hi = -hi2 + i * hr1 + r * hi1

    r = sin_arg_r * cosh_arg_i
    i = cos_arg_r * sinh_arg_i
    return r * hr - i * hi, r * hi + i * hr
