"""Angle and unit conversion helpers.

These helpers wrap the ``use_degrees`` convention used throughout
projax, providing JAX-traceable degree/radian conversion via
``jnp.where``, and longitude wrapping that leaves non-finite sentinels
untouched.
"""

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike


def to_radians(angle: ArrayLike, use_degrees: bool) -> Array:
    """Convert angle to radians if ``use_degrees`` is True.

    Args:
        angle (ArrayLike): Angle value.
        use_degrees (bool): If ``True``, treat ``angle`` as degrees and convert.

    Returns:
        Angle in radians.
    """
    return jnp.where(use_degrees, jnp.deg2rad(angle), angle)


def from_radians(angle: ArrayLike, use_degrees: bool) -> Array:
    """Convert angle from radians to degrees if ``use_degrees`` is True.

    Args:
        angle (ArrayLike): Angle in radians.
        use_degrees (bool): If ``True``, convert to degrees.

    Returns:
        Angle in radians or degrees.
    """
    return jnp.where(use_degrees, jnp.rad2deg(angle), angle)


def wrap_longitude(lam: ArrayLike) -> Array:
    """Wrap a longitude into ``[-pi, pi]``.

    Values already inside the interval are returned unchanged, so the
    wrapping adds no rounding error near the central meridian.  NaN and
    infinite values pass through as they are.

    Args:
        lam (ArrayLike): Longitude in radians.

    Returns:
        Longitude in radians, within ``[-pi, pi]`` when finite.
    """
    lam = jnp.asarray(lam)
    wrapped = jnp.mod(lam + jnp.pi, 2.0 * jnp.pi) - jnp.pi
    needs_wrap = jnp.isfinite(lam) & (jnp.abs(lam) > jnp.pi)
    return jnp.where(needs_wrap, wrapped, lam)
