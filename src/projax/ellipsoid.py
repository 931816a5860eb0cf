"""Reference ellipsoid parameters.

Provides :class:`Ellipsoid`, the read-only record of figure-of-the-earth
parameters the projections consume, and the commonly used ``WGS84``,
``GRS80`` and ``SPHERE`` instances.  Lookup of ellipsoids by name from
textual definitions is left to the caller.

The record stores the semi-major axis ``a`` and the squared first
eccentricity ``es``; every other quantity is derived from those two.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from projax.constants import GRS80_a, GRS80_f, WGS84_a, WGS84_f


@dataclass(frozen=True)
class Ellipsoid:
    """Figure-of-the-earth parameters.

    Args:
        a: Semi-major axis. Its units are the units of projected coordinates.
        es: Squared first eccentricity ``e^2``. ``0`` denotes a sphere.
        name: Optional label. Not part of equality or hashing.

    Examples:
        ```python
        from projax.ellipsoid import Ellipsoid
        ell = Ellipsoid.from_inverse_flattening(6378137.0, 298.257222101)
        ell.spherical
        ```
    """

    a: float
    es: float = 0.0
    name: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        if not (math.isfinite(self.a) and self.a > 0.0):
            raise ValueError(f"Semi-major axis must be positive, got {self.a}")
        if not (0.0 <= self.es < 1.0):
            raise ValueError(
                f"Squared eccentricity must be in [0, 1), got {self.es}"
            )

    @classmethod
    def from_flattening(cls, a: float, f: float, name: str = "") -> Ellipsoid:
        """Create from semi-major axis and flattening ``f = (a - b)/a``."""
        return cls(a, f * (2.0 - f), name)

    @classmethod
    def from_inverse_flattening(cls, a: float, rf: float, name: str = "") -> Ellipsoid:
        """Create from semi-major axis and inverse flattening ``1/f``."""
        return cls.from_flattening(a, 1.0 / rf, name)

    @classmethod
    def sphere(cls, radius: float, name: str = "") -> Ellipsoid:
        """Create a sphere of the given radius."""
        return cls(radius, 0.0, name)

    @property
    def one_es(self) -> float:
        """``1 - es``."""
        return 1.0 - self.es

    @property
    def rone_es(self) -> float:
        """``1 / (1 - es)``."""
        return 1.0 / (1.0 - self.es)

    @property
    def spherical(self) -> bool:
        """``True`` when ``es == 0``."""
        return self.es == 0.0

    @property
    def f(self) -> float:
        """Flattening ``(a - b)/a``."""
        return 1.0 - math.sqrt(1.0 - self.es)

    @property
    def b(self) -> float:
        """Semi-minor axis."""
        return self.a * math.sqrt(1.0 - self.es)

    def to_proj_string(self) -> str:
        """Return the PROJ ellipsoid parameters, e.g. ``+a=6378137.0 +es=0.0066...``."""
        if self.spherical:
            return f"+R={self.a!r}"
        return f"+a={self.a!r} +es={self.es!r}"


WGS84 = Ellipsoid.from_flattening(WGS84_a, WGS84_f, "WGS84")

GRS80 = Ellipsoid.from_flattening(GRS80_a, GRS80_f, "GRS80")

# Sphere with the WGS84 equatorial radius.
SPHERE = Ellipsoid.sphere(WGS84_a, "sphere")
