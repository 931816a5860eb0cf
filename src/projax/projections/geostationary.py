"""Geostationary satellite view projection.

Maps geodetic coordinates to the scan angles seen by a satellite in
geostationary orbit above the central meridian, scaled by the orbit
height.  This is the fixed-grid projection used for Meteosat SEVIRI and
GOES ABI imagery (``+proj=geos`` with ``+sweep=y``).

The forward transform builds the vector from the satellite to the surface
point and converts it to view angles.  Points on the far side of the
visible disk come back as NaN.  The inverse rebuilds the view ray from the
angles and intersects it with the earth model by solving a quadratic; a
ray that misses the earth has no answer and raises
:class:`~projax.errors.ProjectionDomainError`.

All formulas work in units of the semi-major axis.  Distances in the
public interface are in the units of ``a``, angles in radians unless
``use_degrees=True``.

References:
    1. EUMETSAT, *LRIT/HRIT Global Specification*, CGMS 03, 1999,
       Sec. 4.4.
    2. PROJ contributors, *PROJ coordinate transformation software
       library*, ``geos`` projection.
"""

from __future__ import annotations

import logging
import math
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from projax.config import get_dtype
from projax.constants import GEOS_HEIGHT_OF_ORBIT, RAD2DEG
from projax.ellipsoid import Ellipsoid
from projax.errors import ProjectionDomainError
from projax.parameters import ProjectionParameters
from projax.projections._types import ProjectionKind
from projax.utils import from_radians, to_radians, wrap_longitude

logger = logging.getLogger(__name__)


class GeostationaryState(NamedTuple):
    """Constants derived from the ellipsoid and the orbit height.

    All radii are in units of the semi-major axis.

    Attributes:
        radius_g: Distance from the earth's centre to the satellite.
        radius_g_1: Orbit height above the equator, ``radius_g - 1``.
        c: ``radius_g**2 - 1``, constant term of the ray intersection.
        radius_p: Polar radius ``sqrt(1 - es)`` (1 on a sphere).
        radius_p2: ``1 - es`` (1 on a sphere).
        radius_p_inv2: ``1 / (1 - es)`` (1 on a sphere).
    """

    radius_g: float
    radius_g_1: float
    c: float
    radius_p: float
    radius_p2: float
    radius_p_inv2: float


def geostationary_state(ellipsoid: Ellipsoid, height_of_orbit: float) -> GeostationaryState:
    """Derive the projection constants for an ellipsoid and orbit height.

    Args:
        ellipsoid: Reference ellipsoid.
        height_of_orbit: Satellite height above the semi-major axis, in the
            units of ``ellipsoid.a``.

    Returns:
        GeostationaryState: Derived constants.

    Raises:
        ValueError: If the orbit height is not a positive finite number.
    """
    if not (math.isfinite(height_of_orbit) and height_of_orbit > 0.0):
        raise ValueError(
            f"Height of orbit must be positive, got {height_of_orbit}"
        )

    radius_g_1 = height_of_orbit / ellipsoid.a
    radius_g = 1.0 + radius_g_1
    c = radius_g * radius_g - 1.0
    if ellipsoid.spherical:
        radius_p = radius_p2 = radius_p_inv2 = 1.0
    else:
        radius_p = math.sqrt(ellipsoid.one_es)
        radius_p2 = ellipsoid.one_es
        radius_p_inv2 = ellipsoid.rone_es

    return GeostationaryState(radius_g, radius_g_1, c, radius_p, radius_p2, radius_p_inv2)


class _GeostationaryConfig(NamedTuple):
    """Parameters, orbit height and derived state, published together."""

    params: ProjectionParameters
    height_of_orbit: float
    state: GeostationaryState


def _forward_spherical(st: GeostationaryState, lam: Array, phi: Array) -> tuple[Array, Array]:
    # Vector from the satellite to the surface point
    tmp = jnp.cos(phi)
    vx = jnp.cos(lam) * tmp
    vy = jnp.sin(lam) * tmp
    vz = jnp.sin(phi)

    hidden = ((st.radius_g - vx) * vx - vy * vy - vz * vz) < 0

    # View angles from the satellite
    tmp = st.radius_g - vx
    x = st.radius_g_1 * jnp.arctan(vy / tmp)
    y = st.radius_g_1 * jnp.arctan(vz / jnp.hypot(vy, tmp))
    return jnp.where(hidden, jnp.nan, x), jnp.where(hidden, jnp.nan, y)


def _forward_ellipsoidal(st: GeostationaryState, lam: Array, phi: Array) -> tuple[Array, Array]:
    # Geocentric latitude
    phi = jnp.arctan(st.radius_p2 * jnp.tan(phi))

    r = st.radius_p / jnp.hypot(st.radius_p * jnp.cos(phi), jnp.sin(phi))
    vx = r * jnp.cos(lam) * jnp.cos(phi)
    vy = r * jnp.sin(lam) * jnp.cos(phi)
    vz = r * jnp.sin(phi)

    hidden = ((st.radius_g - vx) * vx - vy * vy - vz * vz * st.radius_p_inv2) < 0

    tmp = st.radius_g - vx
    x = st.radius_g_1 * jnp.arctan(vy / tmp)
    y = st.radius_g_1 * jnp.arctan(vz / jnp.hypot(vy, tmp))
    return jnp.where(hidden, jnp.nan, x), jnp.where(hidden, jnp.nan, y)


def _inverse_spherical(st: GeostationaryState, x: Array, y: Array) -> tuple[Array, Array, Array]:
    vx = -1.0
    vy = jnp.tan(x / (st.radius_g - 1.0))
    vz = jnp.tan(y / (st.radius_g - 1.0)) * jnp.sqrt(1.0 + vy * vy)

    a = vy * vy + vz * vz + vx * vx
    b = 2.0 * st.radius_g * vx
    det = b * b - 4.0 * a * st.c

    # Nearer of the two intersections; the other lies on the far side
    k = (-b - jnp.sqrt(det)) / (2.0 * a)
    vx = st.radius_g + k * vx
    vy = vy * k
    vz = vz * k

    lam = jnp.arctan2(vy, vx)
    phi = jnp.arctan(vz * jnp.cos(lam) / vx)
    return lam, phi, det


def _inverse_ellipsoidal(st: GeostationaryState, x: Array, y: Array) -> tuple[Array, Array, Array]:
    vx = -1.0
    vy = jnp.tan(x / st.radius_g_1)
    vz = jnp.tan(y / st.radius_g_1) * jnp.hypot(1.0, vy)

    a = vz / st.radius_p
    a = vy * vy + a * a + vx * vx
    b = 2.0 * st.radius_g * vx
    det = b * b - 4.0 * a * st.c

    k = (-b - jnp.sqrt(det)) / (2.0 * a)
    vx = st.radius_g + k * vx
    vy = vy * k
    vz = vz * k

    lam = jnp.arctan2(vy, vx)
    phi = jnp.arctan(vz * jnp.cos(lam) / vx)
    # Geocentric back to geodetic latitude
    phi = jnp.arctan(st.radius_p_inv2 * jnp.tan(phi))
    return lam, phi, det


class GeostationarySatelliteProjection:
    """Geostationary satellite view projection.

    The constructor runs :meth:`initialize`, so a new instance is ready to
    use.  Call :meth:`initialize` again to change the ellipsoid, central
    meridian or orbit height; it recomputes every derived constant.

    Equality and hashing are by value: two instances are equal when their
    orbit heights and projection parameters are equal.

    Examples:
        ```python
        from projax.ellipsoid import SPHERE
        from projax.parameters import ProjectionParameters
        from projax.projections import GeostationarySatelliteProjection

        geos = GeostationarySatelliteProjection(ProjectionParameters(SPHERE))
        xy = geos.forward(10.0, 20.0, use_degrees=True)
        lonlat = geos.inverse(xy[0], xy[1], use_degrees=True)
        ```

    Args:
        params: Projection parameters. Defaults to WGS84 with the central
            meridian at Greenwich. ``lat_0`` and ``k_0`` are not used.
        height_of_orbit: Satellite height above the semi-major axis, in the
            units of ``a``.
    """

    def __init__(
        self,
        params: ProjectionParameters | None = None,
        height_of_orbit: float = GEOS_HEIGHT_OF_ORBIT,
    ) -> None:
        params = params if params is not None else ProjectionParameters()
        self._configure(params, float(height_of_orbit))

    def initialize(
        self,
        params: ProjectionParameters | None = None,
        height_of_orbit: float | None = None,
    ) -> None:
        """Recompute the derived constants.

        Arguments left as ``None`` keep their current values.

        Args:
            params: New projection parameters.
            height_of_orbit: New orbit height, in the units of ``a``.

        Raises:
            ValueError: If the orbit height is not positive.
        """
        cfg = self._cfg
        params = params if params is not None else cfg.params
        height = float(height_of_orbit) if height_of_orbit is not None else cfg.height_of_orbit
        self._configure(params, height)

    def _configure(self, params: ProjectionParameters, height: float) -> None:
        state = geostationary_state(params.ellipsoid, height)
        # Published in one assignment; transforms read it once into a local
        self._cfg = _GeostationaryConfig(params, height, state)
        logger.debug(
            "Initialized geostationary projection: h=%s, radius_g=%.17g, spherical=%s",
            height, state.radius_g, params.ellipsoid.spherical,
        )

    # Properties

    @property
    def kind(self) -> ProjectionKind:
        """Projection variant."""
        return ProjectionKind.GEOSTATIONARY

    @property
    def name(self) -> str:
        """Human-readable projection name."""
        return "Geostationary Satellite"

    @property
    def params(self) -> ProjectionParameters:
        """Projection parameters."""
        return self._cfg.params

    @property
    def state(self) -> GeostationaryState:
        """Derived constants from the last :meth:`initialize`."""
        return self._cfg.state

    @property
    def height_of_orbit(self) -> float:
        """Satellite height above the semi-major axis."""
        return self._cfg.height_of_orbit

    @property
    def has_inverse(self) -> bool:
        """Whether :meth:`inverse` is available."""
        return True

    @property
    def is_equal_area(self) -> bool:
        """Whether the projection preserves area."""
        return False

    @property
    def is_rectilinear(self) -> bool:
        """Whether parallels and meridians map to straight lines."""
        return False

    def set_height_of_orbit(self, height_of_orbit: float) -> None:
        """Change the orbit height and re-initialize.

        Args:
            height_of_orbit: New orbit height, in the units of ``a``.
        """
        self.initialize(height_of_orbit=height_of_orbit)

    # Transforms

    def forward(self, lon: ArrayLike, lat: ArrayLike, use_degrees: bool = False) -> Array:
        """Project geodetic coordinates to scan-angle coordinates.

        Points outside the satellite's visible disk are returned as
        ``(nan, nan)``.

        Args:
            lon: Geodetic longitude. *rad* (or *deg* if ``use_degrees=True``).
            lat: Geodetic latitude. *rad* (or *deg* if ``use_degrees=True``).
            use_degrees: If ``True``, interpret ``lon`` and ``lat`` as degrees.

        Returns:
            jax.Array: ``[x, y]`` in the units of ``a``. For array inputs
                the leading axis holds the two components.
        """
        lon = to_radians(jnp.asarray(lon, dtype=get_dtype()), use_degrees)
        lat = to_radians(jnp.asarray(lat, dtype=get_dtype()), use_degrees)

        cfg = self._cfg
        p = cfg.params
        lam = wrap_longitude(lon - p.lon_0)
        if p.ellipsoid.spherical:
            x, y = _forward_spherical(cfg.state, lam, lat)
        else:
            x, y = _forward_ellipsoidal(cfg.state, lam, lat)

        return jnp.stack([p.a * x + p.x_0, p.a * y + p.y_0])

    def inverse(self, x: ArrayLike, y: ArrayLike, use_degrees: bool = False) -> Array:
        """Recover geodetic coordinates from scan-angle coordinates.

        The domain check needs concrete values, so this method is meant
        to be called eagerly rather than under ``jax.jit``.

        Args:
            x: Projected x coordinate, in the units of ``a``.
            y: Projected y coordinate, in the units of ``a``.
            use_degrees: If ``True``, return longitude and latitude in degrees.

        Returns:
            jax.Array: ``[lon, lat]`` in *rad* (or *deg*).

        Raises:
            ProjectionDomainError: If the view ray for any input point does
                not intersect the earth.
        """
        cfg = self._cfg
        p = cfg.params
        xn = (jnp.asarray(x, dtype=get_dtype()) - p.x_0) / p.a
        yn = (jnp.asarray(y, dtype=get_dtype()) - p.y_0) / p.a

        if p.ellipsoid.spherical:
            lam, phi, det = _inverse_spherical(cfg.state, xn, yn)
        else:
            lam, phi, det = _inverse_ellipsoidal(cfg.state, xn, yn)

        misses = int(jnp.count_nonzero(det < 0))
        if misses:
            logger.debug("Geostationary inverse: %d of %d rays miss the earth", misses, det.size)
            raise ProjectionDomainError(
                f"View ray does not intersect the earth for {misses} of {det.size} point(s)"
            )

        lon = wrap_longitude(lam + p.lon_0)
        return jnp.stack([from_radians(lon, use_degrees), from_radians(phi, use_degrees)])

    def to_proj_string(self) -> str:
        """Return the equivalent PROJ definition.

        Returns:
            str: A ``+proj=geos`` definition string.
        """
        cfg = self._cfg
        p = cfg.params
        return (
            f"+proj=geos +h={cfg.height_of_orbit!r} "
            f"+lon_0={p.lon_0 * RAD2DEG!r} "
            f"+x_0={p.x_0!r} +y_0={p.y_0!r} "
            f"{p.ellipsoid.to_proj_string()} +units=m +no_defs"
        )

    # Comparison

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GeostationarySatelliteProjection):
            return NotImplemented
        a, b = self._cfg, other._cfg
        return a.height_of_orbit == b.height_of_orbit and a.params == b.params

    def __ne__(self, other: object) -> bool:
        if not isinstance(other, GeostationarySatelliteProjection):
            return NotImplemented
        return not self.__eq__(other)

    def __hash__(self) -> int:
        cfg = self._cfg
        return hash((cfg.height_of_orbit, cfg.params))

    # String representations

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        cfg = self._cfg
        return (
            f"GeostationarySatelliteProjection(params={cfg.params!r}, "
            f"height_of_orbit={cfg.height_of_orbit!r})"
        )
