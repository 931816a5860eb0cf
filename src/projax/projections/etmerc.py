"""Extended transverse Mercator projection.

Implements the Poder/Engsager formulation of the ellipsoidal transverse
Mercator projection, accurate to a few millimetres up to 150 degrees of
longitude from the central meridian.  The transform runs in three steps:

1. geodetic latitude to Gaussian (conformal) latitude by a trigonometric
   series,
2. a spherical rotation onto the complementary conformal sphere,
3. the spherical Mercator coordinates are mapped to the ellipsoidal plane
   by a complex Clenshaw series.

The six-term series coefficients are polynomials in the third flattening
``n`` and are computed once in :meth:`ExtendedTransverseMercatorProjection.initialize`.
Points beyond the 150 degree strip are returned as ``(inf, inf)`` by both
directions.

References:
    1. G. Poder and K. Engsager, *Some conformal mapping formulas*,
       ICC 2007.
    2. R. König and K. H. Weise, *Mathematische Grundlagen der höheren
       Geodäsie und Kartographie*, Springer, 1951.
    3. PROJ contributors, ``etmerc`` projection (``proj_etmerc.c``).
"""

from __future__ import annotations

import logging
import math
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from projax.config import get_dtype
from projax.constants import (
    DEG2RAD,
    ETMERC_MAX_CE,
    ETMERC_ORDER,
    RAD2DEG,
    UTM_FALSE_EASTING,
    UTM_FALSE_NORTHING_SOUTH,
    UTM_K0,
    UTM_ZONES,
)
from projax.ellipsoid import GRS80, Ellipsoid
from projax.errors import EllipsoidRequiredError
from projax.numerics import asinhy, clen_s, clens, gatg
from projax.parameters import ProjectionParameters
from projax.projections._types import ProjectionKind
from projax.utils import from_radians, to_radians, wrap_longitude

logger = logging.getLogger(__name__)


class ETMState(NamedTuple):
    """Series coefficients and scalars derived in ``initialize``.

    Attributes:
        cgb: Gaussian -> geodetic latitude series, shape ``(6,)``.
        cbg: Geodetic -> Gaussian latitude series, shape ``(6,)``.
        utg: Ellipsoidal plane -> conformal sphere series, shape ``(6,)``.
        gtu: Conformal sphere -> ellipsoidal plane series, shape ``(6,)``.
        qn: Meridian quadrant scaled by ``k_0``, in units of ``a``.
        zb: Northing of the origin latitude, in units of ``a`` (negated).
    """

    cgb: Array
    cbg: Array
    utg: Array
    gtu: Array
    qn: float
    zb: float


def _series_coefficients(es: float) -> tuple[float, list[float], list[float], list[float], list[float]]:
    """Return ``n`` and the ``cgb``, ``cbg``, ``utg``, ``gtu`` coefficients."""
    # Flattening, written to avoid cancellation in 1 - sqrt(1 - es)
    f = es / (1 + math.sqrt(1 - es))
    # Third flattening
    n = f / (2 - f)

    cgb = [0.0] * ETMERC_ORDER
    cbg = [0.0] * ETMERC_ORDER
    utg = [0.0] * ETMERC_ORDER
    gtu = [0.0] * ETMERC_ORDER

    # Gaussian <-> geodetic latitude, König & Weise p186-191 (51)-(62)
    n_k = n
    cgb[0] = n * (2 + n * (-2 / 3.0 + n * (-2 + n * (116 / 45.0 + n * (26 / 45.0
        + n * (-2854 / 675.0))))))
    cbg[0] = n * (-2 + n * (2 / 3.0 + n * (4 / 3.0 + n * (-82 / 45.0 + n * (32 / 45.0
        + n * (4642 / 4725.0))))))
    n_k *= n
    cgb[1] = n_k * (7 / 3.0 + n * (-8 / 5.0 + n * (-227 / 45.0 + n * (2704 / 315.0
        + n * (2323 / 945.0)))))
    cbg[1] = n_k * (5 / 3.0 + n * (-16 / 15.0 + n * (-13 / 9.0 + n * (904 / 315.0
        + n * (-1522 / 945.0)))))
    n_k *= n
    # n^5 coefficient corrected from +1262/105 in the published table
    cgb[2] = n_k * (56 / 15.0 + n * (-136 / 35.0 + n * (-1262 / 105.0
        + n * (73814 / 2835.0))))
    cbg[2] = n_k * (-26 / 15.0 + n * (34 / 21.0 + n * (8 / 5.0
        + n * (-12686 / 2835.0))))
    n_k *= n
    # n^5 coefficient corrected from -322/35 in the published table
    cgb[3] = n_k * (4279 / 630.0 + n * (-332 / 35.0 + n * (-399572 / 14175.0)))
    cbg[3] = n_k * (1237 / 630.0 + n * (-12 / 5.0 + n * (-24832 / 14175.0)))
    n_k *= n
    cgb[4] = n_k * (4174 / 315.0 + n * (-144838 / 6237.0))
    cbg[4] = n_k * (-734 / 315.0 + n * (109598 / 31185.0))
    n_k *= n
    cgb[5] = n_k * (601676 / 22275.0)
    cbg[5] = n_k * (444337 / 155925.0)

    # Ellipsoidal plane <-> conformal sphere, König & Weise p194-196 (65), (69)
    n_k = n * n
    utg[0] = n * (-0.5 + n * (2 / 3.0 + n * (-37 / 96.0 + n * (1 / 360.0
        + n * (81 / 512.0 + n * (-96199 / 604800.0))))))
    gtu[0] = n * (0.5 + n * (-2 / 3.0 + n * (5 / 16.0 + n * (41 / 180.0
        + n * (-127 / 288.0 + n * (7891 / 37800.0))))))
    utg[1] = n_k * (-1 / 48.0 + n * (-1 / 15.0 + n * (437 / 1440.0 + n * (-46 / 105.0
        + n * (1118711 / 3870720.0)))))
    gtu[1] = n_k * (13 / 48.0 + n * (-3 / 5.0 + n * (557 / 1440.0 + n * (281 / 630.0
        + n * (-1983433 / 1935360.0)))))
    n_k *= n
    utg[2] = n_k * (-17 / 480.0 + n * (37 / 840.0 + n * (209 / 4480.0
        + n * (-5569 / 90720.0))))
    gtu[2] = n_k * (61 / 240.0 + n * (-103 / 140.0 + n * (15061 / 26880.0
        + n * (167603 / 181440.0))))
    n_k *= n
    utg[3] = n_k * (-4397 / 161280.0 + n * (11 / 504.0 + n * (830251 / 7257600.0)))
    gtu[3] = n_k * (49561 / 161280.0 + n * (-179 / 168.0 + n * (6601661 / 7257600.0)))
    n_k *= n
    utg[4] = n_k * (-4583 / 161280.0 + n * (108847 / 3991680.0))
    gtu[4] = n_k * (34729 / 80640.0 + n * (-3418889 / 1995840.0))
    n_k *= n
    utg[5] = n_k * (-20648693 / 638668800.0)
    gtu[5] = n_k * (212378941 / 319334400.0)

    return n, cgb, cbg, utg, gtu


def etmerc_state(ellipsoid: Ellipsoid, k_0: float, lat_0: float) -> ETMState:
    """Derive the series coefficients and scalars for the projection.

    Args:
        ellipsoid: Reference ellipsoid. Must not be a sphere.
        k_0: Scale factor on the central meridian.
        lat_0: Latitude of origin [rad].

    Returns:
        ETMState: Derived state.

    Raises:
        EllipsoidRequiredError: If ``ellipsoid.es <= 0``.
    """
    if ellipsoid.es <= 0:
        raise EllipsoidRequiredError(
            f"Extended transverse Mercator requires an ellipsoid with es > 0, "
            f"got es={ellipsoid.es}"
        )

    n, cgb, cbg, utg, gtu = _series_coefficients(ellipsoid.es)

    # Normalized meridian quadrant, König & Weise p50 (96), p19 (38b), p5 (2)
    n_k = n * n
    qn = k_0 / (1 + n) * (1 + n_k * (1 / 4.0 + n_k * (1 / 64.0 + n_k / 256.0)))

    # Origin northing minus true northing at the origin latitude, in float64
    # whatever the configured dtype
    cbg64 = jnp.array(cbg, dtype=jnp.float64)
    gtu64 = jnp.array(gtu, dtype=jnp.float64)
    Z = gatg(cbg64, jnp.float64(lat_0))
    zb = float(-qn * (Z + clens(gtu64, 2 * Z)))

    dtype = get_dtype()
    return ETMState(
        jnp.array(cgb, dtype=dtype),
        jnp.array(cbg, dtype=dtype),
        jnp.array(utg, dtype=dtype),
        jnp.array(gtu, dtype=dtype),
        qn,
        zb,
    )


def _forward(st: ETMState, lam: Array, phi: Array) -> tuple[Array, Array]:
    # Geodetic -> Gaussian latitude
    Cn = gatg(st.cbg, phi)
    Ce = lam

    # Gaussian -> complementary spherical latitude
    sin_Cn = jnp.sin(Cn)
    cos_Cn = jnp.cos(Cn)
    sin_Ce = jnp.sin(Ce)
    cos_Ce = jnp.cos(Ce)
    Cn = jnp.arctan2(sin_Cn, cos_Ce * cos_Cn)
    Ce = jnp.arctan2(sin_Ce * cos_Cn, jnp.hypot(sin_Cn, cos_Cn * cos_Ce))

    # Spherical N, E -> ellipsoidal normalized N, E
    Ce = asinhy(jnp.tan(Ce))
    dCn, dCe = clen_s(st.gtu, 2 * Cn, 2 * Ce)
    Cn = Cn + dCn
    Ce = Ce + dCe

    in_strip = jnp.abs(Ce) <= ETMERC_MAX_CE
    x = jnp.where(in_strip, st.qn * Ce, jnp.inf)
    y = jnp.where(in_strip, st.qn * Cn + st.zb, jnp.inf)
    return x, y


def _inverse(st: ETMState, x: Array, y: Array) -> tuple[Array, Array]:
    Cn = (y - st.zb) / st.qn
    Ce = x / st.qn
    in_strip = jnp.abs(Ce) <= ETMERC_MAX_CE

    # Normalized N, E -> complementary spherical latitude, longitude
    dCn, dCe = clen_s(st.utg, 2 * Cn, 2 * Ce)
    Cn = Cn + dCn
    Ce = Ce + dCe
    Ce = jnp.arctan(jnp.sinh(Ce))

    # Complementary spherical -> Gaussian latitude, longitude
    sin_Cn = jnp.sin(Cn)
    cos_Cn = jnp.cos(Cn)
    sin_Ce = jnp.sin(Ce)
    cos_Ce = jnp.cos(Ce)
    Ce = jnp.arctan2(sin_Ce, cos_Ce * cos_Cn)
    Cn = jnp.arctan2(sin_Cn * cos_Ce, jnp.hypot(sin_Ce, cos_Ce * cos_Cn))

    # Gaussian -> geodetic latitude
    lam = jnp.where(in_strip, Ce, jnp.inf)
    phi = jnp.where(in_strip, gatg(st.cgb, Cn), jnp.inf)
    return lam, phi


class _ETMConfig(NamedTuple):
    """Parameters and derived state, published together."""

    params: ProjectionParameters
    state: ETMState


def utm_zone_from_longitude(lon: float, use_degrees: bool = False) -> int:
    """Return the UTM zone whose central meridian is nearest to ``lon``.

    Args:
        lon: Longitude. *rad* (or *deg* if ``use_degrees=True``).
        use_degrees: If ``True``, interpret ``lon`` as degrees.

    Returns:
        int: Zone number in ``1..60``.

    Raises:
        ValueError: If ``lon`` is NaN or infinite.
    """
    lon = float(lon)
    if not math.isfinite(lon):
        raise ValueError(f"Longitude must be finite, got {lon}")
    if use_degrees:
        lon *= DEG2RAD
    lon = float(wrap_longitude(lon))
    zone = int(math.floor((lon + math.pi) * 30.0 / math.pi)) + 1
    return min(max(zone, 1), UTM_ZONES)


class ExtendedTransverseMercatorProjection:
    """Extended (Poder/Engsager) transverse Mercator projection.

    The constructor runs :meth:`initialize`.  Spherical ellipsoids are
    rejected; the series expansion is in powers of the third flattening
    and has nothing to expand on a sphere.

    Copies made with :meth:`clone`, :func:`copy.copy` or
    :func:`copy.deepcopy` own their coefficient arrays.

    Examples:
        ```python
        from projax.projections import ExtendedTransverseMercatorProjection

        utm32 = ExtendedTransverseMercatorProjection.from_utm_zone(32)
        xy = utm32.forward(10.0, 50.0, use_degrees=True)
        ```

    Args:
        params: Projection parameters. Defaults to GRS80 with origin at
            latitude 0 on the Greenwich meridian and unit scale.
    """

    def __init__(self, params: ProjectionParameters | None = None) -> None:
        params = params if params is not None else ProjectionParameters(GRS80)
        self._configure(params)

    @classmethod
    def from_utm_zone(
        cls,
        zone: int,
        south: bool = False,
        ellipsoid: Ellipsoid = GRS80,
    ) -> ExtendedTransverseMercatorProjection:
        """Create a projection for a UTM zone.

        Args:
            zone: UTM zone number, ``1..60``.
            south: If ``True``, use the southern-hemisphere false northing.
            ellipsoid: Reference ellipsoid.

        Returns:
            ExtendedTransverseMercatorProjection: Initialized projection.
        """
        proj = cls(ProjectionParameters(ellipsoid))
        proj.set_utm_zone(zone, south=south)
        return proj

    def initialize(self, params: ProjectionParameters | None = None) -> None:
        """Recompute the series coefficients and scalars.

        On failure the previous state is left in place.

        Args:
            params: New projection parameters. ``None`` keeps the current ones.

        Raises:
            EllipsoidRequiredError: If the ellipsoid is a sphere.
        """
        self._configure(params if params is not None else self._cfg.params)

    def _configure(self, params: ProjectionParameters) -> None:
        state = etmerc_state(params.ellipsoid, params.k_0, params.lat_0)
        # Published in one assignment; transforms read it once into a local
        self._cfg = _ETMConfig(params, state)
        logger.debug(
            "Initialized extended transverse Mercator: Qn=%.17g, Zb=%.17g",
            state.qn, state.zb,
        )

    def set_utm_zone(self, zone: int, south: bool = False) -> None:
        """Reconfigure for a UTM zone, keeping the ellipsoid.

        Args:
            zone: UTM zone number, ``1..60``.
            south: If ``True``, use the southern-hemisphere false northing.

        Raises:
            ValueError: If ``zone`` is outside ``1..60``.
        """
        if not 1 <= zone <= UTM_ZONES:
            raise ValueError(f"UTM zone must be in 1..{UTM_ZONES}, got {zone}")

        lon_0 = (zone - 1 + 0.5) * math.pi / 30.0 - math.pi
        params = self._cfg.params.with_changes(
            lon_0=lon_0,
            lat_0=0.0,
            k_0=UTM_K0,
            x_0=UTM_FALSE_EASTING,
            y_0=UTM_FALSE_NORTHING_SOUTH if south else 0.0,
        )
        logger.debug("Setting UTM zone %d%s", zone, "S" if south else "N")
        self.initialize(params)

    # Properties

    @property
    def kind(self) -> ProjectionKind:
        """Projection variant."""
        return ProjectionKind.EXTENDED_TRANSVERSE_MERCATOR

    @property
    def name(self) -> str:
        """Human-readable projection name."""
        return "Extended Transverse Mercator"

    @property
    def params(self) -> ProjectionParameters:
        """Projection parameters."""
        return self._cfg.params

    @property
    def state(self) -> ETMState:
        """Derived series and scalars from the last :meth:`initialize`."""
        return self._cfg.state

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

    # Transforms

    def forward(self, lon: ArrayLike, lat: ArrayLike, use_degrees: bool = False) -> Array:
        """Project geodetic coordinates to easting and northing.

        Points more than 150 degrees from the central meridian are returned
        as ``(inf, inf)``.

        Args:
            lon: Geodetic longitude. *rad* (or *deg* if ``use_degrees=True``).
            lat: Geodetic latitude. *rad* (or *deg* if ``use_degrees=True``).
            use_degrees: If ``True``, interpret ``lon`` and ``lat`` as degrees.

        Returns:
            jax.Array: ``[x, y]`` in the units of ``a``.
        """
        lon = to_radians(jnp.asarray(lon, dtype=get_dtype()), use_degrees)
        lat = to_radians(jnp.asarray(lat, dtype=get_dtype()), use_degrees)

        cfg = self._cfg
        p = cfg.params
        lam = wrap_longitude(lon - p.lon_0)
        x, y = _forward(cfg.state, lam, lat)

        return jnp.stack([p.a * x + p.x_0, p.a * y + p.y_0])

    def inverse(self, x: ArrayLike, y: ArrayLike, use_degrees: bool = False) -> Array:
        """Recover geodetic coordinates from easting and northing.

        Eastings beyond the 150 degree strip are returned as ``(inf, inf)``.

        Args:
            x: Easting, in the units of ``a``.
            y: Northing, in the units of ``a``.
            use_degrees: If ``True``, return longitude and latitude in degrees.

        Returns:
            jax.Array: ``[lon, lat]`` in *rad* (or *deg*).
        """
        cfg = self._cfg
        p = cfg.params
        xn = (jnp.asarray(x, dtype=get_dtype()) - p.x_0) / p.a
        yn = (jnp.asarray(y, dtype=get_dtype()) - p.y_0) / p.a

        lam, phi = _inverse(cfg.state, xn, yn)

        lon = wrap_longitude(lam + p.lon_0)
        return jnp.stack([from_radians(lon, use_degrees), from_radians(phi, use_degrees)])

    def to_proj_string(self) -> str:
        """Return the equivalent PROJ definition.

        Returns:
            str: A ``+proj=etmerc`` definition string.
        """
        p = self._cfg.params
        return (
            f"+proj=etmerc +lat_0={p.lat_0 * RAD2DEG!r} "
            f"+lon_0={p.lon_0 * RAD2DEG!r} +k_0={p.k_0!r} "
            f"+x_0={p.x_0!r} +y_0={p.y_0!r} "
            f"{p.ellipsoid.to_proj_string()} +units=m +no_defs"
        )

    # Copying

    def clone(self) -> ExtendedTransverseMercatorProjection:
        """Return a copy that owns element-wise copies of the coefficient arrays.

        Returns:
            ExtendedTransverseMercatorProjection: Independent copy.
        """
        cfg = self._cfg
        st = cfg.state
        obj = object.__new__(type(self))
        obj._cfg = _ETMConfig(
            cfg.params,
            st._replace(
                cgb=jnp.array(st.cgb, copy=True),
                cbg=jnp.array(st.cbg, copy=True),
                utg=jnp.array(st.utg, copy=True),
                gtu=jnp.array(st.gtu, copy=True),
            ),
        )
        return obj

    def __copy__(self) -> ExtendedTransverseMercatorProjection:
        return self.clone()

    def __deepcopy__(self, memo: dict) -> ExtendedTransverseMercatorProjection:
        return self.clone()

    # Comparison

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExtendedTransverseMercatorProjection):
            return NotImplemented
        return self._cfg.params == other._cfg.params

    def __ne__(self, other: object) -> bool:
        if not isinstance(other, ExtendedTransverseMercatorProjection):
            return NotImplemented
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash(self._cfg.params)

    # String representations

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"ExtendedTransverseMercatorProjection(params={self._cfg.params!r})"
