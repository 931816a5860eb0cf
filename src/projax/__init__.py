"""
projax implements the geostationary satellite and extended transverse Mercator map projections in JAX.
"""

from .constants import (
    DEG2RAD,
    RAD2DEG,
    WGS84_a,
    WGS84_f,
    GRS80_a,
    GRS80_f,
    GEOS_HEIGHT_OF_ORBIT,
    ETMERC_ORDER,
    ETMERC_MAX_CE,
    UTM_K0,
)

from .config import set_dtype, get_dtype

from .errors import (
    ProjectionError,
    ProjectionDomainError,
    EllipsoidRequiredError,
)

from .ellipsoid import Ellipsoid, WGS84, GRS80, SPHERE
from .parameters import ProjectionParameters

from .numerics import (
    log1py,
    asinhy,
    gatg,
    clens,
    clen_s,
)

from .projections import (
    Projection,
    ProjectionKind,
    GeostationarySatelliteProjection,
    ExtendedTransverseMercatorProjection,
    utm_zone_from_longitude,
)

__all__ = [
    # Constants
    "DEG2RAD",
    "RAD2DEG",
    "WGS84_a",
    "WGS84_f",
    "GRS80_a",
    "GRS80_f",
    "GEOS_HEIGHT_OF_ORBIT",
    "ETMERC_ORDER",
    "ETMERC_MAX_CE",
    "UTM_K0",
    # Config
    "set_dtype",
    "get_dtype",
    # Errors
    "ProjectionError",
    "ProjectionDomainError",
    "EllipsoidRequiredError",
    # Ellipsoids and parameters
    "Ellipsoid",
    "WGS84",
    "GRS80",
    "SPHERE",
    "ProjectionParameters",
    # Numerics
    "log1py",
    "asinhy",
    "gatg",
    "clens",
    "clen_s",
    # Projections
    "Projection",
    "ProjectionKind",
    "GeostationarySatelliteProjection",
    "ExtendedTransverseMercatorProjection",
    "utm_zone_from_longitude",
]
