"""Map projections.

This sub-module provides the two supported projections and the contract
they share:

- **Geostationary satellite**: scan-angle view from geostationary orbit
  (``+proj=geos``)
- **Extended transverse Mercator**: Poder/Engsager ellipsoidal transverse
  Mercator valid to 150 degrees from the central meridian
  (``+proj=etmerc``), including UTM zones
"""

from ._types import (
    Projection,
    ProjectionKind,
)
from .etmerc import (
    ETMState,
    ExtendedTransverseMercatorProjection,
    etmerc_state,
    utm_zone_from_longitude,
)
from .geostationary import (
    GeostationarySatelliteProjection,
    GeostationaryState,
    geostationary_state,
)

__all__ = [
    "Projection",
    "ProjectionKind",
    "ETMState",
    "ExtendedTransverseMercatorProjection",
    "etmerc_state",
    "utm_zone_from_longitude",
    "GeostationarySatelliteProjection",
    "GeostationaryState",
    "geostationary_state",
]
