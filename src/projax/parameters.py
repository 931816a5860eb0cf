"""Base projection parameters.

:class:`ProjectionParameters` bundles the ellipsoid with the parameters
every projection definition carries: central meridian, origin latitude,
scale factor and false easting/northing.  It is immutable and hashable, so
projections can compare and hash themselves by value.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass, field

from projax.ellipsoid import WGS84, Ellipsoid


@dataclass(frozen=True)
class ProjectionParameters:
    """Parameters shared by all projections.

    Angles are in radians.  False easting and northing are in the units of
    the ellipsoid's semi-major axis.

    Args:
        ellipsoid: Reference ellipsoid.
        lon_0: Central meridian [rad].
        lat_0: Latitude of origin [rad].
        k_0: Scale factor at the origin [dimensionless].
        x_0: False easting.
        y_0: False northing.

    Examples:
        ```python
        from projax.ellipsoid import GRS80
        from projax.parameters import ProjectionParameters
        params = ProjectionParameters(GRS80, lon_0=0.157, k_0=0.9996, x_0=500000.0)
        params.with_changes(y_0=10000000.0)
        ```
    """

    ellipsoid: Ellipsoid = field(default=WGS84)
    lon_0: float = 0.0
    lat_0: float = 0.0
    k_0: float = 1.0
    x_0: float = 0.0
    y_0: float = 0.0

    def __post_init__(self) -> None:
        if not (math.isfinite(self.k_0) and self.k_0 > 0.0):
            raise ValueError(f"Scale factor k_0 must be positive, got {self.k_0}")

    @property
    def a(self) -> float:
        """Semi-major axis of the ellipsoid."""
        return self.ellipsoid.a

    def with_changes(self, **changes) -> ProjectionParameters:
        """Return a copy with the given fields replaced.

        Args:
            **changes: Field names and their new values.

        Returns:
            ProjectionParameters: New parameter record.
        """
        return dataclasses.replace(self, **changes)
