"""
Shared types for the projection classes.
"""

from __future__ import annotations

import enum
from typing import Protocol, runtime_checkable

from jax import Array
from jax.typing import ArrayLike

from projax.parameters import ProjectionParameters


class ProjectionKind(enum.Enum):
    """Projection variants, valued by their PROJ identifiers."""

    GEOSTATIONARY = "geos"
    EXTENDED_TRANSVERSE_MERCATOR = "etmerc"


@runtime_checkable
class Projection(Protocol):
    """Capability contract implemented by every projection.

    ``forward`` maps geodetic ``(lon, lat)`` to projected ``(x, y)``;
    ``inverse`` maps back.  Both return an array whose leading axis holds
    the two components.  Points the projection cannot represent come back
    as non-finite values rather than raising.
    """

    @property
    def kind(self) -> ProjectionKind: ...

    @property
    def name(self) -> str: ...

    @property
    def params(self) -> ProjectionParameters: ...

    @property
    def has_inverse(self) -> bool: ...

    @property
    def is_equal_area(self) -> bool: ...

    @property
    def is_rectilinear(self) -> bool: ...

    def initialize(self, params: ProjectionParameters | None = None) -> None: ...

    def forward(self, lon: ArrayLike, lat: ArrayLike, use_degrees: bool = False) -> Array: ...

    def inverse(self, x: ArrayLike, y: ArrayLike, use_degrees: bool = False) -> Array: ...

    def to_proj_string(self) -> str: ...
