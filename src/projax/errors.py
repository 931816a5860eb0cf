"""Exceptions raised by projax projections.

Points a projection can evaluate but cannot represent are reported with
non-finite sentinels in the output (NaN for the geostationary view, +inf for
the transverse-Mercator strip).  The exceptions here cover the cases where no
answer exists at all, or where a projection was configured with parameters it
cannot work with.
"""


class ProjectionError(Exception):
    """Base class for projection errors."""


class ProjectionDomainError(ProjectionError):
    """The input has no solution under the projection's geometry.

    Raised by the geostationary inverse when the view ray reconstructed from
    the projected coordinates never meets the earth model.
    """


class EllipsoidRequiredError(ProjectionError, ValueError):
    """The projection needs an ellipsoid with non-zero eccentricity."""
