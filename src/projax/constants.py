"""
The `constants` module defines the mathematical, geodetic and projection constants used by projax.
"""

from math import pi as PI

# Mathematical Constants
"""
Constant to convert degrees to radians. Equal to 2pi/360. Units: *rad/deg*
"""
DEG2RAD = 2.0 * PI / 360.0

"""
Constant to convert radians to degrees. Equal to 360/2pi. Units: *deg/rad*
"""
RAD2DEG = 360.0 / (PI * 2.0)

# Ellipsoid Constants
"""
Earth's semi-major axis as defined by the WGS84 geodetic system. [m]

References:

1. NIMA Technical Report TR8350.2
"""
WGS84_a = 6378137.0  # WGS-84 semi-major axis

"""
Earth's ellipsoidal flattening.  WGS84 Value.

References:

1. NIMA Technical Report TR8350.2
"""
WGS84_f = 1.0 / 298.257223563  # WGS-84 flattening

"""
Semi-major axis of the GRS80 reference ellipsoid. [m]

References:

1. H. Moritz, *Geodetic Reference System 1980*, Bulletin Géodésique 54, 1980.
"""
GRS80_a = 6378137.0

"""
Flattening of the GRS80 reference ellipsoid. [dimensionless]

References:

1. H. Moritz, *Geodetic Reference System 1980*, Bulletin Géodésique 54, 1980.
"""
GRS80_f = 1.0 / 298.257222101

# Geostationary Satellite Projection
"""
Default height of a geostationary orbit above the ellipsoid's semi-major
axis, as used by the Meteosat/GOES fixed-grid definitions. [m]
"""
GEOS_HEIGHT_OF_ORBIT = 35785831.0

# Extended Transverse Mercator Projection
"""
Number of terms in the Gaussian-latitude and conformal-plane trigonometric
series (Engsager and Poder, ICC 2007).
"""
ETMERC_ORDER = 6

"""
Largest normalized easting the series is valid for. Corresponds to 150 degrees
of longitude from the central meridian. [rad]
"""
ETMERC_MAX_CE = 2.623395162778

"""
UTM central scale factor. [dimensionless]
"""
UTM_K0 = 0.9996

"""
UTM false easting. [m]
"""
UTM_FALSE_EASTING = 500000.0

"""
UTM false northing applied in the southern hemisphere. [m]
"""
UTM_FALSE_NORTHING_SOUTH = 10000000.0

"""
Number of UTM longitude zones.
"""
UTM_ZONES = 60
