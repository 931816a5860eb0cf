"""Shared utility functions for projax.

Provides angle conversion and longitude wrapping helpers.
"""

from projax.utils._angle import from_radians, to_radians, wrap_longitude

__all__ = [
    "from_radians",
    "to_radians",
    "wrap_longitude",
]
