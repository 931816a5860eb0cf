# /// script
# requires-python = ">=3.11"
# dependencies = ["typer>=0.9.0", "projax"]
#
# [tool.uv.sources]
# projax = { path = ".." }
# ///
"""Project a latitude/longitude grid and report round-trip error.

Builds a regular grid around the projection origin, projects it with a
JIT-compiled, vmap'd forward transform, maps it back with the inverse, and
prints timing and the worst round-trip error.  Points the projection cannot
represent (far side of the disk, outside the transverse Mercator strip) are
counted and excluded.

Requires projax to be installed (``uv pip install -e .`` from the repo root).

Usage:
    uv run examples/reproject_grid.py [OPTIONS]

Examples:
    # UTM zone 32N, 1 degree spacing
    uv run examples/reproject_grid.py utm --zone 32

    # Meteosat full disk at 0.25 degree spacing
    uv run examples/reproject_grid.py geos --lon-0 0.0 --step 0.25

    # GOES-East over WGS84
    uv run examples/reproject_grid.py geos --lon-0 -75.2 --height 35786023
"""

import enum
import math
import time
from typing import Annotated

import jax
import jax.numpy as jnp
import typer

from projax import set_dtype
from projax.ellipsoid import GRS80, WGS84
from projax.parameters import ProjectionParameters
from projax.projections import (
    ExtendedTransverseMercatorProjection,
    GeostationarySatelliteProjection,
)

set_dtype(jnp.float64)  # Must be before any JIT compilation


class Kind(enum.StrEnum):
    """Projection to exercise."""

    utm = "utm"
    geos = "geos"


def _build(kind: Kind, zone: int, south: bool, lon_0: float, height: float):
    if kind == Kind.utm:
        return ExtendedTransverseMercatorProjection.from_utm_zone(zone, south=south, ellipsoid=GRS80)
    params = ProjectionParameters(WGS84, lon_0=math.radians(lon_0))
    return GeostationarySatelliteProjection(params, height_of_orbit=height)


def main(
    kind: Annotated[Kind, typer.Argument(help="Projection to use")] = Kind.utm,
    zone: Annotated[int, typer.Option(help="UTM zone (utm only)")] = 32,
    south: Annotated[bool, typer.Option(help="Southern hemisphere UTM (utm only)")] = False,
    lon_0: Annotated[float, typer.Option(help="Sub-satellite longitude in degrees (geos only)")] = 0.0,
    height: Annotated[float, typer.Option(help="Orbit height in metres (geos only)")] = 35785831.0,
    step: Annotated[float, typer.Option(help="Grid spacing in degrees")] = 1.0,
    half_width: Annotated[float, typer.Option(help="Grid half-width in longitude, degrees")] = 80.0,
) -> None:
    """Project a grid forward and back and report the round-trip error."""
    proj = _build(kind, zone, south, lon_0, height)
    print(f"Projection: {proj.name}")
    print(f"  {proj.to_proj_string()}")

    centre = math.degrees(proj.params.lon_0)
    lons = jnp.arange(centre - half_width, centre + half_width + step / 2, step)
    lats = jnp.arange(-80.0, 80.0 + step / 2, step)
    lon_grid, lat_grid = jnp.meshgrid(lons, lats)
    lon_flat = jnp.deg2rad(lon_grid.ravel())
    lat_flat = jnp.deg2rad(lat_grid.ravel())
    print(f"  Grid: {lons.size} x {lats.size} = {lon_flat.size} points")

    forward = jax.jit(jax.vmap(proj.forward))

    t0 = time.perf_counter()
    xy = forward(lon_flat, lat_flat).block_until_ready()
    print(f"\nForward (incl. compile): {time.perf_counter() - t0:.3f}s")

    t0 = time.perf_counter()
    xy = forward(lon_flat, lat_flat).block_until_ready()
    print(f"Forward (compiled):      {time.perf_counter() - t0:.3f}s")

    valid = jnp.all(jnp.isfinite(xy), axis=1)
    n_valid = int(jnp.count_nonzero(valid))
    print(f"  Representable points: {n_valid} of {lon_flat.size}")
    if n_valid == 0:
        raise typer.Exit(code=1)

    xy_valid = xy[valid]
    t0 = time.perf_counter()
    lonlat = proj.inverse(xy_valid[:, 0], xy_valid[:, 1])
    print(f"Inverse (eager):         {time.perf_counter() - t0:.3f}s")

    dlon = jnp.abs(lonlat[0] - lon_flat[valid])
    dlon = jnp.minimum(dlon, 2 * jnp.pi - dlon)
    dlat = jnp.abs(lonlat[1] - lat_flat[valid])
    print(f"\nMax round-trip error: lon {float(jnp.max(dlon)):.3e} rad, lat {float(jnp.max(dlat)):.3e} rad")


if __name__ == "__main__":
    typer.run(main)
