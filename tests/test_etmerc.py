"""Tests for the extended transverse Mercator projection."""

import copy
import math
import threading

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from projax.constants import ETMERC_MAX_CE, UTM_K0
from projax.ellipsoid import GRS80, SPHERE, WGS84, Ellipsoid
from projax.errors import EllipsoidRequiredError, ProjectionError
from projax.parameters import ProjectionParameters
from projax.projections import (
    ExtendedTransverseMercatorProjection,
    GeostationarySatelliteProjection,
    Projection,
    ProjectionKind,
    etmerc_state,
    utm_zone_from_longitude,
)

# Projected coordinates [m]
_POS_TOL = 1e-6
# Angles [rad]
_ANGLE_TOL = 1e-9

# Offsets from the central meridian and latitudes [deg]
_GRID_DEG = [
    (0.0, 0.0),
    (3.0, 45.0),
    (-6.0, -33.0),
    (30.0, 60.0),
    (-45.0, 10.0),
    (60.0, -70.0),
    (0.5, 89.0),
    (-12.0, -85.0),
]


@pytest.fixture
def etm_grs80():
    """GRS80, central meridian at Greenwich, UTM scale and false easting."""
    params = ProjectionParameters(GRS80, k_0=UTM_K0, x_0=500000.0)
    return ExtendedTransverseMercatorProjection(params)


class TestETMState:
    def test_series_coefficients(self):
        """Leading GRS80 coefficients match values computed in double precision."""
        st = etmerc_state(GRS80, 1.0, 0.0)
        assert float(st.cbg[0]) == pytest.approx(-0.0033565546362689541, rel=1e-14)
        assert float(st.cgb[0]) == pytest.approx(0.0033565514856043126, rel=1e-14)
        assert float(st.gtu[0]) == pytest.approx(0.00083773182472855127, rel=1e-14)
        assert float(st.utg[0]) == pytest.approx(-0.00083773216816203518, rel=1e-14)
        assert float(st.gtu[1]) == pytest.approx(7.6085278481494726e-07, rel=1e-13)
        assert float(st.utg[1]) == pytest.approx(-5.9058702103689588e-08, rel=1e-13)

    def test_series_length(self):
        """Every series holds six terms."""
        st = etmerc_state(GRS80, 1.0, 0.0)
        for series in (st.cgb, st.cbg, st.utg, st.gtu):
            assert series.shape == (6,)

    def test_series_decay(self):
        """Each term is smaller than the previous by about a factor of n."""
        st = etmerc_state(GRS80, 1.0, 0.0)
        for series in (st.cgb, st.cbg, st.utg, st.gtu):
            mags = np.abs(np.asarray(series))
            assert np.all(mags[1:] < mags[:-1])

    def test_normalized_meridian_quadrant(self):
        """GRS80 Qn matches the reference meridian quadrant."""
        st = etmerc_state(GRS80, 1.0, 0.0)
        assert st.qn == pytest.approx(0.99832429842304216, rel=1e-14)
        assert st.qn * GRS80.a == pytest.approx(6367449.1457710471, abs=1e-6)

    def test_quadrant_scales_with_k0(self):
        """Qn is proportional to k_0."""
        st1 = etmerc_state(GRS80, 1.0, 0.0)
        st2 = etmerc_state(GRS80, UTM_K0, 0.0)
        assert st2.qn == pytest.approx(UTM_K0 * st1.qn, rel=1e-15)

    def test_origin_at_equator(self):
        """Zb vanishes for an equatorial origin."""
        st = etmerc_state(GRS80, 1.0, 0.0)
        assert st.zb == 0.0

    def test_origin_at_45_degrees(self):
        """-Zb is the meridian arc length to the origin latitude."""
        st = etmerc_state(GRS80, 1.0, math.radians(45.0))
        assert st.zb * GRS80.a == pytest.approx(-4984944.3778579962, abs=1e-6)

    def test_sphere_rejected(self):
        """Deriving state on a sphere raises."""
        with pytest.raises(EllipsoidRequiredError):
            etmerc_state(SPHERE, 1.0, 0.0)


class TestETMForward:
    def test_origin(self, etm_grs80):
        """The origin maps to the false easting and northing."""
        xy = etm_grs80.forward(0.0, 0.0)
        assert float(xy[0]) == pytest.approx(500000.0, abs=_POS_TOL)
        assert float(xy[1]) == pytest.approx(0.0, abs=_POS_TOL)

    def test_reference_north(self, etm_grs80):
        """(3E, 45N) matches the double-precision reference."""
        xy = etm_grs80.forward(3.0, 45.0, use_degrees=True)
        assert float(xy[0]) == pytest.approx(736446.0261031520, abs=_POS_TOL)
        assert float(xy[1]) == pytest.approx(4987329.5045792516, abs=_POS_TOL)

    def test_reference_south(self, etm_grs80):
        """(2W, 33S) with a southern false northing matches the reference."""
        etm_grs80.initialize(etm_grs80.params.with_changes(y_0=10000000.0))
        xy = etm_grs80.forward(-2.0, -33.0, use_degrees=True)
        assert float(xy[0]) == pytest.approx(313152.7772137533, abs=_POS_TOL)
        assert float(xy[1]) == pytest.approx(6346936.4958099648, abs=_POS_TOL)

    def test_utm_zone_32_reference(self):
        """UTM 32N (10E, 50N) matches the published coordinates."""
        utm32 = ExtendedTransverseMercatorProjection.from_utm_zone(32)
        xy = utm32.forward(10.0, 50.0, use_degrees=True)
        assert float(xy[0]) == pytest.approx(571666.4475041275, abs=_POS_TOL)
        assert float(xy[1]) == pytest.approx(5539109.8151756730, abs=_POS_TOL)

    def test_central_meridian_scale(self):
        """Northing along the central meridian is k0 times the meridian arc."""
        params = ProjectionParameters(GRS80, k_0=UTM_K0)
        etm = ExtendedTransverseMercatorProjection(params)
        xy = etm.forward(0.0, 45.0, use_degrees=True)
        assert float(xy[0]) == pytest.approx(0.0, abs=_POS_TOL)
        assert float(xy[1]) == pytest.approx(UTM_K0 * 4984944.3778579962, abs=_POS_TOL)

    def test_origin_latitude_offsets_northing(self):
        """A point at lat_0 on the central meridian maps to northing 0."""
        params = ProjectionParameters(GRS80, lat_0=math.radians(45.0))
        etm = ExtendedTransverseMercatorProjection(params)
        xy = etm.forward(0.0, 45.0, use_degrees=True)
        assert float(xy[0]) == pytest.approx(0.0, abs=_POS_TOL)
        assert float(xy[1]) == pytest.approx(0.0, abs=_POS_TOL)

    def test_symmetry(self, etm_grs80):
        """Mirroring longitude mirrors easting, mirroring latitude mirrors northing."""
        xy = etm_grs80.forward(4.0, 52.0, use_degrees=True)
        xy_w = etm_grs80.forward(-4.0, 52.0, use_degrees=True)
        xy_s = etm_grs80.forward(4.0, -52.0, use_degrees=True)
        assert float(xy_w[0] - 500000.0) == pytest.approx(-float(xy[0] - 500000.0), abs=_POS_TOL)
        assert float(xy_w[1]) == pytest.approx(float(xy[1]), abs=_POS_TOL)
        assert float(xy_s[1]) == pytest.approx(-float(xy[1]), abs=_POS_TOL)

    def test_outside_strip_is_inf(self, etm_grs80):
        """Points beyond the strip come back as (+inf, +inf)."""
        xy = etm_grs80.forward(89.0, 0.0, use_degrees=True)
        assert float(xy[0]) == math.inf
        assert float(xy[1]) == math.inf

    def test_batch_mixes_valid_and_outside(self, etm_grs80):
        """The sentinel is applied per element in a batch."""
        xy = etm_grs80.forward(jnp.array([3.0, 89.0]), jnp.array([45.0, 0.0]), use_degrees=True)
        assert xy.shape == (2, 2)
        assert jnp.all(jnp.isfinite(xy[:, 0]))
        assert jnp.all(jnp.isposinf(xy[:, 1]))

    def test_longitude_wrapping(self):
        """The central meridian offset is wrapped into [-pi, pi]."""
        etm = ExtendedTransverseMercatorProjection.from_utm_zone(60)
        xy = etm.forward(-179.0, 10.0, use_degrees=True)
        xy_east = etm.forward(181.0, 10.0, use_degrees=True)
        assert jnp.all(jnp.isfinite(xy))
        assert float(xy[0]) > 500000.0
        assert np.allclose(xy, xy_east, rtol=0.0, atol=1e-5)


class TestETMInverse:
    def test_origin(self, etm_grs80):
        """The false origin maps back to (lon_0, lat_0)."""
        lonlat = etm_grs80.inverse(500000.0, 0.0)
        assert jnp.abs(lonlat[0]) < _ANGLE_TOL
        assert jnp.abs(lonlat[1]) < _ANGLE_TOL

    def test_utm_zone_32_reference(self):
        """The published UTM 32N coordinates map back to (10E, 50N)."""
        utm32 = ExtendedTransverseMercatorProjection.from_utm_zone(32)
        lonlat = utm32.inverse(571666.4475041275, 5539109.8151756730, use_degrees=True)
        assert float(lonlat[0]) == pytest.approx(10.0, abs=1e-9)
        assert float(lonlat[1]) == pytest.approx(50.0, abs=1e-9)

    def test_outside_strip_is_inf(self, etm_grs80):
        """Eastings beyond the strip come back as (+inf, +inf)."""
        qn_a = etm_grs80.state.qn * GRS80.a
        lonlat = etm_grs80.inverse(500000.0 + 1.01 * ETMERC_MAX_CE * qn_a, 0.0)
        assert float(lonlat[0]) == math.inf
        assert float(lonlat[1]) == math.inf

    def test_strip_edge_is_finite(self, etm_grs80):
        """Eastings just inside the strip stay finite."""
        qn_a = etm_grs80.state.qn * GRS80.a
        lonlat = etm_grs80.inverse(500000.0 - 0.99 * ETMERC_MAX_CE * qn_a, 1.0e6)
        assert jnp.all(jnp.isfinite(lonlat))


class TestETMRoundTrip:
    def test_roundtrip_grid(self, etm_grs80):
        """forward then inverse recovers a grid of points within 1e-9 rad."""
        for dlon, lat in _GRID_DEG:
            xy = etm_grs80.forward(dlon, lat, use_degrees=True)
            lonlat = etm_grs80.inverse(xy[0], xy[1])
            assert float(lonlat[0]) == pytest.approx(math.radians(dlon), abs=_ANGLE_TOL), (
                f"Longitude roundtrip failed for {(dlon, lat)}"
            )
            assert float(lonlat[1]) == pytest.approx(math.radians(lat), abs=_ANGLE_TOL), (
                f"Latitude roundtrip failed for {(dlon, lat)}"
            )

    def test_roundtrip_batched_utm(self):
        """Batched southern UTM round trip on WGS84."""
        utm = ExtendedTransverseMercatorProjection.from_utm_zone(33, south=True, ellipsoid=WGS84)
        lon = jnp.array([15.0, 12.5, 17.9, 14.0])
        lat = jnp.array([-1.0, -30.0, -55.0, -79.5])
        xy = utm.forward(lon, lat, use_degrees=True)
        assert jnp.all(xy[1] > 0.0)
        lonlat = utm.inverse(xy[0], xy[1], use_degrees=True)
        assert np.allclose(lonlat[0], lon, rtol=0.0, atol=1e-9)
        assert np.allclose(lonlat[1], lat, rtol=0.0, atol=1e-9)

    def test_roundtrip_non_utm_origin(self):
        """National-grid style origin with lat_0, k_0 and false origin."""
        airy = Ellipsoid.from_inverse_flattening(6377563.396, 299.3249646, "Airy 1830")
        params = ProjectionParameters(
            airy,
            lon_0=math.radians(-2.0),
            lat_0=math.radians(49.0),
            k_0=0.9996012717,
            x_0=400000.0,
            y_0=-100000.0,
        )
        etm = ExtendedTransverseMercatorProjection(params)
        xy = etm.forward(-2.0, 49.0, use_degrees=True)
        assert float(xy[0]) == pytest.approx(400000.0, abs=_POS_TOL)
        assert float(xy[1]) == pytest.approx(-100000.0, abs=_POS_TOL)
        lon = jnp.array([-0.1, -3.2, 1.7])
        lat = jnp.array([51.5, 55.9, 52.6])
        xy = etm.forward(lon, lat, use_degrees=True)
        lonlat = etm.inverse(xy[0], xy[1], use_degrees=True)
        assert np.allclose(lonlat[0], lon, rtol=0.0, atol=1e-9)
        assert np.allclose(lonlat[1], lat, rtol=0.0, atol=1e-9)


class TestETMInitialize:
    def test_default_parameters(self):
        """Default construction uses GRS80 with unit scale."""
        etm = ExtendedTransverseMercatorProjection()
        assert etm.params.ellipsoid == GRS80
        assert etm.params.k_0 == 1.0

    def test_sphere_rejected_at_construction(self):
        """Constructing on a sphere raises EllipsoidRequiredError."""
        with pytest.raises(EllipsoidRequiredError):
            ExtendedTransverseMercatorProjection(ProjectionParameters(SPHERE))

    def test_ellipsoid_required_error_hierarchy(self):
        """EllipsoidRequiredError is both a ProjectionError and a ValueError."""
        assert issubclass(EllipsoidRequiredError, ProjectionError)
        assert issubclass(EllipsoidRequiredError, ValueError)

    def test_failed_initialize_keeps_state(self, etm_grs80):
        """A rejected re-initialization leaves parameters, state and output unchanged."""
        params = etm_grs80.params
        state = etm_grs80.state
        with pytest.raises(EllipsoidRequiredError):
            etm_grs80.initialize(ProjectionParameters(SPHERE))
        assert etm_grs80.params is params
        assert etm_grs80.state is state
        xy = etm_grs80.forward(3.0, 45.0, use_degrees=True)
        assert float(xy[0]) == pytest.approx(736446.0261031520, abs=_POS_TOL)

    def test_reinitialize_changes_state(self, etm_grs80):
        """Re-initializing with a new lat_0 recomputes Zb."""
        etm_grs80.initialize(etm_grs80.params.with_changes(lat_0=math.radians(45.0)))
        assert etm_grs80.state.zb < 0.0

    def test_reinitialize_while_projecting(self):
        """Every forward call during repeated re-initialization matches one whole configuration."""
        configs = [
            ProjectionParameters(GRS80, k_0=UTM_K0, x_0=500000.0),
            ProjectionParameters(WGS84, lon_0=math.radians(30.0), lat_0=math.radians(45.0), x_0=1000000.0),
        ]
        expected = [
            np.asarray(ExtendedTransverseMercatorProjection(p).forward(0.5, 0.3)) for p in configs
        ]
        etm = ExtendedTransverseMercatorProjection(configs[0])
        stop = threading.Event()

        def toggle():
            i = 0
            while not stop.is_set():
                i += 1
                etm.initialize(configs[i % 2])

        writer = threading.Thread(target=toggle)
        writer.start()
        try:
            results = [np.asarray(etm.forward(0.5, 0.3)) for _ in range(500)]
        finally:
            stop.set()
            writer.join()

        mixed = [
            r for r in results
            if not any(np.allclose(r, e, rtol=0.0, atol=_POS_TOL) for e in expected)
        ]
        assert not mixed


class TestUTMZones:
    def test_set_utm_zone(self):
        """Zone 32N sets the UTM central meridian, scale and false easting."""
        etm = ExtendedTransverseMercatorProjection()
        etm.set_utm_zone(32)
        p = etm.params
        assert p.lon_0 == pytest.approx(math.radians(9.0), abs=1e-14)
        assert p.lat_0 == 0.0
        assert p.k_0 == UTM_K0
        assert p.x_0 == 500000.0
        assert p.y_0 == 0.0
        assert p.ellipsoid == GRS80

    def test_set_utm_zone_south(self):
        """Southern zones get the 10 000 km false northing."""
        etm = ExtendedTransverseMercatorProjection()
        etm.set_utm_zone(1, south=True)
        assert etm.params.lon_0 == pytest.approx(math.radians(-177.0), abs=1e-14)
        assert etm.params.y_0 == 10000000.0

    def test_set_utm_zone_keeps_ellipsoid(self):
        """Switching zones keeps the configured ellipsoid."""
        etm = ExtendedTransverseMercatorProjection(ProjectionParameters(WGS84))
        etm.set_utm_zone(60)
        assert etm.params.ellipsoid == WGS84
        assert etm.params.lon_0 == pytest.approx(math.radians(177.0), abs=1e-14)

    @pytest.mark.parametrize("zone", [0, 61, -5])
    def test_invalid_zone(self, zone):
        """Zones outside 1..60 are rejected."""
        etm = ExtendedTransverseMercatorProjection()
        with pytest.raises(ValueError, match="UTM zone"):
            etm.set_utm_zone(zone)

    def test_from_utm_zone(self):
        """from_utm_zone is equivalent to construct then set_utm_zone."""
        a = ExtendedTransverseMercatorProjection.from_utm_zone(33, south=True, ellipsoid=WGS84)
        b = ExtendedTransverseMercatorProjection(ProjectionParameters(WGS84))
        b.set_utm_zone(33, south=True)
        assert a == b

    @pytest.mark.parametrize(
        "lon_deg, zone",
        [(-177.0, 1), (-179.5, 1), (3.0, 31), (9.0, 32), (10.0, 32), (179.5, 60), (183.0, 1)],
    )
    def test_zone_from_longitude(self, lon_deg, zone):
        """Longitudes map to the zone with the nearest central meridian."""
        assert utm_zone_from_longitude(lon_deg, use_degrees=True) == zone

    def test_zone_from_longitude_radians(self):
        """Radian input is the default."""
        assert utm_zone_from_longitude(math.radians(-75.0)) == 18

    @pytest.mark.parametrize("lon", [math.nan, math.inf, -math.inf])
    @pytest.mark.parametrize("use_degrees", [False, True])
    def test_zone_from_non_finite_longitude(self, lon, use_degrees):
        """NaN and infinite longitudes are rejected with a ValueError."""
        with pytest.raises(ValueError, match="finite"):
            utm_zone_from_longitude(lon, use_degrees=use_degrees)


class TestETMCopying:
    def test_clone_equal(self, etm_grs80):
        """A clone is a distinct, equal instance."""
        c = etm_grs80.clone()
        assert c == etm_grs80
        assert c is not etm_grs80

    def test_clone_owns_arrays(self, etm_grs80):
        """A clone holds its own copies of the coefficient arrays."""
        c = etm_grs80.clone()
        for name in ("cgb", "cbg", "utg", "gtu"):
            assert getattr(c.state, name) is not getattr(etm_grs80.state, name)
            assert np.array_equal(getattr(c.state, name), getattr(etm_grs80.state, name))

    def test_clone_independent_reinitialize(self, etm_grs80):
        """Re-initializing a clone does not touch the original."""
        c = etm_grs80.clone()
        c.initialize(ProjectionParameters(WGS84, k_0=UTM_K0, x_0=500000.0))
        assert etm_grs80.params.ellipsoid == GRS80
        assert c != etm_grs80
        assert not np.array_equal(c.state.cbg, etm_grs80.state.cbg)

    def test_replacing_array_in_clone(self, etm_grs80):
        """Swapping a coefficient array in the copy leaves the original alone."""
        c = etm_grs80.clone()
        original_gtu = np.asarray(etm_grs80.state.gtu).copy()
        c._cfg = c._cfg._replace(state=c.state._replace(gtu=c.state.gtu.at[0].set(0.0)))
        assert float(c.state.gtu[0]) == 0.0
        assert np.array_equal(etm_grs80.state.gtu, original_gtu)
        xy = etm_grs80.forward(3.0, 45.0, use_degrees=True)
        assert float(xy[0]) == pytest.approx(736446.0261031520, abs=_POS_TOL)

    def test_copy_module(self, etm_grs80):
        """copy.copy and copy.deepcopy produce independent clones."""
        shallow = copy.copy(etm_grs80)
        deep = copy.deepcopy(etm_grs80)
        assert shallow == etm_grs80
        assert deep == etm_grs80
        assert shallow.state.gtu is not etm_grs80.state.gtu
        shallow.set_utm_zone(31)
        assert etm_grs80.params.lon_0 == 0.0

    def test_clone_projects_identically(self, etm_grs80):
        """A clone projects bit-for-bit like its source."""
        c = etm_grs80.clone()
        xy = etm_grs80.forward(3.0, 45.0, use_degrees=True)
        assert np.array_equal(c.forward(3.0, 45.0, use_degrees=True), xy)


class TestETMProperties:
    def test_descriptors(self, etm_grs80):
        """Name, kind and capability flags."""
        assert etm_grs80.kind is ProjectionKind.EXTENDED_TRANSVERSE_MERCATOR
        assert etm_grs80.name == "Extended Transverse Mercator"
        assert str(etm_grs80) == "Extended Transverse Mercator"
        assert etm_grs80.has_inverse
        assert not etm_grs80.is_equal_area
        assert not etm_grs80.is_rectilinear

    def test_implements_protocol(self, etm_grs80):
        """The class satisfies the Projection protocol."""
        assert isinstance(etm_grs80, Projection)

    def test_repr(self, etm_grs80):
        """repr names the class and its parameters."""
        assert repr(etm_grs80).startswith("ExtendedTransverseMercatorProjection(params=")

    def test_proj_string(self, etm_grs80):
        """The PROJ definition carries every parameter."""
        s = etm_grs80.to_proj_string()
        assert s.startswith("+proj=etmerc +lat_0=0.0 +lon_0=0.0 +k_0=0.9996 +x_0=500000.0 +y_0=0.0 ")
        assert "+a=6378137.0" in s
        assert s.endswith("+units=m +no_defs")


class TestETMEquality:
    def test_equal_by_value(self):
        """Instances with equal parameters are equal and hash alike."""
        a = ExtendedTransverseMercatorProjection.from_utm_zone(32)
        b = ExtendedTransverseMercatorProjection.from_utm_zone(32)
        assert a == b
        assert not a != b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_scale_distinguishes(self):
        """A different k_0 breaks equality."""
        a = ExtendedTransverseMercatorProjection(ProjectionParameters(GRS80, k_0=1.0))
        b = ExtendedTransverseMercatorProjection(ProjectionParameters(GRS80, k_0=UTM_K0))
        assert a != b

    def test_not_equal_to_other_types(self, etm_grs80):
        """Comparison with unrelated types is False."""
        assert etm_grs80 != GeostationarySatelliteProjection()
        assert etm_grs80 != 42


class TestETMJax:
    def test_jit_forward(self, etm_grs80):
        """forward compiles under jax.jit and keeps its reference value."""
        f = jax.jit(etm_grs80.forward, static_argnames="use_degrees")
        xy = f(jnp.array(3.0), jnp.array(45.0), use_degrees=True)
        assert float(xy[0]) == pytest.approx(736446.0261031520, abs=_POS_TOL)
        assert float(xy[1]) == pytest.approx(4987329.5045792516, abs=_POS_TOL)

    def test_jit_inverse(self, etm_grs80):
        """inverse compiles under jax.jit."""
        f = jax.jit(etm_grs80.inverse)
        lonlat = f(jnp.array(736446.0261031520), jnp.array(4987329.5045792516))
        assert float(lonlat[0]) == pytest.approx(math.radians(3.0), abs=_ANGLE_TOL)
        assert float(lonlat[1]) == pytest.approx(math.radians(45.0), abs=_ANGLE_TOL)

    def test_vmap_forward(self, etm_grs80):
        """vmap over scalar calls matches the batched call."""
        lon = jnp.deg2rad(jnp.array([0.0, 3.0, -6.0, 30.0]))
        lat = jnp.deg2rad(jnp.array([0.0, 45.0, -33.0, 60.0]))
        xy_v = jax.vmap(etm_grs80.forward)(lon, lat)
        xy_b = etm_grs80.forward(lon, lat)
        assert xy_v.shape == (4, 2)
        assert np.allclose(xy_v.T, xy_b, rtol=0.0, atol=_POS_TOL)

    def test_grad_scale_on_central_meridian(self):
        """dy/dlat on the central meridian at the equator is k0 * a * (1 - es)."""
        params = ProjectionParameters(GRS80, k_0=UTM_K0)
        etm = ExtendedTransverseMercatorProjection(params)
        dy = jax.grad(lambda lat: etm.forward(0.0, lat)[1])(0.0)
        assert float(dy) == pytest.approx(UTM_K0 * GRS80.a * GRS80.one_es, rel=1e-10)
