"""
Shapely / pyproj kernel tests: normalisation, predicates, measurement and
failure wrapping.
"""

import pytest
from shapely.geometry import LineString, Point, Polygon, box

from Land_Cover_Precedence.config_types import ConfigurationError, KernelConfig
from Land_Cover_Precedence.kernel import KernelFailure, ShapelyKernel


@pytest.fixture
def geodesic_kernel():
    return ShapelyKernel(KernelConfig())


class TestOverlay:
    """Overlay results are polygonal or None."""

    def test_touching_squares_have_no_intersection(self, kernel):
        assert kernel.intersect(box(0, 0, 1, 1), box(1, 0, 2, 1)) is None

    def test_clip(self, kernel):
        assert kernel.clip(box(0.5, 0.5, 2, 2), box(0, 0, 1, 1)).equals(
            box(0.5, 0.5, 1, 1)
        )

    def test_difference_to_nothing(self, kernel):
        assert kernel.difference(box(0, 0, 1, 1), box(-1, -1, 2, 2)) is None

    def test_sliver_below_tolerance_is_empty(self, planar_config):
        kernel = ShapelyKernel(
            KernelConfig(area_mode="planar", empty_area_tolerance=1e-6),
            planar_config.area,
        )

        assert kernel.difference(box(0, 0, 1, 1), box(0, 0, 1, 0.9999999)) is None

    def test_union(self, kernel):
        merged = kernel.union([box(0, 0, 1, 1), box(1, 0, 2, 1), None])

        assert merged.area == pytest.approx(2.0)
        assert kernel.union([]) is None

    def test_point_intersection_kept(self, kernel):
        assert kernel.intersect(Point(0.5, 0.5), box(0, 0, 1, 1)).equals(Point(0.5, 0.5))


class TestPredicates:
    """overlaps() means "interiors share area"."""

    def test_containment_overlaps(self, kernel):
        assert kernel.overlaps(box(0, 0, 1, 1), box(0.2, 0.2, 0.4, 0.4))

    def test_touching_does_not_overlap(self, kernel):
        assert not kernel.overlaps(box(0, 0, 1, 1), box(1, 0, 2, 1))

    def test_disjoint(self, kernel):
        assert not kernel.overlaps(box(0, 0, 1, 1), box(3, 3, 4, 4))

    def test_contains_excludes_edge(self, kernel):
        assert kernel.contains(box(0, 0, 1, 1), Point(0.5, 0.5))
        assert not kernel.contains(box(0, 0, 1, 1), Point(1, 0.5))


class TestPrepare:
    """Candidate normalisation."""

    def test_bowtie_repaired(self, kernel):
        bowtie = Polygon([(0, 0), (1, 1), (1, 0), (0, 1)])

        repaired = kernel.prepare(bowtie, polygonal=True)

        assert repaired.is_valid
        assert repaired.geom_type == "MultiPolygon"
        assert repaired.area == pytest.approx(0.5)

    def test_repair_disabled(self, planar_config):
        kernel = ShapelyKernel(
            KernelConfig(area_mode="planar", repair_invalid=False), planar_config.area
        )

        with pytest.raises(KernelFailure) as excinfo:
            kernel.prepare(Polygon([(0, 0), (1, 1), (1, 0), (0, 1)]), polygonal=True)

        assert excinfo.value.operation == "prepare"
        assert "Self-intersection" in excinfo.value.diagnostic

    def test_empty_geometry(self, kernel):
        with pytest.raises(KernelFailure):
            kernel.prepare(Polygon(), polygonal=True)

    def test_line_has_no_area(self, kernel):
        with pytest.raises(KernelFailure):
            kernel.prepare(LineString([(0, 0), (1, 1)]), polygonal=True)

    def test_point_passes_through(self, kernel):
        point = Point(0.5, 0.5)

        assert kernel.prepare(point, polygonal=False) is point


class TestMeasurement:
    """Geodesic and planar area/length."""

    def test_planar_area_units(self, kernel):
        square = box(0, 0, 100, 100)

        assert kernel.area(square) == pytest.approx(10000.0)
        assert kernel.area(square, "hectares") == pytest.approx(1.0)
        assert kernel.area(square, "acres") == pytest.approx(2.47105)

    def test_geodesic_area_at_equator(self, geodesic_kernel):
        # 0.01 deg x 0.01 deg at the equator on WGS84
        area = geodesic_kernel.area(box(0, 0, 0.01, 0.01), "hectares")

        assert area == pytest.approx(123.09, rel=1e-3)

    def test_geodesic_area_ignores_orientation(self, geodesic_kernel):
        ccw = box(0, 0, 0.01, 0.01)
        cw = box(0, 0, 0.01, 0.01, ccw=False)

        assert geodesic_kernel.area(cw) == pytest.approx(geodesic_kernel.area(ccw))

    def test_geodesic_area_subtracts_holes(self, geodesic_kernel):
        outer = box(0, 0, 0.02, 0.02)
        holed = outer.difference(box(0.005, 0.005, 0.015, 0.015))

        ratio = geodesic_kernel.area(holed) / geodesic_kernel.area(outer)

        assert ratio == pytest.approx(0.75, rel=1e-3)

    def test_area_of_nothing(self, kernel):
        assert kernel.area(None) == 0.0
        assert kernel.area(Point(0, 0)) == 0.0

    def test_length(self, kernel, geodesic_kernel):
        assert kernel.length(box(0, 0, 100, 100), "kilometers") == pytest.approx(0.4)
        # One degree of latitude along a meridian near the equator
        meridian = LineString([(0, 0), (0, 1)])
        assert geodesic_kernel.length(meridian) == pytest.approx(110574, rel=1e-3)

    def test_unknown_unit(self, kernel):
        with pytest.raises(ConfigurationError):
            kernel.area(box(0, 0, 1, 1), "furlongs")


class TestFailureWrapping:
    """Errors inside primitives surface as KernelFailure."""

    def test_non_geometry_input(self, kernel):
        with pytest.raises(KernelFailure) as excinfo:
            kernel.difference(box(0, 0, 1, 1), "not a geometry")

        assert excinfo.value.operation == "difference"
        assert excinfo.value.inputs[0].startswith("POLYGON")
        assert "not a geometry" in excinfo.value.inputs[1]

    def test_long_wkt_truncated(self, planar_config):
        kernel = ShapelyKernel(
            KernelConfig(area_mode="planar", wkt_summary_chars=20), planar_config.area
        )

        with pytest.raises(KernelFailure) as excinfo:
            kernel.difference(box(0, 0, 1, 1), object())

        assert excinfo.value.inputs[0].endswith("...")
        assert len(excinfo.value.inputs[0]) == 23
