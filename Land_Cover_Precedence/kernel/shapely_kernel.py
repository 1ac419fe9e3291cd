#!/usr/bin/env python3
"""
Shapely / pyproj Geometry Kernel

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Implement the GeometryKernel primitives with Shapely 2.x and
measure areas/lengths on the ellipsoid with pyproj.Geod.

Key Features:
1. Polygonal normalisation (drops line/point debris from touching edges)
2. Empty-area tolerance so float noise never survives as a sliver feature
3. Geodesic (lon/lat, WGS84) or planar (projected metres) measurement
4. Every GEOS/PROJ error wrapped in KernelFailure with truncated WKT inputs

Navigation Guide:
- ShapelyKernel: Main kernel class
- _polygonal: Result normalisation used by clip/difference/union

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

from typing import Any, Callable, Iterable, List, Optional
import logging

import shapely
from pyproj import Geod
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.polygon import orient
from shapely.ops import unary_union

from Land_Cover_Precedence.config_types import AreaConfig, KernelConfig
from Land_Cover_Precedence.kernel.geometry_kernel import GeometryKernel, KernelFailure

logger = logging.getLogger("LandCover.Kernel")

POLYGONAL_TYPES = ("Polygon", "MultiPolygon")


# ═══════════════════════════════════════════════════════════════════════════
# 📐 SHAPELY KERNEL
# ═══════════════════════════════════════════════════════════════════════════


class ShapelyKernel(GeometryKernel):
    """
    Geometry kernel backed by Shapely (GEOS) and pyproj.

    In geodesic mode coordinates are (lon, lat) in EPSG:4326 and areas are
    computed on the configured ellipsoid. In planar mode coordinates are
    projected metres and Shapely's planar area/length are used directly.
    """

    def __init__(
        self,
        config: Optional[KernelConfig] = None,
        area_config: Optional[AreaConfig] = None,
    ) -> None:
        self.config = config or KernelConfig()
        self.area_config = area_config or AreaConfig()
        self._geod: Optional[Geod] = None
        if self.config.is_geodesic:
            self._geod = Geod(ellps=self.config.ellipsoid)

        logger.debug(
            f"ShapelyKernel initialized: mode={self.config.area_mode}, "
            f"tolerance={self.config.empty_area_tolerance}"
        )

    # ───────────────────────────────────────────────────────────────────────
    # Failure wrapping
    # ───────────────────────────────────────────────────────────────────────

    def _summarize(self, geometry: Any) -> str:
        if geometry is None:
            return "None"
        try:
            wkt = geometry.wkt
        except Exception:  # not a geometry at all
            return repr(geometry)[: self.config.wkt_summary_chars]
        limit = self.config.wkt_summary_chars
        return wkt if len(wkt) <= limit else wkt[:limit] + "..."

    def _run(self, operation: str, fn: Callable[[], Any], *inputs: Any) -> Any:
        try:
            return fn()
        except KernelFailure:
            raise
        except Exception as e:
            summaries = [self._summarize(g) for g in inputs]
            logger.warning(f"⚠️ Kernel {operation} failed: {e}")
            raise KernelFailure(operation, summaries, str(e)) from e

    # ───────────────────────────────────────────────────────────────────────
    # Normalisation
    # ───────────────────────────────────────────────────────────────────────

    def _polygonal(self, geometry: Any) -> Optional[Any]:
        """Keep only polygon parts; None when empty or below tolerance."""
        if geometry is None or geometry.is_empty:
            return None

        if geometry.geom_type in POLYGONAL_TYPES:
            result = geometry
        else:
            polygons: List[Polygon] = []
            for part in shapely.get_parts(geometry):
                if part.geom_type == "Polygon":
                    polygons.append(part)
                elif part.geom_type == "MultiPolygon":
                    polygons.extend(part.geoms)
                elif part.geom_type == "GeometryCollection":
                    nested = self._polygonal(part)
                    if nested is not None:
                        polygons.extend(shapely.get_parts(nested))
            if not polygons:
                return None
            result = polygons[0] if len(polygons) == 1 else MultiPolygon(polygons)

        if result.area <= self.config.empty_area_tolerance:
            return None
        return result

    def prepare(self, geometry: Any, polygonal: bool) -> Any:
        """
        Normalise a candidate geometry before validation.

        Polygonal candidates are repaired with make_valid (or rejected when
        repair is disabled) and stripped of non-polygonal debris.

        Raises:
            KernelFailure: invalid geometry that cannot be used
        """

        def _prepare() -> Any:
            if geometry is None or geometry.is_empty:
                raise ValueError("geometry is empty")
            if not polygonal:
                return geometry
            candidate = geometry
            if not candidate.is_valid:
                if not self.config.repair_invalid:
                    raise ValueError(
                        f"invalid polygon: {shapely.is_valid_reason(candidate)}"
                    )
                logger.info("🔧 Repairing invalid polygon with make_valid")
                candidate = shapely.make_valid(candidate)
            result = self._polygonal(candidate)
            if result is None:
                raise ValueError("geometry has no area")
            return result

        return self._run("prepare", _prepare, geometry)

    # ───────────────────────────────────────────────────────────────────────
    # Overlay primitives
    # ───────────────────────────────────────────────────────────────────────

    def clip(self, geometry: Any, boundary: Any) -> Optional[Any]:
        return self._run(
            "clip",
            lambda: self._polygonal(geometry.intersection(boundary)),
            geometry,
            boundary,
        )

    def intersect(self, a: Any, b: Any) -> Optional[Any]:
        def _intersect() -> Optional[Any]:
            result = a.intersection(b)
            if a.geom_type in POLYGONAL_TYPES and b.geom_type in POLYGONAL_TYPES:
                return self._polygonal(result)
            return None if result.is_empty else result

        return self._run("intersect", _intersect, a, b)

    def difference(self, a: Any, b: Any) -> Optional[Any]:
        return self._run(
            "difference", lambda: self._polygonal(a.difference(b)), a, b
        )

    def union(self, geometries: Iterable[Any]) -> Optional[Any]:
        geoms = [g for g in geometries if g is not None and not g.is_empty]
        if not geoms:
            return None
        return self._run(
            "union", lambda: self._polygonal(unary_union(geoms)), *geoms
        )

    # ───────────────────────────────────────────────────────────────────────
    # Predicates
    # ───────────────────────────────────────────────────────────────────────

    def contains(self, container: Any, contained: Any) -> bool:
        return self._run(
            "contains",
            lambda: bool(container.contains(contained)),
            container,
            contained,
        )

    def overlaps(self, a: Any, b: Any) -> bool:
        # Shapely's overlaps() is False when one polygon contains the other;
        # precedence needs "interiors share area".
        return self._run(
            "overlaps",
            lambda: bool(a.intersects(b) and not a.touches(b)),
            a,
            b,
        )

    def equals(self, a: Any, b: Any) -> bool:
        return self._run("equals", lambda: bool(a.equals(b)), a, b)

    # ───────────────────────────────────────────────────────────────────────
    # Measurement
    # ───────────────────────────────────────────────────────────────────────

    def _geodesic_area_m2(self, geometry: Any) -> float:
        total = 0.0
        for part in shapely.get_parts(geometry):
            if part.geom_type != "Polygon":
                continue
            # Exterior counter-clockwise, holes clockwise: holes are subtracted
            area, _ = self._geod.geometry_area_perimeter(orient(part, sign=1.0))
            total += abs(area)
        return total

    def area(self, geometry: Any, unit: str = "square-meters") -> float:
        """Area in `unit`; 0.0 for None, empty or non-polygonal geometries."""
        factor = self.area_config.square_meters_per(unit)
        if geometry is None or geometry.is_empty:
            return 0.0

        def _area() -> float:
            if geometry.geom_type not in POLYGONAL_TYPES:
                polygonal = self._polygonal(geometry)
                if polygonal is None:
                    return 0.0
                target = polygonal
            else:
                target = geometry
            if self._geod is not None:
                square_meters = self._geodesic_area_m2(target)
            else:
                square_meters = float(target.area)
            return square_meters / factor

        return self._run("area", _area, geometry)

    def length(self, geometry: Any, unit: str = "meters") -> float:
        """Length (perimeter for polygons) in `unit`."""
        factor = self.area_config.meters_per(unit)
        if geometry is None or geometry.is_empty:
            return 0.0

        def _length() -> float:
            if self._geod is not None:
                meters = self._geod.geometry_length(geometry)
            else:
                meters = float(geometry.length)
            return meters / factor

        return self._run("length", _length, geometry)
