"""
Per-category area totals.

Each feature contributes only the part that lies inside the property
boundary; the boundary itself reports its own area and point categories
report 0. Totals are cached on the Layer and recomputed in full for a
category whenever the store has invalidated it (any edit to that layer, or
any edit to the boundary).
"""

import logging
from typing import Dict, Optional

import numpy as np
import pandas as pd

from Land_Cover_Precedence.config_types import AreaConfig
from Land_Cover_Precedence.kernel import GeometryKernel
from Land_Cover_Precedence.models import Category, categories_in_order
from Land_Cover_Precedence.store import PropertySession

logger = logging.getLogger("LandCover.Area")


class AreaAggregator:
    """Computes and caches per-category area totals in hectares."""

    def __init__(
        self, kernel: GeometryKernel, config: Optional[AreaConfig] = None
    ) -> None:
        self.kernel = kernel
        self.config = config or AreaConfig()

    def recompute_area(self, category: Category, session: PropertySession) -> float:
        """Full (uncached) area of `category` in hectares."""
        if category.is_point:
            return 0.0

        boundary = session.boundary_geometry
        if boundary is None:
            return 0.0
        if category is Category.PROPERTY_BOUNDARY:
            return self.kernel.area(boundary, "hectares")

        areas = [
            self.kernel.area(self.kernel.intersect(f.geometry, boundary), "hectares")
            for f in session.features(category)
        ]
        return float(np.sum(areas)) if areas else 0.0

    def refresh(self, session: PropertySession) -> None:
        """Recompute every stale layer total."""
        for category in categories_in_order():
            layer = session.layer(category)
            if layer.area_dirty:
                layer.cached_area_ha = self.recompute_area(category, session)
                logger.debug(
                    f"Recomputed {category.value}: {layer.cached_area_ha:.4f} ha"
                )

    def totals(
        self, session: PropertySession, unit: Optional[str] = None
    ) -> Dict[Category, float]:
        """
        Area per category, rounded to config.decimals.

        Args:
            session: Session to aggregate
            unit: Reporting unit (defaults to config.unit)

        Returns:
            Category -> area in `unit`
        """
        self.refresh(session)
        unit = unit or self.config.unit
        factor = self.config.square_meters_per("hectares") / self.config.square_meters_per(unit)
        return {
            category: round(session.layer(category).cached_area_ha * factor, self.config.decimals)
            for category in categories_in_order()
        }

    def summary_frame(self, session: PropertySession) -> pd.DataFrame:
        """Table of feature counts, hectares and share of the property."""
        self.refresh(session)
        boundary_ha = session.layer(Category.PROPERTY_BOUNDARY).cached_area_ha or 0.0
        rows = []
        for category in categories_in_order():
            layer = session.layer(category)
            area_ha = layer.cached_area_ha
            percent = (area_ha / boundary_ha * 100.0) if boundary_ha > 0 else 0.0
            rows.append(
                {
                    "category": category.value,
                    "display_name": category.display_name,
                    "feature_count": len(layer),
                    "area_ha": round(area_ha, self.config.decimals),
                    "percent_of_property": round(percent, self.config.decimals),
                }
            )
        return pd.DataFrame(rows)
