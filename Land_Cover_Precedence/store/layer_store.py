"""
Layer Store

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Hold the committed features of one property, per category,
and expose the CRUD operations the engine commits through.

Key Interactions:
-----------------
- Engine: commits accepted geometries, cascade changes and removals here
- Area Aggregator: reads/writes the per-layer cached area
- Invariant checker: reads the full state after each commit

Design:
- PropertySession is the unit of consistency. There is no process-wide
  singleton; every engine component receives the session explicitly.
- Features are replaced wholesale; a Feature object is never mutated.
- Each Layer caches its area total. Any edit to the layer invalidates it;
  any edit to the boundary invalidates every layer.

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import geopandas as gpd

from Land_Cover_Precedence.models import (
    Category,
    Feature,
    FeatureNotFoundError,
    FeatureStatus,
    categories_in_order,
    make_feature_id,
)

logger = logging.getLogger("LandCover.Store")


# ═══════════════════════════════════════════════════════════════════════════
# 🗂️ LAYER
# ═══════════════════════════════════════════════════════════════════════════


@dataclass
class Layer:
    """Features of one category plus visibility and cached area total.

    Attributes:
        category: Owning category
        features: feature_id -> Feature
        visible: Category-wide visibility flag
        cached_area_ha: Area total, None when stale
    """

    category: Category
    features: Dict[str, Feature] = field(default_factory=dict)
    visible: bool = True
    cached_area_ha: Optional[float] = None

    @property
    def area_dirty(self) -> bool:
        return self.cached_area_ha is None

    def invalidate_area(self) -> None:
        self.cached_area_ha = None

    def ordered_features(self) -> List[Feature]:
        """Features in creation order (stable across edits)."""
        return sorted(self.features.values(), key=lambda f: f.sequence)

    def is_empty(self) -> bool:
        return not self.features

    def __len__(self) -> int:
        return len(self.features)


# ═══════════════════════════════════════════════════════════════════════════
# 🏡 PROPERTY SESSION
# ═══════════════════════════════════════════════════════════════════════════


class PropertySession:
    """
    Aggregate of all layers for one property.

    Shared mutable state of the engine is confined to this object. The
    engine serialises access to it (one edit in flight per session).

    Attributes:
        property_id: Identifier of the property being digitised
        layers: Category -> Layer, in stable category order
    """

    def __init__(self, property_id: Optional[str] = None) -> None:
        self.property_id = property_id or uuid.uuid4().hex[:12]
        self.layers: Dict[Category, Layer] = {
            category: Layer(category) for category in categories_in_order()
        }
        self._sequence = 0

    # ───────────────────────────────────────────────────────────────────────
    # Read access
    # ───────────────────────────────────────────────────────────────────────

    def layer(self, category: Category) -> Layer:
        return self.layers[category]

    def features(self, category: Category) -> List[Feature]:
        """Features of `category` in stable creation order."""
        return self.layers[category].ordered_features()

    def get_feature(self, category: Category, feature_id: str) -> Feature:
        try:
            return self.layers[category].features[feature_id]
        except KeyError:
            raise FeatureNotFoundError(category, feature_id) from None

    @property
    def boundary_feature(self) -> Optional[Feature]:
        boundary = self.features(Category.PROPERTY_BOUNDARY)
        return boundary[0] if boundary else None

    @property
    def boundary_geometry(self) -> Optional[Any]:
        feature = self.boundary_feature
        return None if feature is None else feature.geometry

    @property
    def has_boundary(self) -> bool:
        return self.boundary_feature is not None

    def dependents(self) -> List[Feature]:
        """Every feature outside the boundary layer, in category order."""
        result: List[Feature] = []
        for category, layer in self.layers.items():
            if category is not Category.PROPERTY_BOUNDARY:
                result.extend(layer.ordered_features())
        return result

    def has_dependents(self) -> bool:
        return any(
            not layer.is_empty()
            for category, layer in self.layers.items()
            if category is not Category.PROPERTY_BOUNDARY
        )

    def feature_count(self) -> int:
        return sum(len(layer) for layer in self.layers.values())

    # ───────────────────────────────────────────────────────────────────────
    # Mutation
    # ───────────────────────────────────────────────────────────────────────

    def _invalidate(self, category: Category) -> None:
        if category is Category.PROPERTY_BOUNDARY:
            for layer in self.layers.values():
                layer.invalidate_area()
        else:
            self.layers[category].invalidate_area()

    def add_feature(
        self,
        category: Category,
        geometry: Any,
        status: FeatureStatus = FeatureStatus.CREATED,
    ) -> Feature:
        """Store a new feature and return it.

        Raises:
            ValueError: a second feature for a single-instance category
        """
        layer = self.layers[category]
        if not category.spec.allow_multiple and not layer.is_empty():
            raise ValueError(f"{category.display_name} allows a single feature")

        self._sequence += 1
        feature = Feature(
            feature_id=make_feature_id(category, self._sequence),
            category=category,
            geometry=geometry,
            status=status,
            sequence=self._sequence,
        )
        layer.features[feature.feature_id] = feature
        self._invalidate(category)
        logger.debug(f"Added {feature.feature_id} ({status.value})")
        return feature

    def replace_geometry(
        self,
        category: Category,
        feature_id: str,
        geometry: Any,
        status: FeatureStatus,
    ) -> Feature:
        """Replace a feature's geometry wholesale; id and sequence are kept."""
        current = self.get_feature(category, feature_id)
        updated = current.with_geometry(geometry, status)
        self.layers[category].features[feature_id] = updated
        self._invalidate(category)
        logger.debug(f"Replaced {feature_id} (revision {updated.revision})")
        return updated

    def remove_feature(self, category: Category, feature_id: str) -> Feature:
        """Remove one feature; returns it stamped REMOVED."""
        current = self.get_feature(category, feature_id)
        del self.layers[category].features[feature_id]
        self._invalidate(category)
        logger.debug(f"Removed {feature_id}")
        return current.removed()

    def clear_layer(self, category: Category) -> List[Feature]:
        """Remove every feature of `category`; returns them stamped REMOVED."""
        layer = self.layers[category]
        removed = [f.removed() for f in layer.ordered_features()]
        layer.features.clear()
        self._invalidate(category)
        return removed

    def clear_all(self) -> List[Feature]:
        """Remove every feature of every layer (boundary last)."""
        removed: List[Feature] = []
        for category in reversed(list(self.layers)):
            removed.extend(self.clear_layer(category))
        return removed

    def set_visible(self, category: Category, visible: bool) -> bool:
        """Set category visibility; hiding a never-hidden category is refused.

        Returns:
            True when the requested visibility is now in effect
        """
        if not visible and not category.spec.can_hide:
            return False
        self.layers[category].visible = visible
        return True

    # ───────────────────────────────────────────────────────────────────────
    # Export
    # ───────────────────────────────────────────────────────────────────────

    def to_geodataframe(self, crs: Optional[str] = None) -> gpd.GeoDataFrame:
        """One row per committed feature, in category then creation order."""
        rows = []
        for category, layer in self.layers.items():
            for feature in layer.ordered_features():
                rows.append(
                    {
                        "feature_id": feature.feature_id,
                        "category": category.value,
                        "display_name": category.display_name,
                        "status": feature.status.value,
                        "revision": feature.revision,
                        "visible": layer.visible,
                        "geometry": feature.geometry,
                    }
                )
        columns = [
            "feature_id",
            "category",
            "display_name",
            "status",
            "revision",
            "visible",
            "geometry",
        ]
        if not rows:
            return gpd.GeoDataFrame(
                {c: [] for c in columns[:-1]}, geometry=gpd.GeoSeries([], crs=crs)
            )
        return gpd.GeoDataFrame(rows, columns=columns, geometry="geometry", crs=crs)
