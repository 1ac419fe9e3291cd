"""
Typed data models for land cover categories and features.

Architectural Overview:
=======================
This module holds the closed set of land-use categories together with their
precedence table, and the immutable Feature record stored per layer.

Key Interactions:
-----------------
- Validator: reads CATEGORY_TABLE to decide which categories a candidate defers to
- Cascade: reads CATEGORY_TABLE to find the categories a commit overrides
- Store: keeps Feature instances, replacing them wholesale on every mutation

Precedence is data, not code structure: the rank of each category lives in
CATEGORY_TABLE. Among land cover categories a higher rank wins; categories of
equal rank do not constrain each other.

MODIFICATION POINT: Add a new category to Category AND CATEGORY_TABLE.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional


# ═══════════════════════════════════════════════════════════════════════════
# 🏷️ ENUMS SECTION
# ═══════════════════════════════════════════════════════════════════════════


class GeometryKind(Enum):
    """Geometry type expected for a category."""

    POINT = "point"
    POLYGON = "polygon"


class Category(Enum):
    """Land-use category of a feature.

    Values are the layer slugs used in feature ids and exported tables.
    """

    PROPERTY_BOUNDARY = "property-area"
    HEADQUARTERS = "property-headquarters"
    CONSOLIDATED = "consolidated-area"
    NATIVE_VEGETATION = "native-vegetation"
    FALLOW = "fallow-area"
    ANTHROPIZED = "anthropized-area"

    @classmethod
    def from_string(cls, s: str) -> "Category":
        """Convert a slug or member name to Category.

        Args:
            s: Slug like "native-vegetation" or name like "NATIVE_VEGETATION"

        Returns:
            Matching Category member

        Raises:
            ValueError: if no member matches
        """
        for member in cls:
            if member.value == s or member.name == s.upper():
                return member
        raise ValueError(f"Unknown category: {s!r}")

    @property
    def spec(self) -> "CategorySpec":
        return CATEGORY_TABLE[self]

    @property
    def rank(self) -> int:
        return CATEGORY_TABLE[self].rank

    @property
    def display_name(self) -> str:
        return CATEGORY_TABLE[self].display_name

    @property
    def is_land_cover(self) -> bool:
        return CATEGORY_TABLE[self].is_land_cover

    @property
    def is_point(self) -> bool:
        return CATEGORY_TABLE[self].geometry_kind is GeometryKind.POINT


class FeatureStatus(Enum):
    """Lifecycle stamp of a feature."""

    CREATED = "created"  # Committed exactly as submitted
    CLIPPED = "clipped"  # Committed after clipping, or clipped by a cascade
    REMOVED = "removed"  # No longer stored; returned to callers for reporting


class RejectionReason(Enum):
    """Domain rule violations. Expected outcomes, never raised."""

    NO_BOUNDARY = "no_boundary"
    BOUNDARY_HAS_DEPENDENTS = "boundary_has_dependents"
    OUTSIDE_BOUNDARY = "outside_boundary"
    FULLY_CONSUMED_BY_HIGHER_PRECEDENCE = "fully_consumed_by_higher_precedence"
    SINGLE_INSTANCE_EXISTS = "single_instance_exists"


# ═══════════════════════════════════════════════════════════════════════════
# 📊 CATEGORY RANK TABLE
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class CategorySpec:
    """Static rules for one category.

    Attributes:
        rank: Precedence; among land cover categories higher rank wins
        order: Stable iteration order (layer order of the drawing UI)
        geometry_kind: Point or polygon
        allow_multiple: False for single-instance categories
        required: Must exist before any other category is populated
        is_land_cover: Participates in coverage and precedence resolution
        can_hide: Category-wide hiding allowed
        display_name: Name used in user-facing messages
    """

    rank: int
    order: int
    geometry_kind: GeometryKind
    allow_multiple: bool
    required: bool
    is_land_cover: bool
    can_hide: bool
    display_name: str


CATEGORY_TABLE: Dict[Category, CategorySpec] = {
    Category.PROPERTY_BOUNDARY: CategorySpec(
        rank=0,
        order=0,
        geometry_kind=GeometryKind.POLYGON,
        allow_multiple=False,
        required=True,
        is_land_cover=False,
        can_hide=True,
        display_name="Property Area",
    ),
    Category.HEADQUARTERS: CategorySpec(
        rank=1,
        order=1,
        geometry_kind=GeometryKind.POINT,
        allow_multiple=False,
        required=False,
        is_land_cover=False,
        can_hide=True,
        display_name="Property Headquarters",
    ),
    Category.CONSOLIDATED: CategorySpec(
        rank=2,
        order=2,
        geometry_kind=GeometryKind.POLYGON,
        allow_multiple=True,
        required=False,
        is_land_cover=True,
        can_hide=True,
        display_name="Consolidated Area",
    ),
    Category.NATIVE_VEGETATION: CategorySpec(
        rank=3,
        order=3,
        geometry_kind=GeometryKind.POLYGON,
        allow_multiple=True,
        required=False,
        is_land_cover=True,
        can_hide=True,
        display_name="Native Vegetation",
    ),
    Category.FALLOW: CategorySpec(
        rank=2,
        order=4,
        geometry_kind=GeometryKind.POLYGON,
        allow_multiple=True,
        required=False,
        is_land_cover=True,
        can_hide=True,
        display_name="Fallow Area",
    ),
    Category.ANTHROPIZED: CategorySpec(
        rank=2,
        order=5,
        geometry_kind=GeometryKind.POLYGON,
        allow_multiple=True,
        required=False,
        is_land_cover=True,
        can_hide=False,
        display_name="Anthropized Area",
    ),
}


def categories_in_order() -> List[Category]:
    """All categories sorted by their stable order."""
    return sorted(CATEGORY_TABLE, key=lambda c: CATEGORY_TABLE[c].order)


def land_cover_categories() -> List[Category]:
    """Land cover categories sorted by their stable order."""
    return [c for c in categories_in_order() if CATEGORY_TABLE[c].is_land_cover]


def higher_precedence(category: Category) -> List[Category]:
    """Land cover categories a candidate of `category` must defer to."""
    if not category.is_land_cover:
        return []
    return [c for c in land_cover_categories() if c.rank > category.rank]


def lower_precedence(category: Category) -> List[Category]:
    """Land cover categories a committed `category` feature overrides.

    Returned in the fixed cascade order (Consolidated, Fallow, Anthropized
    for native vegetation).
    """
    if not category.is_land_cover:
        return []
    return [c for c in land_cover_categories() if c.rank < category.rank]


# ═══════════════════════════════════════════════════════════════════════════
# 🏗️ FEATURE DATACLASS SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Feature:
    """Immutable committed geometry with stable identity.

    Geometry is never mutated in place: every edit or cascade produces a new
    Feature via with_geometry(), keeping feature_id and sequence.

    Attributes:
        feature_id: Opaque id, stable across edits (e.g. "fallow-area-000004")
        category: Owning category
        geometry: Shapely geometry (Point or Polygon/MultiPolygon)
        status: Lifecycle stamp
        sequence: Session-wide creation counter; defines stable ordering
        revision: Number of geometry replacements since creation
    """

    feature_id: str
    category: Category
    geometry: Any
    status: FeatureStatus = FeatureStatus.CREATED
    sequence: int = 0
    revision: int = 0

    def with_geometry(self, geometry: Any, status: FeatureStatus) -> "Feature":
        """New Feature carrying `geometry`, same identity, next revision."""
        return replace(
            self, geometry=geometry, status=status, revision=self.revision + 1
        )

    def removed(self) -> "Feature":
        """Copy stamped REMOVED, for reporting after deletion."""
        return replace(self, status=FeatureStatus.REMOVED)

    def as_dict(self) -> Dict[str, Any]:
        """Plain dict view (geometry as WKT) for logging and tables."""
        return {
            "feature_id": self.feature_id,
            "category": self.category.value,
            "status": self.status.value,
            "sequence": self.sequence,
            "revision": self.revision,
            "wkt": None if self.geometry is None else self.geometry.wkt,
        }


def make_feature_id(category: Category, sequence: int) -> str:
    """Feature id of the form "<category slug>-<sequence:06d>"."""
    return f"{category.value}-{sequence:06d}"


# ═══════════════════════════════════════════════════════════════════════════
# ⚠️ DOMAIN EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════


class GeometryTypeError(ValueError):
    """Candidate geometry type does not match the category (point vs polygon)."""

    def __init__(self, category: Category, geom_type: Optional[str]):
        self.category = category
        self.geom_type = geom_type
        expected = category.spec.geometry_kind.value
        super().__init__(
            f"{category.display_name} expects a {expected} geometry, got {geom_type}"
        )


class FeatureNotFoundError(LookupError):
    """No feature with the given id exists in the category's layer."""

    def __init__(self, category: Category, feature_id: str):
        self.category = category
        self.feature_id = feature_id
        super().__init__(f"No feature '{feature_id}' in {category.display_name}")
