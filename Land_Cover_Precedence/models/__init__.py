"""Data models package for categories, features and engine outcomes."""

from .data_models import (
    CATEGORY_TABLE,
    Category,
    CategorySpec,
    Feature,
    FeatureNotFoundError,
    FeatureStatus,
    GeometryKind,
    GeometryTypeError,
    RejectionReason,
    # Rank table helpers
    categories_in_order,
    higher_precedence,
    land_cover_categories,
    lower_precedence,
    make_feature_id,
)

from .outcomes import (
    CascadeChange,
    CascadeResult,
    CoverageReport,
    MutationOutcome,
    ValidationOutcome,
)

__all__ = [
    # Category models
    "CATEGORY_TABLE",
    "Category",
    "CategorySpec",
    "GeometryKind",
    # Feature models
    "Feature",
    "FeatureStatus",
    "RejectionReason",
    "make_feature_id",
    # Rank table helpers
    "categories_in_order",
    "higher_precedence",
    "land_cover_categories",
    "lower_precedence",
    # Exceptions
    "FeatureNotFoundError",
    "GeometryTypeError",
    # Outcomes
    "CascadeChange",
    "CascadeResult",
    "CoverageReport",
    "MutationOutcome",
    "ValidationOutcome",
]
