#!/usr/bin/env python3
"""
Precedence Validator

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Decide whether a candidate geometry is admissible for a
category given the committed session state, and if so, its clipped form.

Rules by category:
- Property Area: accepted as-is; replacing an existing boundary is refused
  while any other layer holds features
- every other category: refused until a Property Area exists
- Property Headquarters: single point strictly inside the boundary
- land cover: clipped to the boundary, then every overlapping feature of a
  higher-precedence land cover category is subtracted. Native Vegetation has
  the highest rank so it only clips to the boundary.

The validator is a pure decision function: it never writes to the session.
Committing is the caller's job, immediately after acceptance.

Failure Modes:
- Domain rule violations -> ValidationOutcome.reject(...) (never raised)
- Wrong geometry type for the category -> GeometryTypeError
- Kernel errors -> KernelFailure propagates untouched

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from Land_Cover_Precedence.kernel import GeometryKernel
from Land_Cover_Precedence.models import (
    Category,
    GeometryKind,
    GeometryTypeError,
    RejectionReason,
    ValidationOutcome,
    higher_precedence,
)
from Land_Cover_Precedence.store import PropertySession

logger = logging.getLogger("LandCover.Validator")

POINT_TYPES = ("Point",)
POLYGON_TYPES = ("Polygon", "MultiPolygon")

Rule = Callable[[Category, Any, PropertySession, Optional[str]], ValidationOutcome]


def check_geometry_kind(category: Category, geometry: Any) -> None:
    """Raise GeometryTypeError unless `geometry` suits `category`."""
    geom_type = getattr(geometry, "geom_type", None)
    if category.spec.geometry_kind is GeometryKind.POINT:
        allowed = POINT_TYPES
    else:
        allowed = POLYGON_TYPES
    if geom_type not in allowed:
        raise GeometryTypeError(category, geom_type)


def _join_names(categories: List[Category]) -> str:
    return ", ".join(c.display_name for c in categories)


# ═══════════════════════════════════════════════════════════════════════════
# ⚖️ PRECEDENCE VALIDATOR
# ═══════════════════════════════════════════════════════════════════════════


class PrecedenceValidator:
    """
    Per-category rule dispatch over a GeometryKernel.

    The rule table must cover every Category; adding a category means adding
    one entry here and one in CATEGORY_TABLE.
    """

    def __init__(self, kernel: GeometryKernel) -> None:
        self.kernel = kernel
        self._rules: Dict[Category, Rule] = {
            Category.PROPERTY_BOUNDARY: self._validate_boundary,
            Category.HEADQUARTERS: self._validate_headquarters,
            Category.CONSOLIDATED: self._validate_deferring_land_cover,
            Category.FALLOW: self._validate_deferring_land_cover,
            Category.NATIVE_VEGETATION: self._validate_native_vegetation,
            Category.ANTHROPIZED: self._validate_anthropized,
        }
        missing = [c.name for c in Category if c not in self._rules]
        if missing:
            raise RuntimeError(f"No validation rule for: {', '.join(missing)}")

    def validate(
        self,
        category: Category,
        geometry: Any,
        session: PropertySession,
        editing: Optional[str] = None,
    ) -> ValidationOutcome:
        """
        Validate a candidate geometry against the session.

        Args:
            category: Target category
            geometry: Candidate (already normalised by kernel.prepare)
            session: Committed state (read only)
            editing: Id of the feature being edited, None for a new feature

        Returns:
            ValidationOutcome, accepted or rejected

        Raises:
            GeometryTypeError: point/polygon mismatch for the category
            KernelFailure: a kernel primitive failed
        """
        check_geometry_kind(category, geometry)

        if category is not Category.PROPERTY_BOUNDARY and not session.has_boundary:
            return self._reject(
                category,
                RejectionReason.NO_BOUNDARY,
                f"{Category.PROPERTY_BOUNDARY.display_name} must be drawn first.",
            )

        if category is not Category.PROPERTY_BOUNDARY and not category.spec.allow_multiple:
            others = [
                f for f in session.features(category) if f.feature_id != editing
            ]
            if others:
                return self._reject(
                    category,
                    RejectionReason.SINGLE_INSTANCE_EXISTS,
                    f"Only one {category.display_name} is allowed; "
                    f"edit {others[0].feature_id} instead.",
                )

        return self._rules[category](category, geometry, session, editing)

    def _reject(
        self, category: Category, reason: RejectionReason, message: str
    ) -> ValidationOutcome:
        logger.info(f"🚫 {category.display_name} rejected ({reason.value}): {message}")
        return ValidationOutcome.reject(category, reason, message)

    # ───────────────────────────────────────────────────────────────────────
    # Category rules
    # ───────────────────────────────────────────────────────────────────────

    def _validate_boundary(
        self,
        category: Category,
        geometry: Any,
        session: PropertySession,
        editing: Optional[str],
    ) -> ValidationOutcome:
        if session.has_boundary and session.has_dependents():
            return self._reject(
                category,
                RejectionReason.BOUNDARY_HAS_DEPENDENTS,
                f"The {category.display_name} cannot be replaced while other "
                "layers contain features. Clear them first.",
            )
        return ValidationOutcome.accept(category, geometry)

    def _validate_headquarters(
        self,
        category: Category,
        geometry: Any,
        session: PropertySession,
        editing: Optional[str],
    ) -> ValidationOutcome:
        if not self.kernel.contains(session.boundary_geometry, geometry):
            return self._reject(
                category,
                RejectionReason.OUTSIDE_BOUNDARY,
                f"{category.display_name} must be located inside the "
                f"{Category.PROPERTY_BOUNDARY.display_name}.",
            )
        return ValidationOutcome.accept(category, geometry)

    def _validate_deferring_land_cover(
        self,
        category: Category,
        geometry: Any,
        session: PropertySession,
        editing: Optional[str],
    ) -> ValidationOutcome:
        """Consolidated / Fallow: clip to boundary, then yield to higher ranks."""
        return self._resolve_land_cover(category, geometry, session)

    def _validate_native_vegetation(
        self,
        category: Category,
        geometry: Any,
        session: PropertySession,
        editing: Optional[str],
    ) -> ValidationOutcome:
        # Highest land cover rank: nothing to yield to, boundary clip only
        return self._resolve_land_cover(category, geometry, session)

    def _validate_anthropized(
        self,
        category: Category,
        geometry: Any,
        session: PropertySession,
        editing: Optional[str],
    ) -> ValidationOutcome:
        """Anthropized: clipped to the boundary, never rejected for partial overlap.

        Still yields to Native Vegetation like the other land cover rules, so a
        candidate lying entirely under native vegetation is rejected as fully
        consumed.
        """
        return self._resolve_land_cover(category, geometry, session)

    # ───────────────────────────────────────────────────────────────────────
    # Land cover resolution
    # ───────────────────────────────────────────────────────────────────────

    def _resolve_land_cover(
        self, category: Category, geometry: Any, session: PropertySession
    ) -> ValidationOutcome:
        boundary_name = Category.PROPERTY_BOUNDARY.display_name

        # === STEP 1: Clip to the property boundary ===
        inside = self.kernel.clip(geometry, session.boundary_geometry)
        if inside is None:
            return self._reject(
                category,
                RejectionReason.OUTSIDE_BOUNDARY,
                f"{category.display_name} must be within {boundary_name}.",
            )

        messages: List[str] = []
        clipped_to_boundary = not self.kernel.equals(inside, geometry)
        if clipped_to_boundary:
            messages.append(
                f"{category.display_name} has been clipped to the "
                f"{boundary_name} boundaries."
            )
        else:
            inside = geometry

        # === STEP 2: Yield to higher-precedence land cover ===
        result, overlapped = self._subtract_higher_precedence(
            category, inside, session
        )
        if result is None:
            return self._reject(
                category,
                RejectionReason.FULLY_CONSUMED_BY_HIGHER_PRECEDENCE,
                f"{category.display_name} would be completely contained by "
                f"{_join_names(overlapped)} areas.",
            )
        if overlapped:
            messages.append(
                f"{category.display_name} overlaps with {_join_names(overlapped)}. "
                "It has been automatically clipped."
            )

        clipped = clipped_to_boundary or bool(overlapped)
        if clipped:
            logger.info(f"✂️ {' '.join(messages)}")
        return ValidationOutcome.accept(
            category, result, clipped=clipped, message=" ".join(messages)
        )

    def _subtract_higher_precedence(
        self, category: Category, geometry: Any, session: PropertySession
    ) -> Tuple[Optional[Any], List[Category]]:
        """Subtract overlapping higher-rank features, in stable order.

        Returns:
            (remaining geometry or None, categories that overlapped)
        """
        result = geometry
        overlapped: List[Category] = []
        for superior in higher_precedence(category):
            for feature in session.features(superior):
                if not self.kernel.overlaps(result, feature.geometry):
                    continue
                if superior not in overlapped:
                    overlapped.append(superior)
                result = self.kernel.difference(result, feature.geometry)
                if result is None:
                    return None, overlapped
        return result, overlapped
