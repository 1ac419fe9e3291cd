#!/usr/bin/env python3
"""
Land Cover Engine

═══════════════════════════════════════════════════════════════════════════════
ARCHITECTURAL OVERVIEW
═══════════════════════════════════════════════════════════════════════════════

Responsibility: The operations exposed to the surrounding application.
Wires the validator, cascade propagator, coverage auditor and area aggregator
around one PropertySession.

Control Flow (submit / edit):
1. Geometry type check and kernel normalisation of the candidate
2. PrecedenceValidator decides (pure, no session writes)
3. On acceptance the Layer Store is updated immediately
4. If the committed category outranks other land cover categories, the
   CascadePropagator rewrites the overlapped lower-precedence features
5. Touched layers have their area cache invalidated; totals are recomputed
   on the next get_area_totals()
Coverage is only computed on demand (audit_coverage).

Concurrency Model:
- One edit in flight per session: every public call holds a per-engine lock
  for its full duration, cascade included. Separate engines (sessions) are
  independent and may run in parallel threads.
- No cancellation: once started an edit runs to completion or fails.

Atomicity:
- Rejections and KernelFailure during validation leave the session untouched.
- Cascade failures are feature-local (see CascadeResult); this is the only
  partial outcome an edit can have.

For Navigation: Use VS Code outline (Ctrl+Shift+O)

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import threading
from dataclasses import replace
from typing import Any, Dict, List, Optional

import geopandas as gpd
import pandas as pd

from Land_Cover_Precedence.config import CONFIG
from Land_Cover_Precedence.config_types import AppConfig
from Land_Cover_Precedence.engine.area_aggregator import AreaAggregator
from Land_Cover_Precedence.engine.cascade_propagator import CascadePropagator
from Land_Cover_Precedence.engine.coverage_auditor import CoverageAuditor
from Land_Cover_Precedence.engine.precedence_validator import (
    PrecedenceValidator,
    check_geometry_kind,
)
from Land_Cover_Precedence.kernel import GeometryKernel, ShapelyKernel
from Land_Cover_Precedence.models import (
    Category,
    CoverageReport,
    Feature,
    FeatureStatus,
    MutationOutcome,
    RejectionReason,
    ValidationOutcome,
    lower_precedence,
)
from Land_Cover_Precedence.store import PropertySession, check_invariants

logger = logging.getLogger("LandCover.Engine")


class LandCoverEngine:
    """
    Layer precedence and conflict-resolution engine for one property.

    Attributes:
        config: Application configuration
        kernel: Geometry kernel used by every component
        session: The PropertySession being edited
    """

    def __init__(
        self,
        session: Optional[PropertySession] = None,
        kernel: Optional[GeometryKernel] = None,
        config: Optional[AppConfig] = None,
    ) -> None:
        self.config = config or AppConfig.from_dict(CONFIG)
        self.config.validate()
        self.kernel = kernel or ShapelyKernel(self.config.kernel, self.config.area)
        self.session = session or PropertySession()

        self.validator = PrecedenceValidator(self.kernel)
        self.cascade = CascadePropagator(self.kernel)
        self.coverage = CoverageAuditor(self.kernel, self.config.coverage)
        self.areas = AreaAggregator(self.kernel, self.config.area)

        self._lock = threading.Lock()

        logger.debug(
            f"LandCoverEngine initialized for {self.session.property_id} "
            f"({self.config.kernel.area_mode})"
        )

    # ═══════════════════════════════════════════════════════════════════════
    # ✏️ EDITS
    # ═══════════════════════════════════════════════════════════════════════

    def submit_feature(self, category: Category, geometry: Any) -> ValidationOutcome:
        """
        Validate and commit a new feature.

        Args:
            category: Target category
            geometry: Shapely Point (headquarters) or Polygon/MultiPolygon

        Returns:
            ValidationOutcome; when accepted, `feature` is the committed
            feature and `cascade` lists the lower-precedence features rewritten

        Raises:
            GeometryTypeError: geometry type does not suit the category
            KernelFailure: kernel error before commit (session untouched)
        """
        with self._lock:
            return self._validate_and_commit(category, geometry, editing=None)

    def edit_feature(
        self, category: Category, feature_id: str, geometry: Any
    ) -> ValidationOutcome:
        """
        Replace a feature's geometry, re-validated as if it were new.

        The feature keeps its id; its revision increments. A rejected edit
        leaves the existing feature untouched.

        Raises:
            FeatureNotFoundError: unknown feature id
            GeometryTypeError: geometry type does not suit the category
            KernelFailure: kernel error before commit (session untouched)
        """
        with self._lock:
            self.session.get_feature(category, feature_id)
            return self._validate_and_commit(category, geometry, editing=feature_id)

    def _validate_and_commit(
        self, category: Category, geometry: Any, editing: Optional[str]
    ) -> ValidationOutcome:
        check_geometry_kind(category, geometry)
        candidate = self.kernel.prepare(geometry, polygonal=not category.is_point)

        outcome = self.validator.validate(category, candidate, self.session, editing)
        if not outcome.accepted:
            return outcome

        # A second boundary replaces the first (validator ensured no dependents)
        if category is Category.PROPERTY_BOUNDARY and editing is None:
            existing = self.session.boundary_feature
            if existing is not None:
                editing = existing.feature_id

        status = FeatureStatus.CLIPPED if outcome.clipped else FeatureStatus.CREATED
        if editing is None:
            feature = self.session.add_feature(category, outcome.geometry, status)
        else:
            feature = self.session.replace_geometry(
                category, editing, outcome.geometry, status
            )
        logger.info(
            f"✅ {category.display_name} committed as {feature.feature_id} "
            f"({status.value}, revision {feature.revision})"
        )

        cascade = None
        if lower_precedence(category):
            cascade = self.cascade.propagate(feature.geometry, self.session, category)
            self.cascade.apply(cascade, self.session)
            if cascade.is_partial:
                logger.warning(
                    f"⚠️ Partial cascade from {feature.feature_id}: "
                    f"failed for {', '.join(cascade.failed_feature_ids)}"
                )

        return replace(outcome, feature=feature, cascade=cascade)

    # ═══════════════════════════════════════════════════════════════════════
    # 🗑️ REMOVAL
    # ═══════════════════════════════════════════════════════════════════════

    def remove_feature(
        self, category: Category, feature_id: str, confirmed: bool = False
    ) -> MutationOutcome:
        """
        Remove one feature.

        Only the property boundary triggers dependent removal: removing it
        while other layers hold features needs `confirmed=True` (the caller
        has obtained user confirmation) and then empties every layer.

        Raises:
            FeatureNotFoundError: unknown feature id
        """
        with self._lock:
            self.session.get_feature(category, feature_id)
            if category is Category.PROPERTY_BOUNDARY:
                return self._remove_boundary(category, confirmed, "Deleting")

            removed = self.session.remove_feature(category, feature_id)
            logger.info(f"🗑️ Removed {feature_id}")
            return MutationOutcome(
                category=category,
                applied=True,
                removed=(removed,),
                message=f"{category.display_name} feature removed.",
            )

    def clear_category(
        self, category: Category, confirmed: bool = False
    ) -> MutationOutcome:
        """Remove every feature of a category (boundary: every layer, confirmed)."""
        with self._lock:
            if category is Category.PROPERTY_BOUNDARY:
                return self._remove_boundary(category, confirmed, "Clearing")

            removed = self.session.clear_layer(category)
            logger.info(f"🗑️ Cleared {category.display_name} ({len(removed)} features)")
            return MutationOutcome(
                category=category,
                applied=True,
                removed=tuple(removed),
                message=f"{category.display_name} cleared.",
            )

    def _remove_boundary(
        self, category: Category, confirmed: bool, verb: str
    ) -> MutationOutcome:
        if self.session.has_dependents() and not confirmed:
            message = (
                f"{verb} the {category.display_name} will remove all other layers. "
                "Confirmation is required."
            )
            logger.info(f"🚫 {message}")
            return MutationOutcome(
                category=category,
                applied=False,
                reason=RejectionReason.BOUNDARY_HAS_DEPENDENTS,
                message=message,
            )

        removed = self.session.clear_all()
        logger.info(f"🗑️ {category.display_name} removed with {len(removed)} features")
        return MutationOutcome(
            category=category,
            applied=True,
            removed=tuple(removed),
            message=f"{category.display_name} and all other layers removed.",
        )

    # ═══════════════════════════════════════════════════════════════════════
    # 👁️ VISIBILITY
    # ═══════════════════════════════════════════════════════════════════════

    def set_category_visibility(self, category: Category, visible: bool) -> bool:
        """Show/hide a category; hiding Anthropized Area is refused (False)."""
        with self._lock:
            applied = self.session.set_visible(category, visible)
            if not applied:
                logger.warning(f"⚠️ {category.display_name} must remain visible")
            return applied

    # ═══════════════════════════════════════════════════════════════════════
    # 📊 QUERIES
    # ═══════════════════════════════════════════════════════════════════════

    def features(self, category: Category) -> List[Feature]:
        with self._lock:
            return self.session.features(category)

    def audit_coverage(self) -> CoverageReport:
        with self._lock:
            return self.coverage.audit(self.session)

    def get_area_totals(self, unit: Optional[str] = None) -> Dict[Category, float]:
        """Per-category area (default hectares), inside the boundary only."""
        with self._lock:
            return self.areas.totals(self.session, unit)

    def area_summary(self) -> pd.DataFrame:
        with self._lock:
            return self.areas.summary_frame(self.session)

    def to_geodataframe(self) -> gpd.GeoDataFrame:
        with self._lock:
            return self.session.to_geodataframe(crs=self.config.crs)

    def check_invariants(self) -> List[str]:
        with self._lock:
            return check_invariants(self.session, self.kernel)
