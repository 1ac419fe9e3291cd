"""
Cascade Propagator

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: After a higher-precedence land cover feature is committed,
subtract it from every overlapping feature of the lower-precedence land cover
categories, removing features that vanish.

Ordering:
- Categories in the fixed CATEGORY_TABLE order (Consolidated, Fallow,
  Anthropized for a Native Vegetation commit)
- Features within a category by creation sequence
Given identical inputs the change list is therefore identical across runs.

Failure Policy (the one exception to all-or-nothing edits):
- A KernelFailure while processing one feature skips that feature only.
  The failure is recorded in CascadeResult.failed_feature_ids / failures and
  every other computed change is still applied. The skipped feature keeps its
  old geometry and may still overlap the committed feature.

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
from typing import Any, Dict, List

from Land_Cover_Precedence.kernel import GeometryKernel, KernelFailure
from Land_Cover_Precedence.models import (
    CascadeChange,
    CascadeResult,
    Category,
    Feature,
    FeatureStatus,
    lower_precedence,
)
from Land_Cover_Precedence.store import PropertySession

logger = logging.getLogger("LandCover.Cascade")


class CascadePropagator:
    """Computes and applies cascade changes for a committed geometry."""

    def __init__(self, kernel: GeometryKernel) -> None:
        self.kernel = kernel

    def propagate(
        self,
        geometry: Any,
        session: PropertySession,
        source: Category = Category.NATIVE_VEGETATION,
    ) -> CascadeResult:
        """
        Compute the changes a committed `source` geometry forces on
        lower-precedence features. Does not modify the session.

        Args:
            geometry: Geometry of the committed higher-precedence feature
            session: Session to read lower-precedence features from
            source: Category of the committed feature

        Returns:
            CascadeResult with changes in deterministic order and the ids of
            features whose subtraction failed
        """
        changes: List[CascadeChange] = []
        failed: List[str] = []
        failures: Dict[str, str] = {}

        for category in lower_precedence(source):
            for feature in session.features(category):
                try:
                    if not self.kernel.overlaps(feature.geometry, geometry):
                        continue
                    remaining = self.kernel.difference(feature.geometry, geometry)
                except KernelFailure as e:
                    logger.warning(
                        f"⚠️ Cascade skipped {feature.feature_id}: {e.diagnostic}"
                    )
                    failed.append(feature.feature_id)
                    failures[feature.feature_id] = str(e)
                    continue
                changes.append(CascadeChange(category, feature.feature_id, remaining))

        return CascadeResult(
            changes=tuple(changes),
            failed_feature_ids=tuple(failed),
            failures=failures,
        )

    def apply(self, result: CascadeResult, session: PropertySession) -> List[Feature]:
        """
        Commit computed changes to the session.

        Returns:
            Affected features: clipped ones with their new geometry, removed
            ones stamped REMOVED
        """
        affected: List[Feature] = []
        for change in result.changes:
            if change.is_removal:
                affected.append(
                    session.remove_feature(change.category, change.feature_id)
                )
            else:
                affected.append(
                    session.replace_geometry(
                        change.category,
                        change.feature_id,
                        change.new_geometry,
                        FeatureStatus.CLIPPED,
                    )
                )

        if result.changes or result.failed_feature_ids:
            logger.info(
                f"🌊 Cascade: {len(result.clipped_ids)} clipped, "
                f"{len(result.removed_ids)} removed, "
                f"{len(result.failed_feature_ids)} failed"
            )
        return affected
