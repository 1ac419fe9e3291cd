"""
Result values returned by the engine.

All outcomes are frozen dataclasses. Domain rule violations travel inside
these values as a RejectionReason; only infrastructure failures
(KernelFailure) are raised.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .data_models import Category, Feature, RejectionReason


# ═══════════════════════════════════════════════════════════════════════════
# ✅ VALIDATION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ValidationOutcome:
    """Decision of the precedence validator, enriched by the engine on commit.

    Attributes:
        category: Category the candidate was submitted to
        accepted: True when the (possibly clipped) geometry is admissible
        geometry: Accepted geometry, None when rejected
        reason: Rejection reason, None when accepted
        clipped: Accepted geometry differs from the candidate (advisory)
        message: User-facing message
        feature: Committed feature (set by the engine after commit)
        cascade: Cascade result when the commit overrode other features
    """

    category: Category
    accepted: bool
    geometry: Any = None
    reason: Optional[RejectionReason] = None
    clipped: bool = False
    message: str = ""
    feature: Optional[Feature] = None
    cascade: Optional["CascadeResult"] = None

    @classmethod
    def accept(
        cls, category: Category, geometry: Any, clipped: bool = False, message: str = ""
    ) -> "ValidationOutcome":
        return cls(
            category=category,
            accepted=True,
            geometry=geometry,
            clipped=clipped,
            message=message,
        )

    @classmethod
    def reject(
        cls, category: Category, reason: RejectionReason, message: str
    ) -> "ValidationOutcome":
        return cls(category=category, accepted=False, reason=reason, message=message)


# ═══════════════════════════════════════════════════════════════════════════
# 🌊 CASCADE
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class CascadeChange:
    """One feature rewritten by a cascade.

    new_geometry is None when nothing remains and the feature is removed.
    """

    category: Category
    feature_id: str
    new_geometry: Any = None

    @property
    def is_removal(self) -> bool:
        return self.new_geometry is None


@dataclass(frozen=True)
class CascadeResult:
    """Outcome of subtracting a committed geometry from lower-precedence features.

    Failures are feature-local: a KernelFailure on one feature leaves that
    feature untouched (and listed in failed_feature_ids) while every other
    computed change is still applied. This is the only exception to
    all-or-nothing edits.

    Attributes:
        changes: Computed changes in deterministic order
        failed_feature_ids: Features whose subtraction raised KernelFailure
        failures: feature_id -> diagnostic text
    """

    changes: Tuple[CascadeChange, ...] = ()
    failed_feature_ids: Tuple[str, ...] = ()
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def removed_ids(self) -> List[str]:
        return [c.feature_id for c in self.changes if c.is_removal]

    @property
    def clipped_ids(self) -> List[str]:
        return [c.feature_id for c in self.changes if not c.is_removal]

    @property
    def is_partial(self) -> bool:
        return bool(self.failed_feature_ids)


# ═══════════════════════════════════════════════════════════════════════════
# 🗑️ REMOVAL / CLEAR
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class MutationOutcome:
    """Result of remove_feature / clear_category.

    Attributes:
        category: Category the request targeted
        applied: False when the request was refused
        removed: Features removed (stamped REMOVED), across all layers
        reason: Refusal reason when not applied
        message: User-facing message
    """

    category: Category
    applied: bool
    removed: Tuple[Feature, ...] = ()
    reason: Optional[RejectionReason] = None
    message: str = ""

    @property
    def removed_ids(self) -> List[str]:
        return [f.feature_id for f in self.removed]


# ═══════════════════════════════════════════════════════════════════════════
# 🧩 COVERAGE
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class CoverageReport:
    """Read-only coverage audit of the property boundary.

    Attributes:
        boundary_defined: False when no property boundary exists
        fully_covered: Land cover leaves no uncovered remainder
        uncovered_geometry: Residual uncovered geometry, None when fully covered
        uncovered_area_hectares: Area of the residual, 0.0 when fully covered
            (remainders within coverage.tolerance_ha are absorbed)
        boundary_area_hectares: Area of the property boundary
        message: User-facing summary
    """

    boundary_defined: bool
    fully_covered: bool
    uncovered_geometry: Any = None
    uncovered_area_hectares: float = 0.0
    boundary_area_hectares: float = 0.0
    message: str = ""

    @property
    def covered_fraction(self) -> float:
        """Share of the boundary covered by land cover (0-1)."""
        if self.boundary_area_hectares <= 0:
            return 0.0
        covered = self.boundary_area_hectares - self.uncovered_area_hectares
        return max(0.0, min(1.0, covered / self.boundary_area_hectares))
