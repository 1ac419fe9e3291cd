"""
Session consistency checker.

Returns human-readable violations of the invariants that must hold after
every committed edit. An empty list means the session is consistent.

Checked:
- Single boundary; without a boundary every other layer is empty
- Headquarters inside the boundary
- Land cover never overlaps a higher-precedence land cover category
- Land cover lies within the boundary
- Never-hidden categories are visible
- No stored feature has an empty geometry

Removal of the boundary cascading to every layer is an engine behaviour;
its observable result is the "without a boundary" check above.
"""

import logging
from typing import List

from Land_Cover_Precedence.kernel import GeometryKernel
from Land_Cover_Precedence.models import (
    Category,
    categories_in_order,
    higher_precedence,
    land_cover_categories,
)
from Land_Cover_Precedence.store.layer_store import PropertySession

logger = logging.getLogger("LandCover.Store")


def check_invariants(session: PropertySession, kernel: GeometryKernel) -> List[str]:
    """Check all session invariants.

    Args:
        session: Session to inspect (not modified)
        kernel: Kernel used for the geometric checks

    Returns:
        List of violation messages (empty when consistent)

    Raises:
        KernelFailure: a geometric predicate failed
    """
    violations: List[str] = []

    boundary_layer = session.layer(Category.PROPERTY_BOUNDARY)
    if len(boundary_layer) > 1:
        violations.append(
            f"{len(boundary_layer)} property boundary features exist (max 1)"
        )

    boundary = session.boundary_geometry
    if boundary is None:
        for feature in session.dependents():
            violations.append(
                f"{feature.feature_id} exists without a property boundary"
            )
        return violations

    for category in categories_in_order():
        for feature in session.features(category):
            if kernel.is_empty(feature.geometry):
                violations.append(f"{feature.feature_id} has an empty geometry")

    for hq in session.features(Category.HEADQUARTERS):
        if not kernel.contains(boundary, hq.geometry):
            violations.append(f"{hq.feature_id} lies outside the property boundary")

    for category in land_cover_categories():
        superiors = [
            f for c in higher_precedence(category) for f in session.features(c)
        ]
        for feature in session.features(category):
            if kernel.is_empty(feature.geometry):
                continue
            if kernel.difference(feature.geometry, boundary) is not None:
                violations.append(
                    f"{feature.feature_id} extends beyond the property boundary"
                )
            for superior in superiors:
                if kernel.overlaps(feature.geometry, superior.geometry):
                    violations.append(
                        f"{feature.feature_id} overlaps higher-precedence "
                        f"{superior.feature_id}"
                    )

    for category in categories_in_order():
        if not category.spec.can_hide and not session.layer(category).visible:
            violations.append(f"{category.display_name} is hidden")

    if violations:
        logger.debug(f"Invariant check found {len(violations)} violation(s)")
    return violations
