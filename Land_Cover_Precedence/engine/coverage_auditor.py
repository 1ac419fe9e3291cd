"""
Coverage geometry auditor.

═══════════════════════════════════════════════════════════════════════════════
ARCHITECTURAL OVERVIEW
═══════════════════════════════════════════════════════════════════════════════

Responsibility: Report how much of the property boundary is covered by the
union of all land cover features, and the residual uncovered geometry.

Coverage is advisory: it never blocks an edit and never mutates the session.
Running the audit twice without an intervening edit yields the same report.

For Navigation: Use VS Code outline (Ctrl+Shift+O)

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
from typing import Any, List, Optional

from Land_Cover_Precedence.config_types import CoverageConfig
from Land_Cover_Precedence.kernel import GeometryKernel
from Land_Cover_Precedence.models import (
    Category,
    CoverageReport,
    land_cover_categories,
)
from Land_Cover_Precedence.store import PropertySession

logger = logging.getLogger("LandCover.Coverage")


class CoverageAuditor:
    """Read-only coverage query over a PropertySession."""

    def __init__(
        self, kernel: GeometryKernel, config: Optional[CoverageConfig] = None
    ) -> None:
        self.kernel = kernel
        self.config = config or CoverageConfig()

    def audit(self, session: PropertySession) -> CoverageReport:
        """
        Compute the uncovered remainder of the property boundary.

        Returns:
            CoverageReport; boundary_defined=False when no boundary exists

        Raises:
            KernelFailure: union/difference/area failed
        """
        boundary = session.boundary_geometry
        boundary_name = Category.PROPERTY_BOUNDARY.display_name
        if boundary is None:
            return CoverageReport(
                boundary_defined=False,
                fully_covered=False,
                message=f"{boundary_name} not defined.",
            )

        boundary_ha = self.kernel.area(boundary, "hectares")
        land_cover: List[Any] = [
            feature.geometry
            for category in land_cover_categories()
            for feature in session.features(category)
        ]

        # === No land cover: the whole boundary is uncovered ===
        if not land_cover:
            return CoverageReport(
                boundary_defined=True,
                fully_covered=False,
                uncovered_geometry=boundary,
                uncovered_area_hectares=boundary_ha,
                boundary_area_hectares=boundary_ha,
                message="No land cover areas found.",
            )

        covered = self.kernel.union(land_cover)
        uncovered = (
            boundary if covered is None else self.kernel.difference(boundary, covered)
        )
        uncovered_ha = 0.0 if uncovered is None else self.kernel.area(uncovered, "hectares")

        if uncovered is None or uncovered_ha <= self.config.tolerance_ha:
            # Remainders within tolerance are reported as no remainder at all
            logger.debug(
                f"Coverage complete for {session.property_id} "
                f"(absorbed {uncovered_ha:.4f} ha)"
            )
            return CoverageReport(
                boundary_defined=True,
                fully_covered=True,
                uncovered_geometry=None,
                uncovered_area_hectares=0.0,
                boundary_area_hectares=boundary_ha,
                message=(
                    f"{boundary_name} is completely covered by land cover layers."
                ),
            )

        logger.info(
            f"🧩 {uncovered_ha:.2f} ha of {boundary_ha:.2f} ha uncovered "
            f"({session.property_id})"
        )
        return CoverageReport(
            boundary_defined=True,
            fully_covered=False,
            uncovered_geometry=uncovered,
            uncovered_area_hectares=uncovered_ha,
            boundary_area_hectares=boundary_ha,
            message=(
                f"{boundary_name} is not completely covered. Approximately "
                f"{uncovered_ha:.2f} hectares remain uncovered."
            ),
        )
