"""Engine package: validation, cascade, coverage and area components."""

from .precedence_validator import PrecedenceValidator, check_geometry_kind
from .cascade_propagator import CascadePropagator
from .coverage_auditor import CoverageAuditor
from .area_aggregator import AreaAggregator
from .land_cover_engine import LandCoverEngine

__all__ = [
    "AreaAggregator",
    "CascadePropagator",
    "CoverageAuditor",
    "LandCoverEngine",
    "PrecedenceValidator",
    "check_geometry_kind",
]
