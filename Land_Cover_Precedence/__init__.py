"""
Land Cover Precedence

Layer precedence and conflict-resolution engine for digitising the land use
of a rural property: validates every edit against the committed layers,
clips it where required, lets Native Vegetation override lower-precedence
land cover, and reports coverage and per-category area totals.
"""

from Land_Cover_Precedence.config import CONFIG
from Land_Cover_Precedence.config_types import AppConfig
from Land_Cover_Precedence.engine import LandCoverEngine
from Land_Cover_Precedence.logging_setup import setup_logging
from Land_Cover_Precedence.kernel import KernelFailure, ShapelyKernel
from Land_Cover_Precedence.models import Category, RejectionReason
from Land_Cover_Precedence.store import PropertySession

__all__ = [
    "CONFIG",
    "AppConfig",
    "Category",
    "KernelFailure",
    "LandCoverEngine",
    "PropertySession",
    "RejectionReason",
    "ShapelyKernel",
    "setup_logging",
]
