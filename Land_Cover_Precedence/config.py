#!/usr/bin/env python3
"""
Land Cover Precedence - Configuration

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Centralized configuration for the land cover precedence engine.
Single source of truth for geometry kernel behaviour, area units, coverage
tolerance and logging.

Configuration Sections:
1. kernel: Area mode (geodesic/planar), empty-area tolerance, repair policy
2. area: Reporting unit, rounding and unit conversion table
3. coverage: Tolerance for the uncovered remainder
4. logging: Level and optional log file
5. crs: Coordinate reference system of stored geometries

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between sections
"""

import os
from typing import Dict, Any, TypeVar, Callable, Optional

T = TypeVar("T")


def _env_or_default(
    key: str, default: T, type_fn: Optional[Callable[[str], T]] = None
) -> T:
    """
    Get value from environment variable or use default.

    Args:
        key: Environment variable name (e.g., "LCP_AREA_MODE")
        default: Default value if env var not set
        type_fn: Optional type conversion function (e.g., float, int)

    Returns:
        Value from environment (converted) or default

    Example:
        >>> _env_or_default("LCP_EMPTY_AREA_TOLERANCE", 1e-12, float)
        1e-12  # If env var not set
    """
    val = os.getenv(key)
    if val is not None:
        if type_fn is not None:
            return type_fn(val)
        return val  # type: ignore
    return default


def _env_bool(key: str, default: bool) -> bool:
    """
    Get boolean value from environment variable.

    Treats "true", "1", "yes" as True (case-insensitive).
    Any other value or unset returns default.
    """
    val = os.getenv(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


# ═══════════════════════════════════════════════════════════════════════════
# 🔧 ENVIRONMENT VARIABLE OVERRIDES
# ═══════════════════════════════════════════════════════════════════════════
# LCP_AREA_MODE             - "geodesic" or "planar" (default: "geodesic")
# LCP_EMPTY_AREA_TOLERANCE  - float, residues at or below this are empty
# LCP_REPAIR_INVALID        - "true" or "false" (default: "true")
# LCP_LOG_LEVEL             - "DEBUG", "INFO", "WARNING" (default: "INFO")
#
# Example usage:
#   export LCP_AREA_MODE=planar
#   export LCP_LOG_LEVEL=DEBUG
# ═══════════════════════════════════════════════════════════════════════════

# ═══════════════════════════════════════════════════════════════════════════
# ⚙️ MASTER CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════

CONFIG: Dict[str, Any] = {
    # ═══════════════════════════════════════════════════════════════════════
    # 📐 GEOMETRY KERNEL
    # ═══════════════════════════════════════════════════════════════════════
    "kernel": {
        # "geodesic": lon/lat coordinates measured on the ellipsoid (pyproj.Geod)
        # "planar": projected coordinates in metres (shapely planar area)
        "area_mode": _env_or_default("LCP_AREA_MODE", "geodesic"),
        "ellipsoid": "WGS84",
        # Polygonal results with area <= tolerance are treated as empty.
        # Units are squared coordinate units (degrees² in geodesic mode).
        "empty_area_tolerance": _env_or_default(
            "LCP_EMPTY_AREA_TOLERANCE", 1e-12, float
        ),
        # Repair self-intersecting candidates with shapely.make_valid
        "repair_invalid": _env_bool("LCP_REPAIR_INVALID", True),
        # Max characters of WKT kept per input in KernelFailure diagnostics
        "wkt_summary_chars": 120,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📏 AREA REPORTING
    # ═══════════════════════════════════════════════════════════════════════
    "area": {
        "unit": "hectares",
        "decimals": 2,
        # Square metres per unit
        "units": {
            "square-meters": 1.0,
            "hectares": 10000.0,
            "acres": 10000.0 / 2.47105,
        },
        "length_units": {
            "meters": 1.0,
            "kilometers": 1000.0,
        },
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🧩 COVERAGE AUDIT
    # ═══════════════════════════════════════════════════════════════════════
    "coverage": {
        # Uncovered remainders at or below this (hectares) count as covered
        "tolerance_ha": 0.0,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📋 LOGGING
    # ═══════════════════════════════════════════════════════════════════════
    "logging": {
        "level": _env_or_default("LCP_LOG_LEVEL", "INFO"),
        "log_file": None,
    },
    # Stored geometries are lon/lat unless the kernel runs in planar mode
    "crs": "EPSG:4326",
}
