"""
═══════════════════════════════════════════════════════════════════════════════
📋 UNIFIED CONFIGURATION TYPES
═══════════════════════════════════════════════════════════════════════════════

ARCHITECTURAL OVERVIEW
----------------------
Responsibility: Define all configuration dataclasses for the land cover
precedence engine. Replaces raw CONFIG dictionary access with typed,
validated config objects.

Usage:
    from Land_Cover_Precedence.config import CONFIG
    from Land_Cover_Precedence.config_types import AppConfig

    # Create once at application startup
    app_config = AppConfig.from_dict(CONFIG)
    app_config.validate()

For Navigation: Use VS Code outline (Ctrl+Shift+O)

NAVIGATION GUIDE
----------------
# ═════ 1. KERNEL CONFIGURATION
# ═════ 2. AREA CONFIGURATION
# ═════ 3. COVERAGE CONFIGURATION
# ═════ 4. LOGGING CONFIGURATION
# ═════ 5. APP CONFIG (MASTER FACADE)

═══════════════════════════════════════════════════════════════════════════════
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional


AREA_MODES = ("geodesic", "planar")


class ConfigurationError(ValueError):
    """Raised when configuration values are missing or inconsistent."""


# ═══════════════════════════════════════════════════════════════════════════════
# 📐 1. KERNEL CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class KernelConfig:
    """
    Geometry kernel settings.

    Attributes:
        area_mode: "geodesic" (lon/lat on the ellipsoid) or "planar" (metres).
        ellipsoid: pyproj ellipsoid name used for geodesic measurement.
        empty_area_tolerance: Polygonal results at or below this area are empty.
        repair_invalid: Repair invalid candidates with make_valid instead of failing.
        wkt_summary_chars: WKT characters kept per input in failure diagnostics.
    """

    area_mode: str = "geodesic"
    ellipsoid: str = "WGS84"
    empty_area_tolerance: float = 1e-12
    repair_invalid: bool = True
    wkt_summary_chars: int = 120

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "KernelConfig":
        """Create KernelConfig from CONFIG['kernel'] dictionary."""
        return cls(
            area_mode=d.get("area_mode", "geodesic"),
            ellipsoid=d.get("ellipsoid", "WGS84"),
            empty_area_tolerance=float(d.get("empty_area_tolerance", 1e-12)),
            repair_invalid=d.get("repair_invalid", True),
            wkt_summary_chars=int(d.get("wkt_summary_chars", 120)),
        )

    @property
    def is_geodesic(self) -> bool:
        return self.area_mode == "geodesic"


# ═══════════════════════════════════════════════════════════════════════════════
# 📏 2. AREA CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


def _default_area_units() -> Dict[str, float]:
    return {
        "square-meters": 1.0,
        "hectares": 10000.0,
        "acres": 10000.0 / 2.47105,
    }


def _default_length_units() -> Dict[str, float]:
    return {"meters": 1.0, "kilometers": 1000.0}


@dataclass(frozen=True)
class AreaConfig:
    """
    Area reporting settings.

    Attributes:
        unit: Unit used for area totals (key of `units`).
        decimals: Rounding applied to reported totals.
        units: Square metres per area unit.
        length_units: Metres per length unit.
    """

    unit: str = "hectares"
    decimals: int = 2
    units: Dict[str, float] = field(default_factory=_default_area_units)
    length_units: Dict[str, float] = field(default_factory=_default_length_units)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AreaConfig":
        """Create AreaConfig from CONFIG['area'] dictionary."""
        return cls(
            unit=d.get("unit", "hectares"),
            decimals=int(d.get("decimals", 2)),
            units=dict(d.get("units", _default_area_units())),
            length_units=dict(d.get("length_units", _default_length_units())),
        )

    def square_meters_per(self, unit: str) -> float:
        """Square metres in one `unit`; raises ConfigurationError if unknown."""
        try:
            return self.units[unit]
        except KeyError:
            raise ConfigurationError(
                f"Unknown area unit '{unit}' (known: {sorted(self.units)})"
            ) from None

    def meters_per(self, unit: str) -> float:
        """Metres in one length `unit`; raises ConfigurationError if unknown."""
        try:
            return self.length_units[unit]
        except KeyError:
            raise ConfigurationError(
                f"Unknown length unit '{unit}' (known: {sorted(self.length_units)})"
            ) from None


# ═══════════════════════════════════════════════════════════════════════════════
# 🧩 3. COVERAGE CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class CoverageConfig:
    """Coverage audit settings."""

    tolerance_ha: float = 0.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CoverageConfig":
        """Create CoverageConfig from CONFIG['coverage'] dictionary."""
        return cls(tolerance_ha=float(d.get("tolerance_ha", 0.0)))


# ═══════════════════════════════════════════════════════════════════════════════
# 📋 4. LOGGING CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class LoggingConfig:
    """Logging settings consumed by setup_logging()."""

    level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LoggingConfig":
        """Create LoggingConfig from CONFIG['logging'] dictionary."""
        return cls(
            level=str(d.get("level", "INFO")).upper(),
            log_file=d.get("log_file"),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 🏛️ 5. APP CONFIG (MASTER FACADE)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class AppConfig:
    """
    Master configuration facade wrapping all settings.

    Attributes:
        kernel: Geometry kernel settings.
        area: Area reporting settings.
        coverage: Coverage audit settings.
        logging: Logging settings.
        crs: CRS of stored geometries (used when exporting GeoDataFrames).
    """

    kernel: KernelConfig = field(default_factory=KernelConfig)
    area: AreaConfig = field(default_factory=AreaConfig)
    coverage: CoverageConfig = field(default_factory=CoverageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    crs: str = "EPSG:4326"

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "AppConfig":
        """
        Create AppConfig from the CONFIG dictionary.

        Args:
            config_dict: The CONFIG dictionary from config.py (or a partial
                override; missing sections fall back to defaults).

        Returns:
            AppConfig instance with all settings populated.

        Example:
            from Land_Cover_Precedence.config import CONFIG
            app_config = AppConfig.from_dict(CONFIG)
        """
        return cls(
            kernel=KernelConfig.from_dict(config_dict.get("kernel", {})),
            area=AreaConfig.from_dict(config_dict.get("area", {})),
            coverage=CoverageConfig.from_dict(config_dict.get("coverage", {})),
            logging=LoggingConfig.from_dict(config_dict.get("logging", {})),
            crs=config_dict.get("crs", "EPSG:4326"),
        )

    @classmethod
    def planar(cls, **overrides: Any) -> "AppConfig":
        """Defaults with the kernel in planar mode (projected metres)."""
        kernel = KernelConfig(area_mode="planar", **overrides)
        return cls(kernel=kernel, crs="EPSG:3857")

    def validate(self) -> None:
        """
        Validate that all configuration values are usable.

        Raises ConfigurationError listing every problem found.
        """
        errors: List[str] = []

        if self.kernel.area_mode not in AREA_MODES:
            errors.append(
                f"kernel.area_mode must be one of {AREA_MODES}, "
                f"got '{self.kernel.area_mode}'"
            )
        if self.kernel.empty_area_tolerance < 0:
            errors.append(
                "kernel.empty_area_tolerance must be >= 0, "
                f"got {self.kernel.empty_area_tolerance}"
            )
        if self.area.unit not in self.area.units:
            errors.append(f"area.unit '{self.area.unit}' missing from area.units")
        if any(v <= 0 for v in self.area.units.values()):
            errors.append("area.units conversion factors must be positive")
        if self.area.decimals < 0:
            errors.append(f"area.decimals must be >= 0, got {self.area.decimals}")
        if self.coverage.tolerance_ha < 0:
            errors.append(
                f"coverage.tolerance_ha must be >= 0, got {self.coverage.tolerance_ha}"
            )

        if errors:
            error_msg = "Configuration validation failed:\n" + "\n".join(
                f"  - {e}" for e in errors
            )
            raise ConfigurationError(error_msg)
