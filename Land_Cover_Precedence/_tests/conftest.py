"""
Shared fixtures for the land cover precedence tests.

All engine fixtures run the kernel in planar mode so coordinates are metres
and the expected areas can be written down by hand.
"""

import pytest
from shapely.geometry import box

from Land_Cover_Precedence.config_types import AppConfig
from Land_Cover_Precedence.engine import LandCoverEngine
from Land_Cover_Precedence.kernel import KernelFailure, ShapelyKernel
from Land_Cover_Precedence.models import Category


# ============================================================================
# KERNEL STUBS
# ============================================================================


class PoisonedKernel(ShapelyKernel):
    """Planar kernel whose difference() fails for one specific geometry."""

    def __init__(self, poisoned, config: AppConfig):
        super().__init__(config.kernel, config.area)
        self.poisoned = poisoned

    def difference(self, a, b):
        if a.equals(self.poisoned):
            raise KernelFailure("difference", [a.wkt, b.wkt], "simulated GEOS error")
        return super().difference(a, b)


class BrokenClipKernel(ShapelyKernel):
    """Planar kernel whose clip() always fails."""

    def clip(self, geometry, boundary):
        raise KernelFailure("clip", [geometry.wkt], "simulated timeout")


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def planar_config():
    """AppConfig with the kernel in planar (metre) mode."""
    return AppConfig.planar()


@pytest.fixture
def kernel(planar_config):
    return ShapelyKernel(planar_config.kernel, planar_config.area)


@pytest.fixture
def engine(planar_config):
    """Engine with an empty session."""
    return LandCoverEngine(config=planar_config)


@pytest.fixture
def unit_square():
    return box(0, 0, 1, 1)


@pytest.fixture
def bounded_engine(engine, unit_square):
    """Engine whose session holds the unit-square property boundary."""
    outcome = engine.submit_feature(Category.PROPERTY_BOUNDARY, unit_square)
    assert outcome.accepted
    return engine


@pytest.fixture
def hectare_engine(engine):
    """Engine whose boundary is a 100 m x 100 m square (exactly 1 ha)."""
    outcome = engine.submit_feature(Category.PROPERTY_BOUNDARY, box(0, 0, 100, 100))
    assert outcome.accepted
    return engine


@pytest.fixture
def poisoned_engine_factory(planar_config):
    """Build an engine whose kernel fails to subtract from `poisoned`."""

    def _make(poisoned):
        return LandCoverEngine(
            kernel=PoisonedKernel(poisoned, planar_config), config=planar_config
        )

    return _make


@pytest.fixture
def broken_clip_engine(planar_config, unit_square):
    """Bounded engine whose kernel fails on every clip."""
    broken = LandCoverEngine(
        kernel=BrokenClipKernel(planar_config.kernel, planar_config.area),
        config=planar_config,
    )
    broken.submit_feature(Category.PROPERTY_BOUNDARY, unit_square)
    return broken
