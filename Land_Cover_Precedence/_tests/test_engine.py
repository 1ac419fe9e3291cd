#!/usr/bin/env python3
"""
Land Cover Engine tests.

Tests:
1. Boundary removal needs confirmation and then clears every layer
2. Single-feature removal and category clearing
3. Edit semantics (identity kept, rejected edits leave the feature untouched)
4. Visibility rule for Anthropized Area
5. Kernel failure before commit leaves the session untouched
6. Serialised edits from several threads keep the session consistent
7. Export and summary queries

Run with: python -m pytest Land_Cover_Precedence/_tests/test_engine.py -v
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from shapely.geometry import Point, Polygon, box

from Land_Cover_Precedence.config_types import AppConfig, ConfigurationError, KernelConfig
from Land_Cover_Precedence.engine import LandCoverEngine
from Land_Cover_Precedence.kernel import KernelFailure
from Land_Cover_Precedence.models import (
    Category,
    FeatureNotFoundError,
    FeatureStatus,
    RejectionReason,
)


# ═══════════════════════════════════════════════════════════════════════════
# 🗑️ REMOVAL
# ═══════════════════════════════════════════════════════════════════════════


class TestBoundaryRemoval:
    """Removing the boundary removes everything, but only when confirmed."""

    def test_unconfirmed_removal_refused(self, bounded_engine, unit_square):
        bounded_engine.submit_feature(Category.CONSOLIDATED, box(0, 0, 0.5, 0.5))
        boundary = bounded_engine.session.boundary_feature

        outcome = bounded_engine.remove_feature(
            Category.PROPERTY_BOUNDARY, boundary.feature_id
        )

        assert not outcome.applied
        assert outcome.reason is RejectionReason.BOUNDARY_HAS_DEPENDENTS
        assert "Confirmation is required" in outcome.message
        assert bounded_engine.session.feature_count() == 2
        assert bounded_engine.session.boundary_geometry.equals(unit_square)

    def test_confirmed_removal_clears_everything(self, bounded_engine):
        bounded_engine.submit_feature(Category.HEADQUARTERS, Point(0.5, 0.5))
        bounded_engine.submit_feature(Category.CONSOLIDATED, box(0, 0, 0.5, 0.5))
        boundary = bounded_engine.session.boundary_feature

        outcome = bounded_engine.remove_feature(
            Category.PROPERTY_BOUNDARY, boundary.feature_id, confirmed=True
        )

        assert outcome.applied
        assert len(outcome.removed) == 3
        assert all(f.status is FeatureStatus.REMOVED for f in outcome.removed)
        assert bounded_engine.session.feature_count() == 0
        assert bounded_engine.check_invariants() == []

    def test_lone_boundary_removed_without_confirmation(self, bounded_engine):
        boundary = bounded_engine.session.boundary_feature

        outcome = bounded_engine.remove_feature(
            Category.PROPERTY_BOUNDARY, boundary.feature_id
        )

        assert outcome.applied
        assert outcome.removed_ids == [boundary.feature_id]
        assert not bounded_engine.session.has_boundary

    def test_clear_boundary_category_needs_confirmation(self, bounded_engine):
        bounded_engine.submit_feature(Category.FALLOW, box(0, 0, 0.5, 0.5))

        refused = bounded_engine.clear_category(Category.PROPERTY_BOUNDARY)
        applied = bounded_engine.clear_category(
            Category.PROPERTY_BOUNDARY, confirmed=True
        )

        assert refused.reason is RejectionReason.BOUNDARY_HAS_DEPENDENTS
        assert applied.applied
        assert bounded_engine.session.feature_count() == 0


class TestFeatureRemoval:
    """Other categories remove only what was asked."""

    def test_remove_single_feature(self, bounded_engine):
        keep = bounded_engine.submit_feature(Category.FALLOW, box(0, 0, 0.5, 1)).feature
        drop = bounded_engine.submit_feature(Category.FALLOW, box(0.5, 0, 1, 1)).feature

        outcome = bounded_engine.remove_feature(Category.FALLOW, drop.feature_id)

        assert outcome.applied
        assert outcome.removed_ids == [drop.feature_id]
        assert [f.feature_id for f in bounded_engine.features(Category.FALLOW)] == [
            keep.feature_id
        ]

    def test_clear_category(self, bounded_engine):
        bounded_engine.submit_feature(Category.FALLOW, box(0, 0, 0.5, 1))
        bounded_engine.submit_feature(Category.FALLOW, box(0.5, 0, 1, 1))
        bounded_engine.submit_feature(Category.CONSOLIDATED, box(0, 0, 1, 1))

        outcome = bounded_engine.clear_category(Category.FALLOW)

        assert len(outcome.removed) == 2
        assert bounded_engine.features(Category.FALLOW) == []
        assert len(bounded_engine.features(Category.CONSOLIDATED)) == 1

    def test_remove_unknown_feature(self, bounded_engine):
        with pytest.raises(FeatureNotFoundError):
            bounded_engine.remove_feature(Category.FALLOW, "fallow-area-000042")


# ═══════════════════════════════════════════════════════════════════════════
# ✏️ EDITS
# ═══════════════════════════════════════════════════════════════════════════


class TestEdits:
    """Edits re-validate the new geometry under the same id."""

    def test_edit_is_clipped_like_a_submit(self, bounded_engine):
        bounded_engine.submit_feature(Category.NATIVE_VEGETATION, box(0, 0, 0.5, 1))
        fallow = bounded_engine.submit_feature(Category.FALLOW, box(0.5, 0, 1, 1)).feature

        outcome = bounded_engine.edit_feature(
            Category.FALLOW, fallow.feature_id, box(0.25, 0, 1, 1)
        )

        assert outcome.accepted
        assert outcome.clipped
        assert outcome.feature.feature_id == fallow.feature_id
        assert outcome.feature.revision == 1
        assert outcome.feature.geometry.equals(box(0.5, 0, 1, 1))

    def test_rejected_edit_leaves_feature(self, bounded_engine):
        fallow = bounded_engine.submit_feature(Category.FALLOW, box(0, 0, 1, 1)).feature

        outcome = bounded_engine.edit_feature(
            Category.FALLOW, fallow.feature_id, box(5, 5, 6, 6)
        )

        assert outcome.reason is RejectionReason.OUTSIDE_BOUNDARY
        stored = bounded_engine.session.get_feature(Category.FALLOW, fallow.feature_id)
        assert stored == fallow

    def test_headquarters_can_be_moved(self, bounded_engine):
        hq = bounded_engine.submit_feature(Category.HEADQUARTERS, Point(0.5, 0.5)).feature

        outcome = bounded_engine.edit_feature(
            Category.HEADQUARTERS, hq.feature_id, Point(0.1, 0.9)
        )

        assert outcome.accepted
        assert bounded_engine.session.get_feature(
            Category.HEADQUARTERS, hq.feature_id
        ).geometry.equals(Point(0.1, 0.9))

    def test_edit_unknown_feature(self, bounded_engine):
        with pytest.raises(FeatureNotFoundError):
            bounded_engine.edit_feature(
                Category.FALLOW, "fallow-area-000042", box(0, 0, 1, 1)
            )

    def test_invalid_polygon_repaired(self, bounded_engine):
        bowtie = Polygon([(0, 0), (1, 1), (1, 0), (0, 1)])

        outcome = bounded_engine.submit_feature(Category.FALLOW, bowtie)

        assert outcome.accepted
        assert outcome.geometry.is_valid
        assert outcome.geometry.area == pytest.approx(0.5)


# ═══════════════════════════════════════════════════════════════════════════
# 👁️ VISIBILITY
# ═══════════════════════════════════════════════════════════════════════════


class TestVisibility:
    """Anthropized Area stays visible."""

    def test_hiding_anthropized_refused(self, bounded_engine):
        assert not bounded_engine.set_category_visibility(Category.ANTHROPIZED, False)
        assert bounded_engine.session.layer(Category.ANTHROPIZED).visible

    def test_hiding_other_category(self, bounded_engine):
        assert bounded_engine.set_category_visibility(Category.FALLOW, False)
        bounded_engine.submit_feature(Category.FALLOW, box(0, 0, 1, 1))

        gdf = bounded_engine.to_geodataframe()

        assert list(gdf["visible"]) == [True, False]
        assert bounded_engine.check_invariants() == []


# ═══════════════════════════════════════════════════════════════════════════
# ⚠️ FAILURES
# ═══════════════════════════════════════════════════════════════════════════


class TestFailures:
    """Infrastructure failures surface as exceptions, rejections do not."""

    def test_kernel_failure_before_commit(self, broken_clip_engine):
        before = broken_clip_engine.session.feature_count()

        with pytest.raises(KernelFailure) as excinfo:
            broken_clip_engine.submit_feature(Category.FALLOW, box(0, 0, 0.5, 0.5))

        assert excinfo.value.operation == "clip"
        assert broken_clip_engine.session.feature_count() == before

    def test_invalid_config_refused(self):
        config = AppConfig(kernel=KernelConfig(area_mode="spherical"))

        with pytest.raises(ConfigurationError):
            LandCoverEngine(config=config)


# ═══════════════════════════════════════════════════════════════════════════
# 🧵 CONCURRENCY
# ═══════════════════════════════════════════════════════════════════════════


class TestConcurrentEdits:
    """Edits from several threads are serialised per session."""

    def test_parallel_submissions(self, hectare_engine):
        # 16 strips of 6.25 m x 100 m tile the 1 ha boundary
        strips = [box(i * 6.25, 0, (i + 1) * 6.25, 100) for i in range(16)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            outcomes = list(
                pool.map(
                    lambda g: hectare_engine.submit_feature(Category.FALLOW, g), strips
                )
            )

        assert all(o.accepted for o in outcomes)
        ids = {o.feature.feature_id for o in outcomes}
        assert len(ids) == 16
        assert hectare_engine.get_area_totals()[Category.FALLOW] == 1.0
        assert hectare_engine.check_invariants() == []


# ═══════════════════════════════════════════════════════════════════════════
# 📊 QUERIES
# ═══════════════════════════════════════════════════════════════════════════


class TestQueries:
    """Export and consistency queries."""

    def test_to_geodataframe(self, bounded_engine):
        bounded_engine.submit_feature(Category.HEADQUARTERS, Point(0.5, 0.5))
        bounded_engine.submit_feature(Category.NATIVE_VEGETATION, box(0, 0, 0.5, 1))

        gdf = bounded_engine.to_geodataframe()

        assert len(gdf) == 3
        assert list(gdf["category"]) == [
            "property-area",
            "property-headquarters",
            "native-vegetation",
        ]
        assert gdf.crs.to_epsg() == 3857

    def test_invariants_hold_after_mixed_edits(self, bounded_engine):
        bounded_engine.submit_feature(Category.HEADQUARTERS, Point(0.9, 0.9))
        bounded_engine.submit_feature(Category.CONSOLIDATED, box(0, 0, 0.7, 0.7))
        bounded_engine.submit_feature(Category.FALLOW, box(0.3, 0.3, 1, 1))
        bounded_engine.submit_feature(Category.ANTHROPIZED, box(0.8, 0, 1.5, 0.2))
        bounded_engine.submit_feature(Category.NATIVE_VEGETATION, box(0.2, 0.2, 0.8, 0.8))
        bounded_engine.submit_feature(Category.FALLOW, box(0.4, 0.4, 0.6, 0.6))

        assert bounded_engine.check_invariants() == []


# ═══════════════════════════════════════════════════════════════════════════
# 🔁 EDIT SEQUENCES
# ═══════════════════════════════════════════════════════════════════════════

# Each step is ("submit", category, geometry), ("edit", category, geometry)
# on the first feature of the category, or ("remove_boundary", confirmed).
EDIT_SEQUENCES = {
    "native_vegetation_grows": [
        ("submit", Category.NATIVE_VEGETATION, box(0, 0, 0.3, 1)),
        ("submit", Category.FALLOW, box(0, 0, 1, 1)),
        ("submit", Category.CONSOLIDATED, box(0.5, 0.5, 1, 1)),
        ("edit", Category.NATIVE_VEGETATION, box(0, 0, 0.8, 1)),
        ("submit", Category.ANTHROPIZED, box(0.7, 0, 1.2, 0.5)),
        ("edit", Category.NATIVE_VEGETATION, box(0, 0, 1, 1)),
    ],
    "boundary_replaced": [
        ("edit", Category.PROPERTY_BOUNDARY, box(0, 0, 2, 2)),
        ("submit", Category.FALLOW, box(1, 1, 3, 3)),
        ("submit", Category.NATIVE_VEGETATION, box(0, 0, 1.5, 1.5)),
        ("submit", Category.HEADQUARTERS, Point(1.8, 1.8)),
        ("submit", Category.PROPERTY_BOUNDARY, box(0, 0, 5, 5)),
    ],
    "boundary_removed_and_redrawn": [
        ("submit", Category.HEADQUARTERS, Point(0.5, 0.5)),
        ("submit", Category.CONSOLIDATED, box(0, 0, 0.5, 0.5)),
        ("submit", Category.NATIVE_VEGETATION, box(0.25, 0.25, 0.75, 0.75)),
        ("remove_boundary", False),
        ("remove_boundary", True),
        ("submit", Category.FALLOW, box(0, 0, 1, 1)),
        ("submit", Category.PROPERTY_BOUNDARY, box(0, 0, 1, 1)),
        ("submit", Category.FALLOW, box(0, 0, 1, 1)),
    ],
    "headquarters_moved": [
        ("submit", Category.HEADQUARTERS, Point(0.5, 0.5)),
        ("submit", Category.HEADQUARTERS, Point(0.6, 0.6)),
        ("edit", Category.HEADQUARTERS, Point(0.1, 0.1)),
        ("edit", Category.HEADQUARTERS, Point(5, 5)),
        ("submit", Category.ANTHROPIZED, box(0, 0, 0.5, 0.5)),
        ("submit", Category.NATIVE_VEGETATION, box(0, 0, 0.25, 0.25)),
    ],
}


def _apply_step(engine, step):
    action = step[0]
    if action == "submit":
        engine.submit_feature(step[1], step[2])
    elif action == "edit":
        feature_id = engine.features(step[1])[0].feature_id
        engine.edit_feature(step[1], feature_id, step[2])
    elif action == "remove_boundary":
        boundary = engine.session.boundary_feature
        engine.remove_feature(
            Category.PROPERTY_BOUNDARY, boundary.feature_id, confirmed=step[1]
        )
    else:
        raise ValueError(f"Unknown step: {action}")


class TestEditSequences:
    """Session consistency holds after every step of an edit sequence."""

    @pytest.mark.parametrize(
        "steps", list(EDIT_SEQUENCES.values()), ids=list(EDIT_SEQUENCES)
    )
    def test_invariants_after_every_step(self, bounded_engine, steps):
        for index, step in enumerate(steps):
            _apply_step(bounded_engine, step)

            assert bounded_engine.check_invariants() == [], f"after step {index}"

    def test_grown_native_vegetation_consumes_lower_layers(self, bounded_engine):
        for step in EDIT_SEQUENCES["native_vegetation_grows"]:
            _apply_step(bounded_engine, step)

        for category in (Category.CONSOLIDATED, Category.FALLOW, Category.ANTHROPIZED):
            assert bounded_engine.features(category) == []

    def test_redrawn_boundary_starts_empty(self, bounded_engine):
        for step in EDIT_SEQUENCES["boundary_removed_and_redrawn"]:
            _apply_step(bounded_engine, step)

        assert bounded_engine.features(Category.HEADQUARTERS) == []
        assert bounded_engine.features(Category.NATIVE_VEGETATION) == []
        assert len(bounded_engine.features(Category.FALLOW)) == 1
