"""Tests for skill-based personalisation and tiering."""

from fractions import Fraction

import pytest

from contribution_ranker.domain.entities import SkillLevel, SkillProfile, Tier
from contribution_ranker.services.personalization import (
    adjusted_complexity,
    personalize,
    score_suitability,
    suitability,
)
from contribution_ranker.services.scoring import clamp, tier_for

_ASCENDING = [
    SkillLevel.NONE,
    SkillLevel.BEGINNER,
    SkillLevel.INTERMEDIATE,
    SkillLevel.ADVANCED,
    SkillLevel.EXPERT,
]


class TestAdjustedComplexity:
    def test_expert_discount(self):
        assert adjusted_complexity(80, SkillLevel.EXPERT) == pytest.approx(48.0)

    def test_no_skill_penalty(self):
        assert adjusted_complexity(80, SkillLevel.NONE) == pytest.approx(96.0)

    def test_no_skill_penalty_is_clamped(self):
        assert adjusted_complexity(95, SkillLevel.NONE) == 100.0

    @pytest.mark.parametrize(
        "level,factor",
        [
            (SkillLevel.EXPERT, 0.6),
            (SkillLevel.ADVANCED, 0.75),
            (SkillLevel.INTERMEDIATE, 0.9),
            (SkillLevel.BEGINNER, 1.0),
            (SkillLevel.NONE, 1.2),
        ],
    )
    def test_factor_table(self, level, factor):
        assert level.factor == factor
        assert adjusted_complexity(50, level) == pytest.approx(50 * factor)


class TestSuitability:
    def test_bounds_over_a_grid(self):
        for level in _ASCENDING:
            for complexity in range(0, 101, 5):
                adjusted = adjusted_complexity(complexity, level)
                value = suitability(adjusted, level)
                assert 0.0 <= adjusted <= 100.0
                assert 0.0 <= value <= 1.0

    def test_more_confidence_never_lowers_suitability(self):
        for complexity in range(0, 101):
            values = [
                suitability(adjusted_complexity(complexity, level), level)
                for level in _ASCENDING
            ]
            assert values == sorted(values), complexity

    def test_expert_on_trivial_file(self):
        assert suitability(adjusted_complexity(0, SkillLevel.EXPERT), SkillLevel.EXPERT) == 1.0

    def test_no_skill_on_hardest_file(self):
        assert suitability(adjusted_complexity(100, SkillLevel.NONE), SkillLevel.NONE) == 0.0

    def test_score_suitability_uses_file_language(self, make_file):
        profile = SkillProfile(user_id="alice", skills={"go": SkillLevel.EXPERT})
        node = make_file("svc/main.go", language="Go")

        score = score_suitability(profile, node, 80.0)

        assert score.skill_level is SkillLevel.EXPERT
        assert score.adjusted_complexity == pytest.approx(48.0)
        # 1.0 * 0.6 + 0.52 * 0.4
        assert score.suitability == pytest.approx(0.808)
        assert score.tier is Tier.HIGH

    def test_personalize_skips_unscored_files(self, make_file):
        profile = SkillProfile(user_id="bob", skills={"python": SkillLevel.BEGINNER})
        files = {
            "a.py": make_file("a.py"),
            "tests/test_a.py": make_file("tests/test_a.py"),
        }

        results = personalize(profile, files, {"a.py": 20.0, "ghost.py": 10.0})

        assert set(results) == {"a.py"}
        assert results["a.py"].user_id == "bob"


class TestTier:
    def test_boundaries_are_medium(self):
        assert tier_for(0.4) is Tier.MEDIUM
        assert tier_for(0.7) is Tier.MEDIUM

    def test_outside_boundaries(self):
        assert tier_for(0.7000001) is Tier.HIGH
        assert tier_for(0.3999999) is Tier.LOW
        assert tier_for(1.0) is Tier.HIGH
        assert tier_for(0.0) is Tier.LOW


def test_clamp_handles_nan():
    assert clamp(float("nan"), 0.0, 1.0) == 0.0
    assert clamp(5.0, 0.0, 1.0) == 1.0
    assert clamp(-5.0, 0.0, 1.0) == 0.0


@pytest.mark.parametrize("level", list(SkillLevel))
def test_suitability_tiers_match_exact_arithmetic(level):
    factor = Fraction(str(level.factor))
    confidence = Fraction(level.confidence)
    mismatches = []

    for complexity in range(101):
        adjusted = min(complexity * factor, Fraction(100))
        exact = confidence * Fraction(6, 10) + (100 - adjusted) / 100 * Fraction(4, 10)
        if exact > Fraction(7, 10):
            expected = Tier.HIGH
        elif exact < Fraction(4, 10):
            expected = Tier.LOW
        else:
            expected = Tier.MEDIUM

        value = suitability(adjusted_complexity(complexity, level), level)
        if tier_for(value) is not expected:
            mismatches.append((complexity, value))

    assert mismatches == []
