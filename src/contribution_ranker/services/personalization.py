"""Skill-based personalisation of complexity scores.

The adjustment factor comes from the fixed :class:`SkillLevel` table::

    expert 0.6 | advanced 0.75 | intermediate 0.9 | beginner 1.0 | none 1.2

Both terms of the suitability formula are monotone in the user's
confidence, so a more confident user never scores lower on the same file.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from contribution_ranker.domain.entities import (
    FileNode,
    SkillLevel,
    SkillProfile,
    SuitabilityScore,
)
from contribution_ranker.services.scoring import clamp, tier_for

_W_CONFIDENCE = 0.6
_W_EASE = 0.4


def adjusted_complexity(complexity: float, level: SkillLevel) -> float:
    """Rescale *complexity* by the level's factor, pinned to [0, 100]."""
    return clamp(clamp(complexity, 0.0, 100.0) * level.factor, 0.0, 100.0)


def suitability(adjusted: float, level: SkillLevel) -> float:
    """Blend of skill confidence and ease of the file, pinned to [0, 1]."""
    ease = (100.0 - clamp(adjusted, 0.0, 100.0)) / 100.0
    return clamp(level.confidence * _W_CONFIDENCE + ease * _W_EASE, 0.0, 1.0)


def score_suitability(
    profile: SkillProfile, file: FileNode, complexity: float
) -> SuitabilityScore:
    level = profile.level_for(file.language)
    adjusted = adjusted_complexity(complexity, level)
    value = suitability(adjusted, level)
    return SuitabilityScore(
        user_id=profile.user_id,
        path=file.path,
        suitability=value,
        tier=tier_for(value),
        adjusted_complexity=adjusted,
        skill_level=level,
        adjustment_factor=level.factor,
    )


def personalize(
    profile: SkillProfile,
    files: Mapping[str, FileNode],
    complexity: Mapping[str, float],
) -> Mapping[str, SuitabilityScore]:
    """Suitability for every scored file; unscored (excluded) files are skipped."""
    results: dict[str, SuitabilityScore] = {}
    for path in sorted(complexity):
        node = files.get(path)
        if node is None:
            continue
        results[path] = score_suitability(profile, node, complexity[path])
    return MappingProxyType(results)
