"""Contribution risk classification.

``risk = 0.4 * centrality/100 + 0.3 * complexity/100 + 0.3 * (1 - confidence)``

"High Impact" (centrality above 80) and "High Risk" (risk tier High) are
independent flags; a file can carry both.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from contribution_ranker.domain.entities import FileNode, RiskAssessment, SkillProfile
from contribution_ranker.services.centrality import is_high_impact
from contribution_ranker.services.scoring import clamp, tier_for

_W_CENTRALITY = 0.4
_W_COMPLEXITY = 0.3
_W_SKILL_GAP = 0.3


def assess_file(
    profile: SkillProfile,
    file: FileNode,
    centrality: float,
    complexity: float,
) -> RiskAssessment:
    centrality_factor = clamp(centrality, 0.0, 100.0) / 100.0
    complexity_factor = clamp(complexity, 0.0, 100.0) / 100.0
    skill_gap = clamp(1.0 - profile.level_for(file.language).confidence, 0.0, 1.0)

    score = clamp(
        _W_CENTRALITY * centrality_factor
        + _W_COMPLEXITY * complexity_factor
        + _W_SKILL_GAP * skill_gap,
        0.0,
        1.0,
    )
    return RiskAssessment(
        user_id=profile.user_id,
        path=file.path,
        risk_score=score,
        tier=tier_for(score),
        centrality_factor=centrality_factor,
        complexity_factor=complexity_factor,
        skill_gap_factor=skill_gap,
        high_impact=is_high_impact(centrality),
    )


def assess_risk(
    profile: SkillProfile,
    files: Mapping[str, FileNode],
    centrality: Mapping[str, float],
    complexity: Mapping[str, float],
) -> Mapping[str, RiskAssessment]:
    """Risk for every scored file.  Missing centrality counts as 0."""
    results: dict[str, RiskAssessment] = {}
    for path in sorted(complexity):
        node = files.get(path)
        if node is None:
            continue
        results[path] = assess_file(
            profile, node, centrality.get(path, 0.0), complexity[path]
        )
    return MappingProxyType(results)
