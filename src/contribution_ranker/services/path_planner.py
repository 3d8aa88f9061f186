"""Contribution path planning: a dependency-aware, easiest-first sequence.

Candidates are the files whose suitability exceeds 0.6.  The sequence is
built greedily: a file becomes eligible once every candidate it depends on
is already in the path, and among eligible files the one with the lowest
adjusted complexity wins (ties broken by path).  When the remaining
candidates only depend on each other in a cycle, the lowest-complexity
circular file is taken and its step is flagged ``breaks_cycle``.
"""

from __future__ import annotations

import logging
from typing import Mapping

from contribution_ranker.domain.entities import (
    ContributionPath,
    DependencyGraph,
    EffortBucket,
    EffortEstimate,
    Milestone,
    PathReason,
    PathStep,
    SuitabilityScore,
)
from contribution_ranker.services.scoring import clamp, ratio

logger = logging.getLogger(__name__)

CANDIDATE_THRESHOLD = 0.6
MIN_PATH_LENGTH = 10
MAX_PATH_LENGTH = 15
MILESTONE_INTERVAL = 3

# ── Cognitive load weights ──────────────────────────────────────────────────

_W_COMPLEXITY = 0.35
_W_DEPENDENCIES = 0.25
_W_SIZE = 0.20
_W_SKILL_GAP = 0.20

_DEPENDENCY_CEILING = 10
_SIZE_CEILING = 1000


def estimate_effort(
    adjusted_complexity: float,
    dependency_count: int,
    lines_of_code: int,
    confidence: float,
) -> EffortEstimate:
    """Cognitive load scaled to 1-10 and bucketed into hour ranges."""
    load = (
        _W_COMPLEXITY * clamp(adjusted_complexity, 0.0, 100.0) / 100.0
        + _W_DEPENDENCIES * ratio(dependency_count, _DEPENDENCY_CEILING)
        + _W_SIZE * ratio(lines_of_code, _SIZE_CEILING)
        + _W_SKILL_GAP * clamp(1.0 - confidence, 0.0, 1.0)
    )
    level = int(clamp(1 + int(clamp(load, 0.0, 1.0) * 9 + 0.5), 1, 10))
    if level <= 3:
        bucket = EffortBucket.SMALL
    elif level <= 6:
        bucket = EffortBucket.MEDIUM
    else:
        bucket = EffortBucket.LARGE
    return EffortEstimate(cognitive_load=level, bucket=bucket)


def _milestones(steps: list[PathStep], interval: int) -> tuple[Milestone, ...]:
    markers: list[Milestone] = []
    for after in range(interval, len(steps) + 1, interval):
        group = steps[after - interval : after]
        markers.append(
            Milestone(
                index=len(markers) + 1,
                after_step=after,
                label=f"Milestone {len(markers) + 1}",
                paths=tuple(s.path for s in group),
            )
        )
    return tuple(markers)


def plan_path(
    user_id: str,
    graph: DependencyGraph,
    suitability: Mapping[str, SuitabilityScore],
    candidate_threshold: float = CANDIDATE_THRESHOLD,
    min_length: int = MIN_PATH_LENGTH,
    max_length: int = MAX_PATH_LENGTH,
    milestone_interval: int = MILESTONE_INTERVAL,
) -> ContributionPath:
    """Order the user's best-suited files into a learning sequence.

    An empty candidate set yields an empty path with reason
    ``no_candidates``; fewer than *min_length* files yields a shorter path
    with reason ``candidates_exhausted``.
    """
    candidates = {
        path: score
        for path, score in suitability.items()
        if score.suitability > candidate_threshold and graph.is_internal(path)
    }
    if not candidates:
        logger.info("No contribution candidates for user %s", user_id)
        return ContributionPath(
            user_id=user_id,
            steps=(),
            milestones=(),
            reason=PathReason.NO_CANDIDATES,
            target_length=min_length,
        )

    requires = {
        path: [d for d in graph.internal_dependencies(path) if d in candidates]
        for path in candidates
    }
    remaining = sorted(
        candidates, key=lambda p: (candidates[p].adjusted_complexity, p)
    )
    placed: set[str] = set()
    steps: list[PathStep] = []

    while remaining and len(steps) < max_length:
        chosen = next(
            (p for p in remaining if all(d in placed for d in requires[p])), None
        )
        breaks_cycle = chosen is None
        if chosen is None:
            chosen = next((p for p in remaining if graph.is_circular(p)), remaining[0])
            logger.debug("Breaking dependency cycle at %s", chosen)

        remaining.remove(chosen)
        score = candidates[chosen]
        node = graph.nodes[chosen]
        steps.append(
            PathStep(
                position=len(steps) + 1,
                path=chosen,
                adjusted_complexity=score.adjusted_complexity,
                suitability=score.suitability,
                effort=estimate_effort(
                    score.adjusted_complexity,
                    len(graph.internal_dependencies(chosen)),
                    node.lines_of_code,
                    score.skill_level.confidence,
                ),
                depends_on=tuple(d for d in requires[chosen] if d in placed),
                breaks_cycle=breaks_cycle,
                recent_commit=node.recent_commit,
                open_issue=node.open_issue,
            )
        )
        placed.add(chosen)

    reason = (
        PathReason.COMPLETE if len(steps) >= min_length else PathReason.CANDIDATES_EXHAUSTED
    )
    if reason is PathReason.CANDIDATES_EXHAUSTED:
        logger.info(
            "Contribution path for %s has %d step(s), below the target of %d",
            user_id,
            len(steps),
            min_length,
        )

    return ContributionPath(
        user_id=user_id,
        steps=tuple(steps),
        milestones=_milestones(steps, milestone_interval),
        reason=reason,
        target_length=min_length,
    )
