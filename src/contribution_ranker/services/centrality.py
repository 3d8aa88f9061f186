"""Graph centrality via PageRank fixed-point iteration over the internal graph.

``PR(n) = (1 - d) + d * sum(PR(m) / out(m) for m -> n)``

* only internal files take part; external targets never count towards a
  node's out-degree;
* self-edges neither propagate nor count towards out-degree;
* every round is computed into a fresh mapping and committed at once, so
  no node ever reads a partially updated round;
* contributions are summed with :func:`math.fsum` over predecessors in
  path order, so two files with the same in-set and out-set end up with
  bit-identical scores whatever order the edges arrived in.
"""

from __future__ import annotations

import logging
import math
from types import MappingProxyType

from contribution_ranker.domain.cancellation import CancellationToken
from contribution_ranker.domain.entities import CentralityResult, DependencyGraph
from contribution_ranker.services.scoring import clamp

logger = logging.getLogger(__name__)

DAMPING_FACTOR = 0.85
TOLERANCE = 0.001
MAX_ITERATIONS = 100
HIGH_IMPACT_THRESHOLD = 80.0


def is_high_impact(centrality: float) -> bool:
    """Files above 80 on the centrality scale are "High Impact"."""
    return centrality > HIGH_IMPACT_THRESHOLD


def _rescale(raw: dict[str, float], isolated: set[str]) -> dict[str, float]:
    """Map the largest non-isolated raw score to 100 and 0 to 0."""
    connected = [v for k, v in raw.items() if k not in isolated]
    top = max(connected, default=0.0)
    scores: dict[str, float] = {}
    for path, value in raw.items():
        if path in isolated or top <= 0:
            scores[path] = 0.0
        else:
            scores[path] = clamp(value / top * 100.0, 0.0, 100.0)
    return scores


def compute_centrality(
    graph: DependencyGraph,
    damping: float = DAMPING_FACTOR,
    tolerance: float = TOLERANCE,
    max_iterations: int = MAX_ITERATIONS,
    cancel: CancellationToken | None = None,
) -> CentralityResult:
    """Run the PageRank iteration and return scores normalised to [0, 100].

    Hitting *max_iterations* is not an error: the last round is returned
    with ``converged=False``.  A cancelled run returns the last completed
    round with ``cancelled=True``.
    """
    paths = sorted(graph.nodes)
    n = len(paths)
    if n == 0:
        return CentralityResult(
            scores=MappingProxyType({}),
            raw_scores=MappingProxyType({}),
            converged=True,
            iterations=0,
            max_delta=0.0,
        )

    incoming: dict[str, list[str]] = {p: graph.internal_dependents(p) for p in paths}
    out_degree: dict[str, int] = {p: len(graph.internal_dependencies(p)) for p in paths}
    isolated = {p for p in paths if out_degree[p] == 0 and not incoming[p]}

    rank: dict[str, float] = {p: 1.0 / n for p in paths}
    converged = False
    cancelled = False
    iterations = 0
    delta = math.inf

    for _ in range(max_iterations):
        if cancel is not None and cancel.cancelled:
            cancelled = True
            break

        updated: dict[str, float] = {}
        for path in paths:
            inflow = math.fsum(rank[m] / out_degree[m] for m in incoming[path])
            updated[path] = (1.0 - damping) + damping * inflow

        delta = max(abs(updated[p] - rank[p]) for p in paths)
        rank = updated
        iterations += 1
        if delta < tolerance:
            converged = True
            break

    if cancelled:
        logger.info("Centrality cancelled after %d round(s)", iterations)
    elif not converged:
        logger.warning(
            "Centrality did not converge after %d iterations (max delta %.6f)",
            iterations,
            delta,
        )

    return CentralityResult(
        scores=MappingProxyType(_rescale(rank, isolated)),
        raw_scores=MappingProxyType(dict(rank)),
        converged=converged,
        iterations=iterations,
        max_delta=0.0 if math.isinf(delta) else delta,
        cancelled=cancelled,
    )
