"""Analyse-repository use case, the main orchestration pipeline.

This is the single entry point for the business logic.  It depends only on
the ports (:class:`ResultStore`, and optionally :class:`SourceExtractor` /
:class:`SkillProfiler`) and the pure service modules.  The interface layer
injects concrete adapters at runtime.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Sequence

from contribution_ranker.domain.cancellation import CancellationToken
from contribution_ranker.domain.entities import (
    DependencyEdge,
    FileNode,
    RepositoryAnalysis,
    SkillProfile,
    SourceFile,
    UserRecommendations,
)
from contribution_ranker.domain.exceptions import SnapshotNotFoundError
from contribution_ranker.domain.ports.result_store import ResultStore
from contribution_ranker.domain.ports.skill_profiler import SkillProfiler
from contribution_ranker.domain.ports.source_extractor import SourceExtractor
from contribution_ranker.domain.value_objects import ResultKey
from contribution_ranker.infrastructure.config import Settings
from contribution_ranker.services.centrality import compute_centrality
from contribution_ranker.services.complexity import compute_complexity
from contribution_ranker.services.graph_builder import build_graph
from contribution_ranker.services.path_planner import plan_path
from contribution_ranker.services.personalization import personalize
from contribution_ranker.services.risk import assess_risk
from contribution_ranker.services.structural_metrics import extract_metrics

logger = logging.getLogger(__name__)


class AnalyzeRepoUseCase:
    """Orchestrates files + edges → scores → per-user recommendations.

    Parameters
    ----------
    store:
        Caller-owned keyed store; results are memoised per snapshot id and
        per (snapshot id, user id).
    settings:
        Tuning knobs for every stage of the pipeline.
    """

    def __init__(self, store: ResultStore, settings: Settings) -> None:
        self._store = store
        self._settings = settings

    # ── Repository-level analysis ───────────────────────────────────────

    def analyze(
        self,
        snapshot_id: str,
        files: Sequence[FileNode],
        edges: Iterable[DependencyEdge],
        cancel: CancellationToken | None = None,
    ) -> RepositoryAnalysis:
        """Build the graph, score centrality and complexity, store the result."""
        key = ResultKey.for_snapshot(snapshot_id)
        s = self._settings
        logger.info("Analysing snapshot %s (%d files)", key.snapshot_id, len(files))

        # 1. Graph
        built = build_graph(files, edges)
        graph = built.graph

        # 2. Centrality
        centrality = compute_centrality(
            graph,
            damping=s.damping_factor,
            tolerance=s.convergence_tolerance,
            max_iterations=s.max_iterations,
            cancel=cancel,
        )

        # 3. Complexity
        complexity = compute_complexity(
            list(graph.nodes.values()),
            batch_size=s.complexity_batch_size,
            cyclomatic_ceiling=s.cyclomatic_ceiling,
            nesting_ceiling=s.nesting_ceiling,
            size_threshold=s.size_threshold_loc,
            size_span=s.size_penalty_span_loc,
            cancel=cancel,
        )

        analysis = RepositoryAnalysis(
            snapshot_id=key.snapshot_id,
            graph=graph,
            diagnostics=built.diagnostics,
            centrality=centrality,
            complexity=complexity,
        )
        self._store.put_analysis(key, analysis)
        logger.info(
            "Snapshot %s: %d edges kept, %d circular group(s), centrality %s after %d round(s)",
            key.snapshot_id,
            built.diagnostics.edges_kept,
            len(graph.circular_components),
            "converged" if centrality.converged else "not converged",
            centrality.iterations,
        )
        return analysis

    async def analyze_sources(
        self,
        snapshot_id: str,
        sources: Sequence[SourceFile],
        edges: Iterable[DependencyEdge],
        files: Sequence[FileNode] = (),
        cancel: CancellationToken | None = None,
    ) -> RepositoryAnalysis:
        """Extract structural metrics concurrently, then run :meth:`analyze`.

        Pre-measured *files* are merged in and win over an extracted record
        with the same path.
        """
        extracted = await self._extract_files(sources)
        merged = {node.path: node for node in extracted}
        merged.update({node.path: node for node in files})
        return self.analyze(
            snapshot_id, [merged[p] for p in sorted(merged)], edges, cancel=cancel
        )

    async def analyze_from_extractor(
        self,
        snapshot_id: str,
        extractor: SourceExtractor,
        cancel: CancellationToken | None = None,
    ) -> RepositoryAnalysis:
        """Pull file records and edges from the extraction collaborator."""
        files, edges = await asyncio.gather(
            extractor.fetch_files(snapshot_id),
            extractor.fetch_edges(snapshot_id),
        )
        return self.analyze(snapshot_id, files, edges, cancel=cancel)

    def get_analysis(self, snapshot_id: str) -> RepositoryAnalysis:
        analysis = self._store.get_analysis(ResultKey.for_snapshot(snapshot_id))
        if analysis is None:
            raise SnapshotNotFoundError(
                f"No analysis stored for snapshot '{snapshot_id}'. Run an analysis first."
            )
        return analysis

    # ── Per-user recommendations ────────────────────────────────────────

    def recommend(self, snapshot_id: str, profile: SkillProfile) -> UserRecommendations:
        """Suitability, risk and a contribution path for one user."""
        key = ResultKey.for_user(snapshot_id, profile.user_id)
        analysis = self.get_analysis(snapshot_id)
        s = self._settings
        files = analysis.graph.nodes
        complexity = analysis.complexity.scores

        suitability = personalize(profile, files, complexity)
        risk = assess_risk(profile, files, analysis.centrality.scores, complexity)
        path = plan_path(
            profile.user_id,
            analysis.graph,
            suitability,
            candidate_threshold=s.candidate_threshold,
            min_length=s.min_path_length,
            max_length=s.max_path_length,
            milestone_interval=s.milestone_interval,
        )

        recommendations = UserRecommendations(
            snapshot_id=key.snapshot_id,
            user_id=profile.user_id,
            suitability=suitability,
            risk=risk,
            path=path,
        )
        self._store.put_recommendations(key, recommendations)
        logger.info(
            "User %s on %s: %d scored file(s), path of %d step(s) (%s)",
            profile.user_id,
            key.snapshot_id,
            len(suitability),
            len(path.steps),
            path.reason.value,
        )
        return recommendations

    async def recommend_for_user(
        self, snapshot_id: str, user_id: str, profiler: SkillProfiler
    ) -> UserRecommendations:
        """Resolve the user's profile through the profiling collaborator first."""
        profile = await profiler.fetch_profile(user_id)
        return self.recommend(snapshot_id, profile)

    def get_recommendations(self, snapshot_id: str, user_id: str) -> UserRecommendations:
        """Return the last recommendations stored for *user_id* on the snapshot."""
        stored = self._store.get_recommendations(ResultKey.for_user(snapshot_id, user_id))
        if stored is None:
            raise SnapshotNotFoundError(
                f"No recommendations stored for user '{user_id}' on snapshot '{snapshot_id}'."
            )
        return stored

    # ── Concurrent metrics extraction ───────────────────────────────────

    async def _extract_files(self, sources: Sequence[SourceFile]) -> list[FileNode]:
        """Measure every file in a worker thread, bounded by a semaphore."""
        sem = asyncio.Semaphore(self._settings.metrics_concurrency)

        async def _extract_one(source: SourceFile) -> FileNode | None:
            async with sem:
                try:
                    return await asyncio.to_thread(extract_metrics, source)
                except Exception:
                    logger.warning("Failed to measure %s, skipping", source.path, exc_info=True)
                    return None

        results = await asyncio.gather(*(_extract_one(src) for src in sources))
        merged = {node.path: node for node in results if node is not None}
        return [merged[path] for path in sorted(merged)]
