"""API routes: thin controllers that delegate to the use case."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from contribution_ranker.domain.entities import (
    DependencyEdge,
    FileNode,
    FunctionMetrics,
    RepositoryAnalysis,
    SourceFile,
    UserRecommendations,
)
from contribution_ranker.domain.value_objects import parse_skill_profile
from contribution_ranker.interface.dependencies import get_use_case
from contribution_ranker.interface.schemas import (
    AnalysisResponse,
    AnalyzeRequest,
    ContributionPathOut,
    DiagnosticsOut,
    FileRecommendationOut,
    FileRecordIn,
    FileScoreOut,
    MilestoneOut,
    PathStepOut,
    RecommendationResponse,
    RecommendRequest,
    RiskFactorsOut,
)
from contribution_ranker.services.analyze_repo import AnalyzeRepoUseCase
from contribution_ranker.services.centrality import is_high_impact

router = APIRouter()


# ── Mapping helpers ─────────────────────────────────────────────────────────


def _to_file_node(record: FileRecordIn) -> FileNode:
    return FileNode(
        path=record.path,
        language=record.language.strip().lower() or "unknown",
        lines_of_code=record.lines_of_code,
        cyclomatic=record.cyclomatic,
        nesting_depth=record.nesting_depth,
        last_modified=record.last_modified,
        recent_commit=record.recent_commit,
        open_issue=record.open_issue,
        functions=tuple(
            FunctionMetrics(name=f.name, cyclomatic=f.cyclomatic, nesting_depth=f.nesting_depth)
            for f in record.functions
        ),
    )


def _analysis_response(analysis: RepositoryAnalysis) -> AnalysisResponse:
    graph = analysis.graph
    centrality = analysis.centrality.scores
    complexity = analysis.complexity
    d = analysis.diagnostics

    files = [
        FileScoreOut(
            path=path,
            language=node.language,
            centrality=centrality.get(path, 0.0),
            complexity=complexity.scores.get(path),
            excluded_as=(
                complexity.excluded[path].value if path in complexity.excluded else None
            ),
            high_impact=is_high_impact(centrality.get(path, 0.0)),
            circular=graph.is_circular(path),
            scc_id=graph.scc_ids[path],
        )
        for path, node in sorted(graph.nodes.items())
    ]

    return AnalysisResponse(
        snapshot_id=analysis.snapshot_id,
        centrality_converged=analysis.centrality.converged,
        centrality_iterations=analysis.centrality.iterations,
        diagnostics=DiagnosticsOut(
            edges_received=d.edges_received,
            edges_kept=d.edges_kept,
            duplicate_edges=d.duplicate_edges,
            dropped_empty_path=d.dropped_empty_path,
            dropped_unknown_source=d.dropped_unknown_source,
            reclassified_external=d.reclassified_external,
            reclassified_internal=d.reclassified_internal,
            dropped_blank_nodes=d.dropped_blank_nodes,
            duplicate_nodes=d.duplicate_nodes,
        ),
        circular_groups=[sorted(group) for group in graph.circular_components],
        external_dependencies=sorted(graph.external_nodes),
        files=files,
    )


def _recommendation_response(rec: UserRecommendations) -> RecommendationResponse:
    files: list[FileRecommendationOut] = []
    for path, suit in rec.suitability.items():
        risk = rec.risk[path]
        files.append(
            FileRecommendationOut(
                path=path,
                skill_level=suit.skill_level.label,
                adjusted_complexity=suit.adjusted_complexity,
                suitability=suit.suitability,
                suitability_tier=suit.tier.value,
                risk_score=risk.risk_score,
                risk_tier=risk.tier.value,
                risk_factors=RiskFactorsOut(
                    centrality=risk.centrality_factor,
                    complexity=risk.complexity_factor,
                    skill_gap=risk.skill_gap_factor,
                ),
                high_impact=risk.high_impact,
                high_risk=risk.high_risk,
            )
        )
    files.sort(key=lambda f: (-f.suitability, f.path))

    path = rec.path
    return RecommendationResponse(
        snapshot_id=rec.snapshot_id,
        user_id=rec.user_id,
        files=files,
        path=ContributionPathOut(
            reason=path.reason.value,
            target_length=path.target_length,
            target_met=path.target_met,
            steps=[
                PathStepOut(
                    position=step.position,
                    path=step.path,
                    adjusted_complexity=step.adjusted_complexity,
                    suitability=step.suitability,
                    cognitive_load=step.effort.cognitive_load,
                    estimated_hours=step.effort.bucket.value,
                    depends_on=list(step.depends_on),
                    breaks_cycle=step.breaks_cycle,
                    recent_commit=step.recent_commit,
                    open_issue=step.open_issue,
                )
                for step in path.steps
            ],
            milestones=[
                MilestoneOut(
                    index=m.index, after_step=m.after_step, label=m.label, paths=list(m.paths)
                )
                for m in path.milestones
            ],
        ),
    )


# ── Endpoints ───────────────────────────────────────────────────────────────


@router.post(
    "/analyses",
    response_model=AnalysisResponse,
    responses={422: {"description": "Invalid snapshot id or request body"}},
)
async def analyze(
    body: AnalyzeRequest,
    use_case: AnalyzeRepoUseCase = Depends(get_use_case),
) -> AnalysisResponse:
    """Build the dependency graph and score centrality and complexity."""
    analysis = await use_case.analyze_sources(
        body.snapshot_id,
        sources=[
            SourceFile(
                path=s.path,
                content=s.content,
                language=s.language,
                last_modified=s.last_modified,
                recent_commit=s.recent_commit,
                open_issue=s.open_issue,
            )
            for s in body.sources
        ],
        edges=[DependencyEdge(e.source, e.target, e.external) for e in body.edges],
        files=[_to_file_node(f) for f in body.files],
    )
    return _analysis_response(analysis)


@router.get(
    "/analyses/{snapshot_id}",
    response_model=AnalysisResponse,
    responses={404: {"description": "Snapshot not analysed yet"}},
)
async def get_analysis(
    snapshot_id: str,
    use_case: AnalyzeRepoUseCase = Depends(get_use_case),
) -> AnalysisResponse:
    """Return the stored analysis of a snapshot."""
    return _analysis_response(use_case.get_analysis(snapshot_id))


@router.post(
    "/analyses/{snapshot_id}/recommendations",
    response_model=RecommendationResponse,
    responses={
        404: {"description": "Snapshot not analysed yet"},
        422: {"description": "Invalid skill profile"},
    },
)
async def recommend(
    snapshot_id: str,
    body: RecommendRequest,
    use_case: AnalyzeRepoUseCase = Depends(get_use_case),
) -> RecommendationResponse:
    """Personalised suitability, risk and contribution path for one user."""
    profile = parse_skill_profile(body.user_id, body.skills)
    return _recommendation_response(use_case.recommend(snapshot_id, profile))


@router.get(
    "/analyses/{snapshot_id}/recommendations/{user_id}",
    response_model=RecommendationResponse,
    responses={404: {"description": "No recommendations stored"}},
)
async def get_recommendations(
    snapshot_id: str,
    user_id: str,
    use_case: AnalyzeRepoUseCase = Depends(get_use_case),
) -> RecommendationResponse:
    """Return the last recommendations computed for a user."""
    return _recommendation_response(use_case.get_recommendations(snapshot_id, user_id))
