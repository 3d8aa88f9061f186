"""Pydantic request / response DTOs for the API boundary."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


# ── Requests ────────────────────────────────────────────────────────────────


class FunctionMetricsIn(BaseModel):
    name: str
    cyclomatic: int = Field(default=0, ge=0)
    nesting_depth: int = Field(default=0, ge=0)


class FileRecordIn(BaseModel):
    """A file whose structural metrics were already measured upstream."""

    path: str
    language: str = "unknown"
    lines_of_code: int = Field(default=0, ge=0)
    cyclomatic: int = Field(default=0, ge=0)
    nesting_depth: int = Field(default=0, ge=0)
    last_modified: datetime | None = None
    recent_commit: bool = False
    open_issue: bool = False
    functions: list[FunctionMetricsIn] = Field(default_factory=list)


class SourceFileIn(BaseModel):
    """A file given as raw content; metrics are extracted server-side."""

    path: str
    content: str
    language: str | None = None
    last_modified: datetime | None = None
    recent_commit: bool = False
    open_issue: bool = False


class EdgeIn(BaseModel):
    # Empty paths are accepted here and counted as malformed by the graph builder.
    source: str = ""
    target: str = ""
    external: bool = False


class AnalyzeRequest(BaseModel):
    """Request body for ``POST /analyses``."""

    snapshot_id: str
    files: list[FileRecordIn] = Field(default_factory=list)
    sources: list[SourceFileIn] = Field(default_factory=list)
    edges: list[EdgeIn] = Field(default_factory=list)

    @field_validator("snapshot_id")
    @classmethod
    def _must_not_be_blank(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            msg = "snapshot_id must not be empty."
            raise ValueError(msg)
        return stripped


class RecommendRequest(BaseModel):
    """Request body for ``POST /analyses/{snapshot_id}/recommendations``."""

    user_id: str
    skills: dict[str, float] = Field(
        default_factory=dict,
        description="Language → confidence (0.25, 0.5, 0.75 or 1.0).",
    )


# ── Responses ───────────────────────────────────────────────────────────────


class DiagnosticsOut(BaseModel):
    edges_received: int
    edges_kept: int
    duplicate_edges: int
    dropped_empty_path: int
    dropped_unknown_source: int
    reclassified_external: int
    reclassified_internal: int
    dropped_blank_nodes: int
    duplicate_nodes: int


class FileScoreOut(BaseModel):
    path: str
    language: str
    centrality: float
    complexity: float | None
    excluded_as: str | None = None
    high_impact: bool
    circular: bool
    scc_id: int


class AnalysisResponse(BaseModel):
    """Repository-level result of ``POST /analyses``."""

    snapshot_id: str
    centrality_converged: bool
    centrality_iterations: int
    diagnostics: DiagnosticsOut
    circular_groups: list[list[str]]
    external_dependencies: list[str]
    files: list[FileScoreOut]


class RiskFactorsOut(BaseModel):
    centrality: float
    complexity: float
    skill_gap: float


class FileRecommendationOut(BaseModel):
    path: str
    skill_level: str
    adjusted_complexity: float
    suitability: float
    suitability_tier: str
    risk_score: float
    risk_tier: str
    risk_factors: RiskFactorsOut
    high_impact: bool
    high_risk: bool


class PathStepOut(BaseModel):
    position: int
    path: str
    adjusted_complexity: float
    suitability: float
    cognitive_load: int
    estimated_hours: str
    depends_on: list[str]
    breaks_cycle: bool
    recent_commit: bool
    open_issue: bool


class MilestoneOut(BaseModel):
    index: int
    after_step: int
    label: str
    paths: list[str]


class ContributionPathOut(BaseModel):
    reason: str
    target_length: int
    target_met: bool
    steps: list[PathStepOut]
    milestones: list[MilestoneOut]


class RecommendationResponse(BaseModel):
    """Per-user result of ``POST /analyses/{snapshot_id}/recommendations``."""

    snapshot_id: str
    user_id: str
    files: list[FileRecommendationOut]
    path: ContributionPathOut


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    status: str = "error"
    message: str
