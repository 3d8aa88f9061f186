"""Domain entities: pure data structures with no behaviour beyond lookups."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Mapping

import networkx as nx  # type: ignore[import-untyped]


class FileCategory(str, Enum):
    """Classification bucket for repository files."""

    SOURCE = "source"
    TEST = "test"
    CONFIG = "config"
    GENERATED = "generated"
    DOCS = "docs"


class SkillLevel(Enum):
    """Fixed skill table: each level carries its confidence and complexity factor."""

    EXPERT = ("expert", 1.0, 0.6)
    ADVANCED = ("advanced", 0.75, 0.75)
    INTERMEDIATE = ("intermediate", 0.5, 0.9)
    BEGINNER = ("beginner", 0.25, 1.0)
    NONE = ("none", 0.0, 1.2)

    def __init__(self, label: str, confidence: float, factor: float) -> None:
        self.label = label
        self.confidence = confidence
        self.factor = factor

    @classmethod
    def from_confidence(cls, confidence: float) -> SkillLevel:
        """Return the level whose confidence equals *confidence* exactly."""
        for level in cls:
            if level is not cls.NONE and level.confidence == confidence:
                return level
        raise ValueError(f"Unsupported skill confidence: {confidence!r}")


class Tier(str, Enum):
    """Coarse three-way bucket shared by suitability and risk."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EffortBucket(str, Enum):
    """Hour range for one learning-path step."""

    SMALL = "1-2h"
    MEDIUM = "3-6h"
    LARGE = ">6h"


class PathReason(str, Enum):
    """Why a contribution path has the length it has."""

    COMPLETE = "complete"
    CANDIDATES_EXHAUSTED = "candidates_exhausted"
    NO_CANDIDATES = "no_candidates"


# ── Input records ───────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class FunctionMetrics:
    """Structural metrics of a single function (or module body)."""

    name: str
    cyclomatic: int
    nesting_depth: int


@dataclass(frozen=True, slots=True)
class FileNode:
    """One analysed file as supplied by the source extraction collaborator."""

    path: str
    language: str = "unknown"
    lines_of_code: int = 0
    cyclomatic: int = 0
    nesting_depth: int = 0
    last_modified: datetime | None = None
    recent_commit: bool = False
    open_issue: bool = False
    functions: tuple[FunctionMetrics, ...] = ()


@dataclass(frozen=True, slots=True)
class SourceFile:
    """Raw file content handed in when metrics still have to be extracted."""

    path: str
    content: str
    language: str | None = None
    last_modified: datetime | None = None
    recent_commit: bool = False
    open_issue: bool = False


@dataclass(frozen=True, slots=True)
class DependencyEdge:
    """Raw ``source → target`` reference; *external* targets live outside the repo."""

    source: str
    target: str
    external: bool = False


# ── Graph ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class GraphEdge:
    """A deduplicated edge of the built graph."""

    source: str
    target: str
    external: bool
    circular: bool


@dataclass(frozen=True, slots=True)
class GraphDiagnostics:
    """Counts of input defects found while building the graph."""

    edges_received: int = 0
    edges_kept: int = 0
    duplicate_edges: int = 0
    dropped_empty_path: int = 0
    dropped_unknown_source: int = 0
    reclassified_external: int = 0
    reclassified_internal: int = 0
    dropped_blank_nodes: int = 0
    duplicate_nodes: int = 0

    @property
    def dropped(self) -> int:
        return self.dropped_empty_path + self.dropped_unknown_source


@dataclass(frozen=True, slots=True)
class DependencyGraph:
    """Internal file nodes, synthetic external nodes and the deduplicated edges.

    The networkx ``DiGraph`` keeps a successor and a predecessor map, so
    neighbour lookups in both directions are O(1) amortized.  SCC ids are
    computed once at build time.
    """

    nodes: Mapping[str, FileNode]
    external_nodes: frozenset[str]
    edges: tuple[GraphEdge, ...]
    scc_ids: Mapping[str, int]
    circular_components: tuple[frozenset[str], ...]
    circular_scc_ids: frozenset[int]
    _graph: nx.DiGraph = field(repr=False, compare=False)  # type: ignore[type-arg]

    def is_internal(self, path: str) -> bool:
        return path in self.nodes

    def successors(self, path: str) -> list[str]:
        """All targets of *path*, external ones included."""
        if path not in self._graph:
            return []
        return list(self._graph.successors(path))

    def predecessors(self, path: str) -> list[str]:
        if path not in self._graph:
            return []
        return list(self._graph.predecessors(path))

    def internal_dependencies(self, path: str) -> list[str]:
        """Internal files *path* depends on, self-edges excluded, sorted."""
        return sorted(
            t for t in self.successors(path) if t != path and t in self.nodes
        )

    def internal_dependents(self, path: str) -> list[str]:
        return sorted(
            s for s in self.predecessors(path) if s != path and s in self.nodes
        )

    def is_circular(self, path: str) -> bool:
        """True when *path* sits in a strongly connected component of size > 1."""
        return self.scc_ids.get(path, -1) in self.circular_scc_ids


@dataclass(frozen=True, slots=True)
class GraphBuildResult:
    """Built graph plus the diagnostics report returned alongside it."""

    graph: DependencyGraph
    diagnostics: GraphDiagnostics


# ── Scores ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class CentralityResult:
    """Normalised centrality (0-100) per internal file."""

    scores: Mapping[str, float]
    raw_scores: Mapping[str, float]
    converged: bool
    iterations: int
    max_delta: float
    cancelled: bool = False


@dataclass(frozen=True, slots=True)
class ComplexityResult:
    """Complexity (0-100) per rankable file; excluded files carry no score."""

    scores: Mapping[str, float]
    excluded: Mapping[str, FileCategory]
    batches_completed: int
    cancelled: bool = False


@dataclass(frozen=True, slots=True)
class SkillProfile:
    """Language → skill level for one user.  Absent language means no skill."""

    user_id: str
    skills: Mapping[str, SkillLevel] = field(default_factory=dict)

    def level_for(self, language: str) -> SkillLevel:
        return self.skills.get(language.strip().lower(), SkillLevel.NONE)


@dataclass(frozen=True, slots=True)
class SuitabilityScore:
    """How well one file matches one user's skills."""

    user_id: str
    path: str
    suitability: float
    tier: Tier
    adjusted_complexity: float
    skill_level: SkillLevel
    adjustment_factor: float


@dataclass(frozen=True, slots=True)
class RiskAssessment:
    """Contribution risk of one file for one user, with its raw factors."""

    user_id: str
    path: str
    risk_score: float
    tier: Tier
    centrality_factor: float
    complexity_factor: float
    skill_gap_factor: float
    high_impact: bool

    @property
    def high_risk(self) -> bool:
        return self.tier is Tier.HIGH


# ── Contribution path ───────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class EffortEstimate:
    """Cognitive load (1-10) and its hour bucket."""

    cognitive_load: int
    bucket: EffortBucket


@dataclass(frozen=True, slots=True)
class PathStep:
    """One file of the learning path."""

    position: int
    path: str
    adjusted_complexity: float
    suitability: float
    effort: EffortEstimate
    depends_on: tuple[str, ...] = ()
    breaks_cycle: bool = False
    recent_commit: bool = False
    open_issue: bool = False


@dataclass(frozen=True, slots=True)
class Milestone:
    """Marker placed after a group of steps."""

    index: int
    after_step: int
    label: str
    paths: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ContributionPath:
    """Ordered, dependency-respecting learning sequence for one user."""

    user_id: str
    steps: tuple[PathStep, ...]
    milestones: tuple[Milestone, ...]
    reason: PathReason
    target_length: int

    @property
    def paths(self) -> list[str]:
        return [s.path for s in self.steps]

    @property
    def target_met(self) -> bool:
        return len(self.steps) >= self.target_length


# ── Aggregates ──────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class RepositoryAnalysis:
    """Per-snapshot result set: graph, centrality and complexity."""

    snapshot_id: str
    graph: DependencyGraph
    diagnostics: GraphDiagnostics
    centrality: CentralityResult
    complexity: ComplexityResult


@dataclass(frozen=True, slots=True)
class UserRecommendations:
    """Per-(snapshot, user) result set."""

    snapshot_id: str
    user_id: str
    suitability: Mapping[str, SuitabilityScore]
    risk: Mapping[str, RiskAssessment]
    path: ContributionPath
