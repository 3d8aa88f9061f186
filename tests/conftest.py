"""Pytest configuration and fixtures for Contribution Ranker tests."""

from typing import Callable, Generator, Iterable

import pytest
from fastapi.testclient import TestClient

from contribution_ranker.domain.entities import (
    DependencyEdge,
    DependencyGraph,
    FileNode,
    SkillLevel,
    SuitabilityScore,
)
from contribution_ranker.infrastructure.config import Settings
from contribution_ranker.infrastructure.memory_store import InMemoryResultStore
from contribution_ranker.interface.app import create_app
from contribution_ranker.services.analyze_repo import AnalyzeRepoUseCase
from contribution_ranker.services.graph_builder import build_graph
from contribution_ranker.services.scoring import tier_for


@pytest.fixture
def make_file() -> Callable[..., FileNode]:
    """Factory for source file records with sensible defaults."""

    def _make(path: str, **kwargs) -> FileNode:
        kwargs.setdefault("language", "python")
        return FileNode(path=path, **kwargs)

    return _make


@pytest.fixture
def make_graph(make_file) -> Callable[..., DependencyGraph]:
    """Build a graph from ``(source, target)`` pairs; every named path becomes a file."""

    def _make(
        pairs: Iterable[tuple[str, str]],
        extra_nodes: Iterable[str] = (),
        external: Iterable[tuple[str, str]] = (),
    ) -> DependencyGraph:
        pairs = list(pairs)
        external = list(external)
        paths = sorted(
            {p for pair in pairs for p in pair}
            | set(extra_nodes)
            | {s for s, _ in external}
        )
        edges = [DependencyEdge(s, t) for s, t in pairs]
        edges += [DependencyEdge(s, t, external=True) for s, t in external]
        return build_graph([make_file(p) for p in paths], edges).graph

    return _make


@pytest.fixture
def make_suitability() -> Callable[..., SuitabilityScore]:
    def _make(
        path: str,
        adjusted: float,
        suitability: float = 0.9,
        level: SkillLevel = SkillLevel.ADVANCED,
        user_id: str = "alice",
    ) -> SuitabilityScore:
        return SuitabilityScore(
            user_id=user_id,
            path=path,
            suitability=suitability,
            tier=tier_for(suitability),
            adjusted_complexity=adjusted,
            skill_level=level,
            adjustment_factor=level.factor,
        )

    return _make


@pytest.fixture
def settings() -> Settings:
    return Settings(min_path_length=3, max_path_length=6)


@pytest.fixture
def store() -> InMemoryResultStore:
    return InMemoryResultStore()


@pytest.fixture
def use_case(store: InMemoryResultStore, settings: Settings) -> AnalyzeRepoUseCase:
    return AnalyzeRepoUseCase(store=store, settings=settings)


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Test client with the app lifespan (result store) running."""
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def sample_python_code() -> str:
    """Sample Python module for the metrics extractor."""
    return '''"""Sample module."""

import sys


def classify(x):
    if x > 0:
        for i in range(x):
            if i % 2 and x:
                print(i)
    elif x < 0:
        return -1
    else:
        return 0
    return 1


class Worker:
    def run(self, items):
        while items:
            items.pop()


def outer():
    def inner(flag):
        if flag:
            return 1
        return 0
    return inner


if __name__ == "__main__":
    classify(int(sys.argv[1]))
'''
