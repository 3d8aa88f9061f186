"""Port: caller-owned keyed store of immutable result sets."""

from __future__ import annotations

from typing import Protocol

from contribution_ranker.domain.entities import RepositoryAnalysis, UserRecommendations
from contribution_ranker.domain.value_objects import ResultKey


class ResultStore(Protocol):
    """Abstract contract for memoising analysis runs by (snapshot id, user id)."""

    def put_analysis(self, key: ResultKey, analysis: RepositoryAnalysis) -> None:
        ...

    def get_analysis(self, key: ResultKey) -> RepositoryAnalysis | None:
        ...

    def put_recommendations(
        self, key: ResultKey, recommendations: UserRecommendations
    ) -> None:
        ...

    def get_recommendations(self, key: ResultKey) -> UserRecommendations | None:
        ...
