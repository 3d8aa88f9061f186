"""In-process result store implementing the ResultStore port."""

from __future__ import annotations

import logging
import threading

from contribution_ranker.domain.entities import RepositoryAnalysis, UserRecommendations
from contribution_ranker.domain.value_objects import ResultKey

logger = logging.getLogger(__name__)


class InMemoryResultStore:
    """Keyed store of immutable result sets, owned by the caller.

    Storing under an existing key replaces the previous result; stored
    values themselves are never mutated.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._analyses: dict[ResultKey, RepositoryAnalysis] = {}
        self._recommendations: dict[ResultKey, UserRecommendations] = {}

    def put_analysis(self, key: ResultKey, analysis: RepositoryAnalysis) -> None:
        with self._lock:
            self._analyses[key] = analysis
            # a fresh analysis invalidates recommendations built on the old one
            stale = [k for k in self._recommendations if k.snapshot_id == key.snapshot_id]
            for k in stale:
                del self._recommendations[k]
        logger.debug("Stored analysis for snapshot %s", key.snapshot_id)

    def get_analysis(self, key: ResultKey) -> RepositoryAnalysis | None:
        with self._lock:
            return self._analyses.get(key)

    def put_recommendations(
        self, key: ResultKey, recommendations: UserRecommendations
    ) -> None:
        with self._lock:
            self._recommendations[key] = recommendations

    def get_recommendations(self, key: ResultKey) -> UserRecommendations | None:
        with self._lock:
            return self._recommendations.get(key)

    def clear(self) -> None:
        with self._lock:
            self._analyses.clear()
            self._recommendations.clear()
