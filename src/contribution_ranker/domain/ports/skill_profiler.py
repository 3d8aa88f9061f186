"""Port: skill profiling, defined by the domain and implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol

from contribution_ranker.domain.entities import SkillProfile


class SkillProfiler(Protocol):
    """Abstract contract for the collaborator that resolves user skills."""

    async def fetch_profile(self, user_id: str) -> SkillProfile:
        """Return the language → skill level profile for *user_id*."""
        ...
