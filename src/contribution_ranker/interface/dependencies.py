"""FastAPI dependency injection wiring."""

from __future__ import annotations

from contribution_ranker.infrastructure.config import get_settings
from contribution_ranker.infrastructure.memory_store import InMemoryResultStore
from contribution_ranker.services.analyze_repo import AnalyzeRepoUseCase

_store: InMemoryResultStore | None = None


async def startup() -> None:
    """Initialise shared resources; called from the lifespan context manager."""
    global _store  # noqa: PLW0603
    _store = InMemoryResultStore()


async def shutdown() -> None:
    """Release shared resources."""
    global _store  # noqa: PLW0603
    if _store is not None:
        _store.clear()
        _store = None


def get_use_case() -> AnalyzeRepoUseCase:
    """Build the use case around the shared result store."""
    assert _store is not None, "startup() was not called"
    return AnalyzeRepoUseCase(store=_store, settings=get_settings())
