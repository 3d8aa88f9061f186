"""Port: source extraction, defined by the domain and implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol

from contribution_ranker.domain.entities import DependencyEdge, FileNode


class SourceExtractor(Protocol):
    """Abstract contract for the collaborator that extracts file records.

    Paths are already canonical; relative-import resolution happens on the
    collaborator's side.
    """

    async def fetch_files(self, snapshot_id: str) -> list[FileNode]:
        """Return one :class:`FileNode` per analysed file."""
        ...

    async def fetch_edges(self, snapshot_id: str) -> list[DependencyEdge]:
        """Return the raw dependency edges between files."""
        ...
