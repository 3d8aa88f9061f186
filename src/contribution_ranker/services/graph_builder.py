"""Dependency graph construction with cycle detection.

Turns the extraction collaborator's raw ``(source, target, external)``
triples into a :class:`DependencyGraph`.  Input defects never abort the
build: they are counted in a :class:`GraphDiagnostics` report returned
alongside the graph.  Strongly connected components are computed exactly
once here, so cycle queries later are plain lookups.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from types import MappingProxyType
from typing import Iterable, Sequence

import networkx as nx  # type: ignore[import-untyped]

from contribution_ranker.domain.entities import (
    DependencyEdge,
    DependencyGraph,
    FileNode,
    GraphBuildResult,
    GraphDiagnostics,
    GraphEdge,
)

logger = logging.getLogger(__name__)


def _assign_scc_ids(
    internal: nx.DiGraph,  # type: ignore[type-arg]
) -> tuple[dict[str, int], list[frozenset[str]]]:
    """Return ``{path: scc_id}`` and the list of components, ordered by smallest path.

    networkx's ``strongly_connected_components`` is a non-recursive Tarjan
    variant: a single O(V+E) pass, safe on deep graphs.
    """
    components = sorted(
        (frozenset(c) for c in nx.strongly_connected_components(internal)),
        key=min,
    )
    scc_ids: dict[str, int] = {}
    for idx, component in enumerate(components):
        for path in component:
            scc_ids[path] = idx
    return scc_ids, components


def build_graph(
    nodes: Sequence[FileNode],
    edges: Iterable[DependencyEdge],
) -> GraphBuildResult:
    """Build the dependency graph for one analysis run.

    Policy:

    * file paths are stripped; a blank path is skipped and counted, and
      a repeated path keeps its first record;
    * duplicate ``(source, target)`` pairs collapse to one edge;
    * an edge with an empty source or target is dropped and counted;
    * an edge whose source is not a known file is dropped and counted;
    * a target that is not a known file becomes a synthetic external node;
    * a target flagged external that *is* a known file stays internal;
    * every edge inside a strongly connected component of size > 1 is
      tagged ``circular`` but kept.
    """
    file_map: dict[str, FileNode] = {}
    blank_nodes = 0
    duplicate_nodes = 0
    for node in nodes:
        path = node.path.strip()
        if not path:
            blank_nodes += 1
        elif path in file_map:
            duplicate_nodes += 1
        else:
            # downstream maps are keyed by node.path, so it must match the key
            file_map[path] = node if node.path == path else replace(node, path=path)

    graph: nx.DiGraph = nx.DiGraph()  # type: ignore[type-arg]
    graph.add_nodes_from(sorted(file_map), external=False)

    received = 0
    duplicates = 0
    dropped_empty = 0
    dropped_unknown = 0
    to_external = 0
    to_internal = 0
    externals: set[str] = set()

    for edge in edges:
        received += 1
        source = (edge.source or "").strip()
        target = (edge.target or "").strip()

        if not source or not target:
            dropped_empty += 1
            continue
        if source not in file_map:
            dropped_unknown += 1
            continue

        if graph.has_edge(source, target):
            duplicates += 1
            continue

        is_external = target not in file_map
        if is_external and not edge.external:
            to_external += 1
        elif not is_external and edge.external:
            to_internal += 1

        if is_external:
            externals.add(target)
            graph.add_node(target, external=True)
        graph.add_edge(source, target, external=is_external)

    internal_view = graph.subgraph(file_map)
    scc_ids, components = _assign_scc_ids(internal_view)
    circular = tuple(c for c in components if len(c) > 1)
    circular_ids = frozenset(scc_ids[min(c)] for c in circular)

    built_edges: list[GraphEdge] = []
    for source, target, data in sorted(graph.edges(data=True), key=lambda e: (e[0], e[1])):
        external = bool(data.get("external", False))
        in_cycle = (
            not external
            and scc_ids[source] == scc_ids[target]
            and scc_ids[source] in circular_ids
        )
        graph.edges[source, target]["circular"] = in_cycle
        built_edges.append(
            GraphEdge(source=source, target=target, external=external, circular=in_cycle)
        )

    diagnostics = GraphDiagnostics(
        edges_received=received,
        edges_kept=len(built_edges),
        duplicate_edges=duplicates,
        dropped_empty_path=dropped_empty,
        dropped_unknown_source=dropped_unknown,
        reclassified_external=to_external,
        reclassified_internal=to_internal,
        dropped_blank_nodes=blank_nodes,
        duplicate_nodes=duplicate_nodes,
    )

    if diagnostics.dropped:
        logger.warning(
            "Dropped %d malformed edge(s) (%d empty path, %d unknown source)",
            diagnostics.dropped,
            dropped_empty,
            dropped_unknown,
        )
    if blank_nodes or duplicate_nodes:
        logger.warning(
            "Ignored %d file record(s) with an empty path and %d repeated path(s)",
            blank_nodes,
            duplicate_nodes,
        )
    if circular:
        logger.info(
            "Detected %d circular dependency group(s) covering %d file(s)",
            len(circular),
            sum(len(c) for c in circular),
        )

    dependency_graph = DependencyGraph(
        nodes=MappingProxyType(file_map),
        external_nodes=frozenset(externals),
        edges=tuple(built_edges),
        scc_ids=MappingProxyType(scc_ids),
        circular_components=circular,
        circular_scc_ids=circular_ids,
        _graph=nx.freeze(graph),
    )
    return GraphBuildResult(graph=dependency_graph, diagnostics=diagnostics)
