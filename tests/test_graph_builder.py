"""Tests for dependency graph construction."""

from contribution_ranker.domain.entities import DependencyEdge, SkillLevel, SkillProfile
from contribution_ranker.services.complexity import compute_complexity
from contribution_ranker.services.graph_builder import build_graph
from contribution_ranker.services.personalization import personalize


class TestEdgePolicy:
    """Deduplication, external targets and malformed edges."""

    def test_duplicate_edges_collapse(self, make_file):
        files = [make_file("a.py"), make_file("b.py")]
        edges = [DependencyEdge("a.py", "b.py"), DependencyEdge("a.py", "b.py")]

        result = build_graph(files, edges)

        assert len(result.graph.edges) == 1
        assert result.diagnostics.edges_received == 2
        assert result.diagnostics.edges_kept == 1
        assert result.diagnostics.duplicate_edges == 1

    def test_unknown_target_becomes_external(self, make_file):
        files = [make_file("a.py")]
        edges = [DependencyEdge("a.py", "requests")]

        result = build_graph(files, edges)
        graph = result.graph

        assert "requests" in graph.external_nodes
        assert "requests" not in graph.nodes
        assert graph.edges[0].external is True
        assert result.diagnostics.reclassified_external == 1
        assert graph.internal_dependencies("a.py") == []
        assert graph.successors("a.py") == ["requests"]

    def test_flagged_external_but_known_target_stays_internal(self, make_file):
        files = [make_file("a.py"), make_file("b.py")]
        edges = [DependencyEdge("a.py", "b.py", external=True)]

        result = build_graph(files, edges)

        assert result.graph.edges[0].external is False
        assert result.graph.internal_dependencies("a.py") == ["b.py"]
        assert result.diagnostics.reclassified_internal == 1

    def test_empty_paths_are_dropped_and_counted(self, make_file):
        files = [make_file("a.py"), make_file("b.py")]
        edges = [
            DependencyEdge("", "b.py"),
            DependencyEdge("a.py", "   "),
            DependencyEdge("a.py", "b.py"),
        ]

        result = build_graph(files, edges)

        assert result.diagnostics.dropped_empty_path == 2
        assert result.diagnostics.dropped == 2
        assert result.diagnostics.edges_kept == 1

    def test_unknown_source_is_dropped(self, make_file):
        files = [make_file("a.py")]
        edges = [DependencyEdge("ghost.py", "a.py")]

        result = build_graph(files, edges)

        assert result.diagnostics.dropped_unknown_source == 1
        assert result.graph.edges == ()
        assert "ghost.py" not in result.graph.nodes

    def test_self_edge_is_kept_but_not_a_dependency(self, make_file):
        files = [make_file("a.py")]
        result = build_graph(files, [DependencyEdge("a.py", "a.py")])
        graph = result.graph

        assert len(graph.edges) == 1
        assert graph.internal_dependencies("a.py") == []
        assert graph.internal_dependents("a.py") == []
        assert not graph.is_circular("a.py")

    def test_no_edges(self, make_file):
        result = build_graph([make_file("a.py")], [])

        assert result.graph.edges == ()
        assert result.graph.scc_ids["a.py"] == 0
        assert result.diagnostics.edges_received == 0


class TestCycles:
    """Strongly connected components are flagged, never rejected."""

    def test_three_cycle_is_flagged(self, make_graph):
        graph = make_graph([("A", "B"), ("B", "C"), ("C", "A")])

        assert graph.circular_components == (frozenset({"A", "B", "C"}),)
        assert all(edge.circular for edge in graph.edges)
        assert graph.scc_ids["A"] == graph.scc_ids["B"] == graph.scc_ids["C"]
        assert all(graph.is_circular(p) for p in ("A", "B", "C"))

    def test_edges_leaving_the_cycle_are_not_circular(self, make_graph):
        graph = make_graph([("A", "B"), ("B", "A"), ("D", "A")])
        by_pair = {(e.source, e.target): e for e in graph.edges}

        assert by_pair[("A", "B")].circular
        assert by_pair[("B", "A")].circular
        assert not by_pair[("D", "A")].circular
        assert not graph.is_circular("D")
        assert graph.scc_ids["D"] != graph.scc_ids["A"]

    def test_two_separate_cycles(self, make_graph):
        graph = make_graph([("a", "b"), ("b", "a"), ("x", "y"), ("y", "x"), ("b", "x")])

        assert set(graph.circular_components) == {
            frozenset({"a", "b"}),
            frozenset({"x", "y"}),
        }
        assert graph.scc_ids["a"] != graph.scc_ids["x"]

    def test_acyclic_graph_has_no_circular_groups(self, make_graph):
        graph = make_graph([("a", "b"), ("b", "c"), ("a", "c")])

        assert graph.circular_components == ()
        assert len(set(graph.scc_ids.values())) == 3


class TestLookups:
    def test_successors_and_predecessors(self, make_graph):
        graph = make_graph([("a", "b"), ("c", "b")], extra_nodes=["d"])

        assert graph.internal_dependents("b") == ["a", "c"]
        assert graph.internal_dependencies("a") == ["b"]
        assert graph.predecessors("d") == []
        assert graph.successors("unknown") == []

    def test_every_edge_endpoint_is_a_node(self, make_graph):
        graph = make_graph([("a", "b")], external=[("a", "lodash")])

        for edge in graph.edges:
            assert edge.source in graph.nodes
            assert edge.target in graph.nodes or edge.target in graph.external_nodes


class TestFileRecords:
    """Path normalisation for the file list itself."""

    def test_padded_path_is_stored_stripped(self, make_file):
        files = [make_file(" pkg/a.py "), make_file("pkg/b.py")]
        edges = [DependencyEdge("pkg/a.py", "pkg/b.py")]

        graph = build_graph(files, edges).graph

        assert set(graph.nodes) == {"pkg/a.py", "pkg/b.py"}
        assert graph.nodes["pkg/a.py"].path == "pkg/a.py"
        assert graph.internal_dependencies("pkg/a.py") == ["pkg/b.py"]

    def test_padded_file_is_scored_and_personalised(self, make_file):
        profile = SkillProfile(user_id="alice", skills={"python": SkillLevel.EXPERT})
        graph = build_graph([make_file(" pkg/a.py", cyclomatic=4)], []).graph

        complexity = compute_complexity(list(graph.nodes.values()))
        results = personalize(profile, graph.nodes, complexity.scores)

        assert list(complexity.scores) == ["pkg/a.py"]
        assert list(results) == ["pkg/a.py"]

    def test_blank_and_repeated_paths_are_counted(self, make_file):
        files = [make_file("a.py"), make_file("   "), make_file(""), make_file(" a.py")]

        result = build_graph(files, [])

        assert list(result.graph.nodes) == ["a.py"]
        assert result.diagnostics.dropped_blank_nodes == 2
        assert result.diagnostics.duplicate_nodes == 1
        assert result.diagnostics.dropped == 0
