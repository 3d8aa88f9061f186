"""Tests for the PageRank centrality calculator."""

import random

import pytest

from contribution_ranker.domain.cancellation import CancellationToken
from contribution_ranker.domain.entities import DependencyEdge
from contribution_ranker.services.centrality import compute_centrality, is_high_impact
from contribution_ranker.services.graph_builder import build_graph


class TestBounds:
    def test_scores_stay_in_range(self, make_graph):
        rng = random.Random(7)
        nodes = [f"n{i}" for i in range(25)]
        pairs = {(rng.choice(nodes), rng.choice(nodes)) for _ in range(70)}
        graph = make_graph(pairs, extra_nodes=nodes)

        result = compute_centrality(graph)

        assert result.scores
        assert all(0.0 <= v <= 100.0 for v in result.scores.values())
        assert max(result.scores.values()) == pytest.approx(100.0)

    def test_isolated_nodes_score_zero(self, make_graph):
        graph = make_graph([("a", "b"), ("c", "c")], extra_nodes=["lonely"])

        result = compute_centrality(graph)

        assert result.scores["lonely"] == 0.0
        # a self-loop alone does not connect a node
        assert result.scores["c"] == 0.0
        assert result.scores["b"] > 0.0

    def test_external_only_node_scores_zero(self, make_graph):
        graph = make_graph([], extra_nodes=["a"], external=[("a", "numpy")])

        result = compute_centrality(graph)

        assert dict(result.scores) == {"a": 0.0}

    def test_empty_graph(self, make_graph):
        result = compute_centrality(make_graph([]))

        assert dict(result.scores) == {}
        assert result.converged


class TestSymmetry:
    def test_three_cycle_scores_equal_and_nonzero(self, make_graph):
        graph = make_graph([("A", "B"), ("B", "C"), ("C", "A")])

        result = compute_centrality(graph)

        assert result.converged
        assert result.scores["A"] == result.scores["B"] == result.scores["C"]
        assert result.scores["A"] > 0.0

    def test_structural_twins_are_identical_under_any_edge_order(self, make_file):
        pairs = [
            ("hub", "x"), ("hub", "y"),
            ("x", "sink"), ("y", "sink"),
            ("z", "hub"), ("sink", "z"), ("w", "x"), ("w", "y"),
        ]
        files = [make_file(p) for p in ["hub", "x", "y", "sink", "z", "w"]]
        rng = random.Random(3)

        results = []
        for _ in range(5):
            shuffled = pairs[:]
            rng.shuffle(shuffled)
            graph = build_graph(files, [DependencyEdge(s, t) for s, t in shuffled]).graph
            results.append(compute_centrality(graph))

        for result in results:
            assert result.scores["x"] == result.scores["y"]
            assert result.raw_scores["x"] == result.raw_scores["y"]
        assert all(dict(r.scores) == dict(results[0].scores) for r in results)

    def test_sink_of_a_star_ranks_highest(self, make_graph):
        graph = make_graph([("a", "core"), ("b", "core"), ("c", "core")])

        result = compute_centrality(graph)

        assert result.scores["core"] == pytest.approx(100.0)
        assert result.scores["a"] < result.scores["core"]


class TestDenominator:
    def test_external_targets_do_not_dilute_out_degree(self, make_graph):
        plain = make_graph([("a", "b")])
        with_external = make_graph([("a", "b")], external=[("a", "left-pad")])

        first = compute_centrality(plain)
        second = compute_centrality(with_external)

        assert dict(first.raw_scores) == dict(second.raw_scores)

    def test_fixed_point_values(self, make_graph):
        graph = make_graph([("a", "b")])

        result = compute_centrality(graph)

        # a has no inbound edges: PR(a) = 0.15; PR(b) = 0.15 + 0.85 * 0.15
        assert result.raw_scores["a"] == pytest.approx(0.15)
        assert result.raw_scores["b"] == pytest.approx(0.2775)
        assert result.scores["b"] == pytest.approx(100.0)
        assert result.scores["a"] == pytest.approx(0.15 / 0.2775 * 100.0)


class TestConvergence:
    def test_iteration_cap_returns_best_effort(self, make_graph):
        graph = make_graph([("a", "b"), ("b", "c")])

        result = compute_centrality(graph, max_iterations=1)

        assert not result.converged
        assert result.iterations == 1
        assert result.max_delta >= 0.001
        assert all(0.0 <= v <= 100.0 for v in result.scores.values())

    def test_converges_within_default_cap(self, make_graph):
        graph = make_graph([("a", "b"), ("b", "c"), ("c", "a"), ("d", "a")])

        result = compute_centrality(graph)

        assert result.converged
        assert result.iterations <= 100
        assert result.max_delta < 0.001

    def test_cancelled_before_first_round(self, make_graph):
        token = CancellationToken()
        token.cancel()

        result = compute_centrality(make_graph([("a", "b")]), cancel=token)

        assert result.cancelled
        assert not result.converged
        assert result.iterations == 0
        assert set(result.scores) == {"a", "b"}

    def test_cancelled_mid_run_keeps_completed_rounds(self, make_graph):
        class _CancelAfter(CancellationToken):
            def __init__(self, checks: int) -> None:
                super().__init__()
                self._left = checks

            @property
            def cancelled(self) -> bool:
                self._left -= 1
                return self._left < 0

        graph = make_graph([("a", "b"), ("b", "c"), ("c", "a"), ("d", "a")])

        result = compute_centrality(graph, tolerance=1e-12, cancel=_CancelAfter(3))

        assert result.cancelled
        assert result.iterations == 3


def test_high_impact_threshold():
    assert is_high_impact(80.5)
    assert not is_high_impact(80.0)
    assert not is_high_impact(10.0)
