"""Tests for closure and topological ordering."""

import random

import pytest

from graph.ordering import DependencyGraph
from resolution.errors import CyclicDependency, UnknownModule
from helpers import make_registry


@pytest.fixture
def diamond():
    # d -> b -> a, d -> c -> a; e stands alone
    return DependencyGraph(make_registry(
        "a",
        ("b", ["a"]),
        ("c", ["a"]),
        ("d", ["b", "c"]),
        "e",
    ))


class TestCloseUnder:
    """Transitive dependency closure."""

    def test_diamond(self, diamond):
        assert diamond.close_under({"d"}) == frozenset({"a", "b", "c", "d"})

    def test_closed_seed_unchanged(self, diamond):
        assert diamond.close_under({"a", "e"}) == frozenset({"a", "e"})

    def test_empty(self, diamond):
        assert diamond.close_under(set()) == frozenset()

    def test_unknown(self, diamond):
        with pytest.raises(UnknownModule):
            diamond.close_under({"zzz"})

    def test_long_chain(self):
        specs = ["m0"] + [(f"m{i}", [f"m{i - 1}"]) for i in range(1, 3000)]
        graph = DependencyGraph(make_registry(*specs))
        assert len(graph.close_under({"m2999"})) == 3000


class TestOrder:
    """Deterministic topological sort."""

    def test_dependencies_first(self, diamond):
        assert diamond.order({"a", "b", "c", "d", "e"}) == ["a", "b", "c", "d", "e"]

    def test_dependencies_outside_set_ignored(self, diamond):
        assert diamond.order({"d", "b"}) == ["b", "d"]

    def test_registration_order_breaks_ties(self):
        graph = DependencyGraph(make_registry("zeta", "alpha", "mid"))
        assert graph.order({"alpha", "mid", "zeta"}) == ["zeta", "alpha", "mid"]

    def test_later_registered_dependency_moves_ahead(self):
        graph = DependencyGraph(make_registry("x", "late", ("first", ["late"])))
        # 'first' waits for 'late'; ties among ready modules follow registration order.
        assert graph.order({"x", "late", "first"}) == ["x", "late", "first"]

    def test_input_order_irrelevant(self, diamond):
        ids = ["a", "b", "c", "d", "e"]
        expected = diamond.order(ids)
        rng = random.Random(7)
        for _ in range(20):
            rng.shuffle(ids)
            assert diamond.order(list(ids)) == expected
            assert diamond.order(set(ids)) == expected

    def test_no_duplicates(self, diamond):
        assert diamond.order(["a", "a", "b"]) == ["a", "b"]

    def test_unknown(self, diamond):
        with pytest.raises(UnknownModule):
            diamond.order({"a", "nope"})


class TestCycles:
    """Cycles are reported with their path, never truncated."""

    def test_two_cycle(self):
        graph = DependencyGraph(make_registry(("a", ["b"]), ("b", ["a"]), check_cycles=False))
        with pytest.raises(CyclicDependency) as exc_info:
            graph.order({"a", "b"})
        assert exc_info.value.cycle == ["a", "b", "a"]
        assert "a -> b -> a" in str(exc_info.value)

    def test_cycle_reached_through_other_module(self):
        graph = DependencyGraph(make_registry(
            ("c", ["a"]), ("a", ["b"]), ("b", ["a"]), check_cycles=False,
        ))
        with pytest.raises(CyclicDependency) as exc_info:
            graph.order({"a", "b", "c"})
        assert exc_info.value.cycle == ["a", "b", "a"]

    def test_cycle_outside_candidates_ignored(self):
        graph = DependencyGraph(make_registry(("a", ["b"]), ("b", ["a"]), "c", check_cycles=False))
        assert graph.order({"a", "c"}) == ["a", "c"]

    def test_self_loop(self):
        graph = DependencyGraph(make_registry(("a", ["a"]), check_cycles=False))
        with pytest.raises(CyclicDependency) as exc_info:
            graph.check_acyclic()
        assert exc_info.value.cycle == ["a", "a"]
