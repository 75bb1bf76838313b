# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Tests for the union-find component tracker."""

import networkx as nx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from sparse_roadmap.spanner import DisjointSets


def _sets(n: int) -> DisjointSets:
    ds = DisjointSets()
    for x in range(n):
        ds.make_set(x)
    return ds


def test_union_by_size_keeps_larger_representative() -> None:
    ds = _sets(6)
    for x in range(1, 5):
        ds.union(0, x)
    big_root = ds.find(3)
    assert ds.size(big_root) == 5
    assert ds.union(5, 2)
    assert ds.find(5) == big_root
    assert ds.size(5) == 6
    assert not ds.union(1, 4)


def test_make_set_requires_dense_ids() -> None:
    ds = _sets(2)
    with pytest.raises(ValueError):
        ds.make_set(5)


def test_components_and_clear() -> None:
    ds = _sets(5)
    ds.union(0, 1)
    ds.union(3, 4)
    ds.union(1, 4)
    assert ds.components() == [{0, 1, 3, 4}, {2}]
    ds.clear()
    assert len(ds) == 0


@settings(max_examples=30, deadline=None)
@given(
    st.integers(min_value=1, max_value=12).flatmap(
        lambda n: st.tuples(
            st.just(n),
            st.lists(st.tuples(st.integers(0, n - 1), st.integers(0, n - 1)), max_size=30),
        )
    )
)
def test_partition_matches_reachability(case) -> None:
    n, edges = case
    ds = _sets(n)
    graph = nx.Graph()
    graph.add_nodes_from(range(n))
    for a, b in edges:
        graph.add_edge(a, b)
        ds.union(a, b)
        for x in range(n):
            for y in range(n):
                assert ds.same(x, y) == nx.has_path(graph, x, y)
