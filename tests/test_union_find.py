"""Tests for the disjoint-set forest."""

from keyword_clusters.clustering.union_find import DisjointSet


def test_starts_as_singletons():
    ds = DisjointSet(4)
    assert ds.groups() == [[0], [1], [2], [3]]


def test_union_and_find():
    ds = DisjointSet(5)
    assert ds.union(0, 1) is True
    assert ds.union(3, 4) is True
    assert ds.connected(0, 1)
    assert not ds.connected(1, 3)
    assert ds.groups() == [[0, 1], [2], [3, 4]]


def test_union_of_connected_elements_is_noop():
    ds = DisjointSet(3)
    ds.union(0, 1)
    assert ds.union(1, 0) is False
    assert ds.size[ds.find(0)] == 2


def test_transitive_union():
    ds = DisjointSet(4)
    ds.union(0, 1)
    ds.union(2, 3)
    ds.union(1, 3)
    assert ds.groups() == [[0, 1, 2, 3]]
    assert ds.size[ds.find(2)] == 4


def test_groups_ordered_by_smallest_member():
    ds = DisjointSet(6)
    ds.union(5, 2)
    ds.union(4, 0)
    assert ds.groups() == [[0, 4], [1], [2, 5], [3]]


def test_path_compression_flattens_chain():
    ds = DisjointSet(6)
    for i in range(5):
        ds.union(i, i + 1)
    root = ds.find(5)
    assert all(ds.parent[i] == root for i in range(6))
