"""Disjoint-set forest over dense integer indices."""

from __future__ import annotations


class DisjointSet:
    """Union-find with path compression and union by size.

    Elements are the integers ``0..n-1``.  On a size tie the lower root
    index becomes the parent, so the forest shape depends only on the
    order of ``union`` calls.
    """

    def __init__(self, n: int) -> None:
        self.parent = list(range(n))
        self.size = [1] * n

    def __len__(self) -> int:
        return len(self.parent)

    def find(self, i: int) -> int:
        root = i
        while self.parent[root] != root:
            root = self.parent[root]
        # Path compression
        while self.parent[i] != root:
            self.parent[i], i = root, self.parent[i]
        return root

    def union(self, i: int, j: int) -> bool:
        """Merge the sets containing ``i`` and ``j``.

        Returns ``True`` if two distinct sets were merged.
        """
        root_i = self.find(i)
        root_j = self.find(j)
        if root_i == root_j:
            return False

        if self.size[root_i] < self.size[root_j] or (
            self.size[root_i] == self.size[root_j] and root_j < root_i
        ):
            root_i, root_j = root_j, root_i

        self.parent[root_j] = root_i
        self.size[root_i] += self.size[root_j]
        return True

    def connected(self, i: int, j: int) -> bool:
        return self.find(i) == self.find(j)

    def groups(self) -> list[list[int]]:
        """Return all partitions.

        Partitions are ordered by their smallest member; members ascend.
        """
        by_root: dict[int, list[int]] = {}
        for i in range(len(self.parent)):
            by_root.setdefault(self.find(i), []).append(i)
        return list(by_root.values())
