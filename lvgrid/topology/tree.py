"""
Network Tree
============

Arena representation of the radial network. Points are stored by index and
parent/child links are resolved once, at build time, from the string ids.

The source (transformer) is the point with the reserved id 'TRAFO' or, if
there is none, the first point with an empty parent id. Points whose parent
does not resolve stay in the arena but are unreachable from the source and
therefore excluded from accumulation.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from ..models import Point

SOURCE_ID = "TRAFO"


@dataclass
class TreeNode:
    """
    One point of the network.

    Attributes:
        index: Position in the arena (and in the input list)
        point: The input point
        parent: Arena index of the parent, None for the source or unresolved parents
        children: Arena indices of the children, in input order
    """
    index: int
    point: Point
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.point.id


@dataclass
class NetworkTree:
    nodes: List[TreeNode]
    index_of: Dict[str, int]
    source: Optional[int]
    duplicate_ids: List[str] = field(default_factory=list)

    @classmethod
    def build(cls, points: Sequence[Point]) -> "NetworkTree":
        """
        Build the arena in two passes: id map, then parent links.

        Never raises on malformed topologies; use find_cycles() and
        orphans() to inspect them.
        """
        nodes = [TreeNode(index=i, point=p) for i, p in enumerate(points)]

        index_of: Dict[str, int] = {}
        duplicates: List[str] = []
        for node in nodes:
            if node.id in index_of and node.id not in duplicates:
                duplicates.append(node.id)
            index_of[node.id] = node.index

        source = index_of.get(SOURCE_ID)
        if source is None:
            source = next((n.index for n in nodes if not n.point.parent_id), None)

        for node in nodes:
            if node.index == source or not node.point.parent_id:
                continue
            parent = index_of.get(node.point.parent_id)
            if parent is None or parent == node.index:
                continue
            node.parent = parent
            nodes[parent].children.append(node.index)

        return cls(nodes=nodes, index_of=index_of, source=source, duplicate_ids=duplicates)

    def __len__(self) -> int:
        return len(self.nodes)

    def get(self, node_id: str) -> Optional[TreeNode]:
        idx = self.index_of.get(node_id)
        return None if idx is None else self.nodes[idx]

    def preorder(self, start: Optional[int] = None) -> List[int]:
        """Parents before children, siblings in input order. Empty without a source."""
        root = self.source if start is None else start
        if root is None:
            return []

        order: List[int] = []
        visited: Set[int] = set()
        stack = [root]
        while stack:
            idx = stack.pop()
            if idx in visited:
                continue
            visited.add(idx)
            order.append(idx)
            stack.extend(reversed(self.nodes[idx].children))
        return order

    def postorder(self) -> List[int]:
        """Children before parents."""
        return list(reversed(self.preorder()))

    def reachable(self) -> Set[int]:
        return set(self.preorder())

    def orphans(self) -> List[int]:
        """Points that do not hang from the source (including cycle members)."""
        reached = self.reachable()
        return [n.index for n in self.nodes if n.index not in reached]

    def find_cycles(self) -> List[List[str]]:
        """
        Parent-pointer cycles, each as a list of point ids.

        Each point has at most one parent, so following parents from any
        point either ends or enters exactly one cycle.
        """
        state = [0] * len(self.nodes)  # 0 unseen, 1 on current walk, 2 done
        cycles: List[List[str]] = []

        for start in range(len(self.nodes)):
            if state[start]:
                continue
            walk: List[int] = []
            idx: Optional[int] = start
            while idx is not None and state[idx] == 0:
                state[idx] = 1
                walk.append(idx)
                idx = self.nodes[idx].parent
            if idx is not None and state[idx] == 1:
                loop = walk[walk.index(idx):]
                cycles.append([self.nodes[i].id for i in loop])
            for i in walk:
                state[i] = 2

        # Self-references are dropped at build time; report them too
        for node in self.nodes:
            if node.point.parent_id and node.point.parent_id == node.id and node.index != self.source:
                cycles.append([node.id])
        return cycles
