"""
Nested reference graph for cycle detection.

Nested references form a directed graph over target-type names: an edge
A -> B exists when some field of A nests B. Nodes are looked up by name, so
cyclic schemas never produce recursive Python structures.
"""

from __future__ import annotations

from ..schema.nodes import TargetRecordType


class NestedReferenceGraph:
    """Directed graph of nested target references, keyed by target name."""

    def __init__(self, targets: list[TargetRecordType]):
        """
        Build the graph.

        Args:
            targets: All target record types of the schema
        """
        self._edges: dict[str, list[str]] = {}
        for target in targets:
            self._edges[target.name] = [f.nested_target_ref for f in target.fields if f.nested_target_ref]

    def successors(self, name: str) -> list[str]:
        return self._edges.get(name, [])

    def can_reach(self, start: str, goal: str) -> bool:
        """Whether ``goal`` is reachable from ``start`` (``start`` itself included)."""
        visited: set[str] = set()
        stack = [start]

        while stack:
            node = stack.pop()
            if node == goal:
                return True
            if node in visited:
                continue
            visited.add(node)
            stack.extend(self.successors(node))

        return False

    def closes_cycle(self, origin: str, nested: str) -> bool:
        """
        Whether the edge ``origin -> nested`` lies on a cycle.

        A target nesting itself directly is a cycle.
        """
        return self.can_reach(nested, origin)
