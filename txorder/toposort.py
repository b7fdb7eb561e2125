"""Topological ordering over opaque node identifiers.

Providers take directed edges ``(u, v)`` and return a list in which ``u``
always precedes ``v``. Nodes are considered in the order they first appear
(seed nodes, then edge endpoints), so identical input always gives an
identical result and a graph without edges comes back in its input order.
A cycle raises ``CycleError``; no node is ever left out of the result.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from typing import Hashable, Iterable


class CycleError(ValueError):
    def __init__(self, nodes: list[Hashable]) -> None:
        self.nodes = list(nodes)
        super().__init__(f"Dependency cycle between {len(self.nodes)} node(s): {self.nodes!r}")


def _build_graph(
    edges: Iterable[tuple[Hashable, Hashable]],
    nodes: Iterable[Hashable] = (),
    reverse: bool = False,
) -> dict[Hashable, list[Hashable]]:
    # dict keeps first-appearance order; adjacency lists keep edge order.
    graph: dict[Hashable, list[Hashable]] = {}
    for node in nodes:
        graph.setdefault(node, [])
    for source, target in edges:
        graph.setdefault(source, [])
        graph.setdefault(target, [])
        if reverse:
            graph[target].append(source)
        else:
            graph[source].append(target)
    return graph


class OrderProvider(ABC):
    name = ""

    @abstractmethod
    def order(
        self,
        edges: Iterable[tuple[Hashable, Hashable]],
        nodes: Iterable[Hashable] = (),
    ) -> list[Hashable]:
        raise NotImplementedError


class DepthFirstOrder(OrderProvider):
    """Emit each node after all of its predecessors, visiting nodes in seed order.

    Nodes without in-set predecessors keep their seed order, including when
    some of their edges lead to nodes outside the seed list.
    """

    name = "depth-first"

    def order(
        self,
        edges: Iterable[tuple[Hashable, Hashable]],
        nodes: Iterable[Hashable] = (),
    ) -> list[Hashable]:
        parents = _build_graph(edges, nodes, reverse=True)
        finished: set[Hashable] = set()
        on_path: set[Hashable] = set()
        ordered: list[Hashable] = []

        for root in parents:
            if root in finished:
                continue
            on_path.add(root)
            path: list[Hashable] = [root]
            stack = [(root, iter(parents[root]))]
            while stack:
                current, pending = stack[-1]
                for parent in pending:
                    if parent in finished:
                        continue
                    if parent in on_path:
                        raise CycleError(path[path.index(parent):])
                    on_path.add(parent)
                    path.append(parent)
                    stack.append((parent, iter(parents[parent])))
                    break
                else:
                    stack.pop()
                    path.pop()
                    on_path.discard(current)
                    finished.add(current)
                    ordered.append(current)
        return ordered


class KahnOrder(OrderProvider):
    """Kahn's algorithm with a FIFO queue of ready nodes."""

    name = "kahn"

    def order(
        self,
        edges: Iterable[tuple[Hashable, Hashable]],
        nodes: Iterable[Hashable] = (),
    ) -> list[Hashable]:
        graph = _build_graph(edges, nodes)
        indegree: dict[Hashable, int] = {node: 0 for node in graph}
        for successors in graph.values():
            for succ in successors:
                indegree[succ] += 1

        ready = deque(node for node, degree in indegree.items() if degree == 0)
        ordered: list[Hashable] = []
        while ready:
            current = ready.popleft()
            ordered.append(current)
            for succ in graph[current]:
                indegree[succ] -= 1
                if indegree[succ] == 0:
                    ready.append(succ)

        if len(ordered) != len(graph):
            raise CycleError([node for node, degree in indegree.items() if degree > 0])
        return ordered


PROVIDERS: dict[str, type[OrderProvider]] = {
    "depth-first": DepthFirstOrder,
    "dfs": DepthFirstOrder,
    "kahn": KahnOrder,
}


def get_provider(name: str) -> OrderProvider:
    key = str(name or "").strip().lower()
    try:
        return PROVIDERS[key]()
    except KeyError:
        known = ", ".join(sorted(PROVIDERS))
        raise ValueError(f"Unknown order provider '{name}' (expected one of: {known})") from None
