from __future__ import annotations

import random
import unittest

from txorder.toposort import PROVIDERS, CycleError, DepthFirstOrder, KahnOrder, get_provider


PROVIDER_CLASSES = (DepthFirstOrder, KahnOrder)


def _assert_respects(test: unittest.TestCase, order: list, edges: list[tuple]) -> None:
    position = {node: index for index, node in enumerate(order)}
    for source, target in edges:
        test.assertLess(position[source], position[target], f"{source} must precede {target}")


class OrderProviderTest(unittest.TestCase):
    def test_edges_are_respected(self) -> None:
        edges = [("d", "b"), ("b", "a"), ("c", "a"), ("d", "c"), ("e", "d")]
        for cls in PROVIDER_CLASSES:
            with self.subTest(provider=cls.name):
                order = cls().order(edges)
                self.assertCountEqual(order, ["a", "b", "c", "d", "e"])
                _assert_respects(self, order, edges)

    def test_no_edges_keeps_seed_order(self) -> None:
        nodes = ["tx3", "tx1", "tx2", "tx0"]
        for cls in PROVIDER_CLASSES:
            with self.subTest(provider=cls.name):
                self.assertEqual(cls().order([], nodes=nodes), nodes)

    def test_unrelated_seed_nodes_keep_their_order_around_edges(self) -> None:
        for cls in PROVIDER_CLASSES:
            with self.subTest(provider=cls.name):
                order = cls().order([("b", "a")], nodes=["a", "b", "c"])
                self.assertEqual(len(order), 3)
                _assert_respects(self, order, [("b", "a")])
                self.assertIn("c", order)

    def test_edge_only_nodes_are_included(self) -> None:
        for cls in PROVIDER_CLASSES:
            with self.subTest(provider=cls.name):
                order = cls().order([("child", "outside")], nodes=["child"])
                self.assertEqual(order, ["child", "outside"])

    def test_chain_has_single_order(self) -> None:
        edges = [("c", "b"), ("b", "a")]
        for cls in PROVIDER_CLASSES:
            with self.subTest(provider=cls.name):
                self.assertEqual(cls().order(edges, nodes=["a", "b", "c"]), ["c", "b", "a"])

    def test_long_chain_does_not_recurse(self) -> None:
        edges = [(i, i + 1) for i in range(5000)]
        for cls in PROVIDER_CLASSES:
            with self.subTest(provider=cls.name):
                self.assertEqual(cls().order(edges), list(range(5001)))

    def test_deterministic_for_same_input(self) -> None:
        rng = random.Random(91)
        nodes = [f"n{i}" for i in range(40)]
        edges = []
        for i in range(1, len(nodes)):
            for j in rng.sample(range(i), k=min(i, 2)):
                edges.append((nodes[i], nodes[j]))
        for cls in PROVIDER_CLASSES:
            with self.subTest(provider=cls.name):
                first = cls().order(edges, nodes=nodes)
                second = cls().order(list(edges), nodes=list(nodes))
                self.assertEqual(first, second)
                _assert_respects(self, first, edges)

    def test_cycle_raises_instead_of_dropping(self) -> None:
        edges = [("a", "b"), ("b", "c"), ("c", "a"), ("d", "a")]
        for cls in PROVIDER_CLASSES:
            with self.subTest(provider=cls.name):
                with self.assertRaises(CycleError) as ctx:
                    cls().order(edges)
                self.assertTrue({"a", "b", "c"} <= set(ctx.exception.nodes))
                self.assertIsInstance(ctx.exception, ValueError)

    def test_self_loop_is_a_cycle(self) -> None:
        for cls in PROVIDER_CLASSES:
            with self.subTest(provider=cls.name):
                with self.assertRaises(CycleError) as ctx:
                    cls().order([("a", "a")])
                self.assertEqual(ctx.exception.nodes, ["a"])

    def test_get_provider(self) -> None:
        self.assertIsInstance(get_provider("depth-first"), DepthFirstOrder)
        self.assertIsInstance(get_provider("DFS"), DepthFirstOrder)
        self.assertIsInstance(get_provider(" kahn "), KahnOrder)
        self.assertIn("kahn", PROVIDERS)
        with self.assertRaises(ValueError):
            get_provider("bogo")


if __name__ == "__main__":
    unittest.main()
