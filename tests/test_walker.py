"""Tests for design_pipeline.extraction.walker."""

from design_pipeline.extraction.walker import iter_tree, walk_tree
from design_pipeline.models import DesignNode


def _tree():
    return DesignNode.from_api({
        "id": "root",
        "type": "FRAME",
        "children": [
            {"id": "a", "type": "FRAME", "children": [{"id": "a1"}, {"id": "a2"}]},
            {"id": "b", "type": "TEXT"},
        ],
    })


class TestWalkTree:

    def test_pre_order_sibling_order(self):
        visited = []
        count = walk_tree(_tree(), lambda node, ctx: visited.append(node.id))
        assert visited == ["root", "a", "a1", "a2", "b"]
        assert count == 5

    def test_depth_and_parent(self):
        contexts = {node.id: ctx for node, ctx in iter_tree(_tree())}
        assert contexts["root"].depth == 0
        assert contexts["root"].parent is None
        assert contexts["a2"].depth == 2
        assert contexts["a2"].parent.id == "a"
        assert contexts["b"].parent.id == "root"

    def test_missing_tree_is_zero_nodes(self):
        visited = []
        assert walk_tree(None, lambda node, ctx: visited.append(node)) == 0
        assert visited == []

    def test_missing_children_is_leaf(self):
        node = DesignNode.from_api({"id": "leaf", "type": "RECTANGLE"})
        assert [n.id for n, _ in iter_tree(node)] == ["leaf"]

    def test_deep_tree_does_not_recurse(self):
        node = None
        for i in reversed(range(3000)):
            node = DesignNode(id=str(i), children=[node] if node is not None else [])
        assert walk_tree(node, lambda n, c: None) == 3000
