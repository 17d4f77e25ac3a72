"""Tests for design_pipeline.assets.locator."""

from design_pipeline.assets.locator import locate_image_nodes
from design_pipeline.models import AssetTarget, DesignNode


def _image(visible=True):
    return {"type": "IMAGE", "imageRef": "ref", "visible": visible}


class TestLocateImageNodes:

    def test_visible_image_fills_in_traversal_order(self):
        root = DesignNode.from_api({
            "id": "root",
            "children": [
                {"id": "a", "name": "Avatar", "fills": [_image()]},
                {"id": "b", "children": [{"id": "b1", "name": "Banner", "fills": [_image()]}]},
                {"id": "c", "name": "Shape", "fills": [{"type": "SOLID"}]},
            ],
        })
        assert locate_image_nodes(root) == [
            AssetTarget(node_id="a", name="Avatar"),
            AssetTarget(node_id="b1", name="Banner"),
        ]

    def test_hidden_image_fill_excluded(self):
        root = DesignNode.from_api({
            "id": "root",
            "children": [
                {"id": "hidden", "fills": [_image(visible=False)]},
                {"id": "mixed", "fills": [_image(visible=False), _image()]},
            ],
        })
        assert [t.node_id for t in locate_image_nodes(root)] == ["mixed"]

    def test_missing_tree(self):
        assert locate_image_nodes(None) == []
