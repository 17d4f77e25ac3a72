"""Tests for design_pipeline.extraction.components."""

from design_pipeline.extraction.components import (
    detect_components,
    is_button,
    is_card,
    is_form,
    is_icon,
    is_navigation,
)
from design_pipeline.extraction.walker import NodeContext
from design_pipeline.models import ComponentCategory, DesignNode

ROOT_CTX = NodeContext(depth=0)
CHILD_CTX = NodeContext(depth=1)


def _bbox(w, h, x=0, y=0):
    return {"x": x, "y": y, "width": w, "height": h}


def _node(**raw):
    return DesignNode.from_api(raw)


def _solid():
    return {"type": "SOLID", "color": {"r": 0, "g": 0, "b": 0, "a": 1}}


class TestButton:

    def _button(self, **overrides):
        raw = {
            "id": "b",
            "name": "Frame 12",
            "type": "FRAME",
            "cornerRadius": 6,
            "absoluteBoundingBox": _bbox(120, 40),
            "fills": [_solid()],
            "children": [{"id": "t", "type": "TEXT", "characters": "Buy"}],
        }
        raw.update(overrides)
        return _node(**raw)

    def test_rounded_filled_label(self):
        assert is_button(self._button(), CHILD_CTX)

    def test_named_button_without_radius(self):
        assert is_button(self._button(cornerRadius=0, name="btn/primary"), CHILD_CTX)

    def test_unnamed_square_is_not_button(self):
        assert not is_button(self._button(cornerRadius=0), CHILD_CTX)

    def test_needs_exactly_one_text_child(self):
        two_labels = self._button(children=[
            {"id": "t1", "type": "TEXT"},
            {"id": "t2", "type": "TEXT"},
        ])
        assert not is_button(two_labels, CHILD_CTX)

    def test_needs_fill_or_stroke(self):
        assert not is_button(self._button(fills=[]), CHILD_CTX)

    def test_missing_bbox(self):
        assert not is_button(self._button(absoluteBoundingBox=None), CHILD_CTX)

    def test_too_large(self):
        assert not is_button(self._button(absoluteBoundingBox=_bbox(400, 40)), CHILD_CTX)


class TestCard:

    def _card(self, **overrides):
        raw = {
            "id": "c",
            "name": "Product",
            "type": "FRAME",
            "cornerRadius": 12,
            "absoluteBoundingBox": _bbox(300, 360),
            "fills": [_solid()],
            "children": [
                {"id": "img", "type": "RECTANGLE", "fills": [{"type": "IMAGE", "imageRef": "r"}]},
                {"id": "title", "type": "TEXT", "characters": "Shoe"},
            ],
        }
        raw.update(overrides)
        return _node(**raw)

    def test_rounded_surface_with_text_and_image(self):
        assert is_card(self._card(), CHILD_CTX)

    def test_vector_counts_as_visual(self):
        card = self._card(children=[
            {"id": "v", "type": "VECTOR"},
            {"id": "t", "type": "TEXT"},
        ])
        assert is_card(card, CHILD_CTX)

    def test_square_corners_not_card(self):
        assert not is_card(self._card(cornerRadius=2), CHILD_CTX)

    def test_text_only_not_card(self):
        card = self._card(children=[{"id": "a", "type": "TEXT"}, {"id": "b", "type": "TEXT"}])
        assert not is_card(card, CHILD_CTX)


class TestNavigation:

    def _nav(self, **overrides):
        raw = {
            "id": "n",
            "name": "Header",
            "type": "FRAME",
            "layoutMode": "HORIZONTAL",
            "absoluteBoundingBox": _bbox(1200, 64),
            "children": [
                {"id": "1", "type": "TEXT"},
                {"id": "2", "type": "TEXT"},
                {"id": "3", "type": "VECTOR", "absoluteBoundingBox": _bbox(24, 24)},
            ],
        }
        raw.update(overrides)
        return _node(**raw)

    def test_wide_row_of_items(self):
        assert is_navigation(self._nav(), CHILD_CTX)

    def test_row_inferred_from_geometry(self):
        nav = self._nav(layoutMode=None, children=[
            {"id": str(i), "type": "TEXT", "absoluteBoundingBox": _bbox(60, 20, x=i * 80, y=20)}
            for i in range(4)
        ])
        assert is_navigation(nav, CHILD_CTX)

    def test_vertical_stack_not_navigation(self):
        assert not is_navigation(self._nav(layoutMode="VERTICAL"), CHILD_CTX)

    def test_too_deep(self):
        assert not is_navigation(self._nav(), NodeContext(depth=4))

    def test_too_few_items(self):
        nav = self._nav(children=[{"id": "1", "type": "TEXT"}, {"id": "2", "type": "TEXT"}])
        assert not is_navigation(nav, CHILD_CTX)

    def test_not_wide_enough(self):
        assert not is_navigation(self._nav(absoluteBoundingBox=_bbox(200, 64)), CHILD_CTX)


class TestForm:

    def test_named_form(self):
        form = _node(id="f", name="Login", type="FRAME", children=[{"id": "x", "type": "TEXT"}])
        assert is_form(form, CHILD_CTX)

    def test_named_input_child(self):
        form = _node(id="f", name="Frame", type="FRAME", children=[
            {"id": "e", "name": "Email field", "type": "FRAME", "children": [{"id": "t", "type": "TEXT"}]},
        ])
        assert is_form(form, CHILD_CTX)

    def test_stroked_field_shape(self):
        form = _node(id="f", name="Frame", type="FRAME", children=[{
            "id": "r",
            "name": "Rectangle 4",
            "type": "RECTANGLE",
            "absoluteBoundingBox": _bbox(280, 44),
            "strokes": [_solid()],
        }])
        assert is_form(form, CHILD_CTX)

    def test_filled_rectangle_not_input(self):
        form = _node(id="f", name="Frame", type="FRAME", children=[{
            "id": "r",
            "type": "RECTANGLE",
            "absoluteBoundingBox": _bbox(280, 44),
            "strokes": [_solid()],
            "fills": [_solid()],
        }])
        assert not is_form(form, CHILD_CTX)

    def test_leaf_named_form_not_container(self):
        assert not is_form(_node(id="f", name="Form", type="TEXT"), CHILD_CTX)


class TestIcon:

    def test_small_vector(self):
        assert is_icon(_node(id="i", type="VECTOR", absoluteBoundingBox=_bbox(24, 24)), CHILD_CTX)

    def test_boundary_size(self):
        assert is_icon(_node(id="i", type="ELLIPSE", absoluteBoundingBox=_bbox(48, 48)), CHILD_CTX)
        assert not is_icon(_node(id="i", type="ELLIPSE", absoluteBoundingBox=_bbox(49, 48)), CHILD_CTX)

    def test_missing_bbox(self):
        assert not is_icon(_node(id="i", type="VECTOR"), CHILD_CTX)

    def test_frame_not_icon(self):
        assert not is_icon(_node(id="i", type="FRAME", absoluteBoundingBox=_bbox(24, 24)), CHILD_CTX)


class TestDetectComponents:

    def test_landing_page(self, landing_tree):
        summary = detect_components(DesignNode.from_api(landing_tree))
        assert summary.count(ComponentCategory.BUTTON) == 1
        assert summary.count(ComponentCategory.NAVIGATION) == 1
        assert summary.count(ComponentCategory.CARD) == 0
        assert summary.count(ComponentCategory.FORM) == 0
        assert summary.matches["button"] == ("2:1",)
        assert summary.matches["navigation"] == ("1:2",)

    def test_empty_tree_zero_counts(self):
        summary = detect_components(None)
        assert summary.counts == {c.value: 0 for c in ComponentCategory}

    def test_deterministic(self, landing_tree):
        root = DesignNode.from_api(landing_tree)
        assert detect_components(root) == detect_components(root)
