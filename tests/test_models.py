"""
Tests for data models.
"""

import pytest
from pydantic import ValidationError

from design_importer.models import (
    BoundingBox,
    Component,
    ComponentType,
    DesignNode,
    ImportResult,
    ImportStatus,
    Paint,
)
from design_importer.pipeline.generation import MalformedOracleOutput


def test_bounding_box_same_size_tolerance():
    """Sizes within the tolerance count as equal."""
    bbox1 = BoundingBox(x=0, y=0, width=100, height=50)
    bbox2 = BoundingBox(x=40, y=40, width=101.5, height=49)
    bbox3 = BoundingBox(width=103, height=50)

    assert bbox1.same_size(bbox2)
    assert not bbox1.same_size(bbox3)


def test_leaf_component_rejects_children():
    """Only Flex and Grid may hold children."""
    with pytest.raises(ValidationError):
        Component(
            type=ComponentType.TEXT,
            props={"text": "x"},
            children=[Component(type=ComponentType.TEXT)],
        )


def test_unknown_component_type_rejected():
    with pytest.raises(ValidationError):
        Component.model_validate({"type": "Carousel", "props": {}})


def test_component_to_dict_omits_leaf_children():
    tree = Component(
        type=ComponentType.FLEX,
        props={"direction": "row"},
        children=[Component(type=ComponentType.TEXT, props={"text": "a"})],
    )

    assert tree.to_dict() == {
        "type": "Flex",
        "props": {"direction": "row"},
        "children": [{"type": "Text", "props": {"text": "a"}}],
    }


def test_paint_effective_alpha():
    paint = Paint.model_validate({"type": "SOLID", "opacity": 0.5, "color": {"r": 1, "g": 1, "b": 1, "a": 0.5}})

    assert paint.effective_alpha == 0.25
    assert paint.is_solid
    assert not paint.is_gradient


def test_design_node_from_api_payload():
    """Design nodes accept the design API's camelCase payload."""
    node = DesignNode.model_validate({
        "id": "1:2",
        "name": "Card",
        "type": "FRAME",
        "absoluteBoundingBox": {"x": 10, "y": 20, "width": 300, "height": 200},
        "layoutMode": "VERTICAL",
        "itemSpacing": 12,
        "paddingTop": 8,
        "fills": [{"type": "IMAGE", "imageRef": "abc"}, {"type": "GRADIENT_RADIAL", "visible": False}],
        "children": [{"id": "1:3", "type": "TEXT", "characters": "Hi", "style": {"fontSize": 14}}],
        "unknownField": True,
    })

    assert node.box.width == 300
    assert node.layout_mode == "VERTICAL"
    assert node.item_spacing == 12
    assert node.has_padding()
    assert node.has_image_fill()
    assert not node.has_gradient_fill()
    assert node.children[0].style.font_size == 14


def test_design_node_tolerates_missing_box_and_mixed_fills():
    node = DesignNode.model_validate({"id": "1", "absoluteBoundingBox": None, "fills": "MIXED"})

    assert node.box == BoundingBox()
    assert node.fills == []


def test_import_result_raise_for_status():
    failed = ImportResult(request_id="r", status=ImportStatus.FAILED, error="bad json")
    done = ImportResult(request_id="r", status=ImportStatus.DONE)

    assert not failed.ok
    assert done.ok
    done.raise_for_status()
    with pytest.raises(MalformedOracleOutput, match="bad json"):
        failed.raise_for_status()
