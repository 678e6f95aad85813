"""
Shared fixtures: design node builders and deterministic fakes for the
oracle, design source and asset host.
"""

from typing import Dict, List, Optional

import pytest

from design_importer.models import DesignNode, HostedImage


def make_node(
    node_id: str,
    type: str = "FRAME",
    x: float = 0,
    y: float = 0,
    width: float = 100,
    height: float = 100,
    children: Optional[List[DesignNode]] = None,
    fills: Optional[List[dict]] = None,
    **extra
) -> DesignNode:
    data = {
        "id": node_id,
        "name": extra.pop("name", node_id),
        "type": type,
        "absoluteBoundingBox": {"x": x, "y": y, "width": width, "height": height},
        "fills": fills or [],
        "children": children or [],
        **extra,
    }
    return DesignNode.model_validate(data)


def solid(r: float, g: float, b: float, a: float = 1.0, opacity: float = 1.0) -> dict:
    return {"type": "SOLID", "opacity": opacity, "color": {"r": r, "g": g, "b": b, "a": a}}


def image_fill(ref: str = "img-ref") -> dict:
    return {"type": "IMAGE", "imageRef": ref}


def gradient_fill() -> dict:
    return {"type": "GRADIENT_LINEAR"}


class FakeOracle:
    """Returns scripted responses and records every call."""

    def __init__(self, generate_response: str, refine_responses: Optional[List[str]] = None):
        self.generate_response = generate_response
        self.refine_responses = list(refine_responses or [])
        self.generate_calls = []
        self.refine_calls = []

    def generate(self, screenshot, assets, layout_info, design_code=None):
        self.generate_calls.append(
            {"screenshot": screenshot, "assets": assets, "layout_info": layout_info, "design_code": design_code}
        )
        return self.generate_response

    def refine(self, screenshot, rendered_html, components, render_screenshot=None):
        self.refine_calls.append(
            {"rendered_html": rendered_html, "components": components, "render_screenshot": render_screenshot}
        )
        return self.refine_responses.pop(0)


class FakeDesignSource:
    """In-memory design source."""

    def __init__(self, root: DesignNode, urls: Dict[str, str], screenshot: bytes = b""):
        self.root = root
        self.urls = urls
        self.screenshot = screenshot
        self.render_calls = []

    def get_node(self, file_key, node_id):
        return self.root

    def render_images(self, file_key, node_ids):
        self.render_calls.append(list(node_ids))
        return dict(self.urls)

    def render_screenshot(self, file_key, node_id):
        return self.screenshot


class FakeAssetHost:
    """Asset host that stores uploads in memory."""

    def __init__(self, base_url: str = "https://cdn.example.com"):
        self.base_url = base_url
        self.uploads = []

    async def upload(self, data: bytes, filename: str) -> HostedImage:
        self.uploads.append((data, filename))
        index = len(self.uploads)
        return HostedImage(url=f"{self.base_url}/{index}-{filename}", id=str(index))


@pytest.fixture
def asset_host():
    return FakeAssetHost()
