"""
Design node classification: raster images, vector/graphic assets and layout wrappers.

The vector pass looks for the smallest self-contained visual unit. A logo
made of many nested paths is exported once as a flattened image, while a
large section that merely contains a logo is walked into instead.
"""

from enum import Enum
from typing import Iterable, List, Optional, Protocol, Set, Tuple

from design_importer.models import DesignAsset, DesignNode


VECTOR_TYPES = frozenset({
    "VECTOR", "BOOLEAN_OPERATION", "STAR", "LINE", "ELLIPSE", "REGULAR_POLYGON",
})
CONTAINER_TYPES = frozenset({
    "FRAME", "GROUP", "COMPONENT", "COMPONENT_SET", "INSTANCE", "SECTION",
})

MIN_ASSET_SIZE = 8
MAX_ICON_SIZE = 200
OPAQUE_ALPHA = 0.99


class DesignSource(Protocol):
    """Read access to a design file's node graph and renders."""

    def get_node(self, file_key: str, node_id: str) -> DesignNode: ...

    def render_images(self, file_key: str, node_ids: List[str]) -> dict: ...

    def render_screenshot(self, file_key: str, node_id: str) -> bytes: ...


class NodeVerdict(str, Enum):
    """Outcome of the vector-pass guard chain for one node."""
    SKIP = "skip"
    CAPTURE = "capture"
    RECURSE = "recurse"


def walk(node: DesignNode) -> Iterable[DesignNode]:
    """Depth-first pre-order traversal."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def contains_text(node: DesignNode) -> bool:
    return any(descendant.type == "TEXT" for descendant in walk(node))


def contains_image_fill(node: DesignNode) -> bool:
    return any(descendant.has_image_fill() for descendant in walk(node))


def contains_vector(node: DesignNode) -> bool:
    return any(
        descendant.type in VECTOR_TYPES
        for descendant in walk(node)
        if descendant is not node
    )


def has_opaque_solid_fill(node: DesignNode) -> bool:
    return any(
        fill.is_solid and fill.effective_alpha >= OPAQUE_ALPHA
        for fill in node.visible_fills()
    )


def is_tiny(node: DesignNode) -> bool:
    return node.box.width < MIN_ASSET_SIZE or node.box.height < MIN_ASSET_SIZE


def is_icon_sized(node: DesignNode) -> bool:
    return node.box.width <= MAX_ICON_SIZE and node.box.height <= MAX_ICON_SIZE


def classify_vector_candidate(node: DesignNode) -> Tuple[NodeVerdict, str]:
    """
    Run the ordered guard chain for one non-root node.

    Returns:
        Tuple of (verdict, rule name).
    """
    if not node.visible or is_tiny(node):
        return NodeVerdict.SKIP, "decorative"
    if node.type in VECTOR_TYPES:
        return NodeVerdict.CAPTURE, "vector-primitive"
    if node.type not in CONTAINER_TYPES:
        return NodeVerdict.RECURSE, "non-container"
    if contains_text(node) or contains_image_fill(node):
        return NodeVerdict.RECURSE, "content-area"
    if node.has_gradient_fill():
        return NodeVerdict.CAPTURE, "gradient-fill"
    if is_icon_sized(node) and contains_vector(node):
        return NodeVerdict.CAPTURE, "icon"
    if is_icon_sized(node) and has_opaque_solid_fill(node) and node.children:
        return NodeVerdict.CAPTURE, "solid-graphic"
    return NodeVerdict.RECURSE, "layout-wrapper"


def find_image_fill_nodes(root: DesignNode) -> List[DesignNode]:
    """Every visible node carrying a visible IMAGE fill."""
    results = []

    def visit(node: DesignNode) -> None:
        if not node.visible:
            return
        if node.has_image_fill():
            results.append(node)
        for child in node.children:
            visit(child)

    visit(root)
    return results


def find_vector_nodes(
    root: DesignNode,
    exclude_ids: Optional[Set[str]] = None
) -> List[DesignNode]:
    """
    Nodes to export as single vector/graphic assets.

    Args:
        root: Root of the subtree (never captured itself).
        exclude_ids: Node ids already exported as raster images.

    Returns:
        Captured nodes in document order; captured nodes are not descended into.
    """
    exclude_ids = exclude_ids or set()
    results: List[DesignNode] = []

    def visit(node: DesignNode) -> None:
        verdict, _ = classify_vector_candidate(node)
        if verdict == NodeVerdict.SKIP:
            return
        if verdict == NodeVerdict.CAPTURE:
            if node.id not in exclude_ids:
                results.append(node)
            return
        for child in node.children:
            visit(child)

    for child in root.children:
        visit(child)
    return results


def _asset(node: DesignNode, url: str, is_vector: bool) -> DesignAsset:
    return DesignAsset(
        node_id=node.id,
        node_name=node.name or ("vector" if is_vector else "image"),
        image_url=url,
        width=round(node.box.width),
        height=round(node.box.height),
        is_vector=is_vector,
    )


def collect_design_assets(
    root: DesignNode,
    file_key: str,
    design_source: DesignSource
) -> List[DesignAsset]:
    """
    Classify a subtree and rasterize every captured node.

    Args:
        root: Root design node.
        file_key: Design file key.
        design_source: Source used to render node ids to image URLs.

    Returns:
        Raster assets followed by vector assets; nodes without a render URL are dropped.
    """
    image_nodes = find_image_fill_nodes(root)
    vector_nodes = find_vector_nodes(root, exclude_ids={node.id for node in image_nodes})

    candidates = [(node, False) for node in image_nodes] + [(node, True) for node in vector_nodes]
    if not candidates:
        return []

    urls = design_source.render_images(file_key, [node.id for node, _ in candidates])

    assets = []
    for node, is_vector in candidates:
        url = urls.get(node.id) or urls.get(node.id.replace(":", "-"))
        if url:
            assets.append(_asset(node, url, is_vector))
        else:
            print(f"Warning: No render URL for node {node.id} ({node.name})")
    return assets
