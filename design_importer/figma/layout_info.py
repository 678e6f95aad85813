"""
Layout summaries of design node subtrees for prompt construction.
"""

from typing import List, Optional

from design_importer.figma.walker import CONTAINER_TYPES, walk
from design_importer.models import DesignNode, LayoutChild, LayoutInfo, PaddingBox, Paint

ALIGN_TOLERANCE = 2.0


def _channel(value: float) -> int:
    return int(round(min(max(value, 0.0), 1.0) * 255))


def paint_to_hex(paint: Paint) -> Optional[str]:
    """``#rrggbb`` for a solid paint, with alpha appended below full opacity."""
    if not paint.is_solid or paint.color is None:
        return None
    color = paint.color
    hex_color = "#{:02x}{:02x}{:02x}".format(_channel(color.r), _channel(color.g), _channel(color.b))
    alpha = paint.effective_alpha
    if alpha < 1:
        hex_color += "{:02x}".format(_channel(alpha))
    return hex_color


def solid_fill_colors(node: DesignNode) -> Optional[List[str]]:
    colors = [c for c in (paint_to_hex(fill) for fill in node.visible_fills()) if c]
    return colors or None


def padding_box(node: DesignNode) -> Optional[PaddingBox]:
    if not node.has_padding():
        return None
    return PaddingBox(
        top=node.padding_top or 0,
        right=node.padding_right or 0,
        bottom=node.padding_bottom or 0,
        left=node.padding_left or 0,
    )


def unwrap_content_root(root: DesignNode) -> DesignNode:
    """Skip single-child wrapper frames that have the same size as their parent."""
    current = root
    while (
        len(current.children) == 1 and
        current.children[0].type in CONTAINER_TYPES and
        current.children[0].box.same_size(current.box, ALIGN_TOLERANCE)
    ):
        current = current.children[0]
    return current


def infer_layout_mode(node: DesignNode) -> Optional[str]:
    """``vertical`` when children share x, ``horizontal`` when they share y."""
    if node.layout_mode in ("VERTICAL", "HORIZONTAL"):
        return node.layout_mode.lower()

    children = node.children
    if len(children) < 2:
        return None
    first = children[0].box
    if all(abs(child.box.x - first.x) < ALIGN_TOLERANCE for child in children):
        return "vertical"
    if all(abs(child.box.y - first.y) < ALIGN_TOLERANCE for child in children):
        return "horizontal"
    return None


def infer_item_spacing(node: DesignNode, layout_mode: Optional[str]) -> Optional[int]:
    """Gap between the first two children along the layout axis."""
    if node.item_spacing is not None and node.layout_mode in ("VERTICAL", "HORIZONTAL"):
        return round(node.item_spacing)
    if len(node.children) < 2 or layout_mode is None:
        return None

    first, second = node.children[0].box, node.children[1].box
    if layout_mode == "vertical":
        return round(second.y - (first.y + first.height))
    return round(second.x - (first.x + first.width))


def text_content(node: DesignNode) -> Optional[str]:
    if node.type == "TEXT":
        return node.characters if node.characters is not None else node.name
    texts = [
        descendant.characters or descendant.name
        for descendant in walk(node)
        if descendant.type == "TEXT"
    ]
    return ", ".join(texts) if texts else None


def summarize_child(child: DesignNode, origin: DesignNode) -> LayoutChild:
    style = child.style
    return LayoutChild(
        name=child.name,
        type=child.type,
        x=round(child.box.x - origin.box.x),
        y=round(child.box.y - origin.box.y),
        width=round(child.box.width),
        height=round(child.box.height),
        padding=padding_box(child),
        item_spacing=round(child.item_spacing) if child.item_spacing is not None else None,
        corner_radius=child.corner_radius,
        fills=solid_fill_colors(child),
        font_size=style.font_size if style else None,
        font_weight=style.font_weight if style else None,
        text_content=text_content(child),
    )


def build_layout_info(root: DesignNode) -> LayoutInfo:
    """
    Summarize the box model of a design subtree.

    Args:
        root: Root design node of the import.

    Returns:
        Immutable LayoutInfo for the innermost content frame.
    """
    content_root = unwrap_content_root(root)
    layout_mode = infer_layout_mode(content_root)
    visible_children = [child for child in content_root.children if child.visible]

    return LayoutInfo(
        width=round(content_root.box.width),
        height=round(content_root.box.height),
        padding=padding_box(content_root),
        item_spacing=infer_item_spacing(content_root, layout_mode),
        layout_mode=layout_mode,
        children=[summarize_child(child, content_root) for child in visible_children],
    )
