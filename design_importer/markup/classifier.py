"""
Element classification for the markup import path.

Decides which component a single element becomes, or that it contributes
nothing. The checks run in a fixed priority order so that structurally
meaningful tags (headings, buttons, images) are never flattened into text,
while empty layout wrappers collapse away.
"""

import re
from typing import Dict, List, Optional

from bs4 import Tag

from design_importer.markup.styles import ensure_px, parse_inline_style, parse_px
from design_importer.models import Component, ComponentType


HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
TEXT_TAGS = frozenset({"p", "span", "label", "strong", "em", "b", "i", "small"})
BOLD_TAGS = frozenset({"strong", "b"})

# Tags that never contribute visible content
SKIPPED_TAGS = frozenset({
    "script", "style", "head", "meta", "link", "title", "noscript", "template",
})

# Tags with a dedicated component; a parent holding any of these is not inline-only
COMPONENT_MAPPED_TAGS = frozenset({
    "div", "section", "article", "header", "footer", "nav", "main", "aside",
    "ul", "ol", "li", "table", "form", "fieldset", "figure", "figcaption",
    "blockquote", "pre", "h1", "h2", "h3", "h4", "h5", "h6", "p", "hr",
    "button", "a", "img",
    "thead", "tbody", "tr", "td", "th",
})

CONTAINER_TAGS = frozenset({
    "div", "section", "article", "header", "footer", "nav", "main", "aside",
    "ul", "ol", "li", "form", "fieldset", "figure", "blockquote", "table",
    "thead", "tbody", "tr", "td", "th",
})

TRANSPARENT_BACKGROUNDS = frozenset({"transparent", "none"})

_GRID_REPEAT = re.compile(r"repeat\(\s*(\d+)")

Styles = Dict[str, str]


def element_children(element: Tag) -> List[Tag]:
    """Direct element children (text, comments and doctypes are skipped)."""
    return [child for child in element.children if isinstance(child, Tag)]


def element_text(element: Tag) -> str:
    return element.get_text().strip()


def _style_attr(element: Tag) -> str:
    raw = element.get("style")
    if isinstance(raw, list):
        return " ".join(raw)
    return raw or ""


def is_hidden(styles: Styles) -> bool:
    display = styles.get("display", "").lower().replace("!important", "").strip()
    return display == "none"


def parse_grid_columns(value: Optional[str]) -> int:
    """Column count from ``grid-template-columns``; 2 when undeterminable."""
    if not value:
        return 2
    match = _GRID_REPEAT.search(value)
    if match:
        return int(match.group(1))
    return len(value.split()) or 2


def has_only_inline_children(element: Tag) -> bool:
    return not any(child.name in COMPONENT_MAPPED_TAGS for child in element_children(element))


# -- Prop builders ---------------------------------------------------------

def text_component(text: str, styles: Styles, default_weight: str = "400") -> Component:
    return Component(
        type=ComponentType.TEXT,
        props={
            "text": text,
            "color": styles.get("color") or "#333333",
            "fontSize": ensure_px(styles.get("fontSize"), "16px"),
            "fontWeight": styles.get("fontWeight") or default_weight,
            "textAlign": styles.get("textAlign") or "left",
        },
    )


def button_component(element: Tag, styles: Styles, href: str) -> Component:
    return Component(
        type=ComponentType.BUTTON,
        props={
            "text": element_text(element),
            "href": href,
            "backgroundColor": styles.get("backgroundColor") or "#2563eb",
            "color": styles.get("color") or "#ffffff",
            "fontSize": ensure_px(styles.get("fontSize"), "16px"),
            "fontWeight": styles.get("fontWeight") or "600",
            "paddingX": ensure_px(styles.get("paddingLeft") or styles.get("paddingRight"), "24px"),
            "paddingY": ensure_px(styles.get("paddingTop") or styles.get("paddingBottom"), "12px"),
            "borderRadius": ensure_px(styles.get("borderRadius"), "8px"),
            "fullWidth": styles.get("display") == "block" and styles.get("width") == "100%",
        },
    )


def container_props(styles: Styles) -> Dict[str, str]:
    """Box props shared by Flex and Grid."""
    return {
        "paddingTop": ensure_px(styles.get("paddingTop"), "0px"),
        "paddingRight": ensure_px(styles.get("paddingRight"), "0px"),
        "paddingBottom": ensure_px(styles.get("paddingBottom"), "0px"),
        "paddingLeft": ensure_px(styles.get("paddingLeft"), "0px"),
        "backgroundColor": styles.get("backgroundColor") or "",
        "borderRadius": ensure_px(styles.get("borderRadius"), "0px"),
        "maxWidth": styles.get("maxWidth") or "100%",
    }


def _image(element: Tag, styles: Styles) -> Component:
    return Component(
        type=ComponentType.IMAGE,
        props={
            "src": element.get("src") or "",
            "alt": element.get("alt") or "",
            "width": ensure_px(styles.get("width"), "100%"),
            "height": ensure_px(styles.get("height"), "auto"),
            "objectFit": styles.get("objectFit") or "cover",
            "borderRadius": ensure_px(styles.get("borderRadius"), "0px"),
        },
    )


def _divider(styles: Styles) -> Component:
    thickness = "1px"
    color = "#e5e7eb"
    border_top = styles.get("borderTop")
    if border_top:
        parts = border_top.split(None, 2)
        if parts:
            thickness = ensure_px(parts[0], "1px")
        if len(parts) > 2:
            color = parts[2]
    if styles.get("borderTopColor"):
        color = styles["borderTopColor"]
    if styles.get("borderTopWidth"):
        thickness = ensure_px(styles["borderTopWidth"], "1px")
    return Component(type=ComponentType.DIVIDER, props={"thickness": thickness, "color": color})


def _heading(element: Tag, styles: Styles) -> Component:
    return Component(
        type=ComponentType.HEADING,
        props={
            "text": element_text(element),
            "level": int(element.name[1]),
            "color": styles.get("color") or "#000000",
            "fontSize": ensure_px(styles.get("fontSize"), "24px"),
            "fontWeight": styles.get("fontWeight") or "700",
            "textAlign": styles.get("textAlign") or "left",
        },
    )


def _is_button_link(element: Tag, styles: Styles) -> bool:
    if (element.get("role") or "").lower() == "button":
        return True
    background = (styles.get("backgroundColor") or styles.get("background") or "").lower()
    return bool(background) and background not in TRANSPARENT_BACKGROUNDS


def _container(element: Tag, styles: Styles) -> Optional[Component]:
    children = element_children(element)
    text = element_text(element)

    # Empty spacer with an explicit size
    if not children and not text and (styles.get("height") or styles.get("width")):
        return Component(
            type=ComponentType.SPACE,
            props={
                "size": ensure_px(styles.get("height") or styles.get("width"), "24px"),
                "direction": "vertical" if styles.get("height") else "horizontal",
            },
        )

    if not children and text:
        return text_component(text, styles)
    if text and len(children) <= 2 and has_only_inline_children(element):
        return text_component(text, styles)

    shared = container_props(styles)

    if styles.get("display", "").lower() == "grid":
        return Component(
            type=ComponentType.GRID,
            props={
                "numColumns": parse_grid_columns(styles.get("gridTemplateColumns")),
                "gap": parse_px(styles.get("gap")),
                "alignItems": styles.get("alignItems") or "stretch",
                **shared,
            },
            children=[],
        )

    return Component(
        type=ComponentType.FLEX,
        props={
            "direction": styles.get("flexDirection") or "column",
            "justifyContent": styles.get("justifyContent") or "flex-start",
            "alignItems": styles.get("alignItems") or "stretch",
            "wrap": styles.get("flexWrap") or "nowrap",
            "gap": parse_px(styles.get("gap")),
            **shared,
        },
        children=[],
    )


def classify_element(element: Tag, styles: Optional[Styles] = None) -> Optional[Component]:
    """
    Classify one element.

    Args:
        element: Parsed markup element.
        styles: Resolved inline styles (parsed from the element when omitted).

    Returns:
        A Component (Flex/Grid without children populated) or None when the
        element contributes nothing.
    """
    if styles is None:
        styles = parse_inline_style(_style_attr(element))
    tag = (element.name or "").lower()

    if is_hidden(styles) or tag in SKIPPED_TAGS:
        return None

    if tag == "img":
        return _image(element, styles)
    if tag == "hr":
        return _divider(styles)
    if tag == "br":
        return Component(type=ComponentType.SPACE, props={"size": "16px", "direction": "vertical"})

    if tag in HEADING_TAGS:
        return _heading(element, styles)

    if tag == "button":
        return button_component(element, styles, "#")

    text = element_text(element)

    if tag == "a":
        if _is_button_link(element, styles):
            return button_component(element, styles, element.get("href") or "#")
        if text:
            return text_component(text, styles)
        return _container(element, styles) if element_children(element) else None

    if tag in TEXT_TAGS:
        if text:
            return text_component(text, styles, "700" if tag in BOLD_TAGS else "400")
        # Text wrapper around images and the like acts as a container
        return _container(element, styles) if element_children(element) else None

    if tag in CONTAINER_TAGS:
        return _container(element, styles)

    # Catch-all: unknown tags degrade to text or nothing
    if text:
        return text_component(text, styles)
    return None
