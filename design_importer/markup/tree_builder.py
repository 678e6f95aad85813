"""
Markup → component tree conversion.
"""

from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from design_importer.markup.classifier import classify_element, element_children, text_component
from design_importer.models import Component


def build_children(parent: Tag) -> List[Component]:
    """
    Ordered, compacted components for the element children of ``parent``.

    Walks with an explicit stack so nesting depth is bounded by memory, not
    by the interpreter's recursion limit.
    """
    results: List[Component] = []
    stack = [(parent, results)]
    while stack:
        element, siblings = stack.pop()
        for child in element_children(element):
            component = classify_element(child)
            if component is None:
                continue
            siblings.append(component)
            if component.is_container:
                component.children = []
                stack.append((child, component.children))
    return results


def html_to_components(html: Optional[str]) -> List[Component]:
    """
    Parse an HTML document or fragment into a component forest.

    Never raises: unsupported constructs degrade to Text or are dropped.

    Args:
        html: Markup string (full document or fragment).

    Returns:
        Top-level components in document order.
    """
    if not html or not html.strip():
        return []

    soup = BeautifulSoup(html, "html.parser")
    root = soup.body or soup.html or soup

    if not element_children(root):
        text = root.get_text().strip()
        return [text_component(text, {})] if text else []

    return build_children(root)
