"""
Component tree rendering: flat HTML, editor documents and screenshots.
"""

from design_importer.rendering.editor_document import deserialize_document, serialize_components
from design_importer.rendering.html_renderer import (
    HTMLRenderer,
    component_to_html,
    components_to_html,
    wrap_in_document,
)

__all__ = [
    "HTMLRenderer",
    "component_to_html",
    "components_to_html",
    "deserialize_document",
    "serialize_components",
    "wrap_in_document",
]
