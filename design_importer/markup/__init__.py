"""
Markup import: inline style resolution, element classification, tree building
and template placeholders.
"""

from design_importer.markup.classifier import classify_element
from design_importer.markup.styles import ensure_px, parse_inline_style, parse_px
from design_importer.markup.templates import extract_variables, resolve_variables
from design_importer.markup.tree_builder import build_children, html_to_components

__all__ = [
    "build_children",
    "classify_element",
    "ensure_px",
    "extract_variables",
    "html_to_components",
    "parse_inline_style",
    "parse_px",
    "resolve_variables",
]
