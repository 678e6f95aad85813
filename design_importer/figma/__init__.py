"""
Design source access: Figma client, URL parsing, node walker and layout summaries.
"""

from design_importer.figma.client import FigmaClient, FigmaClientError
from design_importer.figma.layout_info import build_layout_info
from design_importer.figma.urls import FigmaUrl, FigmaUrlError, parse_figma_url, validate_figma_url
from design_importer.figma.walker import (
    DesignSource,
    collect_design_assets,
    find_image_fill_nodes,
    find_vector_nodes,
)

__all__ = [
    "DesignSource",
    "FigmaClient",
    "FigmaClientError",
    "FigmaUrl",
    "FigmaUrlError",
    "build_layout_info",
    "collect_design_assets",
    "find_image_fill_nodes",
    "find_vector_nodes",
    "parse_figma_url",
    "validate_figma_url",
]
