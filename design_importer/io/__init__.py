"""
Input/output helpers: screenshots, artifacts and permanent asset hosting.
"""

from design_importer.io.asset_host import (
    AssetHost,
    AssetRehostError,
    ImgBBService,
    get_image_hosting_service,
    rehost_components,
)
from design_importer.io.screenshot_loader import ArtifactManager, ScreenshotLoader

__all__ = [
    "ArtifactManager",
    "AssetHost",
    "AssetRehostError",
    "ImgBBService",
    "ScreenshotLoader",
    "get_image_hosting_service",
    "rehost_components",
]
