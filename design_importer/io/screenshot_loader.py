"""
Utilities for loading design screenshots and writing import artifacts.
"""

import base64
import json
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Union

from PIL import Image

from design_importer.models import Component, EditorDocument, components_to_json

ImageSource = Union[str, Path, bytes]

# Vision models downscale anything larger; sending less keeps requests small
MAX_SCREENSHOT_WIDTH = 1568
MAX_SCREENSHOT_HEIGHT = 4096


class ScreenshotLoader:
    """Loads and normalizes design screenshots for the vision model."""

    def __init__(
        self,
        max_width: int = MAX_SCREENSHOT_WIDTH,
        max_height: int = MAX_SCREENSHOT_HEIGHT
    ):
        self.max_width = max_width
        self.max_height = max_height

    def load_image(self, source: ImageSource) -> Image.Image:
        """
        Load an image from disk or raw bytes.

        Args:
            source: Path to the image file, or encoded image bytes.

        Returns:
            PIL Image object in RGB mode.
        """
        if isinstance(source, bytes):
            return Image.open(BytesIO(source)).convert("RGB")

        image_path = Path(source)
        if not image_path.exists():
            raise FileNotFoundError(f"Image not found: {image_path}")

        return Image.open(image_path).convert("RGB")

    def normalize_screenshot(self, image: Image.Image) -> Image.Image:
        """Fit the image within the size limits, keeping its aspect ratio."""
        image = image.copy()
        image.thumbnail((self.max_width, self.max_height), Image.Resampling.LANCZOS)
        return image

    def image_to_base64(self, image: Image.Image, format: str = "PNG") -> str:
        """
        Convert PIL Image to base64 string.

        Args:
            image: PIL Image object.
            format: Image format (PNG, JPEG, etc.).

        Returns:
            Base64-encoded string.
        """
        buffer = BytesIO()
        image.save(buffer, format=format)
        return base64.b64encode(buffer.getvalue()).decode("utf-8")

    def prepare_for_llm(self, source: ImageSource, normalize: bool = True) -> dict:
        """
        Prepare a screenshot for the vision model.

        Args:
            source: Screenshot path or bytes.
            normalize: Whether to downscale oversized screenshots.

        Returns:
            Dictionary with the base64 PNG and its dimensions.
        """
        image = self.load_image(source)
        if normalize:
            image = self.normalize_screenshot(image)

        return {
            "image": self.image_to_base64(image),
            "width": image.width,
            "height": image.height,
        }


class ArtifactManager:
    """Manages writing import artifacts."""

    def __init__(self, output_dir: Union[str, Path] = "outputs"):
        """
        Initialize artifact manager.

        Args:
            output_dir: Root directory for import outputs.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def create_request_directory(self, request_id: str) -> Path:
        """
        Create output directory for one import request.

        Args:
            request_id: Request identifier.

        Returns:
            Path to request directory.
        """
        request_dir = self.output_dir / request_id
        request_dir.mkdir(parents=True, exist_ok=True)

        (request_dir / "screenshots").mkdir(exist_ok=True)
        (request_dir / "logs").mkdir(exist_ok=True)

        return request_dir

    def save_html(self, request_id: str, html_content: str, filename: str = "imported.html") -> Path:
        request_dir = self.create_request_directory(request_id)
        html_path = request_dir / filename
        html_path.write_text(html_content, encoding="utf-8")
        return html_path

    def save_components(
        self,
        request_id: str,
        components: List[Component],
        filename: str = "components.json"
    ) -> Path:
        request_dir = self.create_request_directory(request_id)
        path = request_dir / filename
        path.write_text(json.dumps(components_to_json(components), indent=2), encoding="utf-8")
        return path

    def save_editor_document(
        self,
        request_id: str,
        document: EditorDocument,
        filename: str = "editor_document.json"
    ) -> Path:
        request_dir = self.create_request_directory(request_id)
        path = request_dir / filename
        path.write_text(document.model_dump_json(indent=2), encoding="utf-8")
        return path

    def save_screenshot(
        self,
        request_id: str,
        screenshot: Union[Image.Image, bytes],
        name: str
    ) -> Path:
        """
        Save a screenshot under ``screenshots/<name>.png``.

        Args:
            request_id: Request identifier.
            screenshot: PIL Image or encoded PNG bytes.
            name: File stem.

        Returns:
            Path to saved screenshot.
        """
        request_dir = self.create_request_directory(request_id)
        screenshot_path = request_dir / "screenshots" / f"{name}.png"
        if isinstance(screenshot, bytes):
            screenshot_path.write_bytes(screenshot)
        else:
            screenshot.save(screenshot_path, "PNG")
        return screenshot_path
