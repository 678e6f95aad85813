"""
Tests for screenshot loading and artifact writing.
"""

import base64
import json
from io import BytesIO

import pytest
from PIL import Image

from design_importer.io.screenshot_loader import ArtifactManager, ScreenshotLoader
from design_importer.models import Component, ComponentType
from design_importer.rendering.editor_document import serialize_components


def png_bytes(size, color="white", mode="RGB"):
    buffer = BytesIO()
    Image.new(mode, size, color=color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def screenshot_path(tmp_path):
    """Create a sample design screenshot."""
    path = tmp_path / "design.png"
    Image.new("RGBA", (800, 600), color=(255, 0, 0, 128)).save(path)
    return path


def test_load_image_from_path(screenshot_path):
    loader = ScreenshotLoader()

    image = loader.load_image(screenshot_path)

    assert image.mode == "RGB"
    assert image.size == (800, 600)


def test_load_image_from_bytes():
    loader = ScreenshotLoader()

    image = loader.load_image(png_bytes((40, 30)))

    assert image.size == (40, 30)


def test_missing_file_raises(tmp_path):
    loader = ScreenshotLoader()

    with pytest.raises(FileNotFoundError):
        loader.load_image(tmp_path / "missing.png")


def test_normalize_keeps_aspect_ratio():
    loader = ScreenshotLoader()
    image = Image.new("RGB", (3000, 1000))

    normalized = loader.normalize_screenshot(image)

    assert normalized.width == 1568
    assert 520 <= normalized.height <= 524
    assert image.size == (3000, 1000)


def test_small_screenshot_is_not_upscaled():
    loader = ScreenshotLoader()

    normalized = loader.normalize_screenshot(Image.new("RGB", (320, 200)))

    assert normalized.size == (320, 200)


def test_prepare_for_llm(screenshot_path):
    loader = ScreenshotLoader(max_width=400)

    prepared = loader.prepare_for_llm(screenshot_path)

    assert prepared["width"] == 400
    assert prepared["height"] == 300
    decoded = Image.open(BytesIO(base64.b64decode(prepared["image"])))
    assert decoded.format == "PNG"
    assert decoded.size == (400, 300)


def test_prepare_for_llm_without_normalizing(screenshot_path):
    loader = ScreenshotLoader(max_width=400)

    prepared = loader.prepare_for_llm(screenshot_path, normalize=False)

    assert (prepared["width"], prepared["height"]) == (800, 600)


def test_artifact_manager_writes_request_outputs(tmp_path):
    manager = ArtifactManager(tmp_path / "outputs")
    components = [Component(type=ComponentType.TEXT, props={"text": "Hi"})]

    components_path = manager.save_components("req-1", components)
    document_path = manager.save_editor_document("req-1", serialize_components(components, id_prefix="c"))
    html_path = manager.save_html("req-1", "<p>Hi</p>")
    screenshot_path = manager.save_screenshot("req-1", png_bytes((10, 10)), "rendered")

    request_dir = tmp_path / "outputs" / "req-1"
    assert (request_dir / "logs").is_dir()
    assert json.loads(components_path.read_text()) == [{"type": "Text", "props": {"text": "Hi"}}]
    assert json.loads(document_path.read_text())["content"][0]["props"]["id"] == "c-1"
    assert html_path.read_text() == "<p>Hi</p>"
    assert screenshot_path == request_dir / "screenshots" / "rendered.png"
    assert Image.open(screenshot_path).size == (10, 10)


def test_save_screenshot_accepts_pil_image(tmp_path):
    manager = ArtifactManager(tmp_path)

    path = manager.save_screenshot("req-2", Image.new("RGB", (5, 7)), "source")

    assert Image.open(path).size == (5, 7)
