"""
Tests for Figma URL parsing.
"""

import pytest

from design_importer.figma.urls import FigmaUrlError, node_slug, parse_figma_url, validate_figma_url


def test_design_url():
    parsed = parse_figma_url("https://www.figma.com/design/AbC123/Landing-Page?node-id=12-345&t=xyz")

    assert parsed.file_key == "AbC123"
    assert parsed.node_id == "12:345"
    assert parsed.file_name == "Landing-Page"
    assert parsed.branch_key is None


def test_legacy_file_url():
    parsed = parse_figma_url("https://figma.com/file/KEY/Name?node-id=1-2")

    assert parsed.file_key == "KEY"
    assert parsed.node_id == "1:2"


def test_branch_url_uses_branch_key():
    parsed = parse_figma_url("https://www.figma.com/design/MAIN/branch/BRANCH/Name?node-id=3-4")

    assert parsed.file_key == "BRANCH"
    assert parsed.branch_key == "BRANCH"
    assert parsed.file_name == "Name"


def test_url_without_file_name():
    parsed = parse_figma_url("https://www.figma.com/design/KEY?node-id=1-2")

    assert parsed.file_key == "KEY"
    assert parsed.file_name is None


@pytest.mark.parametrize("url,message", [
    ("not a url", "Invalid URL"),
    ("ftp://www.figma.com/design/KEY/Name?node-id=1-2", "Invalid URL"),
    ("https://example.com/design/KEY/Name?node-id=1-2", "figma.com"),
    ("https://notfigma.com/design/KEY/Name?node-id=1-2", "figma.com"),
    ("https://www.figma.com/proto/KEY/Name?node-id=1-2", "design or file"),
    ("https://www.figma.com/design?node-id=1-2", "Invalid Figma URL"),
    ("https://www.figma.com/design/KEY/Name", "node-id"),
])
def test_invalid_urls(url, message):
    with pytest.raises(FigmaUrlError, match=message):
        parse_figma_url(url)


def test_validate_figma_url():
    assert validate_figma_url("https://www.figma.com/design/KEY/Name?node-id=1-2") == (True, None)

    is_valid, error = validate_figma_url("https://www.figma.com/design/KEY/Name")
    assert not is_valid
    assert "node-id" in error


def test_node_slug():
    assert node_slug("KEY", "12:345") == "figma-KEY-12-345"
