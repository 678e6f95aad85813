"""
Figma URL parsing.
"""

from typing import Optional, Tuple
from urllib.parse import parse_qs, urlparse

from pydantic import BaseModel


class FigmaUrlError(ValueError):
    """Raised when a URL does not address a Figma design node."""


class FigmaUrl(BaseModel):
    """File key and node id addressed by a Figma URL."""
    file_key: str
    node_id: str
    file_name: Optional[str] = None
    branch_key: Optional[str] = None
    url: str


def parse_figma_url(url: str) -> FigmaUrl:
    """
    Parse a Figma design or file URL.

    Supported forms::

        https://www.figma.com/design/{fileKey}/{fileName}?node-id={nodeId}
        https://www.figma.com/design/{fileKey}/branch/{branchKey}/{fileName}?node-id={nodeId}
        https://www.figma.com/file/{fileKey}/{fileName}?node-id={nodeId}

    Branch URLs address the branch file, so the branch key is used as the file key.
    URL node ids use hyphens (``1-2``); the API expects colons (``1:2``).

    Raises:
        FigmaUrlError: If the URL is not a Figma node URL.
    """
    parsed = urlparse(url.strip())
    hostname = parsed.hostname or ""
    if parsed.scheme not in ("http", "https") or not hostname:
        raise FigmaUrlError(f"Invalid URL format: {url}")
    if hostname != "figma.com" and not hostname.endswith(".figma.com"):
        raise FigmaUrlError("URL must be from figma.com")

    parts = [part for part in parsed.path.split("/") if part]
    if not parts or parts[0] not in ("design", "file"):
        raise FigmaUrlError("URL must be a Figma design or file URL")

    branch_key = None
    file_name = None
    if len(parts) >= 5 and parts[2] == "branch":
        branch_key = parts[3]
        file_key = branch_key
        file_name = parts[4]
    elif len(parts) >= 2:
        file_key = parts[1]
        file_name = parts[2] if len(parts) >= 3 else None
    else:
        raise FigmaUrlError("Invalid Figma URL format")

    node_ids = parse_qs(parsed.query).get("node-id")
    if not node_ids or not node_ids[0]:
        raise FigmaUrlError("URL must include a node-id query parameter")

    return FigmaUrl(
        file_key=file_key,
        node_id=node_ids[0].replace("-", ":"),
        file_name=file_name,
        branch_key=branch_key,
        url=url,
    )


def validate_figma_url(url: str) -> Tuple[bool, Optional[str]]:
    """
    Check a URL without raising.

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        parse_figma_url(url)
    except FigmaUrlError as e:
        return False, str(e)
    return True, None


def node_slug(file_key: str, node_id: str) -> str:
    """Filesystem-safe name for outputs of one node."""
    return f"figma-{file_key}-{node_id.replace(':', '-')}"
