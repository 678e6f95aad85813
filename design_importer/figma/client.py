"""
Figma REST API client.

Fetches node graphs and rasterized node renders using Personal Access Token
authentication (``FIGMA_API_KEY``).
"""

import os
from typing import Any, Dict, List, Optional

import httpx
from dotenv import load_dotenv

from design_importer.models import DesignNode

FIGMA_API_BASE = "https://api.figma.com"


class FigmaClientError(Exception):
    """Raised when a Figma API call fails."""


class FigmaClient:
    """Synchronous Figma client implementing the design source interface."""

    def __init__(
        self,
        token: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize the client.

        Args:
            token: Figma PAT. Falls back to the FIGMA_API_KEY env var.
            timeout: HTTP request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        load_dotenv()
        self._token = token or os.getenv("FIGMA_API_KEY", "")
        if not self._token:
            raise FigmaClientError(
                "Figma token not configured. Set FIGMA_API_KEY environment variable "
                "or pass token= to FigmaClient()."
            )
        self._client = httpx.Client(
            base_url=FIGMA_API_BASE,
            headers={"X-FIGMA-TOKEN": self._token},
            timeout=timeout,
            transport=transport,
        )
        # Render URLs point at third-party storage; they must not see the token
        self._download_client = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()
        self._download_client.close()

    def __enter__(self) -> "FigmaClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        try:
            resp = self._client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise FigmaClientError(f"Figma API timeout: {path}") from e
        except httpx.TransportError as e:
            raise FigmaClientError(f"Figma API connection error: {path}") from e

        if resp.status_code == 403:
            raise FigmaClientError(
                "Figma API returned 403 Forbidden. Check that FIGMA_API_KEY is valid."
            )
        if resp.status_code == 404:
            raise FigmaClientError(f"Figma resource not found: {path}")
        if resp.status_code == 429:
            raise FigmaClientError("Figma API rate limit exceeded. Retry later.")
        if resp.status_code != 200:
            raise FigmaClientError(f"Figma API error {resp.status_code}: {resp.text[:200]}")

        return resp.json()

    def get_node(self, file_key: str, node_id: str) -> DesignNode:
        """
        Fetch one node with its full subtree.

        GET /v1/files/:key/nodes?ids=...
        """
        data = self._get(f"/v1/files/{file_key}/nodes", params={"ids": node_id})
        entry = (data.get("nodes") or {}).get(node_id)
        if not entry or not entry.get("document"):
            raise FigmaClientError(f"Node {node_id} not found in file {file_key}")
        return DesignNode.model_validate(entry["document"])

    def render_images(
        self,
        file_key: str,
        node_ids: List[str],
        fmt: str = "png",
        scale: int = 2
    ) -> Dict[str, Optional[str]]:
        """
        Rasterize nodes through the image export API.

        GET /v1/images/:key?ids=...&format=png&scale=2

        Returns:
            Dict mapping node id to a temporary render URL (None when not rendered).
        """
        if not node_ids:
            return {}
        data = self._get(
            f"/v1/images/{file_key}",
            params={"ids": ",".join(node_ids), "format": fmt, "scale": str(scale)},
        )
        if data.get("err"):
            raise FigmaClientError(f"Figma image render error: {data['err']}")
        return data.get("images") or {}

    def render_screenshot(self, file_key: str, node_id: str) -> bytes:
        """Rasterize one node and download the PNG bytes."""
        url = self.render_images(file_key, [node_id]).get(node_id)
        if not url:
            raise FigmaClientError(f"Figma returned no render for node {node_id}")
        try:
            resp = self._download_client.get(url, follow_redirects=True)
        except httpx.TransportError as e:
            raise FigmaClientError(f"Failed to download render for node {node_id}") from e
        if resp.status_code != 200:
            raise FigmaClientError(f"Render download failed with status {resp.status_code}")
        return resp.content
