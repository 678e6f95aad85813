"""
Permanent image hosting and rehosting of transient asset URLs.

Design sources hand out asset URLs that expire (MCP asset endpoints, local
desktop asset servers, signed render URLs). Before a tree is stored, every
such URL is downloaded and uploaded to a permanent host.
"""

import asyncio
import base64
import mimetypes
import os
import re
from pathlib import PurePosixPath
from typing import Dict, List, Optional, Protocol, Tuple
from urllib.parse import urlparse

import httpx
from dotenv import load_dotenv

from design_importer.models import Component, ComponentType, HostedImage

IMGBB_UPLOAD_URL = "https://api.imgbb.com/1/upload"

TRANSIENT_URL_PATTERNS = [
    re.compile(r"^https?://[^/\s]*figma\.com/api/mcp/asset/", re.IGNORECASE),
    re.compile(r"^https?://(?:localhost|127\.0\.0\.1)(?::\d+)?/assets/", re.IGNORECASE),
    re.compile(r"^https?://figma-alpha-api\.s3\.[^/\s]*amazonaws\.com/", re.IGNORECASE),
    re.compile(r"^https?://s3-[^/\s]*\.amazonaws\.com/figma", re.IGNORECASE),
]


class AssetRehostError(Exception):
    """Raised when one asset cannot be downloaded or uploaded."""


class AssetHost(Protocol):
    """Permanent image store."""

    async def upload(self, data: bytes, filename: str) -> HostedImage: ...


class ImgBBService:
    """Uploads images to ImgBB."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the service.

        Args:
            api_key: ImgBB API key. Falls back to the IMGBB_API_KEY env var.
            timeout: HTTP request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        load_dotenv()
        self.api_key = api_key or os.getenv("IMGBB_API_KEY")
        if not self.api_key:
            raise ValueError("IMGBB_API_KEY environment variable not set")
        self.timeout = timeout
        self.transport = transport

    async def upload(self, data: bytes, filename: str) -> HostedImage:
        """
        Upload one image.

        Args:
            data: Encoded image bytes.
            filename: Original filename (extension is dropped for the title).

        Returns:
            HostedImage with the permanent URL.
        """
        form = {
            "key": self.api_key,
            "image": base64.b64encode(data).decode("utf-8"),
            "name": PurePosixPath(filename).stem,
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.post(IMGBB_UPLOAD_URL, data=form)

        if resp.status_code != 200:
            raise AssetRehostError(f"ImgBB upload failed ({resp.status_code}): {resp.text[:200]}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise AssetRehostError(f"ImgBB returned non-JSON response: {resp.text[:200]}") from e

        if not payload.get("success"):
            raise AssetRehostError(f"ImgBB upload failed: {payload}")

        result = payload.get("data") or {}
        if not result.get("url"):
            raise AssetRehostError(f"ImgBB response has no image URL: {payload}")
        return HostedImage(
            url=result["url"],
            id=str(result.get("id", "")),
            delete_url=result.get("delete_url"),
        )


def get_image_hosting_service() -> AssetHost:
    """Asset host selected by IMAGE_HOSTING_PROVIDER (default imgbb)."""
    load_dotenv()
    provider = os.getenv("IMAGE_HOSTING_PROVIDER", "imgbb").lower()
    if provider == "imgbb":
        return ImgBBService()
    raise ValueError(f"Unknown image hosting provider: {provider}")


def is_transient_url(url: str) -> bool:
    return any(pattern.match(url) for pattern in TRANSIENT_URL_PATTERNS)


def collect_transient_urls(components: List[Component]) -> List[str]:
    """Distinct transient Image ``src`` values in document order."""
    seen: List[str] = []

    def visit(component: Component) -> None:
        if component.type == ComponentType.IMAGE:
            src = component.props.get("src") or ""
            if is_transient_url(src) and src not in seen:
                seen.append(src)
        for child in component.children or []:
            visit(child)

    for component in components:
        visit(component)
    return seen


def rewrite_image_urls(components: List[Component], url_map: Dict[str, str]) -> List[Component]:
    """Copy of the tree with Image ``src`` values replaced through ``url_map``."""

    def rewrite(component: Component) -> Component:
        props = dict(component.props)
        if component.type == ComponentType.IMAGE and props.get("src") in url_map:
            props["src"] = url_map[props["src"]]
        children = None
        if component.children is not None:
            children = [rewrite(child) for child in component.children]
        return Component(type=component.type, props=props, children=children)

    return [rewrite(component) for component in components]


def filename_for(url: str, content_type: Optional[str], index: int) -> str:
    """Upload filename; MCP asset URLs carry no extension so fall back to the content type."""
    name = PurePosixPath(urlparse(url).path).name
    if name and "." in name:
        return name
    extension = mimetypes.guess_extension((content_type or "").split(";")[0].strip()) or ".png"
    return f"asset-{index}{extension}"


async def rehost_url(url: str, index: int, host: AssetHost, client: httpx.AsyncClient) -> HostedImage:
    """
    Download one transient asset and upload it to the permanent host.

    Raises:
        AssetRehostError: If the download or upload fails.
    """
    try:
        resp = await client.get(url, follow_redirects=True)
    except httpx.HTTPError as e:
        raise AssetRehostError(f"Download failed for {url}: {e}") from e
    if resp.status_code != 200:
        raise AssetRehostError(f"Download failed for {url}: HTTP {resp.status_code}")

    filename = filename_for(url, resp.headers.get("content-type"), index)
    try:
        return await host.upload(resp.content, filename)
    except AssetRehostError:
        raise
    except Exception as e:
        raise AssetRehostError(f"Upload failed for {url}: {type(e).__name__}: {e}") from e


async def rehost_urls_async(
    urls: List[str],
    host: AssetHost,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    timeout: float = 60.0
) -> Tuple[Dict[str, str], Dict[str, str]]:
    """
    Rehost URLs concurrently.

    Returns:
        Tuple of (url_map, failures): successful old → new URLs and failed URL → error.
    """
    url_map: Dict[str, str] = {}
    failures: Dict[str, str] = {}
    if not urls:
        return url_map, failures

    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        results = await asyncio.gather(
            *(rehost_url(url, index, host, client) for index, url in enumerate(urls)),
            return_exceptions=True,
        )

    for url, result in zip(urls, results):
        if isinstance(result, HostedImage):
            url_map[url] = result.url
        elif isinstance(result, Exception):
            message = str(result) if isinstance(result, AssetRehostError) else (
                f"Rehost failed for {url}: {type(result).__name__}: {result}"
            )
            print(f"Warning: {message}")
            failures[url] = message
        else:
            # Cancellation and interpreter exits are not asset failures
            raise result
    return url_map, failures


def rehost_components(
    components: List[Component],
    host: AssetHost,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> Tuple[List[Component], Dict[str, str]]:
    """
    Rehost every transient Image URL of a tree (sync wrapper).

    Args:
        components: Component tree.
        host: Permanent asset host.
        transport: Optional httpx transport for downloads (used by tests).

    Returns:
        Tuple of (rewritten tree, failures). Failed URLs keep their original value.
    """
    urls = collect_transient_urls(components)
    if not urls:
        return components, {}

    url_map, failures = asyncio.run(rehost_urls_async(urls, host, transport=transport))
    return rewrite_image_urls(components, url_map), failures
