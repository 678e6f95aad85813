"""
Component tree → flat HTML rendering and screenshot capture using Playwright.

Rendering uses inline presentational styles only, with the same defaults as
the markup classifier, so that re-importing rendered output reproduces it.
"""

import asyncio
from html import escape
from pathlib import Path
from typing import List, Optional, Union

from playwright.async_api import async_playwright

from design_importer.markup.styles import format_px
from design_importer.models import Component, ComponentType


def _style(declarations: List[str]) -> str:
    return ";".join(d for d in declarations if d)


def _attr(value) -> str:
    return escape(str(value if value is not None else ""), quote=True)


def _text(value) -> str:
    return escape(str(value if value is not None else ""), quote=False)


def _box_declarations(p: dict, has_children: bool) -> List[str]:
    return [
        f"padding:{p.get('paddingTop') or '0px'} {p.get('paddingRight') or '0px'} "
        f"{p.get('paddingBottom') or '0px'} {p.get('paddingLeft') or '0px'}",
        f"background-color:{p['backgroundColor']}" if p.get("backgroundColor") else "",
        f"max-width:{p.get('maxWidth') or '100%'}",
        f"border-radius:{p.get('borderRadius') or '0px'}",
        # An empty sized div would be re-read as a spacer
        "width:100%" if has_children else "",
        "box-sizing:border-box",
    ]


def _render_children(component: Component) -> str:
    return "\n".join(component_to_html(child) for child in component.children or [])


def _flex(component: Component) -> str:
    p = component.props
    has_children = bool(component.children)
    style = _style([
        "display:flex",
        f"flex-direction:{p.get('direction') or 'column'}",
        f"flex-wrap:{p['wrap']}" if p.get("wrap") else "",
        f"align-items:{p.get('alignItems') or 'stretch'}",
        f"justify-content:{p.get('justifyContent') or 'flex-start'}",
        f"gap:{format_px(p.get('gap') if p.get('gap') is not None else 0)}",
        *_box_declarations(p, has_children),
    ])
    return f'<div style="{_attr(style)}">\n{_render_children(component)}\n</div>'


def _grid(component: Component) -> str:
    p = component.props
    has_children = bool(component.children)
    style = _style([
        "display:grid",
        f"grid-template-columns:repeat({p.get('numColumns') or 2}, 1fr)",
        f"gap:{format_px(p.get('gap') if p.get('gap') is not None else 16)}",
        f"align-items:{p.get('alignItems') or 'stretch'}",
        *_box_declarations(p, has_children),
    ])
    return f'<div style="{_attr(style)}">\n{_render_children(component)}\n</div>'


def _space(component: Component) -> str:
    p = component.props
    size = p.get("size") or "24px"
    if p.get("direction") == "horizontal":
        return f'<div style="width:{_attr(size)}"></div>'
    return f'<div style="height:{_attr(size)}"></div>'


def _heading(component: Component) -> str:
    p = component.props
    level = str(p.get("level") or 2).lower().lstrip("h")
    if level not in {"1", "2", "3", "4", "5", "6"}:
        level = "2"
    style = _style([
        f"color:{p.get('color') or '#000000'}",
        f"font-size:{p.get('fontSize') or '24px'}",
        f"font-weight:{p.get('fontWeight') or '700'}",
        f"text-align:{p.get('textAlign') or 'left'}",
        "margin:0",
    ])
    return f'<h{level} style="{_attr(style)}">{_text(p.get("text"))}</h{level}>'


def _paragraph(component: Component) -> str:
    p = component.props
    style = _style([
        f"color:{p.get('color') or '#333333'}",
        f"font-size:{p.get('fontSize') or '16px'}",
        f"font-weight:{p.get('fontWeight') or '400'}",
        f"text-align:{p.get('textAlign') or 'left'}",
        "margin:0",
    ])
    return f'<p style="{_attr(style)}">{_text(p.get("text"))}</p>'


def _image(component: Component) -> str:
    p = component.props
    style = _style([
        f"width:{p.get('width') or '100%'}",
        f"height:{p.get('height') or 'auto'}",
        f"object-fit:{p.get('objectFit') or 'cover'}",
        f"border-radius:{p.get('borderRadius') or '0px'}",
        "display:block",
    ])
    return f'<img src="{_attr(p.get("src"))}" alt="{_attr(p.get("alt"))}" style="{_attr(style)}" />'


def _button(component: Component) -> str:
    p = component.props
    full_width = bool(p.get("fullWidth"))
    style = _style([
        f"display:{'block' if full_width else 'inline-block'}",
        f"background-color:{p.get('backgroundColor') or '#2563eb'}",
        f"color:{p.get('color') or '#ffffff'}",
        f"font-size:{p.get('fontSize') or '16px'}",
        f"font-weight:{p.get('fontWeight') or '600'}",
        f"padding:{p.get('paddingY') or '12px'} {p.get('paddingX') or '24px'}",
        f"border-radius:{p.get('borderRadius') or '8px'}",
        "text-decoration:none",
        "text-align:center",
        "cursor:pointer",
        "width:100%" if full_width else "",
        "box-sizing:border-box",
        "border:none",
    ])
    return (
        f'<a href="{_attr(p.get("href") or "#")}" role="button" style="{_attr(style)}">'
        f'{_text(p.get("text"))}</a>'
    )


def _divider(component: Component) -> str:
    p = component.props
    style = _style([
        "border:none",
        f"border-top:{p.get('thickness') or '1px'} solid {p.get('color') or '#e5e7eb'}",
        "margin:0",
        "width:100%",
    ])
    return f'<hr style="{_attr(style)}" />'


RENDERERS = {
    ComponentType.FLEX: _flex,
    ComponentType.GRID: _grid,
    ComponentType.SPACE: _space,
    ComponentType.HEADING: _heading,
    ComponentType.TEXT: _paragraph,
    ComponentType.IMAGE: _image,
    ComponentType.BUTTON: _button,
    ComponentType.DIVIDER: _divider,
}


def component_to_html(component: Component) -> str:
    """Render a single component (and its subtree) to markup."""
    renderer = RENDERERS.get(component.type)
    if renderer is None:
        return ""
    return renderer(component)


def components_to_html(components: List[Component]) -> str:
    """Render a component forest to a flat HTML string."""
    return "\n".join(component_to_html(component) for component in components)


DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
  <style>
    body {{
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
      margin: 0;
      padding: 0;
    }}
  </style>
</head>
<body>
{body}
</body>
</html>"""


def wrap_in_document(body_html: str, title: str = "Imported Design") -> str:
    """Wrap rendered body markup in a complete HTML document."""
    return DOCUMENT_TEMPLATE.format(title=escape(title), body=body_html)


class HTMLRenderer:
    """Renders markup in a headless browser and captures screenshots."""

    def __init__(
        self,
        headless: bool = True,
        browser_type: str = "chromium"
    ):
        """
        Initialize the renderer.

        Args:
            headless: Whether to run browser in headless mode.
            browser_type: Browser to use (chromium, firefox, webkit).
        """
        self.headless = headless
        self.browser_type = browser_type

    async def _screenshot_async(
        self,
        html: str,
        width: int,
        height: int,
        wait_time: int
    ) -> bytes:
        async with async_playwright() as p:
            if self.browser_type == "chromium":
                browser = await p.chromium.launch(headless=self.headless)
            elif self.browser_type == "firefox":
                browser = await p.firefox.launch(headless=self.headless)
            elif self.browser_type == "webkit":
                browser = await p.webkit.launch(headless=self.headless)
            else:
                raise ValueError(f"Unsupported browser: {self.browser_type}")

            context = await browser.new_context(
                viewport={"width": width, "height": height},
                device_scale_factor=1
            )
            page = await context.new_page()
            await page.set_content(html, wait_until="networkidle")
            await page.wait_for_timeout(wait_time)

            image_bytes = await page.screenshot(full_page=True)

            await context.close()
            await browser.close()

        return image_bytes

    def screenshot_html(
        self,
        html: str,
        output_path: Optional[Union[str, Path]] = None,
        width: int = 1280,
        height: int = 800,
        wait_time: int = 500
    ) -> bytes:
        """
        Render markup and capture a full-page PNG (sync wrapper).

        Fragments are wrapped in a complete document first.

        Args:
            html: Markup to render.
            output_path: Optional path to save the screenshot.
            width: Viewport width.
            height: Viewport height.
            wait_time: Time to wait for rendering (ms).

        Returns:
            PNG bytes.
        """
        if "<html" not in html.lower():
            html = wrap_in_document(html)

        image_bytes = asyncio.run(self._screenshot_async(html, width, height, wait_time))

        if output_path is not None:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(image_bytes)

        return image_bytes

    def screenshot_components(
        self,
        components: List[Component],
        output_path: Optional[Union[str, Path]] = None,
        width: int = 1280
    ) -> bytes:
        """Render a component tree and capture it."""
        return self.screenshot_html(components_to_html(components), output_path, width=width)

