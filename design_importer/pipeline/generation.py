"""
LangChain-based vision oracle for generating and refining component trees
from design screenshots.
"""

import json
import os
from typing import Any, Dict, List, Optional, Protocol

from dotenv import load_dotenv
from langchain_anthropic import ChatAnthropic
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import ValidationError

from design_importer.models import Component, DesignAsset, LayoutInfo, components_to_json
from design_importer.utils.llm_logger import LoggedLLM

NO_CHANGES = "NO_CHANGES"

DEFAULT_MODELS = {
    "anthropic": "claude-sonnet-4-20250514",
    "openai": "gpt-4o",
}


COMPONENT_SCHEMA = """Component vocabulary (JSON). Every node is {"type": ..., "props": {...}} and only
Flex and Grid may have "children" (an array of nodes).

- Flex: direction ("column" | "row"), justifyContent, alignItems, wrap ("nowrap" | "wrap"),
  gap (number, px), paddingTop, paddingRight, paddingBottom, paddingLeft (e.g. "16px"),
  backgroundColor (CSS color or ""), borderRadius (e.g. "8px"), maxWidth (e.g. "600px" or "100%")
- Grid: numColumns (number), gap (number, px), alignItems, plus the Flex box props
- Space: size (e.g. "24px"), direction ("vertical" | "horizontal")
- Heading: text, level (1-6), color, fontSize, fontWeight, textAlign
- Text: text, color, fontSize, fontWeight, textAlign
- Image: src, alt, width, height, objectFit, borderRadius
- Button: text, href, backgroundColor, color, fontSize, fontWeight, paddingX, paddingY,
  borderRadius, fullWidth (boolean)
- Divider: thickness (e.g. "1px"), color"""


GENERATION_SYSTEM_PROMPT = f"""You are a frontend developer who converts design screenshots into an
editable component tree.

{COMPONENT_SCHEMA}

Rules:
1. Reproduce the structure, spacing, colors and typography of the screenshot as closely as the
   vocabulary allows. Use the layout facts you are given for exact sizes and gaps.
2. Use Flex for stacks and rows and Grid only for true multi-column grids.
3. Use the provided asset URLs for images, logos and icons. Never invent image URLs.
   Assets marked as vector are flattened graphics (logos, icons, illustrations): render
   them as a single Image at their listed size.
4. Output ONLY a JSON array of top-level components. No markdown, no explanation."""


REFINEMENT_SYSTEM_PROMPT = f"""You are reviewing a component tree generated from a design screenshot.
You are given the original screenshot, the tree as JSON, and the HTML the tree renders to.

{COMPONENT_SCHEMA}

Check the tree against the screenshot for these common defects:
- maxWidth is over-constrained (content narrower than in the design)
- Button borderRadius is pill-shaped when the design shows a small radius
- Close buttons and dismiss icons are not right-aligned
- Images and logos are not centered where the design centers them
- Images or logos sit on a duplicated background (container and image both colored)
- Buttons are fullWidth when the design shows an auto-width button, or the reverse
- Asset sizes are implausible compared with the screenshot

If the tree already matches the design, respond with exactly {NO_CHANGES}.
Otherwise respond with ONLY the complete corrected JSON array. No markdown, no explanation."""


class MalformedOracleOutput(ValueError):
    """Raised when the oracle response is not a valid component array."""


class GenerationOracle(Protocol):
    """External model that generates and corrects component trees."""

    def generate(
        self,
        screenshot: str,
        assets: List[DesignAsset],
        layout_info: Optional[LayoutInfo],
        design_code: Optional[str] = None
    ) -> str: ...

    def refine(
        self,
        screenshot: str,
        rendered_html: str,
        components: List[Component],
        render_screenshot: Optional[str] = None
    ) -> str: ...


class ResponseParser:
    """Parses oracle responses into component trees."""

    @staticmethod
    def strip_code_fences(response_text: str) -> str:
        """
        Remove markdown code fences around the payload if present.

        Args:
            response_text: Raw oracle response.

        Returns:
            Fence-free, stripped text.
        """
        text = response_text.strip()
        if "```json" in text:
            parts = text.split("```json")
            if len(parts) > 1:
                return parts[1].split("```")[0].strip()
        elif "```" in text:
            parts = text.split("```")
            if len(parts) >= 3:
                return parts[1].strip()
        return text

    @staticmethod
    def is_no_changes(response_text: str) -> bool:
        return ResponseParser.strip_code_fences(response_text).strip("` \n.") == NO_CHANGES

    @staticmethod
    def parse_components(response_text: str) -> List[Component]:
        """
        Parse a JSON component array.

        Raises:
            MalformedOracleOutput: If the text is not a JSON array of valid components.
        """
        text = ResponseParser.strip_code_fences(response_text)
        if not text.startswith("[") and "[" in text and "]" in text:
            text = text[text.index("["):text.rindex("]") + 1]

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedOracleOutput(f"Oracle response is not valid JSON: {e}") from e

        if not isinstance(data, list):
            raise MalformedOracleOutput(
                f"Oracle response must be a JSON array, got {type(data).__name__}"
            )

        try:
            return [Component.model_validate(item) for item in data]
        except ValidationError as e:
            raise MalformedOracleOutput(f"Oracle response has invalid components: {e}") from e


def parse_oracle_response(response_text: str) -> Optional[List[Component]]:
    """
    Parse an oracle response.

    Returns:
        None for the no-change sentinel, otherwise the parsed tree.

    Raises:
        MalformedOracleOutput: If the response is neither the sentinel nor a valid tree.
    """
    if ResponseParser.is_no_changes(response_text):
        return None
    return ResponseParser.parse_components(response_text)


def response_text(response: Any) -> str:
    """Text of a chat model response (content may be a list of blocks)."""
    content = getattr(response, "content", response)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        )
    return str(content)


def get_oracle_llm(
    component: str,
    provider: Optional[str] = None,
    model_name: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    request_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> LoggedLLM:
    """
    Get the chat model used by the vision oracle.

    Args:
        component: Component name for logging ("generator" or "refiner").
        provider: anthropic or openai. If None, reads DESIGN_IMPORT_PROVIDER.
        model_name: Model to use. If None, reads DESIGN_IMPORT_MODEL.
        temperature: Generation temperature. If None, reads DESIGN_IMPORT_TEMPERATURE.
        max_tokens: Output limit. If None, reads DESIGN_IMPORT_MAX_TOKENS.
        request_id: Optional request ID for log grouping.
        metadata: Optional additional metadata for logging.

    Returns:
        LoggedLLM wrapper around ChatAnthropic or ChatOpenAI.
    """
    load_dotenv()

    provider = (provider or os.getenv("DESIGN_IMPORT_PROVIDER", "anthropic")).lower()
    if provider not in DEFAULT_MODELS:
        raise ValueError(f"Unsupported provider: {provider}")
    model = model_name or os.getenv("DESIGN_IMPORT_MODEL") or DEFAULT_MODELS[provider]
    temp = temperature if temperature is not None else float(os.getenv("DESIGN_IMPORT_TEMPERATURE", "0.2"))
    tokens = max_tokens if max_tokens is not None else int(os.getenv("DESIGN_IMPORT_MAX_TOKENS", "8192"))

    if provider == "anthropic":
        api_key = os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable not set")
        llm_instance = ChatAnthropic(model=model, temperature=temp, max_tokens=tokens, api_key=api_key)
    else:
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY environment variable not set")
        llm_instance = ChatOpenAI(model=model, temperature=temp, max_tokens=tokens, api_key=api_key)

    return LoggedLLM(
        llm_instance=llm_instance,
        component=component,
        provider=provider,
        model=model,
        request_id=request_id,
        metadata=metadata or {},
    )


def describe_assets(assets: List[DesignAsset]) -> str:
    if not assets:
        return "No exported assets."
    lines = []
    for asset in assets:
        kind = "vector" if asset.is_vector else "image"
        lines.append(
            f'- "{asset.node_name}" ({kind}, {asset.width}x{asset.height}px): {asset.image_url}'
        )
    return "\n".join(lines)


def build_generation_prompt(
    assets: List[DesignAsset],
    layout_info: Optional[LayoutInfo],
    design_code: Optional[str] = None
) -> str:
    sections = ["Convert the attached design screenshot into a component tree."]
    if layout_info is not None:
        sections.append(
            "Layout facts (pixels, child boxes relative to the content frame):\n"
            + layout_info.model_dump_json(indent=2, exclude_none=True)
        )
    sections.append("Assets:\n" + describe_assets(assets))
    if design_code:
        sections.append("Reference code exported from the design tool:\n" + design_code)
    sections.append("Respond with the JSON array only.")
    return "\n\n".join(sections)


def build_refinement_prompt(rendered_html: str, components: List[Component]) -> str:
    return "\n\n".join([
        "The first image is the original design.",
        "Current component tree:\n" + json.dumps(components_to_json(components), indent=2),
        "HTML rendered from the tree:\n" + rendered_html,
        f"Respond with {NO_CHANGES} or the corrected JSON array.",
    ])


class VisionOracle:
    """Generation oracle backed by a multimodal LangChain chat model."""

    def __init__(
        self,
        provider: Optional[str] = None,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        request_id: Optional[str] = None
    ):
        """
        Initialize the oracle.

        Args:
            provider: LLM provider (anthropic or openai).
            model_name: Model name (optional, uses defaults).
            temperature: Generation temperature.
            max_tokens: Maximum tokens to generate.
            request_id: Request ID used to group call logs.
        """
        self.generator_llm = get_oracle_llm(
            "generator", provider, model_name, temperature, max_tokens, request_id
        )
        self.refiner_llm = get_oracle_llm(
            "refiner", provider, model_name, temperature, max_tokens, request_id
        )
        self.provider = self.generator_llm.provider

    def _image_block(self, image_b64: str) -> Dict[str, Any]:
        if self.provider == "openai":
            return {
                "type": "image_url",
                "image_url": {"url": f"data:image/png;base64,{image_b64}"},
            }
        return {
            "type": "image",
            "source": {"type": "base64", "media_type": "image/png", "data": image_b64},
        }

    def generate(
        self,
        screenshot: str,
        assets: List[DesignAsset],
        layout_info: Optional[LayoutInfo],
        design_code: Optional[str] = None
    ) -> str:
        """
        Generate an initial tree.

        Args:
            screenshot: Base64 PNG of the design.
            assets: Exported assets with their URLs.
            layout_info: Layout facts of the design node, if available.
            design_code: Optional reference code from the design tool.

        Returns:
            Raw response text.
        """
        messages = [
            SystemMessage(content=GENERATION_SYSTEM_PROMPT),
            HumanMessage(content=[
                self._image_block(screenshot),
                {"type": "text", "text": build_generation_prompt(assets, layout_info, design_code)},
            ]),
        ]
        return response_text(self.generator_llm.invoke(messages))

    def refine(
        self,
        screenshot: str,
        rendered_html: str,
        components: List[Component],
        render_screenshot: Optional[str] = None
    ) -> str:
        """
        Ask for corrections of the current tree.

        Args:
            screenshot: Base64 PNG of the design.
            rendered_html: HTML rendered from the current tree.
            components: Current tree.
            render_screenshot: Optional base64 PNG of the rendered tree.

        Returns:
            Raw response text (the no-change sentinel or a corrected array).
        """
        content: List[Dict[str, Any]] = [self._image_block(screenshot)]
        if render_screenshot:
            content.append({"type": "text", "text": "The next image is the current render of the tree."})
            content.append(self._image_block(render_screenshot))
        content.append({"type": "text", "text": build_refinement_prompt(rendered_html, components)})

        messages = [
            SystemMessage(content=REFINEMENT_SYSTEM_PROMPT),
            HumanMessage(content=content),
        ]
        return response_text(self.refiner_llm.invoke(messages))
