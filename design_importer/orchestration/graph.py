"""
LangGraph construction and entry points for the design import pipeline.

The graph is built per request: generate, then up to ``max_refinements``
strictly sequential refinement calls, then rehosting of transient assets.
"""

import os
import uuid
from typing import List, Literal, Optional

import httpx
from dotenv import load_dotenv
from langgraph.graph import END, StateGraph

from design_importer.figma.layout_info import build_layout_info
from design_importer.figma.walker import DesignSource, collect_design_assets
from design_importer.io.asset_host import AssetHost
from design_importer.io.screenshot_loader import ScreenshotLoader
from design_importer.markup.tree_builder import html_to_components
from design_importer.models import DesignAsset, ImportResult, ImportStatus, LayoutInfo
from design_importer.orchestration.nodes import (
    make_generate_node,
    make_refine_node,
    make_rehost_node,
)
from design_importer.orchestration.state import ImportState
from design_importer.orchestration.utils import validate_state
from design_importer.pipeline.generation import GenerationOracle
from design_importer.rendering.editor_document import serialize_components
from design_importer.rendering.html_renderer import HTMLRenderer, components_to_html

DEFAULT_MAX_REFINEMENTS = 2


def get_max_refinements() -> int:
    """Refinement cap from DESIGN_IMPORT_MAX_REFINEMENTS."""
    load_dotenv()
    value = int(os.getenv("DESIGN_IMPORT_MAX_REFINEMENTS", str(DEFAULT_MAX_REFINEMENTS)))
    if value < 0:
        raise ValueError("DESIGN_IMPORT_MAX_REFINEMENTS must not be negative")
    return value


def route_after_generate(state: ImportState) -> Literal["refine", "rehost", END]:
    if state.get("status") == "failed":
        return END
    if state.get("max_refinements", 0) > 0:
        return "refine"
    return "rehost"


def route_after_refine(state: ImportState) -> Literal["refine", "rehost"]:
    if state.get("refinement_done"):
        return "rehost"
    if state.get("iteration", 0) >= state.get("max_refinements", 0):
        return "rehost"
    return "refine"


def create_import_graph(
    oracle: GenerationOracle,
    asset_host: Optional[AssetHost] = None,
    renderer: Optional[HTMLRenderer] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
):
    """
    Create and compile the import graph for one request.

    Args:
        oracle: Generation oracle.
        asset_host: Permanent asset host (rehosting is skipped when None).
        renderer: Optional renderer attaching render screenshots to refinement calls.
        transport: Optional httpx transport for asset downloads.

    Returns:
        Compiled LangGraph application
    """
    graph = StateGraph(ImportState)

    graph.add_node("generate", make_generate_node(oracle))
    graph.add_node("refine", make_refine_node(oracle, renderer))
    graph.add_node("rehost", make_rehost_node(asset_host, transport))

    graph.set_entry_point("generate")

    graph.add_conditional_edges(
        "generate",
        route_after_generate,
        {"refine": "refine", "rehost": "rehost", END: END},
    )
    graph.add_conditional_edges(
        "refine",
        route_after_refine,
        {"refine": "refine", "rehost": "rehost"},
    )
    graph.add_edge("rehost", END)

    return graph.compile()


def run_design_import(
    screenshot: str,
    oracle: GenerationOracle,
    assets: Optional[List[DesignAsset]] = None,
    layout_info: Optional[LayoutInfo] = None,
    design_code: Optional[str] = None,
    asset_host: Optional[AssetHost] = None,
    max_refinements: Optional[int] = None,
    request_id: Optional[str] = None,
    renderer: Optional[HTMLRenderer] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> ImportResult:
    """
    Generate, refine and rehost a component tree for one design screenshot.

    Args:
        screenshot: Base64 PNG of the design.
        oracle: Generation oracle.
        assets: Exported design assets.
        layout_info: Layout facts of the design node.
        design_code: Optional reference code from the design tool.
        asset_host: Permanent asset host (rehosting is skipped when None).
        max_refinements: Refinement cap (env DESIGN_IMPORT_MAX_REFINEMENTS when None).
        request_id: Request identifier (generated when None).
        renderer: Optional renderer for render screenshots during refinement.
        transport: Optional httpx transport for asset downloads.

    Returns:
        ImportResult. Failed generation yields status ``failed`` and no tree.
    """
    cap = get_max_refinements() if max_refinements is None else max_refinements
    request_id = request_id or uuid.uuid4().hex[:12]

    app = create_import_graph(oracle, asset_host, renderer, transport)
    initial: ImportState = {
        "request_id": request_id,
        "screenshot": screenshot,
        "assets": list(assets or []),
        "layout_info": layout_info,
        "design_code": design_code,
        "components": None,
        "status": "generating",
        "error": None,
        "iteration": 0,
        "max_refinements": cap,
        "refinement_done": False,
        "rehost_failures": {},
        "history": [],
    }
    is_valid, error = validate_state(initial)
    if not is_valid:
        raise ValueError(error)

    final = app.invoke(initial, config={"recursion_limit": cap * 2 + 10})

    if final.get("status") == "failed":
        return ImportResult(
            request_id=request_id,
            status=ImportStatus.FAILED,
            error=final.get("error"),
            history=final.get("history", []),
        )

    components = final.get("components") or []
    return ImportResult(
        request_id=request_id,
        status=ImportStatus.DONE,
        components=components,
        html=components_to_html(components),
        editor_document=serialize_components(components),
        refinement_calls=final.get("iteration", 0),
        rehost_failures=final.get("rehost_failures", {}),
        history=final.get("history", []),
    )


def import_markup(markup: str, request_id: Optional[str] = None) -> ImportResult:
    """Deterministic import path: markup → component tree → editor document."""
    components = html_to_components(markup)
    return ImportResult(
        request_id=request_id or uuid.uuid4().hex[:12],
        status=ImportStatus.DONE,
        components=components,
        html=components_to_html(components),
        editor_document=serialize_components(components),
    )


def import_design_node(
    file_key: str,
    node_id: str,
    design_source: DesignSource,
    oracle: GenerationOracle,
    asset_host: Optional[AssetHost] = None,
    design_code: Optional[str] = None,
    max_refinements: Optional[int] = None,
    request_id: Optional[str] = None,
    renderer: Optional[HTMLRenderer] = None
) -> ImportResult:
    """
    Full design-source path: fetch, walk, screenshot, then run the import graph.

    Design source errors propagate before the graph starts.
    """
    root = design_source.get_node(file_key, node_id)
    assets = collect_design_assets(root, file_key, design_source)
    layout_info = build_layout_info(root)
    screenshot = ScreenshotLoader().prepare_for_llm(
        design_source.render_screenshot(file_key, node_id)
    )["image"]

    return run_design_import(
        screenshot,
        oracle,
        assets=assets,
        layout_info=layout_info,
        design_code=design_code,
        asset_host=asset_host,
        max_refinements=max_refinements,
        request_id=request_id,
        renderer=renderer,
    )
