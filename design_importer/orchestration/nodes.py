"""
Node functions for the import graph.

Each node takes state and returns a partial state update. The oracle, asset
host and renderer are injected per run, so the factories below close over
them instead of reading globals.
"""

import base64
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import httpx

from design_importer.io.asset_host import AssetHost, rehost_components
from design_importer.models import Component
from design_importer.pipeline.generation import (
    GenerationOracle,
    MalformedOracleOutput,
    parse_oracle_response,
)
from design_importer.rendering.html_renderer import HTMLRenderer, components_to_html
from design_importer.orchestration.state import ImportState

Node = Callable[[ImportState], Dict[str, Any]]


def copy_tree(components: List[Component]) -> List[Component]:
    """Deep copy so iterations never share nodes."""
    return [component.model_copy(deep=True) for component in components]


def history_entry(stage: str, status: str, **details: Any) -> Dict[str, Any]:
    return {
        "stage": stage,
        "status": status,
        "timestamp": datetime.now().isoformat(),
        **details,
    }


def make_generate_node(oracle: GenerationOracle) -> Node:
    """Node producing the initial tree; a malformed response fails the run."""

    def generate_node(state: ImportState) -> Dict[str, Any]:
        response = oracle.generate(
            state["screenshot"],
            list(state.get("assets") or []),
            state.get("layout_info"),
            state.get("design_code"),
        )

        try:
            components = parse_oracle_response(response)
            if components is None:
                raise MalformedOracleOutput("Oracle returned the no-change sentinel for generation")
        except MalformedOracleOutput as e:
            print(f"Error in generate_node: {e}")
            return {
                "status": "failed",
                "error": str(e),
                "components": None,
                "history": [history_entry("generate", "failed", error=str(e))],
            }

        return {
            "status": "refining",
            "components": components,
            "iteration": 0,
            "refinement_done": False,
            "history": [history_entry("generate", "ok", components=len(components))],
        }

    return generate_node


def make_refine_node(
    oracle: GenerationOracle,
    renderer: Optional[HTMLRenderer] = None
) -> Node:
    """
    Node running one refinement call.

    Args:
        oracle: Generation oracle.
        renderer: Optional renderer; when given, a screenshot of the current
            tree is attached to the call.
    """

    def refine_node(state: ImportState) -> Dict[str, Any]:
        current = state["components"]
        iteration = state.get("iteration", 0) + 1
        rendered_html = components_to_html(current)

        try:
            render_screenshot = None
            if renderer is not None:
                png = renderer.screenshot_html(rendered_html)
                render_screenshot = base64.b64encode(png).decode("utf-8")

            response = oracle.refine(
                state["screenshot"], rendered_html, copy_tree(current), render_screenshot
            )
        except Exception as e:
            # Only generation may fail the run; the current tree stands
            error = f"{type(e).__name__}: {e}"
            print(f"Warning: Refinement {iteration} failed, keeping current tree: {error}")
            return {
                "iteration": iteration,
                "refinement_done": True,
                "history": [history_entry("refine", "error", iteration=iteration, error=error)],
            }

        try:
            corrected = parse_oracle_response(response)
        except MalformedOracleOutput as e:
            print(f"Warning: Refinement {iteration} returned malformed output, keeping current tree: {e}")
            return {
                "iteration": iteration,
                "refinement_done": True,
                "history": [history_entry("refine", "malformed", iteration=iteration, error=str(e))],
            }

        if corrected is None:
            return {
                "iteration": iteration,
                "refinement_done": True,
                "history": [history_entry("refine", "no_changes", iteration=iteration)],
            }

        return {
            "components": corrected,
            "iteration": iteration,
            "history": [history_entry("refine", "changed", iteration=iteration, components=len(corrected))],
        }

    return refine_node


def make_rehost_node(
    asset_host: Optional[AssetHost],
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> Node:
    """Node moving transient image URLs to the permanent host."""

    def rehost_node(state: ImportState) -> Dict[str, Any]:
        components = state["components"]
        if asset_host is None:
            return {
                "status": "done",
                "rehost_failures": {},
                "history": [history_entry("rehost", "skipped")],
            }

        rehosted, failures = rehost_components(components, asset_host, transport=transport)
        return {
            "status": "done",
            "components": rehosted,
            "rehost_failures": failures,
            "history": [
                history_entry("rehost", "partial" if failures else "ok", failed_urls=sorted(failures))
            ],
        }

    return rehost_node
