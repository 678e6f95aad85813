"""
State management for LangGraph orchestration.

Defines ImportState as a TypedDict carrying the design inputs, the current
component tree, refinement bookkeeping and an append-only run history.
"""

import operator
from typing import Annotated, Any, Dict, List, Optional, TypedDict

from design_importer.models import Component, DesignAsset, LayoutInfo


class ImportState(TypedDict, total=False):
    """
    State for one design import request.

    All fields are optional (total=False) to allow incremental state updates.
    """

    request_id: str

    # Design inputs
    screenshot: str  # base64 PNG
    assets: List[DesignAsset]
    layout_info: Optional[LayoutInfo]
    design_code: Optional[str]

    # Current tree
    components: Optional[List[Component]]

    # Workflow control
    status: str  # "generating" | "refining" | "done" | "failed"
    error: Optional[str]
    iteration: int  # refinement calls made so far
    max_refinements: int
    refinement_done: bool

    rehost_failures: Dict[str, str]

    # Stage records, appended by every node
    history: Annotated[List[Dict[str, Any]], operator.add]
