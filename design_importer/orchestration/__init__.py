"""
LangGraph orchestration for generating and refining component trees from designs.

The graph runs one generation call, a bounded sequence of refinement calls
and a final asset rehosting pass.
"""

from design_importer.orchestration.graph import (
    create_import_graph,
    import_design_node,
    import_markup,
    run_design_import,
)
from design_importer.orchestration.state import ImportState
from design_importer.orchestration.utils import validate_state

__all__ = [
    "create_import_graph",
    "import_design_node",
    "import_markup",
    "run_design_import",
    "ImportState",
    "validate_state",
]
