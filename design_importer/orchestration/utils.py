"""
Utility functions for orchestration system.
"""

from typing import Optional, Tuple

from design_importer.orchestration.state import ImportState


def validate_state(state: ImportState) -> Tuple[bool, Optional[str]]:
    """
    Validate that state has the inputs the graph needs.

    Args:
        state: Initial ImportState

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not state.get("request_id"):
        return False, "request_id is required"
    if not state.get("screenshot"):
        return False, "screenshot is required"
    if state.get("max_refinements", 0) < 0:
        return False, "max_refinements must not be negative"
    return True, None
