"""
Component tree → editor document serialization.

The editor stores nesting out of line: every container's children live in a
zone keyed ``"<containerId>:children"`` instead of inside the container.
"""

import itertools
import uuid
from typing import Dict, List, Optional

from design_importer.models import Component, EditorDocument, EditorNode


def new_id_prefix() -> str:
    """A fresh id prefix so ids from separate builds never collide."""
    return f"comp-{uuid.uuid4().hex[:8]}"


def zone_key(component_id: str) -> str:
    return f"{component_id}:children"


def serialize_components(
    components: List[Component],
    id_prefix: Optional[str] = None
) -> EditorDocument:
    """
    Flatten a component tree into an editor document.

    Ids are assigned in a single depth-first pass; the counter belongs to
    this call only.

    Args:
        components: Top-level components.
        id_prefix: Optional id prefix (a unique one is generated when omitted).

    Returns:
        EditorDocument with top-level content and zone-keyed children.
    """
    prefix = id_prefix or new_id_prefix()
    counter = itertools.count(1)
    content: List[EditorNode] = []
    zones: Dict[str, List[EditorNode]] = {}

    def process(component: Component, parent_zone: Optional[str] = None) -> None:
        component_id = f"{prefix}-{next(counter)}"
        node = EditorNode(
            type=component.type.value,
            props={**component.props, "id": component_id},
        )

        if parent_zone is None:
            content.append(node)
        else:
            zones[parent_zone].append(node)

        if component.is_container and component.children:
            key = zone_key(component_id)
            zones[key] = []
            for child in component.children:
                process(child, key)

    for component in components:
        process(component)

    return EditorDocument(content=content, zones=zones or None)


def deserialize_document(document: EditorDocument) -> List[Component]:
    """Rebuild the nested component tree from an editor document."""
    zones = document.zones or {}

    def build(node: EditorNode) -> Component:
        props = {key: value for key, value in node.props.items() if key != "id"}
        component = Component(type=node.type, props=props)
        if component.is_container:
            component.children = [build(child) for child in zones.get(zone_key(node.id), [])]
        return component

    return [build(node) for node in document.content]
