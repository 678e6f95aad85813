"""
Tests for editor document serialization.
"""

from design_importer.models import Component, ComponentType, components_to_json
from design_importer.rendering.editor_document import deserialize_document, serialize_components


def sample_tree():
    return [
        Component(
            type=ComponentType.FLEX,
            props={"direction": "column"},
            children=[
                Component(type=ComponentType.TEXT, props={"text": "Hello"}),
                Component(
                    type=ComponentType.GRID,
                    props={"numColumns": 2},
                    children=[Component(type=ComponentType.IMAGE, props={"src": "a.png"})],
                ),
            ],
        ),
        Component(type=ComponentType.DIVIDER, props={"thickness": "1px"}),
    ]


def all_nodes(document):
    nodes = list(document.content)
    for zone in (document.zones or {}).values():
        nodes.extend(zone)
    return nodes


def test_depth_first_ids_and_zones():
    document = serialize_components(sample_tree(), id_prefix="t")

    assert [node.id for node in document.content] == ["t-1", "t-5"]
    assert {key: [n.id for n in nodes] for key, nodes in document.zones.items()} == {
        "t-1:children": ["t-2", "t-3"],
        "t-3:children": ["t-4"],
    }
    assert document.content[0].type == "Flex"
    assert document.content[0].props == {"direction": "column", "id": "t-1"}


def test_zone_nodes_never_appear_in_content():
    document = serialize_components(sample_tree())

    content_ids = {node.id for node in document.content}
    zone_ids = {node.id for nodes in document.zones.values() for node in nodes}

    assert not content_ids & zone_ids


def test_ids_are_unique_across_separate_calls():
    first = serialize_components(sample_tree())
    second = serialize_components(sample_tree())

    first_ids = {node.id for node in all_nodes(first)}
    second_ids = {node.id for node in all_nodes(second)}

    assert len(first_ids) == 5
    assert not first_ids & second_ids


def test_flat_tree_has_no_zones():
    document = serialize_components([Component(type=ComponentType.TEXT, props={"text": "x"})])

    assert document.zones is None
    assert document.root == {"props": {}}


def test_empty_container_gets_no_zone():
    document = serialize_components(
        [Component(type=ComponentType.FLEX, props={}, children=[])], id_prefix="e"
    )

    assert document.zones is None


def test_deserialize_rebuilds_the_tree():
    tree = sample_tree()

    rebuilt = deserialize_document(serialize_components(tree))

    assert components_to_json(rebuilt) == components_to_json(tree)


def test_source_tree_is_not_mutated():
    tree = sample_tree()

    serialize_components(tree)

    assert "id" not in tree[0].props
    assert "id" not in tree[0].children[0].props
