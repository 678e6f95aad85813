"""
Tests for markup → component tree conversion.
"""

import pytest

from design_importer.markup.tree_builder import html_to_components
from design_importer.models import ComponentType


@pytest.mark.parametrize("markup", [None, "", "   \n  "])
def test_empty_input_gives_empty_forest(markup):
    assert html_to_components(markup) == []


def test_plain_text_becomes_single_text():
    components = html_to_components("just some words")

    assert len(components) == 1
    assert components[0].type == ComponentType.TEXT
    assert components[0].props["text"] == "just some words"


def test_full_document_uses_body():
    markup = """
    <!DOCTYPE html>
    <html>
      <head><title>Ignored</title><style>p { color: red }</style></head>
      <body>
        <h1>Welcome</h1>
        <script>console.log("x")</script>
        <p>Intro</p>
      </body>
    </html>
    """

    components = html_to_components(markup)

    assert [c.type for c in components] == [ComponentType.HEADING, ComponentType.TEXT]
    assert components[0].props["text"] == "Welcome"


def test_nested_containers_keep_document_order():
    markup = """
    <section>
      <div style="display:grid;grid-template-columns:repeat(2, 1fr)">
        <div><p>One</p><img src="1.png"></div>
        <div><p>Two</p><img src="2.png"></div>
      </div>
      <hr>
      <a href="/more" role="button">More</a>
    </section>
    """

    components = html_to_components(markup)

    assert len(components) == 1
    section = components[0]
    assert section.type == ComponentType.FLEX
    assert [c.type for c in section.children] == [
        ComponentType.GRID, ComponentType.DIVIDER, ComponentType.BUTTON,
    ]

    grid = section.children[0]
    assert grid.props["numColumns"] == 2
    assert [cell.type for cell in grid.children] == [ComponentType.FLEX, ComponentType.FLEX]
    assert [c.props.get("text") or c.props.get("src") for c in grid.children[1].children] == ["Two", "2.png"]


def test_hidden_subtrees_are_dropped_at_any_depth():
    markup = """
    <div>
      <div style="display:none"><p>secret</p></div>
      <p>visible</p>
      <div><p style="display: none">also secret</p><p>shown</p><img src="a.png"></div>
    </div>
    """

    components = html_to_components(markup)

    texts = []

    def collect(component):
        if component.type == ComponentType.TEXT:
            texts.append(component.props["text"])
        for child in component.children or []:
            collect(child)

    for component in components:
        collect(component)

    assert texts == ["visible", "shown"]


def test_only_containers_have_children():
    markup = "<div><h2>T</h2><p>x</p><button>b</button><img src='i.png'></div>"

    def check(component):
        if component.is_container:
            assert component.children is not None
            for child in component.children:
                check(child)
        else:
            assert component.children is None

    for component in html_to_components(markup):
        check(component)


@pytest.mark.parametrize("markup", [
    "<",
    "<<>>",
    "<div><p>unclosed",
    "<!-- only a comment -->",
    "<table><tr><td>cell",
    "</p></div>",
    "<div style='padding:;;;'>x</div>",
    "<img>",
    "<div>" * 600 + "<p>x</p><p>y</p><p>z</p>" + "</div>" * 600,
])
def test_never_raises_on_malformed_markup(markup):
    result = html_to_components(markup)

    assert isinstance(result, list)


def test_deeply_nested_markup_keeps_its_structure():
    depth = 1500
    markup = "<div>" * depth + "<p>x</p><p>y</p><p>z</p>" + "</div>" * depth

    components = html_to_components(markup)

    levels = 0
    while len(components) == 1 and components[0].type == ComponentType.FLEX:
        components = components[0].children
        levels += 1
    assert levels == depth
    assert [c.props["text"] for c in components] == ["x", "y", "z"]
