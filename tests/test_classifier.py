"""
Tests for single-element classification.
"""

import pytest
from bs4 import BeautifulSoup

from design_importer.markup.classifier import classify_element, parse_grid_columns
from design_importer.models import ComponentType


def first_element(markup):
    return BeautifulSoup(markup, "html.parser").find()


def classify(markup):
    return classify_element(first_element(markup))


def test_image_defaults():
    component = classify('<img src="https://example.com/a.png" alt="Logo">')

    assert component.type == ComponentType.IMAGE
    assert component.props == {
        "src": "https://example.com/a.png",
        "alt": "Logo",
        "width": "100%",
        "height": "auto",
        "objectFit": "cover",
        "borderRadius": "0px",
    }


def test_divider_reads_border_top():
    component = classify('<hr style="border-top: 2px solid rgb(1, 2, 3)">')

    assert component.type == ComponentType.DIVIDER
    assert component.props == {"thickness": "2px", "color": "rgb(1, 2, 3)"}


def test_divider_defaults():
    component = classify("<hr>")

    assert component.props == {"thickness": "1px", "color": "#e5e7eb"}


def test_line_break_is_vertical_space():
    component = classify("<br>")

    assert component.type == ComponentType.SPACE
    assert component.props == {"size": "16px", "direction": "vertical"}


def test_heading_level_and_defaults():
    component = classify("<h3>Pricing</h3>")

    assert component.type == ComponentType.HEADING
    assert component.props["level"] == 3
    assert component.props["text"] == "Pricing"
    assert component.props["fontSize"] == "24px"
    assert component.props["fontWeight"] == "700"


def test_heading_wins_over_inner_markup():
    component = classify("<h1><span>Big</span> <img src='x.png'></h1>")

    assert component.type == ComponentType.HEADING
    assert component.props["text"] == "Big"


def test_button_element_links_to_hash():
    component = classify('<button style="background-color:#000;padding:4px 10px">Buy</button>')

    assert component.type == ComponentType.BUTTON
    assert component.props["href"] == "#"
    assert component.props["backgroundColor"] == "#000"
    assert component.props["paddingX"] == "10px"
    assert component.props["paddingY"] == "4px"
    assert component.props["fullWidth"] is False


def test_full_width_button():
    component = classify('<button style="display:block;width:100%">Go</button>')

    assert component.props["fullWidth"] is True


def test_link_with_role_button():
    component = classify('<a href="/signup" role="button">Sign up</a>')

    assert component.type == ComponentType.BUTTON
    assert component.props["href"] == "/signup"


def test_link_with_background_is_button():
    component = classify('<a href="/x" style="background-color:#f00">Red</a>')

    assert component.type == ComponentType.BUTTON


@pytest.mark.parametrize("style", ["", "background-color:transparent", "background:none"])
def test_plain_link_is_text(style):
    component = classify(f'<a href="/x" style="{style}">More</a>')

    assert component.type == ComponentType.TEXT
    assert component.props["text"] == "More"


def test_bold_tags_default_to_700():
    assert classify("<strong>Hi</strong>").props["fontWeight"] == "700"
    assert classify("<span>Hi</span>").props["fontWeight"] == "400"


def test_text_props_from_styles():
    component = classify('<p style="color:#111;font-size:18;text-align:center">Body</p>')

    assert component.props == {
        "text": "Body",
        "color": "#111",
        "fontSize": "18px",
        "fontWeight": "400",
        "textAlign": "center",
    }


def test_empty_text_tag_contributes_nothing():
    assert classify("<span>   </span>") is None


def test_text_tag_wrapping_image_acts_as_container():
    component = classify('<span><img src="a.png"></span>')

    assert component.type == ComponentType.FLEX


def test_div_with_only_text_is_text():
    component = classify("<div>Just words</div>")

    assert component.type == ComponentType.TEXT
    assert component.props["text"] == "Just words"


def test_inline_children_collapse_to_text():
    component = classify("<div>Hello <b>bold</b> world</div>")

    assert component.type == ComponentType.TEXT
    assert component.props["text"] == "Hello bold world"


def test_three_inline_children_stay_a_container():
    component = classify("<div><b>a</b><i>b</i><em>c</em></div>")

    assert component.type == ComponentType.FLEX


def test_div_with_block_child_is_flex():
    component = classify('<div style="flex-direction:row;gap:12px"><p>a</p></div>')

    assert component.type == ComponentType.FLEX
    assert component.props["direction"] == "row"
    assert component.props["gap"] == 12
    assert component.props["maxWidth"] == "100%"
    assert component.children == []


def test_grid_container():
    component = classify('<div style="display:grid;grid-template-columns:1fr 1fr 1fr;gap:8px"><div></div></div>')

    assert component.type == ComponentType.GRID
    assert component.props["numColumns"] == 3
    assert component.props["gap"] == 8


@pytest.mark.parametrize("value,expected", [
    (None, 2),
    ("", 2),
    ("repeat(5, 1fr)", 5),
    ("1fr 2fr 1fr 1fr", 4),
])
def test_parse_grid_columns(value, expected):
    assert parse_grid_columns(value) == expected


def test_sized_empty_div_is_spacer():
    vertical = classify('<div style="height:40px"></div>')
    horizontal = classify('<section style="width:20"></section>')

    assert vertical.type == ComponentType.SPACE
    assert vertical.props == {"size": "40px", "direction": "vertical"}
    assert horizontal.props == {"size": "20px", "direction": "horizontal"}


def test_hidden_elements_contribute_nothing():
    assert classify('<div style="display: NONE !important"><p>x</p></div>') is None
    assert classify('<img src="a.png" style="display:none">') is None


def test_non_visual_tags_are_skipped():
    assert classify("<script>alert(1)</script>") is None
    assert classify("<style>p { color: red }</style>") is None


def test_unknown_tags_degrade_to_text_or_nothing():
    assert classify("<custom-el>hi</custom-el>").type == ComponentType.TEXT
    assert classify("<custom-el></custom-el>") is None
