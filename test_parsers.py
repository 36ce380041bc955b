"""Tests for the parse strategies and their registry."""

import pytest

from html_importer.context import ParseContext
from html_importer.parsers import PARSERS, get_parser, parser_name, resolve_parser
from html_importer.parsers import block, carousel, columns, metadata
from html_importer.parsers.metadata import to_iso_date


def context_for(document, host, **params):
    return ParseContext(document=document, host=host, params=params)


# --- Registry ---

def test_registry_names():
    assert set(PARSERS) == {"block", "carousel", "columns", "metadata"}
    assert get_parser("carousel") is carousel.parse
    assert get_parser("nope") is None
    assert get_parser(None) is None
    assert parser_name(columns.parse) == "columns"
    assert parser_name(lambda element, context: []) is None


def test_resolve_parser_order():
    def custom(element, context):
        return []

    assert resolve_parser("carousel", custom) is custom
    assert resolve_parser("carousel", "columns") is columns.parse
    assert resolve_parser("carousel") is carousel.parse
    assert resolve_parser("hero") is block.parse


# --- block ---

def test_block_selector_cells_make_one_row_per_match(host, make_document):
    document = make_document('<div class="gallery"><img src="1.jpg"><img src="2.jpg"></div>')
    gallery = document.select_one(".gallery")
    rows = block.parse(gallery, context_for(document, host, cells="img"))
    assert [row[0]["src"] for row in rows] == ["1.jpg", "2.jpg"]


def test_block_matrix_and_config(host, make_document):
    document = make_document('<div class="card"><h3>Name</h3><p>Body</p></div>')
    card = document.select_one(".card")

    assert block.parse(card, context_for(document, host, cells=[["h3::text", "p::text"]])) == [[["Name"], ["Body"]]]

    config = block.parse(card, context_for(document, host, cells={"Heading": "h3::text"}))
    assert config["Heading"].get_text() == "Name"


def test_block_without_cells_is_empty(host, make_document):
    document = make_document("<div><p>x</p></div>")
    assert block.parse(document.body, context_for(document, host)) == []


# --- carousel ---

CAROUSEL_HTML = (
    '<div class="carousel"><div class="slides">'
    '<div class="slide"><img src="1.jpg"><p>One</p></div>'
    '<div class="slide"><img src="2.jpg"><p>Two</p><a href="/more">More</a></div>'
    '</div></div>'
)


def test_carousel_rows_per_image(host, make_document):
    document = make_document(CAROUSEL_HTML)
    rows = carousel.parse(document.select_one(".carousel"), context_for(document, host))

    assert [row[0]["src"] for row in rows] == ["1.jpg", "2.jpg"]
    assert [node.get_text() for node in rows[0][1]] == ["One"]
    assert [node.get_text() for node in rows[1][1]] == ["Two", "More"]


def test_carousel_keeps_block_rows_first(host, make_document):
    document = make_document('<div class="carousel"><h2>Gallery</h2>' + CAROUSEL_HTML[len('<div class="carousel">'):])
    rows = carousel.parse(document.select_one(".carousel"), context_for(document, host, cells=["h2::text"]))
    assert rows[0] == ["Gallery"]
    assert len(rows) == 3


def test_carousel_single_image(host, make_document):
    document = make_document('<div class="hero"><img src="1.jpg"></div>')
    img = document.find("img")
    assert carousel.parse(document.select_one(".hero"), context_for(document, host)) == [[img]]


def test_carousel_config_cells_yield_nothing(host, make_document):
    document = make_document(CAROUSEL_HTML)
    rows = carousel.parse(document.select_one(".carousel"), context_for(document, host, cells={"A": "p"}))
    assert rows == []


# --- columns ---

def test_columns_sibling_group(host, make_document):
    document = make_document(
        '<div class="cols"><div></div><div><p>A</p></div><div><p>B</p></div><script>x()</script></div>'
    )
    [row] = columns.parse(document.select_one(".cols"), context_for(document, host))
    assert [column.get_text() for column in row] == ["A", "B"]
    assert document.find("script") is None


def test_columns_without_group(host, make_document):
    document = make_document('<div class="one"><p>Only</p></div>')
    assert columns.parse(document.select_one(".one"), context_for(document, host)) == []


def test_columns_with_cells_uses_block(host, make_document):
    document = make_document('<div class="cols"><div><p>A</p></div><div><p>B</p></div></div>')
    rows = columns.parse(document.select_one(".cols"), context_for(document, host, cells=[["p::text"]]))
    assert rows == [[[["A", "B"]]]]


def test_sibling_group_uses_predicate(make_document):
    document = make_document('<ul class="list"><li>1</li><li>2</li><li>3</li></ul>')
    group = columns.sibling_group(document.select_one(".list"), lambda n: n > 2)
    assert [li.get_text() for li in group] == ["1", "2", "3"]


# --- metadata ---

META_HTML = (
    '<html><head><title>Page Title</title>'
    '<meta name="description" content="About the page">'
    '<meta property="og:image" content="a.jpg,b.jpg">'
    '</head><body><main>'
    '<div class="pic"><img src="c.jpg, d.jpg"></div>'
    '<p class="date">March 3, 2024</p>'
    '<p class="author">Jane</p>'
    '</main></body></html>'
)


def test_metadata_from_host(host, make_document):
    document = make_document(META_HTML)
    meta = metadata.parse(document.select_one("main"), context_for(document, host))

    assert meta["Title"] == "Page Title"
    assert meta["Description"] == "About the page"
    assert meta["Image"].name == "img"
    assert meta["Image"]["src"] == "a.jpg"


def test_metadata_custom_fields_win(host, make_document):
    document = make_document(META_HTML)
    cells = {"Image": ".pic", "Published": "p.date::text", "Author": "p.author::text"}
    meta = metadata.parse(document.select_one("main"), context_for(document, host, cells=cells))

    assert meta["Image"].find("img")["src"] == "c.jpg"
    assert meta["Published"] == "2024-03-03"
    assert meta["Author"].get_text() == "Jane"
    assert meta["Title"] == "Page Title"


def test_metadata_matrix_cells_are_ignored(host, make_document):
    document = make_document(META_HTML)
    meta = metadata.parse(document.select_one("main"), context_for(document, host, cells=[["p::text"]]))
    assert set(meta) == {"Title", "Description", "Image"}


@pytest.mark.parametrize("value,expected", [
    ("March 3, 2024", "2024-03-03"),
    ("2024-03-03T10:15:00Z", "2024-03-03"),
    ("3 Mar 2024", "2024-03-03"),
    ("March 2024", "2024-03-01"),
    ("February 2024", "2024-02-01"),
    ("10:30", None),
    ("1.5", None),
    ("May 5", None),
    ("2024", None),
    ("Page Title", None),
    ("", None),
    (None, None),
    (42, None),
])
def test_to_iso_date(value, expected):
    assert to_iso_date(value) == expected


def test_to_iso_date_elements(make_document):
    document = make_document('<p class="a">March 3, 2024</p><p class="b">March <b>3</b>, 2024</p>')
    assert to_iso_date(document.select_one(".a")) == "2024-03-03"
    assert to_iso_date(document.select_one(".b")) is None
