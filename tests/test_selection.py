"""Tests for selection-sibling extraction and the document tree."""

from send_to_cal.extractors.document import SoupDocument
from send_to_cal.extractors.selection import extract_selection_sibling_text
from send_to_cal.utils.text import ELLIPSIS


def _sibling_text(html: str, selection: str):
    document = SoupDocument(html)
    return extract_selection_sibling_text(document, document.find_text(selection))


def test_heading_selection_returns_following_paragraph(event_page: str) -> None:
    assert (
        _sibling_text(event_page, "Concert")
        == "Doors open at 19:00 and the concert starts at 19:30 sharp."
    )


def test_selection_spanning_several_text_nodes(event_page: str) -> None:
    assert (
        _sibling_text(event_page, "Spring Concert")
        == "Doors open at 19:00 and the concert starts at 19:30 sharp."
    )


def test_short_siblings_are_skipped() -> None:
    html = """<body><div>
      <h3>Workshop</h3>
      <span>Free</span>
      <div>   Online   </div>
      <ul><li>Bring a laptop and a charger</li></ul>
    </div></body>"""
    assert _sibling_text(html, "Workshop") == "Bring a laptop and a charger"


def test_inline_display_style_is_walked_past() -> None:
    html = """<body>
      <section>
        <div style="color: red; display: inline">Title <b>here</b></div>
        <p>First sibling of the section, not of the inline div.</p>
      </section>
      <p>Sibling of the section itself.</p>
    </body>"""
    assert _sibling_text(html, "here") == "Sibling of the section itself."


def test_flex_container_counts_as_block() -> None:
    html = """<body>
      <span style="display:flex">Date and time</span>
      <span>Saturday, from noon until late</span>
    </body>"""
    assert _sibling_text(html, "Date and time") == "Saturday, from noon until late"


def test_no_block_ancestor_below_body() -> None:
    html = "<body><span>Loose text</span><p>A paragraph after it.</p></body>"
    assert _sibling_text(html, "Loose") is None


def test_no_qualifying_sibling() -> None:
    html = "<body><div><p>Only paragraph here</p></div></body>"
    assert _sibling_text(html, "Only paragraph") is None


def test_selection_not_found() -> None:
    html = "<body><p>Some text</p><p>More text that is long</p></body>"
    assert _sibling_text(html, "missing") is None
    assert _sibling_text(html, "   ") is None


def test_sibling_text_is_truncated() -> None:
    long_text = "word " * 150
    html = f"<body><h2>Heading</h2><p>{long_text}</p></body>"
    result = _sibling_text(html, "Heading")
    assert result.endswith(ELLIPSIS)
    assert len(result) <= 501


def test_find_text_ignores_head_and_scripts() -> None:
    html = """<html><head><title>Concert</title></head>
      <body><script>var x = "Concert";</script><h1>Concert</h1></body></html>"""
    element = SoupDocument(html).find_text("Concert")
    assert element is not None
    assert element.tag == "h1"


def test_element_display_defaults() -> None:
    document = SoupDocument("<body><div></div><li></li><a></a><p style='display: GRID'></p></body>")
    assert [e.display for e in document.select("div, li, a, p")] == [
        "block",
        "list-item",
        "inline",
        "grid",
    ]
