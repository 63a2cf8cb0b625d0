"""Tests for snippet extraction helpers."""

from atlas_gateway.utils.text import extract_needles, make_snippet, strip_html


def test_strip_html_drops_scripts_styles_and_tags():
    html = (
        "<html><head><style>p { color: red }</style>"
        "<script>var x = '<b>';</script></head>"
        "<body><p>Mr. SPEAKER,\n\n  I rise</p></body></html>"
    )
    assert strip_html(html) == "Mr. SPEAKER, I rise"


def test_extract_needles_removes_operators_and_duplicates():
    query = "collection:(CREC) AND (docClass:(HOUSE OR SENATE)) AND (H-1B visa Visa backlog)"
    assert extract_needles(query) == ["h-1b", "visa", "backlog"]


def test_extract_needles_caps_at_eight():
    query = " ".join(f"term{i}" for i in range(12))
    assert len(extract_needles(query)) == 8


def test_make_snippet_centres_window_on_first_needle():
    text = "a" * 300 + " diaspora " + "b" * 300
    snippet = make_snippet(text, ["diaspora"], 240)

    assert snippet.startswith("…")
    assert snippet.endswith("…")
    assert "diaspora" in snippet
    assert len(snippet) == 240 + 2


def test_make_snippet_no_leading_ellipsis_near_start():
    text = "The diaspora caucus met today. " + "x" * 400
    snippet = make_snippet(text, ["caucus"], 240)

    assert not snippet.startswith("…")
    assert snippet.endswith("…")


def test_make_snippet_without_match_returns_prefix():
    text = "word " * 100
    assert make_snippet(text, ["absent"], 50) == ("word " * 100).strip()[:50]


def test_make_snippet_empty_text():
    assert make_snippet("   ", ["anything"], 240) == ""
