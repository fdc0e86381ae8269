import pytest

from css_purge import StylesheetError, purge_css

PAGE = """<!doctype html>
<html lang="fr">
<head><title>Test</title></head>
<body>
  <nav id="menu"><a href="https://example.org" class="link external">Lien</a></nav>
  <p class="used">Texte</p>
  <input type="checkbox" checked>
</body>
</html>"""


def test_keeps_used_and_drops_unused():
    """Test that only rules matching the page survive."""
    css = ".used { color: red; } .unused { color: blue; }"

    result = purge_css(css, PAGE)

    assert ".used" in result
    assert "color: red" in result
    assert ".unused" not in result
    assert "blue" not in result


def test_filters_selector_lists():
    """Test that unused selectors are removed from a selector list."""
    result = purge_css(".used, .unused, #menu { margin: 0; }", PAGE)

    assert result == ".used,#menu{margin: 0;}"


@pytest.mark.parametrize(
    "selector",
    [
        "body",
        "nav > a",
        "#menu .link",
        "a.external",
        'a[href^="https"]',
        "input:checked",
        "a:hover",
        "a.link:focus-visible",
        ".used::before",
        ".used:after",
        "*",
    ],
)
def test_kept_selectors(selector):
    """Test selectors matching the page, ignoring user-action pseudo-classes."""
    assert selector in purge_css(f"{selector} {{ color: red; }}", PAGE)


@pytest.mark.parametrize(
    "selector",
    [
        "table",
        "p.link",
        "#footer",
        "nav + p + p",
        ".missing:hover",
        ".missing::after",
    ],
)
def test_removed_selectors(selector):
    """Test selectors matching nothing on the page."""
    assert purge_css(f"{selector} {{ color: red; }}", PAGE) == ""


def test_unknown_pseudo_class_is_kept():
    """Test that selectors the matcher rejects are kept, not dropped."""
    result = purge_css(".missing:-webkit-autofill { color: red; } .unused { color: blue; }", PAGE)

    assert result == ".missing:-webkit-autofill{color: red;}"


def test_media_queries_are_filtered():
    """Test nested rules in @media blocks."""
    css = "@media (max-width: 600px) { .used { color: red; } .unused { color: blue; } } @media print { .unused { display: none; } }"

    result = purge_css(css, PAGE)

    assert result.startswith("@media (max-width: 600px){")
    assert ".used" in result
    assert ".unused" not in result
    assert "print" not in result


def test_other_at_rules_are_kept():
    """Test that font faces and keyframes are kept as written."""
    css = '@font-face { font-family: "Lora"; src: url(/fonts/lora.woff2); } @keyframes spin { to { transform: rotate(1turn); } }'

    result = purge_css(css, PAGE)

    assert "@font-face" in result
    assert "@keyframes spin" in result


def test_comments_are_dropped():
    """Test that comments do not survive the purge."""
    assert purge_css("/* theme */ .used { color: red; }", PAGE) == ".used{color: red;}"


def test_malformed_stylesheet():
    """Test that a rule without block is reported."""
    with pytest.raises(StylesheetError):
        purge_css(".used { color: red; } .broken", PAGE)


def test_empty_document():
    """Test purging against a page with no elements."""
    assert purge_css(".used { color: red; }", "") == ""
