import logging

import pytest

from output_pipeline import (
    OutputTransformPipeline,
    inject_stylesheet,
    minify_document,
    read_stylesheet,
)

STYLESHEET = """
/* site theme */
.used {
    color: red;
}
.unused {
    color: blue;
}
"""

PAGE = """<!doctype html>
<html lang="fr">
  <head>
    <title>Accueil</title>
  </head>
  <body>
    <!-- contenu -->
    <p class="used">l'oeuvre...</p>
  </body>
</html>
"""


@pytest.fixture
def calls():
    return []


@pytest.fixture
def recording_pipeline(calls):
    """Create a pipeline whose stages record the order they run in."""

    def typography(html):
        calls.append("typography")
        return html + "<!--typo-->"

    def purifier(css, html):
        calls.append("purge")
        assert html.endswith("<!--typo-->")
        return "PURGED"

    def css_minifier(css):
        calls.append("cssmin")
        assert css == "PURGED"
        return "MIN"

    def html_minifier(html):
        calls.append("htmlmin")
        assert "<style>MIN</style></head>" in html
        return "FINAL"

    return OutputTransformPipeline(
        "full css",
        typography=typography,
        purifier=purifier,
        css_minifier=css_minifier,
        html_minifier=html_minifier,
    )


def test_stages_run_in_order(recording_pipeline, calls):
    """Test the fixed stage order."""
    result = recording_pipeline.transform("<html><head></head></html>", "out/index.html")

    assert result == "FINAL"
    assert calls == ["typography", "purge", "cssmin", "htmlmin"]


@pytest.mark.parametrize("output_path", ["out/feeds/all.atom.xml", "out/theme/css/main.css", None, ""])
def test_non_html_output_unchanged(recording_pipeline, calls, output_path):
    """Test that only HTML pages are transformed."""
    assert recording_pipeline.transform("l'oeuvre...", output_path) == "l'oeuvre..."
    assert calls == []


def test_minification_disabled(calls):
    """Test that stage four output is final when minification is off."""
    pipeline = OutputTransformPipeline(
        "css",
        typography=lambda html: html,
        purifier=lambda css, html: css,
        css_minifier=lambda css: css,
        html_minifier=lambda html: calls.append("htmlmin") or html,
        minify_html=False,
    )

    result = pipeline.transform("<head></head><!-- c -->", "index.html")

    assert result == "<head><style>css</style></head><!-- c -->"
    assert calls == []


def test_stage_failure_propagates():
    """Test that a failing collaborator aborts the page."""

    def broken_purifier(css, html):
        raise RuntimeError("purge failed")

    pipeline = OutputTransformPipeline("css", purifier=broken_purifier)

    with pytest.raises(RuntimeError, match="purge failed"):
        pipeline.transform(PAGE, "index.html")


def test_inject_stylesheet_before_head():
    """Test injection before the first closing head tag."""
    assert inject_stylesheet("<head><title>x</title></head><body></body>", "a{b:c}") == (
        "<head><title>x</title><style>a{b:c}</style></head><body></body>"
    )


def test_inject_stylesheet_without_head(caplog):
    """Test that a document without </head> is left alone with a warning."""
    with caplog.at_level(logging.WARNING):
        assert inject_stylesheet("<p>fragment</p>", "a{b:c}") == "<p>fragment</p>"

    assert "</head>" in caplog.text


def test_minify_document():
    """Test comment stripping and whitespace collapsing."""
    result = minify_document("<div>\n  <!-- note -->\n  <p>a    b</p>\n</div>")

    assert "note" not in result
    assert "a b" in result
    assert len(result) < len("<div>\n  <!-- note -->\n  <p>a    b</p>\n</div>")


def test_full_pipeline():
    """Test the pipeline with its real collaborators."""
    pipeline = OutputTransformPipeline(STYLESHEET)

    result = pipeline.transform(PAGE, "output/index.html")

    assert "l’œuvre…" in result
    assert "<style>.used{" in result
    assert "color:red" in result
    assert ".unused" not in result
    assert "contenu" not in result
    assert result.index("<style>") < result.index("</head>")


def test_full_pipeline_without_minification():
    """Test that the document keeps its layout when minification is off."""
    pipeline = OutputTransformPipeline(STYLESHEET, minify_html=False)

    result = pipeline.transform(PAGE, "output/index.html")

    assert "<!-- contenu -->" in result
    assert "\n    <title>Accueil</title>\n" in result
    assert ".unused" not in result


def test_read_stylesheet(tmp_path):
    """Test reading the stylesheet snapshot."""
    path = tmp_path / "theme.css"
    path.write_text(STYLESHEET, encoding="utf-8")

    assert read_stylesheet(path) == STYLESHEET
