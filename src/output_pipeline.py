"""
Post-processing of rendered HTML pages.

Every page goes through the same ordered stages before it is delivered:

1. French typography
2. CSS purge: the site stylesheet reduced to the rules the page uses
3. CSS minification
4. Injection of the stylesheet in a <style> block before </head>
5. Whole-document HTML minification (optional)

Collaborators are passed to the pipeline, which holds no other state than the
stylesheet read at configuration time.
"""

import logging
from pathlib import Path
from typing import Callable

import csscompressor
import htmlmin

from css_purge import purge_css
from tools import Benchmark
from typography import normalize_typography

_log = logging.getLogger(__name__)

HTML_EXTENSION = ".html"


def read_stylesheet(path: str | Path) -> str:
    """Read the site stylesheet once, at configuration time."""
    stylesheet = Path(path).read_text(encoding="utf-8")
    _log.info(f"[html_transform] Loaded stylesheet {path} ({len(stylesheet)} chars)")
    return stylesheet


def minify_document(html: str) -> str:
    """Strip comments and collapse whitespace across a whole document."""
    return htmlmin.minify(html, remove_comments=True, remove_empty_space=True)


def inject_stylesheet(html: str, css: str) -> str:
    """
    Insert a stylesheet in a <style> block right before </head>.

    Args:
        html: Page document
        css: Stylesheet to inline

    Returns:
        The document with the style block, or unchanged if it has no </head>
    """
    if "</head>" not in html:
        _log.warning("No </head> in document, stylesheet not inlined")
        return html
    return html.replace("</head>", f"<style>{css}</style></head>", 1)


class OutputTransformPipeline:
    """Transforms rendered pages into the delivered HTML."""

    def __init__(
        self,
        stylesheet: str,
        *,
        typography: Callable[[str], str] = normalize_typography,
        purifier: Callable[[str, str], str] = purge_css,
        css_minifier: Callable[[str], str] = csscompressor.compress,
        html_minifier: Callable[[str], str] = minify_document,
        minify_html: bool = True,
    ):
        """
        Initialize the pipeline.

        Args:
            stylesheet: Full site stylesheet, shared read-only by all pages
            typography: Text normalization applied first
            purifier: Function (css, html) -> css keeping the used rules
            css_minifier: Function (css) -> minified css
            html_minifier: Function (html) -> minified html
            minify_html: Whether the last stage runs
        """
        self.stylesheet = stylesheet
        self.typography = typography
        self.purifier = purifier
        self.css_minifier = css_minifier
        self.html_minifier = html_minifier
        self.minify_html = minify_html

    def applies_to(self, output_path) -> bool:
        return bool(output_path) and str(output_path).endswith(HTML_EXTENSION)

    def transform(self, content: str, output_path) -> str:
        """
        Run all stages over one page.

        Args:
            content: Rendered page
            output_path: Path the page will be written to

        Returns:
            The delivered page; non-HTML output is returned unchanged
        """
        if not self.applies_to(output_path):
            return content

        with Benchmark(f"html_transform > {output_path}", _log):
            content = self.typography(content)

            with Benchmark(f"html_transform > purge css: {output_path}", _log):
                css = self.purifier(self.stylesheet, content)

            css = self.css_minifier(css)
            content = inject_stylesheet(content, css)

            if self.minify_html:
                content = self.html_minifier(content)

        return content
