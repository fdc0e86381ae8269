"""
HTML Transform Plugin for Pelican

Post-processes every written HTML page:
1. French typography (non-breaking spaces, apostrophes, œ, …)
2. Inlines the site stylesheet, reduced to the rules the page uses and minified
3. Minifies the document, unless HTML_MINIFY is False

Settings:
    INLINE_STYLESHEET: Stylesheet read once at startup and inlined in pages
    HTML_MINIFY: Set to False to keep readable HTML

Environment Variables:
    NO_MINIFY: When set and HTML_MINIFY is not, disables HTML minification
"""

import logging
from pathlib import Path

from pelican import signals

from output_pipeline import OutputTransformPipeline, read_stylesheet
from tools import env_flag

_log = logging.getLogger(__name__)

DEFAULT_STYLESHEET = "themes/carnet/static/css/theme.css"


def build_pipeline(settings) -> OutputTransformPipeline:
    """
    Read the stylesheet and build the pipeline for this build.

    Args:
        settings: Pelican settings
    """
    stylesheet = read_stylesheet(settings.get("INLINE_STYLESHEET", DEFAULT_STYLESHEET))
    minify_html = settings.get("HTML_MINIFY", not env_flag("NO_MINIFY"))
    _log.info(f"[html_transform] Pipeline ready (HTML minification {'on' if minify_html else 'off'})")
    return OutputTransformPipeline(stylesheet, minify_html=minify_html)


def page_transformer(pipeline: OutputTransformPipeline):
    """Create a content_written handler bound to the given pipeline."""

    def transform_written_page(path, context=None):
        """Transform a page Pelican has just written, in place."""
        if not pipeline.applies_to(path):
            return

        page = Path(path)
        content = page.read_text(encoding="utf-8")
        try:
            transformed = pipeline.transform(content, path)
        except Exception:
            _log.error(f"[html_transform] Failed to transform {path}")
            raise
        page.write_text(transformed, encoding="utf-8")

    return transform_written_page


def init_pipeline(pelican):
    """
    Build the pipeline and connect its handler for the duration of the build.

    Args:
        pelican: The Pelican instance
    """
    handler = page_transformer(build_pipeline(pelican.settings))
    # Connected until this build is finalized
    signals.content_written.connect(handler, weak=False)

    def release(sender):
        signals.content_written.disconnect(handler)

    signals.finalized.connect(release, sender=pelican, weak=False)
    return handler


def register():
    """Plugin registration - required by Pelican."""
    signals.initialized.connect(init_pipeline)
