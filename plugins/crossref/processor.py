"""
Content Template Processor

Renders Markdown sources through Jinja once every collection is known, so
reference tags and shortcodes can be used inside articles and pages.
"""

import logging
from pathlib import Path

import markdown

_log = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = {".md", ".markdown", ".mkd", ".mdown"}
TEMPLATE_MARKERS = ("{%", "{{")
EXCERPT_SEPARATOR = "<!-- excerpt -->"


class ContentTemplateProcessor:
    """Re-renders Markdown content containing template markup."""

    def __init__(self, env, context: dict, settings: dict):
        """Initialize the processor.

        Args:
            env: Jinja environment of a Pelican generator
            context: Shared Pelican context, holding ``collections``
            settings: Pelican settings
        """
        # Content is Markdown: newlines after tags are significant
        self.env = env.overlay(trim_blocks=False, lstrip_blocks=False, keep_trailing_newline=True)
        self.context = context
        self.markdown_config = self._markdown_config(settings)

    @staticmethod
    def _markdown_config(settings: dict) -> dict:
        config = dict(settings.get("MARKDOWN", {}))
        extensions = list(config.get("extensions", []))
        for extension in config.get("extension_configs", {}):
            if extension not in extensions:
                extensions.append(extension)
        # Strips the "Key: value" header Pelican already parsed
        if "markdown.extensions.meta" not in extensions:
            extensions.append("markdown.extensions.meta")
        config["extensions"] = extensions
        return config

    def needs_rendering(self, source: str) -> bool:
        return any(marker in source for marker in TEMPLATE_MARKERS)

    def render_source(self, source: str, content=None) -> str:
        """
        Render a Markdown source through Jinja, then convert it to HTML.

        Args:
            source: Markdown text, metadata header included
            content: The Pelican content object, exposed as ``page``

        Returns:
            The HTML body
        """
        text = self.env.from_string(source).render(self.context, page=content)
        return markdown.Markdown(**self.markdown_config).convert(text)

    def process_content(self, content) -> bool:
        """
        Replace the HTML of a content object whose source uses templates.

        Args:
            content: Pelican content object

        Returns:
            True if the content was re-rendered
        """
        source_path = Path(content.source_path)
        if source_path.suffix.lower() not in MARKDOWN_EXTENSIONS:
            return False

        source = source_path.read_text(encoding="utf-8")
        if not self.needs_rendering(source):
            return False

        content._content = self.render_source(source, content)
        _log.debug(f"[crossref] Rendered templates in {source_path}")
        return True


def apply_excerpt(content) -> bool:
    """
    Use the text before ``<!-- excerpt -->`` as the summary.

    A ``summary`` given in the metadata wins.

    Args:
        content: Pelican content object

    Returns:
        True if a summary was set
    """
    html = content._content or ""
    if EXCERPT_SEPARATOR not in html or "summary" in content.metadata:
        return False

    content.metadata["summary"] = html.split(EXCERPT_SEPARATOR, 1)[0].strip()
    return True
