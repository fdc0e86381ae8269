"""Shortcodes available to templates and Markdown content.

Paired shortcodes receive their body through Jinja's ``caller``:

    {% call tldr() %}
    Le test en deux lignes.
    {% endcall %}
"""

from pathlib import Path

from markupsafe import Markup, escape

from images import ImageProcessor, generate_html


class ImageShortcodes:
    """Image shortcodes bound to the build's image processor."""

    def __init__(self, processor: ImageProcessor, images_dir: str | Path = "images"):
        """
        Args:
            processor: Processor writing variants to the output directory
            images_dir: Directory of source images used by img() and intro()
        """
        self.processor = processor
        self.images_dir = Path(images_dir)

    def image(self, src, alt, sizes=None, width=None, lazy=True):
        """
        Responsive image markup.

        Example:
            {{ image("images/grille.png", "La grille", "100vw", 640) }}
        """
        metadata = self.processor.process(src, widths=[width] if width else None)
        attributes = {"alt": alt, "sizes": sizes}
        if lazy:
            attributes["loading"] = "lazy"
            attributes["decoding"] = "async"
        else:
            attributes["decoding"] = "sync"
        return Markup(generate_html(metadata, attributes))

    def img(self, src):
        """
        URL of an 800px JPEG, for og:image and twitter:image metadata.

        Example:
            <meta property="og:image" content="{{ SITEURL }}{{ img(article.cover) }}">
        """
        metadata = self.processor.process(self.images_dir / src, widths=[800], formats=["jpeg"])
        return metadata["jpeg"][0].url

    def intro(self, filename, alt, caller=None):
        """Introduction block: the text next to an eagerly loaded 512px image."""
        picture = self.image(self.images_dir / filename, alt, "512w", 512, lazy=False)
        body = caller() if caller else ""
        return Markup(f'<div id="intro"><div>{body}</div>{picture}</div>')


def _titled_block(block_id, title, caller):
    body = caller() if caller else ""
    # markdown="1" lets md_in_html render the Markdown body
    return Markup(f'<div id="{block_id}" markdown="1"><h2>{escape(title)}</h2>\n{body}</div>')


def tldr(title="En résumé", caller=None):
    """Summary block."""
    return _titled_block("tldr", title, caller)


def plusloin(title="Pour aller plus loin", caller=None):
    """Further reading block."""
    return _titled_block("plusloin", title, caller)
