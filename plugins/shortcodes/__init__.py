"""
Shortcodes Plugin for Pelican

Registers Jinja2 globals for responsive images (image, img, intro) and the
titled blocks used in articles (tldr, plusloin).

Settings:
    IMAGES_PATH: Source directory of images referenced by name (default: "images")
    IMAGE_FORMATS: Generated formats, last one is the fallback (default: ["webp", "jpeg"])
"""

import logging
from pathlib import Path

from pelican import signals

from images import ImageProcessor

from .filters import ImageShortcodes, plusloin, tldr

_log = logging.getLogger(__name__)

# Global shortcodes instance, so images are processed once per build
_shortcodes = None
_current_output_path = None


def get_shortcodes(settings) -> ImageShortcodes:
    """Get or create the global ImageShortcodes instance.

    Args:
        settings: Pelican settings
    """
    global _shortcodes, _current_output_path
    output_path = settings.get("OUTPUT_PATH", "output")
    if _shortcodes is None or _current_output_path != output_path:
        processor = ImageProcessor(
            Path(output_path) / "img",
            url_path=settings.get("SITEURL", "") + "/img/",
            formats=settings.get("IMAGE_FORMATS", ["webp", "jpeg"]),
        )
        _shortcodes = ImageShortcodes(processor, settings.get("IMAGES_PATH", "images"))
        _log.info(f"[shortcodes] Images written to {processor.output_dir}")
        _current_output_path = output_path
    return _shortcodes


def add_shortcodes(generator):
    """Add shortcodes to the generator's Jinja environment."""
    shortcodes = get_shortcodes(generator.settings)
    generator.env.globals.update({
        "image": shortcodes.image,
        "img": shortcodes.img,
        "intro": shortcodes.intro,
        "tldr": tldr,
        "plusloin": plusloin,
    })


def register():
    """Plugin registration - required by Pelican."""
    signals.generator_init.connect(add_shortcodes)
