"""
Site Filters Plugin for Pelican

Registers the Jinja2 filters used by the theme: list slicing, trimming,
date formatting and CSS/JS minification of inline snippets.
"""
from pelican import signals

from .filters import cssmin, date_iso, date_readable, jsmin, limit, trim


def add_filters(generator):
    """Add custom filters to the generator's Jinja environment."""
    generator.env.filters.update({
        "limit": limit,
        "trim": trim,
        "date_iso": date_iso,
        "date_readable": date_readable,
        "cssmin": cssmin,
        "jsmin": jsmin,
    })


def register():
    """Plugin registration - required by Pelican."""
    signals.generator_init.connect(add_filters)
