"""
Cross-reference Plugin for Pelican

Adds the {% test %} and {% post %} tags, which turn a slug into a link to the
matching article of the "test" or "post" collection:

    {% test grille-tarifaire Voir la grille %}  ->  [Voir la grille](/tests/grille-tarifaire.html "Grille")
    {% post mon-article %}                      ->  /posts/mon-article.html

This plugin:
1. Adds the tags to the theme's Jinja environment
2. Builds the collections once all content has been read
3. Re-renders Markdown sources using template markup, so tags and shortcodes
   work inside articles
4. Turns the text before <!-- excerpt --> into the summary

A slug missing from its collection stops the build.

Settings:
    COLLECTION_PATHS: Collection name -> content directory
        (default: {"test": "tests", "post": "posts"})
    COLLECTION_GROUPS: Aggregate collections
        (default: {"testsAndPosts": ["post", "test"]})
"""

import logging

from pelican import signals

from references import PostReference, TestReference
from site_collections import CollectionProvider

from .processor import ContentTemplateProcessor, apply_excerpt

_log = logging.getLogger(__name__)

REFERENCE_EXTENSIONS = (TestReference, PostReference)


def add_reference_tags(generator):
    """Add the reference tags to the generator's Jinja environment."""
    for extension in REFERENCE_EXTENSIONS:
        generator.env.add_extension(extension)


def collect_contents(generators) -> tuple[list, list]:
    """
    Gather content objects from the generators.

    Returns:
        (published, all) where published feeds the collections and all is
        every object whose source may need rendering
    """
    published = []
    others = []
    for generator in generators:
        published.extend(getattr(generator, "articles", []))
        published.extend(getattr(generator, "pages", []))
        published.extend(getattr(generator, "hidden_pages", []))
        others.extend(getattr(generator, "translations", []))
        others.extend(getattr(generator, "drafts", []))
        others.extend(getattr(generator, "draft_pages", []))
    return published, published + others


def resolve_references(generators):
    """
    Build the collections and render content templates.

    Runs once all generators have read their content and before anything is
    written.

    Args:
        generators: Pelican generators
    """
    template_generators = [g for g in generators if getattr(g, "env", None) is not None]
    if not template_generators:
        return

    generator = template_generators[0]
    settings = generator.settings
    published, contents = collect_contents(generators)

    collections = CollectionProvider.from_contents(
        published,
        content_root=settings.get("PATH", ""),
        collection_paths=settings.get("COLLECTION_PATHS"),
        groups=settings.get("COLLECTION_GROUPS"),
        siteurl=settings.get("SITEURL", ""),
    )
    for g in template_generators:
        g.context["collections"] = collections

    processor = ContentTemplateProcessor(generator.env, generator.context, settings)
    rendered = 0
    for content in contents:
        try:
            if processor.process_content(content):
                rendered += 1
        except Exception:
            _log.error(f"[crossref] Cannot render {content.source_path}")
            raise
        apply_excerpt(content)

    _log.info(f"[crossref] Rendered templates in {rendered} of {len(contents)} content files")


def register():
    """
    Plugin registration - required by Pelican.

    Tags are added when each generator is created; collections are built on
    all_generators_finalized, which fires before any output is written.
    """
    signals.generator_init.connect(add_reference_tags)
    signals.all_generators_finalized.connect(resolve_references)
