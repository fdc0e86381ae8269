"""
Cross-reference tags resolving content slugs to links.

Usage in content or templates:
    {% test grille-tarifaire Voir la grille %}  ->  [Voir la grille](/tests/grille-tarifaire.html "Grille")
    {% post mon-article %}                      ->  /posts/mon-article.html

A tag is handled in two phases: its arguments are parsed when the template is
compiled, and the slug is looked up in its collection when the template is
rendered. A slug with no matching entry fails the build.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Optional

from jinja2 import nodes
from jinja2.ext import Extension
from markupsafe import Markup

from site_collections import CollectionProvider

_log = logging.getLogger(__name__)


class ReferenceNotFound(LookupError):
    """Raised when a reference tag names a slug missing from its collection."""

    def __init__(self, slug: str, collection: str):
        super().__init__(f"No {slug} entry in collection '{collection}'")
        self.slug = slug
        self.collection = collection


@dataclass(frozen=True)
class TagInvocation:
    raw: str
    slug: str
    label: Optional[str] = None


def parse_reference(raw: str) -> TagInvocation:
    """
    Split raw tag arguments into a slug and an optional label.

    The slug is everything before the first space, the label everything
    after it, taken as-is.

    Args:
        raw: Argument text of the tag, e.g. "grille-tarifaire Voir la grille"

    Returns:
        The parsed TagInvocation

    Raises:
        ValueError: If the argument text is empty
    """
    text = raw.strip()
    if not text:
        raise ValueError("Reference tag needs a slug")

    slug, sep, label = text.partition(" ")
    return TagInvocation(raw=raw, slug=slug, label=label if sep else None)


class ReferenceResolver:
    """Resolves tag invocations against one named collection."""

    def __init__(self, collection: str):
        self.collection = collection

    def resolve(self, invocation: TagInvocation, collections: CollectionProvider) -> str:
        """
        Resolve an invocation to a markdown link or a bare URL.

        Args:
            invocation: Parsed tag arguments
            collections: Provider holding the fully built collections

        Returns:
            ``[label](url "title")`` when the tag has a label, the URL otherwise

        Raises:
            ReferenceNotFound: If no entry of the collection has the slug
        """
        entry = collections.find(self.collection, invocation.slug)
        if entry is None:
            raise ReferenceNotFound(invocation.slug, self.collection)

        if invocation.label:
            return f'[{invocation.label}]({entry.url} "{entry.title}")'
        return entry.url


class ReferenceExtension(Extension):
    """Jinja2 extension for a reference tag bound to a single collection.

    Subclasses set ``tags`` and ``collection``; use ``reference_extension()``.
    """

    collection = ""

    def __init__(self, environment):
        super().__init__(environment)
        self.resolver = ReferenceResolver(self.collection)
        tag = re.escape(next(iter(self.tags)))
        # Unquoted arguments are turned into one string literal so the
        # parse phase sees the raw text, spaces included. Raw blocks are
        # matched first and left as they are.
        self._raw_tag = re.compile(
            r"(\{%-?\s*raw\s*-?%\}.*?\{%-?\s*endraw\s*-?%\})"
            r"|\{%(-?)\s*(" + tag + r")\s+(?![\"'])(.*?)\s*(-?)%\}",
            re.DOTALL,
        )

    def preprocess(self, source, name, filename=None):
        return self._raw_tag.sub(self._quote_arguments, source)

    @staticmethod
    def _quote_arguments(match):
        verbatim, open_trim, tag, raw, close_trim = match.groups()
        if verbatim is not None:
            return verbatim
        return f"{{%{open_trim} {tag} {json.dumps(raw, ensure_ascii=False)} {close_trim}%}}"

    def parse(self, parser):
        token = next(parser.stream)
        lineno = token.lineno
        argument = parser.parse_expression()
        if not isinstance(argument, nodes.Const) or not isinstance(argument.value, str):
            parser.fail(f"'{token.value}' expects a slug and an optional label", lineno)

        try:
            invocation = parse_reference(argument.value)
        except ValueError as e:
            parser.fail(f"'{token.value}': {e}", lineno)

        call = self.call_method(
            "_render",
            [
                nodes.ContextReference(),
                nodes.Const(invocation.raw),
                nodes.Const(invocation.slug),
                nodes.Const(invocation.label),
            ],
            lineno=lineno,
        )
        return nodes.Output([call], lineno=lineno)

    def _render(self, context, raw, slug, label):
        collections = context.get("collections")
        if collections is None:
            _log.warning(f"No collections in context while resolving '{slug}'")
            collections = CollectionProvider()
        result = self.resolver.resolve(TagInvocation(raw, slug, label), collections)
        return Markup(result)


def reference_extension(tag: str, collection: str | None = None) -> type[ReferenceExtension]:
    """
    Create a reference tag extension.

    Args:
        tag: Name of the template tag
        collection: Collection searched by the tag, defaults to the tag name

    Returns:
        An Extension subclass to pass to ``Environment(extensions=[...])``
    """
    name = f"{tag.title().replace('_', '')}Reference"
    return type(
        name,
        (ReferenceExtension,),
        {"tags": {tag}, "collection": collection or tag, "__module__": __name__},
    )


TestReference = reference_extension("test")
PostReference = reference_extension("post")
