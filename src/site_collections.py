"""Named content collections used to resolve cross-references.

A collection is an ordered, read-only sequence of entries built once from the
Pelican content objects before any page is rendered.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence

_log = logging.getLogger(__name__)

DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}-")

DEFAULT_COLLECTION_PATHS = {"test": "tests", "post": "posts"}
DEFAULT_COLLECTION_GROUPS = {"testsAndPosts": ["post", "test"]}


@dataclass(frozen=True)
class CollectionEntry:
    """A content item as seen by the reference tags."""

    slug: str
    url: str
    title: str
    date: Optional[datetime] = None
    source_path: str = ""


def file_slug(source_path: str) -> str:
    """
    Compute the file slug of a content source.

    The slug is the file name without extension and without a leading
    ``YYYY-MM-DD-`` date. An ``index`` file takes its directory name.

    Args:
        source_path: Path to the content source file

    Returns:
        The slug used by ``{% test %}`` and ``{% post %}`` tags

    Example:
        posts/2019-05-31-mon-article.md -> mon-article
        tests/grille/index.md -> grille
    """
    path = Path(source_path)
    stem = path.stem
    if stem == "index" and path.parent.name:
        stem = path.parent.name
    return DATE_PREFIX.sub("", stem)


def _sort_key(entry: CollectionEntry):
    # Undated items sort first
    date = entry.date
    if date is None:
        return (0, "", entry.source_path)
    return (1, date.isoformat(), entry.source_path)


class CollectionProvider:
    """Immutable mapping of collection name to an ordered tuple of entries."""

    def __init__(self, collections: Mapping[str, Iterable[CollectionEntry]] | None = None):
        self._collections: dict[str, tuple[CollectionEntry, ...]] = {
            name: tuple(entries) for name, entries in (collections or {}).items()
        }

    def __contains__(self, name: str) -> bool:
        return name in self._collections

    def __getitem__(self, name: str) -> tuple[CollectionEntry, ...]:
        return self._collections[name]

    def __repr__(self):
        sizes = ", ".join(f"{name}={len(entries)}" for name, entries in self._collections.items())
        return f"CollectionProvider({sizes})"

    def names(self) -> list[str]:
        return sorted(self._collections)

    def get(self, name: str) -> Sequence[CollectionEntry]:
        """Return the entries of a collection, or an empty tuple if unknown."""
        return self._collections.get(name, ())

    def find(self, name: str, slug: str) -> Optional[CollectionEntry]:
        """
        Find the entry with the given slug in a collection.

        Args:
            name: Collection name (e.g. "test" or "post")
            slug: Slug to look for

        Returns:
            The matching entry, or None if the collection has no such slug
        """
        for entry in self.get(name):
            if entry.slug == slug:
                return entry
        return None

    @classmethod
    def from_contents(
        cls,
        contents: Iterable,
        content_root: str = "",
        collection_paths: Mapping[str, str] | None = None,
        groups: Mapping[str, Sequence[str]] | None = None,
        siteurl: str = "",
    ) -> "CollectionProvider":
        """
        Build the provider from Pelican content objects.

        An item's collection is its ``collection`` metadata when present,
        otherwise the collection whose directory (``collection_paths``) is
        the first directory of the item's source path under ``content_root``.

        Args:
            contents: Pelican articles and pages
            content_root: Pelican's PATH setting
            collection_paths: Mapping of collection name to content directory
            groups: Aggregate collections, mapping name to member collections
            siteurl: The SITEURL from Pelican settings

        Returns:
            A fully populated CollectionProvider
        """
        if collection_paths is None:
            collection_paths = DEFAULT_COLLECTION_PATHS
        if groups is None:
            groups = DEFAULT_COLLECTION_GROUPS
        directories = {directory: name for name, directory in collection_paths.items()}
        siteurl = siteurl.rstrip("/")

        buckets: dict[str, list[CollectionEntry]] = {name: [] for name in collection_paths}
        for content in contents:
            name = _collection_of(content, content_root, directories)
            if name is None:
                continue
            metadata = getattr(content, "metadata", {}) or {}
            source_path = str(getattr(content, "source_path", ""))
            entry = CollectionEntry(
                slug=file_slug(source_path),
                url=f"{siteurl}/{content.url}",
                title=str(metadata.get("pagetitle") or getattr(content, "title", "")),
                date=getattr(content, "date", None),
                source_path=source_path,
            )
            buckets.setdefault(name, []).append(entry)

        collections = {name: sorted(entries, key=_sort_key) for name, entries in buckets.items()}
        for group, members in groups.items():
            merged = [entry for member in members for entry in collections.get(member, [])]
            collections[group] = sorted(merged, key=_sort_key)

        provider = cls(collections)
        _log.info(f"[collections] Built {provider!r}")
        return provider


def _collection_of(content, content_root: str, directories: Mapping[str, str]) -> Optional[str]:
    metadata = getattr(content, "metadata", {}) or {}
    if metadata.get("collection"):
        return str(metadata["collection"])

    source_path = Path(getattr(content, "source_path", ""))
    if content_root:
        try:
            source_path = source_path.relative_to(content_root)
        except ValueError:
            return None
    parts = source_path.parts
    if len(parts) < 2:
        return None
    return directories.get(parts[0])
