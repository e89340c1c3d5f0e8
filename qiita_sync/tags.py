"""
Tag normalization for Qiita.

microCMS stores categories either as plain strings or as relation
objects, and free-form tags as a comma separated string. Qiita wants a
short list of ``{"name": ...}`` objects, so both sources are merged
here under Qiita's limits.
"""

from collections.abc import Mapping
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape

DEFAULT_TAG = "AI"
MAX_TAGS = 5
MAX_TAG_LENGTH = 20


def _category_name(category: Any) -> Optional[str]:
    if isinstance(category, str):
        return category
    if isinstance(category, Mapping):
        name = category.get("name") or category.get("title")
    else:
        name = getattr(category, "name", None) or getattr(category, "title", None)
    return name if isinstance(name, str) else None


def category_names(categories: Any) -> list[str]:
    """Flatten a string, a single relation object, or a list of either."""
    if not categories:
        return []
    if not isinstance(categories, (list, tuple)):
        categories = [categories]

    names = []
    for category in categories:
        name = _category_name(category)
        if name:
            names.append(name)
    return names


def normalize_tags(
    categories: Any = None,
    raw_tags: Optional[str] = "",
    max_tags: int = MAX_TAGS,
    max_tag_length: int = MAX_TAG_LENGTH,
    default_tag: str = DEFAULT_TAG,
    console: Optional[Console] = None,
) -> list[dict[str, str]]:
    """
    Build the tag list for a Qiita article.

    Candidates keep the order in which they are first seen: categories
    first, then comma separated tags. Duplicates, empty names and names
    longer than ``max_tag_length`` are dropped, and at most ``max_tags``
    survive. An empty result becomes ``[{"name": default_tag}]``.

    Args:
        categories: Category string, relation object, or list of either.
        raw_tags: Comma separated tag string.
        max_tags: Maximum number of tags to keep.
        max_tag_length: Maximum length of a single tag.
        default_tag: Tag used when nothing survives.
        console: Optional console for diagnostic output.

    Returns:
        List of ``{"name": tag}`` dicts.
    """
    candidates = [name.strip() for name in category_names(categories)]
    if isinstance(raw_tags, str):
        candidates.extend(tag.strip() for tag in raw_tags.split(","))

    unique = list(dict.fromkeys(candidates))
    valid = [tag for tag in unique if tag and len(tag) <= max_tag_length]
    selected = valid[:max_tags] or [default_tag]

    if console is not None:
        details = escape(f"categories={categories!r} tags={raw_tags!r} -> {selected}")
        console.print(f"[dim]🏷️  Tags: {details}[/dim]")

    return [{"name": tag} for tag in selected]
