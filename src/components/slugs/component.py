"""
Slugs component - URL-safe identifiers derived from titles and tag names.

slugify is pure. generate_unique_slug resolves collisions by querying a
uniqueness oracle with numeric suffixes; the lookup and the later insert are
not atomic, so callers run slug consumption under the retry driver.
"""

from __future__ import annotations

import re
from uuid import UUID

from src.components.slugs.ports import SlugLookup
from src.domain.errors import ValidationFailure

_WHITESPACE = re.compile(r"\s+")
_NON_SLUG = re.compile(r"[^a-z0-9_-]")
_DASHES = re.compile(r"-+")


def slugify(text: str) -> str:
    """
    Lowercase, hyphen-delimited token.

    >>> slugify("Hello World")
    'hello-world'
    >>> slugify("Café München")
    'caf-mnchen'
    """
    slug = text.lower().strip()
    slug = _WHITESPACE.sub("-", slug)
    slug = _NON_SLUG.sub("", slug)
    slug = _DASHES.sub("-", slug)
    return slug.strip("-")


def generate_unique_slug(
    text: str,
    lookup: SlugLookup,
    exclude_id: UUID | None = None,
    field: str = "title",
) -> str:
    """
    Return the first free candidate among base, base-1, base-2, ...

    A candidate held by exclude_id counts as free, so a record keeps its own
    slug when re-saved. Raises ValidationFailure when the text has no
    sluggable characters.
    """
    base = slugify(text)
    if not base:
        raise ValidationFailure(f"The {field} must contain at least one letter or digit", field=field)

    candidate = base
    counter = 1
    while True:
        holder = lookup(candidate)
        if holder is None or (exclude_id is not None and holder == exclude_id):
            return candidate
        candidate = f"{base}-{counter}"
        counter += 1
