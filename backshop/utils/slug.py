"""
Slug utilities
"""

import re
from typing import Awaitable, Callable
import slugify as python_slugify

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

def generate_slug(text: str) -> str:
    """
    Generate URL-friendly slug from text

    Transliterates non-Latin characters, strips diacritics, lowercases and
    collapses every run of other characters into a single hyphen.

    Args:
        text: Input text

    Returns:
        Slug (empty when the text has no sluggable characters)
    """
    return python_slugify.slugify(text or "")

def is_valid_slug(slug: str) -> bool:
    """
    Check slug format

    Args:
        slug: Candidate slug

    Returns:
        True if the slug is lowercase alphanumeric segments joined by single hyphens
    """
    return bool(slug) and SLUG_PATTERN.match(slug) is not None

async def unique_slug(base: str, exists: Callable[[str], Awaitable[bool]]) -> str:
    """
    Disambiguate a slug with a numeric suffix

    Tries ``base``, ``base-1``, ``base-2``... until ``exists`` reports the
    candidate as free.

    Args:
        base: Preferred slug
        exists: Async predicate returning True when a slug is taken

    Returns:
        First free slug
    """
    slug = base
    counter = 1

    while await exists(slug):
        slug = f"{base}-{counter}"
        counter += 1

    return slug
