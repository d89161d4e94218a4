"""URL slug derivation shared by inline rename and the category form."""

import re

# ASCII word characters only, so accented letters are dropped rather than kept
_DISALLOWED = re.compile(r"[^\w\s-]", re.ASCII)
_SEPARATORS = re.compile(r"[\s_]+", re.ASCII)
_HYPHEN_RUNS = re.compile(r"-{2,}")


def slugify(name: str) -> str:
    """Derive a URL slug from a display name.

    >>> slugify("Men's Rings!!")
    'mens-rings'
    """
    slug = name.strip().lower()
    slug = _DISALLOWED.sub("", slug)
    slug = _SEPARATORS.sub("-", slug)
    slug = _HYPHEN_RUNS.sub("-", slug)
    return slug.strip("-")
