"""Slug normalization for names found on disk.

Only the full reindexer needs this: paths written through the CLI or tools are
already validated by :mod:`cortex.paths` and are never renormalized.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

_SEPARATORS = re.compile(r"[ _]+")
_INVALID = re.compile(r"[^a-z0-9-]")


def to_slug(name: str) -> str:
    """Normalize an arbitrary name. Returns "" when nothing usable remains."""
    slug = name.lower()
    slug = _SEPARATORS.sub("-", slug)
    slug = _INVALID.sub("", slug)
    return slug.strip("-")


@dataclass
class SiblingSlugs:
    """Outcome of normalizing one sibling set."""

    assigned: dict[str, str] = field(default_factory=dict)  # original -> slug
    warnings: list[str] = field(default_factory=list)


def assign_sibling_slugs(
    names: Iterable[str],
    label: dict[str, str] | None = None,
) -> SiblingSlugs:
    """Give every name in one directory level a unique slug.

    Names are processed in lexicographic order of the original name, so an
    unchanged directory always yields the same assignment. ``label`` maps a
    name to the text used in warnings (defaults to the name itself).
    """
    label = label or {}
    result = SiblingSlugs()
    taken: set[str] = set()

    for name in sorted(set(names)):
        shown = label.get(name, name)
        slug = to_slug(name)
        if not slug:
            result.warnings.append(f"skipped: {shown} normalizes to empty path")
            continue
        if slug in taken:
            suffix = 2
            while f"{slug}-{suffix}" in taken:
                suffix += 1
            slug = f"{slug}-{suffix}"
            result.warnings.append(f"renamed: {shown} -> {slug} (collision)")
        taken.add(slug)
        result.assigned[name] = slug

    return result
