"""Category name resolution for note creation.

The cache maps lower-cased category name -> id. It belongs to one dispatch
batch and is passed in explicitly; nothing here is module-global.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional

from blueprint.config import DEFAULT_CATEGORY_COLOR
from blueprint.domain.normalize import parse_string

if TYPE_CHECKING:
    from blueprint.ports.outbound import EntityStorePort

CategoryCache = Dict[str, str]


async def build_category_cache(store: EntityStorePort) -> CategoryCache:
    """Seed a batch cache from the categories that already exist."""
    categories = await store.list_categories()
    return {c.name.lower(): c.id for c in categories}


async def resolve_category_id(
    name: Optional[str],
    cache: CategoryCache,
    store: EntityStorePort,
    color: str = DEFAULT_CATEGORY_COLOR,
) -> Optional[str]:
    """Return the id for ``name``, creating the category on first use.

    Blank names resolve to None (the note stays uncategorized). The cache
    is updated in place so later lookups in the same batch reuse the id.
    """
    clean = parse_string(name)
    if not clean:
        return None
    key = clean.lower()
    existing = cache.get(key)
    if existing:
        return existing
    created = await store.create_category(clean, color)
    cache[key] = created.id
    return created.id
