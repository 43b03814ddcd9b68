"""
Catalog search: linear-scan filter over catalog items.

All supplied conditions must hold (logical AND). Unset fields are ignored.
"""

from __future__ import annotations

from islanders.core.schemas import CatalogItem, SearchQuery

# Domain value that matches every item.
WILDCARD_DOMAIN = "Marketplace"

SORT_KEYS = {"price_asc", "price_desc", "rating"}


def matches(item: CatalogItem, q: SearchQuery) -> bool:
    # 1. Domain.
    if q.domain and q.domain != WILDCARD_DOMAIN and item.domain != q.domain:
        return False

    # 2. Sub-category (meaning depends on domain).
    if q.sub_category:
        sub = q.sub_category.lower()
        if item.domain == "Real Estate":
            if (item.rental_type or "").lower() != sub and sub not in item.category.lower():
                return False
        elif item.domain == "Hotels":
            if (item.hotel_type or "").lower() != sub:
                return False
        elif item.domain == "Cars":
            if (item.vehicle_type or "").lower() != sub:
                return False
        elif sub not in item.category.lower():
            return False

    # 3. Location.
    if q.location and q.location.lower() not in item.location.lower():
        return False

    # 4. Price range (inclusive).
    if q.min_price is not None and item.price < q.min_price:
        return False
    if q.max_price is not None and item.price > q.max_price:
        return False

    # 5. Amenities: every requested one must appear in tags/amenities/features.
    if q.amenities:
        features = [f.lower() for f in (*item.tags, *item.amenities, *item.features)]
        for wanted in q.amenities:
            w = wanted.lower()
            if not any(w in f for f in features):
                return False

    # 6. Free text.
    if q.query:
        text = q.query.lower()
        if text not in item.title.lower() and not any(text in t.lower() for t in item.tags):
            return False

    return True


def search_catalog(items: list[CatalogItem], q: SearchQuery) -> list[CatalogItem]:
    """Return items matching every condition of `q`, optionally sorted (stable)."""
    results = [item for item in items if matches(item, q)]

    if q.sort_by == "price_asc":
        results.sort(key=lambda i: i.price)
    elif q.sort_by == "price_desc":
        results.sort(key=lambda i: i.price, reverse=True)
    elif q.sort_by == "rating":
        results.sort(key=lambda i: i.rating or 0, reverse=True)

    return results
