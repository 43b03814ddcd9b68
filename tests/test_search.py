from __future__ import annotations

from islanders.core.schemas import CatalogItem, SearchQuery
from islanders.core.search import matches, search_catalog


def _items() -> list[CatalogItem]:
    return [
        CatalogItem(
            id="re_0",
            domain="Real Estate",
            title="Villa in Kyrenia",
            location="Kyrenia, North Cyprus",
            price=100,
            category="Villa",
            rental_type="long-term",
            tags=["Villa", "Sea View"],
            amenities=["Private Pool", "Wifi"],
            rating=4.5,
        ),
        CatalogItem(
            id="re_1",
            domain="Real Estate",
            title="Apartment in Famagusta",
            location="Famagusta, North Cyprus",
            price=250,
            category="Apartment",
            rental_type="short-term",
            tags=["Apartment"],
            amenities=["Wifi"],
        ),
        CatalogItem(
            id="car_0",
            domain="Cars",
            title="Toyota Rental",
            location="Nicosia",
            price=30,
            vehicle_type="rental",
            features=["AC", "GPS"],
            tags=["Toyota"],
            rating=4.9,
        ),
        CatalogItem(
            id="hotel_0",
            domain="Hotels",
            title="Boutique Paradise",
            location="Bellapais",
            price=100,
            hotel_type="Boutique",
            amenities=["Spa"],
            rating=4.5,
        ),
        CatalogItem(
            id="rest_0",
            domain="Restaurants",
            title="Seafood Delight",
            location="Kyrenia",
            price=35,
            category="Seafood",
            tags=["Dinner"],
        ),
    ]


def _ids(items) -> list[str]:
    return [i.id for i in items]


def test_price_range_is_inclusive():
    item = _items()[0]
    assert matches(item, SearchQuery(min_price=50, max_price=150))
    assert matches(item, SearchQuery(min_price=100, max_price=100))
    assert not matches(item, SearchQuery(min_price=50, max_price=99))
    assert not matches(item, SearchQuery(min_price=101))


def test_empty_query_matches_everything():
    assert _ids(search_catalog(_items(), SearchQuery())) == ["re_0", "re_1", "car_0", "hotel_0", "rest_0"]


def test_domain_filter_and_marketplace_wildcard():
    assert _ids(search_catalog(_items(), SearchQuery(domain="Cars"))) == ["car_0"]
    assert len(search_catalog(_items(), SearchQuery(domain="Marketplace"))) == 5


def test_sub_category_depends_on_domain():
    items = _items()
    assert _ids(search_catalog(items, SearchQuery(domain="Real Estate", sub_category="short-term"))) == ["re_1"]
    assert _ids(search_catalog(items, SearchQuery(domain="Real Estate", sub_category="villa"))) == ["re_0"]
    assert _ids(search_catalog(items, SearchQuery(domain="Hotels", sub_category="boutique"))) == ["hotel_0"]
    assert _ids(search_catalog(items, SearchQuery(domain="Cars", sub_category="sale"))) == []
    assert _ids(search_catalog(items, SearchQuery(domain="Restaurants", sub_category="sea"))) == ["rest_0"]


def test_location_is_case_insensitive_substring():
    assert _ids(search_catalog(_items(), SearchQuery(location="kyrenia"))) == ["re_0", "rest_0"]


def test_amenities_require_all_across_tags_amenities_features():
    items = _items()
    assert _ids(search_catalog(items, SearchQuery(amenities=["pool", "wifi"]))) == ["re_0"]
    assert _ids(search_catalog(items, SearchQuery(amenities=["wifi"]))) == ["re_0", "re_1"]
    assert _ids(search_catalog(items, SearchQuery(amenities=["gps"]))) == ["car_0"]
    assert _ids(search_catalog(items, SearchQuery(amenities=["sea view"]))) == ["re_0"]
    assert _ids(search_catalog(items, SearchQuery(amenities=["wifi", "gym"]))) == []


def test_free_text_matches_title_or_tags():
    items = _items()
    assert _ids(search_catalog(items, SearchQuery(query="toyota"))) == ["car_0"]
    assert _ids(search_catalog(items, SearchQuery(query="dinner"))) == ["rest_0"]
    assert _ids(search_catalog(items, SearchQuery(query="famagusta"))) == ["re_1"]


def test_all_conditions_are_combined():
    q = SearchQuery(domain="Real Estate", location="north cyprus", max_price=200, amenities=["wifi"])
    assert _ids(search_catalog(_items(), q)) == ["re_0"]


def test_sort_by_price():
    items = _items()
    assert _ids(search_catalog(items, SearchQuery(sort_by="price_asc"))) == ["car_0", "rest_0", "re_0", "hotel_0", "re_1"]
    assert _ids(search_catalog(items, SearchQuery(sort_by="price_desc"))) == ["re_1", "re_0", "hotel_0", "rest_0", "car_0"]


def test_sort_by_rating_is_stable_and_treats_missing_as_zero():
    ranked = _ids(search_catalog(_items(), SearchQuery(sort_by="rating")))
    assert ranked == ["car_0", "re_0", "hotel_0", "re_1", "rest_0"]
