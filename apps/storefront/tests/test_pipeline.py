import pytest

from storefront.core.dataset import Product
from storefront.core.pipeline import (
    FilterQuery,
    SortKey,
    active_filters,
    clear_filter,
    compute_visible,
    reset_filters,
)


def _product(pid, name, price, collection="A", category="Shirt", **facets):
    return Product(
        id=pid,
        name=name,
        price=price,
        image_url="img.png",
        category=category,
        collection=collection,
        **facets,
    )


CATALOG = [
    _product("p1", "Linen Kurta", "₹1,999", category="Kurta", material="linen", price_range="1000-2000"),
    _product("p2", "cotton Tee", "₹799", material="cotton", price_range="under-1000"),
    _product("p3", "Blazer", "₹6,499", collection="B", material="wool"),
    _product("p4", "Oxford Shirt", "₹799", material="cotton", price_range="under-1000", features="tailored"),
    _product("p5", "Denim Jacket", "₹3,499", category="Outerwear", material="denim"),
]


def _ids(products):
    return [p.id for p in products]


def test_price_asc_scenario():
    catalog = [
        _product("p1", "One", "₹100"),
        _product("p2", "Two", "₹50"),
    ]
    assert _ids(compute_visible(catalog, FilterQuery(collection="A", sort_key=SortKey.PRICE_ASC))) == ["p2", "p1"]


def test_collection_match_is_exact():
    assert _ids(compute_visible(CATALOG, FilterQuery(collection="B"))) == ["p3"]
    assert compute_visible(CATALOG, FilterQuery(collection="b")) == []


def test_default_sort_preserves_catalog_order_for_any_filter():
    queries = [
        FilterQuery(collection="A"),
        FilterQuery(collection="A", material="cotton"),
        FilterQuery(collection="A", search_term="SHIRT"),
        FilterQuery(collection="A", price_range="under-1000"),
    ]
    for query in queries:
        visible = _ids(compute_visible(CATALOG, query))
        assert visible == [pid for pid in _ids(CATALOG) if pid in visible]


def test_default_sort_restores_order_after_reordering():
    reordered = compute_visible(CATALOG, FilterQuery(collection="A", sort_key=SortKey.NAME_DESC))
    assert _ids(reordered) != ["p1", "p2", "p4", "p5"]
    assert _ids(compute_visible(CATALOG, FilterQuery(collection="A"))) == ["p1", "p2", "p4", "p5"]


def test_search_matches_name_or_category_case_insensitively():
    assert _ids(compute_visible(CATALOG, FilterQuery(collection="A", search_term="  KURTA "))) == ["p1"]
    assert _ids(compute_visible(CATALOG, FilterQuery(collection="A", search_term="outer"))) == ["p5"]
    assert _ids(compute_visible(CATALOG, FilterQuery(collection="A", search_term="tee"))) == ["p2"]


def test_facet_filters_combine():
    query = FilterQuery(collection="A", material="cotton", features="tailored")
    assert _ids(compute_visible(CATALOG, query)) == ["p4"]


def test_name_sort_ignores_case():
    asc = compute_visible(CATALOG, FilterQuery(collection="A", sort_key=SortKey.NAME_ASC))
    assert _ids(asc) == ["p2", "p5", "p1", "p4"]
    desc = compute_visible(CATALOG, FilterQuery(collection="A", sort_key=SortKey.NAME_DESC))
    assert _ids(desc) == ["p4", "p1", "p5", "p2"]


def test_price_sorts_are_stable_on_ties():
    asc = compute_visible(CATALOG, FilterQuery(collection="A", sort_key=SortKey.PRICE_ASC))
    assert _ids(asc) == ["p2", "p4", "p1", "p5"]
    desc = compute_visible(CATALOG, FilterQuery(collection="A", sort_key=SortKey.PRICE_DESC))
    assert _ids(desc) == ["p5", "p1", "p2", "p4"]


def test_query_accepts_camel_case_payload():
    query = FilterQuery.model_validate({"collection": "A", "sortKey": "price-desc", "priceRange": "under-1000"})
    assert query.sort_key is SortKey.PRICE_DESC
    assert _ids(compute_visible(CATALOG, query)) == ["p2", "p4"]


def test_active_filters_and_clearing_one():
    query = FilterQuery(collection="A", material="cotton", price_range="under-1000")
    assert [f.id for f in active_filters(query)] == ["material", "price_range"]
    assert active_filters(query)[0].label == "Material: cotton"

    cleared = clear_filter(query, "material")
    assert cleared.material == "all"
    assert cleared.price_range == "under-1000"
    assert query.material == "cotton"
    assert _ids(compute_visible(CATALOG, cleared)) == ["p2", "p4"]

    with pytest.raises(ValueError):
        clear_filter(query, "colour")


def test_reset_filters_keeps_collection():
    query = FilterQuery(collection="A", search_term="x", sort_key=SortKey.NAME_ASC, material="cotton")
    reset = reset_filters(query)
    assert reset == FilterQuery(collection="A")
    assert active_filters(reset) == []
