"""Print the products a shopper would see for a collection, search and sort.

Useful for checking a catalog file before it ships: records missing required
fields are reported and skipped exactly as the storefront skips them.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from storefront.core.dataset import CatalogUnavailable, collections, read_catalog
from storefront.core.pipeline import FilterQuery, SortKey, active_filters, compute_visible


def main() -> None:
    parser = argparse.ArgumentParser(description="Preview the visible products for a catalog query")
    parser.add_argument("catalog", type=Path, help="Path to products JSON")
    parser.add_argument("--collection", help="Collection to browse (defaults to listing collections)")
    parser.add_argument("--search", default="", help="Case-insensitive name/category search")
    parser.add_argument("--sort", default=SortKey.DEFAULT.value, choices=[k.value for k in SortKey])
    parser.add_argument("--material", default="all")
    parser.add_argument("--price-range", default="all")
    parser.add_argument("--features", default="all")
    parser.add_argument("--json", action="store_true", help="Emit JSON records instead of a table")
    args = parser.parse_args()

    try:
        products = read_catalog(args.catalog)
    except CatalogUnavailable as exc:
        raise SystemExit(str(exc))

    if not args.collection:
        for name in collections(products):
            print(name)
        return

    query = FilterQuery(
        collection=args.collection,
        search_term=args.search,
        sort_key=SortKey(args.sort),
        material=args.material,
        price_range=args.price_range,
        features=args.features,
    )
    visible = compute_visible(products, query)
    if args.json:
        print(json.dumps([p.to_record() for p in visible], indent=2, ensure_ascii=False))
        return

    for f in active_filters(query):
        print(f"[filter] {f.label}")
    for product in visible:
        print(f"{product.id:<10} {product.price:>10}  {product.name}")
    print(f"{len(visible)} of {len(products)} products")


if __name__ == "__main__":
    main()
