#!/usr/bin/env python3
"""
Seed categories and products into the configured database.

With no --file, the built-in sample catalog is used. A JSON file must hold
{"categories": [...], "products": [...]}, where each product names its
category by slug under "category".

Usage:
    python scripts/seed_products.py --file catalog.json --database-url sqlite:///./storefront.db
"""
import argparse
import json
import logging
import sys

from storefront.config import settings
from storefront.db import init_db, make_engine
from storefront.repositories.sql import SqlStorage
from storefront.seed import CATEGORIES, PRODUCTS, seed_catalog
from storefront.utils.logging import configure_logging


def load_catalog(path):
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict) or "products" not in data:
        raise ValueError(f"{path}: expected an object with a 'products' list")
    return data.get("categories", []), data["products"]


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--file", help="JSON catalog to load instead of the sample one")
    parser.add_argument("--database-url", default=settings.DATABASE_URL)
    parser.add_argument("--reset", action="store_true", help="drop and recreate tables")
    args = parser.parse_args(argv)

    configure_logging(settings.LOG_LEVEL)
    categories, products = CATEGORIES, PRODUCTS
    if args.file:
        categories, products = load_catalog(args.file)

    engine = make_engine(args.database_url)
    init_db(engine, reset=args.reset)
    created = seed_catalog(SqlStorage(engine), categories, products)
    logging.getLogger("storefront.seed").info("%d products created", created)
    return 0


if __name__ == "__main__":
    sys.exit(main())
