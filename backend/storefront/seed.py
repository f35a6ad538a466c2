import logging
from typing import Dict, Iterable, List, Optional

from storefront.repositories.storage import Storage
from storefront.schemas.catalog import CategoryIn, ProductIn
from storefront.schemas.user import UserIn

log = logging.getLogger(__name__)

_IMG = "https://images.unsplash.com/{}?auto=format&fit=crop&w=400&h=300"

CATEGORIES: List[dict] = [
    {"name": "Electronics", "description": "Devices and technology", "slug": "electronics"},
    {"name": "Clothing", "description": "Apparel and accessories", "slug": "clothing"},
    {"name": "Home", "description": "Household goods", "slug": "home"},
    {"name": "Sports", "description": "Sports gear and accessories", "slug": "sports"},
]

# "category" is a slug from CATEGORIES
PRODUCTS: List[dict] = [
    {
        "name": "Samsung Galaxy S24 Smartphone",
        "description": "Flagship phone with a pro-grade camera and a fast processor",
        "price": "899.00",
        "original_price": "1059.00",
        "image": _IMG.format("photo-1511707171634-5f897ff02aa9"),
        "category": "electronics",
        "stock_quantity": 25,
        "low_stock_threshold": 5,
        "rating": "4.8",
        "review_count": 127,
        "is_on_sale": True,
        "sale_percentage": 15,
    },
    {
        "name": 'MacBook Pro 14" M3',
        "description": "Professional laptop with the M3 chip",
        "price": "1999.00",
        "image": _IMG.format("photo-1496181133206-80ce9b88a853"),
        "category": "electronics",
        "stock_quantity": 15,
        "low_stock_threshold": 3,
        "rating": "4.7",
        "review_count": 89,
    },
    {
        "name": "AirPods Pro (3rd Gen)",
        "description": "Wireless earbuds with active noise cancellation",
        "price": "249.00",
        "original_price": "279.00",
        "image": _IMG.format("photo-1505740420928-5e560c06d30e"),
        "category": "electronics",
        "stock_quantity": 40,
        "low_stock_threshold": 10,
        "rating": "4.9",
        "review_count": 203,
        "is_on_sale": True,
        "sale_percentage": 11,
    },
    {
        "name": "Apple Watch Series 9",
        "description": "Smartwatch with health and fitness tracking",
        "price": "399.00",
        "image": _IMG.format("photo-1523275335684-37898b6baf30"),
        "category": "electronics",
        "stock_quantity": 30,
        "low_stock_threshold": 8,
        "rating": "4.6",
        "review_count": 156,
    },
    {
        "name": "Premium Casual T-Shirt",
        "description": "Soft cotton tee for everyday wear",
        "price": "29.99",
        "original_price": "39.99",
        "image": _IMG.format("photo-1521572163474-6864f9cf17ab"),
        "category": "clothing",
        "stock_quantity": 50,
        "low_stock_threshold": 15,
        "rating": "4.4",
        "review_count": 64,
        "is_on_sale": True,
        "sale_percentage": 25,
    },
    {
        "name": "Classic Jeans",
        "description": "Straight-cut denim jeans",
        "price": "59.99",
        "image": _IMG.format("photo-1542272604-787c3835535d"),
        "category": "clothing",
        "stock_quantity": 35,
        "low_stock_threshold": 10,
        "rating": "4.5",
        "review_count": 98,
    },
    {
        "name": "LED Desk Lamp",
        "description": "Dimmable desk lamp with adjustable arm",
        "price": "79.99",
        "image": _IMG.format("photo-1507473885765-e6ed057f782c"),
        "category": "home",
        "stock_quantity": 20,
        "low_stock_threshold": 5,
        "rating": "4.3",
        "review_count": 41,
    },
    {
        "name": "Running Shoes",
        "description": "Lightweight trainers with a cushioned sole",
        "price": "129.99",
        "original_price": "149.99",
        "image": _IMG.format("photo-1542291026-7eec264c27ff"),
        "category": "sports",
        "stock_quantity": 45,
        "low_stock_threshold": 12,
        "rating": "4.7",
        "review_count": 175,
        "is_on_sale": True,
        "sale_percentage": 13,
    },
]


def seed_catalog(
    storage: Storage,
    categories: Optional[Iterable[dict]] = None,
    products: Optional[Iterable[dict]] = None,
) -> int:
    """
    Create the sample categories and products through `storage`.
    Does nothing when any category already exists. Returns the number of
    products created. Raises ValueError, before writing anything, when a
    product names a category slug that is not being seeded.
    """
    if storage.list_categories():
        log.info("Catalog already seeded, skipping")
        return 0

    categories = list(categories if categories is not None else CATEGORIES)
    products = list(products if products is not None else PRODUCTS)
    known = {c["slug"] for c in categories}
    unknown = sorted(
        {p["category"] for p in products if p.get("category") is not None} - known
    )
    if unknown:
        raise ValueError(f"Unknown category slug(s): {', '.join(unknown)}")

    by_slug: Dict[str, int] = {}
    for entry in categories:
        cat = storage.create_category(CategoryIn(**entry))
        by_slug[cat.slug] = cat.id

    created = 0
    for entry in products:
        entry = dict(entry)
        slug = entry.pop("category", None)
        if slug is not None:
            entry["category_id"] = by_slug[slug]
        entry.setdefault("in_stock", entry.get("stock_quantity", 0) > 0)
        storage.create_product(ProductIn(**entry))
        created += 1

    log.info("Seeded %d categories and %d products", len(by_slug), created)
    return created


def seed_admin(storage: Storage, username: str = "admin") -> None:
    if storage.get_user_by_username(username) is None:
        storage.create_user(UserIn(username=username, role="admin"))
        log.info("Created admin user %r", username)
