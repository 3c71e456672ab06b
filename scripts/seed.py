"""Stage demo records in the local store, as if entered through the admin forms."""

from __future__ import annotations

from storefront.config import load_settings
from storefront.logic.builder import ValidationError
from storefront.session import StorefrontSession

DEMO_SUPPLEMENTS = [
    {
        "id": "demo-zinc-boost",
        "name": "Zinc Boost",
        "brand": "Health42 Labs",
        "category": "Dietary Supplements",
        "tags": "Zinc-Boost, immunity",
        "price": "19.99",
        "compareAtPrice": "24.99",
        "rating": "4.4",
        "reviewsCount": "18",
        "servingsPerContainer": "60",
        "images": "https://images.health42.net/zinc-boost.jpg",
        "ingredients": "Zinc|25 mg|as picolinate\nVitamin C|100 mg",
        "clickbankHoplink": "https://hop.clickbank.net/?affiliate=health42&vendor=zinc&tid={{utm}}",
    },
]

DEMO_POSTS = [
    {
        "id": "demo-welcome",
        "title": "Welcome to health42",
        "excerpt": "What we review and how we pick products.",
        "bodyHtml": "<p>Every product on this site is reviewed by our editors.</p>",
        "publishedAt": "2024-06-01",
        "author": "health42 editors",
        "category": "Nutrition",
        "tags": "news",
    },
]


def main() -> None:
    session = StorefrontSession.from_settings(load_settings())
    for fields in DEMO_SUPPLEMENTS:
        try:
            session.stage_product(fields)
        except ValidationError as exc:
            print("Skipping", fields.get("id"), exc)
    for fields in DEMO_POSTS:
        try:
            session.stage_post(fields)
        except ValidationError as exc:
            print("Skipping", fields.get("id"), exc)
    for notice in session.notices:
        print(notice.message)
    print("Seed complete")


if __name__ == "__main__":
    main()
