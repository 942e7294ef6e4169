"""Fallback copy used by the bulk optimizer when a product has none."""

from typing import NamedTuple


class CategoryDefaults(NamedTuple):
    description: str
    tags: str


CATEGORY_DEFAULTS: dict[str, CategoryDefaults] = {
    "electronics": CategoryDefaults(
        "{name} brings dependable performance and modern features to your everyday tech setup.",
        "electronics, tech, gadgets",
    ),
    "clothing": CategoryDefaults(
        "{name} combines comfortable materials with a versatile, wear-anywhere style.",
        "clothing, fashion, apparel",
    ),
    "home & garden": CategoryDefaults(
        "{name} makes your home and outdoor spaces more practical and more inviting.",
        "home, garden, decor",
    ),
    "books": CategoryDefaults(
        "{name} is an engaging read worth a place on every bookshelf.",
        "books, reading, literature",
    ),
    "sports": CategoryDefaults(
        "{name} is built to keep up with your training, game after game.",
        "sports, fitness, outdoors",
    ),
    "beauty": CategoryDefaults(
        "{name} is a gentle, effective addition to your daily beauty routine.",
        "beauty, skincare, self-care",
    ),
    "food": CategoryDefaults(
        "{name} is made with quality ingredients for flavor you can taste.",
        "food, gourmet, pantry",
    ),
    "toys": CategoryDefaults(
        "{name} sparks imagination and hours of play for kids of all ages.",
        "toys, kids, games",
    ),
    "automotive": CategoryDefaults(
        "{name} keeps your vehicle running and looking its best.",
        "automotive, car care, accessories",
    ),
    "health": CategoryDefaults(
        "{name} supports a healthier, more balanced lifestyle every day.",
        "health, wellness, lifestyle",
    ),
}

GENERIC_DEFAULTS = CategoryDefaults(
    "{name} is a quality product chosen for value and everyday reliability.",
    "featured, bestseller",
)


def defaults_for(category: str) -> CategoryDefaults:
    return CATEGORY_DEFAULTS.get(category.strip().lower(), GENERIC_DEFAULTS)
