"""Chapter-level reference data for entries without a curated description."""

from __future__ import annotations

from typing import Dict

CHAPTER_DESCRIPTIONS: Dict[int, str] = {
    1: "Live animals",
    2: "Meat and edible meat offal",
    3: "Fish and crustaceans",
    4: "Dairy produce; eggs; honey",
    5: "Products of animal origin",
    61: "Knitted or crocheted apparel",
    62: "Woven apparel and clothing accessories",
    71: "Pearls, precious stones and metals; jewelry",
    84: "Machinery and mechanical appliances",
    85: "Electrical machinery and equipment",
    94: "Furniture; bedding; lamps",
    95: "Toys, games and sports equipment",
}

DEFAULT_DESCRIPTION = "Classified product"


def describe_chapter(chapter: int) -> str:
    return CHAPTER_DESCRIPTIONS.get(chapter, DEFAULT_DESCRIPTION)


def default_unit(chapter: int) -> str:
    """Typical statistical unit of quantity for a chapter."""
    if 61 <= chapter <= 63:
        return "doz. kg"
    if 1 <= chapter <= 5:
        return "kg"
    if 84 <= chapter <= 85:
        return "No."
    return "kg"
