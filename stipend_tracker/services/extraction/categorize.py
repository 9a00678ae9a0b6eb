"""
Merchant Categorization

DESIGN DECISION: Simple keyword matching rather than ML because:
1. More transparent to the user
2. Easier to debug
3. The result is only a starting point; the user can fix the transaction
"""

from typing import Optional

from stipend_tracker.models.ledger import Category


_KEYWORDS: tuple[tuple[Category, tuple[str, ...]], ...] = (
    (Category.FOOD, (
        "mcdonald", "burger", "pizza", "taco", "chipotle", "subway",
        "starbucks", "dunkin", "wendy", "kfc", "cafe", "coffee",
        "restaurant", "diner", "grill", "bakery", "grocery", "market",
        "kroger", "safeway", "aldi", "trader joe", "whole foods",
    )),
    (Category.TRANSPORTATION, (
        "metro", "transit", "bus", "rail", "uber", "lyft", "taxi",
        "parking", "shell", "chevron", "exxon", "fuel", "gas station",
    )),
    (Category.PERSONAL_CARE, (
        "cvs", "walgreens", "rite aid", "pharmacy", "drug", "salon",
        "barber", "beauty",
    )),
    (Category.SCHOOL_SUPPLIES, (
        "staples", "office depot", "officemax", "bookstore", "books",
        "school", "stationery",
    )),
    (Category.CLOTHING, (
        "old navy", "h&m", "zara", "gap", "foot locker", "shoes",
        "apparel", "clothing", "uniform",
    )),
    (Category.ENTERTAINMENT, (
        "cinema", "theater", "theatre", "amc", "movie", "netflix",
        "spotify", "gamestop", "arcade", "bowling",
    )),
)

# Category names returned by the Mindee receipt API
_MINDEE_CATEGORIES: dict[str, Category] = {
    "food": Category.FOOD,
    "gasoline": Category.TRANSPORTATION,
    "parking": Category.TRANSPORTATION,
    "toll": Category.TRANSPORTATION,
    "transport": Category.TRANSPORTATION,
    "shopping": Category.OTHER,
    "miscellaneous": Category.OTHER,
}


def guess_category(merchant: str, ocr_category: Optional[str] = None) -> Category:
    """
    Make an educated guess about a receipt's category.

    The merchant name wins; the OCR service's own category is only used
    when no keyword matched.
    """
    merchant_lower = (merchant or "").lower()
    for category, keywords in _KEYWORDS:
        if any(kw in merchant_lower for kw in keywords):
            return category

    if ocr_category:
        return _MINDEE_CATEGORIES.get(ocr_category.lower(), Category.OTHER)
    return Category.OTHER
