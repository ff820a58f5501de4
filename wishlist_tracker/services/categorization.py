"""Product categorization.

The tracker files every item under one of a fixed set of categories.
Categorization is best-effort: callers go through
``categorize_with_fallback`` so a failing categorizer degrades to the
default category instead of breaking the add-item flow.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

import structlog

from wishlist_tracker.models.wishlist_item import DEFAULT_CATEGORY

logger = structlog.get_logger(__name__)


# Category slug -> allowed subcategories
PREDEFINED_CATEGORIES: Dict[str, List[str]] = {
    "clothing": [
        "Dresses", "Tops", "Shirts & Blouses", "Sweaters & Cardigans",
        "Coats", "Blazers", "Skirts", "Pants", "Gym",
    ],
    "shoes": [],
    "accessories": ["Bags", "Jewelry", "Accessories"],
    "beauty": ["Makeup", "Nails", "Perfumes"],
    "home-tech": ["House Things", "Electronics"],
    "food": [],
    "extra": [],
}

# Subcategory -> title keywords; the category is implied by the subcategory
SUBCATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "Dresses": ["dress", "gown", "jumpsuit", "playsuit"],
    "Tops": ["top", "t-shirt", "tee", "tank", "camisole", "bodysuit", "corset"],
    "Shirts & Blouses": ["shirt", "blouse"],
    "Sweaters & Cardigans": ["sweater", "cardigan", "jumper", "knit", "pullover", "hoodie", "sweatshirt"],
    "Coats": ["coat", "jacket", "trench", "parka", "puffer", "gilet"],
    "Blazers": ["blazer", "tailored jacket"],
    "Skirts": ["skirt", "skort"],
    "Pants": ["pants", "trousers", "jeans", "shorts", "leggings", "joggers"],
    "Gym": ["sports bra", "yoga", "running", "activewear", "training", "gym"],
    "Bags": ["bag", "tote", "clutch", "backpack", "purse", "wallet", "crossbody"],
    "Jewelry": ["necklace", "earring", "bracelet", "ring", "pendant", "jewel"],
    "Accessories": ["belt", "scarf", "hat", "cap", "sunglasses", "gloves", "hair clip"],
    "Makeup": ["lipstick", "mascara", "foundation", "concealer", "blush", "eyeshadow", "lip gloss"],
    "Nails": ["nail polish", "nail", "manicure"],
    "Perfumes": ["perfume", "eau de parfum", "eau de toilette", "fragrance", "cologne"],
    "House Things": ["candle", "vase", "pillow", "cushion", "blanket", "mug", "towel", "lamp"],
    "Electronics": ["headphones", "earbuds", "speaker", "charger", "phone", "laptop", "camera", "airpods"],
}

# Categories without subcategories
CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "shoes": ["shoe", "sneaker", "boot", "sandal", "heel", "loafer", "trainer", "mule", "pump", "flat"],
    "food": ["chocolate", "coffee", "tea", "snack", "cookie", "candy", "matcha"],
}


@dataclass(frozen=True)
class CategoryResult:
    """Category assigned to a product; subcategory is None when not applicable."""

    category: str
    subcategory: Optional[str] = None


class Categorizer(Protocol):
    def categorize(
        self, title: str, brand: Optional[str] = None, url: Optional[str] = None
    ) -> CategoryResult: ...


def _keyword_score(keywords: List[str], title_lower: str) -> int:
    # Keywords match at word starts so "ring" does not hit "earring"
    return sum(1 for kw in keywords if re.search(rf"\b{re.escape(kw)}", title_lower))


def _subcategory_parent(subcategory: str) -> str:
    for category, subcategories in PREDEFINED_CATEGORIES.items():
        if subcategory in subcategories:
            return category
    return "extra"


class CategoryClassifier:
    """Keyword-based categorization from the product title.

    Scores every subcategory and standalone category by the number of
    keywords found in the title and picks the best; ties go to the first
    declared entry. Titles matching nothing are filed under ``extra``.
    """

    def categorize(
        self, title: str, brand: Optional[str] = None, url: Optional[str] = None
    ) -> CategoryResult:
        if not title:
            return CategoryResult("extra")

        title_lower = title.lower()
        scores: Dict[str, int] = {}

        for subcategory, keywords in SUBCATEGORY_KEYWORDS.items():
            score = _keyword_score(keywords, title_lower)
            if score > 0:
                scores[subcategory] = score

        for category, keywords in CATEGORY_KEYWORDS.items():
            score = _keyword_score(keywords, title_lower)
            if score > 0:
                scores[category] = score

        if not scores:
            return CategoryResult("extra")

        best = max(scores, key=scores.get)
        if best in PREDEFINED_CATEGORIES:
            return CategoryResult(best)
        return CategoryResult(_subcategory_parent(best), best)


def validate_category(result: CategoryResult) -> CategoryResult:
    """Drop unknown categories and subcategories that do not belong to their category."""
    if result.category not in PREDEFINED_CATEGORIES:
        return CategoryResult(DEFAULT_CATEGORY)
    if result.subcategory and result.subcategory not in PREDEFINED_CATEGORIES[result.category]:
        return CategoryResult(result.category)
    return result


def categorize_with_fallback(
    categorizer: Categorizer,
    title: str,
    brand: Optional[str] = None,
    url: Optional[str] = None,
) -> CategoryResult:
    """Categorize a product, degrading to the default category on any failure."""
    try:
        result = categorizer.categorize(title, brand=brand, url=url)
    except Exception as e:
        logger.warning(
            "categorization_failed",
            title=title[:50],
            error=str(e),
        )
        return CategoryResult(DEFAULT_CATEGORY)

    return validate_category(result)
