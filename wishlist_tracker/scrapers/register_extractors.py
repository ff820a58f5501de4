"""Register the built-in site extractors with the registry.

Imported during startup. Order matters: resolution returns the first
extractor whose hostname fragments match.
"""

from typing import Optional

import structlog

from wishlist_tracker.scrapers.extractors import (
    AMAZON_EXTRACTOR,
    AYM_STUDIO_EXTRACTOR,
    FARFETCH_EXTRACTOR,
    GIANA_WORLD_EXTRACTOR,
    HM_EXTRACTOR,
    MYTHERESA_EXTRACTOR,
    YOOX_EXTRACTOR,
    ZARA_EXTRACTOR,
)
from wishlist_tracker.scrapers.registry import ExtractorRegistry

logger = structlog.get_logger(__name__)

BUILTIN_EXTRACTORS = [
    # Shopify storefronts
    AYM_STUDIO_EXTRACTOR,
    GIANA_WORLD_EXTRACTOR,
    # Client-side rendered
    ZARA_EXTRACTOR,
    HM_EXTRACTOR,
    FARFETCH_EXTRACTOR,
    # Server-rendered
    AMAZON_EXTRACTOR,
    MYTHERESA_EXTRACTOR,
    YOOX_EXTRACTOR,
]


def register_all_extractors(registry: Optional[ExtractorRegistry] = None) -> ExtractorRegistry:
    """Register every built-in extractor.

    Args:
        registry: Target registry (defaults to the global one)

    Returns:
        The populated registry
    """
    if registry is None:
        from wishlist_tracker.scrapers.registry import extractor_registry

        registry = extractor_registry

    for extractor in BUILTIN_EXTRACTORS:
        try:
            registry.register_extractor(extractor)
        except Exception as e:
            logger.error(
                "extractor_registration_failed",
                site=extractor.name,
                error=str(e),
                exc_info=True,
            )

    logger.info(
        "all_extractors_registered",
        count=len(registry),
        sites=[site.value for site in registry.get_registered_sites()],
    )
    return registry
