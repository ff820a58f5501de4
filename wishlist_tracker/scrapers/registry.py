"""Registry mapping product URLs to site extractors."""

from typing import Dict, List, Optional
from urllib.parse import urlparse

import structlog

from wishlist_tracker.core.exceptions import ConfigurationError
from wishlist_tracker.scrapers.base import Site, SiteExtractor

logger = structlog.get_logger(__name__)


class ExtractorRegistry:
    """Ordered collection of site extractors.

    Resolution walks extractors in registration order and returns the first
    whose hostname fragments match, so more specific hosts must be
    registered before broader ones.
    """

    def __init__(self):
        self._extractor_registry: Dict[Site, SiteExtractor] = {}

    def register_extractor(self, extractor: SiteExtractor) -> None:
        """Register a site extractor.

        Args:
            extractor: Capability set for one site

        Raises:
            ConfigurationError: If a dynamic site has no render config
        """
        if extractor.requires_dynamic_rendering and extractor.render is None:
            raise ConfigurationError(
                f"Extractor {extractor.name} requires dynamic rendering but has no render config"
            )

        self._extractor_registry[extractor.site] = extractor
        logger.debug(
            "extractor_registered",
            site=extractor.name,
            dynamic=extractor.requires_dynamic_rendering,
        )

    def resolve(self, url: str) -> Optional[SiteExtractor]:
        """Find the extractor for a product URL.

        Args:
            url: Product page URL

        Returns:
            Matching extractor, or None for unknown or unparseable URLs
        """
        try:
            hostname = (urlparse(url).hostname or "").lower()
        except ValueError:
            logger.debug("extractor_url_unparseable", url=url)
            return None

        if not hostname:
            return None

        for extractor in self._extractor_registry.values():
            if extractor.matches(hostname):
                return extractor
        return None

    def get_registered_sites(self) -> List[Site]:
        return list(self._extractor_registry.keys())

    def has_extractor(self, site: Site) -> bool:
        return site in self._extractor_registry

    def __len__(self) -> int:
        return len(self._extractor_registry)


# Global registry instance
extractor_registry = ExtractorRegistry()


def get_extractor_registry() -> ExtractorRegistry:
    """Get the global registry, registering the built-in extractors on first use."""
    if not len(extractor_registry):
        from wishlist_tracker.scrapers.register_extractors import register_all_extractors

        register_all_extractors(extractor_registry)
    return extractor_registry
