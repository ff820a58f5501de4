"""Tests for extractor registration and URL resolution."""

import pytest

from wishlist_tracker.core.exceptions import ConfigurationError
from wishlist_tracker.scrapers import registry as registry_module
from wishlist_tracker.scrapers.base import RenderConfig, Site, SiteExtractor
from wishlist_tracker.scrapers.register_extractors import (
    BUILTIN_EXTRACTORS,
    register_all_extractors,
)
from wishlist_tracker.scrapers.registry import ExtractorRegistry, get_extractor_registry

import sample_pages as pages


@pytest.fixture
def registry() -> ExtractorRegistry:
    return register_all_extractors(ExtractorRegistry())


class TestResolve:
    """Tests for ExtractorRegistry.resolve."""

    @pytest.mark.parametrize(
        "url,site",
        [
            (pages.ZARA_URL, Site.ZARA),
            (pages.HM_URL, Site.HM),
            (pages.FARFETCH_URL, Site.FARFETCH),
            (pages.AMAZON_URL, Site.AMAZON),
            (pages.MYTHERESA_URL, Site.MYTHERESA),
            (pages.YOOX_URL, Site.YOOX),
            (pages.AYM_URL, Site.AYM_STUDIO),
            (pages.GIANA_URL, Site.GIANA_WORLD),
        ],
    )
    def test_known_sites(self, registry, url, site):
        assert registry.resolve(url).site == site

    def test_hostname_is_case_insensitive(self, registry):
        assert registry.resolve("https://WWW.ZARA.COM/es/en/shirt.html").site == Site.ZARA

    @pytest.mark.parametrize(
        "url",
        [
            pages.GENERIC_URL,
            "not a url",
            "",
            "http://[broken",
        ],
    )
    def test_unknown_or_malformed_urls(self, registry, url):
        """Test unresolvable URLs map to None rather than raising."""
        assert registry.resolve(url) is None

    def test_path_is_not_matched(self, registry):
        """Test only the hostname is matched, not the path."""
        assert registry.resolve("https://example.com/zara.com/shirt") is None

    def test_first_registered_wins(self):
        registry = ExtractorRegistry()
        registry.register_extractor(SiteExtractor(site=Site.ZARA, hostnames=("shop.com",)))
        registry.register_extractor(SiteExtractor(site=Site.YOOX, hostnames=("shop.com",)))

        assert registry.resolve("https://shop.com/item").site == Site.ZARA


class TestRegistration:
    """Tests for extractor registration."""

    def test_builtin_extractors(self, registry):
        assert len(registry) == len(BUILTIN_EXTRACTORS)
        assert not registry.has_extractor(Site.GENERIC)
        assert set(registry.get_registered_sites()) == {e.site for e in BUILTIN_EXTRACTORS}

    def test_dynamic_extractor_requires_render_config(self):
        registry = ExtractorRegistry()
        broken = SiteExtractor(
            site=Site.ZARA, hostnames=("zara.com",), requires_dynamic_rendering=True
        )

        with pytest.raises(ConfigurationError):
            registry.register_extractor(broken)
        assert len(registry) == 0

    def test_dynamic_extractors_are_configured(self, registry):
        for site in (Site.ZARA, Site.HM, Site.FARFETCH):
            extractor = next(e for e in BUILTIN_EXTRACTORS if e.site == site)
            assert extractor.requires_dynamic_rendering is True
            assert isinstance(extractor.render, RenderConfig)

    def test_global_registry_is_populated_lazily(self, monkeypatch):
        monkeypatch.setattr(registry_module, "extractor_registry", ExtractorRegistry())

        registry = get_extractor_registry()

        assert registry is registry_module.extractor_registry
        assert len(registry) == len(BUILTIN_EXTRACTORS)
