"""Test marketplace configuration."""
from patterns.domain_config import MarketplaceConfig


def test_defaults():
    config = MarketplaceConfig.default()
    assert config.pagination.default_limit == 20
    assert config.pagination.comment_limit == 50
    assert config.listings.max_images == 5
    assert config.listings.max_image_bytes == 5 * 1024 * 1024


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("BOOKXCHANGE_MAX_IMAGES", "3")
    monkeypatch.setenv("BOOKXCHANGE_DEFAULT_PAGE_LIMIT", "10")
    config = MarketplaceConfig.from_env()
    assert config.listings.max_images == 3
    assert config.pagination.default_limit == 10
    assert config.listings.min_images == 1
