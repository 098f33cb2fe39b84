"""Marketplace limits as frozen dataclasses.

Page sizes and listing image constraints live here, one nested section per
concern. Services receive a MarketplaceConfig by constructor; the process
instance is read once from BOOKXCHANGE_* environment variables.
"""

import os
from dataclasses import dataclass, field


# ---------------------------------------------------------------------------
# Nested config sections
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PaginationConfig:
    """Page sizes for list endpoints."""

    default_limit: int = 20
    comment_limit: int = 50
    max_limit: int = 100


@dataclass(frozen=True)
class ListingConfig:
    """Listing image constraints."""

    min_images: int = 1
    max_images: int = 5
    max_image_bytes: int = 5 * 1024 * 1024  # 5MB
    min_condition: int = 1
    max_condition: int = 5


# ---------------------------------------------------------------------------
# Top-level domain config
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MarketplaceConfig:
    """Complete configuration for the book exchange.

    Usage::

        config = MarketplaceConfig.from_env()
        if len(images) > config.listings.max_images:
            ...
    """

    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    listings: ListingConfig = field(default_factory=ListingConfig)

    @classmethod
    def default(cls) -> "MarketplaceConfig":
        """Create config with all defaults."""
        return cls()

    @classmethod
    def from_env(cls, prefix: str = "BOOKXCHANGE_") -> "MarketplaceConfig":
        """Create config from environment variables.

        Example: BOOKXCHANGE_MAX_IMAGE_BYTES=10485760
        """
        listing_overrides = {}
        max_images = os.getenv(f"{prefix}MAX_IMAGES")
        if max_images:
            listing_overrides["max_images"] = int(max_images)
        max_bytes = os.getenv(f"{prefix}MAX_IMAGE_BYTES")
        if max_bytes:
            listing_overrides["max_image_bytes"] = int(max_bytes)

        pagination_overrides = {}
        default_limit = os.getenv(f"{prefix}DEFAULT_PAGE_LIMIT")
        if default_limit:
            pagination_overrides["default_limit"] = int(default_limit)

        return cls(
            pagination=PaginationConfig(**pagination_overrides),
            listings=ListingConfig(**listing_overrides),
        )
