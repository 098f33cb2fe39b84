"""Book exchange configuration.

Loads MarketplaceConfig from the environment once at import, the way the
vertical consumes the domain config pattern.
"""

from patterns.domain_config import MarketplaceConfig

# Process-wide configuration instance
config = MarketplaceConfig.from_env()
