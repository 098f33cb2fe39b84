"""Listing rules as pure functions.

Each rule takes the listing (or the image facts) and returns a RuleResult;
nothing touches the store or the blob backend. The catalog runs every rule
and reports all failures at once, so a client sees "price missing" and
"too many images" in a single response.

Rules cover the type-dependent required fields (sell/both need a price,
exchange/both need a wishlist), the condition range, and the image count
and size bounds.
"""

from dataclasses import dataclass, field
from typing import Any, Sequence

PRICED_TYPES = frozenset({"sell", "both"})
EXCHANGE_TYPES = frozenset({"exchange", "both"})


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class RuleResult:
    """Outcome of a single rule evaluation."""

    passed: bool
    rule_name: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class RuleSetResult:
    """Aggregate outcome of multiple rules."""

    all_passed: bool
    results: list[RuleResult]
    failed: list[RuleResult] = field(default_factory=list)

    def __post_init__(self):
        self.failed = [r for r in self.results if not r.passed]
        self.all_passed = len(self.failed) == 0

    @property
    def messages(self) -> list[str]:
        return [r.message for r in self.failed]


# ---------------------------------------------------------------------------
# Listing rules
# ---------------------------------------------------------------------------

def check_price_requirement(listing: dict) -> RuleResult:
    """sell/both listings must carry a price. Zero is a valid price."""
    listing_type = listing.get("type")
    required = listing_type in PRICED_TYPES
    price = listing.get("price")
    passed = not required or price is not None

    return RuleResult(
        passed=passed,
        rule_name="price_requirement",
        message="Price present" if passed else f"Price is required for {listing_type} type",
        details={"type": listing_type, "price": price},
    )


def check_wishlist_requirement(listing: dict) -> RuleResult:
    """exchange/both listings must say what the owner wants in exchange."""
    listing_type = listing.get("type")
    required = listing_type in EXCHANGE_TYPES
    wishlist = listing.get("exchange_wishlist")
    passed = not required or bool(wishlist and wishlist.strip())

    return RuleResult(
        passed=passed,
        rule_name="wishlist_requirement",
        message=(
            "Exchange wishlist present"
            if passed
            else f"Exchange wishlist is required for {listing_type} type"
        ),
        details={"type": listing_type},
    )


def check_condition_range(listing: dict, low: int = 1, high: int = 5) -> RuleResult:
    condition = listing.get("condition")
    passed = isinstance(condition, int) and low <= condition <= high

    return RuleResult(
        passed=passed,
        rule_name="condition_range",
        message="Condition in range" if passed else f"Condition must be between {low} and {high}",
        details={"condition": condition},
    )


def check_image_count(count: int, min_images: int = 1, max_images: int = 5) -> RuleResult:
    """Listings carry between min_images and max_images images."""
    passed = min_images <= count <= max_images

    if count < min_images:
        message = f"At least {min_images} image(s) required"
    elif count > max_images:
        message = f"Maximum {max_images} images allowed"
    else:
        message = f"{count} image(s)"

    return RuleResult(
        passed=passed,
        rule_name="image_count",
        message=message,
        details={"count": count, "min": min_images, "max": max_images},
    )


def check_image_sizes(sizes: Sequence[int], max_bytes: int) -> RuleResult:
    """Every image must fit under the size cap."""
    oversized = [i for i, size in enumerate(sizes) if size > max_bytes]
    passed = not oversized

    return RuleResult(
        passed=passed,
        rule_name="image_size",
        message=(
            "Image sizes within limit"
            if passed
            else f"Image size must not exceed {max_bytes // (1024 * 1024)}MB"
        ),
        details={"oversized_indexes": oversized, "max_bytes": max_bytes},
    )


# ---------------------------------------------------------------------------
# Rule composition
# ---------------------------------------------------------------------------

def evaluate_rules(*rules: RuleResult) -> RuleSetResult:
    """Compose multiple rule results into a single aggregate.

    Example::

        result = evaluate_rules(
            check_price_requirement(listing),
            check_wishlist_requirement(listing),
        )
        if not result.all_passed:
            raise ValidationError(result.messages[0], result.messages)
    """
    return RuleSetResult(
        all_passed=all(r.passed for r in rules),
        results=list(rules),
    )
