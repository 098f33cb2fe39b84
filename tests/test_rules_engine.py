"""Test listing rules."""
from patterns.rules_engine import (
    check_condition_range,
    check_image_count,
    check_image_sizes,
    check_price_requirement,
    check_wishlist_requirement,
    evaluate_rules,
)


def test_sell_needs_price():
    assert not check_price_requirement({"type": "sell", "price": None}).passed
    assert check_price_requirement({"type": "sell", "price": 0}).passed
    assert check_price_requirement({"type": "exchange", "price": None}).passed


def test_exchange_needs_wishlist():
    assert not check_wishlist_requirement({"type": "exchange", "exchange_wishlist": "  "}).passed
    assert check_wishlist_requirement({"type": "exchange", "exchange_wishlist": "Calculus"}).passed
    assert check_wishlist_requirement({"type": "sell"}).passed


def test_both_needs_price_and_wishlist():
    listing = {"type": "both", "price": None, "exchange_wishlist": None}
    result = evaluate_rules(
        check_price_requirement(listing),
        check_wishlist_requirement(listing),
    )
    assert not result.all_passed
    assert result.messages == [
        "Price is required for both type",
        "Exchange wishlist is required for both type",
    ]


def test_condition_range():
    assert check_condition_range({"condition": 1}).passed
    assert not check_condition_range({"condition": 6}).passed
    assert not check_condition_range({"condition": None}).passed


def test_image_count_bounds():
    assert not check_image_count(0).passed
    assert check_image_count(5).passed
    result = check_image_count(6)
    assert not result.passed
    assert result.message == "Maximum 5 images allowed"


def test_image_size_cap():
    limit = 5 * 1024 * 1024
    assert check_image_sizes([limit], limit).passed
    result = check_image_sizes([10, limit + 1], limit)
    assert not result.passed
    assert result.details["oversized_indexes"] == [1]
    assert result.message == "Image size must not exceed 5MB"
