import pytest

from printcart.services.loyalty import (
    earn_points_for_amount,
    normalize_redeem_points,
    points_to_cover,
    points_to_credit_cents,
    validate_redeem_points,
)


@pytest.mark.parametrize(
    "points, expected",
    [(0, 0), (99, 0), (100, 100), (250, 200), (-5, 0), (None, 0)],
)
def test_normalize_redeem_points(points, expected):
    assert normalize_redeem_points(points) == expected


def test_points_to_credit_cents():
    assert points_to_credit_cents(1250) == 1200
    assert points_to_credit_cents(50) == 0


@pytest.mark.parametrize(
    "amount_cents, expected",
    [(0, 0), (1, 100), (100, 100), (101, 200), (1600, 1600), (1650, 1700)],
)
def test_points_to_cover(amount_cents, expected):
    assert points_to_cover(amount_cents) == expected


@pytest.mark.parametrize(
    "amount_cents, currency, expected",
    [(2499, "USD", 250), (2449, "CAD", 245), (1000, "EUR", 0), (-5, "USD", 0)],
)
def test_earn_points_for_amount(amount_cents, currency, expected):
    assert earn_points_for_amount(amount_cents, currency) == expected


def test_validate_redeem_points():
    assert validate_redeem_points(300) == 300
    for bad in (99, 150, 0, True, 1.5):
        with pytest.raises(ValueError):
            validate_redeem_points(bad)
