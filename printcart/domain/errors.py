# printcart/domain/errors.py


class PricingError(Exception):
    """Pricing could not be completed; the caller should report pricing as unavailable."""


class ConfigurationError(PricingError):
    """No price tier applies to the (store, scope, quantity) combination."""


class InvalidVendorPriceError(PricingError):
    """The vendor price response carried no usable cost field."""


class CartNotFoundError(ValueError):
    """The cart is missing or already closed."""


class EmptyCartError(ValueError):
    """The cart has no lines to turn into an order."""


class InsufficientPointsError(ValueError):
    """The loyalty wallet does not hold enough points for the redemption."""


class LoyaltyBalanceChangedError(RuntimeError):
    """The wallet balance changed between the read and the debit; retry."""
