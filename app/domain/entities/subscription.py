"""Subscription pricing rule.

The monthly price is a deterministic function of the number of connected
ads accounts: the first account has its own price, every further account
adds the additional-account price.
"""

from decimal import Decimal

from app.domain.exceptions import ValidationException


def calculate_subscription_price(
    connected_count: int,
    first_account_price: Decimal | int,
    additional_account_price: Decimal | int,
) -> Decimal:
    """Return the monthly price for connected_count ads accounts.

    0 accounts cost nothing; 1 costs the first-account price; n > 1 costs
    first + (n - 1) * additional. E.g. first=59, additional=19, n=3 -> 97.

    Raises:
        ValidationException: If connected_count is negative.
    """
    if connected_count < 0:
        raise ValidationException(
            "Connected ads account count cannot be negative", field="connected_count"
        )
    if connected_count == 0:
        return Decimal(0)
    first = Decimal(first_account_price)
    additional = Decimal(additional_account_price)
    return first + additional * (connected_count - 1)
