"""Payment provider integration (Stripe)."""

from app.infrastructure.external.payments.stripe_gateway import (
    StripePaymentGateway,
    configure_stripe,
)

__all__ = ["StripePaymentGateway", "configure_stripe"]
