"""Firestore collection names (schema-in-code).

Firestore has no DDL or migrations. Collections are created automatically
when you first write a document. Use these constants so collection names
stay consistent and act as the single source of truth for the "schema".

Example:
    from app.domain.collections import COLLECTION_ADS_ACCOUNTS

    accounts = await store.query(
        COLLECTION_ADS_ACCOUNTS,
        FieldFilter("User", "==", company_admin_ref),
        FieldFilter("Is Connected", "==", True),
    )
"""

from app.domain.entities.alert_settings import ALERT_SETTINGS_COLLECTION
from app.domain.entities.user import USERS_COLLECTION

# Company graph
COLLECTION_USERS = USERS_COLLECTION
COLLECTION_ADS_ACCOUNTS = "adsAccounts"
COLLECTION_ADS_ACCOUNT_VARIABLES = "adsAccountVariables"
COLLECTION_ALERTS = "alerts"
COLLECTION_ALERT_SETTINGS = ALERT_SETTINGS_COLLECTION
COLLECTION_INVITATIONS = "invitations"

# Dashboard / monitoring
COLLECTION_PAGE_TRACKERS = "pageTrackers"
COLLECTION_DASHBOARD_SUMMARIES = "dashboardSummaries"
COLLECTION_AUTH_TOKENS = "authTokens"

# Billing mirrors of Stripe state (keyed by "User" = company admin)
COLLECTION_STRIPE_COMPANIES = "stripeCompanies"
COLLECTION_SUBSCRIPTIONS = "subscriptions"
COLLECTION_PAYMENT_METHODS = "paymentMethods"
