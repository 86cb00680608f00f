"""Alert settings toggles (one document per user)."""

ALERT_SETTINGS_COLLECTION = "alertSettings"

# Toggle names exactly as stored on the document, grouped by level/channel/severity/type.
ALERT_SETTING_FIELDS: tuple[str, ...] = (
    "Level Account",
    "Level Ads",
    "Level Keyword",
    "Send Email Alerts",
    "Send SMS Alerts",
    "Send Weekly Summaries",
    "Severity Critical",
    "Severity Low",
    "Severity Medium",
    "Type Ad Performance",
    "Type Brand Checker",
    "Type Budget",
    "Type KPI Trends",
    "Type Keyword Performance",
    "Type Landing Page",
    "Type Optimization Score",
    "Type Policy",
    "Type Serving Ads",
)

# Defaults for a newly registered user: everything on except SMS.
DEFAULT_ALERT_SETTINGS: dict[str, bool] = {
    field: field != "Send SMS Alerts" for field in ALERT_SETTING_FIELDS
}
