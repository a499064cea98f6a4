import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./outreach.db")
    API_PREFIX = data.get("API_PREFIX", "")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    ENABLE_SENTRY = data.get("ENABLE_SENTRY", 0)
    DSN_SENTRY = data.get("DSN_SENTRY", "")
    SENTRY_ENVIRONMENT = data.get("SENTRY_ENVIRONMENT", "dev")

    # Webhook ingestion
    WEBHOOK_SECRET = data.get("WEBHOOK_SECRET", "")  # Empty disables signature checks
    WEBHOOK_SIGNATURE_MODE = data.get("WEBHOOK_SIGNATURE_MODE", "permissive")  # permissive | enforce

    # Actor platform (lead search runs)
    APIFY_API_TOKEN = data.get("APIFY_API_TOKEN", "")
    APIFY_BASE_URL = data.get("APIFY_BASE_URL", "https://api.apify.com/v2")
    APIFY_LEAD_SEARCH_ACTOR = data.get("APIFY_LEAD_SEARCH_ACTOR", "code_crafter~leads-finder")

    # Contact enrichment (phone reveal)
    APOLLO_API_KEY = data.get("APOLLO_API_KEY", "")
    APOLLO_BASE_URL = data.get("APOLLO_BASE_URL", "https://api.apollo.io/v1")

    # Metered actions
    EXTERNAL_CALL_TIMEOUT_SECONDS = float(data.get("EXTERNAL_CALL_TIMEOUT_SECONDS", 30))
    DEFAULT_LEAD_FETCH_COUNT = int(data.get("DEFAULT_LEAD_FETCH_COUNT", 10))

    # Ledger Reconciliation
    RECONCILIATION_ENABLED = bool(data.get("RECONCILIATION_ENABLED", True))
    RECONCILIATION_INTERVAL_SECONDS = data.get("RECONCILIATION_INTERVAL_SECONDS", 86400)  # Daily

    # Unmatched event replay
    EVENT_REPLAY_ENABLED = bool(data.get("EVENT_REPLAY_ENABLED", True))
    EVENT_REPLAY_INTERVAL_SECONDS = data.get("EVENT_REPLAY_INTERVAL_SECONDS", 300)
    EVENT_REPLAY_BATCH_SIZE = data.get("EVENT_REPLAY_BATCH_SIZE", 100)
