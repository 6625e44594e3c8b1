import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    REDIS_URL = data.get("REDIS_URL", "redis://localhost:6379/0")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    API_RELOAD = bool(data.get("API_RELOAD", False))
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    ENABLE_SENTRY = data.get("ENABLE_SENTRY", 0)
    DSN_SENTRY = data.get("DSN_SENTRY", "")
    SENTRY_ENVIRONMENT = data.get("SENTRY_ENVIRONMENT", "dev")
    CACHE_BACKEND = data.get("CACHE_BACKEND", "logging")  # redis | logging
    CACHE_KEY_PREFIX = data.get("CACHE_KEY_PREFIX", "")

    # Transactions
    TRANSACTION_TIMEOUT_SECONDS = data.get("TRANSACTION_TIMEOUT_SECONDS", 30)

    # Customer / driver / address / cylinder category / product lookups
    REFERENCE_SERVICE_URL = data.get("REFERENCE_SERVICE_URL", None)
    REFERENCE_SERVICE_TIMEOUT = data.get("REFERENCE_SERVICE_TIMEOUT", 5.0)

    # Invoices
    INVOICE_NUMBER_PREFIX = data.get("INVOICE_NUMBER_PREFIX", "INV")
    DEFAULT_CURRENCY = data.get("DEFAULT_CURRENCY", "USD")
    DEFAULT_PAYMENT_TERMS = data.get("DEFAULT_PAYMENT_TERMS", "Net 30")
    COMPANY_NAME = data.get("COMPANY_NAME", "Gas Delivery Co.")
    COMPANY_ADDRESS = data.get("COMPANY_ADDRESS", "1 Depot Road, Industrial Park")

    # Overdue invoice sweep
    OVERDUE_SCAN_ENABLED = bool(data.get("OVERDUE_SCAN_ENABLED", True))
    OVERDUE_SCAN_INTERVAL_SECONDS = data.get("OVERDUE_SCAN_INTERVAL_SECONDS", 3600)  # Hourly
