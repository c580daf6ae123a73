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
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./seat_billing.db")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    API_RELOAD = data.get("API_RELOAD", False)
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    MEMBER_TOKEN_TTL = int(data.get("MEMBER_TOKEN_TTL", 60 * 60 * 24 * 30))
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

    # Object storage for usage records
    BLOB_STORAGE_ROOT = data.get("BLOB_STORAGE_ROOT", os.path.join(ROOT_PATH, "storage"))

    # Public ledger (Ethereum-compatible JSON-RPC)
    LEDGER_RPC_URL = data.get("LEDGER_RPC_URL", "http://localhost:8545")
    LEDGER_ACCOUNT = data.get("LEDGER_ACCOUNT", "")
    LEDGER_CHAIN_ID = data.get("LEDGER_CHAIN_ID", "80002")
    LEDGER_GAS_LIMIT = int(data.get("LEDGER_GAS_LIMIT", 100000))
    LEDGER_CONFIRMATION_TIMEOUT = float(data.get("LEDGER_CONFIRMATION_TIMEOUT", 120))
    LEDGER_POLL_INTERVAL = float(data.get("LEDGER_POLL_INTERVAL", 2))
    LEDGER_INLINE_PAYLOAD_LIMIT = int(data.get("LEDGER_INLINE_PAYLOAD_LIMIT", 0))

    # Payment ledger (Stripe)
    STRIPE_SECRET_KEY = data.get("STRIPE_SECRET_KEY", "")
    STRIPE_WEBHOOK_SECRET = data.get("STRIPE_WEBHOOK_SECRET", "")
    PAYMENT_CURRENCY = data.get("PAYMENT_CURRENCY", "jpy")
    PAYMENT_MAX_ATTEMPTS = int(data.get("PAYMENT_MAX_ATTEMPTS", 3))
    PAYMENT_RETRY_BASE_DELAY = float(data.get("PAYMENT_RETRY_BASE_DELAY", 1.0))

    # Optimistic transactions
    TRANSACTION_MAX_ATTEMPTS = int(data.get("TRANSACTION_MAX_ATTEMPTS", 3))
    TRANSACTION_RETRY_BASE_DELAY = float(data.get("TRANSACTION_RETRY_BASE_DELAY", 0.05))

    # Billing
    BILLING_TIMEZONE = data.get("BILLING_TIMEZONE", "Asia/Tokyo")
    INVOICE_CONCURRENCY = int(data.get("INVOICE_CONCURRENCY", 5))

    # Worker
    OUTBOX_BATCH_SIZE = int(data.get("OUTBOX_BATCH_SIZE", 100))
    OUTBOX_MAX_ATTEMPTS = int(data.get("OUTBOX_MAX_ATTEMPTS", 5))
    WORKER_POLL_SECONDS = float(data.get("WORKER_POLL_SECONDS", 5))
