import datetime as dt
import json
import logging
import os

import azure.functions as func

from src.invoicing import crypto
from src.invoicing.config import REQUIRED_ENV_VARS, load_config
from src.invoicing.errors import InvoiceError

def check_env_vars() -> dict:
    """
    Verify that the secret-store environment variables are present.

    MM_CONFIG_FILE replaces them during local development.
    """
    if os.getenv("MM_CONFIG_FILE"):
        return {"name": "environment", "status": "ok", "details": {"source": "file"}}

    missing = [name for name in REQUIRED_ENV_VARS if not os.getenv(name)]

    status = "ok" if not missing else "error"
    details: dict = {}
    if missing:
        details["missing"] = missing

    return {
        "name": "environment",
        "status": status,
        "details": details,
    }

def check_provider_config() -> dict:
    """
    Load the ezPay config and make sure its key/IV build an AES-CBC cipher.

    Does NOT call ezPay, so it's safe to run every few minutes.
    """
    try:
        config = load_config()
        crypto.new_cipher(config.key.encode("utf-8"), config.iv.encode("utf-8"))
    except InvoiceError as exc:
        logging.error("Provider config health check failed: %s", exc)
        return {
            "name": "provider_config",
            "status": "error",
            "details": {"error": str(exc)},
        }

    return {
        "name": "provider_config",
        "status": "ok",
        "details": {
            "merchant_id": config.merchant_id,
            "api_version": config.api_version or "default",
            "timeout_seconds": config.timeout,
        },
    }

def main(req: func.HttpRequest) -> func.HttpResponse:
    """
    HTTP GET /api/health

    Returns a JSON payload summarizing the readiness of the invoice function.
    """
    logging.info("Health check request received.")

    checks = [
        check_env_vars(),
        check_provider_config(),
    ]

    overall_ok = all(c["status"] == "ok" for c in checks)
    overall_status = "ok" if overall_ok else "degraded"

    body = {
        "status": overall_status,
        "service": "create-invoice-api",
        "timestamp_utc": dt.datetime.now(dt.timezone.utc).isoformat(),
        "version": os.getenv("APP_VERSION", "v0.1.0"),
        "checks": checks,
    }

    return func.HttpResponse(
        body=json.dumps(body, indent=2),
        status_code=200 if overall_ok else 503,
        mimetype="application/json",
    )
