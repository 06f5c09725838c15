# src/invoicing/config.py

import io
import logging
import math
import os
from dataclasses import dataclass

from dotenv import dotenv_values, load_dotenv

from src.invoicing.errors import ConfigLoadError
from src.invoicing import secrets

# Load environment variables from .env file
load_dotenv()   # <-- MM_PROJECT_ID, MM_CONFIG_SECRET, ...
logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0

REQUIRED_ENV_VARS = [
    "MM_PROJECT_ID",
    "MM_CONFIG_SECRET",
]

# normalized env-file key -> ProviderConfig attribute
_FIELD_ALIASES = {
    "merchantid": "merchant_id",
    "url": "url",
    "apiversion": "api_version",
    "key": "key",
    "iv": "iv",
    "timeout": "timeout",
}


@dataclass(frozen=True)
class ProviderConfig:
    merchant_id: str
    url: str
    key: str
    iv: str
    api_version: str = ""
    timeout: float = DEFAULT_TIMEOUT_SECONDS


def _normalize_key(name: str) -> str:
    return name.replace("_", "").replace("-", "").lower()


def parse_timeout(raw: str, source: str) -> float:
    """Seconds for requests; must be a positive, finite number."""
    try:
        timeout = float(raw)
    except ValueError as e:
        raise ConfigLoadError(f"invalid {source}: {raw!r}") from e
    if not math.isfinite(timeout) or timeout <= 0:
        raise ConfigLoadError(f"invalid {source}: {raw!r}")
    return timeout


def default_timeout() -> float:
    raw = os.getenv("EZPAY_TIMEOUT_SECONDS")
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    return parse_timeout(raw, "EZPAY_TIMEOUT_SECONDS")


def decode_config(raw: bytes) -> ProviderConfig:
    """
    Parse env-file style bytes (KEY=value per line) into a ProviderConfig.

    Keys are matched case-insensitively with underscores ignored, so
    MERCHANTID, MERCHANT_ID and merchant_id all land on merchant_id.
    """
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ConfigLoadError("provider config is not valid UTF-8") from e

    values = {}
    for name, value in dotenv_values(stream=io.StringIO(text)).items():
        field = _FIELD_ALIASES.get(_normalize_key(name))
        if field is not None:
            values[field] = (value or "").strip()

    missing = [f for f in ("merchant_id", "url", "key", "iv") if not values.get(f)]
    if missing:
        raise ConfigLoadError(f"provider config missing: {', '.join(missing)}")

    timeout = values.pop("timeout", "")
    if timeout:
        values["timeout"] = parse_timeout(timeout, "timeout in provider config")
    else:
        values["timeout"] = default_timeout()

    return ProviderConfig(**values)


def load_config() -> ProviderConfig:
    """
    Fetch and decode the provider config for this invocation.

    MM_CONFIG_FILE wins when set (local development); otherwise the
    secret named by MM_PROJECT_ID / MM_CONFIG_SECRET / MM_CONFIG_SECRET_VERSION
    is read from Secret Manager.
    """
    local_file = os.getenv("MM_CONFIG_FILE")
    if local_file:
        logger.info("Loading provider config from local file.")
        raw = secrets.read_local(local_file)
    else:
        missing = [name for name in REQUIRED_ENV_VARS if not os.getenv(name)]
        if missing:
            raise ConfigLoadError(
                f"Missing environment variables: {', '.join(missing)}"
            )
        raw = secrets.get(
            os.getenv("MM_PROJECT_ID"),
            os.getenv("MM_CONFIG_SECRET"),
            os.getenv("MM_CONFIG_SECRET_VERSION") or "latest",
        )

    config = decode_config(raw)
    logger.info("Provider config loaded for merchant %s", config.merchant_id)
    return config
