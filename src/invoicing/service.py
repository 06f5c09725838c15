import json
from typing import Any, Mapping

from src.invoicing.config import ProviderConfig
from src.invoicing.errors import PayloadDecodeError, ResponseEncodeError
from src.invoicing.provider import new_ezpay_invoice_provider

def create_invoice(payload: Mapping[str, Any], config: ProviderConfig) -> bytes:
    """
    Core business logic:
    - Takes the decoded request payload and the provider config
    - Validates / normalizes the payload into ezPay's canonical form
    - Encrypts it and calls the ezPay API
    - Returns the raw provider response body

    This function does NOT know anything about HTTP, status codes,
    request headers, or frameworks.
    """
    if payload is None:
        raise PayloadDecodeError("Payload is empty.")

    provider = new_ezpay_invoice_provider(config, payload)

    # 1) Normalize; raises ValidationError before anything is sent
    provider.validate()

    # 2) Encrypt + send
    return provider.create()

def decode_provider_response(body: bytes) -> Any:
    """
    Turn the raw provider body into something JSON-serializable.

    ezPay answers with JSON; anything else is passed on as text.
    """
    try:
        return json.loads(body)
    except ValueError:
        pass

    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ResponseEncodeError(f"provider response is not valid UTF-8: {e}") from e
