import logging
import json

import azure.functions as func

from src.invoicing.config import load_config
from src.invoicing.errors import (
    ConfigLoadError,
    InvoiceError,
    PayloadDecodeError,
    ResponseEncodeError,
)
from src.invoicing.service import create_invoice, decode_provider_response

CORS_PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Max-Age": "3600",
}

def main(req: func.HttpRequest) -> func.HttpResponse:
    """
    Azure Function HTTP trigger:
    - Answers CORS preflight (OPTIONS)
    - Accepts an invoice request as JSON via POST
    - Validates, encrypts and forwards it to ezPay
    - Returns ezPay's response as JSON
    """
    logging.info("Create Invoice function triggered.")

    # 1. Method handling
    method = req.method.upper()
    if method == "OPTIONS":
        return func.HttpResponse(status_code=204, headers=CORS_PREFLIGHT_HEADERS)

    if method != "POST":
        logging.warning(f"Method {method} is forbidden.")
        return _error_response(f"method {method} is forbidden", status_code=403)

    try:
        # 2. Decode the JSON body
        try:
            payload = _decode_payload(req)
        except PayloadDecodeError as e:
            logging.error(f"Rejecting request: {e}")
            return _error_response(str(e), status_code=400)

        # 3. Per-invocation provider config
        try:
            config = load_config()
        except ConfigLoadError as e:
            logging.error(f"load config encounter error: {e}")
            return _error_response("Failed to load provider configuration.", status_code=500)

        # 4. Call core service logic
        logging.info("Creating invoice via ezPay.")
        try:
            resp = create_invoice(payload, config)
        except InvoiceError as e:
            logging.error(f"invoice creation error: {e}")
            return _error_response(f"invoice creation error: {e}", status_code=400)

        # 5. Success response
        try:
            body = json.dumps(decode_provider_response(resp))
        except (ResponseEncodeError, TypeError, ValueError) as e:
            logging.error(f"json encode resp({resp[:200]!r}) error: {e}")
            return _error_response("Failed to encode provider response.", status_code=500)

        logging.info("Invoice created successfully.")
        return func.HttpResponse(
            body,
            status_code=200,
            mimetype="application/json",
            headers={"Access-Control-Allow-Origin": "*"},
        )

    except Exception as e:
        # Catch-all safeguard
        logging.exception(f"Unexpected error in create_invoice: {e}")
        return _error_response("Unexpected server error.", status_code=500)

def _decode_payload(req: func.HttpRequest) -> dict:
    content_type = req.headers.get("Content-Type", "")
    media_type = content_type.split(";")[0].strip().lower()
    if media_type != "application/json":
        raise PayloadDecodeError(f"content type({content_type}) is not acceptable")

    try:
        payload = json.loads(req.get_body())
    except ValueError as e:
        raise PayloadDecodeError(f"decoding payload error: {e}") from e

    if not isinstance(payload, dict):
        raise PayloadDecodeError("decoding payload error: expected a JSON object")

    return payload

def _error_response(message: str, status_code: int) -> func.HttpResponse:
    """
    Small helper to return JSON error responses consistently.
    """
    return func.HttpResponse(
        json.dumps({"error": message}),
        status_code=status_code,
        mimetype="application/json",
        headers={"Access-Control-Allow-Origin": "*"},
    )
