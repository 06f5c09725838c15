# src/invoicing/ezpay_client.py

import logging
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

import requests

from src.invoicing import crypto, validator
from src.invoicing.config import ProviderConfig
from src.invoicing.errors import ProviderStatusError, TransportError
from src.invoicing.payload import RequestPayload
from src.invoicing.provider import Provider

logger = logging.getLogger(__name__)


def encode_form(fields: Mapping[str, Any]) -> str:
    """URL-encode a field map; keys are sorted so the output is stable."""
    return urlencode(sorted((k, str(v)) for k, v in fields.items()))


class InvoiceClient(Provider):
    """
    Creates invoices through the ezPay e-invoicing API.

    The canonical request is form-encoded, AES-CBC encrypted with the
    merchant's key/IV and posted as hex in PostData_ next to MerchantID_.
    """

    def __init__(self, config: ProviderConfig, payload: Mapping[str, Any]):
        self.config = config
        self.payload = payload
        self.canonical: Optional[validator.CanonicalInvoiceRequest] = None

    def validate(self) -> validator.CanonicalInvoiceRequest:
        # payload already holds the canonical form after the first call
        if self.canonical is not None:
            return self.canonical

        request = RequestPayload.from_mapping(self.payload)
        self.canonical = validator.validate(request, self.config.api_version)
        self.payload = self.canonical
        return self.canonical

    def post_data(self) -> str:
        """Hex-encoded ciphertext of the canonical request."""
        if self.canonical is None:
            self.validate()

        plaintext = encode_form(self.canonical).encode("utf-8")
        ciphertext = crypto.encrypt(
            plaintext,
            self.config.key.encode("utf-8"),
            self.config.iv.encode("utf-8"),
        )
        return ciphertext.hex()

    def create(self) -> bytes:
        form = {
            "MerchantID_": self.config.merchant_id,
            "PostData_": self.post_data(),
        }
        headers = {"Content-Type": "application/x-www-form-urlencoded"}

        logger.info(
            "Sending invoice %s to ezPay...", self.canonical.get("MerchantOrderNo")
        )

        try:
            response = requests.post(
                self.config.url,
                headers=headers,
                data=form,
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            logger.error("Requesting ezPay API failed: %s", e)
            raise TransportError(f"requesting ezPay API error: {e}") from e

        body = response.content

        if response.status_code != 200:
            logger.error(
                "ezPay returned %s: %s",
                response.status_code,
                body[:200],  # avoid logging a huge body
            )
            raise ProviderStatusError(response.status_code, body)

        logger.info("ezPay accepted invoice %s", self.canonical.get("MerchantOrderNo"))
        return body
