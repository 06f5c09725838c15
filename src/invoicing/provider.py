# src/invoicing/provider.py

from abc import ABC, abstractmethod
from typing import Any, Mapping

from src.invoicing.config import ProviderConfig


class Provider(ABC):
    """Interface every invoicing provider has to implement."""

    @abstractmethod
    def validate(self) -> Mapping[str, Any]:
        """Normalize the request held by the provider; return the canonical form."""
        ...

    @abstractmethod
    def create(self) -> bytes:
        """Submit the invoice and return the raw provider response body."""
        ...


def new_ezpay_invoice_provider(config: ProviderConfig, data: Mapping[str, Any]) -> Provider:
    # imported here so ezpay_client can subclass Provider
    from src.invoicing.ezpay_client import InvoiceClient

    return InvoiceClient(config=config, payload=data)
