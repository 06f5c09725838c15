# src/invoicing/errors.py

class InvoiceError(Exception):
    """Base class for everything that can go wrong while creating an invoice."""


class ConfigLoadError(InvoiceError):
    """Secret store unreachable or provider configuration malformed."""


class PayloadDecodeError(InvoiceError):
    """Request body could not be decoded into a field map."""


class ValidationError(InvoiceError, ValueError):
    """A business rule of the invoicing provider was violated."""


class PaddingError(InvoiceError, ValueError):
    pass


class CipherSetupError(InvoiceError):
    """Key or IV has a size the cipher does not accept."""


class TransportError(InvoiceError, RuntimeError):
    """The provider could not be reached."""


class ProviderStatusError(InvoiceError):
    """
    The provider answered with something other than HTTP 200.

    The raw response body is kept on the exception so callers can
    still inspect what the provider said.
    """

    def __init__(self, status_code: int, body: bytes = b""):
        super().__init__(f"httpCode:{status_code}")
        self.status_code = status_code
        self.body = body


class ResponseEncodeError(InvoiceError):
    """The provider response could not be serialized for the caller."""
