# tests/test_service.py

import pytest

from src.invoicing import ezpay_client as ec
from src.invoicing import service
from src.invoicing.errors import (
    PayloadDecodeError,
    ProviderStatusError,
    ResponseEncodeError,
    ValidationError,
)
from test_ezpay_client import PAYLOAD, FakePostResponse

def test_create_invoice_happy_path(monkeypatch, provider_config):
    """
    Goal of this test:
    - We pass a raw payload to create_invoice().
    - It should validate, encrypt and POST it to ezPay (mocked).
    - The raw ezPay body comes back untouched.
    """
    sent = []

    def fake_post(url, headers, data, timeout):
        sent.append(data)
        return FakePostResponse(200, b'{"Status":"SUCCESS","Message":"ok"}')

    monkeypatch.setattr(ec.requests, "post", fake_post, raising=True)

    result = service.create_invoice(dict(PAYLOAD), provider_config)

    assert result == b'{"Status":"SUCCESS","Message":"ok"}'
    assert len(sent) == 1
    assert set(sent[0]) == {"MerchantID_", "PostData_"}

@pytest.mark.parametrize(
    "payload, message",
    [
        ({"print_flag": "1"}, "invalid amount"),
        ({"amount": 100}, "invalid print_flag"),
        ({"amount": 100, "print_flag": "1", "carrier_type": "2"}, "empty buyer_email"),
    ],
)
def test_validation_failure_sends_nothing(monkeypatch, provider_config, payload, message):
    def fake_post(*args, **kwargs):
        raise AssertionError("nothing may be sent for an invalid payload")

    monkeypatch.setattr(ec.requests, "post", fake_post, raising=True)

    with pytest.raises(ValidationError, match=message):
        service.create_invoice(payload, provider_config)

def test_provider_error_is_propagated(monkeypatch, provider_config):
    monkeypatch.setattr(
        ec.requests, "post",
        lambda url, headers, data, timeout: FakePostResponse(502, b"error"),
        raising=True,
    )

    with pytest.raises(ProviderStatusError) as excinfo:
        service.create_invoice(dict(PAYLOAD), provider_config)

    assert excinfo.value.body == b"error"

def test_create_invoice_none_payload_raises(provider_config):
    with pytest.raises(PayloadDecodeError):
        service.create_invoice(None, provider_config)

def test_decode_provider_response_json():
    assert service.decode_provider_response(b'{"Status":"SUCCESS"}') == {"Status": "SUCCESS"}

def test_decode_provider_response_text():
    assert service.decode_provider_response("失敗".encode("utf-8")) == "失敗"

def test_decode_provider_response_binary():
    with pytest.raises(ResponseEncodeError):
        service.decode_provider_response(b"\xff\xfe\x00garbage")
