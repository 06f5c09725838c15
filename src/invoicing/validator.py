# src/invoicing/validator.py

import logging
import math
import re
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Union

from src.invoicing.errors import ValidationError
from src.invoicing.payload import Number, RequestPayload

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "1.4"
DEFAULT_COMMENT_LENGTH = 71    # unicode code points
DEFAULT_TAX_RATE = 5           # percent

LOVE_CODE_PATTERN = re.compile(r"[0-9]{3,7}")
CARRIER_NUM_PATTERN = re.compile(r"/[A-Z0-9+\-.]{7}")

CanonicalInvoiceRequest = Dict[str, Union[str, int, float]]


# ---- Per-field defaults ----

def respond_type(p: RequestPayload) -> str:
    return p.response_type or "JSON"


def merchant_order_no(p: RequestPayload, now: datetime) -> str:
    return p.merchant_order_no or now.strftime("%Y%m%d")


def status(p: RequestPayload) -> str:
    return p.status or "1"


def tax_type(p: RequestPayload) -> str:
    return p.tax_type or "1"


def category(p: RequestPayload) -> str:
    return p.category or "B2C"


def api_version(configured: str) -> str:
    return configured or DEFAULT_API_VERSION


def total_amount(p: RequestPayload) -> Number:
    if p.amount is None:
        raise ValidationError("invalid amount")
    return p.amount


def print_flag(p: RequestPayload) -> str:
    if p.print_flag is None:
        raise ValidationError("invalid print_flag")
    return p.print_flag


# ---- Helpers ----

def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def truncate(text: str, length: int = DEFAULT_COMMENT_LENGTH) -> str:
    return text[:length]


def _join(values: Iterable) -> str:
    return "|".join(str(v) for v in values)


def _format_number(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ---- Rules ----

def apply_tax(result: CanonicalInvoiceRequest) -> None:
    """
    Derive TaxRate, TaxAmt and Amt from TaxType and TotalAmt.

    TaxType "9" is handled like "1" for now; it has no rules of its own yet.
    """
    total = result["TotalAmt"]

    if result["TaxType"] in ("2", "3"):
        result["TaxRate"] = 0
        result["TaxAmt"] = 0
        result["Amt"] = total
        if result["TaxType"] == "2":
            result["CustomsClearance"] = "1"
        return

    # "1", "9" and anything unrecognized
    result["TaxRate"] = DEFAULT_TAX_RATE
    result["TaxAmt"] = round_half_away(total * (DEFAULT_TAX_RATE / 100))
    result["Amt"] = total - result["TaxAmt"]


def apply_b2b(result: CanonicalInvoiceRequest, p: RequestPayload, prices: List[float]) -> List[Number]:
    result["PrintFlag"] = "Y"
    result["BuyerUBN"] = p.buyer_ubn or "-"
    result["BuyerAddress"] = p.buyer_address or "-"
    result.pop("CarrierType", None)

    divisor = 1 + result["TaxRate"] / 100
    return [round_half_away(price / divisor) for price in prices]


def apply_b2c(result: CanonicalInvoiceRequest, prices: List[float]) -> List[Number]:
    love_code = result["LoveCode"]

    if love_code:
        if LOVE_CODE_PATTERN.fullmatch(love_code):
            # donation wins over any carrier
            result["CarrierType"] = ""
        else:
            logger.warning("Ignoring malformed love code %r", love_code)
            result.pop("CarrierType", None)
            result["PrintFlag"] = "Y"
    else:
        carrier_type = result["CarrierType"]
        carrier_num = result["CarrierNum"]

        if carrier_type in ("0", "1"):
            if CARRIER_NUM_PATTERN.fullmatch(carrier_num):
                result["CarrierNum"] = carrier_num.strip()
            else:
                logger.warning("Incorrect carrier num %r, falling back to print", carrier_num)
                result.pop("CarrierType", None)
                result["PrintFlag"] = "Y"
                result["Comment"] = f"Incorrect carrier num: {carrier_num}"
        elif carrier_type == "2":
            if not result["BuyerEmail"]:
                raise ValidationError("empty buyer_email when carrier_type = 2")
            result["CarrierNum"] = result["BuyerEmail"]
        else:
            result.pop("CarrierType", None)
            result["PrintFlag"] = "Y"

    return [round_half_away(price) for price in prices]


def validate(
    payload: RequestPayload,
    configured_version: str = "",
    now: Optional[datetime] = None,
) -> CanonicalInvoiceRequest:
    """
    Turn a RequestPayload into the canonical field map ezPay expects.

    Missing optional fields get their defaults, tax fields are derived,
    item arrays are collapsed into "|"-joined strings. Raises
    ValidationError when amount, print_flag, or (for carrier type 2)
    buyer_email is missing.
    """
    now = now or datetime.now()

    result: CanonicalInvoiceRequest = {
        "RespondType": respond_type(payload),
        "TimeStamp": int(now.timestamp()),
        "MerchantOrderNo": merchant_order_no(payload, now),
        "Status": status(payload),
        "TaxType": tax_type(payload),
        "Category": category(payload),
        "LoveCode": payload.love_code or "",
        "CarrierType": payload.carrier_type or "",
        "CarrierNum": payload.carrier_num or "",
        "BuyerName": payload.buyer_name or "",
        "BuyerEmail": payload.buyer_email or "",
        "TotalAmt": total_amount(payload),
        "PrintFlag": print_flag(payload),
        "Version": api_version(configured_version),
    }
    if payload.comment is not None:
        result["Comment"] = payload.comment

    apply_tax(result)

    prices: List[Number] = list(payload.item_price)
    if result["Category"] == "B2B":
        prices = apply_b2b(result, payload, payload.item_price)
    elif result["Category"] == "B2C":
        prices = apply_b2c(result, payload.item_price)

    counts = payload.item_count
    if len(counts) == len(prices):
        result["ItemAmt"] = _join(
            _format_number(count * price) for count, price in zip(counts, prices)
        )
    else:
        logger.info(
            "item_count (%d) and item_price (%d) differ in length, omitting ItemAmt",
            len(counts),
            len(prices),
        )

    result["ItemName"] = _join(payload.item_name)
    result["ItemUnit"] = _join(payload.item_unit)
    result["ItemCount"] = _join(counts)
    result["ItemPrice"] = _join(_format_number(price) for price in prices)

    if "Comment" in result:
        result["Comment"] = truncate(result["Comment"])

    return result
