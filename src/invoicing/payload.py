# src/invoicing/payload.py

import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Union

from src.invoicing.errors import ValidationError

Number = Union[int, float]

TEXT_FIELDS = (
    "response_type",
    "merchant_order_no",
    "status",
    "tax_type",
    "category",
    "love_code",
    "carrier_type",
    "carrier_num",
    "buyer_name",
    "buyer_email",
    "print_flag",
    "buyer_ubn",
    "buyer_address",
    "comment",
)


@dataclass
class RequestPayload:
    """
    Typed view of an inbound invoice request.

    Every recognized key is converted exactly once here. Text fields are
    None when the caller left them out or sent an empty string, so the
    validator can apply its defaults without looking at raw types again.
    """

    response_type: Optional[str] = None
    merchant_order_no: Optional[str] = None
    status: Optional[str] = None
    tax_type: Optional[str] = None
    category: Optional[str] = None
    love_code: Optional[str] = None
    carrier_type: Optional[str] = None
    carrier_num: Optional[str] = None
    buyer_name: Optional[str] = None
    buyer_email: Optional[str] = None
    print_flag: Optional[str] = None
    buyer_ubn: Optional[str] = None
    buyer_address: Optional[str] = None
    comment: Optional[str] = None
    amount: Optional[Number] = None
    item_name: List[str] = field(default_factory=list)
    item_unit: List[str] = field(default_factory=list)
    item_count: List[int] = field(default_factory=list)
    item_price: List[float] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RequestPayload":
        values = {name: _as_text(data.get(name)) for name in TEXT_FIELDS}
        values["amount"] = _as_amount(data.get("amount"))
        values["item_name"] = [_as_text(v) or "" for v in _as_list(data, "item_name")]
        values["item_unit"] = [_as_text(v) or "" for v in _as_list(data, "item_unit")]
        values["item_count"] = [
            int(_as_number(v, "item_count")) for v in _as_list(data, "item_count")
        ]
        values["item_price"] = [
            float(_as_number(v, "item_price")) for v in _as_list(data, "item_price")
        ]
        return cls(**values)


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def _as_text(value: Any) -> Optional[str]:
    if _is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _as_number(value: Any, name: str) -> Number:
    number = None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            pass

    if number is None:
        raise ValidationError(f"invalid {name}")

    # json.loads accepts NaN and Infinity; huge ints overflow float
    try:
        finite = math.isfinite(number)
    except OverflowError:
        finite = False
    if not finite:
        raise ValidationError(f"invalid {name}")
    return number


def _as_amount(value: Any) -> Optional[Number]:
    if _is_blank(value):
        return None
    number = _as_number(value, "amount")
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def _as_list(data: Mapping[str, Any], name: str) -> list:
    value = data.get(name)
    if _is_blank(value):
        return []
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"invalid {name}")
    return list(value)
