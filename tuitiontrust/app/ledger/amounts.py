"""
Delivered-amount parsing.

Responsibility:
- Decide, once, whether a ledger delivered amount is native XRP (a drops
  scalar) or an issued currency (value/currency/issuer object).
- Turn either into a display-ready (value, currency code) pair.

Design notes:
- PURE: no network, no database, no global state.
- Values stay decimal strings end to end; floats never touch an amount.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from tuitiontrust.app.errors import UnparsableAmount


NATIVE_CURRENCY = "XRP"
DROPS_PER_XRP = Decimal(1_000_000)

# Non-standard currency codes are 20 bytes, hex encoded.
CURRENCY_HEX_LENGTH = 40

_DROPS_RE = re.compile(r"^\d+$")
_HEX_RE = re.compile(r"^[0-9A-Fa-f]+$")


@dataclass(frozen=True)
class NativeAmount:
    drops: str


@dataclass(frozen=True)
class IssuedAmount:
    value: str
    currency: str
    issuer: Optional[str] = None


DeliveredAmount = Union[NativeAmount, IssuedAmount]


@dataclass(frozen=True)
class ParsedAmount:
    value: str
    currency_code: str
    issuer: Optional[str] = None


def plain_decimal(value: Decimal) -> str:
    """
    Render a Decimal without exponent or trailing zeros ("10", "1.5", "0.000001").
    """
    if value == 0:
        return "0"
    return format(value.normalize(), "f")


def drops_to_xrp(drops: Union[str, int]) -> str:
    text = str(drops).strip()
    if not _DROPS_RE.match(text):
        raise UnparsableAmount(f"not a drops amount: {drops!r}")
    return plain_decimal(Decimal(text) / DROPS_PER_XRP)


def decode_currency_code(code: str) -> str:
    """
    Turn a 40-hex currency code into its mnemonic when it decodes cleanly.

    Trailing NUL padding is trimmed; anything empty or unprintable after
    decoding falls back to the raw hex. Short codes pass through.
    """
    if len(code) != CURRENCY_HEX_LENGTH or not _HEX_RE.match(code):
        return code
    try:
        decoded = bytes.fromhex(code).rstrip(b"\x00").decode("utf-8").strip()
    except (ValueError, UnicodeDecodeError):
        return code
    if not decoded or not decoded.isprintable():
        return code
    return decoded


def classify_delivered_amount(raw: Any) -> DeliveredAmount:
    if isinstance(raw, bool):
        raise UnparsableAmount(f"unrecognized delivered_amount: {raw!r}")
    if isinstance(raw, int):
        raw = str(raw)
    if isinstance(raw, str):
        if _DROPS_RE.match(raw.strip()):
            return NativeAmount(drops=raw.strip())
        raise UnparsableAmount(f"unrecognized delivered_amount: {raw!r}")
    if isinstance(raw, dict):
        value = raw.get("value")
        currency = raw.get("currency")
        if isinstance(value, str) and isinstance(currency, str) and currency:
            try:
                numeric = Decimal(value)
            except InvalidOperation as exc:
                raise UnparsableAmount(f"issued amount value is not numeric: {value!r}") from exc
            if not numeric.is_finite():
                raise UnparsableAmount(f"issued amount value is not finite: {value!r}")
            issuer = raw.get("issuer")
            return IssuedAmount(value=value, currency=currency, issuer=issuer if isinstance(issuer, str) else None)
    raise UnparsableAmount(f"unrecognized delivered_amount: {raw!r}")


def parse_delivered_amount(raw: Any) -> ParsedAmount:
    amount = classify_delivered_amount(raw)
    if isinstance(amount, NativeAmount):
        return ParsedAmount(value=drops_to_xrp(amount.drops), currency_code=NATIVE_CURRENCY)
    return ParsedAmount(
        value=amount.value,
        currency_code=decode_currency_code(amount.currency),
        issuer=amount.issuer,
    )


def delivered_amount_of(meta: Any) -> Any:
    if not isinstance(meta, dict):
        return None
    delivered = meta.get("delivered_amount")
    if delivered is None:
        delivered = meta.get("DeliveredAmount")
    return delivered
