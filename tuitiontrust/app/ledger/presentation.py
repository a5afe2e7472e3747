"""
Presentation shaping for donation and distribution views.

Everything here is a pure transform of already-reconciled records into the
JSON the UI renders: explorer links, shortened addresses, readable times,
newest-first ordering.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, TypeVar

from tuitiontrust.app.ledger.timestamps import parse_iso_timestamp


T = TypeVar("T")

UNKNOWN = "N/A"
DISPLAY_LIMIT = 20
DEFAULT_TIME_FORMAT = "%c"


@dataclass(frozen=True)
class OutgoingPayment:
    hash: str
    timestamp: str
    amount: str
    currency_code: str
    destination_address: str
    recipient_name: Optional[str]
    explorer_url: str


def explorer_url(base_url: str, tx_hash: Optional[str]) -> str:
    base = base_url if base_url.endswith("/") else f"{base_url}/"
    return f"{base}{tx_hash or ''}"


def truncate_address(address: Optional[str], *, head: int = 6, tail: int = 4) -> str:
    if not address:
        return UNKNOWN
    if len(address) <= head + tail + 2:
        return address
    return f"{address[:head]}...{address[-tail:]}"


def format_timestamp(value: Optional[str], fmt: str = DEFAULT_TIME_FORMAT) -> str:
    parsed = parse_iso_timestamp(value)
    if parsed is None:
        return UNKNOWN
    return parsed.strftime(fmt)


def sort_newest_first(records: Iterable[T], timestamp_of: Callable[[T], Optional[str]]) -> List[T]:
    """
    Order records by timestamp, newest first.

    Records whose timestamp cannot be resolved go last, keeping their
    relative order.
    """
    def _key(record: T) -> tuple:
        parsed = parse_iso_timestamp(timestamp_of(record))
        if parsed is None:
            return (1, 0.0)
        return (0, -parsed.timestamp())

    return sorted(records, key=_key)


def outgoing_view(payment: OutgoingPayment) -> dict:
    return {
        "id": payment.hash,
        "timestamp": payment.timestamp,
        "displayTime": format_timestamp(payment.timestamp),
        "amount": payment.amount,
        "currency": payment.currency_code,
        "destinationAddress": payment.destination_address,
        "destinationShort": truncate_address(payment.destination_address),
        "destinationSchoolName": payment.recipient_name,
        "explorerUrl": payment.explorer_url,
    }


def donation_view(
    *,
    tx_hash: str,
    sender: Optional[str],
    amount: str,
    currency: str,
    timestamp: Optional[str],
    explorer_base_url: str,
    issuer: Optional[str] = None,
) -> dict:
    return {
        "id": tx_hash,
        "sender": sender or UNKNOWN,
        "senderShort": truncate_address(sender),
        "amount": amount,
        "currency": currency,
        "issuer": issuer,
        "timestamp": timestamp or UNKNOWN,
        "displayTime": format_timestamp(timestamp),
        "explorerUrl": explorer_url(explorer_base_url, tx_hash),
    }
