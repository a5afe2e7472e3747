from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

from tuitiontrust.app.ledger.amounts import ParsedAmount
from tuitiontrust.app.ledger.classify import LedgerTransactionEntry
from tuitiontrust.app.ledger.presentation import explorer_url


@dataclass(frozen=True)
class NormalizedDonation:
    """
    The persisted shape of one incoming payment.

    Invariant: built only from the entry it describes, so re-normalizing the
    same entry yields an equal record.
    """
    transaction_hash: str
    sender: str
    amount_value: str
    currency_code: str
    issuer: Optional[str]
    timestamp_iso: Optional[str]
    explorer_url: str
    destination_tag: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)


def normalize_donation(
    entry: LedgerTransactionEntry,
    amount: ParsedAmount,
    *,
    explorer_base_url: str,
) -> NormalizedDonation:
    if not entry.hash:
        raise ValueError("cannot normalize an entry without a hash")
    return NormalizedDonation(
        transaction_hash=entry.hash,
        sender=entry.source_account or "",
        amount_value=amount.value,
        currency_code=amount.currency_code,
        issuer=amount.issuer,
        timestamp_iso=entry.close_time,
        explorer_url=explorer_url(explorer_base_url, entry.hash),
        destination_tag=entry.destination_tag,
    )
