"""
Transaction classification.

Responsibility:
- Wrap raw account_tx elements in a typed, read-only entry.
- Keep only validated, successful Payment transactions moving value in the
  requested direction relative to the treasury.

Design notes:
- Rejections are silent skips, never errors.
- Poll order is preserved; a hash seen twice keeps its first occurrence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Literal, Optional

from tuitiontrust.app.ledger.amounts import delivered_amount_of
from tuitiontrust.app.ledger.timestamps import entry_close_time


logger = logging.getLogger(__name__)

SUCCESS_RESULT = "tesSUCCESS"
PAYMENT = "Payment"

Role = Literal["incoming", "outgoing"]


@dataclass(frozen=True)
class LedgerTransactionEntry:
    hash: Optional[str]
    source_account: Optional[str]
    destination_account: Optional[str]
    transaction_type: Optional[str]
    result_code: Optional[str]
    validated: bool
    delivered_amount: Any
    close_time: Optional[str]
    destination_tag: Optional[int] = None
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_raw(cls, raw: dict) -> "LedgerTransactionEntry":
        tx = raw.get("tx") or raw.get("tx_json") or {}
        if not isinstance(tx, dict):
            tx = {}
        # Binary-mode account_tx returns meta as a hex blob; treat it as missing.
        meta = raw.get("meta") if isinstance(raw.get("meta"), dict) else {}
        tag = tx.get("DestinationTag")
        return cls(
            hash=raw.get("hash") or tx.get("hash"),
            source_account=tx.get("Account"),
            destination_account=tx.get("Destination"),
            transaction_type=tx.get("TransactionType"),
            result_code=meta.get("TransactionResult"),
            validated=bool(raw.get("validated")),
            delivered_amount=delivered_amount_of(meta),
            close_time=entry_close_time(raw, tx),
            destination_tag=tag if isinstance(tag, int) else None,
            raw=raw,
        )


def is_relevant_payment(entry: LedgerTransactionEntry, role: Role, treasury: str) -> bool:
    if not entry.validated:
        return False
    if entry.transaction_type != PAYMENT:
        return False
    if entry.result_code != SUCCESS_RESULT:
        return False
    if role == "incoming":
        return entry.destination_account == treasury
    if role == "outgoing":
        return (
            entry.source_account == treasury
            and bool(entry.destination_account)
            and entry.destination_account != treasury
        )
    raise ValueError(f"unknown role: {role}")


def classify_entries(raw_entries: Iterable[dict], role: Role, treasury: str) -> List[LedgerTransactionEntry]:
    accepted: List[LedgerTransactionEntry] = []
    seen: set[str] = set()
    for raw in raw_entries:
        if not isinstance(raw, dict):
            continue
        entry = LedgerTransactionEntry.from_raw(raw)
        if not entry.hash:
            logger.debug("skipping account_tx entry without a hash")
            continue
        if entry.hash in seen:
            logger.debug("skipping duplicate report of %s", entry.hash)
            continue
        if not is_relevant_payment(entry, role, treasury):
            logger.debug(
                "skipping %s (type=%s result=%s validated=%s dest=%s)",
                entry.hash,
                entry.transaction_type,
                entry.result_code,
                entry.validated,
                entry.destination_account,
            )
            continue
        seen.add(entry.hash)
        accepted.append(entry)
    return accepted
