from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from tuitiontrust.app.config import Settings
from tuitiontrust.app.errors import UnparsableAmount
from tuitiontrust.app.integrations.base import LedgerReader
from tuitiontrust.app.ledger.amounts import parse_delivered_amount
from tuitiontrust.app.ledger.classify import LedgerTransactionEntry, classify_entries
from tuitiontrust.app.ledger.donations import NormalizedDonation, normalize_donation
from tuitiontrust.app.models import Donation


logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    transactions_checked: int = 0
    new_donations_synced: int = 0
    already_synced: int = 0
    errors: list[str] = field(default_factory=list)

    def as_response(self) -> dict:
        payload = {
            "message": "Donation sync process completed.",
            "transactionsChecked": self.transactions_checked,
            "newDonationsSynced": self.new_donations_synced,
            "alreadySynced": self.already_synced,
        }
        if self.errors:
            payload["errors"] = list(self.errors)
        return payload


def donation_exists(db: Session, tx_hash: str) -> bool:
    existing = db.execute(
        select(Donation.id).where(Donation.xrpl_tx_hash == tx_hash)
    ).scalar_one_or_none()
    return existing is not None


def insert_donation_if_absent(
    db: Session,
    donation: NormalizedDonation,
    *,
    raw_transaction: Optional[dict] = None,
) -> bool:
    """
    Insert one donation unless its hash is already recorded.

    The existence check keeps the common repeat-run path cheap; the unique
    constraint on xrpl_tx_hash settles races between overlapping runs.
    Callers commit after each row, so a rollback here only discards this row.
    """
    if donation_exists(db, donation.transaction_hash):
        return False
    db.add(
        Donation(
            xrpl_tx_hash=donation.transaction_hash,
            sender_address=donation.sender,
            amount_value=donation.amount_value,
            amount_currency=donation.currency_code,
            amount_issuer=donation.issuer,
            transaction_timestamp=donation.timestamp_iso,
            explorer_url=donation.explorer_url,
            destination_tag=donation.destination_tag,
            raw_transaction=raw_transaction,
        )
    )
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        return False
    return True


def _sync_entry(db: Session, entry: LedgerTransactionEntry, settings: Settings, report: SyncReport) -> None:
    try:
        amount = parse_delivered_amount(entry.delivered_amount)
    except UnparsableAmount as exc:
        logger.warning("skipping %s: %s", entry.hash, exc.message)
        report.errors.append(f"Unparsable delivered_amount for {entry.hash}: {exc.message}")
        return

    donation = normalize_donation(entry, amount, explorer_base_url=settings.explorer_base_url)
    try:
        created = insert_donation_if_absent(db, donation, raw_transaction=entry.raw)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("store error while syncing %s: %s", entry.hash, exc)
        report.errors.append(f"Store error for {entry.hash}: {exc}")
        return

    if created:
        report.new_donations_synced += 1
        logger.info("synced donation %s (%s %s)", entry.hash, amount.value, amount.currency_code)
    else:
        report.already_synced += 1
        logger.debug("donation %s already recorded", entry.hash)


async def sync_donations(db: Session, ledger: LedgerReader, settings: Settings) -> SyncReport:
    """
    Record every new incoming treasury payment as a donation.

    Safe to re-run over overlapping windows: already-recorded hashes are
    no-ops. Ledger failures abort the run; per-entry failures are collected
    in the report and the batch continues.
    """
    settings.require("treasury_address")
    treasury = settings.treasury_address

    page = await ledger.account_tx(treasury, limit=settings.sync_page_limit)
    report = SyncReport(transactions_checked=len(page.transactions))
    logger.info("fetched %s transactions for %s", report.transactions_checked, treasury)

    for entry in classify_entries(page.transactions, "incoming", treasury):
        _sync_entry(db, entry, settings, report)

    logger.info(
        "donation sync finished: checked=%s new=%s existing=%s errors=%s",
        report.transactions_checked,
        report.new_donations_synced,
        report.already_synced,
        len(report.errors),
    )
    return report


def list_recorded_donations(db: Session, *, limit: int = 50) -> list[Donation]:
    # Stored timestamps share one ISO format, so string order is time order.
    return list(
        db.execute(
            select(Donation)
            .order_by(
                Donation.transaction_timestamp.is_(None),
                Donation.transaction_timestamp.desc(),
                Donation.created_at.desc(),
            )
            .limit(limit)
        )
        .scalars()
        .all()
    )
