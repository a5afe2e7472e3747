from __future__ import annotations

import logging

from sqlalchemy.orm import Session
from xrpl.core.addresscodec import is_valid_classic_address

from tuitiontrust.app.config import Settings
from tuitiontrust.app.errors import InvalidRequestError, UnparsableAmount
from tuitiontrust.app.integrations.base import LedgerReader
from tuitiontrust.app.ledger.amounts import parse_delivered_amount
from tuitiontrust.app.ledger.classify import LedgerTransactionEntry, classify_entries
from tuitiontrust.app.ledger.presentation import (
    DISPLAY_LIMIT,
    UNKNOWN,
    OutgoingPayment,
    donation_view,
    explorer_url,
    sort_newest_first,
)
from tuitiontrust.app.services import school_service


logger = logging.getLogger(__name__)


def _amount_or_unknown(entry: LedgerTransactionEntry) -> tuple[str, str]:
    # Views degrade to N/A instead of dropping a row the store says is relevant.
    try:
        amount = parse_delivered_amount(entry.delivered_amount)
    except UnparsableAmount:
        logger.info("unrecognized delivered_amount on %s; showing N/A", entry.hash)
        return UNKNOWN, UNKNOWN
    return amount.value, amount.currency_code


async def outgoing_to_verified_recipients(
    db: Session,
    ledger: LedgerReader,
    settings: Settings,
    *,
    fetch_limit: int = 50,
) -> list[OutgoingPayment]:
    """
    Recent treasury payments whose destination is a verified school.

    One row per transaction (a school paid twice appears twice), newest
    first, at most DISPLAY_LIMIT rows.
    """
    settings.require("treasury_address")
    treasury = settings.treasury_address

    page = await ledger.account_tx(treasury, limit=fetch_limit)
    entries = classify_entries(page.transactions, "outgoing", treasury)
    destinations = {entry.destination_account for entry in entries}
    if not destinations:
        logger.info("no outgoing payments found from %s", treasury)
        return []

    verified = school_service.verified_names_by_address(db, destinations)
    logger.info("found %s verified school destinations", len(verified))

    rows: list[OutgoingPayment] = []
    for entry in entries:
        name = verified.get(entry.destination_account)
        if name is None:
            continue
        value, currency = _amount_or_unknown(entry)
        rows.append(
            OutgoingPayment(
                hash=entry.hash,
                timestamp=entry.close_time or UNKNOWN,
                amount=value,
                currency_code=currency,
                destination_address=entry.destination_account,
                recipient_name=name,
                explorer_url=explorer_url(settings.explorer_base_url, entry.hash),
            )
        )
    return sort_newest_first(rows, lambda row: row.timestamp)[:DISPLAY_LIMIT]


async def recent_incoming_donations(
    ledger: LedgerReader,
    settings: Settings,
    *,
    fetch_limit: int = 30,
    max_items: int = 10,
) -> list[dict]:
    """
    Live view of the latest donations straight from the ledger, no store involved.
    """
    settings.require("treasury_address")
    treasury = settings.treasury_address

    page = await ledger.account_tx(treasury, limit=fetch_limit)
    donations: list[dict] = []
    for entry in classify_entries(page.transactions, "incoming", treasury):
        if len(donations) >= max_items:
            break
        try:
            amount = parse_delivered_amount(entry.delivered_amount)
        except UnparsableAmount as exc:
            logger.info("skipping %s: %s", entry.hash, exc.message)
            continue
        donations.append(
            donation_view(
                tx_hash=entry.hash,
                sender=entry.source_account,
                amount=amount.value,
                currency=amount.currency_code,
                issuer=amount.issuer,
                timestamp=entry.close_time,
                explorer_base_url=settings.explorer_base_url,
            )
        )
    return donations


async def incoming_payments_for_account(
    ledger: LedgerReader,
    address: str,
    settings: Settings,
    *,
    limit: int = 20,
) -> list[dict]:
    if not address:
        raise InvalidRequestError("XRPL address parameter is required")
    if not is_valid_classic_address(address):
        raise InvalidRequestError("Invalid XRPL address provided")

    page = await ledger.account_tx(address, limit=limit)
    payments: list[dict] = []
    for entry in classify_entries(page.transactions, "incoming", address):
        value, currency = _amount_or_unknown(entry)
        payments.append(
            donation_view(
                tx_hash=entry.hash,
                sender=entry.source_account,
                amount=value,
                currency=currency,
                timestamp=entry.close_time,
                explorer_base_url=settings.explorer_base_url,
            )
        )
    return payments
