from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tuitiontrust.app.api.deps import get_ledger
from tuitiontrust.app.config import Settings, get_settings
from tuitiontrust.app.db import get_db
from tuitiontrust.app.integrations.base import LedgerReader
from tuitiontrust.app.ledger.presentation import donation_view, outgoing_view
from tuitiontrust.app.services import balance_service, donation_sync_service, ledger_views_service


router = APIRouter(prefix="/api", tags=["donations"])


@router.get("/sync-donations")
async def sync_donations(
    db: Session = Depends(get_db),
    ledger: LedgerReader = Depends(get_ledger),
    settings: Settings = Depends(get_settings),
):
    report = await donation_sync_service.sync_donations(db, ledger, settings)
    return report.as_response()


@router.get("/donations")
def list_donations(
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    rows = donation_sync_service.list_recorded_donations(db, limit=limit)
    return [
        donation_view(
            tx_hash=row.xrpl_tx_hash,
            sender=row.sender_address,
            amount=row.amount_value,
            currency=row.amount_currency,
            issuer=row.amount_issuer,
            timestamp=row.transaction_timestamp,
            explorer_base_url=settings.explorer_base_url,
        )
        for row in rows
    ]


@router.get("/get-donations-xrpl")
async def live_donations(
    ledger: LedgerReader = Depends(get_ledger),
    settings: Settings = Depends(get_settings),
):
    return await ledger_views_service.recent_incoming_donations(ledger, settings)


@router.get("/donations/balances")
async def donation_balances(
    ledger: LedgerReader = Depends(get_ledger),
    settings: Settings = Depends(get_settings),
):
    return await balance_service.treasury_balances(ledger, settings)


@router.get("/donations/outgoing-to-verified-schools")
async def outgoing_to_verified_schools(
    db: Session = Depends(get_db),
    ledger: LedgerReader = Depends(get_ledger),
    settings: Settings = Depends(get_settings),
):
    payments = await ledger_views_service.outgoing_to_verified_recipients(db, ledger, settings)
    return [outgoing_view(payment) for payment in payments]
