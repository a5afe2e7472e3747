from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.orm import Session

from tuitiontrust.app.api.deps import get_ledger, get_submitter_factory
from tuitiontrust.app.config import Settings, get_settings
from tuitiontrust.app.db import get_db
from tuitiontrust.app.integrations.base import LedgerReader, PaymentSubmitter
from tuitiontrust.app.ledger.amounts import decode_currency_code
from tuitiontrust.app.services import distribution_service, ledger_views_service, school_service, trustline_service


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["treasury"])


@router.post("/distribute-rlusd")
async def distribute_rlusd(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    submitter_factory: Callable[[Settings], PaymentSubmitter] = Depends(get_submitter_factory),
):
    distribution_service.authorize_trigger(authorization, settings)

    async with submitter_factory(settings) as submitter:
        recipients = school_service.list_eligible_recipients(db)
        if not recipients:
            logger.info("no verified schools with wallet addresses to distribute to")
            return {"message": "No schools eligible for RLUSD distribution at this time.", "results": []}

        logger.info("distributing to %s verified school(s)", len(recipients))
        results = await distribution_service.distribute_to_recipients(
            recipients,
            submitter,
            amount=settings.distribution_amount,
            currency_code=decode_currency_code(settings.issued_currency_code),
        )
    return {
        "message": "RLUSD distribution process completed.",
        "results": [result.to_dict() for result in results],
    }


@router.get("/setup-trustline")
async def setup_trustline(
    ledger: LedgerReader = Depends(get_ledger),
    settings: Settings = Depends(get_settings),
    submitter_factory: Callable[[Settings], PaymentSubmitter] = Depends(get_submitter_factory),
):
    trustline_service.require_trustline_setup_enabled(settings)
    async with submitter_factory(settings) as submitter:
        return await trustline_service.ensure_trustline(ledger, submitter, settings)


@router.get("/xrpl/account-transactions")
async def account_transactions(
    address: str = Query(""),
    ledger: LedgerReader = Depends(get_ledger),
    settings: Settings = Depends(get_settings),
):
    return await ledger_views_service.incoming_payments_for_account(ledger, address.strip(), settings)
