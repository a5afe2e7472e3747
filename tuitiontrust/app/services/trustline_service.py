from __future__ import annotations

import logging

from tuitiontrust.app.config import Settings
from tuitiontrust.app.errors import FeatureDisabledError, LedgerRequestError
from tuitiontrust.app.integrations.base import LedgerReader, PaymentSubmitter
from tuitiontrust.app.services.balance_service import find_trust_line


logger = logging.getLogger(__name__)


def require_trustline_setup_enabled(settings: Settings) -> None:
    if not settings.enable_trustline_setup_api:
        raise FeatureDisabledError("Trustline setup API is disabled by environment configuration.")


async def ensure_trustline(ledger: LedgerReader, submitter: PaymentSubmitter, settings: Settings) -> dict:
    settings.require("treasury_address", "issued_currency_code", "issued_currency_issuer")
    currency = settings.issued_currency_code
    issuer = settings.issued_currency_issuer

    lines = await ledger.account_lines(settings.treasury_address, peer=issuer)
    existing = find_trust_line(lines, currency=currency, issuer=issuer)
    if existing is not None:
        logger.info("trust line for %s from %s already exists (limit %s)", currency, issuer, existing.get("limit"))
        return {
            "message": f"Trustline already exists for {currency} to {issuer}.",
            "details": existing,
        }

    outcome = await submitter.submit_trust_set(limit=settings.trustline_limit)
    if not outcome.succeeded:
        raise LedgerRequestError("Failed to set trustline.", details=outcome.result_code)
    logger.info("trust line set: %s", outcome.tx_hash)
    return {"message": "Trustline set successfully!", "transactionId": outcome.tx_hash}
