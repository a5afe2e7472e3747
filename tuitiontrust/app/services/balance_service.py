from __future__ import annotations

import logging
from typing import Optional

from tuitiontrust.app.config import Settings
from tuitiontrust.app.errors import LedgerRequestError, UnparsableAmount
from tuitiontrust.app.integrations.base import LedgerReader
from tuitiontrust.app.ledger.amounts import NATIVE_CURRENCY, decode_currency_code, drops_to_xrp


logger = logging.getLogger(__name__)


def find_trust_line(lines: list[dict], *, currency: str, issuer: str) -> Optional[dict]:
    for line in lines:
        if line.get("currency") == currency and line.get("account") == issuer:
            return line
    return None


async def treasury_balances(ledger: LedgerReader, settings: Settings) -> dict:
    """
    Native and issued-currency balances of the treasury.

    A ledger-side error on one balance (account not found, no trust line)
    reports that balance as "0"; a connectivity failure aborts the call.
    """
    settings.require("treasury_address", "issued_currency_code", "issued_currency_issuer")
    treasury = settings.treasury_address
    currency = settings.issued_currency_code
    issuer = settings.issued_currency_issuer

    xrp_balance = "0"
    try:
        account_data = await ledger.account_info(treasury)
        xrp_balance = drops_to_xrp(account_data.get("Balance", "0"))
    except (LedgerRequestError, UnparsableAmount) as exc:
        logger.warning("could not read XRP balance for %s: %s", treasury, exc)

    issued_balance = "0"
    try:
        lines = await ledger.account_lines(treasury, peer=issuer)
        line = find_trust_line(lines, currency=currency, issuer=issuer)
        if line is not None:
            issued_balance = str(line.get("balance", "0"))
        else:
            logger.info("no %s trust line from %s on %s", currency, issuer, treasury)
    except LedgerRequestError as exc:
        logger.warning("could not read %s balance for %s: %s", currency, treasury, exc)

    return {
        "xrpBalance": xrp_balance,
        "rlusdBalance": issued_balance,
        "currency": {"xrp": NATIVE_CURRENCY, "rlusd": decode_currency_code(currency)},
        "account": treasury,
    }
