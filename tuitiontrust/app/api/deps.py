# tuitiontrust/app/api/deps.py
from __future__ import annotations

from typing import AsyncIterator, Callable

from fastapi import Depends

from tuitiontrust.app.config import Settings, get_settings
from tuitiontrust.app.integrations import build_submitter, open_ledger
from tuitiontrust.app.integrations.base import LedgerReader, PaymentSubmitter


async def get_ledger(settings: Settings = Depends(get_settings)) -> AsyncIterator[LedgerReader]:
    """
    One ledger connection per request, released when the request finishes.
    """
    async with open_ledger(settings) as ledger:
        yield ledger


def get_submitter_factory() -> Callable[[Settings], PaymentSubmitter]:
    """
    Routes build the submitter themselves, after their own authorization and
    feature checks, so a rejected request never derives a wallet.
    """
    return build_submitter
