from __future__ import annotations

from tuitiontrust.app.config import Settings
from tuitiontrust.app.integrations.base import AccountTxPage, LedgerReader, PaymentSubmitter, SubmissionOutcome
from tuitiontrust.app.integrations.xrpl import XrplRpcClient, XrplSubmitter
from tuitiontrust.app.integrations.xrpl_stub import XrplStubReader


def open_ledger(settings: Settings):
    """
    Return a scoped ledger reader; use it with `async with`.
    """
    if settings.xrpl_use_stub:
        settings.require("treasury_address")
        return XrplStubReader(settings.treasury_address)
    return XrplRpcClient(url=settings.xrpl_rpc_url, timeout=settings.request_timeout)


def build_submitter(settings: Settings) -> PaymentSubmitter:
    return XrplSubmitter(settings)


__all__ = [
    "AccountTxPage",
    "LedgerReader",
    "PaymentSubmitter",
    "SubmissionOutcome",
    "build_submitter",
    "open_ledger",
]
