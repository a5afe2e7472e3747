from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from tuitiontrust.app.ledger.classify import SUCCESS_RESULT


@dataclass(frozen=True)
class AccountTxPage:
    transactions: list[dict]


@dataclass(frozen=True)
class SubmissionOutcome:
    tx_hash: Optional[str]
    result_code: str

    @property
    def succeeded(self) -> bool:
        return self.result_code == SUCCESS_RESULT


class LedgerReader(Protocol):
    async def account_tx(self, account: str, *, limit: int) -> AccountTxPage:
        ...

    async def account_info(self, account: str) -> dict:
        ...

    async def account_lines(self, account: str, *, peer: Optional[str] = None) -> list[dict]:
        ...


class PaymentSubmitter(Protocol):
    address: str

    async def submit_payment(self, *, destination: str, value: str) -> SubmissionOutcome:
        ...

    async def submit_trust_set(self, *, limit: str) -> SubmissionOutcome:
        ...

    async def __aenter__(self) -> "PaymentSubmitter":
        ...

    async def __aexit__(self, *exc_info) -> None:
        ...
