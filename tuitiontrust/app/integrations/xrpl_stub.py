from __future__ import annotations

from typing import Optional

from tuitiontrust.app.integrations.base import AccountTxPage


STUB_DONOR = "rDonorStubAccount1111111111111111"
STUB_ISSUER = "rIssuerStubAccount111111111111111"
STUB_RLUSD_HEX = "524C555344000000000000000000000000000000"


class XrplStubReader:
    """
    In-process ledger for local development: a fixed set of recent payments
    into the treasury plus matching balances.
    """

    def __init__(self, treasury_address: str):
        self.treasury_address = treasury_address

    async def __aenter__(self) -> "XrplStubReader":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    def _sample(self) -> list[dict]:
        return [
            {
                "hash": "STUB0000000000000000000000000000000000000000000000000000000002",
                "validated": True,
                "close_time_iso": "2024-01-15T12:00:00Z",
                "tx_json": {
                    "TransactionType": "Payment",
                    "Account": STUB_DONOR,
                    "Destination": self.treasury_address,
                },
                "meta": {
                    "TransactionResult": "tesSUCCESS",
                    "delivered_amount": {"value": "25", "currency": STUB_RLUSD_HEX, "issuer": STUB_ISSUER},
                },
            },
            {
                "hash": "STUB0000000000000000000000000000000000000000000000000000000001",
                "validated": True,
                "close_time_iso": "2024-01-14T09:30:00Z",
                "tx_json": {
                    "TransactionType": "Payment",
                    "Account": STUB_DONOR,
                    "Destination": self.treasury_address,
                },
                "meta": {"TransactionResult": "tesSUCCESS", "delivered_amount": "12500000"},
            },
        ]

    async def account_tx(self, account: str, *, limit: int) -> AccountTxPage:
        if account != self.treasury_address:
            return AccountTxPage(transactions=[])
        return AccountTxPage(transactions=self._sample()[:limit])

    async def account_info(self, account: str) -> dict:
        return {"Account": account, "Balance": "12500000"}

    async def account_lines(self, account: str, *, peer: Optional[str] = None) -> list[dict]:
        return [{"account": peer or STUB_ISSUER, "currency": STUB_RLUSD_HEX, "balance": "25", "limit": "10000000000"}]
