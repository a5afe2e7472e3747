from __future__ import annotations

import logging
import re
from typing import Any, Optional

import httpx
from xrpl.asyncio.clients import AsyncJsonRpcClient
from xrpl.asyncio.transaction import (
    XRPLReliableSubmissionException,
    autofill_and_sign,
    submit_and_wait,
)
from xrpl.models.amounts import IssuedCurrencyAmount
from xrpl.models.transactions import Payment, Transaction, TrustSet
from xrpl.wallet import Wallet

from tuitiontrust.app.config import Settings
from tuitiontrust.app.errors import ConfigurationError, LedgerRequestError, UpstreamConnectivityError
from tuitiontrust.app.integrations.base import AccountTxPage, SubmissionOutcome


logger = logging.getLogger(__name__)

# ledger_index_min/max of -1 means "the most recent validated range".
LATEST_VALIDATED = -1

# xrpl-py reports a validated-but-unsuccessful transaction as "Transaction failed: tecXXX".
_FAILED_RESULT_RE = re.compile(r"Transaction failed: (\w+)")


class XrplRpcClient:
    """
    JSON-RPC reads against one ledger node.

    Use as an async context manager: one HTTP connection pool per run,
    closed when the run ends whether it succeeded or not.
    """

    def __init__(self, *, url: str, timeout: float = 20.0, client: Optional[httpx.AsyncClient] = None):
        self.url = url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "XrplRpcClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def request(self, method: str, params: dict) -> dict:
        try:
            response = await self._client.post(self.url, json={"method": method, "params": [params]})
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            raise UpstreamConnectivityError(
                f"Ledger node unreachable for {method}.", details=str(exc)
            ) from exc
        except ValueError as exc:
            raise UpstreamConnectivityError(f"Ledger node returned a non-JSON body for {method}.") from exc

        result = body.get("result") if isinstance(body, dict) else None
        if not isinstance(result, dict):
            raise LedgerRequestError(f"Ledger response for {method} has no result.")
        if result.get("status") == "error" or "error" in result:
            message = result.get("error_message") or result.get("error") or "unknown ledger error"
            raise LedgerRequestError(f"{method} failed: {message}", details=result.get("error"))
        return result

    async def account_tx(self, account: str, *, limit: int) -> AccountTxPage:
        params: dict[str, Any] = {
            "account": account,
            "ledger_index_min": LATEST_VALIDATED,
            "ledger_index_max": LATEST_VALIDATED,
            "limit": limit,
            "forward": False,
            "binary": False,
        }
        result = await self.request("account_tx", params)
        return AccountTxPage(transactions=list(result.get("transactions") or []))

    async def account_info(self, account: str) -> dict:
        result = await self.request("account_info", {"account": account, "ledger_index": "validated"})
        return result.get("account_data") or {}

    async def account_lines(self, account: str, *, peer: Optional[str] = None) -> list[dict]:
        params: dict[str, Any] = {"account": account, "ledger_index": "validated"}
        if peer:
            params["peer"] = peer
        result = await self.request("account_lines", params)
        return list(result.get("lines") or [])


class XrplSubmitter:
    """
    Signs and submits treasury transactions through xrpl-py.

    The seed must derive the configured treasury address; anything else is
    a configuration problem and is reported before touching the network.
    """

    def __init__(self, settings: Settings, *, client: Optional[AsyncJsonRpcClient] = None):
        settings.require("treasury_address", "treasury_secret", "issued_currency_code", "issued_currency_issuer")
        try:
            self._wallet = Wallet.from_seed(settings.treasury_secret)
        except Exception as exc:  # noqa: BLE001 - any seed decoding failure is a config error
            raise ConfigurationError("TREASURY_SECRET is not a valid wallet seed.") from exc
        if self._wallet.classic_address != settings.treasury_address:
            raise ConfigurationError(
                "TREASURY_ADDRESS does not match the address derived from TREASURY_SECRET."
            )
        self.address = self._wallet.classic_address
        self._currency = settings.issued_currency_code
        self._issuer = settings.issued_currency_issuer
        self._client: Optional[AsyncJsonRpcClient] = client or AsyncJsonRpcClient(settings.xrpl_rpc_url)

    async def __aenter__(self) -> "XrplSubmitter":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        # xrpl-py opens its HTTP connection per request, so there is no pool to close.
        self._client = None

    def _issued(self, value: str) -> IssuedCurrencyAmount:
        return IssuedCurrencyAmount(currency=self._currency, issuer=self._issuer, value=value)

    async def _submit(self, transaction: Transaction) -> SubmissionOutcome:
        if self._client is None:
            raise RuntimeError("submitter is closed")
        signed = await autofill_and_sign(transaction, self._client, self._wallet)
        tx_hash = signed.get_hash()
        try:
            response = await submit_and_wait(signed, self._client)
        except XRPLReliableSubmissionException as exc:
            match = _FAILED_RESULT_RE.search(str(exc))
            if not match:
                raise
            return SubmissionOutcome(tx_hash=tx_hash, result_code=match.group(1))
        meta = response.result.get("meta")
        result_code = meta.get("TransactionResult") if isinstance(meta, dict) else None
        return SubmissionOutcome(tx_hash=response.result.get("hash") or tx_hash, result_code=result_code or "unknown")

    async def submit_payment(self, *, destination: str, value: str) -> SubmissionOutcome:
        payment = Payment(account=self.address, destination=destination, amount=self._issued(value))
        logger.info("submitting payment of %s %s to %s", value, self._currency, destination)
        return await self._submit(payment)

    async def submit_trust_set(self, *, limit: str) -> SubmissionOutcome:
        trust_set = TrustSet(account=self.address, limit_amount=self._issued(limit))
        logger.info("submitting TrustSet for %s issued by %s", self._currency, self._issuer)
        return await self._submit(trust_set)
