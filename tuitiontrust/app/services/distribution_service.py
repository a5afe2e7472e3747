from __future__ import annotations

import hmac
import logging
from dataclasses import asdict, dataclass
from typing import Iterable, Literal, Optional

from tuitiontrust.app.config import Settings
from tuitiontrust.app.errors import AuthorizationError, ConfigurationError, FeatureDisabledError
from tuitiontrust.app.integrations.base import PaymentSubmitter
from tuitiontrust.app.models import School


logger = logging.getLogger(__name__)

DistributionStatus = Literal["success", "failed", "exception"]


@dataclass(frozen=True)
class OutgoingDistributionResult:
    recipient: str
    recipient_address: str
    amount_sent: str
    currency_code: str
    status: DistributionStatus
    transaction_hash: Optional[str] = None
    error_detail: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


def authorize_trigger(authorization: Optional[str], settings: Settings) -> None:
    """
    Gate for the distribution trigger; runs before any ledger contact.
    """
    if not settings.cron_secret:
        raise ConfigurationError("Internal server configuration error.")
    expected = f"Bearer {settings.cron_secret}"
    if not authorization or not hmac.compare_digest(authorization.encode(), expected.encode()):
        logger.warning("rejected distribution trigger without a valid credential")
        raise AuthorizationError("Unauthorized")
    if not settings.enable_distribution_api:
        raise FeatureDisabledError("Distribution API is disabled by environment configuration.")


async def distribute_to_recipients(
    recipients: Iterable[School],
    submitter: PaymentSubmitter,
    *,
    amount: str,
    currency_code: str,
) -> list[OutgoingDistributionResult]:
    """
    Send `amount` to every recipient, one at a time.

    Every recipient gets a result; a failed or crashing payment never stops
    the ones after it.
    """
    results: list[OutgoingDistributionResult] = []
    for school in recipients:
        if not school.wallet_address:
            continue
        base = dict(
            recipient=school.name,
            recipient_address=school.wallet_address,
            amount_sent=amount,
            currency_code=currency_code,
        )
        try:
            outcome = await submitter.submit_payment(destination=school.wallet_address, value=amount)
        except Exception as exc:  # noqa: BLE001 - one recipient's failure must not stop the batch
            logger.exception("payment to %s (%s) raised", school.name, school.wallet_address)
            results.append(OutgoingDistributionResult(**base, status="exception", error_detail=str(exc)))
            continue

        if outcome.succeeded:
            logger.info("sent %s %s to %s: %s", amount, currency_code, school.name, outcome.tx_hash)
            results.append(OutgoingDistributionResult(**base, status="success", transaction_hash=outcome.tx_hash))
        else:
            logger.error("payment to %s failed with %s", school.name, outcome.result_code)
            results.append(
                OutgoingDistributionResult(
                    **base,
                    status="failed",
                    transaction_hash=outcome.tx_hash,
                    error_detail=outcome.result_code,
                )
            )
    return results
