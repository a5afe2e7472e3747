import asyncio

import pytest

from tuitiontrust.app.errors import LedgerRequestError, UpstreamConnectivityError
from tuitiontrust.app.services.balance_service import find_trust_line, treasury_balances


def test_balances_read_native_and_issued(fake_ledger_cls, test_settings):
    ledger = fake_ledger_cls(
        account_data={"Balance": "25500000"},
        lines=[
            {"account": "rOtherIssuer", "currency": test_settings.issued_currency_code, "balance": "99"},
            {"account": test_settings.issued_currency_issuer, "currency": test_settings.issued_currency_code,
             "balance": "12.3"},
        ],
    )

    balances = asyncio.run(treasury_balances(ledger, test_settings))

    assert balances == {
        "xrpBalance": "25.5",
        "rlusdBalance": "12.3",
        "currency": {"xrp": "XRP", "rlusd": "RLUSD"},
        "account": test_settings.treasury_address,
    }


def test_ledger_errors_report_zero(fake_ledger_cls, test_settings):
    ledger = fake_ledger_cls(error=LedgerRequestError("account_info failed: Account not found."))
    balances = asyncio.run(treasury_balances(ledger, test_settings))
    assert balances["xrpBalance"] == "0"
    assert balances["rlusdBalance"] == "0"


def test_connectivity_errors_propagate(fake_ledger_cls, test_settings):
    ledger = fake_ledger_cls(error=UpstreamConnectivityError("Ledger node unreachable for account_info."))
    with pytest.raises(UpstreamConnectivityError):
        asyncio.run(treasury_balances(ledger, test_settings))


def test_find_trust_line_matches_currency_and_issuer():
    lines = [{"account": "rA", "currency": "USD"}, {"account": "rB", "currency": "USD"}]
    assert find_trust_line(lines, currency="USD", issuer="rB") == lines[1]
    assert find_trust_line(lines, currency="EUR", issuer="rB") is None
