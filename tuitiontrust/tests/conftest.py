import os
import pathlib
import sys
import tempfile
from typing import Any, Optional

import pytest


REPO_ROOT = pathlib.Path(__file__).resolve().parents[2]
sys.path.append(str(REPO_ROOT))

TREASURY = "rTreasuryTestAccount1111111111111"
ISSUER = "rIssuerTestAccount11111111111111"
RLUSD_HEX = "524C555344000000000000000000000000000000"


def pytest_configure():
    if os.getenv("DATABASE_URL") or os.getenv("SQLALCHEMY_DATABASE_URL"):
        return
    temp_dir = tempfile.mkdtemp(prefix="tuitiontrust-tests-")
    db_path = pathlib.Path(temp_dir) / "pytest.db"
    os.environ["DATABASE_URL"] = f"sqlite:///{db_path}"


def build_payment_entry(
    tx_hash: Optional[str],
    *,
    source: str = "rDonorTestAccount111111111111111",
    destination: str = TREASURY,
    delivered: Any = "1000000",
    result: str = "tesSUCCESS",
    validated: bool = True,
    tx_type: str = "Payment",
    close_time_iso: Optional[str] = "2024-01-01T00:00:00Z",
    tx_key: str = "tx_json",
) -> dict:
    entry = {
        "validated": validated,
        tx_key: {
            "TransactionType": tx_type,
            "Account": source,
            "Destination": destination,
        },
        "meta": {"TransactionResult": result, "delivered_amount": delivered},
    }
    if tx_hash is not None:
        entry["hash"] = tx_hash
    if close_time_iso is not None:
        entry["close_time_iso"] = close_time_iso
    return entry


class FakeLedger:
    """Ledger reader double: serves a fixed account_tx page and records calls."""

    def __init__(self, transactions=None, *, account_data=None, lines=None, error: Optional[Exception] = None):
        self.transactions = list(transactions or [])
        self.account_data = account_data or {}
        self.lines = list(lines or [])
        self.error = error
        self.calls: list[tuple] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None

    async def account_tx(self, account, *, limit):
        from tuitiontrust.app.integrations.base import AccountTxPage

        self.calls.append(("account_tx", account, limit))
        if self.error is not None:
            raise self.error
        return AccountTxPage(transactions=self.transactions[:limit])

    async def account_info(self, account):
        self.calls.append(("account_info", account))
        if self.error is not None:
            raise self.error
        return self.account_data

    async def account_lines(self, account, *, peer=None):
        self.calls.append(("account_lines", account, peer))
        if self.error is not None:
            raise self.error
        return self.lines


@pytest.fixture()
def payment_entry():
    return build_payment_entry


@pytest.fixture()
def fake_ledger_cls():
    return FakeLedger


@pytest.fixture()
def test_settings():
    from tuitiontrust.app.config import Settings

    return Settings(
        treasury_address=TREASURY,
        treasury_secret="sEdTestSeedNotReal",
        issued_currency_code=RLUSD_HEX,
        issued_currency_issuer=ISSUER,
        cron_secret="cron-test-secret",
        explorer_base_url="https://testnet.xrpl.org/transactions/",
    )


@pytest.fixture(scope="session")
def sqlite_engine():
    from tuitiontrust.app.db import Base, engine
    import tuitiontrust.app.models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def sqlite_session(sqlite_engine):
    from tuitiontrust.app.db import SessionLocal
    from tuitiontrust.app.models import Donation, School

    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.query(Donation).delete()
        session.query(School).delete()
        session.commit()
        session.close()


@pytest.fixture()
def api_client(sqlite_engine, sqlite_session, test_settings):
    from fastapi.testclient import TestClient

    from tuitiontrust.app.config import get_settings
    from tuitiontrust.app.db import get_db
    from tuitiontrust.app.main import app

    def _get_test_db():
        yield sqlite_session

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    client = TestClient(app)
    try:
        yield client
    finally:
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_settings, None)
