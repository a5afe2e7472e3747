import asyncio

import pytest
from sqlalchemy import event, select
from sqlalchemy.exc import OperationalError

from tuitiontrust.app.errors import ConfigurationError, UpstreamConnectivityError
from tuitiontrust.app.models import Donation
from tuitiontrust.app.services import donation_sync_service


RLUSD_HEX = "524C555344000000000000000000000000000000"


def _donations(db):
    return db.execute(select(Donation).order_by(Donation.xrpl_tx_hash)).scalars().all()


def test_sync_records_new_donations_once(sqlite_session, fake_ledger_cls, payment_entry, test_settings):
    ledger = fake_ledger_cls(
        [
            payment_entry("TX1", delivered="1000000"),
            payment_entry("TX2", delivered={"value": "10", "currency": RLUSD_HEX, "issuer": "rIssuer"}),
            payment_entry("TX3", result="tecUNFUNDED_PAYMENT"),
        ]
    )

    first = asyncio.run(donation_sync_service.sync_donations(sqlite_session, ledger, test_settings))
    assert first.transactions_checked == 3
    assert first.new_donations_synced == 2
    assert first.already_synced == 0
    assert first.errors == []

    second = asyncio.run(donation_sync_service.sync_donations(sqlite_session, ledger, test_settings))
    assert second.new_donations_synced == 0
    assert second.already_synced == 2

    rows = _donations(sqlite_session)
    assert [(row.xrpl_tx_hash, row.amount_value, row.amount_currency) for row in rows] == [
        ("TX1", "1", "XRP"),
        ("TX2", "10", "RLUSD"),
    ]
    assert rows[1].amount_issuer == "rIssuer"
    assert rows[0].explorer_url == "https://testnet.xrpl.org/transactions/TX1"
    assert ledger.calls[0] == ("account_tx", test_settings.treasury_address, test_settings.sync_page_limit)


def test_duplicate_hash_in_one_batch_persists_once(sqlite_session, fake_ledger_cls, payment_entry, test_settings):
    ledger = fake_ledger_cls(
        [
            payment_entry("DUP", close_time_iso="2024-01-01T00:00:00Z"),
            payment_entry("DUP", close_time_iso="2024-03-01T00:00:00Z"),
        ]
    )

    report = asyncio.run(donation_sync_service.sync_donations(sqlite_session, ledger, test_settings))

    assert report.new_donations_synced == 1
    rows = _donations(sqlite_session)
    assert len(rows) == 1
    assert rows[0].transaction_timestamp == "2024-01-01T00:00:00Z"


def test_unparsable_amount_is_reported_and_batch_continues(
    sqlite_session, fake_ledger_cls, payment_entry, test_settings
):
    ledger = fake_ledger_cls([payment_entry("BAD", delivered={"weird": True}), payment_entry("GOOD")])

    report = asyncio.run(donation_sync_service.sync_donations(sqlite_session, ledger, test_settings))

    assert report.new_donations_synced == 1
    assert len(report.errors) == 1
    assert "BAD" in report.errors[0]
    assert [row.xrpl_tx_hash for row in _donations(sqlite_session)] == ["GOOD"]
    assert report.as_response()["errors"] == report.errors


def test_store_error_on_one_entry_does_not_abort(
    sqlite_session, fake_ledger_cls, payment_entry, test_settings, monkeypatch
):
    real_insert = donation_sync_service.insert_donation_if_absent

    def flaky_insert(db, donation, **kwargs):
        if donation.transaction_hash == "FLAKY":
            raise OperationalError("INSERT", {}, Exception("database is locked"))
        return real_insert(db, donation, **kwargs)

    monkeypatch.setattr(donation_sync_service, "insert_donation_if_absent", flaky_insert)
    ledger = fake_ledger_cls([payment_entry("OK1"), payment_entry("FLAKY"), payment_entry("OK2")])

    report = asyncio.run(donation_sync_service.sync_donations(sqlite_session, ledger, test_settings))

    assert report.new_donations_synced == 2
    assert len(report.errors) == 1
    assert "FLAKY" in report.errors[0]
    assert [row.xrpl_tx_hash for row in _donations(sqlite_session)] == ["OK1", "OK2"]


def test_concurrent_insert_counts_as_already_synced(
    sqlite_session, fake_ledger_cls, payment_entry, test_settings, monkeypatch
):
    sqlite_session.add(
        Donation(
            xrpl_tx_hash="RACE",
            sender_address="rDonorTestAccount111111111111111",
            amount_value="1",
            amount_currency="XRP",
        )
    )
    sqlite_session.commit()
    # Simulate a second run that checked before the first one committed.
    monkeypatch.setattr(donation_sync_service, "donation_exists", lambda db, tx_hash: False)
    ledger = fake_ledger_cls([payment_entry("RACE"), payment_entry("FRESH")])

    report = asyncio.run(donation_sync_service.sync_donations(sqlite_session, ledger, test_settings))

    assert report.already_synced == 1
    assert report.new_donations_synced == 1
    assert report.errors == []
    assert [row.xrpl_tx_hash for row in _donations(sqlite_session)] == ["FRESH", "RACE"]


def test_ledger_failure_aborts_without_writes(sqlite_session, fake_ledger_cls, test_settings):
    ledger = fake_ledger_cls(error=UpstreamConnectivityError("Ledger node unreachable for account_tx."))

    with pytest.raises(UpstreamConnectivityError):
        asyncio.run(donation_sync_service.sync_donations(sqlite_session, ledger, test_settings))

    assert _donations(sqlite_session) == []


def test_missing_treasury_address_fails_before_ledger_contact(sqlite_session, fake_ledger_cls):
    from tuitiontrust.app.config import Settings

    ledger = fake_ledger_cls()
    with pytest.raises(ConfigurationError) as excinfo:
        asyncio.run(donation_sync_service.sync_donations(sqlite_session, ledger, Settings()))

    assert "TREASURY_ADDRESS" in excinfo.value.message
    assert ledger.calls == []


def test_recorded_donations_listed_newest_first(sqlite_session):
    for tx_hash, stamp in [("A", "2024-01-01T00:00:00Z"), ("B", None), ("C", "2024-01-02T00:00:00Z")]:
        sqlite_session.add(
            Donation(
                xrpl_tx_hash=tx_hash,
                sender_address="rDonor",
                amount_value="1",
                amount_currency="XRP",
                transaction_timestamp=stamp,
            )
        )
    sqlite_session.commit()

    rows = donation_sync_service.list_recorded_donations(sqlite_session, limit=2)
    assert [row.xrpl_tx_hash for row in rows] == ["C", "A"]

    everything = donation_sync_service.list_recorded_donations(sqlite_session, limit=10)
    assert [row.xrpl_tx_hash for row in everything] == ["C", "A", "B"]


def test_recorded_donations_limit_is_applied_in_the_query(sqlite_session):
    for i in range(5):
        sqlite_session.add(
            Donation(
                xrpl_tx_hash=f"L{i}",
                sender_address="rDonor",
                amount_value="1",
                amount_currency="XRP",
                transaction_timestamp=f"2024-01-0{i + 1}T00:00:00Z",
            )
        )
    sqlite_session.commit()

    statements = []

    def _capture(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    engine = sqlite_session.get_bind()
    event.listen(engine, "before_cursor_execute", _capture)
    try:
        rows = donation_sync_service.list_recorded_donations(sqlite_session, limit=2)
    finally:
        event.remove(engine, "before_cursor_execute", _capture)

    assert [row.xrpl_tx_hash for row in rows] == ["L4", "L3"]
    assert any("LIMIT" in statement.upper() for statement in statements)
