from datetime import date, datetime

import pytest

from models.stock import MoveType, Transaction
from services.exceptions import InvalidMovementError
from services.movements import list_movements, parse_day
from tests.conftest import bearer, create_product, create_user


@pytest.fixture
def ledger(database):
    """Three movements around New Year 2024, inserted directly."""
    user_id = create_user(database, email="clerk@stocklab.co.id", role="staff", name="Clerk")
    product_id = create_product(database, quantity=50, name="Teh Botol")

    stamps = [
        datetime(2023, 12, 31, 23, 59, 59),
        datetime(2024, 1, 1, 0, 0, 0),
        datetime(2024, 1, 1, 23, 59, 59),
        datetime(2024, 1, 2, 0, 0, 0),
    ]
    with database.SessionLocal() as s:
        for i, ts in enumerate(stamps, start=1):
            s.add(Transaction(product_id=product_id, user_id=user_id, quantity=i,
                              move_type=MoveType.IN if i % 2 else MoveType.OUT, created_at=ts))
        s.commit()
    return {"user_id": user_id, "product_id": product_id}


def _list(database, start=None, end=None):
    with database.SessionLocal() as s:
        return list_movements(s, start, end)


def test_lists_newest_first_with_names(database, ledger):
    items = _list(database)

    assert [m.quantity for m in items] == [4, 3, 2, 1]
    first = items[0]
    assert first.product_name == "Teh Botol"
    assert first.user_name == "Clerk"
    assert first.sku.startswith("SKU-")
    assert first.move_type == "OUT"


def test_single_day_range_includes_whole_day(database, ledger):
    items = _list(database, date(2024, 1, 1), date(2024, 1, 1))

    assert [m.created_at for m in items] == [datetime(2024, 1, 1, 23, 59, 59), datetime(2024, 1, 1, 0, 0, 0)]


def test_open_ended_ranges(database, ledger):
    assert [m.quantity for m in _list(database, start=date(2024, 1, 1))] == [4, 3, 2]
    assert [m.quantity for m in _list(database, end=date(2023, 12, 31))] == [1]


def test_empty_range(database, ledger):
    assert _list(database, date(2025, 1, 1), date(2025, 12, 31)) == []


def test_parse_day():
    assert parse_day("2024-01-01", "start_date") == date(2024, 1, 1)
    assert parse_day(None, "start_date") is None
    assert parse_day("", "start_date") is None

    with pytest.raises(InvalidMovementError) as exc:
        parse_day("01/01/2024", "end_date")
    assert exc.value.message == "end_date must be in YYYY-MM-DD format"


def test_listing_endpoint_filters(client, ledger):
    headers = bearer(ledger["user_id"], "staff")

    resp = client.get("/transactions", params={"start_date": "2024-01-01", "end_date": "2024-01-01"},
                      headers=headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "success"
    assert body["message"] == "Transactions fetched successfully"
    assert [t["quantity"] for t in body["data"]] == [3, 2]
    assert body["data"][0]["product_name"] == "Teh Botol"


def test_listing_endpoint_rejects_bad_date(client, ledger):
    resp = client.get("/transactions", params={"start_date": "2024-13-01"},
                      headers=bearer(ledger["user_id"], "staff"))

    assert resp.status_code == 400
    assert resp.json() == {"status": "error", "message": "start_date must be in YYYY-MM-DD format"}


def test_listing_requires_token(client, ledger):
    assert client.get("/transactions").status_code == 401
