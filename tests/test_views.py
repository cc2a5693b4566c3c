import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from gearledger.crud.checkouts import checkout, close_checkout, replace_equipment
from gearledger.crud.cohorts import create_cohort, set_cohort_hidden
from gearledger.crud.damage import attach_image, report_damage
from gearledger.crud.equipment import register_equipment
from gearledger.crud.personnel import add_personnel
from gearledger.db.session import Base
from gearledger.services import views

# Ensure models are imported so metadata is populated
from gearledger.models import checkout as checkout_model  # noqa: F401
from gearledger.models import cohort as cohort_model  # noqa: F401
from gearledger.models import damage as damage_model  # noqa: F401
from gearledger.models import equipment as equipment_model  # noqa: F401
from gearledger.models import equipment_color as equipment_color_model  # noqa: F401
from gearledger.models import personnel as personnel_model  # noqa: F401


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def ledger(db_session):
    """Two cohorts with a mix of open, returned, replaced and damaged assignments."""

    first = create_cohort(db_session, "1기")
    second = create_cohort(db_session, "2기")
    kim = add_personnel(db_session, first.id, "Kim")
    lee = add_personnel(db_session, first.id, "Lee")
    ahn = add_personnel(db_session, first.id, "Ahn")
    park = add_personnel(db_session, second.id, "Park")

    kim_row = checkout(db_session, kim.id, "Radio", "R-1", "2024-03-01", remarks="old strap")
    replace_equipment(db_session, kim_row.id, "Radio", "R-2")
    lee_row = checkout(db_session, lee.id, "Headset", "H-1", "2024-03-02", remarks="returned early")
    close_checkout(db_session, lee_row.id, "2024-03-05")
    park_row = checkout(db_session, park.id, "Radio", "R-3", "2024-03-03")
    report = report_damage(db_session, park_row.equipment_id, "cracked case", "2024-03-04")
    attach_image(db_session, report.id, "photos/r3.jpg")
    register_equipment(db_session, "Tablet", "T-1")
    return {"first": first, "second": second, "kim": kim, "lee": lee, "ahn": ahn, "park": park}


def test_status_totals(db_session, ledger):
    totals = views.status_totals(db_session)

    assert totals == {
        "IN_STOCK": 1,
        "NEEDS_INSPECTION": 2,
        "CHECKED_OUT": 1,
        "DAMAGED": 1,
        "total": 5,
    }


def test_type_counts_ignore_status(db_session, ledger):
    assert views.type_counts(db_session) == [
        {"type": "Headset", "total": 1},
        {"type": "Radio", "total": 3},
        {"type": "Tablet", "total": 1},
    ]


def test_cohort_summaries_count_open_latest_rows(db_session, ledger):
    rows = {row["name"]: row for row in views.cohort_summaries(db_session)}

    assert rows["1기"]["total_personnel"] == 3
    assert rows["1기"]["checked_out_count"] == 1
    assert rows["2기"]["total_personnel"] == 1
    assert rows["2기"]["checked_out_count"] == 1

    set_cohort_hidden(db_session, ledger["second"].id, True)
    visible = views.cohort_summaries(db_session, include_hidden=False)
    assert [row["name"] for row in visible] == ["1기"]


def test_cohort_type_matrix(db_session, ledger):
    matrix = views.cohort_type_matrix(db_session)

    assert [(row["cohort_name"], row["equipment_type"], row["count"]) for row in matrix] == [
        ("1기", "Radio", 1),
        ("2기", "Radio", 1),
    ]


def test_roster_joins_latest_checkout(db_session, ledger):
    roster = views.roster(db_session, ledger["first"].id)

    assert [row["personnel_name"] for row in roster] == ["Ahn", "Kim", "Lee"]
    ahn, kim, lee = roster
    assert ahn["checkout_id"] is None
    assert ahn["is_open"] is False
    assert kim["serial_number"] == "R-2"
    assert kim["previous_serials"] == ["R-1"]
    assert kim["is_open"] is True
    assert lee["return_date"] == "2024-03-05"
    assert lee["status"] == "NEEDS_INSPECTION"


def test_available_inventory_carries_last_remarks(db_session, ledger):
    in_stock = views.available_inventory(db_session)
    assert [row["serial_number"] for row in in_stock] == ["T-1"]
    assert in_stock[0]["remarks"] is None

    with_pending = views.available_inventory(db_session, include_pending=True)
    assert [row["serial_number"] for row in with_pending] == ["T-1", "H-1", "R-1"]
    by_serial = {row["serial_number"]: row for row in with_pending}
    assert by_serial["H-1"]["remarks"] == "returned early"


def test_damaged_items_show_latest_report(db_session, ledger):
    item_id = views.damaged_items(db_session)[0]["equipment_id"]
    report_damage(db_session, item_id, "battery swollen", "2024-03-10")

    damaged = views.damaged_items(db_session)

    assert len(damaged) == 1
    assert damaged[0]["serial_number"] == "R-3"
    assert damaged[0]["description"] == "battery swollen"
    assert damaged[0]["images"] == []


def test_equipment_overview_orders_by_status(db_session, ledger):
    overview = views.equipment_overview(db_session)

    assert [row["status"] for row in overview] == [
        "IN_STOCK",
        "NEEDS_INSPECTION",
        "NEEDS_INSPECTION",
        "CHECKED_OUT",
        "DAMAGED",
    ]
    by_serial = {row["serial_number"]: row for row in overview}
    assert by_serial["R-2"]["person_name"] == "Kim"
    assert by_serial["R-2"]["cohort_name"] == "1기"
    assert by_serial["R-3"]["person_name"] == "Park"
    assert by_serial["H-1"]["person_name"] is None
    assert by_serial["H-1"]["remarks"] == "returned early"
