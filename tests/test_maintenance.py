import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine, func, select, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from gearledger.crud.checkouts import checkout
from gearledger.crud.cohorts import create_cohort
from gearledger.crud.colors import set_type_color
from gearledger.crud.damage import report_damage
from gearledger.crud.personnel import add_personnel
from gearledger.db.migrate import run_migrations
from gearledger.db.session import Base
from gearledger.models.checkout import Checkout
from gearledger.models.cohort import Cohort
from gearledger.models.equipment import Equipment
from gearledger.models.personnel import Personnel
from gearledger.services.maintenance import factory_reset

# Ensure models are imported so metadata is populated
from gearledger.models import damage as damage_model  # noqa: F401
from gearledger.models import equipment_color as equipment_color_model  # noqa: F401


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


def _count(db_session, model):
    return db_session.scalar(select(func.count()).select_from(model))


def test_factory_reset_wipes_every_table(db_session):
    cohort = create_cohort(db_session, "1기")
    person = add_personnel(db_session, cohort.id, "Kim")
    row = checkout(db_session, person.id, "Radio", "R-1")
    report_damage(db_session, row.equipment_id, "dent")
    set_type_color(db_session, "Radio", "#123456")

    removed = factory_reset(db_session)

    assert removed == {
        "damage_reports": 1,
        "checkouts": 1,
        "personnel": 1,
        "equipment": 1,
        "cohorts": 1,
        "equipment_colors": 1,
    }
    for model in (Cohort, Personnel, Equipment, Checkout):
        assert _count(db_session, model) == 0

    fresh = create_cohort(db_session, "2기")
    assert fresh.id == 1
    assert fresh.sort_order == 1


def test_factory_reset_on_empty_store(db_session):
    removed = factory_reset(db_session)

    assert set(removed.values()) == {0}


def test_run_migrations_upgrades_old_schema():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE cohorts (id INTEGER PRIMARY KEY, name TEXT NOT NULL UNIQUE)"))
        conn.execute(text("CREATE TABLE personnel (id INTEGER PRIMARY KEY, cohort_id INTEGER, name TEXT NOT NULL)"))
        conn.execute(
            text("CREATE TABLE equipment (id INTEGER PRIMARY KEY, type TEXT, serial_number TEXT UNIQUE, status TEXT)")
        )
        conn.execute(
            text(
                "CREATE TABLE checkouts (id INTEGER PRIMARY KEY, personnel_id INTEGER, equipment_id INTEGER,"
                " checkout_date TEXT, return_date TEXT)"
            )
        )
        conn.execute(
            text("CREATE TABLE damage_reports (id INTEGER PRIMARY KEY, equipment_id INTEGER, report_date TEXT, description TEXT)")
        )
        conn.execute(text("INSERT INTO cohorts (id, name) VALUES (1, '1기')"))
        conn.execute(text("INSERT INTO personnel (id, cohort_id, name) VALUES (1, 1, 'Kim'), (2, 1, 'Lee')"))
        conn.execute(
            text("INSERT INTO equipment (id, type, serial_number, status) VALUES (1, 'Radio', 'R-1', 'NEEDS_INSPECTION'),"
                 " (2, 'Radio', 'R-2', 'CHECKED_OUT')")
        )
        conn.execute(
            text(
                "INSERT INTO checkouts (id, personnel_id, equipment_id, checkout_date, return_date) VALUES"
                " (1, 1, 1, '2024-01-01', '2024-01-05'), (2, 1, 2, '2024-01-06', NULL)"
            )
        )

    Base.metadata.create_all(bind=engine)
    run_migrations(engine)
    run_migrations(engine)

    with engine.connect() as conn:
        cohort_cols = {row[1] for row in conn.execute(text("PRAGMA table_info(cohorts)"))}
        checkout_cols = {row[1] for row in conn.execute(text("PRAGMA table_info(checkouts)"))}
        pointers = dict(conn.execute(text("SELECT id, active_checkout_id FROM personnel")).all())

    assert {"color", "sort_order", "is_hidden"} <= cohort_cols
    assert {"previous_serial", "remarks"} <= checkout_cols
    assert pointers == {1: 2, 2: None}
