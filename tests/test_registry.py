import os
import sys
from datetime import date
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from gearledger.core.dates import normalize_date
from gearledger.core.errors import ConflictError, NotFoundError, ValidationError
from gearledger.core.serials import require_serial, split_display_name, split_serials
from gearledger.core.status import EquipmentStatus, coerce_status, settle
from gearledger.crud.equipment import (
    get_equipment,
    get_equipment_by_serial,
    list_equipment_types,
    mark_damaged,
    mark_inspected,
    mark_returned,
    register_equipment,
    resolve_or_create,
)
from gearledger.db.session import Base

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


def test_resolve_or_create_creates_checked_out_item(db_session):
    item = resolve_or_create(db_session, "Radio", "  R-100 ")
    db_session.commit()

    assert item.id is not None
    assert item.serial_number == "R-100"
    assert item.type == "Radio"
    assert item.status == EquipmentStatus.CHECKED_OUT.value


def test_resolve_or_create_overwrites_type_of_existing_item(db_session):
    existing, created = register_equipment(db_session, "Radio", "X-1")
    assert created is True
    assert existing.status == "IN_STOCK"

    item = resolve_or_create(db_session, "Headset", "X-1")
    db_session.commit()

    assert item.id == existing.id
    assert item.type == "Headset"
    assert item.status == "CHECKED_OUT"


def test_resolve_or_create_rejects_item_already_checked_out(db_session):
    resolve_or_create(db_session, "Radio", "R-100")
    db_session.commit()

    with pytest.raises(ConflictError) as excinfo:
        resolve_or_create(db_session, "Radio", "R-100")
    assert excinfo.value.code == "equipment_checked_out"


def test_resolve_or_create_reissues_item_waiting_for_inspection(db_session):
    item = resolve_or_create(db_session, "Radio", "R-100")
    mark_returned(db_session, item)
    db_session.commit()
    assert item.status == "NEEDS_INSPECTION"

    again = resolve_or_create(db_session, "Radio", "R-100")
    assert again.status == "CHECKED_OUT"


def test_mark_returned_keeps_damaged_items_damaged(db_session):
    item = resolve_or_create(db_session, "Radio", "R-100")
    mark_damaged(db_session, item)
    mark_returned(db_session, item)
    db_session.commit()

    assert get_equipment(db_session, item.id).status == "DAMAGED"


def test_mark_inspected_moves_pending_item_to_stock(db_session):
    item = resolve_or_create(db_session, "Radio", "R-100")
    mark_returned(db_session, item)
    db_session.commit()

    inspected = mark_inspected(db_session, item.id)

    assert inspected.status == "IN_STOCK"


@pytest.mark.parametrize("status", ["IN_STOCK", "CHECKED_OUT", "DAMAGED"])
def test_mark_inspected_rejects_items_not_pending(db_session, status):
    item, _ = register_equipment(db_session, "Radio", "R-200")
    item.status = status
    db_session.commit()

    with pytest.raises(ConflictError) as excinfo:
        mark_inspected(db_session, item.id)

    assert excinfo.value.code == "not_pending_inspection"
    assert get_equipment(db_session, item.id).status == status


def test_register_equipment_leaves_existing_serial_alone(db_session):
    item = resolve_or_create(db_session, "Radio", "R-100")
    db_session.commit()

    again, created = register_equipment(db_session, "Tablet", "R-100")

    assert created is False
    assert again.id == item.id
    assert again.type == "Radio"
    assert again.status == "CHECKED_OUT"


def test_lookup_helpers(db_session):
    register_equipment(db_session, "Radio", "R-1")
    register_equipment(db_session, "Headset", "H-1")
    register_equipment(db_session, "Radio", "R-2")

    assert list_equipment_types(db_session) == ["Headset", "Radio"]
    assert get_equipment_by_serial(db_session, "H-1").type == "Headset"
    assert get_equipment_by_serial(db_session, "missing") is None
    with pytest.raises(NotFoundError):
        get_equipment(db_session, 999)


def test_serial_validation():
    assert require_serial(" AB  12 ") == "AB 12"
    with pytest.raises(ValidationError) as excinfo:
        require_serial("   ")
    assert excinfo.value.code == "serial_required"
    with pytest.raises(ValidationError) as excinfo:
        require_serial("A,B")
    assert excinfo.value.code == "serial_malformed"


def test_resolve_or_create_validates_before_writing(db_session):
    with pytest.raises(ValidationError):
        resolve_or_create(db_session, "", "R-1")
    with pytest.raises(ValidationError):
        resolve_or_create(db_session, "Radio", "R,1")
    assert list_equipment_types(db_session) == []


def test_settle_lets_damage_dominate():
    assert settle("CHECKED_OUT", EquipmentStatus.NEEDS_INSPECTION) is EquipmentStatus.NEEDS_INSPECTION
    assert settle("DAMAGED", EquipmentStatus.NEEDS_INSPECTION) is EquipmentStatus.DAMAGED
    assert settle("DAMAGED", EquipmentStatus.CHECKED_OUT) is EquipmentStatus.DAMAGED
    assert coerce_status(None) is EquipmentStatus.IN_STOCK


def test_split_helpers():
    assert split_display_name("Kim (A)") == ("Kim", "A")
    assert split_display_name("홍길동(B)") == ("홍길동", "B")
    assert split_display_name("Lee") == ("Lee", None)
    assert split_serials("S1, S2") == ["S1", "S2"]
    assert split_serials(None) == []


def test_normalize_date_formats():
    assert normalize_date("2024.03.05") == "2024-03-05"
    assert normalize_date("2024/3/5") == "2024-03-05"
    assert normalize_date("20240305") == "2024-03-05"
    assert normalize_date("2024-03-05 10:22:00") == "2024-03-05"
    assert normalize_date(date(2024, 3, 5)) == "2024-03-05"
    assert len(normalize_date(None)) == 10
    with pytest.raises(ValidationError) as excinfo:
        normalize_date("yesterday")
    assert excinfo.value.code == "date_malformed"
