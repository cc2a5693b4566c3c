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

from gearledger.core.errors import NotFoundError, ValidationError
from gearledger.crud.checkouts import checkout
from gearledger.crud.cohorts import create_cohort
from gearledger.crud.damage import attach_image, get_report, list_reports, remove_image, report_damage
from gearledger.crud.equipment import get_equipment, get_equipment_by_serial, register_equipment
from gearledger.crud.personnel import add_personnel
from gearledger.db.session import Base
from gearledger.models.damage import DamageReport, decode_images

# Ensure models are imported so metadata is populated
from gearledger.models import checkout as checkout_model  # noqa: F401
from gearledger.models import cohort as cohort_model  # noqa: F401
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


def test_report_damage_on_checked_out_item(db_session):
    cohort = create_cohort(db_session, "1기")
    person = add_personnel(db_session, cohort.id, "Kim")
    row = checkout(db_session, person.id, "Radio", "R-100")

    report = report_damage(db_session, row.equipment_id, "cracked case", "2024-05-02")

    assert get_equipment_by_serial(db_session, "R-100").status == "DAMAGED"
    stored = get_report(db_session, report.id)
    assert stored.equipment_id == row.equipment_id
    assert stored.serial_number == "R-100"
    assert stored.description == "cracked case"
    assert stored.report_date == "2024-05-02"


def test_report_damage_requires_description(db_session):
    item, _ = register_equipment(db_session, "Radio", "R-1")

    with pytest.raises(ValidationError) as excinfo:
        report_damage(db_session, item.id, "   ")

    assert excinfo.value.code == "description_required"
    assert get_equipment(db_session, item.id).status == "IN_STOCK"
    assert list_reports(db_session) == []


def test_report_damage_on_missing_item(db_session):
    with pytest.raises(NotFoundError):
        report_damage(db_session, 42, "lost")
    assert list_reports(db_session) == []


def test_repeated_reports_stack(db_session):
    item, _ = register_equipment(db_session, "Radio", "R-1")
    report_damage(db_session, item.id, "scratched", "2024-01-01")
    report_damage(db_session, item.id, "screen broken", "2024-02-01")

    reports = list_reports(db_session, equipment_id=item.id)

    assert [r.description for r in reports] == ["screen broken", "scratched"]
    assert get_equipment(db_session, item.id).status == "DAMAGED"


def test_attach_and_remove_images(db_session):
    item, _ = register_equipment(db_session, "Radio", "R-1")
    report = report_damage(db_session, item.id, "dent")

    attach_image(db_session, report.id, "photos/dent-1.jpg")
    report = attach_image(db_session, report.id, "photos/dent-2.jpg")
    attach_image(db_session, report.id, "photos/dent-2.jpg")
    assert get_report(db_session, report.id).images == ["photos/dent-1.jpg", "photos/dent-2.jpg"]

    report = remove_image(db_session, report.id, "photos/dent-1.jpg")
    assert report.images == ["photos/dent-2.jpg"]

    with pytest.raises(NotFoundError):
        remove_image(db_session, report.id, "photos/other.jpg")


def test_image_column_accepts_legacy_values():
    assert decode_images(None) == []
    assert decode_images("C:/photos/a.png") == ["C:/photos/a.png"]
    assert decode_images('["a.png", "b.png"]') == ["a.png", "b.png"]

    report = DamageReport()
    report.images = []
    assert report.image_path is None
