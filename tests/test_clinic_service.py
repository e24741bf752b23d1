import pytest

from src.services import clinic_service as cs
from src.services.errors import NotFound, ValidationMissing


def _patient(owner, name="Maria Lopez", phone="600111222", **extra):
    return cs.create_patient(owner["id"], {"name": name, "phone": phone, **extra})


# -------------------------------
# Patients
# -------------------------------

def test_created_patient_is_listed_most_recent_first(app, owner):
    first = _patient(owner, name="First")
    second = _patient(owner, name="Second")

    listed = cs.list_patients(owner["id"])

    assert [p["id"] for p in listed] == [second["id"], first["id"]]
    assert listed[0]["user_id"] == owner["id"]


def test_patients_are_scoped_by_owner(app, owner):
    from src.services import session_service

    other = session_service.sign_up("other@example.com", "pw", "Other")
    _patient(owner, name="Mine")
    _patient(other, name="Theirs")

    assert [p["name"] for p in cs.list_patients(owner["id"])] == ["Mine"]
    assert cs.count_patients(other["id"]) == 1


def test_optional_patient_fields_default_to_none(app, owner):
    patient = _patient(owner, email="  ", address="Calle 1")

    assert patient["email"] is None
    assert patient["birth_date"] is None
    assert patient["address"] == "Calle 1"
    assert patient["id"].startswith("pat_")


@pytest.mark.parametrize("missing", ["name", "phone"])
def test_create_patient_requires_name_and_phone(app, owner, missing):
    data = {"name": "Maria", "phone": "600111222"}
    data[missing] = ""

    with pytest.raises(ValidationMissing) as exc:
        cs.create_patient(owner["id"], data)
    assert exc.value.field == missing
    assert cs.list_patients(owner["id"]) == []


def test_update_phone_keeps_other_fields(app, owner):
    patient = _patient(owner, email="maria@example.com", allergies="Penicillin")

    cs.update_patient(owner["id"], patient["id"], {"phone": "699000000"})
    fetched = cs.get_patient(owner["id"], patient["id"])

    assert fetched["phone"] == "699000000"
    assert fetched["name"] == patient["name"]
    assert fetched["email"] == "maria@example.com"
    assert fetched["allergies"] == "Penicillin"
    assert fetched["created_at"] == patient["created_at"]


def test_update_ignores_non_patient_fields(app, owner):
    patient = _patient(owner)

    updated = cs.update_patient(owner["id"], patient["id"], {"user_id": "someone-else", "address": "New"})

    assert updated["user_id"] == owner["id"]
    assert updated["address"] == "New"


def test_update_cannot_blank_name(app, owner):
    patient = _patient(owner)

    with pytest.raises(ValidationMissing):
        cs.update_patient(owner["id"], patient["id"], {"name": " "})


def test_update_unknown_patient_is_not_found(app, owner):
    with pytest.raises(NotFound):
        cs.update_patient(owner["id"], "pat_missing", {"phone": "1"})


def test_get_patient_of_other_owner_is_not_found(app, owner):
    patient = _patient(owner)

    with pytest.raises(NotFound):
        cs.get_patient("someone-else", patient["id"])


def test_patients_by_name_are_alphabetical(app, owner):
    _patient(owner, name="Zoe")
    _patient(owner, name="Ana")

    assert [p["name"] for p in cs.list_patients_by_name(owner["id"])] == ["Ana", "Zoe"]


# -------------------------------
# Visits
# -------------------------------

def test_visits_are_listed_by_date_descending(app, owner):
    patient = _patient(owner)
    cs.create_visit(owner["id"], patient["id"], {"date": "2024-01-10", "treatment": "Cleaning"})
    cs.create_visit(owner["id"], patient["id"], {"date": "2024-03-02", "treatment": "Filling", "cost": "80.5"})

    record = cs.get_patient_record(owner["id"], patient["id"])

    assert record["patient"]["id"] == patient["id"]
    assert [v["treatment"] for v in record["visits"]] == ["Filling", "Cleaning"]
    assert record["visits"][0]["cost"] == 80.5
    assert record["visits"][1]["cost"] is None


def test_visit_for_unknown_patient_is_not_found(app, owner):
    with pytest.raises(NotFound):
        cs.create_visit(owner["id"], "pat_missing", {"date": "2024-01-10", "treatment": "Cleaning"})


def test_visit_requires_treatment(app, owner):
    patient = _patient(owner)

    with pytest.raises(ValidationMissing) as exc:
        cs.create_visit(owner["id"], patient["id"], {"date": "2024-01-10"})
    assert exc.value.field == "treatment"


def test_visit_with_bad_cost_is_rejected(app, owner):
    patient = _patient(owner)

    with pytest.raises(ValidationMissing) as exc:
        cs.create_visit(owner["id"], patient["id"], {"date": "2024-01-10", "treatment": "X", "cost": "cheap"})
    assert exc.value.field == "cost"


# -------------------------------
# Appointments
# -------------------------------

def test_appointment_appears_only_in_its_month(app, owner):
    patient = _patient(owner)
    cs.create_appointment(owner["id"], {"patient_id": patient["id"], "date": "2024-03-15", "time": "10:00"})

    march = cs.list_appointments(owner["id"], "2024-03-01", "2024-03-31")
    february = cs.list_appointments(owner["id"], "2024-02-01", "2024-02-29")

    assert [a["date"] for a in march] == ["2024-03-15"]
    assert march[0]["patient_name"] == patient["name"]
    assert february == []


def test_month_range_bounds_are_inclusive(app, owner):
    patient = _patient(owner)
    for day in ("2024-02-29", "2024-03-01", "2024-03-31", "2024-04-01"):
        cs.create_appointment(owner["id"], {"patient_id": patient["id"], "date": day, "time": "09:00"})

    dates = sorted(a["date"] for a in cs.list_appointments_for_month(owner["id"], 2024, 3))

    assert dates == ["2024-03-01", "2024-03-31"]


def test_appointments_are_ordered_by_time(app, owner):
    patient = _patient(owner)
    for time in ("16:30", "09:00", "11:15"):
        cs.create_appointment(owner["id"], {"patient_id": patient["id"], "date": "2024-03-15", "time": time})

    day = cs.list_appointments_for_day(owner["id"], "2024-03-15")

    assert [a["time"] for a in day] == ["09:00", "11:15", "16:30"]


def test_appointment_requires_patient(app, owner):
    with pytest.raises(ValidationMissing) as exc:
        cs.create_appointment(owner["id"], {"patient_id": "", "date": "2024-03-15", "time": "10:00"})
    assert exc.value.field == "patient_id"


def test_appointment_for_unknown_patient_is_not_found(app, owner):
    with pytest.raises(NotFound):
        cs.create_appointment(owner["id"], {"patient_id": "pat_missing", "date": "2024-03-15", "time": "10:00"})


# -------------------------------
# Dashboard / calendar
# -------------------------------

def test_month_bounds_handles_leap_years():
    assert cs.month_bounds(2024, 2) == ("2024-02-01", "2024-02-29")
    assert cs.month_bounds(2023, 2) == ("2023-02-01", "2023-02-28")
    assert cs.month_bounds(2024, 12) == ("2024-12-01", "2024-12-31")


def test_shift_month_wraps_years():
    assert cs.shift_month(2024, 1, -1) == (2023, 12)
    assert cs.shift_month(2024, 12, 1) == (2025, 1)
    assert cs.shift_month(2024, 6, 1) == (2024, 7)


def test_month_calendar_grid(app, owner):
    patient = _patient(owner)
    cs.create_appointment(owner["id"], {"patient_id": patient["id"], "date": "2024-03-15", "time": "10:00"})

    grid = cs.build_month_calendar(owner["id"], 2024, 3)

    # 2024-03-01 was a Friday: five blank cells in a Sunday-first week
    assert grid["leading_blanks"] == 5
    assert grid["days_in_month"] == 31
    assert len(grid["days"]) == 31
    assert [a["time"] for a in grid["days"][14]["appointments"]] == ["10:00"]
    assert grid["days"][13]["appointments"] == []
    assert grid["previous"] == {"year": 2024, "month": 2}
    assert grid["next"] == {"year": 2024, "month": 4}


def test_dashboard_snapshot_counts_patients_and_today(app, owner, monkeypatch):
    from datetime import datetime

    import pytz

    monkeypatch.setattr(cs, "clinic_now", lambda: datetime(2024, 3, 15, 8, 0, tzinfo=pytz.UTC))
    patient = _patient(owner)
    _patient(owner, name="Other")
    cs.create_appointment(owner["id"], {"patient_id": patient["id"], "date": "2024-03-15", "time": "12:00"})
    cs.create_appointment(owner["id"], {"patient_id": patient["id"], "date": "2024-03-16", "time": "08:00"})

    snapshot = cs.get_dashboard_snapshot(owner["id"])

    assert snapshot["total_patients"] == 2
    assert snapshot["today"] == "2024-03-15"
    assert [a["time"] for a in snapshot["today_appointments"]] == ["12:00"]


def test_clinic_now_falls_back_to_utc_for_unknown_zone(app):
    app.config["CLINIC_TIMEZONE"] = "Mars/Olympus"

    assert cs.clinic_now().tzinfo.zone == "UTC"


@pytest.mark.parametrize("year, month", [(0, 1), (10000, 1), (2024, 0), (2024, 13)])
def test_month_calendar_rejects_bad_year_or_month(app, owner, year, month):
    with pytest.raises(ValidationMissing):
        cs.build_month_calendar(owner["id"], year, month)
