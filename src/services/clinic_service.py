import calendar
import logging
from datetime import MAXYEAR, MINYEAR, date, datetime

import pytz
from flask import current_app

from src.services.errors import NotFound, ValidationMissing
from src.services.ids import new_id, utc_now_iso
from src.services.schemas import AppointmentIn, PatientIn, PatientPatch, VisitIn, parse
from src.services.storage import get_backend


logger = logging.getLogger("clinic_service")


# -------------------------------
# PATIENT HELPERS
# -------------------------------

def list_patients(owner_id: str) -> list[dict]:
    """Patients of one clinic, newest first."""
    return get_backend().select(
        "patients", eq={"user_id": owner_id}, order_by="created_at", descending=True
    )


def list_patients_by_name(owner_id: str) -> list[dict]:
    """Id + name pairs for the appointment form, alphabetical."""
    rows = get_backend().select("patients", eq={"user_id": owner_id}, order_by="name")
    return [{"id": p["id"], "name": p["name"]} for p in rows]


def count_patients(owner_id: str) -> int:
    return get_backend().count("patients", eq={"user_id": owner_id})


def create_patient(owner_id: str, data: dict) -> dict:
    fields = parse(PatientIn, data)
    patient = {
        "id": new_id("pat"),
        "user_id": owner_id,
        **fields,
        "created_at": utc_now_iso(),
    }
    saved = get_backend().insert("patients", patient)
    logger.info(f"[create_patient] owner={owner_id} patient={saved['id']}")
    return saved


def get_patient(owner_id: str, patient_id: str) -> dict:
    rows = get_backend().select("patients", eq={"id": patient_id, "user_id": owner_id})
    if not rows:
        raise NotFound(f"Patient {patient_id} not found.")
    return rows[0]


def update_patient(owner_id: str, patient_id: str, patch: dict) -> dict:
    """
    Edit-in-place. Only the submitted patient fields change;
    blank optional fields are cleared to None.
    """
    changes = parse(PatientPatch, patch, partial=True)
    updated = get_backend().update("patients", patient_id, changes, eq={"user_id": owner_id})
    if updated is None:
        raise NotFound(f"Patient {patient_id} not found.")
    logger.info(f"[update_patient] owner={owner_id} patient={patient_id} fields={sorted(changes)}")
    return updated


# -------------------------------
# VISIT HELPERS
# -------------------------------

def list_visits(owner_id: str, patient_id: str) -> list[dict]:
    """Visit history for one patient, most recent date first."""
    return get_backend().select(
        "visits",
        eq={"patient_id": patient_id, "user_id": owner_id},
        order_by="date",
        descending=True,
    )


def create_visit(owner_id: str, patient_id: str, data: dict) -> dict:
    fields = parse(VisitIn, data)
    get_patient(owner_id, patient_id)

    visit = {
        "id": new_id("vis"),
        "user_id": owner_id,
        "patient_id": patient_id,
        **fields,
    }
    saved = get_backend().insert("visits", visit)
    logger.info(f"[create_visit] owner={owner_id} patient={patient_id} visit={saved['id']}")
    return saved


def get_patient_record(owner_id: str, patient_id: str) -> dict:
    """Patient detail screen: demographics plus visit history."""
    patient = get_patient(owner_id, patient_id)
    return {"patient": patient, "visits": list_visits(owner_id, patient_id)}


# -------------------------------
# APPOINTMENT HELPERS
# -------------------------------

def month_bounds(year: int, month: int) -> tuple[str, str]:
    """First and last ISO day of a month, e.g. (2024-02-01, 2024-02-29)."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1).isoformat(), date(year, month, last_day).isoformat()


def list_appointments(owner_id: str, start: str, end: str) -> list[dict]:
    """
    Appointments with start <= date <= end, ordered by time,
    each enriched with the referenced patient's name.
    """
    backend = get_backend()
    appointments = backend.select(
        "appointments",
        eq={"user_id": owner_id},
        between=("date", start, end),
        order_by="time",
    )
    if not appointments:
        return []

    names = {p["id"]: p["name"] for p in backend.select("patients", eq={"user_id": owner_id})}
    for appt in appointments:
        # No FK enforcement: a dangling reference just has no name
        appt["patient_name"] = names.get(appt["patient_id"])
    return appointments


def list_appointments_for_month(owner_id: str, year: int, month: int) -> list[dict]:
    start, end = month_bounds(year, month)
    return list_appointments(owner_id, start, end)


def list_appointments_for_day(owner_id: str, day: str) -> list[dict]:
    return list_appointments(owner_id, day, day)


def create_appointment(owner_id: str, data: dict) -> dict:
    fields = parse(AppointmentIn, data)
    get_patient(owner_id, fields["patient_id"])

    appt = {
        "id": new_id("cit"),
        "user_id": owner_id,
        **fields,
    }
    saved = get_backend().insert("appointments", appt)
    logger.info(
        f"[create_appointment] owner={owner_id} patient={saved['patient_id']} "
        f"date={saved['date']} time={saved['time']}"
    )
    return saved


# -------------------------------
# DASHBOARD / CALENDAR
# -------------------------------

def clinic_now() -> datetime:
    try:
        tz = pytz.timezone(current_app.config.get("CLINIC_TIMEZONE") or "UTC")
    except pytz.UnknownTimeZoneError:
        logger.warning("[clinic_now] Unknown CLINIC_TIMEZONE, falling back to UTC")
        tz = pytz.UTC
    return datetime.now(tz)


def get_dashboard_snapshot(owner_id: str) -> dict:
    """Total patients plus today's appointments (time ascending)."""
    now = clinic_now()
    today_str = now.strftime("%Y-%m-%d")

    return {
        "total_patients": count_patients(owner_id),
        "today": today_str,
        "today_label": now.strftime("%A, %b %d"),
        "today_appointments": list_appointments_for_day(owner_id, today_str),
    }


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def build_month_calendar(owner_id: str, year: int, month: int) -> dict:
    """
    Month grid for the agenda view. Weeks start on Sunday, so
    `leading_blanks` is the number of empty cells before day 1.
    """
    if not MINYEAR <= year <= MAXYEAR:
        raise ValidationMissing("year", "The field 'year' is invalid.")
    if not 1 <= month <= 12:
        raise ValidationMissing("month", "The field 'month' is invalid.")

    first_weekday, days_in_month = calendar.monthrange(year, month)
    # calendar counts Monday=0; shift so Sunday=0
    leading_blanks = (first_weekday + 1) % 7

    appointments = list_appointments_for_month(owner_id, year, month)
    by_day: dict[str, list[dict]] = {}
    for appt in appointments:
        by_day.setdefault(appt["date"], []).append(appt)

    today_str = clinic_now().strftime("%Y-%m-%d")
    days = []
    for day in range(1, days_in_month + 1):
        day_str = date(year, month, day).isoformat()
        days.append(
            {
                "day": day,
                "date": day_str,
                "is_today": day_str == today_str,
                "appointments": by_day.get(day_str, []),
            }
        )

    prev_year, prev_month = shift_month(year, month, -1)
    next_year, next_month = shift_month(year, month, 1)
    return {
        "year": year,
        "month": month,
        "label": date(year, month, 1).strftime("%B %Y"),
        "days_in_month": days_in_month,
        "leading_blanks": leading_blanks,
        "days": days,
        "previous": {"year": prev_year, "month": prev_month},
        "next": {"year": next_year, "month": next_month},
    }
