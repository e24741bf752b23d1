from datetime import date

from flask import Blueprint, g, jsonify, request

from src.routes import form_data
from src.routes.auth import login_required
from src.services import clinic_service
from src.services.errors import ValidationMissing


agenda_bp = Blueprint("agenda", __name__, url_prefix="/agenda")


def _int_arg(name: str, default: int) -> int:
    """Query-string integer; a present but non-numeric value is an error, not the default."""
    raw = request.args.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationMissing(name, f"The field '{name}' is invalid.")


@agenda_bp.route("", methods=["GET"])
@login_required
def month_view():
    """
    Monthly calendar. Defaults to the current clinic month;
    ?year=2024&month=3 picks another one.
    """
    now = clinic_service.clinic_now()
    year = _int_arg("year", now.year)
    month = _int_arg("month", now.month)
    return jsonify(clinic_service.build_month_calendar(g.user["id"], year, month))


@agenda_bp.route("/day/<day>", methods=["GET"])
@login_required
def day_view(day):
    try:
        day = date.fromisoformat(day).isoformat()
    except ValueError:
        raise ValidationMissing("day", "The field 'day' must be a YYYY-MM-DD date.")
    appointments = clinic_service.list_appointments_for_day(g.user["id"], day)
    return jsonify({"date": day, "appointments": appointments})


@agenda_bp.route("/patients", methods=["GET"])
@login_required
def patient_choices():
    return jsonify({"patients": clinic_service.list_patients_by_name(g.user["id"])})


@agenda_bp.route("/appointments", methods=["POST"])
@login_required
def book_appointment():
    appt = clinic_service.create_appointment(g.user["id"], form_data())
    return jsonify({"appointment": appt, "message": "Appointment booked."}), 201
