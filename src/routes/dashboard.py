from flask import Blueprint, g, jsonify

from src.routes.auth import login_required
from src.services.clinic_service import get_dashboard_snapshot


dashboard_bp = Blueprint("dashboard", __name__)


@dashboard_bp.route("/", methods=["GET"])
@dashboard_bp.route("/dashboard", methods=["GET"])
@login_required
def dashboard_home():
    """
    Clinic overview: total patients and today's appointments.
    """
    context = get_dashboard_snapshot(g.user["id"])
    context["clinic_name"] = g.user.get("clinic_name")
    return jsonify(context)
