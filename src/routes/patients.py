from flask import Blueprint, g, jsonify

from src.routes import form_data
from src.routes.auth import login_required
from src.services import clinic_service


patients_bp = Blueprint("patients", __name__)


@patients_bp.route("/patients", methods=["GET"])
@login_required
def list_patients():
    return jsonify({"patients": clinic_service.list_patients(g.user["id"])})


@patients_bp.route("/patients", methods=["POST"])
@login_required
def add_patient():
    patient = clinic_service.create_patient(g.user["id"], form_data())
    return jsonify({"patient": patient, "message": "Patient registered."}), 201


@patients_bp.route("/patients/<patient_id>", methods=["GET"])
@login_required
def patient_detail(patient_id):
    """Patient record with visit history (newest first)."""
    return jsonify(clinic_service.get_patient_record(g.user["id"], patient_id))


@patients_bp.route("/patients/<patient_id>", methods=["POST", "PATCH"])
@login_required
def edit_patient(patient_id):
    patient = clinic_service.update_patient(g.user["id"], patient_id, form_data())
    return jsonify({"patient": patient, "message": "Patient updated."})


@patients_bp.route("/patients/<patient_id>/visits", methods=["POST"])
@login_required
def add_visit(patient_id):
    visit = clinic_service.create_visit(g.user["id"], patient_id, form_data())
    return jsonify({"visit": visit, "message": "Visit recorded."}), 201
