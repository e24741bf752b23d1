from functools import wraps

from flask import Blueprint, g, jsonify

from src.routes import form_data
from src.services import session_service


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def login_required(f):
    """Expose the signed-in user as `g.user`; 401 when nobody is signed in."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = session_service.current_user()
        if not user:
            return jsonify({"error": "Please sign in first."}), 401
        g.user = user
        return f(*args, **kwargs)
    return decorated_function


@auth_bp.route("/register", methods=["POST"])
def register():
    form = form_data()
    user = session_service.sign_up(
        email=form.get("email"),
        password=form.get("password"),
        clinic_name=form.get("clinic_name"),
    )
    return jsonify({"user": user}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    form = form_data()
    user = session_service.sign_in(email=form.get("email"), password=form.get("password"))
    return jsonify({"user": user})


@auth_bp.route("/logout", methods=["POST"])
def logout():
    session_service.sign_out()
    return jsonify({"user": None})


@auth_bp.route("/me", methods=["GET"])
def me():
    return jsonify({"user": session_service.current_user()})
