from flask import Blueprint, current_app, jsonify
from flask_login import LoginManager, current_user, login_required, login_user, logout_user

from web.db import get_services
from web.errors import json_object

login_manager = LoginManager()
auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@login_manager.user_loader
def load_user(user_id: str):
    try:
        return get_services().auth.get_by_id(int(user_id))
    except ValueError:
        return None


@login_manager.request_loader
def load_demo_user(_request):
    """Serve session-less requests as the shared demo user when demo mode is on."""
    if current_app.config.get("DEMO_USER"):
        return get_services().auth.get_or_create_demo_user()
    return None


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify(error="Unauthorized"), 401


@auth_bp.route("/register", methods=["POST"])
def register():
    data = json_object()
    try:
        user = get_services().auth.register(
            data.get("email"), data.get("password"), data.get("name")
        )
    except ValueError as e:
        return jsonify(error=str(e)), 400
    login_user(user)
    return jsonify(user.to_public_dict()), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data = json_object()
    user = get_services().auth.authenticate(data.get("email"), data.get("password"))
    if user is None:
        return jsonify(error="Invalid email or password"), 401
    login_user(user)
    return jsonify(user.to_public_dict())


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return jsonify(success=True)


@auth_bp.route("/me")
@login_required
def me():
    return jsonify(current_user.to_public_dict())
