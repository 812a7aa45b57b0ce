# ssrportal/controllers/auth_controller.py
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import create_access_token

from ssrportal.errors import FieldError, Unauthorized, ValidationError
from ssrportal.models.user import User

bp_auth = Blueprint('auth', __name__, url_prefix='/api/auth')


def issue_token(user):
    return create_access_token(identity=str(user.id), additional_claims={"role": user.role.value})


@bp_auth.post('/login')
def login():
    payload = request.get_json(silent=True) or {}
    email = (payload.get("email") or "").strip().lower()
    password = payload.get("password") or ""

    errors = []
    if not email:
        errors.append(FieldError("email", "Email is required"))
    if not password:
        errors.append(FieldError("password", "Password is required"))
    if errors:
        raise ValidationError(errors)

    user = User.query.filter_by(email=email).first()
    if user is None or not user.check_password(password):
        current_app.logger.warning(f"Failed login for {email}")
        raise Unauthorized("Invalid email or password")

    expires = current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
    return jsonify({
        "token": issue_token(user),
        "tokenType": "Bearer",
        "expiresIn": int(expires.total_seconds()),
        "role": user.role.value,
    }), 200
