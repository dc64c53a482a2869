# routes/v1/auth_route.py

from datetime import datetime, timezone
from urllib.parse import urlencode

from flask import Blueprint, current_app, jsonify, redirect, request
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    get_jwt,
    get_jwt_identity,
    jwt_required,
    set_access_cookies,
    set_refresh_cookies,
    unset_jwt_cookies,
)
from marshmallow import ValidationError

from nextdoor.extensions import db
from nextdoor.models import Token, User
from nextdoor.schemas import EmailSchema, LoginSchema, RegisterSchema, ResetPasswordSchema, UserSchema
from nextdoor.security_utils import audit_log, coerce_uuid, ip_and_path_key, rate_limit
from nextdoor.utils.decorator import current_user
from nextdoor.utils.logging_utils import get_logger, log_context
from nextdoor.utils.model_utils.auth_utils import (
    redeem_magic_link,
    register_user,
    request_magic_link,
    request_password_reset,
    reset_password,
)

auth_bp = Blueprint("auth_bp", __name__)
callback_bp = Blueprint("callback_bp", __name__)

CALLBACK_ERROR = "Authentication failed. Please try again."


def _issue_tokens(user):
    identity = str(user.id)
    return create_access_token(identity=identity), create_refresh_token(identity=identity)


def _validation_response(err: ValidationError):
    return jsonify({"error": "validation_error", "message": "Invalid input", "details": err.messages}), 400


# ─── Password Accounts ──────────────────────────────────


@auth_bp.route("/register", methods=["POST"])
@rate_limit(ip_and_path_key, limit=10, window_sec=300)
def register():
    try:
        data = RegisterSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return _validation_response(err)

    with log_context(module="auth_route", action="register"):
        user = register_user(data["email"], data["password"], data["display_name"])
        return jsonify({
            "message": "Success! Please check your email to confirm your account.",
            "user": UserSchema().dump(user),
        }), 201


@auth_bp.route("/login", methods=["POST"])
@rate_limit(ip_and_path_key, limit=10, window_sec=300)
def login():
    logger = get_logger("auth")
    try:
        data = LoginSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return _validation_response(err)

    with log_context(module="auth_route", action="login"):
        existing = User.find_by_email(data["email"])
        if existing and existing.is_locked():
            audit_log("login_failed", user_id=existing.id, detail="locked")
            logger.warning("Login rejected for locked account id=%s", existing.id)
            return jsonify({"msg": "Account locked. Please try again later."}), 401

        user = User.authenticate(data["email"], data["password"])
        if not user:
            audit_log("login_failed", user_id=existing.id if existing else None, detail="bad_credentials")
            logger.info("Login failed")
            return jsonify({"msg": "Invalid credentials"}), 401

        access_token, refresh_token = _issue_tokens(user)
        audit_log("login_success", user_id=user.id)
        logger.info("Login succeeded user_id=%s", user.id)
        resp = jsonify({
            "access_token": access_token,
            "refresh_token": refresh_token,
            "user": UserSchema().dump(user),
        })
        set_access_cookies(resp, access_token)
        set_refresh_cookies(resp, refresh_token)
        return resp, 200


@auth_bp.route("/refresh", methods=["POST"])
@jwt_required(refresh=True)
def refresh():
    # current_user() re-verifies and would demand an access token here
    uid = coerce_uuid(get_jwt_identity())
    user = db.session.get(User, uid) if uid else None
    if user is None or not user.is_active:
        return jsonify({"msg": "Invalid credentials"}), 401
    access_token = create_access_token(identity=str(user.id))
    resp = jsonify({"access_token": access_token})
    set_access_cookies(resp, access_token)
    return resp, 200


@auth_bp.route("/logout", methods=["POST"])
@jwt_required()
def logout():
    claims = get_jwt()
    exp = claims.get("exp")
    expires_at = datetime.fromtimestamp(exp, tz=timezone.utc) if exp else datetime.now(timezone.utc)
    uid = coerce_uuid(claims.get("sub"))
    Token.block_jti(claims["jti"], uid, expires_at)
    db.session.commit()
    audit_log("logout", user_id=uid)
    resp = jsonify({"msg": "Successfully logged out"})
    unset_jwt_cookies(resp)
    return resp, 200


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    user = current_user()
    if user is None:
        return jsonify({"error": "auth_required", "message": "Please log in"}), 401
    return jsonify(UserSchema().dump(user)), 200


# ─── Email Links ────────────────────────────────────────


@auth_bp.route("/magic-link", methods=["POST"])
@rate_limit(ip_and_path_key, limit=5, window_sec=300)
def magic_link():
    try:
        data = EmailSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return _validation_response(err)
    with log_context(module="auth_route", action="magic_link"):
        request_magic_link(data["email"])
    return jsonify({"message": "Check your email for the sign-in link."}), 200


@auth_bp.route("/forgot-password", methods=["POST"])
@rate_limit(ip_and_path_key, limit=5, window_sec=900)
def forgot_password():
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    if email:
        with log_context(module="auth_route", action="forgot_password"):
            request_password_reset(email)
    # Same answer whether or not the account exists
    return jsonify({"message": "If an account exists for this email, a reset link has been sent."}), 200


@auth_bp.route("/reset-password", methods=["POST"])
@rate_limit(ip_and_path_key, limit=5, window_sec=900)
def reset_password_route():
    try:
        data = ResetPasswordSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return _validation_response(err)
    with log_context(module="auth_route", action="reset_password"):
        reset_password(data["email"], data["token"], data["password"])
    return jsonify({"ok": True, "message": "Your password has been updated."}), 200


@callback_bp.route("/callback", methods=["GET"])
def auth_callback():
    """Magic-link landing: trade the code for session cookies and continue to the profile page."""
    code = request.args.get("code")
    user = redeem_magic_link(code) if code else None
    if user is None:
        get_logger("auth").warning("Auth callback failed code_present=%s", bool(code))
        return redirect("/login?" + urlencode({"error": CALLBACK_ERROR}))

    user.last_login = datetime.now(timezone.utc)
    db.session.commit()
    access_token, refresh_token = _issue_tokens(user)
    resp = redirect(current_app.config.get("POST_LOGIN_REDIRECT", "/me"))
    set_access_cookies(resp, access_token)
    set_refresh_cookies(resp, refresh_token)
    get_logger("auth").info("Auth callback signed in user_id=%s", user.id)
    return resp
