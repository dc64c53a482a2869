from datetime import datetime, timezone

from flask import jsonify
from flask_jwt_extended import JWTManager

from nextdoor.errors import AuthRequired
from nextdoor.models import Token
from nextdoor.models.enumerations import TokenType
from nextdoor.utils.logging_utils import get_logger


def _login_prompt(reason: str):
    get_logger("auth").info("JWT refused (%s)", reason)
    payload = AuthRequired("Please log in").to_dict()
    payload["redirect"] = "/login"
    return jsonify(payload), AuthRequired.status_code


def init_jwt_callbacks(jwt: JWTManager):
    """Wire logout blocklisting and the 401 shape onto ``jwt``."""

    @jwt.token_in_blocklist_loader
    def _is_logged_out(jwt_header, jwt_payload):
        jti = jwt_payload.get("jti")
        if not jti:
            return False
        blocked = Token.query.filter(
            Token.token_type == TokenType.BLOCK,
            Token.jti == jti,
            Token.expires_at > datetime.now(timezone.utc),
        )
        return blocked.first() is not None

    jwt.unauthorized_loader(_login_prompt)
    jwt.invalid_token_loader(_login_prompt)
    jwt.expired_token_loader(lambda header, payload: _login_prompt("expired"))
    jwt.revoked_token_loader(lambda header, payload: _login_prompt("logged out"))