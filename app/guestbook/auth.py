from __future__ import annotations

import hmac
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any

import jwt
from flask import Blueprint, Request, current_app, g, jsonify, request
from werkzeug.security import check_password_hash, generate_password_hash

from app.guestbook.errors import InvalidCredentials, InvalidToken, MissingToken
from app.guestbook.extensions import current_admin_auth

bp = Blueprint("auth", __name__)

TOKEN_ALGORITHM = "HS256"


@dataclass(frozen=True)
class AdminAuth:
    """
    The single admin principal: who it is, how its password is checked, and
    how its session tokens are signed. Built once at startup.
    """

    username: str
    password_hash: str
    secret: str
    token_ttl: timedelta = timedelta(hours=24)

    @classmethod
    def from_config(cls, config: dict) -> "AdminAuth":
        # Salted hash computed once; the plaintext is never compared directly.
        password_hash = config.get("ADMIN_PASSWORD_HASH") or generate_password_hash(config["ADMIN_PASSWORD"])
        return cls(
            username=config["ADMIN_USERNAME"],
            password_hash=password_hash,
            secret=config["JWT_SECRET"],
            token_ttl=timedelta(hours=int(config.get("TOKEN_TTL_HOURS") or 24)),
        )

    def check_credentials(self, username: Any, password: Any) -> bool:
        username = username if isinstance(username, str) else ""
        password = password if isinstance(password, str) else ""
        username_ok = hmac.compare_digest(username.encode("utf-8"), self.username.encode("utf-8"))
        # Always hash, so a wrong username costs as much as a wrong password.
        password_ok = check_password_hash(self.password_hash, password)
        return username_ok and password_ok

    def issue_token(self, username: str, *, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "username": username,
            "iat": issued_at,
            "exp": issued_at + self.token_ttl,
        }
        return jwt.encode(claims, self.secret, algorithm=TOKEN_ALGORITHM)

    def login(self, username: Any, password: Any) -> str:
        if not self.check_credentials(username, password):
            raise InvalidCredentials()
        return self.issue_token(self.username)

    def verify(self, token: str | None) -> str:
        """Return the principal bound to a valid token; MissingToken / InvalidToken otherwise."""
        if not token:
            raise MissingToken()
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[TOKEN_ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except jwt.InvalidTokenError as e:
            raise InvalidToken() from e
        username = claims.get("username")
        if not isinstance(username, str) or not hmac.compare_digest(username.encode("utf-8"), self.username.encode("utf-8")):
            raise InvalidToken()
        return username


def token_from_request(req: Request) -> str | None:
    """
    Bearer header first, then ?token=. The query form exists for browser
    download links, which cannot set headers.
    """
    header = req.headers.get("Authorization") or ""
    parts = header.split(None, 1)
    if len(parts) == 2 and parts[0].lower() == "bearer" and parts[1].strip():
        return parts[1].strip()
    return (req.args.get("token") or "").strip() or None


def require_admin(fn: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        g.admin_username = current_admin_auth().verify(token_from_request(request))
        return fn(*args, **kwargs)

    return wrapped


@bp.post("/login")
def login():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.form.to_dict()
    username = data.get("username")
    try:
        token = current_admin_auth().login(username, data.get("password"))
    except InvalidCredentials:
        current_app.logger.warning("Admin login failed (username=%r ip=%s)", username, request.remote_addr)
        raise
    current_app.logger.info("Admin login (username=%s ip=%s)", username, request.remote_addr)
    return jsonify({"token": token})


@bp.get("/verify")
@require_admin
def verify():
    return jsonify({"valid": True})
