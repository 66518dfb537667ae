"""
Accessors for the per-app singletons built in create_app().

Views fetch handles here and pass them into service functions explicitly;
services never reach for Flask globals themselves.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from flask import current_app

if TYPE_CHECKING:
    from app.guestbook.auth import AdminAuth
    from app.guestbook.storage import SignatureStore


def current_store() -> "SignatureStore":
    return current_app.extensions["signature_store"]


def current_admin_auth() -> "AdminAuth":
    return current_app.extensions["admin_auth"]
