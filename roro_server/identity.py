"""
Subject identity for HTTP requests.

Authentication happens upstream; an authenticated user arrives as the
X-User-Id header. Anonymous visitors are tracked by the roro_sid cookie,
which is issued here when missing or malformed.
"""

import secrets
import string
from typing import Optional

from fastapi import Header, Request, Response

from roro_engine.models.viewer import SubjectIdentity
from roro_engine.sanitize import is_valid_session_id

from .config import get_config

SESSION_COOKIE = "roro_sid"
AB_COOKIE_PREFIX = "roro_ab_"
SESSION_ID_LENGTH = 20

_ALPHABET = string.ascii_letters + string.digits


def new_session_id() -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(SESSION_ID_LENGTH))


def set_cookie(response: Response, key: str, value: str) -> None:
    config = get_config()
    response.set_cookie(
        key,
        value,
        max_age=config.cookie_max_age_days * 24 * 3600,
        httponly=True,
        secure=config.cookie_secure,
        samesite="lax",
    )


def ab_cookie_name(experiment: str) -> str:
    return AB_COOKIE_PREFIX + experiment


def resolve_subject(
    request: Request,
    response: Response,
    x_user_id: Optional[str] = Header(default=None),
) -> SubjectIdentity:
    """FastAPI dependency: user id from header, session id from cookie (issued if needed)."""
    sid = request.cookies.get(SESSION_COOKIE)
    if not is_valid_session_id(sid):
        sid = new_session_id()
        set_cookie(response, SESSION_COOKIE, sid)
    return SubjectIdentity(user_id=x_user_id, session_id=sid)
