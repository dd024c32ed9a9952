"""
Role-specific session cookies

Admins and patients get different cookie names so one browser can hold both
sessions at once. Setting and clearing share one attribute set; a clearing
cookie whose attributes differ from the original is ignored by browsers.
"""

from typing import Optional

from fastapi import Request, Response

from app.auth.auth_handler import token_lifetime
from app.models.user import UserRole

ADMIN_COOKIE = "adminToken"
PATIENT_COOKIE = "patientToken"

SESSION_COOKIES = (ADMIN_COOKIE, PATIENT_COOKIE)


def cookie_name_for_role(role) -> str:
    """Admins use adminToken; patients and doctors share patientToken"""
    if UserRole(role) is UserRole.ADMIN:
        return ADMIN_COOKIE
    return PATIENT_COOKIE


def _cookie_attributes() -> dict:
    return {
        "path": "/",
        "secure": True,
        "httponly": True,
        "samesite": "none",
    }


def attach_session_cookie(response: Response, role, token: str) -> None:
    lifetime = int(token_lifetime().total_seconds())
    response.set_cookie(
        cookie_name_for_role(role),
        token,
        max_age=lifetime,
        expires=lifetime,
        **_cookie_attributes(),
    )


def clear_session_cookie(response: Response, role) -> None:
    response.set_cookie(
        cookie_name_for_role(role),
        "",
        max_age=0,
        expires=0,
        **_cookie_attributes(),
    )


def read_session_cookie(request: Request, role) -> Optional[str]:
    return request.cookies.get(cookie_name_for_role(role)) or None
