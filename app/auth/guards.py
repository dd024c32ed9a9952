"""
Role-gated access to protected routes

Each protected route names the role it expects. The guard reads only that
role's cookie, so a token is never trusted just because it arrived under some
other cookie name.
"""

import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.auth.auth_handler import auth_handler
from app.auth.session_cookies import (
    SESSION_COOKIES,
    cookie_name_for_role,
    read_session_cookie,
)
from app.database import get_db
from app.models.user import User, UserRole
from app.services.user_service import UserService
from app.utils.error_handler import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = {
    UserRole.ADMIN: "Dashboard User is not authenticated!",
    UserRole.PATIENT: "User is not authenticated!",
    UserRole.DOCTOR: "User is not authenticated!",
}


class RoleGuard:
    """Dependency that authenticates the session cookie and checks the user's role"""

    def __init__(self, role: UserRole):
        self.role = UserRole(role)

    async def __call__(self, request: Request, db: Session = Depends(get_db)) -> User:
        token = read_session_cookie(request, self.role)
        if not token:
            self._reject_missing_session(request)

        payload = auth_handler.verify_token(token)
        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise AuthenticationError("Json Web Token is invalid, Try again!")

        user = await UserService(db).get_user_by_id(user_id)
        if user is None:
            logger.info(f"Session token refers to missing user id={user_id}")
            raise AuthenticationError(NOT_AUTHENTICATED[self.role])

        if user.role != self.role.value:
            logger.warning(f"{user.role} id={user.id} denied access to {request.url.path}")
            raise AuthorizationError(f"{user.role} not authorized for this resource!")

        request.state.user = user
        return user

    def _reject_missing_session(self, request: Request):
        """Tell "signed in, but as someone else" apart from "not signed in"."""
        own_cookie = cookie_name_for_role(self.role)
        for name in SESSION_COOKIES:
            other_token = request.cookies.get(name)
            if name == own_cookie or not other_token:
                continue
            try:
                auth_handler.verify_token(other_token)
            except AuthenticationError:
                continue
            raise AuthorizationError(f"Session in {name} is not authorized for this resource!")

        raise AuthenticationError(NOT_AUTHENTICATED[self.role])


admin_required = RoleGuard(UserRole.ADMIN)
patient_required = RoleGuard(UserRole.PATIENT)
