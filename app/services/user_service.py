"""
User service for registration, credential checks and user lookups
Handles all user-related business logic
"""

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from fastapi.concurrency import run_in_threadpool
from typing import Optional, List
import logging

from app.models.user import User, UserRole
from app.auth.auth_handler import AuthHandler
from app.utils.error_handler import ConflictError, DatabaseError, ValidationError

logger = logging.getLogger(__name__)

CONFLICT_MESSAGES = {
    UserRole.PATIENT: "User already Registered!",
    UserRole.ADMIN: "Admin With This Email Already Exists!",
    UserRole.DOCTOR: "Doctor With This Email Already Exists!",
}


class UserService:
    """Service for user management operations"""

    def __init__(self, db: Session):
        self.db = db
        self.auth_handler = AuthHandler()

    async def create_user(self, user_data, role: UserRole, doc_avatar: Optional[dict] = None) -> User:
        """Create a user with the given role.

        The email check here is only a first pass: two concurrent registrations
        can both get past it, in which case the unique index rejects the second
        insert and it is reported with the same conflict message.
        """
        role = UserRole(role)
        email = user_data.email.lower()

        if role is UserRole.DOCTOR and not (getattr(user_data, "doctor_department", None) and doc_avatar):
            raise ValidationError("Doctor department and avatar are required")

        await self.ensure_email_available(email, role)

        hashed_password = await run_in_threadpool(self.auth_handler.get_password_hash, user_data.password)

        db_user = User(
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            email=email,
            phone=user_data.phone,
            gender=user_data.gender,
            national_id=user_data.national_id,
            dob=user_data.dob,
            hashed_password=hashed_password,
            role=role,
        )
        if role is UserRole.DOCTOR:
            db_user.doctor_department = user_data.doctor_department
            db_user.doc_avatar = doc_avatar

        try:
            self.db.add(db_user)
            self.db.commit()
            self.db.refresh(db_user)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Unique index rejected duplicate email {email}: {e.orig}")
            raise ConflictError(CONFLICT_MESSAGES[role])
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create user: {e}")
            raise DatabaseError("Failed to create user account", e)

        logger.info(f"Created new {role.value}: {db_user.email} (id={db_user.id})")
        return db_user

    async def ensure_email_available(self, email: str, role: UserRole) -> None:
        if await self.get_user_by_email(email):
            raise ConflictError(CONFLICT_MESSAGES[UserRole(role)])

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """Return the user when the credentials match, otherwise None.

        Callers cannot tell an unknown email from a wrong password.
        """
        user = await self.get_user_by_email(email)

        if not user:
            await run_in_threadpool(self.auth_handler.verify_against_dummy, password)
            logger.warning(f"Login attempt with unknown email: {email}")
            return None

        if not await run_in_threadpool(self.auth_handler.verify_password, password, user.hashed_password):
            logger.warning(f"Failed login attempt for user id={user.id}")
            return None

        logger.info(f"Successful login for user id={user.id}")
        return user

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID"""
        try:
            return self.db.query(User).filter(User.id == user_id).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to get user by ID {user_id}: {e}")
            raise DatabaseError("Failed to load user", e)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email"""
        try:
            return self.db.query(User).filter(User.email == email.lower()).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise DatabaseError("Failed to load user", e)

    async def list_doctors(self) -> List[User]:
        try:
            return (
                self.db.query(User)
                .filter(User.role == UserRole.DOCTOR.value)
                .order_by(User.last_name, User.first_name)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to list doctors: {e}")
            raise DatabaseError("Failed to list doctors", e)
