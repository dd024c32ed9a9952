"""
User endpoints: patient registration, login, staff creation, sessions
"""

from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address
import logging

from app import config
from app.database import get_db
from app.schemas.user import (
    PatientCreate, AdminCreate, DoctorCreate, UserLogin, UserResponse,
    AuthResponse, UserDetailResponse, AdminCreatedResponse,
    DoctorCreatedResponse, DoctorListResponse, MessageResponse
)
from app.models.user import User, UserRole
from app.services.user_service import UserService
from app.services.activity_logger import ActivityLogger
from app.services.avatar_uploader import AvatarUploader, ALLOWED_AVATAR_FORMATS, get_avatar_uploader
from app.auth.auth_handler import auth_handler
from app.auth.guards import admin_required, patient_required
from app.auth.session_cookies import attach_session_cookie, clear_session_cookie
from app.utils.error_handler import AuthenticationError, ValidationError, validation_message

logger = logging.getLogger(__name__)
limiter = Limiter(key_func=get_remote_address, enabled=config.RATE_LIMIT_ENABLED)

router = APIRouter()

INVALID_CREDENTIALS = "Invalid Email Or Password!"


def _start_session(response: Response, user: User) -> None:
    token = auth_handler.create_access_token(user.id)
    attach_session_cookie(response, user.role, token)


@router.post("/register", response_model=AuthResponse, response_model_exclude_none=True)
@limiter.limit("5/minute")
async def register_patient(
    request: Request,
    response: Response,
    user_data: PatientCreate,
    db: Session = Depends(get_db)
):
    """Register a patient account and sign it in"""
    user = await UserService(db).create_user(user_data, UserRole.PATIENT)

    _start_session(response, user)
    await ActivityLogger(db).log_activity("register", request, 200, user_id=user.id, email=user.email)

    return AuthResponse(
        message="User Registered Successfully",
        user=UserResponse.model_validate(user)
    )


@router.post("/login", response_model=AuthResponse, response_model_exclude_none=True)
@limiter.limit("10/minute")
async def login(
    request: Request,
    response: Response,
    login_data: UserLogin,
    db: Session = Depends(get_db)
):
    """Check credentials and set the session cookie for the user's role"""
    user = await UserService(db).authenticate_user(login_data.email, login_data.password)
    activity_logger = ActivityLogger(db)

    if not user:
        await activity_logger.log_activity(
            "login_failed", request, 400, email=login_data.email, error_message=INVALID_CREDENTIALS
        )
        raise AuthenticationError(INVALID_CREDENTIALS)

    _start_session(response, user)
    await activity_logger.log_activity("login", request, 200, user_id=user.id, email=user.email)

    return AuthResponse(
        message="User Logged In Successfully",
        user=UserResponse.model_validate(user)
    )


@router.post("/admin/addnew", response_model=AdminCreatedResponse, response_model_exclude_none=True)
@limiter.limit("20/minute")
async def add_new_admin(
    request: Request,
    admin_data: AdminCreate,
    current_admin: User = Depends(admin_required),
    db: Session = Depends(get_db)
):
    """Create another admin (Admin only)"""
    admin = await UserService(db).create_user(admin_data, UserRole.ADMIN)

    logger.info(f"Admin id={current_admin.id} created admin id={admin.id}")
    await ActivityLogger(db).log_activity("admin_created", request, 200, user_id=admin.id, email=admin.email)

    return AdminCreatedResponse(message="New Admin Registered", admin=UserResponse.model_validate(admin))


@router.post("/doctor/addnew", response_model=DoctorCreatedResponse, response_model_exclude_none=True)
@limiter.limit("20/minute")
async def add_new_doctor(
    request: Request,
    current_admin: User = Depends(admin_required),
    uploader: AvatarUploader = Depends(get_avatar_uploader),
    db: Session = Depends(get_db)
):
    """Create a doctor from a multipart form with a docAvatar image (Admin only)"""
    form = await request.form()

    avatar = form.get("docAvatar")
    if not isinstance(avatar, UploadFile) or not avatar.filename:
        raise ValidationError("Doctor Avatar Required!")
    if avatar.content_type not in ALLOWED_AVATAR_FORMATS:
        raise ValidationError("File Format Not Supported!")

    fields = {key: value for key, value in form.items() if not isinstance(value, UploadFile)}
    try:
        doctor_data = DoctorCreate(**fields)
    except PydanticValidationError as e:
        raise ValidationError(validation_message(e.errors()))

    user_service = UserService(db)
    # Checked before uploading so a duplicate does not leave an orphaned image
    await user_service.ensure_email_available(doctor_data.email, UserRole.DOCTOR)

    doc_avatar = await uploader.upload(avatar.file, avatar.filename)
    doctor = await user_service.create_user(doctor_data, UserRole.DOCTOR, doc_avatar=doc_avatar)

    logger.info(f"Admin id={current_admin.id} created doctor id={doctor.id}")
    await ActivityLogger(db).log_activity("doctor_created", request, 200, user_id=doctor.id, email=doctor.email)

    return DoctorCreatedResponse(message="New Doctor Registered", doctor=UserResponse.model_validate(doctor))


@router.get("/doctors", response_model=DoctorListResponse, response_model_exclude_none=True)
async def get_all_doctors(db: Session = Depends(get_db)):
    """Public doctor directory"""
    doctors = await UserService(db).list_doctors()
    return DoctorListResponse(doctors=[UserResponse.model_validate(doctor) for doctor in doctors])


@router.get("/admin/me", response_model=UserDetailResponse, response_model_exclude_none=True)
async def get_admin_details(current_user: User = Depends(admin_required)):
    return UserDetailResponse(user=UserResponse.model_validate(current_user))


@router.get("/patient/me", response_model=UserDetailResponse, response_model_exclude_none=True)
async def get_patient_details(current_user: User = Depends(patient_required)):
    return UserDetailResponse(user=UserResponse.model_validate(current_user))


@router.api_route("/admin/logout", methods=["GET", "POST"], response_model=MessageResponse)
async def logout_admin(
    request: Request,
    response: Response,
    current_user: User = Depends(admin_required),
    db: Session = Depends(get_db)
):
    """Clear the admin cookie; the token itself stays valid until it expires"""
    clear_session_cookie(response, UserRole.ADMIN)
    await ActivityLogger(db).log_activity("logout", request, 200, user_id=current_user.id, email=current_user.email)
    return MessageResponse(message="Admin Logged Out Successfully.")


@router.api_route("/patient/logout", methods=["GET", "POST"], response_model=MessageResponse)
async def logout_patient(
    request: Request,
    response: Response,
    current_user: User = Depends(patient_required),
    db: Session = Depends(get_db)
):
    """Clear the patient cookie; the token itself stays valid until it expires"""
    clear_session_cookie(response, UserRole.PATIENT)
    await ActivityLogger(db).log_activity("logout", request, 200, user_id=current_user.id, email=current_user.email)
    return MessageResponse(message="Patient Logged Out Successfully.")
