"""
Pydantic schemas for user operations

Request bodies and responses use camelCase keys; Python code uses snake_case.
Identity fields are trimmed; passwords are hashed exactly as sent.
"""

from pydantic import BaseModel, Field, validator, EmailStr
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import date, datetime


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


def _strip(v):
    return v.strip() if isinstance(v, str) else v


def _require_non_blank(v):
    if not v.strip():
        raise ValueError('Please Fill Full Form!')
    return v


class PatientCreate(CamelModel):
    """Patient self-registration; national ID and date of birth are optional"""
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=20)
    gender: str = Field(..., min_length=1, max_length=20)
    password: str = Field(..., min_length=1, max_length=128)
    national_id: Optional[str] = Field(None, max_length=20)
    dob: Optional[date] = None

    @validator('first_name', 'last_name', 'email', 'phone', 'gender', pre=True)
    def strip_identity(cls, v):
        return _strip(v)

    @validator('national_id', 'dob', pre=True)
    def blank_as_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return _strip(v)

    @validator('password')
    def password_not_blank(cls, v):
        return _require_non_blank(v)


class AdminCreate(CamelModel):
    """Staff creation by an admin; every identity field is required"""
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=20)
    gender: str = Field(..., min_length=1, max_length=20)
    password: str = Field(..., min_length=1, max_length=128)
    national_id: str = Field(..., min_length=1, max_length=20)
    dob: date

    @validator('first_name', 'last_name', 'email', 'phone', 'gender', 'national_id', 'dob', pre=True)
    def strip_identity(cls, v):
        return _strip(v)

    @validator('password')
    def password_not_blank(cls, v):
        return _require_non_blank(v)


class DoctorCreate(AdminCreate):
    doctor_department: str = Field(..., min_length=1, max_length=100)

    @validator('doctor_department', pre=True)
    def strip_department(cls, v):
        return _strip(v)


class UserLogin(CamelModel):
    """Schema for user login"""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., min_length=1)

    @validator('email', pre=True)
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @validator('password', 'confirm_password')
    def password_not_blank(cls, v):
        return _require_non_blank(v)

    @validator('confirm_password')
    def passwords_match(cls, v, values, **kwargs):
        if 'password' in values and v != values['password']:
            raise ValueError('Password & Confirm Password Do Not Match!')
        return v


class AvatarRef(CamelModel):
    public_id: str
    url: str


class UserResponse(CamelModel):
    """User as returned to clients (never includes the password hash)"""
    id: int
    first_name: str
    last_name: str
    email: str
    phone: str
    gender: str
    role: str
    national_id: Optional[str] = None
    dob: Optional[date] = None
    doctor_department: Optional[str] = None
    doc_avatar: Optional[AvatarRef] = None
    created_at: Optional[datetime] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    user: UserResponse


class UserDetailResponse(BaseModel):
    success: bool = True
    user: UserResponse


class AdminCreatedResponse(BaseModel):
    success: bool = True
    message: str
    admin: UserResponse


class DoctorCreatedResponse(BaseModel):
    success: bool = True
    message: str
    doctor: UserResponse


class DoctorListResponse(BaseModel):
    success: bool = True
    doctors: List[UserResponse]


class MessageResponse(BaseModel):
    success: bool = True
    message: str
