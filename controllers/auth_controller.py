from fastapi import APIRouter
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError
from pydantic import BaseModel, EmailStr, Field
from typing import Annotated, Literal, Optional, Union
import logging
import random
import string
from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction
from models.user import User, UserRole
from models.doctor_profile import DoctorProfile
from helpers.errors import AuthenticationError, NotFoundError, ValidationError, field_error
from helpers.jwt_token import generate_user_token, CurrentUser, AdminUser


auth_router = APIRouter(prefix="/auth")
ph = PasswordHasher()
logger = logging.getLogger(__name__)

REGISTRATION_ID_CHARS = string.digits + string.ascii_uppercase


class PatientSignup(BaseModel):
    role: Literal["patient"]
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    phone: Optional[str] = None


class DoctorSignup(BaseModel):
    role: Literal["doctor"]
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    phone: str = Field(min_length=1)
    specialization: str = Field(min_length=1)
    experience: int = Field(ge=0)
    bio: str = Field(min_length=5)
    registrationId: Optional[str] = None


SignupPayload = Annotated[Union[PatientSignup, DoctorSignup], Field(discriminator="role")]


class LoginPayload(BaseModel):
    email: EmailStr
    password: str


def generate_registration_id() -> str:
    return "MD-" + "".join(random.choice(REGISTRATION_ID_CHARS) for _ in range(6))


async def unique_registration_id() -> str:
    while True:
        candidate = generate_registration_id()
        if not await DoctorProfile.exists(registration_id=candidate):
            return candidate


def serialize_user(user: User, profile: Optional[DoctorProfile] = None) -> dict:
    data = {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
        "phone": user.phone,
    }
    if isinstance(profile, DoctorProfile):
        data.update({
            "specialization": profile.specialization,
            "experience": profile.experience,
            "bio": profile.bio,
            "registrationId": profile.registration_id,
        })
    return data


def issue_token(user: User) -> str:
    return generate_user_token({"id": user.id, "role": user.role.value})


@auth_router.post('/signup', status_code=201)
async def signup(payload: SignupPayload):
    if await User.exists(email=payload.email):
        raise ValidationError([field_error("email", "User already exists")])

    profile = None
    try:
        async with in_transaction():
            user = await User.create(
                name=payload.name.strip(),
                email=payload.email,
                password=ph.hash(payload.password),
                role=UserRole(payload.role),
                phone=payload.phone,
            )
            if isinstance(payload, DoctorSignup):
                registration_id = payload.registrationId or await unique_registration_id()
                if await DoctorProfile.exists(registration_id=registration_id):
                    raise ValidationError([field_error("registrationId", "Registration ID is already in use")])
                profile = await DoctorProfile.create(
                    user=user,
                    specialization=payload.specialization.strip(),
                    experience=payload.experience,
                    phone=payload.phone,
                    bio=payload.bio.strip(),
                    registration_id=registration_id,
                )
    except IntegrityError:
        # a concurrent signup claimed the email or registration id first
        if await User.exists(email=payload.email):
            raise ValidationError([field_error("email", "User already exists")])
        raise ValidationError([field_error("registrationId", "Registration ID is already in use")])

    logger.info("New %s account %s", user.role.value, user.id)
    return {
        "success": True,
        "message": "Account created successfully",
        "data": {
            "token": issue_token(user),
            "user": serialize_user(user, profile),
        },
    }


@auth_router.post("/login")
async def login(data: LoginPayload):
    user = await User.get_or_none(email=data.email)
    if not user:
        raise AuthenticationError("Invalid credentials")

    try:
        ph.verify(user.password, data.password)
    except (VerificationError, InvalidHashError):
        raise AuthenticationError("Invalid credentials")

    profile = await DoctorProfile.get_or_none(user_id=user.id) if user.is_doctor else None
    return {
        "success": True,
        "message": "Login Successfully",
        "data": {
            "token": issue_token(user),
            "user": serialize_user(user, profile),
        },
    }


@auth_router.get("/me")
async def get_me(user: CurrentUser):
    profile = await DoctorProfile.get_or_none(user_id=user.id) if user.is_doctor else None
    return {"success": True, "data": serialize_user(user, profile)}


@auth_router.get("/doctors")
async def list_doctors():
    doctors = await User.filter(role=UserRole.DOCTOR).prefetch_related("doctor_profile").order_by("name")
    return {
        "success": True,
        "count": len(doctors),
        "data": [serialize_user(d, d.doctor_profile) for d in doctors],
    }


@auth_router.get("/doctors/{doctor_id}")
async def get_doctor(doctor_id: int):
    doctor = await User.get_or_none(id=doctor_id, role=UserRole.DOCTOR).prefetch_related("doctor_profile")
    if not doctor:
        raise NotFoundError("Doctor not found")
    return {"success": True, "data": serialize_user(doctor, doctor.doctor_profile)}


@auth_router.delete("/doctors/{doctor_id}")
async def delete_doctor(doctor_id: int, admin: AdminUser):
    doctor = await User.get_or_none(id=doctor_id, role=UserRole.DOCTOR)
    if not doctor:
        raise NotFoundError("Doctor not found")
    await doctor.delete()
    logger.info("Doctor %s removed by admin %s", doctor_id, admin.id)
    return {"success": True, "message": "Doctor deleted successfully"}
