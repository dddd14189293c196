from tortoise import fields
from tortoise.models import Model
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models.doctor_profile import DoctorProfile
    from models.appointment import Appointment


class UserRole(Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"


class User(Model):
    id = fields.IntField(primary_key=True)
    name = fields.CharField(max_length=255)
    email = fields.CharField(max_length=255, unique=True)
    password = fields.CharField(max_length=255)
    # role is fixed at signup; doctor-only data lives on DoctorProfile
    role = fields.CharEnumField(enum_type=UserRole, max_length=10, default=UserRole.PATIENT)
    phone = fields.CharField(max_length=30, null=True)

    doctor_profile: fields.BackwardOneToOneRelation["DoctorProfile"]
    doctor_appointments: fields.ReverseRelation["Appointment"]
    patient_appointments: fields.ReverseRelation["Appointment"]

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "user"

    @property
    def is_doctor(self) -> bool:
        return self.role == UserRole.DOCTOR
