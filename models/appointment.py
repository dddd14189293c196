from tortoise import fields
from tortoise.models import Model
from enum import Enum


class AppointmentStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# statuses that still occupy their slot
ACTIVE_STATUSES = [AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED]


class Appointment(Model):
    id = fields.IntField(primary_key=True)
    doctor = fields.ForeignKeyField("models.User", related_name="doctor_appointments")
    patient = fields.ForeignKeyField("models.User", related_name="patient_appointments")
    appointment_date = fields.DateField()
    time = fields.CharField(max_length=5, description="HH:MM (24h format)")
    symptoms = fields.TextField()
    status = fields.CharEnumField(enum_type=AppointmentStatus, max_length=20, default=AppointmentStatus.PENDING)
    notes = fields.TextField(default="")
    # TRUE while active, NULL once terminal; NULLs never collide in the unique index
    holds_slot = fields.BooleanField(null=True, default=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "appointments"
        unique_together = (("doctor", "appointment_date", "time", "holds_slot"),)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def apply_status(self, status: AppointmentStatus) -> None:
        self.status = status
        self.holds_slot = True if status in ACTIVE_STATUSES else None
