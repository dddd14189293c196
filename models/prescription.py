from tortoise import fields
from tortoise.models import Model
from typing import List


class Prescription(Model):
    id = fields.IntField(primary_key=True)
    doctor = fields.ForeignKeyField("models.User", related_name="issued_prescriptions")
    patient = fields.ForeignKeyField("models.User", related_name="prescriptions")
    appointment = fields.ForeignKeyField("models.Appointment", related_name="prescriptions", null=True)
    issued_on = fields.DateField()
    diagnosis = fields.TextField()
    medicines: List[str] = fields.JSONField(default=list)
    dosage: List[str] = fields.JSONField(default=list, description="one line per medicine, same order")
    instructions = fields.TextField(null=True)
    follow_up_date = fields.DateField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "prescriptions"
