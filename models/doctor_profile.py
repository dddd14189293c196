from tortoise import fields
from tortoise.models import Model


class DoctorProfile(Model):
    id = fields.IntField(primary_key=True)
    user = fields.OneToOneField("models.User", related_name="doctor_profile", on_delete=fields.CASCADE)
    specialization = fields.CharField(max_length=255)
    experience = fields.IntField(default=0)
    phone = fields.CharField(max_length=30)
    bio = fields.TextField()
    registration_id = fields.CharField(max_length=50, unique=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "doctor_profiles"
