from fastapi import APIRouter, BackgroundTasks
from pydantic import BaseModel, Field
from typing import Optional
import logging
from helpers.email import send_prescription_email
from helpers.errors import AuthorizationError, NotFoundError, ValidationError, field_error
from helpers.jwt_token import CurrentUser, DoctorUser
from helpers.validators import clinic_today, parse_date, split_lines
from models.appointment import Appointment
from models.doctor_profile import DoctorProfile
from models.prescription import Prescription
from models.user import User, UserRole


prescription_router = APIRouter(prefix="/prescriptions")
logger = logging.getLogger(__name__)


class CreatePrescriptionRequest(BaseModel):
    patientId: int
    appointmentId: Optional[int] = None
    diagnosis: str = Field(min_length=1)
    # one medicine / dosage per line, as typed in the form
    medicines: str = Field(min_length=1)
    dosage: str = Field(min_length=1)
    instructions: Optional[str] = None
    followUpDate: Optional[str] = None
    date: Optional[str] = None


def serialize_prescription(prescription: Prescription) -> dict:
    return {
        "id": prescription.id,
        "doctorId": prescription.doctor_id,
        "patientId": prescription.patient_id,
        "appointmentId": prescription.appointment_id,
        "date": prescription.issued_on.isoformat(),
        "diagnosis": prescription.diagnosis,
        "medicines": prescription.medicines,
        "dosage": prescription.dosage,
        "instructions": prescription.instructions,
        "followUpDate": prescription.follow_up_date.isoformat() if prescription.follow_up_date else None,
    }


def optional_date(value: Optional[str], field: str, errors: list):
    if not value:
        return None
    parsed = parse_date(value)
    if parsed is None:
        errors.append(field_error(field, "Invalid date format. Please use YYYY-MM-DD."))
    return parsed


@prescription_router.post("", status_code=201)
async def create_prescription(req: CreatePrescriptionRequest, doctor: DoctorUser):
    errors = []
    medicines = split_lines(req.medicines)
    dosage = split_lines(req.dosage)
    if not medicines:
        errors.append(field_error("medicines", "Please add medicines"))
    if not dosage:
        errors.append(field_error("dosage", "Please add dosage instructions"))
    if not req.diagnosis.strip():
        errors.append(field_error("diagnosis", "Please add a diagnosis"))
    follow_up = optional_date(req.followUpDate, "followUpDate", errors)
    issued_on = optional_date(req.date, "date", errors) or clinic_today()
    if errors:
        raise ValidationError(errors)

    patient = await User.get_or_none(id=req.patientId, role=UserRole.PATIENT)
    if not patient:
        raise NotFoundError("Patient not found.")

    if req.appointmentId is not None:
        appointment = await Appointment.get_or_none(id=req.appointmentId)
        if not appointment:
            raise NotFoundError("Appointment not found.")
        if appointment.doctor_id != doctor.id or appointment.patient_id != patient.id:
            raise AuthorizationError("Appointment does not belong to this doctor and patient.")

    prescription = await Prescription.create(
        doctor=doctor,
        patient=patient,
        appointment_id=req.appointmentId,
        issued_on=issued_on,
        diagnosis=req.diagnosis.strip(),
        medicines=medicines,
        dosage=dosage,
        instructions=req.instructions.strip() if req.instructions else None,
        follow_up_date=follow_up,
    )
    logger.info("Prescription %s issued by doctor %s for patient %s", prescription.id, doctor.id, patient.id)
    return {
        "success": True,
        "message": "Prescription created successfully!",
        "data": serialize_prescription(prescription),
    }


@prescription_router.get("/patient")
async def list_patient_prescriptions(user: CurrentUser):
    prescriptions = await Prescription.filter(patient_id=user.id).order_by("-issued_on", "-id")
    return {"success": True, "count": len(prescriptions), "data": [serialize_prescription(p) for p in prescriptions]}


@prescription_router.get("/doctor")
async def list_doctor_prescriptions(doctor: DoctorUser):
    prescriptions = await Prescription.filter(doctor_id=doctor.id).order_by("-issued_on", "-id")
    return {"success": True, "count": len(prescriptions), "data": [serialize_prescription(p) for p in prescriptions]}


@prescription_router.post("/{prescription_id}/send", status_code=202)
async def send_prescription(prescription_id: int, doctor: DoctorUser, background_tasks: BackgroundTasks):
    prescription = await Prescription.get_or_none(id=prescription_id).prefetch_related("patient")
    if not prescription:
        raise NotFoundError("Prescription not found.")
    if prescription.doctor_id != doctor.id:
        raise AuthorizationError("Not authorized to send this prescription.")

    profile = await DoctorProfile.get_or_none(user_id=doctor.id)
    patient = prescription.patient
    background_tasks.add_task(
        send_prescription_email,
        patient.email,
        patient.name,
        doctor.name,
        profile.specialization if profile else None,
        prescription.diagnosis,
        prescription.medicines,
        prescription.dosage,
        prescription.instructions,
        prescription.follow_up_date.isoformat() if prescription.follow_up_date else None,
    )
    return {"success": True, "message": f"Prescription will be emailed to {patient.email}."}
