from fastapi import APIRouter, BackgroundTasks
from pydantic import BaseModel
from typing import Optional
import logging
from helpers.booking import (
    cancel_appointment,
    create_appointment,
    get_appointment_or_404,
    set_status,
    update_appointment,
)
from helpers.email import send_status_update_email
from helpers.errors import AuthorizationError
from helpers.jwt_token import CurrentUser, DoctorUser, PatientUser
from helpers.slots import get_available_slots
from helpers.validators import parse_query_date
from models.appointment import Appointment
from models.doctor_profile import DoctorProfile
from models.user import User


appointment_router = APIRouter(prefix="/appointments")
logger = logging.getLogger(__name__)


class CreateAppointmentRequest(BaseModel):
    doctorId: int
    date: str
    time: str
    symptoms: str


class UpdateAppointmentRequest(BaseModel):
    date: Optional[str] = None
    time: Optional[str] = None
    symptoms: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    status: str


def person(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


def doctor_card(user: Optional[User]) -> Optional[dict]:
    data = person(user)
    if data is not None:
        profile = user.doctor_profile
        data["specialization"] = profile.specialization if isinstance(profile, DoctorProfile) else None
    return data


def serialize_appointment(appointment: Appointment, with_people: bool = False) -> dict:
    data = {
        "id": appointment.id,
        "doctorId": appointment.doctor_id,
        "patientId": appointment.patient_id,
        "date": appointment.appointment_date.isoformat(),
        "time": appointment.time,
        "symptoms": appointment.symptoms,
        "status": appointment.status.value,
        "notes": appointment.notes,
        "createdAt": appointment.created_at.isoformat() if appointment.created_at else None,
    }
    if with_people:
        data["doctor"] = doctor_card(appointment.doctor)
        data["patient"] = person(appointment.patient)
    return data


def notify_patient(background_tasks: BackgroundTasks, appointment: Appointment, doctor: User, patient: User) -> None:
    background_tasks.add_task(
        send_status_update_email,
        patient.email,
        patient.name,
        doctor.name,
        appointment.appointment_date.isoformat(),
        appointment.time,
        appointment.status.value,
    )


@appointment_router.post("", status_code=201)
async def book_appointment(req: CreateAppointmentRequest, patient: PatientUser):
    appointment = await create_appointment(patient.id, req.doctorId, req.date, req.time, req.symptoms)
    return {
        "success": True,
        "message": "Appointment booked successfully!",
        "data": serialize_appointment(appointment),
    }


@appointment_router.get("/patient")
async def get_patient_appointments(user: CurrentUser):
    appointments = await Appointment.filter(patient_id=user.id).prefetch_related("doctor__doctor_profile", "patient").order_by("-appointment_date", "-time")
    return {
        "success": True,
        "count": len(appointments),
        "data": [serialize_appointment(a, with_people=True) for a in appointments],
    }


@appointment_router.get("/doctor")
async def get_doctor_appointments(doctor: DoctorUser):
    appointments = await Appointment.filter(doctor_id=doctor.id).prefetch_related("doctor__doctor_profile", "patient").order_by("-appointment_date", "-time")
    return {
        "success": True,
        "count": len(appointments),
        "data": [serialize_appointment(a, with_people=True) for a in appointments],
    }


@appointment_router.get("/availability/{doctor_id}")
async def get_availability(doctor_id: int, date: str, user: CurrentUser):
    day = parse_query_date(date)
    slots = await get_available_slots(doctor_id, day)
    return {"success": True, "data": slots}


@appointment_router.get("/{appointment_id}")
async def get_appointment(appointment_id: int, user: CurrentUser):
    appointment = await get_appointment_or_404(appointment_id)
    if user.id not in (appointment.patient_id, appointment.doctor_id):
        raise AuthorizationError("Not authorized to access this appointment.")
    await appointment.fetch_related("doctor__doctor_profile", "patient")
    return {"success": True, "data": serialize_appointment(appointment, with_people=True)}


@appointment_router.put("/{appointment_id}")
async def edit_appointment(appointment_id: int, req: UpdateAppointmentRequest, user: CurrentUser):
    appointment = await update_appointment(appointment_id, user.id, req.date, req.time, req.symptoms)
    return {
        "success": True,
        "message": "Appointment updated successfully!",
        "data": serialize_appointment(appointment),
    }


@appointment_router.put("/{appointment_id}/status")
async def change_status(appointment_id: int, req: StatusUpdateRequest, user: CurrentUser, background_tasks: BackgroundTasks):
    appointment = await set_status(appointment_id, user.id, req.status)
    await appointment.fetch_related("doctor__doctor_profile", "patient")
    notify_patient(background_tasks, appointment, appointment.doctor, appointment.patient)
    return {
        "success": True,
        "message": f"Appointment status updated to {appointment.status.value} successfully!",
        "data": serialize_appointment(appointment, with_people=True),
    }


@appointment_router.delete("/{appointment_id}")
async def delete_appointment(appointment_id: int, user: CurrentUser, background_tasks: BackgroundTasks):
    appointment = await cancel_appointment(appointment_id, user.id)
    await appointment.fetch_related("doctor", "patient")
    notify_patient(background_tasks, appointment, appointment.doctor, appointment.patient)
    return {
        "success": True,
        "message": "Appointment cancelled successfully!",
        "data": {},
    }
