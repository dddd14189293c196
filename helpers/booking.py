"""
Appointment booking and status changes.

Every write here touches a single appointment row. The slot check is a
read-then-write; the unique index on ``(doctor, appointment_date, time,
holds_slot)`` is what guarantees one winner when two bookings race, and its
IntegrityError is reported as the same ConflictError.
"""

import logging
from typing import List, Optional

from tortoise.exceptions import IntegrityError

from helpers.errors import (
    AuthorizationError,
    ConflictError,
    FieldError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
    field_error,
)
from helpers.slots import get_doctor_or_404, is_slot_taken
from helpers.validators import check_date, check_text, check_time
from models.appointment import Appointment, AppointmentStatus

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "This time slot is already booked for the selected doctor. Please choose another time or date."

ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED},
    AppointmentStatus.CONFIRMED: {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED},
}


def can_transition(current: AppointmentStatus, requested: AppointmentStatus) -> bool:
    return requested in ALLOWED_TRANSITIONS.get(current, set())


def parse_status(value: str) -> AppointmentStatus:
    try:
        return AppointmentStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in AppointmentStatus)
        raise ValidationError([field_error("status", f"Invalid status value. Allowed values are: {allowed}.")])


async def get_appointment_or_404(appointment_id: int) -> Appointment:
    appointment = await Appointment.get_or_none(id=appointment_id)
    if not appointment:
        raise NotFoundError("Appointment not found.")
    return appointment


async def create_appointment(patient_id: int, doctor_id: int, date: str, time: str, symptoms: str) -> Appointment:
    errors: List[FieldError] = []
    day = check_date(date, errors)
    slot_time = check_time(time, errors)
    symptoms = check_text(symptoms, errors, "symptoms", "Symptoms description")
    if errors:
        raise ValidationError(errors)

    await get_doctor_or_404(doctor_id)

    if await is_slot_taken(doctor_id, day, slot_time):
        logger.info("Slot %s %s already taken for doctor %s", day, slot_time, doctor_id)
        raise ConflictError(SLOT_TAKEN_MESSAGE)

    try:
        appointment = await Appointment.create(
            doctor_id=doctor_id,
            patient_id=patient_id,
            appointment_date=day,
            time=slot_time,
            symptoms=symptoms,
            status=AppointmentStatus.PENDING,
            holds_slot=True,
        )
    except IntegrityError:
        logger.warning("Concurrent booking lost the race for doctor %s at %s %s", doctor_id, day, slot_time)
        raise ConflictError(SLOT_TAKEN_MESSAGE)

    logger.info("Appointment %s booked by patient %s with doctor %s", appointment.id, patient_id, doctor_id)
    return appointment


async def update_appointment(
    appointment_id: int,
    acting_user_id: int,
    date: Optional[str] = None,
    time: Optional[str] = None,
    symptoms: Optional[str] = None,
) -> Appointment:
    appointment = await get_appointment_or_404(appointment_id)

    if appointment.patient_id != acting_user_id:
        raise AuthorizationError("Not authorized to update this appointment.")
    if appointment.status != AppointmentStatus.PENDING:
        raise InvalidTransitionError(
            appointment.status.value, "pending", "Cannot update an appointment that is not pending."
        )

    errors: List[FieldError] = []
    new_day = check_date(date, errors) if date is not None else appointment.appointment_date
    new_time = check_time(time, errors) if time is not None else appointment.time
    if symptoms is not None:
        symptoms = check_text(symptoms, errors, "symptoms", "Symptoms description")
    if errors:
        raise ValidationError(errors)

    moving = new_day != appointment.appointment_date or new_time != appointment.time
    if moving and await is_slot_taken(appointment.doctor_id, new_day, new_time, exclude_appointment_id=appointment.id):
        raise ConflictError("The requested time slot is already booked for this doctor. Please choose another time or date.")

    appointment.appointment_date = new_day
    appointment.time = new_time
    if symptoms is not None:
        appointment.symptoms = symptoms
    try:
        await appointment.save()
    except IntegrityError:
        raise ConflictError(SLOT_TAKEN_MESSAGE)
    return appointment


async def set_status(appointment_id: int, acting_user_id: int, new_status: str) -> Appointment:
    requested = parse_status(new_status)
    appointment = await get_appointment_or_404(appointment_id)

    if acting_user_id == appointment.doctor_id:
        pass
    elif acting_user_id == appointment.patient_id:
        # patients may only cancel their own booking
        if requested != AppointmentStatus.CANCELLED:
            raise AuthorizationError("Only the doctor can set this appointment status.")
    else:
        raise AuthorizationError("Not authorized to update this appointment.")

    if not can_transition(appointment.status, requested):
        logger.info(
            "Rejected transition %s -> %s on appointment %s",
            appointment.status.value, requested.value, appointment.id,
        )
        raise InvalidTransitionError(appointment.status.value, requested.value)

    appointment.apply_status(requested)
    await appointment.save(update_fields=["status", "holds_slot", "updated_at"])
    logger.info("Appointment %s is now %s (by user %s)", appointment.id, requested.value, acting_user_id)
    return appointment


async def cancel_appointment(appointment_id: int, acting_user_id: int) -> Appointment:
    return await set_status(appointment_id, acting_user_id, AppointmentStatus.CANCELLED.value)
