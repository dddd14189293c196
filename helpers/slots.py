import logging
from datetime import date
from typing import Iterator, List, Optional

from helpers.errors import NotFoundError
from models.appointment import ACTIVE_STATUSES, Appointment
from models.user import User, UserRole

logger = logging.getLogger(__name__)

DAY_START_HOUR = 9
DAY_END_HOUR = 17
SLOT_MINUTES = 30


def iter_day_template(start_hour: int = DAY_START_HOUR, end_hour: int = DAY_END_HOUR, step: int = SLOT_MINUTES) -> Iterator[str]:
    for hour in range(start_hour, end_hour):
        for minute in range(0, 60, step):
            yield f"{hour:02d}:{minute:02d}"


# 09:00 .. 16:30, 16 slots
DAILY_SLOTS = tuple(iter_day_template())


async def get_doctor_or_404(doctor_id: int) -> User:
    doctor = await User.get_or_none(id=doctor_id, role=UserRole.DOCTOR)
    if not doctor:
        raise NotFoundError("Invalid doctor ID or doctor not found.")
    return doctor


async def is_slot_taken(doctor_id: int, day: date, time: str, exclude_appointment_id: Optional[int] = None) -> bool:
    query = Appointment.filter(
        doctor_id=doctor_id,
        appointment_date=day,
        time=time,
        status__in=ACTIVE_STATUSES,
    )
    if exclude_appointment_id is not None:
        query = query.exclude(id=exclude_appointment_id)
    return await query.exists()


async def booked_times(doctor_id: int, day: date) -> List[str]:
    return await Appointment.filter(
        doctor_id=doctor_id,
        appointment_date=day,
        status__in=ACTIVE_STATUSES,
    ).values_list("time", flat=True)


async def get_available_slots(doctor_id: int, day: date) -> List[str]:
    await get_doctor_or_404(doctor_id)
    booked = set(await booked_times(doctor_id, day))
    available = [slot for slot in DAILY_SLOTS if slot not in booked]
    logger.debug("Doctor %s has %d/%d open slots on %s", doctor_id, len(available), len(DAILY_SLOTS), day)
    return available
