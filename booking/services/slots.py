"""
Slot store: bookable time intervals and the atomic claim/release on them.

Every mutation of a slot goes through :func:`claim_slot` or
:func:`release_slot`, each of which is a single conditional ``UPDATE`` so
two concurrent claimants can never both win the same row.
"""
import logging
from datetime import date, timedelta
from typing import Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from booking.exceptions import SlotUnavailable
from booking.models import AppointmentSlot, Doctor

logger = logging.getLogger(__name__)

DEFAULT_WORKING_HOURS = [('09:00', '17:00')]
BULK_BATCH_SIZE = 1000


def to_minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(':')
    return int(hours) * 60 + int(minutes)


def to_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def slot_group_name(doctor_id: int, hospital_id: int, day: date) -> str:
    return f"slots.{doctor_id}.{hospital_id}.{day.isoformat()}"


def _broadcast(doctor_id: int, hospital_id: int, day: date, start_time: str, event: str) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    payload = {
        "type": "slot.changed",
        "event": event,
        "doctorId": doctor_id,
        "hospitalId": hospital_id,
        "date": day.isoformat(),
        "startTime": start_time,
    }
    async_to_sync(channel_layer.group_send)(slot_group_name(doctor_id, hospital_id, day), payload)


def _broadcast_on_commit(slot: AppointmentSlot, event: str) -> None:
    transaction.on_commit(
        lambda: _broadcast(slot.doctor_id, slot.hospital_id, slot.date, slot.start_time, event),
        robust=True,
    )


def find_available_slots(doctor_id: int, hospital_id: int, day: date) -> QuerySet:
    """Free slots for one doctor, hospital and day, earliest first."""
    return AppointmentSlot.objects.filter(
        doctor_id=doctor_id,
        hospital_id=hospital_id,
        date=day,
        is_available=True,
        is_booked=False,
    ).order_by('start_time')


def claim_slot(doctor_id: int, hospital_id: int, day: date, start_time: str, claimant_id: int) -> AppointmentSlot:
    """Atomically move a free slot to claimed by ``claimant_id``.

    Raises :class:`SlotUnavailable` when no free slot matched at the
    moment of the update, whether it never existed, was already booked
    or was taken by a concurrent claimant.
    """
    lookup = dict(doctor_id=doctor_id, hospital_id=hospital_id, date=day, start_time=start_time)
    claimed = AppointmentSlot.objects.filter(is_available=True, is_booked=False, **lookup).update(
        is_booked=True,
        is_available=False,
        booked_by_id=claimant_id,
        updated_at=timezone.now(),
    )
    if claimed != 1:
        logger.info('slot claim lost: doctor=%s hospital=%s %s %s', doctor_id, hospital_id, day, start_time)
        raise SlotUnavailable()
    slot = AppointmentSlot.objects.get(**lookup)
    _broadcast_on_commit(slot, 'booked')
    return slot


def release_slot(slot_id: Optional[int], claimant_id: Optional[int] = None) -> bool:
    """Return a claimed slot to the free pool.

    Idempotent: a missing id, a deleted slot or a slot that is already
    free is a no-op. With ``claimant_id`` only a slot held by that patient
    is released. Returns True when a slot was actually released.
    """
    if not slot_id:
        return False
    claimed = AppointmentSlot.objects.filter(pk=slot_id, is_booked=True)
    if claimant_id is not None:
        claimed = claimed.filter(booked_by_id=claimant_id)
    released = claimed.update(
        is_booked=False,
        is_available=True,
        booked_by=None,
        updated_at=timezone.now(),
    )
    if not released:
        return False
    slot = AppointmentSlot.objects.filter(pk=slot_id).first()
    if slot is not None:
        _broadcast_on_commit(slot, 'released')
    return True


def _sunday_based_weekday(day: date) -> int:
    return (day.weekday() + 1) % 7


def _working_windows(doctor: Doctor) -> Optional[dict[int, list[tuple[str, str]]]]:
    """Weekday -> [(start, end)] from the doctor's schedule, None if no schedule exists."""
    rows = list(doctor.availability.all())
    if not rows:
        return None
    windows: dict[int, list[tuple[str, str]]] = {}
    for row in rows:
        if row.is_available:
            windows.setdefault(row.day_of_week, []).append((row.start_time, row.end_time))
    return windows


def build_day_slots(doctor: Doctor, day: date, windows: list[tuple[str, str]]) -> list[AppointmentSlot]:
    duration = doctor.appointment_duration or 30
    slots = []
    for start, end in windows:
        cursor, stop = to_minutes(start), to_minutes(end)
        while cursor + duration <= stop:
            slots.append(AppointmentSlot(
                doctor=doctor,
                hospital_id=doctor.hospital_id,
                date=day,
                start_time=to_hhmm(cursor),
                end_time=to_hhmm(cursor + duration),
                duration=duration,
            ))
            cursor += duration
    return slots


def generate_slots(doctor: Doctor, start_date: Optional[date] = None, days: Optional[int] = None) -> int:
    """Create free slots for ``doctor`` over a horizon of ``days`` days.

    Working hours come from the doctor's weekly availability, falling back
    to 09:00-17:00 every day when the doctor has no schedule at all.
    Existing slots are left untouched. Returns the number of new slots.
    """
    start_date = start_date or timezone.localdate()
    days = settings.SLOT_HORIZON_DAYS if days is None else days
    schedule = _working_windows(doctor)

    pending: list[AppointmentSlot] = []
    for offset in range(days):
        day = start_date + timedelta(days=offset)
        windows = DEFAULT_WORKING_HOURS if schedule is None else schedule.get(_sunday_based_weekday(day), [])
        pending.extend(build_day_slots(doctor, day, windows))

    existing = AppointmentSlot.objects.filter(doctor=doctor)
    before = existing.count()
    for i in range(0, len(pending), BULK_BATCH_SIZE):
        AppointmentSlot.objects.bulk_create(pending[i:i + BULK_BATCH_SIZE], ignore_conflicts=True)
    created = existing.count() - before
    logger.info('generated %s slots for doctor %s from %s over %s days', created, doctor.pk, start_date, days)
    return created


def format_slot(slot: AppointmentSlot, default_duration: int = 30) -> dict:
    return {
        'id': slot.id,
        'startTime': slot.start_time,
        'endTime': slot.end_time,
        'duration': slot.duration or default_duration,
        'isAvailable': slot.is_available,
        'isBooked': slot.is_booked,
    }
