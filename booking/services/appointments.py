"""
Appointment ledger: booking, cancellation and status transitions.

Appointments are stored one row each with a ``patient`` key; every
patient-facing operation here is scoped by that key so one patient can
never see or touch another patient's ledger.
"""
import logging
from datetime import date
from typing import Optional

import bleach
from django.db import transaction

from booking.exceptions import AlreadyCancelled, InvalidTransition, NotFound, ValidationError
from booking.models import Appointment, Department, Doctor, Hospital
from booking.services.audit import log_action
from booking.services.slots import claim_slot, release_slot

logger = logging.getLogger(__name__)

TRANSITIONS = {
    Appointment.STATUS_SCHEDULED: [
        Appointment.STATUS_CONFIRMED, Appointment.STATUS_CANCELLED, Appointment.STATUS_NO_SHOW,
    ],
    Appointment.STATUS_CONFIRMED: [Appointment.STATUS_COMPLETED, Appointment.STATUS_CANCELLED],
    Appointment.STATUS_COMPLETED: [],
    Appointment.STATUS_CANCELLED: [],
    Appointment.STATUS_NO_SHOW: [],
}


def can_transition(current: str, new: str) -> bool:
    """Return True if an appointment may move from ``current`` to ``new``."""
    return new in TRANSITIONS.get(current, [])


def transition(appointment: Appointment, new_status: str) -> Appointment:
    """Apply a status change in memory; the caller persists it."""
    if not can_transition(appointment.status, new_status):
        raise InvalidTransition(f'Cannot change appointment from {appointment.status} to {new_status}')
    appointment.status = new_status
    return appointment


def _active_directory_entries(hospital_id: int, department_id: int, doctor_id: int):
    hospital = Hospital.objects.filter(pk=hospital_id, is_active=True).first()
    if hospital is None:
        raise NotFound('Hospital not found')
    department = Department.objects.filter(pk=department_id, is_active=True).first()
    if department is None:
        raise NotFound('Department not found')
    doctor = Doctor.objects.filter(pk=doctor_id, is_active=True).first()
    if doctor is None:
        raise NotFound('Doctor not found')
    if doctor.hospital_id != hospital.id or doctor.department_id != department.id:
        raise NotFound('Doctor not found at this hospital and department')
    return hospital, department, doctor


def book(patient, *, hospital_id: int, department_id: int, doctor_id: int, day: date, time: str,
         notes: str = '') -> Appointment:
    """Claim the slot at ``day``/``time`` and record a confirmed appointment.

    Directory checks run before anything is written. The slot claim and the
    appointment insert share one transaction, so a failed claim leaves no
    appointment behind and a failed insert leaves the slot free.
    """
    hospital, department, doctor = _active_directory_entries(hospital_id, department_id, doctor_id)

    with transaction.atomic():
        slot = claim_slot(doctor.id, hospital.id, day, time, patient.id)
        appointment = Appointment.objects.create(
            patient=patient,
            hospital=hospital,
            hospital_name=hospital.name,
            department=department,
            department_name=department.name,
            doctor=doctor,
            doctor_name=doctor.name,
            date=day,
            time=time,
            location=hospital.location,
            status=Appointment.STATUS_CONFIRMED,
            slot=slot,
            notes=bleach.clean((notes or '').strip(), tags=set(), strip=True),
        )
        log_action(user=patient, action='appointment_book', object_type='appointment', object_id=appointment.id,
                   detail={'slotId': slot.id, 'date': day.isoformat(), 'time': time})

    logger.info('patient %s booked appointment %s (slot %s)', patient.id, appointment.id, slot.id)
    return appointment


def get_patient_appointment(patient, appointment_id: int, *, for_update: bool = False) -> Appointment:
    qs = Appointment.objects.filter(pk=appointment_id, patient=patient)
    if for_update:
        qs = qs.select_for_update()
    appointment = qs.first()
    if appointment is None:
        raise NotFound('Appointment not found')
    return appointment


def cancel(patient, appointment_id: int) -> Appointment:
    """Cancel one of the patient's appointments and free its slot."""
    with transaction.atomic():
        appointment = get_patient_appointment(patient, appointment_id, for_update=True)
        if appointment.status == Appointment.STATUS_CANCELLED:
            raise AlreadyCancelled()
        transition(appointment, Appointment.STATUS_CANCELLED)
        release_slot(appointment.slot_id, claimant_id=patient.id)
        appointment.save(update_fields=['status', 'updated_at'])
        log_action(user=patient, action='appointment_cancel', object_type='appointment', object_id=appointment.id,
                   detail={'slotId': appointment.slot_id})

    logger.info('patient %s cancelled appointment %s', patient.id, appointment.id)
    return appointment


def complete(appointment_id: int) -> Appointment:
    """Mark a confirmed appointment completed. The slot stays consumed."""
    appointment = Appointment.objects.filter(pk=appointment_id).first()
    if appointment is None:
        raise NotFound('Appointment not found')
    transition(appointment, Appointment.STATUS_COMPLETED)
    appointment.save(update_fields=['status', 'updated_at'])
    return appointment


def update_notes(patient, appointment_id: int, notes: Optional[str]) -> Appointment:
    if notes is None:
        raise ValidationError('No valid fields to update')
    appointment = get_patient_appointment(patient, appointment_id)
    appointment.notes = bleach.clean(notes.strip(), tags=set(), strip=True)
    appointment.save(update_fields=['notes', 'updated_at'])
    return appointment


def list_appointments(patient, *, status: Optional[str]=None, from_date: Optional[date]=None,
                      to_date: Optional[date]=None, page: int=1, limit: int=10):
    qs = Appointment.objects.filter(patient=patient)
    if status:
        qs = qs.filter(status=status)
    if from_date:
        qs = qs.filter(date__gte=from_date)
    if to_date:
        qs = qs.filter(date__lte=to_date)

    total = qs.count()
    page = max(1, int(page or 1))
    limit = min(100, max(1, int(limit or 10)))
    start = (page-1)*limit
    items = qs.order_by('-created_at', '-id')[start:start+limit]
    return [format_appointment(a) for a in items], total


def format_appointment(a: Appointment) -> dict:
    return {
        'id': a.id,
        'hospitalId': a.hospital_id,
        'hospitalName': a.hospital_name,
        'departmentId': a.department_id,
        'department': a.department_name,
        'doctorId': a.doctor_id,
        'doctorName': a.doctor_name,
        'appointmentDate': a.date.isoformat(),
        'appointmentTime': a.time,
        'location': a.location,
        'status': a.status,
        'slotId': a.slot_id,
        'prescriptionId': a.prescription_id,
        'notes': a.notes,
        'createdAt': a.created_at.isoformat() if a.created_at else None,
    }
