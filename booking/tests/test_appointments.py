from datetime import date
from unittest import mock

import pytest
from django.db import DatabaseError

from booking.exceptions import AlreadyCancelled, InvalidTransition, NotFound, SlotUnavailable, ValidationError
from booking.models import Appointment, AppointmentSlot, AuditEvent, Doctor, Hospital
from booking.services.appointments import (
    book,
    can_transition,
    cancel,
    complete,
    list_appointments,
    update_notes,
)
from booking.tests.helpers import XMAS, make_slot

pytestmark = pytest.mark.django_db


def _book(patient, directory, time='09:00', day=XMAS, **overrides):
    hospital, department, doctor = directory
    kwargs = dict(hospital_id=hospital.id, department_id=department.id, doctor_id=doctor.id, day=day, time=time)
    kwargs.update(overrides)
    return book(patient, **kwargs)


def test_book_creates_confirmed_appointment(directory, patient):
    hospital, department, doctor = directory
    slot = make_slot(doctor)

    appointment = _book(patient, directory, notes='<b>Bring</b> reports')

    assert appointment.status == Appointment.STATUS_CONFIRMED
    assert appointment.slot_id == slot.id
    assert appointment.hospital_name == 'General Hospital'
    assert appointment.department_name == 'Cardiology'
    assert appointment.doctor_name == 'Dr. Sarah Johnson'
    assert appointment.location == 'New York'
    assert appointment.notes == 'Bring reports'
    slot.refresh_from_db()
    assert slot.is_booked and slot.booked_by_id == patient.id
    assert AuditEvent.objects.filter(action='appointment_book', object_id=appointment.id).exists()


def test_double_booking_then_cancel_frees_slot(directory, patient, other_patient):
    slot = make_slot(directory[2])
    first = _book(patient, directory)

    with pytest.raises(SlotUnavailable):
        _book(other_patient, directory)
    assert Appointment.objects.filter(patient=other_patient).count() == 0

    cancel(patient, first.id)
    slot.refresh_from_db()
    assert (slot.is_booked, slot.is_available, slot.booked_by_id) == (False, True, None)

    second = _book(other_patient, directory)
    assert second.slot_id == slot.id


@pytest.mark.parametrize('field', ['hospital', 'department', 'doctor'])
def test_book_rejects_inactive_directory_entries(directory, patient, field):
    slot = make_slot(directory[2])
    entity = {'hospital': directory[0], 'department': directory[1], 'doctor': directory[2]}[field]
    entity.is_active = False
    entity.save()

    with pytest.raises(NotFound):
        _book(patient, directory)
    slot.refresh_from_db()
    assert slot.is_booked is False
    assert Appointment.objects.count() == 0


def test_book_rejects_doctor_from_another_hospital(directory, patient):
    hospital, department, doctor = directory
    other = Hospital.objects.create(name='Elsewhere', location='Boston')
    make_slot(doctor)
    with pytest.raises(NotFound):
        _book(patient, directory, hospital_id=other.id)


def test_book_unknown_doctor(directory, patient):
    with pytest.raises(NotFound):
        _book(patient, directory, doctor_id=Doctor.objects.count() + 100)


def test_failed_insert_leaves_slot_free(directory, patient):
    slot = make_slot(directory[2])
    with mock.patch.object(Appointment.objects, 'create', side_effect=DatabaseError('disk full')):
        with pytest.raises(DatabaseError):
            _book(patient, directory)
    slot.refresh_from_db()
    assert slot.is_booked is False
    assert slot.booked_by_id is None


def test_cancel_twice_reports_already_cancelled(directory, patient):
    make_slot(directory[2])
    appointment = _book(patient, directory)
    cancel(patient, appointment.id)
    with pytest.raises(AlreadyCancelled):
        cancel(patient, appointment.id)


def test_cancel_is_scoped_to_patient(directory, patient, other_patient):
    make_slot(directory[2])
    appointment = _book(patient, directory)
    with pytest.raises(NotFound):
        cancel(other_patient, appointment.id)
    appointment.refresh_from_db()
    assert appointment.status == Appointment.STATUS_CONFIRMED


def test_completed_keeps_slot_and_cannot_be_cancelled(directory, patient):
    slot = make_slot(directory[2])
    appointment = _book(patient, directory)

    complete(appointment.id)
    with pytest.raises(InvalidTransition):
        cancel(patient, appointment.id)

    appointment.refresh_from_db()
    slot.refresh_from_db()
    assert appointment.status == Appointment.STATUS_COMPLETED
    assert slot.is_booked is True


def test_complete_requires_confirmed(directory, patient):
    make_slot(directory[2])
    appointment = _book(patient, directory)
    cancel(patient, appointment.id)
    with pytest.raises(InvalidTransition):
        complete(appointment.id)


def test_cancel_without_slot_still_succeeds(directory, patient):
    slot = make_slot(directory[2])
    appointment = _book(patient, directory)
    slot.delete()
    cancelled = cancel(patient, appointment.id)
    assert cancelled.status == Appointment.STATUS_CANCELLED


def test_cancel_leaves_slot_held_by_another_patient(directory, patient, other_patient):
    slot = make_slot(directory[2])
    appointment = _book(patient, directory)
    AppointmentSlot.objects.filter(pk=slot.pk).update(booked_by=other_patient)

    cancel(patient, appointment.id)

    slot.refresh_from_db()
    assert slot.is_booked is True
    assert slot.booked_by_id == other_patient.id


def test_notes_are_stored_as_plain_text(directory, patient):
    make_slot(directory[2])
    appointment = _book(patient, directory, notes='<a href="https://x.test">chart</a> <script>x()</script>ok')
    assert '<' not in appointment.notes
    assert appointment.notes.startswith('chart')


@pytest.mark.parametrize('current,new,allowed', [
    ('confirmed', 'completed', True),
    ('confirmed', 'cancelled', True),
    ('scheduled', 'confirmed', True),
    ('scheduled', 'no-show', True),
    ('confirmed', 'no-show', False),
    ('completed', 'cancelled', False),
    ('cancelled', 'confirmed', False),
    ('no-show', 'completed', False),
])
def test_transition_table(current, new, allowed):
    assert can_transition(current, new) is allowed


def test_update_notes(directory, patient):
    make_slot(directory[2])
    appointment = _book(patient, directory)
    updated = update_notes(patient, appointment.id, ' <i>fasting</i> since 8pm ')
    assert updated.notes == 'fasting since 8pm'
    with pytest.raises(ValidationError):
        update_notes(patient, appointment.id, None)


def test_list_filters_and_paginates(directory, patient, other_patient):
    doctor = directory[2]
    for start, end in [('09:00', '09:30'), ('09:30', '10:00'), ('10:00', '10:30')]:
        make_slot(doctor, start=start, end=end)
    make_slot(doctor, day=date(2025, 1, 10))

    a1 = _book(patient, directory, time='09:00')
    a2 = _book(patient, directory, time='09:30')
    a3 = _book(patient, directory, time='09:00', day=date(2025, 1, 10))
    _book(other_patient, directory, time='10:00')
    cancel(patient, a2.id)

    data, total = list_appointments(patient)
    assert total == 3
    assert [d['id'] for d in data] == [a3.id, a2.id, a1.id]

    data, total = list_appointments(patient, status='cancelled')
    assert (total, [d['id'] for d in data]) == (1, [a2.id])

    data, total = list_appointments(patient, from_date=date(2025, 1, 1))
    assert [d['id'] for d in data] == [a3.id]

    data, total = list_appointments(patient, page=2, limit=2)
    assert total == 3
    assert [d['id'] for d in data] == [a1.id]
