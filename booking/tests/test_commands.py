from io import StringIO

import pytest
from django.core.management import call_command

from booking.models import Appointment, AppointmentSlot, Department, Doctor, Medicine
from booking.services.appointments import book
from booking.tests.helpers import XMAS, make_slot

pytestmark = pytest.mark.django_db


def test_seed_directory_is_rerunnable():
    out = StringIO()
    call_command('seed_directory', '--days', '1', stdout=out)
    call_command('seed_directory', '--no-slots', stdout=out)

    assert Department.objects.count() == 8
    assert Doctor.objects.count() == 16
    assert Medicine.objects.filter(category='vitamin').exists()
    # 09:00-17:00 with 30 minute visits
    johnson = Doctor.objects.get(name='Dr. Sarah Johnson')
    assert AppointmentSlot.objects.filter(doctor=johnson).count() == 16
    assert 'Demo data ready' in out.getvalue()


def test_generate_slots_command(doctor):
    out = StringIO()
    call_command('generate_slots', '--days', '2', '--start', '2024-12-25', stdout=out)
    assert AppointmentSlot.objects.filter(doctor=doctor).count() == 32
    assert 'Created 32 slot(s)' in out.getvalue()


def test_sweep_appointments_command(directory, patient, medicines):
    hospital, department, doctor = directory
    make_slot(doctor)
    appointment = book(patient, hospital_id=hospital.id, department_id=department.id, doctor_id=doctor.id,
                       day=XMAS, time='09:00')
    out = StringIO()
    call_command('sweep_appointments', stdout=out)

    appointment.refresh_from_db()
    assert appointment.status == Appointment.STATUS_COMPLETED
    assert 'Completed 1 appointment(s)' in out.getvalue()
