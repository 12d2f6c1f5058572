import random
import threading
from datetime import date, datetime, timezone as dt_timezone

import pytest
from django.db import DatabaseError

from booking.models import Appointment, AuditEvent, Prescription
from booking.services.appointments import book, cancel
from booking.services.prescriptions import PrescriptionGenerator
from booking.services.sweeper import ExpirationSweeper, SweepResult, SweepScheduler
from booking.tests.helpers import XMAS, make_slot

NOW = datetime(2024, 12, 25, 12, 0, tzinfo=dt_timezone.utc)


def clock():
    return NOW


def sweeper(policy='all'):
    return ExpirationSweeper(generator=PrescriptionGenerator(rng=random.Random(3), clock=clock), clock=clock,
                             policy=policy)


def _book(patient, directory, time='09:00', day=XMAS):
    hospital, department, doctor = directory
    return book(patient, hospital_id=hospital.id, department_id=department.id, doctor_id=doctor.id,
                day=day, time=time)


@pytest.mark.django_db
def test_sweep_completes_and_prescribes(directory, patient, medicines):
    make_slot(directory[2])
    appointment = _book(patient, directory)

    result = sweeper().sweep()

    appointment.refresh_from_db()
    assert appointment.status == Appointment.STATUS_COMPLETED
    prescription = Prescription.objects.get(appointment=appointment)
    assert appointment.prescription_id == prescription.id
    assert 1 <= len(prescription.medications) <= 3
    assert {m['name'] for m in prescription.medications} <= {m.name for m in medicines}
    assert result == SweepResult(patients=1, completed=1, prescriptions=1)
    assert AuditEvent.objects.filter(action='sweep_run').exists()


@pytest.mark.django_db
def test_sweep_with_empty_catalog_still_completes(directory, patient):
    make_slot(directory[2])
    appointment = _book(patient, directory)

    result = sweeper().sweep()

    appointment.refresh_from_db()
    assert appointment.status == Appointment.STATUS_COMPLETED
    assert appointment.prescription_id is None
    assert Prescription.objects.count() == 0
    assert result.prescription_failures == 1
    assert result.completed == 1


@pytest.mark.django_db
def test_sweep_handles_several_patients(directory, patient, other_patient, medicines):
    doctor = directory[2]
    make_slot(doctor, start='09:00', end='09:30')
    make_slot(doctor, start='09:30', end='10:00')
    make_slot(doctor, start='10:00', end='10:30')
    a1 = _book(patient, directory, time='09:00')
    a2 = _book(patient, directory, time='09:30')
    b1 = _book(other_patient, directory, time='10:00')

    result = sweeper().sweep()

    assert result.patients == 2
    assert result.completed == 3
    statuses = set(Appointment.objects.filter(id__in=[a1.id, a2.id, b1.id]).values_list('status', flat=True))
    assert statuses == {Appointment.STATUS_COMPLETED}
    assert Prescription.objects.count() == 3


@pytest.mark.django_db
def test_sweep_leaves_other_statuses_alone(directory, patient, medicines):
    slot = make_slot(directory[2])
    appointment = _book(patient, directory)
    cancel(patient, appointment.id)

    result = sweeper().sweep()

    appointment.refresh_from_db()
    slot.refresh_from_db()
    assert appointment.status == Appointment.STATUS_CANCELLED
    assert slot.is_booked is False
    assert result.completed == 0


@pytest.mark.django_db
def test_due_policy_skips_future_appointments(directory, patient, medicines):
    doctor = directory[2]
    make_slot(doctor, start='11:30', end='12:00')
    make_slot(doctor, start='12:30', end='13:00')
    make_slot(doctor, day=date(2024, 12, 24), start='15:00', end='15:30')
    today_past = _book(patient, directory, time='11:30')
    today_future = _book(patient, directory, time='12:30')
    yesterday = _book(patient, directory, time='15:00', day=date(2024, 12, 24))

    result = sweeper(policy='due').sweep()

    assert result.completed == 2
    statuses = dict(Appointment.objects.values_list('id', 'status'))
    assert statuses[today_past.id] == Appointment.STATUS_COMPLETED
    assert statuses[yesterday.id] == Appointment.STATUS_COMPLETED
    assert statuses[today_future.id] == Appointment.STATUS_CONFIRMED


@pytest.mark.django_db
def test_one_patient_failure_does_not_stop_sweep(directory, patient, other_patient, medicines):
    doctor = directory[2]
    make_slot(doctor, start='09:00', end='09:30')
    make_slot(doctor, start='09:30', end='10:00')
    broken = _book(patient, directory, time='09:00')
    healthy = _book(other_patient, directory, time='09:30')

    class FlakySweeper(ExpirationSweeper):
        def _sweep_patient(self, patient_id, now, result):
            if patient_id == patient.id:
                raise DatabaseError('lock wait timeout')
            super()._sweep_patient(patient_id, now, result)

    result = FlakySweeper(generator=PrescriptionGenerator(rng=random.Random(3), clock=clock), clock=clock,
                          policy='all').sweep()

    assert result.patient_failures == 1
    assert result.completed == 1
    broken.refresh_from_db()
    healthy.refresh_from_db()
    assert broken.status == Appointment.STATUS_CONFIRMED
    assert healthy.status == Appointment.STATUS_COMPLETED


def test_unknown_policy_rejected():
    with pytest.raises(ValueError):
        ExpirationSweeper(generator=PrescriptionGenerator(), policy='sometimes')


class FakeSweeper:
    def __init__(self, calls, fail_first=False):
        self.calls = calls
        self.fail_first = fail_first

    def sweep(self):
        self.calls.append(1)
        if self.fail_first and len(self.calls) == 1:
            raise DatabaseError('connection reset')
        return SweepResult(patients=1, completed=1)


def test_scheduler_run_once_records_result():
    calls = []
    scheduler = SweepScheduler(sweeper_factory=lambda: FakeSweeper(calls), interval=60, initial_delay=0)
    result = scheduler.run_once()
    assert result.completed == 1
    status = scheduler.status()
    assert status['runs'] == 1
    assert status['running'] is False
    assert status['lastResult']['completed'] == 1


def test_scheduler_never_overlaps_runs():
    calls = []
    scheduler = SweepScheduler(sweeper_factory=lambda: FakeSweeper(calls), interval=60, initial_delay=0)
    scheduler._run_lock.acquire()
    try:
        assert scheduler.run_once() is None
    finally:
        scheduler._run_lock.release()
    assert calls == []


def test_scheduler_keeps_running_after_failed_run():
    calls = []
    reached = threading.Event()

    class Recording(FakeSweeper):
        def sweep(self):
            result = super().sweep()
            if len(self.calls) >= 2:
                reached.set()
            return result

    scheduler = SweepScheduler(sweeper_factory=lambda: Recording(calls, fail_first=True), interval=0.01,
                               initial_delay=0)
    scheduler.start()
    try:
        assert reached.wait(5)
        assert scheduler.is_running()
    finally:
        scheduler.stop(timeout=5)

    assert not scheduler.is_running()
    assert scheduler.failures >= 1
    assert scheduler.runs >= 1


def test_scheduler_stop_before_first_run():
    calls = []
    scheduler = SweepScheduler(sweeper_factory=lambda: FakeSweeper(calls), interval=60, initial_delay=30)
    scheduler.start()
    scheduler.start()
    scheduler.stop(timeout=5)
    assert not scheduler.is_running()
    assert calls == []
