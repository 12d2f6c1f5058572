import random
from datetime import datetime, timedelta, timezone as dt_timezone
from unittest import mock

import pytest

from booking.exceptions import AlreadyExists, NoMedicinesAvailable, NotEligible, NotFound
from booking.models import Appointment, Prescription
from booking.services.appointments import book, cancel
from booking.services.prescriptions import (
    DIAGNOSES,
    FOLLOW_UP_DAYS,
    GENERAL_INSTRUCTIONS,
    PrescriptionGenerator,
    generate_for_appointment,
    list_prescriptions,
)
from booking.tests.helpers import XMAS, make_slot

pytestmark = pytest.mark.django_db

NOW = datetime(2024, 12, 26, 8, 0, tzinfo=dt_timezone.utc)


def fixed_clock():
    return NOW


def seeded(seed=7):
    return PrescriptionGenerator(rng=random.Random(seed), clock=fixed_clock)


@pytest.fixture
def appointment(directory, patient):
    hospital, department, doctor = directory
    make_slot(doctor)
    return book(patient, hospital_id=hospital.id, department_id=department.id, doctor_id=doctor.id,
                day=XMAS, time='09:00')


def test_generate_builds_prescription_from_catalog(appointment, medicines):
    prescription = seeded().generate(appointment)

    names = {m.name for m in medicines}
    assert 1 <= len(prescription.medications) <= 3
    assert {m['name'] for m in prescription.medications} <= names
    assert len({m['name'] for m in prescription.medications}) == len(prescription.medications)
    assert prescription.appointment_id == appointment.id
    assert prescription.patient_id == appointment.patient_id
    assert prescription.diagnosis in DIAGNOSES['Cardiology']
    assert prescription.instructions in GENERAL_INSTRUCTIONS
    assert prescription.prescribed_at == NOW
    assert (prescription.follow_up_date - NOW).days in FOLLOW_UP_DAYS
    assert prescription.hospital_name == 'General Hospital'
    assert prescription.appointment_date == XMAS
    assert prescription.appointment_time == '09:00'


def test_medication_fields(appointment, medicines):
    prescription = seeded().generate(appointment)
    for med in prescription.medications:
        strength, frequency = med['dosage'].split(' ', 1)
        source = next(m for m in medicines if m.name == med['name'])
        assert strength in source.strengths
        assert med['category'] == source.category
        assert med['instructions'] == PrescriptionGenerator.medication_instructions(source.category)
        assert set(med) == {'name', 'genericName', 'dosage', 'frequency', 'duration', 'category', 'instructions'}


def test_same_seed_same_prescription(directory, patient, other_patient, medicines):
    hospital, department, doctor = directory
    make_slot(doctor, start='09:00', end='09:30')
    make_slot(doctor, start='09:30', end='10:00')
    common = dict(hospital_id=hospital.id, department_id=department.id, doctor_id=doctor.id, day=XMAS)
    a1 = book(patient, time='09:00', **common)
    a2 = book(other_patient, time='09:30', **common)

    p1 = seeded(42).generate(a1)
    p2 = seeded(42).generate(a2)

    assert p1.medications == p2.medications
    assert p1.diagnosis == p2.diagnosis
    assert p1.follow_up_date == p2.follow_up_date


def test_generate_twice_returns_original(appointment, medicines):
    first = seeded(1).generate(appointment)
    second = seeded(2).generate(appointment)
    assert first.pk == second.pk
    assert Prescription.objects.filter(appointment=appointment).count() == 1


def test_concurrent_duplicate_resolves_to_stored_row(appointment, medicines):
    stored = seeded(1).generate(appointment)
    # Simulate a generator that read "no prescription yet" before the other one committed.
    miss = mock.Mock()
    miss.first.return_value = None
    with mock.patch.object(Prescription.objects, 'filter', return_value=miss):
        result = seeded(2).generate(appointment)
    assert result.pk == stored.pk
    assert Prescription.objects.count() == 1


def test_empty_catalog(appointment):
    with pytest.raises(NoMedicinesAvailable):
        seeded().generate(appointment)
    assert Prescription.objects.count() == 0


def test_inactive_medicines_are_not_used(appointment, medicines):
    for m in medicines[1:]:
        m.is_active = False
        m.save()
    prescription = seeded().generate(appointment)
    assert [m['name'] for m in prescription.medications] == [medicines[0].name]


def test_lookup_fallbacks():
    gen = seeded()
    assert gen.dosage([]) == 'As directed'
    assert gen.dosage(None) == 'As directed'
    assert gen.diagnosis('Radiology') in DIAGNOSES['General']
    assert PrescriptionGenerator.medication_instructions('other') == 'Take as directed by your physician'
    assert PrescriptionGenerator.medication_instructions('antibiotic') == \
        'Complete the full course even if you feel better'


def test_generate_for_appointment_links_and_completes(appointment, patient, medicines):
    prescription = generate_for_appointment(patient, appointment.id, generator=seeded())
    appointment.refresh_from_db()
    assert appointment.prescription_id == prescription.id
    assert appointment.status == Appointment.STATUS_COMPLETED


def test_generate_for_appointment_rejects_duplicates(appointment, patient, medicines):
    generate_for_appointment(patient, appointment.id, generator=seeded())
    with pytest.raises(AlreadyExists):
        generate_for_appointment(patient, appointment.id, generator=seeded())


def test_generate_for_appointment_requires_eligible_status(appointment, patient, medicines):
    cancel(patient, appointment.id)
    with pytest.raises(NotEligible):
        generate_for_appointment(patient, appointment.id, generator=seeded())


def test_generate_for_appointment_is_scoped_to_patient(appointment, other_patient, medicines):
    with pytest.raises(NotFound):
        generate_for_appointment(other_patient, appointment.id, generator=seeded())


def test_generate_for_appointment_empty_catalog_changes_nothing(appointment, patient):
    with pytest.raises(NoMedicinesAvailable):
        generate_for_appointment(patient, appointment.id, generator=seeded())
    appointment.refresh_from_db()
    assert appointment.status == Appointment.STATUS_CONFIRMED
    assert appointment.prescription_id is None


def test_list_prescriptions(appointment, patient, other_patient, medicines):
    prescription = seeded().generate(appointment)
    data, total = list_prescriptions(patient)
    assert total == 1
    assert data[0]['id'] == prescription.id
    assert data[0]['department'] == 'Cardiology'

    assert list_prescriptions(other_patient) == ([], 0)
    assert list_prescriptions(patient, from_date=(NOW + timedelta(days=1)).date())[1] == 0
