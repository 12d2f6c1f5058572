"""Shared builders for booking tests."""
from datetime import date

from booking.models import AppointmentSlot, Department, Doctor, Hospital, Medicine

XMAS = date(2024, 12, 25)


def build_directory():
    """One hospital, one Cardiology department and one doctor with 30 minute visits."""
    department = Department.objects.create(name='Cardiology', description='Heart')
    hospital = Hospital.objects.create(name='General Hospital', location='New York', city='New York')
    hospital.departments.add(department)
    doctor = Doctor.objects.create(
        name='Dr. Sarah Johnson', specialty='Cardiologist', department=department, hospital=hospital,
        consultation_fee=200, appointment_duration=30,
    )
    return hospital, department, doctor


def make_slot(doctor, day=XMAS, start='09:00', end='09:30', duration=30):
    return AppointmentSlot.objects.create(
        doctor=doctor, hospital_id=doctor.hospital_id, date=day, start_time=start, end_time=end, duration=duration,
    )


def make_medicines(count=5):
    catalog = [
        ('Amoxicillin', ['250mg', '500mg'], 'antibiotic'),
        ('Ibuprofen', ['200mg', '400mg'], 'analgesic'),
        ('Lisinopril', ['5mg', '10mg'], 'cardiovascular'),
        ('Metformin', ['500mg'], 'endocrine'),
        ('Omeprazole', ['20mg', '40mg'], 'gastrointestinal'),
    ]
    return [
        Medicine.objects.create(name=name, generic_name=name, strengths=strengths, category=category)
        for name, strengths, category in catalog[:count]
    ]
