"""
Management command to populate the directory with demo data.

Creates departments, hospitals, doctors with a 09:00-17:00 weekly schedule,
the medicine catalog and, unless ``--no-slots`` is given, slots for the
booking horizon. Re-running it updates existing rows by name.
"""
from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction

from booking.models import Department, Doctor, DoctorAvailability, Hospital, Medicine
from booking.services.slots import generate_slots

DEPARTMENTS = [
    ('Cardiology', 'Heart and cardiovascular system specialists'),
    ('Dermatology', 'Skin, hair, and nail specialists'),
    ('Neurology', 'Brain and nervous system specialists'),
    ('Orthopedics', 'Bone and joint specialists'),
    ('Pediatrics', 'Child healthcare specialists'),
    ('Oncology', 'Cancer treatment specialists'),
    ('Gynecology', "Women's health specialists"),
    ('Psychiatry', 'Mental health specialists'),
]

HOSPITALS = [
    {'name': 'NewYork-Presbyterian Hospital', 'location': 'New York', 'street': '525 E 68th St',
     'city': 'New York', 'state': 'NY', 'zip_code': '10065', 'phone': '(212) 746-5454', 'email': 'info@nyp.org'},
    {'name': 'Mount Sinai Hospital', 'location': 'New York', 'street': '1 Gustave L Levy Pl',
     'city': 'New York', 'state': 'NY', 'zip_code': '10029', 'phone': '(212) 241-6500',
     'email': 'info@mountsinai.org'},
    {'name': 'Cedars-Sinai Medical Center', 'location': 'Los Angeles', 'street': '8700 Beverly Blvd',
     'city': 'Los Angeles', 'state': 'CA', 'zip_code': '90048', 'phone': '(310) 423-5000',
     'email': 'info@csmc.edu'},
    {'name': 'UCLA Medical Center', 'location': 'Los Angeles', 'street': '757 Westwood Plaza',
     'city': 'Los Angeles', 'state': 'CA', 'zip_code': '90095', 'phone': '(310) 825-9111',
     'email': 'info@uclahealth.org'},
]

# (name, specialty, department, hospital index, experience, fee, duration)
DOCTORS = [
    ('Dr. Sarah Johnson', 'Cardiologist', 'Cardiology', 0, 15, 200, 30),
    ('Dr. Michael Chen', 'Cardiac Surgeon', 'Cardiology', 1, 20, 300, 45),
    ('Dr. James Wilson', 'Dermatologist', 'Dermatology', 0, 10, 180, 30),
    ('Dr. Maria Garcia', 'Cosmetic Dermatologist', 'Dermatology', 1, 8, 220, 30),
    ('Dr. Benjamin Carter', 'Neurologist', 'Neurology', 0, 12, 210, 45),
    ('Dr. Jennifer Lee', 'Neurosurgeon', 'Neurology', 2, 18, 350, 60),
    ('Dr. David Martinez', 'Orthopedic Surgeon', 'Orthopedics', 1, 14, 240, 30),
    ('Dr. Amanda Foster', 'Sports Medicine', 'Orthopedics', 3, 9, 200, 30),
    ('Dr. Rachel Green', 'Pediatrician', 'Pediatrics', 0, 11, 160, 30),
    ('Dr. Kevin Patel', 'Pediatric Specialist', 'Pediatrics', 2, 13, 170, 30),
    ('Dr. Susan Wong', 'Oncologist', 'Oncology', 1, 16, 280, 45),
    ('Dr. Richard Brown', 'Radiation Oncologist', 'Oncology', 3, 19, 320, 60),
    ('Dr. Lisa Taylor', 'Gynecologist', 'Gynecology', 0, 12, 190, 30),
    ('Dr. Christopher Evans', 'OB/GYN', 'Gynecology', 2, 15, 210, 30),
    ('Dr. Michelle Scott', 'Psychiatrist', 'Psychiatry', 1, 10, 180, 60),
    ('Dr. Daniel Harris', 'Clinical Psychiatrist', 'Psychiatry', 3, 14, 200, 60),
]

# (name, generic name, strengths, category)
MEDICINES = [
    ('Amoxicillin', 'Amoxicillin', ['250mg', '500mg'], 'antibiotic'),
    ('Ibuprofen', 'Ibuprofen', ['200mg', '400mg', '600mg'], 'analgesic'),
    ('Lisinopril', 'Lisinopril', ['5mg', '10mg', '20mg'], 'cardiovascular'),
    ('Metformin', 'Metformin', ['500mg', '850mg', '1000mg'], 'endocrine'),
    ('Atorvastatin', 'Atorvastatin', ['10mg', '20mg', '40mg'], 'cardiovascular'),
    ('Levothyroxine', 'Levothyroxine', ['25mcg', '50mcg', '100mcg'], 'endocrine'),
    ('Albuterol', 'Albuterol', ['90mcg'], 'respiratory'),
    ('Omeprazole', 'Omeprazole', ['20mg', '40mg'], 'gastrointestinal'),
    ('Sertraline', 'Sertraline', ['25mg', '50mg', '100mg'], 'other'),
    ('Gabapentin', 'Gabapentin', ['100mg', '300mg', '400mg'], 'analgesic'),
    ('Pantoprazole', 'Pantoprazole', ['20mg', '40mg'], 'gastrointestinal'),
    ('Amlodipine', 'Amlodipine', ['5mg', '10mg'], 'cardiovascular'),
    ('Prednisone', 'Prednisone', ['5mg', '10mg', '20mg'], 'anti-inflammatory'),
    ('Cephalexin', 'Cephalexin', ['250mg', '500mg'], 'antibiotic'),
    ('Cetirizine', 'Cetirizine', ['5mg', '10mg'], 'antihistamine'),
    ('Montelukast', 'Montelukast', ['10mg'], 'respiratory'),
    ('Vitamin D3', 'Cholecalciferol', ['1000IU', '2000IU', '5000IU'], 'vitamin'),
]


class Command(BaseCommand):
    help = 'Populate the directory, medicine catalog and slots with demo data'

    def add_arguments(self, parser):
        parser.add_argument('--days', type=int, default=settings.SLOT_HORIZON_DAYS)
        parser.add_argument('--no-slots', action='store_true', help='Skip slot generation')

    def handle(self, *args, **options):
        with transaction.atomic():
            departments = self.create_departments()
            hospitals = self.create_hospitals(departments)
            doctors = self.create_doctors(departments, hospitals)
            medicines = self.create_medicines()
        self.stdout.write(
            f"{len(departments)} departments, {len(hospitals)} hospitals, "
            f"{len(doctors)} doctors, {medicines} medicines"
        )

        if not options['no_slots']:
            total = sum(generate_slots(d, days=options['days']) for d in doctors)
            self.stdout.write(f"{total} slots created")

        self.stdout.write(self.style.SUCCESS('Demo data ready'))

    def create_departments(self):
        result = {}
        for name, description in DEPARTMENTS:
            dept, _ = Department.objects.update_or_create(name=name, defaults={'description': description})
            result[name] = dept
        return result

    def create_hospitals(self, departments):
        result = []
        for data in HOSPITALS:
            fields = dict(data)
            hospital, _ = Hospital.objects.update_or_create(name=fields.pop('name'), defaults=fields)
            hospital.departments.set(departments.values())
            result.append(hospital)
        return result

    def create_doctors(self, departments, hospitals):
        result = []
        for name, specialty, dept, hosp, experience, fee, duration in DOCTORS:
            slug = name.replace('Dr. ', '').lower().replace(' ', '.')
            doctor, created = Doctor.objects.update_or_create(name=name, defaults={
                'specialty': specialty,
                'department': departments[dept],
                'hospital': hospitals[hosp],
                'email': f'{slug}@hospital.com',
                'experience': experience,
                'qualifications': ['MD'],
                'consultation_fee': fee,
                'appointment_duration': duration,
            })
            if created or not doctor.availability.exists():
                DoctorAvailability.objects.bulk_create([
                    DoctorAvailability(doctor=doctor, day_of_week=day, start_time='09:00', end_time='17:00')
                    for day in range(7)
                ])
            result.append(doctor)
        return result

    def create_medicines(self):
        for name, generic, strengths, category in MEDICINES:
            Medicine.objects.update_or_create(name=name, defaults={
                'generic_name': generic,
                'strengths': strengths,
                'category': category,
                'dosage_forms': ['inhaler'] if category == 'respiratory' else ['tablet'],
            })
        return len(MEDICINES)
