"""
Prescription generation.

A prescription is synthesised from the active medicine catalog and a few
lookup tables. All randomness goes through an injected ``random.Random`` and
the timestamp through an injected clock, so a seeded generator produces the
same prescription every time.
"""
import logging
import random
from datetime import date, timedelta
from typing import Callable, Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from booking.exceptions import AlreadyExists, NoMedicinesAvailable, NotEligible
from booking.models import Appointment, Medicine, Prescription
from booking.services.appointments import get_patient_appointment, transition
from booking.services.audit import log_action

logger = logging.getLogger(__name__)

DIAGNOSES = {
    'Cardiology': ['Hypertension', 'Coronary artery disease', 'Arrhythmia', 'Heart failure', 'Chest pain'],
    'Dermatology': ['Acne vulgaris', 'Eczema', 'Psoriasis', 'Contact dermatitis', 'Skin infection'],
    'Neurology': ['Migraine', 'Tension headache', 'Neuropathy', 'Insomnia', 'Anxiety disorder'],
    'Orthopedics': ['Osteoarthritis', 'Back pain', 'Sprain', 'Tendinitis', 'Fracture follow-up'],
    'Pediatrics': ['Upper respiratory infection', 'Ear infection', 'Viral illness', 'Allergic rhinitis', 'Asthma'],
    'Oncology': ['Follow-up care', 'Symptom management', 'Treatment monitoring', 'Pain management'],
    'Gynecology': ['Menstrual disorder', 'UTI', 'Vaginal infection', 'Contraception management',
                   'Pregnancy follow-up'],
    'Psychiatry': ['Anxiety disorder', 'Depression', 'Insomnia', 'Stress management', 'Mood disorder'],
    'General': ['General medical condition', 'Follow-up examination', 'Routine checkup', 'Health maintenance'],
}

DOSAGE_FREQUENCIES = ['once daily', 'twice daily', 'three times daily', 'four times daily', 'as needed']

ADMINISTRATION_LABELS = [
    'Take with food',
    'Take on empty stomach',
    'Take with plenty of water',
    'Take at bedtime',
    'Take in the morning',
    'Take with meals',
]

DURATIONS = ['7 days', '10 days', '14 days', '30 days', 'As needed', 'Until finished', '90 days']

CATEGORY_INSTRUCTIONS = {
    'antibiotic': 'Complete the full course even if you feel better',
    'analgesic': 'Take with food if stomach upset occurs',
    'anti-inflammatory': 'Take with food or milk to avoid stomach irritation',
    'antihistamine': 'May cause drowsiness - avoid driving',
    'cardiovascular': 'Take at the same time every day',
    'gastrointestinal': 'Take 30-60 minutes before meals',
    'respiratory': 'Rinse mouth after using inhaler',
    'endocrine': 'Take with food to reduce stomach upset',
    'vitamin': 'Take with food for better absorption',
}
DEFAULT_MEDICATION_INSTRUCTION = 'Take as directed by your physician'

GENERAL_INSTRUCTIONS = [
    'Complete the full course of medication',
    'Return if symptoms worsen',
    'Avoid alcohol while taking this medication',
    'May cause drowsiness - avoid driving',
    'Take with plenty of water',
    'Store at room temperature away from moisture',
    'Follow up if no improvement in 3 days',
    'Maintain adequate hydration',
    'Avoid prolonged sun exposure',
]

FOLLOW_UP_DAYS = [7, 14, 30, 60, 90]
MAX_MEDICATIONS = 3


class PrescriptionGenerator:
    """Creates at most one prescription per appointment."""

    def __init__(self, rng: Optional[random.Random] = None, clock: Callable = timezone.now):
        self.rng = rng or random.Random()
        self.clock = clock

    def diagnosis(self, department: str) -> str:
        return self.rng.choice(DIAGNOSES.get(department) or DIAGNOSES['General'])

    def dosage(self, strengths) -> str:
        if not strengths:
            return 'As directed'
        return f"{self.rng.choice(strengths)} {self.rng.choice(DOSAGE_FREQUENCIES)}"

    @staticmethod
    def medication_instructions(category: str) -> str:
        return CATEGORY_INSTRUCTIONS.get(category, DEFAULT_MEDICATION_INSTRUCTION)

    def medication(self, medicine: Medicine) -> dict:
        return {
            'name': medicine.name,
            'genericName': medicine.generic_name,
            'dosage': self.dosage(medicine.strengths),
            'frequency': self.rng.choice(ADMINISTRATION_LABELS),
            'duration': self.rng.choice(DURATIONS),
            'category': medicine.category,
            'instructions': self.medication_instructions(medicine.category),
        }

    def pick_medicines(self) -> list:
        catalog = list(Medicine.objects.filter(is_active=True).order_by('id'))
        if not catalog:
            raise NoMedicinesAvailable()
        count = self.rng.randint(1, MAX_MEDICATIONS)
        return self.rng.sample(catalog, min(count, len(catalog)))

    def generate(self, appointment: Appointment) -> Prescription:
        """Return the appointment's prescription, creating it if needed.

        Raises :class:`NoMedicinesAvailable` when the catalog is empty. A
        duplicate insert racing with another generator resolves to the row
        that won.
        """
        existing = Prescription.objects.filter(appointment_id=appointment.pk).first()
        if existing is not None:
            return existing

        medicines = self.pick_medicines()
        now = self.clock()
        try:
            with transaction.atomic():
                prescription = Prescription.objects.create(
                    appointment=appointment,
                    patient_id=appointment.patient_id,
                    hospital_name=appointment.hospital_name,
                    department_name=appointment.department_name,
                    doctor_name=appointment.doctor_name,
                    appointment_date=appointment.date,
                    appointment_time=appointment.time,
                    diagnosis=self.diagnosis(appointment.department_name),
                    medications=[self.medication(m) for m in medicines],
                    instructions=self.rng.choice(GENERAL_INSTRUCTIONS),
                    follow_up_date=now + timedelta(days=self.rng.choice(FOLLOW_UP_DAYS)),
                    prescribed_at=now,
                )
        except IntegrityError:
            logger.info('prescription for appointment %s already stored', appointment.pk)
            return Prescription.objects.get(appointment_id=appointment.pk)

        logger.info('generated prescription %s for appointment %s', prescription.pk, appointment.pk)
        return prescription


def generate_for_appointment(patient, appointment_id: int,
                             generator: Optional[PrescriptionGenerator] = None) -> Prescription:
    """Generate a prescription on request for one of the patient's appointments.

    Only confirmed or completed appointments without a prescription are
    eligible. On success the appointment is linked and marked completed.
    """
    generator = generator or PrescriptionGenerator()
    with transaction.atomic():
        appointment = get_patient_appointment(patient, appointment_id, for_update=True)
        if appointment.status not in (Appointment.STATUS_CONFIRMED, Appointment.STATUS_COMPLETED):
            raise NotEligible('Prescription can only be generated for confirmed or completed appointments')
        if appointment.prescription_id or Prescription.objects.filter(appointment_id=appointment.pk).exists():
            raise AlreadyExists('Prescription already exists for this appointment')

        prescription = generator.generate(appointment)
        appointment.prescription = prescription
        if appointment.status == Appointment.STATUS_CONFIRMED:
            transition(appointment, Appointment.STATUS_COMPLETED)
        appointment.save(update_fields=['prescription', 'status', 'updated_at'])
        log_action(user=patient, action='prescription_generate', object_type='prescription',
                   object_id=prescription.pk, detail={'appointmentId': appointment.pk})
    return prescription


def list_prescriptions(patient, *, from_date: Optional[date]=None, to_date: Optional[date]=None,
                       page: int=1, limit: int=10):
    qs = Prescription.objects.filter(patient=patient)
    if from_date:
        qs = qs.filter(prescribed_at__date__gte=from_date)
    if to_date:
        qs = qs.filter(prescribed_at__date__lte=to_date)

    total = qs.count()
    page = max(1, int(page or 1))
    limit = min(100, max(1, int(limit or 10)))
    start = (page-1)*limit
    items = qs.order_by('-prescribed_at', '-id')[start:start+limit]
    return [format_prescription(p) for p in items], total


def format_prescription(p: Prescription) -> dict:
    return {
        'id': p.id,
        'appointmentId': p.appointment_id,
        'hospitalName': p.hospital_name,
        'department': p.department_name,
        'doctorName': p.doctor_name,
        'appointmentDate': p.appointment_date.isoformat(),
        'appointmentTime': p.appointment_time,
        'diagnosis': p.diagnosis,
        'medications': p.medications,
        'instructions': p.instructions,
        'followUpDate': p.follow_up_date.isoformat() if p.follow_up_date else None,
        'prescribedAt': p.prescribed_at.isoformat(),
        'status': p.status,
    }
