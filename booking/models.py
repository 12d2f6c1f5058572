"""
Database models for the appointment booking backend.

The directory (hospitals, departments, doctors and the medicine catalog)
is read-mostly reference data. The booking core is made of three tables:
``AppointmentSlot`` (pre-generated bookable intervals), ``Appointment``
(each patient's ledger, keyed by patient) and ``Prescription`` (at most
one per appointment).
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models
from django.db.models import Q

HHMM_VALIDATOR = RegexValidator(r'^([01]\d|2[0-3]):([0-5]\d)$', 'Invalid time format. Use HH:MM')


class User(AbstractUser):
    """Account with a role.

    Patients own appointments and prescriptions; admins may trigger
    sweeps and manage the directory through the Django admin.
    """
    ROLE_CHOICES = [
        ('patient', 'Patient'),
        ('admin', 'Administrator'),
    ]
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='patient')
    phone = models.CharField(max_length=20, blank=True)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Department(models.Model):
    """A medical specialty such as Cardiology or Neurology."""
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.name


class Hospital(models.Model):
    name = models.CharField(max_length=255)
    # City or region, used for location browsing.
    location = models.CharField(max_length=120)
    street = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=120, blank=True)
    state = models.CharField(max_length=120, blank=True)
    zip_code = models.CharField(max_length=20, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    departments = models.ManyToManyField(Department, blank=True, related_name='hospitals')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['location', 'is_active'], name='hospital_loc_active_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.location})"


class Doctor(models.Model):
    """A practitioner working in one department of one hospital.

    ``appointment_duration`` is the slot length used when slots are
    generated for this doctor.
    """
    name = models.CharField(max_length=255)
    specialty = models.CharField(max_length=255)
    department = models.ForeignKey(Department, on_delete=models.PROTECT, related_name='doctors')
    hospital = models.ForeignKey(Hospital, on_delete=models.PROTECT, related_name='doctors')
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    experience = models.PositiveIntegerField(null=True, blank=True)
    qualifications = models.JSONField(default=list, blank=True)
    consultation_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    appointment_duration = models.PositiveIntegerField(
        default=30, validators=[MinValueValidator(5), MaxValueValidator(120)]
    )
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['hospital', 'department', 'is_active'], name='doctor_hosp_dept_active_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.specialty})"


class DoctorAvailability(models.Model):
    """Weekly working hours. ``day_of_week`` is 0 for Sunday up to 6."""
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name='availability')
    day_of_week = models.PositiveSmallIntegerField(validators=[MaxValueValidator(6)])
    start_time = models.CharField(max_length=5, validators=[HHMM_VALIDATOR])
    end_time = models.CharField(max_length=5, validators=[HHMM_VALIDATOR])
    is_available = models.BooleanField(default=True)

    class Meta:
        ordering = ['day_of_week', 'start_time']

    def __str__(self) -> str:
        return f"{self.doctor_id} d{self.day_of_week} {self.start_time}-{self.end_time}"


class AppointmentSlot(models.Model):
    """A fixed interval for one doctor at one hospital on one date.

    A slot is either free (available, not booked, no claimant) or claimed
    (unavailable, booked, ``booked_by`` set); the check constraint keeps
    those three columns in step. Slots are only mutated through
    :mod:`booking.services.slots`.
    """
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name='slots')
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='slots')
    date = models.DateField(db_index=True)
    start_time = models.CharField(max_length=5, validators=[HHMM_VALIDATOR])
    end_time = models.CharField(max_length=5, validators=[HHMM_VALIDATOR])
    duration = models.PositiveIntegerField(
        default=30, validators=[MinValueValidator(5), MaxValueValidator(240)]
    )
    is_booked = models.BooleanField(default=False, db_index=True)
    is_available = models.BooleanField(default=True, db_index=True)
    booked_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.PROTECT, related_name='booked_slots'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['doctor', 'hospital', 'date', 'start_time'], name='uniq_slot_doctor_hospital_date_start'
            ),
            models.CheckConstraint(
                condition=(
                    Q(is_booked=False, is_available=True, booked_by__isnull=True)
                    | Q(is_booked=True, is_available=False, booked_by__isnull=False)
                ),
                name='slot_free_or_claimed',
            ),
        ]
        indexes = [
            models.Index(fields=['date', 'is_available', 'is_booked'], name='slot_date_avail_booked_idx'),
            models.Index(fields=['doctor', 'date', 'is_available'], name='slot_doctor_date_avail_idx'),
        ]

    def __str__(self) -> str:
        return f"Slot(d={self.doctor_id}, h={self.hospital_id}, {self.date} {self.start_time})"


class Appointment(models.Model):
    """One entry in a patient's appointment ledger.

    Names of the hospital, department and doctor are copied at booking
    time so the ledger reads correctly even if the directory changes.
    ``slot`` is a weak back-reference and ``prescription`` is set once.
    """
    STATUS_SCHEDULED = 'scheduled'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_NO_SHOW = 'no-show'
    STATUS_CHOICES = [
        (STATUS_SCHEDULED, 'Scheduled'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_NO_SHOW, 'No show'),
    ]

    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='appointments')
    hospital = models.ForeignKey(Hospital, on_delete=models.PROTECT, related_name='appointments')
    hospital_name = models.CharField(max_length=255)
    department = models.ForeignKey(Department, on_delete=models.PROTECT, related_name='appointments')
    department_name = models.CharField(max_length=100)
    doctor = models.ForeignKey(Doctor, on_delete=models.PROTECT, related_name='appointments')
    doctor_name = models.CharField(max_length=255)
    date = models.DateField(db_index=True)
    time = models.CharField(max_length=5, validators=[HHMM_VALIDATOR])
    location = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_CONFIRMED, db_index=True)
    slot = models.ForeignKey(
        AppointmentSlot, null=True, blank=True, on_delete=models.SET_NULL, related_name='appointments'
    )
    prescription = models.OneToOneField(
        'Prescription', null=True, blank=True, on_delete=models.SET_NULL, related_name='linked_appointment'
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['patient', 'status'], name='appt_patient_status_idx'),
            models.Index(fields=['patient', 'created_at'], name='appt_patient_created_idx'),
        ]

    def __str__(self) -> str:
        return f"Appointment #{self.pk} {self.date} {self.time} ({self.status})"


class Medicine(models.Model):
    """Catalog entry used as raw material for generated prescriptions."""
    CATEGORY_CHOICES = [
        ('antibiotic', 'Antibiotic'),
        ('analgesic', 'Analgesic'),
        ('anti-inflammatory', 'Anti-inflammatory'),
        ('antihistamine', 'Antihistamine'),
        ('cardiovascular', 'Cardiovascular'),
        ('gastrointestinal', 'Gastrointestinal'),
        ('respiratory', 'Respiratory'),
        ('endocrine', 'Endocrine'),
        ('vitamin', 'Vitamin'),
        ('other', 'Other'),
    ]
    name = models.CharField(max_length=255, unique=True)
    generic_name = models.CharField(max_length=255)
    dosage_forms = models.JSONField(default=list, blank=True)
    strengths = models.JSONField(default=list, blank=True)
    category = models.CharField(max_length=32, choices=CATEGORY_CHOICES, blank=True)
    common_uses = models.JSONField(default=list, blank=True)
    side_effects = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.name


class Prescription(models.Model):
    """Generated prescription, unique per appointment.

    ``medications`` is a list of dicts with ``name``, ``genericName``,
    ``dosage``, ``frequency``, ``duration``, ``category`` and
    ``instructions``.
    """
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]
    appointment = models.OneToOneField(Appointment, on_delete=models.CASCADE, related_name='issued_prescription')
    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='prescriptions')
    hospital_name = models.CharField(max_length=255)
    department_name = models.CharField(max_length=100)
    doctor_name = models.CharField(max_length=255)
    appointment_date = models.DateField()
    appointment_time = models.CharField(max_length=5)
    diagnosis = models.CharField(max_length=255)
    medications = models.JSONField(default=list)
    instructions = models.TextField()
    follow_up_date = models.DateTimeField(null=True, blank=True)
    prescribed_at = models.DateTimeField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='active')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['patient', 'prescribed_at'], name='rx_patient_prescribed_idx'),
        ]

    def __str__(self) -> str:
        return f"Prescription #{self.pk} for appointment {self.appointment_id}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.object_type}#{self.object_id}"
