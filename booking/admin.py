"""
Django admin registrations for the booking models.

The directory and the medicine catalog are maintained here. Slots,
appointments and prescriptions are listed for inspection; their state
should change through the API so slot claims stay consistent.
"""

from django.contrib import admin

from .models import (
    User,
    Department,
    Hospital,
    Doctor,
    DoctorAvailability,
    AppointmentSlot,
    Appointment,
    Medicine,
    Prescription,
    AuditEvent,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'email', 'is_staff', 'is_superuser')
    list_filter = ('role',)
    search_fields = ('username', 'first_name', 'last_name', 'email')


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'is_active')
    list_filter = ('is_active',)
    search_fields = ('name',)


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'location', 'phone', 'is_active')
    list_filter = ('location', 'is_active')
    search_fields = ('name', 'location', 'city')


class DoctorAvailabilityInline(admin.TabularInline):
    model = DoctorAvailability
    extra = 0


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'specialty', 'department', 'hospital', 'appointment_duration', 'is_active')
    list_filter = ('department', 'hospital', 'is_active')
    search_fields = ('name', 'specialty')
    inlines = [DoctorAvailabilityInline]


@admin.register(AppointmentSlot)
class AppointmentSlotAdmin(admin.ModelAdmin):
    list_display = ('id', 'doctor', 'hospital', 'date', 'start_time', 'end_time', 'is_booked', 'booked_by')
    list_filter = ('is_booked', 'is_available', 'date')
    search_fields = ('doctor__name', 'hospital__name')
    readonly_fields = ('is_booked', 'is_available', 'booked_by')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor_name', 'hospital_name', 'date', 'time', 'status')
    list_filter = ('status', 'date')
    search_fields = ('id', 'patient__username', 'doctor_name', 'hospital_name')
    readonly_fields = ('slot', 'prescription')


@admin.register(Medicine)
class MedicineAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'generic_name', 'category', 'is_active')
    list_filter = ('category', 'is_active')
    search_fields = ('name', 'generic_name')


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('id', 'appointment', 'patient', 'diagnosis', 'prescribed_at', 'status')
    list_filter = ('status',)
    search_fields = ('id', 'patient__username', 'diagnosis')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('id', 'action', 'object_type', 'object_id', 'user', 'created_at')
    list_filter = ('action', 'object_type')
    search_fields = ('action', 'user__username')
