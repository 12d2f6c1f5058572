"""
URL mappings for the booking API.

Trailing slashes are omitted, matching ``APPEND_SLASH = False``.
"""
from django.urls import path, include

from .views import appointments, directory, health, prescriptions, sweeps

urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz),

    path('api/appointments', appointments.appointments),
    path('api/appointments/<int:appointment_id>', appointments.appointment_detail),

    path('api/prescriptions', prescriptions.prescriptions),
    path('api/prescriptions/generate/<int:appointment_id>', prescriptions.prescription_generate),

    path('api/available-slots/<int:doctor_id>/<int:hospital_id>/<str:day>', directory.available_slots),
    path('api/hospital/locations', directory.locations),
    path('api/hospital/hospitals/<str:location>', directory.hospitals_by_location),
    path('api/hospital/departments', directory.departments),
    path('api/hospital/doctors/<int:department_id>/<int:hospital_id>', directory.doctors),

    path('api/admin/sweeps/run', sweeps.run_sweep),
]
