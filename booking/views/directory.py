"""
Read-only directory endpoints used while picking an appointment: locations,
hospitals, departments, doctors and the free slots of one doctor on one day.
"""
from datetime import date

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from booking.exceptions import ValidationError
from booking.models import Department, Doctor, Hospital
from booking.services.slots import find_available_slots, format_slot


@api_view(['GET'])
@permission_classes([AllowAny])
def locations(request):
    values = (Hospital.objects.filter(is_active=True)
              .order_by('location').values_list('location', flat=True).distinct())
    return Response({'ok': True, 'data': list(values)})


@api_view(['GET'])
@permission_classes([AllowAny])
def hospitals_by_location(request, location: str):
    location = (location or '').strip()
    if not location:
        raise ValidationError('Location is required')
    qs = Hospital.objects.filter(location__icontains=location, is_active=True).order_by('name')
    data = [{
        'id': h.id,
        'name': h.name,
        'location': h.location,
        'address': {'street': h.street, 'city': h.city, 'state': h.state, 'zipCode': h.zip_code},
        'phone': h.phone,
        'email': h.email,
    } for h in qs]
    return Response({'ok': True, 'data': data})


@api_view(['GET'])
@permission_classes([AllowAny])
def departments(request):
    qs = Department.objects.filter(is_active=True).order_by('name')
    return Response({'ok': True, 'data': [{'id': d.id, 'name': d.name, 'description': d.description} for d in qs]})


@api_view(['GET'])
@permission_classes([AllowAny])
def doctors(request, department_id: int, hospital_id: int):
    qs = Doctor.objects.filter(department_id=department_id, hospital_id=hospital_id, is_active=True).order_by('name')
    data = [{
        'id': d.id,
        'name': d.name,
        'specialty': d.specialty,
        'consultationFee': str(d.consultation_fee),
        'experience': d.experience,
        'qualifications': d.qualifications,
        'email': d.email,
        'phone': d.phone,
        'appointmentDuration': d.appointment_duration,
    } for d in qs]
    return Response({'ok': True, 'data': data})


@api_view(['GET'])
@permission_classes([AllowAny])
def available_slots(request, doctor_id: int, hospital_id: int, day: str):
    try:
        slot_date = date.fromisoformat(day)
    except ValueError:
        raise ValidationError('Invalid date format')
    duration = Doctor.objects.filter(pk=doctor_id).values_list('appointment_duration', flat=True).first() or 30
    data = [format_slot(s, duration) for s in find_available_slots(doctor_id, hospital_id, slot_date)]
    return Response({'ok': True, 'data': data, 'count': len(data)})
