from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from booking.pagination import pagination_envelope
from booking.permissions import IsPatientRole
from booking.serializers.appointments import (
    AppointmentListQuerySerializer,
    AppointmentUpdateSerializer,
    BookingSerializer,
)
from booking.services.appointments import book, cancel, format_appointment, list_appointments, update_notes


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsPatientRole])
def appointments(request):
    """List the caller's appointments (GET) or book a new one (POST).

    Query params for GET: status, fromDate, toDate, page, limit.
    """
    if request.method == 'POST':
        s = BookingSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data
        appointment = book(
            request.user,
            hospital_id=v['hospitalId'],
            department_id=v['departmentId'],
            doctor_id=v['doctorId'],
            day=v['appointmentDate'],
            time=v['appointmentTime'],
            notes=v.get('notes', ''),
        )
        return Response({'ok': True, 'data': format_appointment(appointment)}, status=status.HTTP_201_CREATED)

    q = AppointmentListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    page = q.validated_data.get('page', 1)
    limit = q.validated_data.get('limit', 10)
    data, total = list_appointments(
        request.user,
        status=q.validated_data.get('status'),
        from_date=q.validated_data.get('fromDate'),
        to_date=q.validated_data.get('toDate'),
        page=page,
        limit=limit,
    )
    return Response({'ok': True, 'data': data, 'pagination': pagination_envelope(page, limit, total)})


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsPatientRole])
def appointment_detail(request, appointment_id: int):
    if request.method == 'DELETE':
        appointment = cancel(request.user, appointment_id)
        return Response({'ok': True, 'message': 'Appointment cancelled successfully',
                         'data': format_appointment(appointment)})

    s = AppointmentUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appointment = update_notes(request.user, appointment_id, s.validated_data.get('notes'))
    return Response({'ok': True, 'data': format_appointment(appointment)})
