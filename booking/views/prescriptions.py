from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from booking.pagination import pagination_envelope
from booking.permissions import IsPatientRole
from booking.serializers.prescriptions import PrescriptionListQuerySerializer
from booking.services.prescriptions import format_prescription, generate_for_appointment, list_prescriptions


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def prescriptions(request):
    q = PrescriptionListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    page = q.validated_data.get('page', 1)
    limit = q.validated_data.get('limit', 10)
    data, total = list_prescriptions(
        request.user,
        from_date=q.validated_data.get('fromDate'),
        to_date=q.validated_data.get('toDate'),
        page=page,
        limit=limit,
    )
    return Response({'ok': True, 'data': data, 'pagination': pagination_envelope(page, limit, total)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPatientRole])
def prescription_generate(request, appointment_id: int):
    prescription = generate_for_appointment(request.user, appointment_id)
    return Response({'ok': True, 'message': 'Prescription generated successfully',
                     'data': format_prescription(prescription)}, status=status.HTTP_201_CREATED)
