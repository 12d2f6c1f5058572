from rest_framework import serializers

from booking.models import Appointment

HHMM_REGEX = r'^([01]\d|2[0-3]):([0-5]\d)$'


class BookingSerializer(serializers.Serializer):
    hospitalId = serializers.IntegerField(min_value=1)
    departmentId = serializers.IntegerField(min_value=1)
    doctorId = serializers.IntegerField(min_value=1)
    appointmentDate = serializers.DateField(input_formats=['%Y-%m-%d'])
    appointmentTime = serializers.RegexField(
        HHMM_REGEX, error_messages={'invalid': 'Invalid time format. Use HH:MM'}
    )
    notes = serializers.CharField(max_length=2000, required=False, allow_blank=True)


class AppointmentUpdateSerializer(serializers.Serializer):
    notes = serializers.CharField(max_length=2000, required=False, allow_blank=True)


class AppointmentListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in Appointment.STATUS_CHOICES], required=False)
    fromDate = serializers.DateField(input_formats=['%Y-%m-%d'], required=False)
    toDate = serializers.DateField(input_formats=['%Y-%m-%d'], required=False)
    page = serializers.IntegerField(min_value=1, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)

    def validate(self, attrs):
        if attrs.get('fromDate') and attrs.get('toDate') and attrs['fromDate'] > attrs['toDate']:
            raise serializers.ValidationError({'toDate': 'toDate must not be before fromDate'})
        return attrs
