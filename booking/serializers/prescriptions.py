from rest_framework import serializers


class PrescriptionListQuerySerializer(serializers.Serializer):
    fromDate = serializers.DateField(input_formats=['%Y-%m-%d'], required=False)
    toDate = serializers.DateField(input_formats=['%Y-%m-%d'], required=False)
    page = serializers.IntegerField(min_value=1, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)
