from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from booking.permissions import IsAdminRole
from booking.services.sweeper import ExpirationSweeper


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def run_sweep(request):
    """Run one expiration sweep immediately and report what it did."""
    result = ExpirationSweeper().sweep()
    return Response({'ok': True, 'data': result.as_dict()})
