import logging

from django.db import DatabaseError
from rest_framework import exceptions, status
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class BookingError(exceptions.APIException):
    """Base class for booking domain failures."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Booking request failed.'
    default_code = 'booking_error'


class ValidationError(BookingError):
    default_detail = 'Invalid input.'
    default_code = 'validation_error'


class NotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class SlotUnavailable(BookingError):
    default_detail = 'Selected time slot is no longer available'
    default_code = 'slot_unavailable'


class AlreadyCancelled(BookingError):
    default_detail = 'Appointment is already cancelled'
    default_code = 'already_cancelled'


class InvalidTransition(BookingError):
    default_detail = 'Appointment status cannot change in this way'
    default_code = 'invalid_transition'


class NotEligible(BookingError):
    default_detail = 'Prescription can only be generated for confirmed or completed appointments'
    default_code = 'not_eligible'


class AlreadyExists(BookingError):
    default_detail = 'Prescription already exists for this appointment'
    default_code = 'already_exists'


class NoMedicinesAvailable(BookingError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'No medicines available in database'
    default_code = 'no_medicines_available'


class StorageError(BookingError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Storage failure, please retry later'
    default_code = 'storage_error'


def _error(code, message, status_code):
    return Response({'ok': False, 'error': {'code': code, 'message': message}}, status=status_code)


def api_exception_handler(exc, context):
    if isinstance(exc, DatabaseError):
        logger.exception('storage failure in %s', context.get('view'))
        exc = StorageError()
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled error in %s', context.get('view'))
        return _error('server_error', str(exc), 500)
    if isinstance(exc, BookingError):
        return _error(exc.default_code, str(exc.detail), resp.status_code)
    if isinstance(exc, exceptions.ValidationError):
        return _error('validation_error', resp.data, resp.status_code)
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    return _error('api_error', detail, resp.status_code)
