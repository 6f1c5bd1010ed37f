import logging

from django.db import IntegrityError
from django.db.models.deletion import ProtectedError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from domain.shared.exceptions import (
    AuthorizationException,
    BusinessRuleViolationException,
    ConcurrencyException,
    DomainException,
    EntityNotFoundException,
    InvalidOperationException,
    StatusTransitionException,
    ValidationException,
)

logger = logging.getLogger(__name__)

DOMAIN_STATUS_CODES = (
    (EntityNotFoundException, status.HTTP_404_NOT_FOUND),
    (ValidationException, status.HTTP_400_BAD_REQUEST),
    (AuthorizationException, status.HTTP_403_FORBIDDEN),
    (ConcurrencyException, status.HTTP_409_CONFLICT),
    (StatusTransitionException, status.HTTP_409_CONFLICT),
    (BusinessRuleViolationException, status.HTTP_409_CONFLICT),
    (InvalidOperationException, status.HTTP_409_CONFLICT),
)


def _domain_status(exc):
    for exc_class, status_code in DOMAIN_STATUS_CODES:
        if isinstance(exc, exc_class):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def custom_exception_handler(exc, context):
    """
    Map domain and database errors to ``{detail, error, details}`` responses.
    Everything else goes through the default DRF handler.
    """
    if isinstance(exc, DomainException):
        status_code = _domain_status(exc)
        view = context.get('view')
        logger.warning(
            "%s in %s: %s",
            exc.code, view.__class__.__name__ if view else 'unknown view', exc.message,
        )
        return Response(
            {
                'detail': exc.message,
                'error': exc.code.lower(),
                'details': exc.details,
            },
            status=status_code,
        )

    if isinstance(exc, ProtectedError):
        protected = [str(o) for o in list(exc.protected_objects)[:5]]
        logger.warning("Protected delete blocked: %s", protected)
        return Response(
            {
                'detail': 'Cannot delete object: it is referenced by other records.',
                'error': 'protected_error',
                'details': {'protected_objects_sample': protected},
            },
            status=status.HTTP_409_CONFLICT,
        )

    if isinstance(exc, IntegrityError):
        logger.warning("Integrity error: %s", exc)
        return Response(
            {
                'detail': 'Data integrity violation (related records may exist).',
                'error': 'integrity_error',
                'details': {},
            },
            status=status.HTTP_409_CONFLICT,
        )

    return exception_handler(exc, context)
