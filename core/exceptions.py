"""
Error taxonomy for the gig lifecycle and settlement engine.

Every engine error is a DRF ``APIException`` so views can let it propagate and
``gig_exception_handler`` renders it as::

    {"error": "Human-readable message", "code": "machine_code", ...extra}
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class GigEngineError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The request could not be processed.'
    default_code = 'gig_engine_error'

    def __init__(self, detail=None, code=None, extra=None):
        super().__init__(detail=detail, code=code)
        self.code = code or self.default_code
        self.extra = extra or {}

    def as_dict(self):
        data = {'error': str(self.detail), 'code': self.code}
        data.update(self.extra)
        return data


class Unauthorized(GigEngineError):
    """Actor is not the gig's client or the selected/reviewed student."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You are not authorized to perform this action.'
    default_code = 'unauthorized'


class InvalidState(GigEngineError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This action is not allowed in the current gig state.'
    default_code = 'invalid_state'


class GigNotOpen(InvalidState):
    default_detail = 'This gig is not open for applications.'
    default_code = 'gig_not_open'


class AlreadyApplied(GigEngineError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'You have already applied to this gig.'
    default_code = 'already_applied'


class AlreadyDecided(GigEngineError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This application has already been processed.'
    default_code = 'already_decided'


class AlreadyReviewed(GigEngineError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'A review has already been submitted for this gig.'
    default_code = 'already_reviewed'


class AlreadyInvited(GigEngineError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'A request has already been sent to this student.'
    default_code = 'already_invited'


class InvalidInput(GigEngineError):
    default_detail = 'Invalid input.'
    default_code = 'invalid_input'


class InvalidRating(InvalidInput):
    default_detail = 'Rating must be an integer between 1 and 5.'
    default_code = 'invalid_rating'


class NotFound(GigEngineError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class GigNotFound(NotFound):
    default_detail = 'Gig not found.'
    default_code = 'gig_not_found'


class ApplicantNotFound(NotFound):
    default_detail = 'Applicant not found.'
    default_code = 'applicant_not_found'


class ReviewNotFound(NotFound):
    default_detail = 'Review not found.'
    default_code = 'review_not_found'


class TransactionNotFound(NotFound):
    default_detail = 'Transaction not found.'
    default_code = 'transaction_not_found'


class GatewayError(GigEngineError):
    """Payment provider reported a failure; carries its code and reason for display."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'The payment could not be completed. Please try again.'
    default_code = 'gateway_error'

    def __init__(self, provider_code=None, reason=None, detail=None):
        self.provider_code = provider_code
        self.reason = reason
        super().__init__(
            detail=detail or reason,
            extra={'provider_code': provider_code, 'reason': reason, 'retry': True},
        )


class PersistenceError(GigEngineError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Could not save changes. Please try again.'
    default_code = 'persistence_error'


def gig_exception_handler(exc, context):
    """Render engine errors as {"error", "code"}; defer everything else to DRF."""
    if isinstance(exc, GigEngineError):
        response = exception_handler(exc, context)
        response.data = exc.as_dict()
        if response.status_code >= 500:
            logger.error(f"{exc.__class__.__name__} in {context.get('view').__class__.__name__}: {exc.detail}")
        return response
    return exception_handler(exc, context)
