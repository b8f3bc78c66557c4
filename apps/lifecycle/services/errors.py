"""
Lifecycle errors.

Each error carries a machine-readable code and the HTTP status the API
answers with, so callers can tell "not allowed" from "not now".
"""


class LifecycleError(Exception):
    """Base exception for lifecycle operations."""
    code = 'LIFECYCLE_ERROR'
    http_status = 400
    default_message = 'The lifecycle operation failed.'

    def __init__(self, message=None, code=None):
        self.message = message or self.default_message
        if code:
            self.code = code
        super().__init__(self.message)


class Forbidden(LifecycleError):
    code = 'FORBIDDEN'
    http_status = 403
    default_message = 'You do not have permission to perform this action.'


class NotFound(LifecycleError):
    code = 'NOT_FOUND'
    http_status = 404
    default_message = 'Not found.'


class InvalidStateTransition(LifecycleError):
    code = 'INVALID_STATUS'
    http_status = 409
    default_message = 'This action is not possible in the current status.'

    def __init__(self, message=None, code=None, current_status=None):
        self.current_status = current_status
        super().__init__(message, code)


class AlreadyInProgress(LifecycleError):
    code = 'ALREADY_IN_PROGRESS'
    http_status = 409
    default_message = 'This process has already been started.'


class NoEligibleVoters(LifecycleError):
    code = 'NO_FAMILY_MEMBERS'
    http_status = 409
    default_message = 'No family members are registered, so voting cannot start.'


class InvalidRequest(LifecycleError):
    code = 'INVALID_BODY'
    http_status = 400
    default_message = 'The request is invalid.'
