from __future__ import annotations

import enum


UNAUTHORIZED_MESSAGE = "unauthorized"


class NoteServerError(Exception):
    """Base class for application errors."""


class RouteTableError(NoteServerError):
    """Raised at startup when a route entry is malformed."""


class DuplicateResolverError(NoteServerError):
    """Raised at startup when two schema fragments define the same resolver."""


class FailureKind(enum.Enum):
    UNAUTHORIZED = "unauthorized"
    FAILURE = "failure"


class GatewayError(NoteServerError):
    """A GraphQL call that did not produce page data."""

    kind = FailureKind.FAILURE

    def __init__(self, message: str, errors: list | None = None):
        super().__init__(message)
        self.errors = errors or []


class UnauthorizedError(GatewayError):
    kind = FailureKind.UNAUTHORIZED

    def __init__(self, errors: list | None = None):
        super().__init__(UNAUTHORIZED_MESSAGE, errors)


# User errors raised by the users service and rendered inline by the auth router


class ValidationError(NoteServerError, ValueError):
    pass


class CredentialMismatchError(NoteServerError, ValueError):
    pass


class UsernameTakenError(ValidationError):
    pass
