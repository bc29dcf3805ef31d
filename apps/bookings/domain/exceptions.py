"""
Reservation Errors

Every failure the reservation core reports is one of these types.
Each carries a machine-readable `code` next to the human message so a
front end can map it without parsing text:

- NotFound: a referenced user, room or reservation does not exist
- InvalidArgument: malformed request (time range, lead time, missing reason)
- Conflict: the request collides with the calendar or the current state
- Unauthorized: the acting principal may not perform the action
- CollaboratorUnavailable: the directory or calendar backend failed
"""


class ReservationError(Exception):
    """Base class for reservation core errors"""

    default_code = "error"

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def __str__(self):
        return self.message

    def __repr__(self):
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class NotFound(ReservationError):
    default_code = "not-found"

    def __init__(self, resource: str, identifier):
        super().__init__(f"{resource.capitalize()} not found with id: {identifier}", code=resource)
        self.resource = resource
        self.identifier = identifier


class InvalidArgument(ReservationError):
    default_code = "invalid-argument"


class Conflict(ReservationError):
    default_code = "conflict"


class Unauthorized(ReservationError):
    default_code = "unauthorized"


class CollaboratorUnavailable(ReservationError):
    """
    Transient failure of a collaborator (directory, holiday calendar)

    Kept apart from NotFound: an unreachable directory says nothing about
    whether the user exists.
    """

    default_code = "collaborator-unavailable"

    def __init__(self, collaborator: str, cause: Exception | None = None):
        super().__init__(f"{collaborator} is unavailable: {cause}" if cause else f"{collaborator} is unavailable")
        self.collaborator = collaborator
        self.__cause__ = cause
