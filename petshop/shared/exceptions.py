"""Domain exceptions raised by the service layer.

Each exception carries the HTTP status the transport layer maps it to, so
services never need to import FastAPI.
"""


class PetshopError(Exception):
    """Base class for every failure the core signals to its caller"""

    status_code = 400
    default_detail = "Request could not be processed"

    def __init__(self, detail=None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(PetshopError):
    """A referenced pet, service or appointment is absent or outside the caller's scope"""

    status_code = 404
    default_detail = "Resource not found"


class ForbiddenError(PetshopError):
    """The caller's role may not perform the requested operation"""

    status_code = 403
    default_detail = "You do not have permission to perform this action"


class SlotTakenError(PetshopError):
    """Another active appointment already holds the requested instant"""

    status_code = 409
    default_detail = "An appointment already exists at this time"


class InvalidTransitionError(PetshopError):
    status_code = 409
    default_detail = "Invalid status transition"


class AuthenticationError(PetshopError):
    status_code = 401
    default_detail = "Not authenticated"
