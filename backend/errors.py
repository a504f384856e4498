"""Error kinds raised by the store, assistant and auth layers.

Handlers in main.py translate each class into an HTTP status with a
one-line ``detail`` message.
"""


class TaskTrackerError(Exception):
    """Base class for all application errors."""

    status_code = 500


class NotFound(TaskTrackerError):
    status_code = 404


class Unauthorized(TaskTrackerError):
    status_code = 401


class InvalidCredentials(Unauthorized):
    """Unknown login email or wrong password."""

    status_code = 400


class DuplicateEmail(TaskTrackerError):
    status_code = 409


class UpstreamFailure(TaskTrackerError):
    """The document store or the completion API call failed."""


class MalformedCompletion(TaskTrackerError):
    """The completion reply could not be decoded into the expected object."""
