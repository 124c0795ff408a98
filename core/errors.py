"""Domain error taxonomy for the task tracker.

Every error carries the HTTP status it maps to, so the API layer can
render all of them with a single exception handler::

    @app.exception_handler(TaskTrackerError)
    async def handle(request, exc):
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)
"""


class TaskTrackerError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TaskNotFound(TaskTrackerError):
    """Status update against an id the store does not hold."""

    status_code = 404

    def __init__(self, task_id: int):
        super().__init__("Not found")
        self.task_id = task_id


class StorageUnavailable(TaskTrackerError):
    """The persisted document could not be read or written."""

    status_code = 503


class AttachmentLimitExceeded(TaskTrackerError):
    """An uploaded payload is larger than the configured ceiling."""

    status_code = 413

    def __init__(self, filename: str, limit_bytes: int):
        super().__init__(
            f"File {filename!r} exceeds the upload limit of {limit_bytes} bytes"
        )
        self.filename = filename
        self.limit_bytes = limit_bytes


class InvalidStatus(TaskTrackerError):
    """Strict status policy rejected the requested status."""

    status_code = 400
