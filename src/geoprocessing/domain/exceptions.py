class MalformedRequestError(Exception):
    """Raised when a trigger payload matches none of the recognized shapes."""

    def __init__(self, reason: str = "Could not interpret incoming request") -> None:
        super().__init__(reason)
        self.reason = reason


class GeometryResolutionError(Exception):
    """Raised when the input geometry cannot be fetched or extracted."""

    def __init__(self, uri: str | None = None, detail: str | None = None) -> None:
        if uri:
            message = f"Failed to retrieve geometry from {uri}"
        else:
            message = "Failed to extract geometry from request"
        super().__init__(message)
        self.uri = uri
        self.detail = detail


class ComputationFault(Exception):
    """Wraps an exception raised by a geoprocessing function."""

    def __init__(self, cause: BaseException, trace: str) -> None:
        super().__init__(f"Geoprocessing exception.\n{trace}")
        self.cause = cause
        self.trace = trace


class UncaughtFault(Exception):
    """A fault that escaped the geoprocessing function's own control flow."""

    def __init__(self, origin: str, cause: BaseException | None = None) -> None:
        detail = str(cause) if cause is not None and str(cause) else None
        super().__init__(detail or origin)
        self.origin = origin
        self.cause = cause


class DispatchError(Exception):
    """Raised when the async worker invocation is not accepted."""

    def __init__(self, worker_name: str | None, reason: str) -> None:
        super().__init__(reason)
        self.worker_name = worker_name
        self.reason = reason


class StoreError(Exception):
    """Raised when the task store cannot be read or written."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"Task store {operation} failed: {reason}")
        self.operation = operation
        self.reason = reason


class TaskNotFoundError(Exception):
    """Raised when a task identifier does not exist in the task store."""

    def __init__(self, service: str, task_id: str) -> None:
        super().__init__(f"Task '{task_id}' of service '{service}' was not found.")
        self.service = service
        self.task_id = task_id
