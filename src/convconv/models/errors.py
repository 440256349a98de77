"""Errors raised by the service and the JSON body they are rendered as."""

from pydantic import Field

from convconv.models.wire import WireModel


class ConvConvError(Exception):
    """Root of every error a request handler may raise.

    ``component`` names the layer that refused the request and ``details``
    carries the offending values (job id, path, sizes) back to the client.
    """

    def __init__(self, message: str, component: str = "", details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.component = component
        self.details = details or {}


class ValidationError(ConvConvError):
    """Bad client input: missing upload, unknown input path, oversized file."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="validation", details=details)


class NotFoundError(ConvConvError):
    """No such job, or its output is not there yet."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="lookup", details=details)


class JobStateError(ConvConvError):
    """The job's current status forbids the requested transition."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="jobs", details=details)


class StorageError(ConvConvError):
    """The upload or output directory could not be written."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="storage", details=details)


class ErrorResponse(WireModel):
    """Failure counterpart of ``ApiResponse``, serialized in camelCase."""

    success: bool = False
    error: str = Field(..., description="Message shown to the user")
    error_type: str = Field(..., description="Exception class name, e.g. NotFoundError")
    component: str = Field(default="")
    details: dict = Field(default_factory=dict)
    actionable_guidance: str = Field(default="", description="What the client can do next")
    retry_possible: bool = Field(default=False, description="Same request may succeed later")

    @classmethod
    def from_exception(
        cls, exc: ConvConvError, guidance: str = "", retry: bool = False
    ) -> "ErrorResponse":
        return cls(
            error=exc.message,
            error_type=type(exc).__name__,
            component=exc.component,
            details=exc.details,
            actionable_guidance=guidance,
            retry_possible=retry,
        )
