"""Custom exceptions for TaskPilot."""


class TaskPilotError(Exception):
    """Base exception for TaskPilot."""

    pass


class ConfigurationError(TaskPilotError):
    """Configuration-related errors."""

    pass


class InvalidArgumentError(TaskPilotError, ValueError):
    """A message reached the dispatcher without input or user id."""

    pass


class LLMError(TaskPilotError):
    """LLM-related errors."""

    pass


class LLMAPIError(LLMError):
    """LLM API errors (rate limit, auth, etc.)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RemoteServiceError(TaskPilotError):
    """The direct-response service failed to produce a reply."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause
