"""Custom exceptions for the guardian package."""


class GuardianError(Exception):
    """Base exception class for all guardian errors."""


class ConfigurationError(GuardianError):
    """Raised when required settings are missing or left at placeholder values.

    Attributes:
        missing_vars: Names of the environment variables that need a value.
    """

    def __init__(self, missing_vars: list[str]) -> None:
        self.missing_vars = list(missing_vars)
        super().__init__(f"Missing required environment variables: {', '.join(self.missing_vars)}")


class KeepaliveError(GuardianError):
    """Raised when a step of the keep-alive cycle fails.

    Attributes:
        message: Human-readable message, preferably supplied by the server.
        status_code: HTTP status code of the failing response, if any.
        status_text: HTTP reason phrase of the failing response, if any.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        status_text: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.status_text = status_text

    def describe(self) -> str:
        """Message with the response status appended when one was received."""
        if self.status_code is None:
            return self.message
        status = f"{self.status_code} {self.status_text}" if self.status_text else str(self.status_code)
        return f"{self.message} (Status: {status})"


class TransportError(KeepaliveError):
    """Raised when a request could not complete (DNS, connection, timeout)."""


class ServerError(KeepaliveError):
    """Raised when the backend answers with a non-success status."""


class AuthenticationError(ServerError):
    """Raised when the backend answers 401 Unauthorized."""
