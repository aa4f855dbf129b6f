"""Exception definitions for the policy administration application"""


class PolicyAdminException(Exception):
    """Base exception for all application errors.

    All custom exceptions in the application inherit from this class.
    Use this as a catch-all when you don't need to handle specific
    exception types.
    """

    pass


class ConfigException(PolicyAdminException):
    """Raised when configuration validation or loading fails.

    Use this exception when:
    - The configuration file cannot be found
    - The TOML syntax is invalid
    - Configuration validation fails (missing required fields, invalid values)
    """

    pass


class UnknownEntityError(PolicyAdminException):
    """Raised when an entity key is not present in the schema registry."""

    pass


class UnknownFieldError(PolicyAdminException):
    """Raised when a form value is set for a field the active schema lacks."""

    pass


class ConnectivityError(PolicyAdminException):
    """Raised when the backend cannot be reached or its response cannot be read.

    Use this exception when:
    - The HTTP request fails at the transport level (DNS, refused, timeout)
    - A list response returns a non-success status
    - A list response body is not valid JSON
    """

    pass


class ApiError(PolicyAdminException):
    """Raised when the backend rejects a write with a non-success status.

    The message is the server's own ``error`` text when the body carries one,
    so it can be shown to the user verbatim.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
