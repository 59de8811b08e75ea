from typing import Optional


class VersifiError(Exception):
    """Root of every error raised by the versifi client."""
    pass


class ExchangeRestError(VersifiError):
    """Base exception for all REST API errors."""
    def __init__(self, code: int, message: str, api_code: int | None = None) -> None:
        self.api_code = api_code
        self.message = message
        self.status_code = code
        super().__init__(f"HTTP {code}: {message}")


# Connection and Infrastructure Errors (Retryable)
class ExchangeConnectionRestError(ExchangeRestError):
    """Network connection errors that may be temporary."""
    pass


class ExchangeServerError(ExchangeRestError):
    """Server-side errors (5xx) that may be temporary."""
    pass


class ExchangeTimeoutError(ExchangeRestError):
    """Request timeout errors that may be retryable."""
    pass


# Authentication and Authorization Errors (Non-retryable)
class AuthenticationRestError(ExchangeRestError):
    """Authentication failed - API key, signature, or permission issues."""
    pass


# Business Logic Errors (Non-retryable)
class InvalidParameterError(ExchangeRestError):
    """Invalid request parameters - client-side error."""
    pass


class OrderNotFoundError(ExchangeRestError):
    """Order not found for given ID."""
    pass


class VersifiAPIError(ExchangeRestError):
    """
    Error body returned by the venue: ``{"code": ..., "message": ...}``.

    ``api_code`` holds the venue code, ``status_code`` the HTTP status.
    """

    def __init__(self, code: int, message: str, api_code: int | None = None) -> None:
        super().__init__(code, message, api_code)

    def __str__(self) -> str:
        return f"<APIError> code={self.api_code}, message={self.message}"


def is_api_error(e: BaseException) -> bool:
    """Check whether the error was decoded from a venue error body."""
    return isinstance(e, VersifiAPIError)


_STATUS_ERRORS = {
    400: InvalidParameterError,
    401: AuthenticationRestError,
    403: AuthenticationRestError,
    404: OrderNotFoundError,
    408: ExchangeTimeoutError,
}


def error_class_for_status(status: int) -> type:
    """Map an HTTP status to the matching ExchangeRestError subclass."""
    if status in _STATUS_ERRORS:
        return _STATUS_ERRORS[status]
    if status >= 500:
        return ExchangeServerError
    return ExchangeRestError


def raise_for_status(status: int, body: Optional[dict], text: str = "") -> None:
    """
    Raise the error matching a failed response.

    A decoded venue body (``code`` + ``message``) always wins and becomes
    VersifiAPIError; otherwise the status decides the class.
    """
    if status < 400:
        return
    if isinstance(body, dict) and "code" in body and "message" in body:
        raise VersifiAPIError(status, str(body["message"]), body["code"])
    raise error_class_for_status(status)(status, text or f"HTTP {status}")
