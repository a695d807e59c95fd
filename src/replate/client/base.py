"""Error taxonomy shared by the transport and the response decoder."""

from typing import Any


class APIError(Exception):
    """Base exception for backend API errors."""

    message = "Unexpected API error"

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        response: Any = None,
    ):
        super().__init__(message or self.message)
        self.detail = message
        self.status_code = status_code
        self.response = response

    @property
    def user_message(self) -> str:
        """Single human-readable message suitable for showing to a user."""
        return self.message


class InvalidURLError(APIError):
    """Raised when the endpoint cannot form a valid URL."""

    message = "Invalid URL"


class InvalidResponseError(APIError):
    """Raised when no well-formed HTTP response was received."""

    message = "Invalid response from server"


class ServerError(APIError):
    """Raised for any non-2xx HTTP status."""

    def __init__(self, status_code: int, response: Any = None):
        super().__init__(
            f"API request failed with status {status_code}",
            status_code=status_code,
            response=response,
        )

    @property
    def user_message(self) -> str:
        return f"Server error with status code: {self.status_code}"


class DecodingError(APIError):
    """Raised when every decoding strategy failed for a response body."""

    message = "Failed to decode response"


class NetworkError(APIError):
    """Raised for transport-level failures such as lost connectivity."""

    message = "Network connection error"
