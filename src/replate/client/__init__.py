"""HTTP client for the Replate backend."""

from replate.client.base import (
    APIError,
    DecodingError,
    InvalidResponseError,
    InvalidURLError,
    NetworkError,
    ServerError,
)
from replate.client.decoding import decode_list, decode_object
from replate.client.service import ReplateClient
from replate.client.transport import Transport

__all__ = [
    "APIError",
    "DecodingError",
    "InvalidResponseError",
    "InvalidURLError",
    "NetworkError",
    "ReplateClient",
    "ServerError",
    "Transport",
    "decode_list",
    "decode_object",
]
