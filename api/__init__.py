"""HTTP surface: response envelope, error handlers, data and action routes."""

from api.base import (
    APIError,
    APIMeta,
    APIResponse,
    ErrorCodes,
    error_response,
    request_id_of,
    success_response,
)
