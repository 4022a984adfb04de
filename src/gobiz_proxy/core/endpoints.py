"""Upstream endpoint allowlist."""

from typing import Any, FrozenSet, Optional

from gobiz_proxy.core.errors import EndpointNotAllowedError, InvalidEndpointError

OTP_REQUEST_ENDPOINT = "/goid/login/request"
OTP_VERIFY_ENDPOINT = "/goid/token"
MERCHANT_SEARCH_ENDPOINT = "/v1/merchants/search"
JOURNAL_SEARCH_ENDPOINT = "/journals/search"

# Exact paths only: the raw proxy must not become an open proxy.
ALLOWED_ENDPOINTS: FrozenSet[str] = frozenset({
    OTP_REQUEST_ENDPOINT,
    OTP_VERIFY_ENDPOINT,
    MERCHANT_SEARCH_ENDPOINT,
    JOURNAL_SEARCH_ENDPOINT,
})


def normalize_endpoint(value: Any) -> Optional[str]:
    """Return the path part of ``value``, or None if it is not an absolute path."""
    if not value or not isinstance(value, str):
        return None
    if not value.startswith("/"):
        return None
    return value.split("?", 1)[0]


def is_allowed(endpoint: str) -> bool:
    return endpoint in ALLOWED_ENDPOINTS


def gate_endpoint(value: Any) -> str:
    """
    Validate a caller-supplied upstream path for the raw proxy.

    Returns the normalized path (query string dropped).

    Raises:
        InvalidEndpointError: value is missing, not a string or not absolute
        EndpointNotAllowedError: normalized path is not on the allowlist
    """
    endpoint = normalize_endpoint(value)
    if endpoint is None:
        raise InvalidEndpointError()
    if not is_allowed(endpoint):
        raise EndpointNotAllowedError(endpoint)
    return endpoint
