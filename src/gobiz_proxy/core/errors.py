"""
Gateway error types.

Every refusal the proxy produces on its own (as opposed to an upstream reply
passed through) is a GatewayError carrying a stable string code and the HTTP
status it is reported at. The application installs an exception handler that
renders ``to_dict()`` as the JSON response body.
"""

from typing import Any, Dict, Optional


class GatewayError(Exception):
    """Base exception for errors reported by the gateway itself."""

    status_code: int = 500

    def __init__(
        self,
        code: str,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        extra: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message or code)
        self.code = code
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error to the caller-facing JSON body."""
        body: Dict[str, Any] = {"error": self.code}
        if self.message:
            body["message"] = self.message
        body.update(self.extra)
        return body


class ValidationError(GatewayError):
    """A required input is missing or malformed."""

    status_code = 400


class InvalidEndpointError(ValidationError):
    """The raw-proxy endpoint is not a path string."""

    def __init__(self):
        super().__init__("INVALID_ENDPOINT")


class EndpointNotAllowedError(GatewayError):
    """The raw-proxy endpoint is a path but not on the allowlist."""

    status_code = 403

    def __init__(self, endpoint: str):
        super().__init__("ENDPOINT_NOT_ALLOWED", extra={"endpoint": endpoint})
        self.endpoint = endpoint


class MethodNotAllowedError(GatewayError):
    """The raw-proxy method is neither GET nor POST."""

    status_code = 405

    def __init__(self, method: str):
        super().__init__("METHOD_NOT_ALLOWED")
        self.method = method


class UpstreamTransportError(Exception):
    """
    The upstream could not be reached or did not answer in time.

    HTTP error statuses from the upstream are never raised; only timeouts and
    network-level failures end up here. Operation handlers report it under
    their own *_ERROR code.
    """

    def __init__(self, message: str, endpoint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.endpoint = endpoint
