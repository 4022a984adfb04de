"""
GoBiz Proxy API Routes
Operation handlers: validate caller input, call the upstream merchant API and shape the reply
"""
import json
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from gobiz_proxy import __version__
from gobiz_proxy.core.config import get_settings
from gobiz_proxy.core.endpoints import (
    JOURNAL_SEARCH_ENDPOINT,
    MERCHANT_SEARCH_ENDPOINT,
    OTP_REQUEST_ENDPOINT,
    OTP_VERIFY_ENDPOINT,
    gate_endpoint,
)
from gobiz_proxy.core.errors import GatewayError, MethodNotAllowedError, ValidationError
from gobiz_proxy.core.headers import JOURNAL_ACCEPT, base_headers, with_authorization
from gobiz_proxy.core.logging import get_logger
from gobiz_proxy.core.operations import (
    DEFAULT_COUNTRY_CODE,
    clamp_size,
    ledger_query_body,
    merchant_search_body,
    otp_request_body,
    otp_verify_body,
    parse_ledger_date,
    pick_upstream_error,
)
from gobiz_proxy.core.session import Session, coerce_text
from gobiz_proxy.core.upstream import UpstreamClient, UpstreamResponse

logger = get_logger(__name__)

# Create API router
router = APIRouter()

PROXY_METHODS = ("GET", "POST")
OTP_TOKEN_HEADER = "x-otp-token"


async def get_upstream_client() -> AsyncIterator[UpstreamClient]:
    """
    Dependency injection for the upstream client
    Opens a client for the duration of one request
    """
    async with UpstreamClient() as client:
        yield client


async def read_payload(request: Request) -> Dict[str, Any]:
    """
    Dependency returning the JSON request body as a dict

    An empty body, or a JSON value that is not an object, reads as {}.
    """
    settings = getattr(request.app.state, "settings", None) or get_settings()
    max_bytes = settings.MAX_BODY_BYTES

    # Chunked uploads carry no Content-Length for the middleware to check
    raw = bytearray()
    async for chunk in request.stream():
        raw.extend(chunk)
        if len(raw) > max_bytes:
            raise GatewayError(
                "PAYLOAD_TOO_LARGE", message=f"Request body exceeds {max_bytes} bytes", status_code=413
            )
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise ValidationError("INVALID_JSON", message=str(e))
    return data if isinstance(data, dict) else {}


def relay(upstream: UpstreamResponse, status_code: Optional[int] = None) -> Response:
    """Forward an upstream body verbatim under ``status_code`` (default: upstream status)."""
    status_code = status_code or upstream.status
    if upstream.data == "":
        return Response(status_code=status_code)
    if isinstance(upstream.data, str):
        return PlainTextResponse(upstream.data, status_code=status_code)
    return JSONResponse(content=upstream.data, status_code=status_code)


def upstream_failure(code: str, upstream: UpstreamResponse) -> JSONResponse:
    """Wrap a non-2xx upstream reply, keeping its status and raw body."""
    logger.warning("upstream_rejected", error=code, status=upstream.status)
    return JSONResponse(
        status_code=upstream.status,
        content={
            "error": code,
            "message": pick_upstream_error(upstream.status, upstream.data),
            "data": None if upstream.data in ("", None) else upstream.data,
        }
    )


def operation_error(code: str, exc: Exception) -> JSONResponse:
    """Report an unexpected failure (transport errors included) at 500."""
    logger.error("operation_failed", error=code, exception_type=type(exc).__name__, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": code, "message": str(exc) or "UNKNOWN_ERROR"}
    )


@router.get("/health",
            summary="Health Check",
            description="Check if the proxy is running")
async def health_check():
    """Health check endpoint with basic system information"""
    settings = get_settings()
    return {
        "status": "healthy",
        "service": "gobiz-proxy",
        "version": __version__,
        "environment": "development" if settings.DEBUG else "production"
    }


@router.post("/proxy",
             summary="Raw Proxy",
             description="Forward a request to an allowlisted upstream endpoint")
async def raw_proxy(
    payload: Dict[str, Any] = Depends(read_payload),
    upstream: UpstreamClient = Depends(get_upstream_client)
):
    """
    Raw proxy for advanced callers

    The endpoint must be one of the allowlisted upstream paths; any query
    string is dropped. The upstream status and body are returned unchanged.
    """
    try:
        endpoint = gate_endpoint(payload.get("endpoint"))
        method = str(payload.get("method") or "POST").upper()
        body = payload.get("body")
        if body is None:
            body = {}
        accept = payload.get("accept") or None
        bearer = payload.get("bearer") or None

        if method not in PROXY_METHODS:
            raise MethodNotAllowedError(method)

        session = Session.from_payload(payload.get("session"))

        headers = base_headers(session)
        if accept:
            headers["Accept"] = str(accept)
        # A bare "Bearer" is sent when no token is given; kept for compatibility
        # with existing callers even though the upstream likely ignores it.
        headers = with_authorization(headers, str(bearer) if bearer else None)

        logger.info("proxy_request", method=method, endpoint=endpoint, authenticated=bool(bearer))
        response = await upstream.request(method, endpoint, body, headers)
        return relay(response)

    except GatewayError:
        raise
    except Exception as e:
        return operation_error("PROXY_ERROR", e)


@router.post("/otp/request",
             summary="Request OTP",
             description="Send a login OTP to a phone number")
async def otp_request(
    payload: Dict[str, Any] = Depends(read_payload),
    upstream: UpstreamClient = Depends(get_upstream_client)
):
    """Request an OTP; a successful reply carries the otp_token needed to verify it"""
    try:
        phone = coerce_text(payload.get("phone"))
        country_code = coerce_text(payload.get("countryCode")) or DEFAULT_COUNTRY_CODE
        if not phone:
            raise ValidationError("PHONE_REQUIRED")

        session = Session.from_payload(payload.get("session"))
        headers = with_authorization(base_headers(session), None)

        response = await upstream.request(
            "POST", OTP_REQUEST_ENDPOINT, otp_request_body(phone, country_code), headers
        )
        if not response.ok:
            return upstream_failure("OTP_REQUEST_FAILED", response)

        return relay(response, status_code=200)

    except GatewayError:
        raise
    except Exception as e:
        return operation_error("OTP_REQUEST_ERROR", e)


@router.post("/otp/verify",
             summary="Verify OTP",
             description="Exchange an OTP and its otp_token for an access token")
async def otp_verify(
    request: Request,
    payload: Dict[str, Any] = Depends(read_payload),
    upstream: UpstreamClient = Depends(get_upstream_client)
):
    """
    Verify an OTP

    The otp_token from the request step may come in the body (``otpToken``)
    or in the ``x-otp-token`` header.
    """
    try:
        otp = coerce_text(payload.get("otp"))
        otp_token = coerce_text(payload.get("otpToken") or request.headers.get(OTP_TOKEN_HEADER))
        if not otp:
            raise ValidationError("OTP_REQUIRED")
        if not otp_token:
            raise ValidationError("OTP_TOKEN_REQUIRED")

        session = Session.from_payload(payload.get("session"))
        headers = with_authorization(base_headers(session), None)

        response = await upstream.request(
            "POST", OTP_VERIFY_ENDPOINT, otp_verify_body(otp, otp_token), headers
        )
        if not response.ok:
            return upstream_failure("OTP_VERIFY_FAILED", response)

        return relay(response, status_code=200)

    except GatewayError:
        raise
    except Exception as e:
        return operation_error("OTP_VERIFY_ERROR", e)


@router.post("/merchant/search",
             summary="Merchant Search",
             description="List the merchant accounts available to an access token")
async def merchant_search(
    payload: Dict[str, Any] = Depends(read_payload),
    upstream: UpstreamClient = Depends(get_upstream_client)
):
    try:
        bearer = coerce_text(payload.get("bearer"))
        if not bearer:
            raise ValidationError("ACCESS_TOKEN_REQUIRED")

        session = Session.from_payload(payload.get("session"))
        headers = with_authorization(base_headers(session), bearer)

        response = await upstream.request(
            "POST", MERCHANT_SEARCH_ENDPOINT, merchant_search_body(), headers
        )
        return relay(response)

    except GatewayError:
        raise
    except Exception as e:
        return operation_error("MERCHANT_ERROR", e)


@router.post("/mutasi",
             summary="Transaction Ledger",
             description="Query one merchant's transaction journal for a single day (UTC+7)")
async def mutasi(
    payload: Dict[str, Any] = Depends(read_payload),
    upstream: UpstreamClient = Depends(get_upstream_client)
):
    """
    Ledger ("mutasi") query

    Covers 00:00:00 to 23:59:59 of ``dateYmd`` in UTC+7, newest first, with
    ``size`` (default 50) clamped to [1, 200].
    """
    try:
        bearer = coerce_text(payload.get("bearer"))
        merchant_id = coerce_text(payload.get("merchantId"))
        date_ymd = coerce_text(payload.get("dateYmd"))
        size = clamp_size(payload.get("size"))

        if not bearer:
            raise ValidationError("ACCESS_TOKEN_REQUIRED")
        if not merchant_id:
            raise ValidationError("MERCHANT_ID_REQUIRED")
        if not date_ymd:
            raise ValidationError("DATE_REQUIRED")
        day = parse_ledger_date(date_ymd)

        session = Session.from_payload(payload.get("session"))
        headers = with_authorization(base_headers(session), bearer)
        headers["Accept"] = JOURNAL_ACCEPT

        logger.info("mutasi_query", merchant_id=merchant_id, date=date_ymd, size=size)
        response = await upstream.request(
            "POST", JOURNAL_SEARCH_ENDPOINT, ledger_query_body(merchant_id, day, size), headers
        )
        return relay(response)

    except GatewayError:
        raise
    except Exception as e:
        return operation_error("MUTASI_ERROR", e)
