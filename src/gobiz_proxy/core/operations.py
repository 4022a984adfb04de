"""
Request shaping for the dedicated upstream operations.

Pure functions only: each builds an upstream request body (or a piece of one)
from already validated caller input, so they can be exercised without any
network or framework plumbing.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, Tuple

from gobiz_proxy.core.errors import ValidationError

CLIENT_ID = "go-biz-web-new"
DEFAULT_COUNTRY_CODE = "62"

DEFAULT_LEDGER_SIZE = 50
MIN_LEDGER_SIZE = 1
MAX_LEDGER_SIZE = 200

# Merchant-local time: WIB, UTC+7
LEDGER_TZ = timezone(timedelta(hours=7))


def otp_request_body(phone: str, country_code: str = DEFAULT_COUNTRY_CODE) -> Dict[str, Any]:
    return {
        "client_id": CLIENT_ID,
        "phone_number": phone,
        "country_code": country_code or DEFAULT_COUNTRY_CODE,
    }


def otp_verify_body(otp: str, otp_token: str) -> Dict[str, Any]:
    return {
        "client_id": CLIENT_ID,
        "grant_type": "otp",
        "data": {"otp": otp, "otp_token": otp_token},
    }


def merchant_search_body() -> Dict[str, Any]:
    return {"from": 0, "to": 1, "_source": ["id", "name"]}


def clamp_size(value: Any) -> int:
    """
    Coerce a caller page size into [MIN_LEDGER_SIZE, MAX_LEDGER_SIZE].

    Missing or non-numeric input yields DEFAULT_LEDGER_SIZE; fractional
    input is truncated.
    """
    if value is None or value == "" or isinstance(value, bool):
        return DEFAULT_LEDGER_SIZE
    try:
        size = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_LEDGER_SIZE
    return max(MIN_LEDGER_SIZE, min(MAX_LEDGER_SIZE, size))


def parse_ledger_date(date_ymd: str) -> date:
    try:
        return datetime.strptime(date_ymd, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("DATE_INVALID", message="dateYmd must be formatted as YYYY-MM-DD")


def day_bounds(day: date) -> Tuple[str, str]:
    """Return the first and last second of ``day`` in UTC+7 as ISO 8601 strings."""
    start = datetime.combine(day, time(0, 0, 0), tzinfo=LEDGER_TZ)
    end = datetime.combine(day, time(23, 59, 59), tzinfo=LEDGER_TZ)
    return start.isoformat(), end.isoformat()


def ledger_query_body(merchant_id: str, day: date, size: int) -> Dict[str, Any]:
    """Journal search for one merchant's transactions on one day, newest first."""
    from_iso, to_iso = day_bounds(day)
    return {
        "from": 0,
        "size": size,
        "sort": {"time": {"order": "desc"}},
        "included_categories": {"incoming": ["transaction_share", "action"]},
        "query": [
            {
                "op": "and",
                "clauses": [
                    {"field": "metadata.transaction.merchant_id", "op": "equal", "value": merchant_id},
                    {"field": "metadata.transaction.transaction_time", "op": "gte", "value": from_iso},
                    {"field": "metadata.transaction.transaction_time", "op": "lte", "value": to_iso},
                ],
            }
        ],
    }


def pick_upstream_error(status: int, data: Any) -> Any:
    """Extract the message of a failed upstream reply, passed through as the upstream sent it."""
    if isinstance(data, dict):
        for key in ("message", "error"):
            if data.get(key):
                return data[key]
    if isinstance(data, str) and data:
        return data
    return f"HTTP_{status}"
