"""
Upstream header synthesis.

The upstream only answers requests that look like they come from the GoBiz
web dashboard, so every call carries the same fixed identity headers plus the
per-request session identity.
"""

from typing import Dict, Mapping, Optional

from gobiz_proxy.core.session import DEFAULT_USER_AGENT, Session

DEFAULT_ACCEPT = "application/json, text/plain, */*"
JOURNAL_ACCEPT = "application/json, application/vnd.journal.v1+json"
PUBLIC_UNIQUE_ID = "public"

_IDENTITY_HEADERS: Mapping[str, str] = {
    "Content-Type": "application/json",
    "Accept": DEFAULT_ACCEPT,
    "Accept-Language": "id",
    "Origin": "https://portal.gofoodmerchant.co.id",
    "Referer": "https://portal.gofoodmerchant.co.id/",
    "Authentication-Type": "go-id",
    "Gojek-Country-Code": "ID",
    "Gojek-Timezone": "Asia/Jakarta",
    "X-Appid": "go-biz-web-dashboard",
    "X-Appversion": "platform-v3.97.0-b986b897",
    "X-Deviceos": "Web",
    "X-Phonemake": "Windows 10 64-bit",
    "X-Phonemodel": "Chrome 143.0.0.0 on Windows 10 64-bit",
    "X-Platform": "Web",
}


def base_headers(session: Session) -> Dict[str, str]:
    """Return a fresh header mapping identifying the dashboard and the session."""
    headers = dict(_IDENTITY_HEADERS)
    headers["X-Uniqueid"] = session.unique_id or PUBLIC_UNIQUE_ID
    headers["X-User-Type"] = "merchant"
    headers["User-Agent"] = session.user_agent or DEFAULT_USER_AGENT
    return headers


def with_authorization(headers: Mapping[str, str], bearer: Optional[str]) -> Dict[str, str]:
    """
    Copy ``headers`` adding an Authorization header for ``bearer``.

    Without a token the header is the bare scheme ``Bearer``, which is what the
    dashboard sends on its unauthenticated login calls.
    """
    result = dict(headers)
    result["Authorization"] = f"Bearer {bearer}" if bearer else "Bearer"
    return result
