"""Per-request upstream session identity."""

import uuid
from dataclasses import dataclass
from typing import Any, Mapping, Optional

DEFAULT_USER_AGENT = "Mozilla/5.0 (GoBizProxy)"


def coerce_text(value: Any) -> str:
    """Stringify a loosely typed JSON input, treating falsy values as empty."""
    if not value:
        return ""
    return str(value).strip()


@dataclass(frozen=True)
class Session:
    """Device identity attached to every upstream call of one request."""
    unique_id: str
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_payload(cls, payload: Optional[Any]) -> "Session":
        """
        Build a session from the caller's optional ``session`` object.

        A missing ``uniqueId`` gets a freshly generated UUID4, a missing
        ``userAgent`` the default agent string.
        """
        data: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}
        unique_id = coerce_text(data.get("uniqueId")) or str(uuid.uuid4())
        user_agent = coerce_text(data.get("userAgent")) or DEFAULT_USER_AGENT
        return cls(unique_id=unique_id, user_agent=user_agent)
