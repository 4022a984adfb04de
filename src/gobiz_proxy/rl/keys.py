"""Rate limiting key utilities."""

from fastapi import Request


def client_ip(request: Request, trusted_hops: int = 1) -> str:
    """
    Resolve the client address behind ``trusted_hops`` reverse proxies.

    The X-Forwarded-For chain is read right to left: the socket peer and each
    trusted hop are skipped, and the next address is the client. With zero
    trusted hops the header is ignored entirely.
    """
    peer = request.client.host if request.client else "unknown"
    forwarded = request.headers.get("x-forwarded-for")
    if not forwarded or trusted_hops <= 0:
        return peer

    chain = [part.strip() for part in forwarded.split(",") if part.strip()]
    chain.append(peer)
    index = max(len(chain) - 1 - trusted_hops, 0)
    return chain[index]


def build_rl_key(*, client_id: str) -> str:
    """
    Build the rate limiting key for one client.
    Format: rl:client:{client_id}, with '|' and whitespace normalized away.
    """
    normalized = client_id.strip().lower().replace('|', '_')
    return f"rl:client:{normalized}"
