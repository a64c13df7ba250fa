"""Client identity resolution for rate limiting."""

from typing import Mapping, Optional

ANON_CLIENT = "anon"


def resolve_client_key(
    headers: Mapping[str, str],
    peer_host: Optional[str] = None,
) -> str:
    """
    Resolve the rate-limit key for a request.

    Order: first X-Forwarded-For entry, then the transport peer address,
    then the shared "anon" bucket. Never raises.
    """
    forwarded = headers.get("x-forwarded-for") or headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    if peer_host:
        return peer_host

    return ANON_CLIENT
