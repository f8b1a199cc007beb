"""Header checks applied to the stream and message endpoints.

Content-Type is always enforced on POST. Host and Origin allow-lists guard
against DNS rebinding and are off unless configured.
"""

import logging

from pydantic import BaseModel, Field
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

logger = logging.getLogger(__name__)


class TransportSecuritySettings(BaseModel):
    """Settings for transport header validation."""

    enable_dns_rebinding_protection: bool = False
    """Reject requests whose Host or Origin is not allow-listed."""

    allowed_hosts: list[str] = Field(default_factory=list)
    """Allowed Host header values.

    ``example.com:*`` allows any port, ``*.example.com`` allows the domain and
    its subdomains (``*.example.com:*`` for any port as well).
    """

    allowed_origins: list[str] = Field(default_factory=list)
    """Allowed Origin header values; ``https://example.com:*`` allows any port."""


def _split_port(value: str) -> tuple[str, str | None]:
    # IPv6 literals keep their brackets: [::1]:8000 -> ("[::1]", "8000")
    if value.startswith("["):
        end = value.find("]")
        if end != -1 and value[end + 1 : end + 2] == ":":
            return value[: end + 1], value[end + 2 :]
        return value, None
    head, sep, port = value.rpartition(":")
    if sep and port.isdigit() and "/" not in port:
        return head, port
    return value, None


def _matches(value: str, pattern: str) -> bool:
    if value == pattern:
        return True
    pattern_base, pattern_port = (pattern[:-2], "*") if pattern.endswith(":*") else _split_port(pattern)
    value_base, value_port = _split_port(value)
    if pattern_port == "*":
        if value_port is None:
            return False
    elif pattern_port != value_port:
        return False
    if pattern_base.startswith("*."):
        domain = pattern_base[2:]
        return bool(domain) and (value_base == domain or value_base.endswith("." + domain))
    return value_base == pattern_base


class TransportSecurityGuard:
    """Validates request headers before the dispatcher touches the registry."""

    def __init__(self, settings: TransportSecuritySettings | None = None):
        self.settings = settings or TransportSecuritySettings()

    def host_allowed(self, host: str | None) -> bool:
        if not host:
            logger.warning("Missing Host header in request")
            return False
        if any(_matches(host, allowed) for allowed in self.settings.allowed_hosts):
            return True
        logger.warning("Invalid Host header: %s", host)
        return False

    def origin_allowed(self, origin: str | None) -> bool:
        # Same-origin requests carry no Origin header
        if not origin:
            return True
        if any(_matches(origin, allowed) for allowed in self.settings.allowed_origins):
            return True
        logger.warning("Invalid Origin header: %s", origin)
        return False

    async def validate_request(self, request: Request, is_post: bool = False) -> Response | None:
        """Return None when the request passes, or the error Response to send."""
        if is_post:
            content_type = request.headers.get("content-type")
            if content_type is None or not content_type.lower().startswith("application/json"):
                return PlainTextResponse("Invalid Content-Type header", status_code=400)

        if not self.settings.enable_dns_rebinding_protection:
            return None

        if not self.host_allowed(request.headers.get("host")):
            return PlainTextResponse("Invalid Host header", status_code=421)
        if not self.origin_allowed(request.headers.get("origin")):
            return PlainTextResponse("Invalid Origin header", status_code=403)
        return None
