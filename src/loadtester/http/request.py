"""Outbound request descriptors."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from yarl import URL

from loadtester._internal.config import DEFAULT_USER_AGENT
from loadtester._internal.errors import RequestBuildError

if TYPE_CHECKING:
    from loadtester._internal.types import Headers

# RFC 9110 token characters.
_METHOD_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_SCHEMES = frozenset({"http", "https"})


@dataclass(frozen=True)
class RequestSpec:
    """A body-less HTTP request ready to be sent.

    Attributes:
        method: HTTP method, as given by the caller.
        url: Parsed target URL.
        headers: Headers sent with the request.
    """

    method: str
    url: URL
    headers: Headers = field(default_factory=dict)


def default_headers(user_agent: str = DEFAULT_USER_AGENT) -> Headers:
    """Return the identifying header set attached to every request."""
    return {"User-Agent": user_agent, "Accept": "*/*"}


def build_request(
    method: str,
    url: str,
    *,
    headers: Headers | None = None,
) -> RequestSpec:
    """Construct a request descriptor for one job.

    Args:
        method: HTTP method (GET, POST, ...). Must be a valid HTTP token.
        url: Absolute ``http`` or ``https`` URL.
        headers: Extra headers merged over the default identifying set.

    Returns:
        The immutable request descriptor.

    Raises:
        RequestBuildError: If the method or the URL is malformed.
    """
    if not _METHOD_RE.fullmatch(method):
        msg = f"invalid method {method!r}"
        raise RequestBuildError(msg)

    try:
        parsed = URL(url)
    except (TypeError, ValueError) as exc:
        msg = f"invalid URL {url!r}: {exc}"
        raise RequestBuildError(msg) from exc

    if parsed.scheme not in _SCHEMES:
        msg = f"unsupported protocol scheme {parsed.scheme!r} in URL {url!r}"
        raise RequestBuildError(msg)
    if not parsed.host:
        msg = f"no host in request URL {url!r}"
        raise RequestBuildError(msg)

    return RequestSpec(
        method=method,
        url=parsed,
        headers={**default_headers(), **(headers or {})},
    )
