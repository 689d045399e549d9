"""
Minimal HTTP GET transport built on urllib, plus short-link redirect resolution.

Timeouts are a policy of the client instance; nothing here retries.
"""
from __future__ import annotations

import http.client
import logging
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import urljoin

from .errors import TransportError

logger = logging.getLogger(__name__)


@dataclass
class HttpResponse:
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    charset: str = "utf-8"

    def __post_init__(self) -> None:
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())

    def text(self) -> str:
        try:
            return self.body.decode(self.charset or "utf-8", errors="replace")
        except LookupError:
            # unknown charset label from the server
            return self.body.decode("utf-8", errors="replace")


class HttpClient(ABC):
    """GET capability consumed by the search clients and the redirect resolver."""

    @abstractmethod
    def get(self, url: str, headers: Optional[Dict[str, str]] = None,
            allow_redirects: bool = True) -> HttpResponse:
        raise NotImplementedError


class _NoRedirectHandler(urllib.request.HTTPRedirectHandler):
    def redirect_request(self, req, fp, code, msg, headers, newurl):
        # surfaces the 3xx as an HTTPError carrying status and Location
        return None


class UrllibHttpClient(HttpClient):
    def __init__(self, user_agent: str, timeout: Optional[float] = None):
        self.default_headers = {"user-agent": user_agent}
        self.timeout = timeout
        self._follow = urllib.request.build_opener()
        self._no_follow = urllib.request.build_opener(_NoRedirectHandler)

    def get(self, url: str, headers: Optional[Dict[str, str]] = None,
            allow_redirects: bool = True) -> HttpResponse:
        merged = dict(self.default_headers)
        merged.update({k.lower(): v for k, v in (headers or {}).items()})
        req = urllib.request.Request(url, headers=merged, method="GET")
        opener = self._follow if allow_redirects else self._no_follow

        kwargs = {} if self.timeout is None else {"timeout": self.timeout}
        try:
            with opener.open(req, **kwargs) as resp:
                return HttpResponse(
                    status=resp.status,
                    headers=dict(resp.headers.items()),
                    body=resp.read(),
                    charset=resp.headers.get_content_charset() or "utf-8",
                )
        except urllib.error.HTTPError as err:
            # non-2xx (and 3xx when not following) still produce a response
            body = err.read() if err.fp is not None else b""
            hdrs = err.headers
            return HttpResponse(
                status=err.code,
                headers=dict(hdrs.items()) if hdrs is not None else {},
                body=body,
                charset=(hdrs.get_content_charset() if hdrs is not None else None) or "utf-8",
            )
        except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as exc:
            logger.warning("GET %s failed: %s", url, exc)
            raise TransportError(f"요청 실패: {exc}") from exc


def resolve_redirect_chain(http: HttpClient,
                           start_url: str,
                           max_hops: int,
                           referer: Optional[str] = None) -> List[str]:
    """Follow redirects by hand, returning every URL requested, start URL included."""
    chain: List[str] = []
    current = start_url
    headers = {"referer": referer} if referer else {}

    for _ in range(max_hops):
        chain.append(current)
        resp = http.get(current, headers=headers, allow_redirects=False)
        if resp.status < 300 or resp.status >= 400:
            break
        location = resp.header("location")
        if not location:
            break
        current = urljoin(current, location)
        logger.debug("Redirect %s -> %s (%d)", chain[-1], current, resp.status)

    return chain
