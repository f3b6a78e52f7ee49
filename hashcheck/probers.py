from __future__ import annotations

from typing import Any

from curl_cffi import requests as curl_requests
import requests

from . import __version__
from .base import BaseProber, DEFAULT_TIMEOUT
from .models import Target

USER_AGENT = f"hashcheck-exporter/{__version__}"


class RequestsProber(BaseProber):
    """Plain GET using requests.

    The request is streamed so the measured duration covers connection and
    header receipt; the body is read separately in read_body()."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, allow_redirects: bool = True) -> None:
        super().__init__(timeout=timeout)
        self._allow_redirects = allow_redirects

    def fetch(self, target: Target) -> Any:
        return requests.get(
            target.url,
            headers={"User-Agent": USER_AGENT},
            timeout=self._timeout,
            allow_redirects=self._allow_redirects,
            stream=True,
        )

    def read_body(self, response: Any) -> bytes:
        return response.content


class CurlProber(BaseProber):
    """GET through curl_cffi with browser impersonation.

    Used for targets that sit behind bot filtering. A new session is created
    per call since curl sessions are not shared between worker threads; the
    duration covers the whole request including the body."""

    def fetch(self, target: Target) -> Any:
        session = curl_requests.Session()
        try:
            response = session.request(
                method="GET",
                url=target.url,
                impersonate=target.impersonate,
                timeout=self._timeout,
            )
        except Exception:
            session.close()
            raise
        response._session = session
        return response

    def read_body(self, response: Any) -> bytes:
        return response.content

    def close(self, response: Any) -> None:
        session = getattr(response, "_session", None)
        if session is not None:
            session.close()
