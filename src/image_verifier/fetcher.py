"""
HTTP fetching with bounded timeouts and manual redirect handling.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin

import requests
from urllib3.exceptions import ReadTimeoutError

from image_verifier.config import DEFAULT_MAX_REDIRECTS, DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from image_verifier.errors import FetchError

logger = logging.getLogger(__name__)

TOO_MANY_REDIRECTS = "Too many redirects"
REQUEST_TIMEOUT = "Request timeout"


@dataclass(slots=True)
class FetchResult:
    """Outcome of a GET once redirects are resolved."""
    url: str
    status_code: int
    content_type: str = ""
    body: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_html(self) -> bool:
        return "text/html" in self.content_type.lower()


def is_redirect(response: requests.Response) -> bool:
    """Check for a 3xx response that names where to go next."""
    return 300 <= response.status_code < 400 and bool(response.headers.get("location"))


def resolve_location(current: str, location: str) -> str:
    """Resolve a Location header against the URL that sent it."""
    try:
        return urljoin(current, location)
    except ValueError as e:
        raise FetchError(f"Invalid redirect location: {location}", url=current) from e


class Fetcher:
    """GET requests over a shared session, following redirects by hand."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = user_agent

    def fetch(
        self,
        url: str,
        want_body: bool = False,
        max_redirects: Optional[int] = None,
    ) -> FetchResult:
        """
        GET a URL, following up to ``max_redirects`` redirect hops.

        Args:
            url: Absolute URL to request.
            want_body: Read the body as text. Image checks leave it unread so
                large payloads are never buffered.
            max_redirects: Redirect budget for this call; defaults to the
                fetcher's budget.

        Returns:
            The final response as a FetchResult. When the budget runs out the
            last 3xx is returned with ``error`` set to "Too many redirects".

        Raises:
            FetchError: the request timed out or could not be made at all.
        """
        remaining = self.max_redirects if max_redirects is None else max_redirects
        current = url

        while True:
            response = self._get(current)
            try:
                if is_redirect(response):
                    if remaining <= 0:
                        logger.debug("Redirect budget exhausted at %s", current)
                        return FetchResult(
                            url=current,
                            status_code=response.status_code,
                            content_type=response.headers.get("content-type", ""),
                            error=TOO_MANY_REDIRECTS,
                        )
                    target = resolve_location(current, response.headers["location"])
                    logger.debug("%s %s -> %s", response.status_code, current, target)
                    current = target
                    remaining -= 1
                    continue

                return FetchResult(
                    url=current,
                    status_code=response.status_code,
                    content_type=response.headers.get("content-type", ""),
                    body=self._read_body(response) if want_body else None,
                )
            finally:
                response.close()

    def _get(self, url: str) -> requests.Response:
        try:
            return self.session.get(
                url,
                timeout=self.timeout,
                allow_redirects=False,
                stream=True,
            )
        except requests.Timeout as e:
            raise FetchError(REQUEST_TIMEOUT, url=url) from e
        except requests.RequestException as e:
            raise FetchError(str(e) or e.__class__.__name__, url=url) from e

    def _read_body(self, response: requests.Response) -> str:
        if "charset" not in response.headers.get("content-type", "").lower():
            # requests falls back to ISO-8859-1 for text/* without a charset
            response.encoding = "utf-8"
        try:
            return response.text
        except requests.Timeout as e:
            raise FetchError(REQUEST_TIMEOUT, url=response.url) from e
        except requests.ConnectionError as e:
            # Read timeouts while streaming surface as ConnectionError
            if e.args and isinstance(e.args[0], ReadTimeoutError):
                raise FetchError(REQUEST_TIMEOUT, url=response.url) from e
            raise FetchError(str(e) or e.__class__.__name__, url=response.url) from e
        except requests.RequestException as e:
            raise FetchError(str(e) or e.__class__.__name__, url=response.url) from e

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
