"""HTTP transport for the DigitalOcean API.

The transport turns a method, a path and an optional body into an HTTP call
against the API and returns the response metadata, decoding the body into
an envelope class when one is given. Resource services only ever talk to it
through ``new_request`` and ``do`` (see ``Transport``), so tests can swap it.

Auth: Authorization: Bearer <token>

Pagination
----------
Collections take ``page`` and ``per_page`` query params (max 200/page);
``add_options`` encodes them from a ``ListOptions``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol, TypeVar
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

import requests
from requests.structures import CaseInsensitiveDict
from pydantic import BaseModel, Field, ValidationError

from dropapi import __version__
from dropapi.envelopes import Envelope, Links
from dropapi.errors import DecodeError, RequestError, TransportError

logger = logging.getLogger("dropapi.transport")

DEFAULT_BASE_URL = "https://api.digitalocean.com/"
USER_AGENT = f"dropapi/{__version__}"
MAX_PER_PAGE = 200

E = TypeVar("E", bound=Envelope)


class ListOptions(BaseModel):
    """Paging options for list-style calls."""

    page: int | None = None
    per_page: int | None = None
    extra: dict[str, str] = Field(
        default_factory=dict, description="Additional query parameters (e.g. tag_name)"
    )


def add_options(path: str, opt: ListOptions | None) -> str:
    """
    Append list options to a path as a query string.

    Args:
        path: Request path, possibly already carrying a query string
        opt: Options to encode, or None to leave the path untouched

    Returns:
        Path with the encoded query

    Raises:
        RequestError: If page or per_page is out of range
    """
    if opt is None:
        return path

    if opt.page is not None and opt.page < 1:
        raise RequestError(f"page must be a positive integer, got: {opt.page}")
    if opt.per_page is not None and not 1 <= opt.per_page <= MAX_PER_PAGE:
        raise RequestError(f"per_page must be between 1 and {MAX_PER_PAGE}, got: {opt.per_page}")

    parts = urlsplit(path)
    params = dict(parse_qsl(parts.query))
    if opt.page is not None:
        params["page"] = str(opt.page)
    if opt.per_page is not None:
        params["per_page"] = str(opt.per_page)
    params.update(opt.extra)

    return urlunsplit(parts._replace(query=urlencode(params)))


@dataclass
class Rate:
    """Rate limit state reported by the API."""

    limit: int = 0
    remaining: int = 0
    reset: datetime | None = None

    @classmethod
    def from_headers(cls, headers: Any) -> Rate:
        """Parse RateLimit-* headers; a header that is not an integer is ignored."""
        rate = cls()
        if (value := _header_int(headers, "RateLimit-Limit")) is not None:
            rate.limit = value
        if (value := _header_int(headers, "RateLimit-Remaining")) is not None:
            rate.remaining = value
        if (value := _header_int(headers, "RateLimit-Reset")) is not None:
            try:
                rate.reset = datetime.fromtimestamp(value, tz=timezone.utc)
            except (OverflowError, OSError, ValueError):
                logger.debug("Ignoring out-of-range RateLimit-Reset: %s", value)
        return rate


def _header_int(headers: Any, name: str) -> int | None:
    value = headers.get(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        logger.debug("Ignoring malformed %s header: %r", name, value)
        return None


@dataclass
class Request:
    """A prepared API request."""

    method: str
    url: str
    body: str | None = None


@dataclass
class Response:
    """
    Metadata about an API response.

    ``links`` is only set by operations whose envelope carried a links
    block; everything else comes straight from the HTTP response.
    """

    status_code: int
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    rate: Rate = field(default_factory=Rate)
    links: Links | None = None

    @classmethod
    def from_http(cls, http: requests.Response) -> Response:
        return cls(
            status_code=http.status_code,
            headers=CaseInsensitiveDict(http.headers),
            rate=Rate.from_headers(http.headers),
        )


class Transport(Protocol):
    """What resource services need from the HTTP layer."""

    def new_request(self, method: str, path: str, body: Any = None) -> Request: ...

    def do(self, request: Request, root: type[E] | None = None) -> tuple[Response, E | None]: ...


class Client:
    """Client for the DigitalOcean REST API."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        """Initialize API client with authentication token."""
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            }
        )

    def new_request(self, method: str, path: str, body: Any = None) -> Request:
        """
        Build a request for a path relative to the base URL.

        Absolute http(s) URLs (e.g. ``links.pages.next``) are used as-is.

        Args:
            method: HTTP method
            path: Relative path or absolute URL
            body: Pydantic model or JSON-serializable value, sent as JSON

        Returns:
            Prepared request

        Raises:
            RequestError: If the URL scheme is unsupported or the body
                cannot be serialized
        """
        url = urljoin(self.base_url, path)
        if urlsplit(url).scheme not in ("http", "https"):
            raise RequestError(f"Unsupported URL: {url}")

        data = None
        if body is not None:
            if isinstance(body, BaseModel):
                body = body.model_dump(mode="json")
            try:
                data = json.dumps(body)
            except (TypeError, ValueError) as e:
                raise RequestError(f"Cannot serialize request body: {e}") from e

        return Request(method=method, url=url, body=data)

    def do(self, request: Request, root: type[E] | None = None) -> tuple[Response, E | None]:
        """
        Send a request and decode its body into ``root``.

        Args:
            request: Request built by ``new_request``
            root: Envelope class to decode into, or None to discard the body

        Returns:
            Tuple of (response metadata, decoded envelope or None)

        Raises:
            TransportError: On network failure or a non-2xx status
            DecodeError: If the body is not valid JSON for ``root``
        """
        logger.debug("%s %s", request.method, request.url)
        try:
            http = self.session.request(
                request.method, request.url, data=request.body, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.debug("%s %s failed: %s", request.method, request.url, e)
            raise TransportError(f"Network error: {e}") from e

        response = Response.from_http(http)
        logger.debug("%s %s -> %d", request.method, request.url, http.status_code)

        if not 200 <= http.status_code < 300:
            error_msg = f"API request failed: {http.status_code} {http.reason}"
            try:
                error_data = http.json()
                if isinstance(error_data, dict) and "message" in error_data:
                    error_msg = f"API error: {error_data['message']}"
            except ValueError:
                pass
            raise TransportError(error_msg, http.status_code, response)

        if root is None:
            return response, None

        try:
            data = http.json()
        except ValueError as e:
            raise DecodeError(
                f"Invalid JSON in response: {e}", http.status_code, response
            ) from e

        try:
            envelope = root.model_validate(data)
        except ValidationError as e:
            raise DecodeError(
                f"Unexpected {root.root_key!r} response: {e}", http.status_code, response
            ) from e

        return response, envelope
