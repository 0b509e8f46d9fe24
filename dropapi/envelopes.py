"""Response envelopes and pagination links.

Every API response wraps its payload in a named root object, optionally
alongside a ``links`` block:

    {"droplets": [...], "links": {"pages": {"next": "...", "last": "..."}}}

Each envelope class declares its root key; decoding moves that key's value
into ``payload`` and keeps ``links`` as-is. Copying the links onto the call's
response metadata happens in one place, ``Envelope.propagate_links``.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar
from urllib.parse import parse_qs, urlparse

from pydantic import BaseModel, ConfigDict, model_validator

from dropapi.models import Action, Droplet, Image, Kernel

if TYPE_CHECKING:
    from dropapi.transport import Response

PayloadT = TypeVar("PayloadT")


def _page_from_url(url: str | None) -> int | None:
    """Extract the ``page`` query parameter from a pagination URL."""
    if not url:
        return None
    values = parse_qs(urlparse(url).query).get("page")
    if not values:
        return None
    try:
        return int(values[0])
    except ValueError:
        return None


class Pages(BaseModel):
    """URLs of neighbouring pages in a paginated collection."""

    model_config = ConfigDict(extra="allow")

    first: str | None = None
    prev: str | None = None
    next: str | None = None
    last: str | None = None


class LinkAction(BaseModel):
    """An action triggered by the request, as referenced from ``links``."""

    model_config = ConfigDict(extra="allow")

    id: int | None = None
    rel: str | None = None
    href: str | None = None


class Links(BaseModel):
    """Pagination and related-action links from a response envelope."""

    model_config = ConfigDict(extra="allow")

    pages: Pages | None = None
    actions: list[LinkAction] | None = None

    def is_last_page(self) -> bool:
        """Return True when there is no ``next`` page to fetch."""
        return self.pages is None or not self.pages.next

    def next_page(self) -> int | None:
        """Page number of the next page, or None on the last page."""
        if self.pages is None:
            return None
        return _page_from_url(self.pages.next)

    def current_page(self) -> int:
        """
        Page number this response corresponds to.

        Derived from the ``prev`` link (prev + 1) or, failing that, from the
        ``next`` link (next - 1). A response without either is page 1.
        """
        if self.pages is None:
            return 1
        prev = _page_from_url(self.pages.prev)
        if prev is not None:
            return prev + 1
        nxt = _page_from_url(self.pages.next)
        if nxt is not None:
            return nxt - 1
        return 1

    def __str__(self) -> str:
        return json.dumps(self.model_dump(mode="json", exclude_none=True))


class Envelope(BaseModel, Generic[PayloadT]):
    """A payload wrapped under ``root_key`` plus optional ``links``."""

    root_key: ClassVar[str]

    payload: PayloadT
    links: Links | None = None

    @model_validator(mode="before")
    @classmethod
    def unwrap_root(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        unwrapped: dict[str, Any] = {"links": data.get("links")}
        # A missing root key leaves ``payload`` unset and fails validation.
        if cls.root_key in data:
            unwrapped["payload"] = data[cls.root_key]
        return unwrapped

    def propagate_links(self, response: Response) -> None:
        """Copy a non-null links block onto the call's response metadata."""
        if self.links is not None:
            response.links = self.links

    def to_wire(self) -> dict[str, Any]:
        """Re-wrap the payload under its root key, as the API sends it."""
        dumped = self.model_dump(mode="json", exclude_unset=True)
        return {self.root_key: dumped.get("payload"), "links": dumped.get("links")}


class DropletRoot(Envelope[Droplet]):
    root_key: ClassVar[str] = "droplet"


class DropletsRoot(Envelope[list[Droplet]]):
    root_key: ClassVar[str] = "droplets"


class KernelsRoot(Envelope[list[Kernel]]):
    root_key: ClassVar[str] = "kernels"


class SnapshotsRoot(Envelope[list[Image]]):
    root_key: ClassVar[str] = "snapshots"


class BackupsRoot(Envelope[list[Image]]):
    root_key: ClassVar[str] = "backups"


class ActionsRoot(Envelope[list[Action]]):
    root_key: ClassVar[str] = "actions"


class ActionRoot(Envelope[Action]):
    root_key: ClassVar[str] = "action"
