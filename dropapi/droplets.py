"""Droplet endpoints of the DigitalOcean API.

Endpoints
---------
    GET    /v2/droplets                    List droplets (paginated)
    POST   /v2/droplets                    Create droplet
    GET    /v2/droplets/{id}               Get droplet
    DELETE /v2/droplets/{id}               Delete droplet
    GET    /v2/droplets/{id}/kernels       Kernels available to a droplet (paginated)
    GET    /v2/droplets/{id}/snapshots     Snapshots of a droplet (paginated)
    GET    /v2/droplets/{id}/backups       Backups of a droplet (paginated)
    GET    /v2/droplets/{id}/actions       Actions on a droplet (paginated)
    GET    /v2/droplets/{id}/neighbors     Droplets sharing a physical host

Every call returns the payload together with the ``Response`` metadata; for
paginated endpoints ``Response.links`` holds the page links when the API sent
them. Neighbors is the exception: its links are never copied.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import TypeVar

from dropapi.actions import DropletActionsService
from dropapi.envelopes import (
    ActionsRoot,
    BackupsRoot,
    DropletRoot,
    DropletsRoot,
    Envelope,
    KernelsRoot,
    SnapshotsRoot,
)
from dropapi.errors import DigitalOceanAPIError
from dropapi.models import Action, Droplet, DropletCreateRequest, Image, Kernel
from dropapi.transport import ListOptions, Response, Transport, add_options

logger = logging.getLogger("dropapi.droplets")

DROPLET_BASE_PATH = "v2/droplets"

T = TypeVar("T")


class DropletsService:
    """Operations on droplets and their sub-resources."""

    def __init__(self, client: Transport, actions: DropletActionsService | None = None):
        self.client = client
        self.actions_service = actions or DropletActionsService(client)

    @staticmethod
    def _validate_positive_int(value: int, name: str) -> None:
        """
        Validate that an integer ID is positive.

        Raises:
            ValueError: If the value is not positive
        """
        if value <= 0:
            raise ValueError(f"{name} must be a positive integer, got: {value}")

    def _droplet_path(self, droplet_id: int, sub_resource: str | None = None) -> str:
        self._validate_positive_int(droplet_id, "droplet_id")
        path = f"{DROPLET_BASE_PATH}/{droplet_id}"
        if sub_resource:
            path = f"{path}/{sub_resource}"
        return path

    def _send(
        self,
        method: str,
        path: str,
        root: type[Envelope],
        body: DropletCreateRequest | None = None,
        propagate_links: bool = True,
    ) -> tuple[Envelope, Response]:
        req = self.client.new_request(method, path, body)
        resp, envelope = self.client.do(req, root)
        if propagate_links:
            envelope.propagate_links(resp)
        return envelope, resp

    def list(self, opt: ListOptions | None = None) -> tuple[list[Droplet], Response]:
        """
        List droplets, one page at a time.

        Args:
            opt: Paging options (and extra filters such as ``tag_name``)

        Returns:
            Tuple of (droplets on this page, response metadata)
        """
        path = add_options(DROPLET_BASE_PATH, opt)
        root, resp = self._send("GET", path, DropletsRoot)
        return root.payload, resp

    def get(self, droplet_id: int) -> tuple[Droplet, Response]:
        """
        Get droplet information by ID.

        Any ``links`` in the body (usually ``actions``) are copied onto the
        response, as for list calls; only ``neighbors`` drops them.

        Raises:
            ValueError: If droplet_id is not positive
            TransportError: If the droplet does not exist (404) or the call fails
        """
        root, resp = self._send("GET", self._droplet_path(droplet_id), DropletRoot)
        return root.payload, resp

    def create(self, create_request: DropletCreateRequest) -> tuple[Droplet, Response]:
        """
        Create a new droplet.

        Args:
            create_request: Name, region, size, image and options of the droplet

        Returns:
            Tuple of (new droplet, response metadata); the droplet's
            ``action_ids`` reference the create action
        """
        logger.debug("Creating droplet %s", create_request.name)
        root, resp = self._send("POST", DROPLET_BASE_PATH, DropletRoot, body=create_request)
        return root.payload, resp

    def delete(self, droplet_id: int) -> Response:
        """
        Delete a droplet by ID.

        Raises:
            ValueError: If droplet_id is not positive
            TransportError: If deletion fails
        """
        req = self.client.new_request("DELETE", self._droplet_path(droplet_id))
        resp, _ = self.client.do(req, None)
        return resp

    def kernels(
        self, droplet_id: int, opt: ListOptions | None = None
    ) -> tuple[list[Kernel], Response]:
        """List kernels available for a droplet."""
        path = add_options(self._droplet_path(droplet_id, "kernels"), opt)
        root, resp = self._send("GET", path, KernelsRoot)
        return root.payload, resp

    def snapshots(
        self, droplet_id: int, opt: ListOptions | None = None
    ) -> tuple[list[Image], Response]:
        """List the snapshots taken of a droplet."""
        path = add_options(self._droplet_path(droplet_id, "snapshots"), opt)
        root, resp = self._send("GET", path, SnapshotsRoot)
        return root.payload, resp

    def backups(
        self, droplet_id: int, opt: ListOptions | None = None
    ) -> tuple[list[Image], Response]:
        """List the backups of a droplet."""
        path = add_options(self._droplet_path(droplet_id, "backups"), opt)
        root, resp = self._send("GET", path, BackupsRoot)
        return root.payload, resp

    def actions(
        self, droplet_id: int, opt: ListOptions | None = None
    ) -> tuple[list[Action], Response]:
        """List the actions performed on a droplet (most recent first)."""
        path = add_options(self._droplet_path(droplet_id, "actions"), opt)
        root, resp = self._send("GET", path, ActionsRoot)
        return root.payload, resp

    def neighbors(self, droplet_id: int) -> tuple[list[Droplet], Response]:
        """
        List droplets running on the same physical host.

        The endpoint is not paginated; any links in the body are ignored
        and ``Response.links`` stays None.
        """
        root, resp = self._send(
            "GET", self._droplet_path(droplet_id, "neighbors"), DropletsRoot, propagate_links=False
        )
        return root.payload, resp

    def action_status(self, uri: str) -> str:
        """
        Get the current status of a droplet action.

        Args:
            uri: Action URI, as found in ``links.actions[].href``

        Returns:
            Action status ("in-progress", "completed" or "errored")
        """
        action, _ = self.actions_service.get_by_uri(uri)
        return action.status

    @staticmethod
    def iter_all(
        fetch: Callable[[ListOptions], tuple[list[T], Response]],
        opt: ListOptions | None = None,
        max_pages: int = 1000,
    ) -> Iterator[T]:
        """
        Iterate over every item of a paginated listing.

        Follows ``links.pages.next`` until the last page, e.g.
        ``service.iter_all(lambda o: service.kernels(droplet_id, o))``.

        Args:
            fetch: Function fetching one page for the given options
            opt: Starting options (page defaults to 1)
            max_pages: Maximum number of pages to fetch (prevents runaway loops)

        Raises:
            DigitalOceanAPIError: If max_pages limit is reached
        """
        opt = opt.model_copy() if opt is not None else ListOptions()
        fetched = 0

        while True:
            items, resp = fetch(opt)
            fetched += 1
            yield from items

            links = resp.links
            if links is None or links.is_last_page():
                return

            if fetched >= max_pages:
                raise DigitalOceanAPIError(
                    f"Pagination limit reached: {max_pages} pages. "
                    "This may indicate an API issue or misconfiguration."
                )

            next_page = links.next_page() or links.current_page() + 1
            opt = opt.model_copy(update={"page": next_page})
