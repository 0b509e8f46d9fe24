"""Tests for the droplets service."""

import json

import pytest

from dropapi.droplets import DropletsService
from dropapi.envelopes import Links
from dropapi.errors import DecodeError, DigitalOceanAPIError, RequestError, TransportError
from dropapi.identifiers import DropletCreateImage, DropletCreateSSHKey
from dropapi.models import Action, Droplet, DropletCreateRequest, Image, Kernel
from dropapi.transport import ListOptions

BASE = "https://api.digitalocean.com/v2/droplets"
ACTIONS = "https://api.digitalocean.com/v2/actions"

LINKS = {
    "pages": {
        "prev": f"{BASE}?page=1&per_page=1",
        "next": f"{BASE}?page=3&per_page=1",
        "last": f"{BASE}?page=4&per_page=1",
    }
}


def sent(session):
    """Return (method, url, json body) of the last request sent."""
    call = session.request.call_args
    body = call.kwargs.get("data")
    return call.args[0], call.args[1], json.loads(body) if body else None


class TestList:
    """Tests for DropletsService.list."""

    def test_list(self, service, session, http_response, droplet_json):
        """Test listing droplets."""
        session.request.return_value = http_response(200, {"droplets": [droplet_json]})

        droplets, resp = service.list()

        assert sent(session) == ("GET", BASE, None)
        assert droplets == [Droplet.model_validate(droplet_json)]
        assert resp.status_code == 200
        assert resp.links is None

    def test_list_page_in_query(self, service, session, http_response):
        """Test that paging options reach the request URL."""
        session.request.return_value = http_response(200, {"droplets": []})

        service.list(ListOptions(page=2))

        method, url, _ = sent(session)
        assert method == "GET"
        assert url == f"{BASE}?page=2"

    def test_list_propagates_links(self, service, session, http_response, droplet_json):
        """Test that pagination links are copied onto the response."""
        session.request.return_value = http_response(
            200, {"droplets": [droplet_json], "links": LINKS}
        )

        _, resp = service.list(ListOptions(page=2, per_page=1))

        assert resp.links == Links.model_validate(LINKS)
        assert resp.links.current_page() == 2

    def test_list_null_links(self, service, session, http_response):
        """Test that null links leave the response without links."""
        session.request.return_value = http_response(200, {"droplets": [], "links": None})

        _, resp = service.list()

        assert resp.links is None

    def test_list_invalid_options_send_nothing(self, service, session):
        """Test that an option encoding error happens before any request."""
        with pytest.raises(RequestError):
            service.list(ListOptions(per_page=500))

        session.request.assert_not_called()


class TestGet:
    """Tests for DropletsService.get."""

    def test_get(self, service, session, http_response, droplet_json):
        """Test getting a droplet by ID."""
        session.request.return_value = http_response(200, {"droplet": droplet_json})

        droplet, resp = service.get(3164444)

        assert sent(session) == ("GET", f"{BASE}/3164444", None)
        assert droplet.id == 3164444
        assert droplet.region.slug == "nyc3"
        assert droplet.size.slug == "s-1vcpu-1gb"
        assert droplet.image.slug == "ubuntu-20-04-x64"
        assert droplet.public_ipv4() == "192.241.165.154"
        assert droplet.private_ipv4() == "10.128.192.124"
        assert droplet.public_ipv6() == "2604:a880:0:1010::18a:a001"
        assert droplet.backup_ids == [53893572]
        assert droplet.created_at == "2020-07-21T18:37:44Z"
        assert resp.status_code == 200

    def test_get_not_found(self, service, session, http_response):
        """Test that a 404 raises a transport error carrying the response."""
        session.request.return_value = http_response(
            404, {"id": "not_found", "message": "The resource you requested could not be found."}
        )

        droplet = None
        with pytest.raises(TransportError) as exc_info:
            droplet, _ = service.get(123)

        assert droplet is None
        assert exc_info.value.status_code == 404
        assert exc_info.value.response.status_code == 404

    def test_get_malformed_body(self, service, session, http_response):
        """Test that a body without a droplet raises a decode error."""
        session.request.return_value = http_response(200, {"message": "ok"})

        with pytest.raises(DecodeError) as exc_info:
            service.get(123)

        assert exc_info.value.response.status_code == 200

    def test_get_propagates_links(self, service, session, http_response, droplet_json):
        """Test that get copies links onto the response, unlike neighbors."""
        links = {"actions": [{"id": 1, "rel": "create", "href": f"{ACTIONS}/1"}]}
        session.request.return_value = http_response(200, {"droplet": droplet_json, "links": links})

        _, resp = service.get(3164444)

        assert resp.links == Links.model_validate(links)

    @pytest.mark.parametrize("droplet_id", [0, -1])
    def test_get_invalid_id(self, service, session, droplet_id):
        """Test that non-positive IDs are rejected without a request."""
        with pytest.raises(ValueError, match="droplet_id must be a positive integer"):
            service.get(droplet_id)

        session.request.assert_not_called()


class TestCreate:
    """Tests for DropletsService.create."""

    def test_create_with_slug_and_no_keys(self, service, session, http_response):
        """Test the request body for a slug image and no SSH keys."""
        session.request.return_value = http_response(
            202, {"droplet": {"id": 123, "name": "web-1", "status": "new"}, "links": None}
        )
        request = DropletCreateRequest(
            name="web-1",
            region="nyc3",
            size="s-1vcpu-1gb",
            image=DropletCreateImage(slug="ubuntu-20-04-x64"),
            ssh_keys=[],
            ipv6=True,
        )

        droplet, resp = service.create(request)

        method, url, body = sent(session)
        assert method == "POST"
        assert url == BASE
        assert body == {
            "name": "web-1",
            "region": "nyc3",
            "size": "s-1vcpu-1gb",
            "image": "ubuntu-20-04-x64",
            "ssh_keys": [],
            "backups": False,
            "ipv6": True,
            "private_networking": False,
        }
        assert droplet.id == 123
        assert droplet.status == "new"
        assert resp.links is None

    def test_create_with_ids_and_user_data(self, service, session, http_response):
        """Test encoding ID references and user data."""
        session.request.return_value = http_response(202, {"droplet": {"id": 124}})
        request = DropletCreateRequest(
            name="web-2",
            region="nyc3",
            size="s-1vcpu-1gb",
            image=DropletCreateImage(id=7555620),
            ssh_keys=[DropletCreateSSHKey(id=512189), DropletCreateSSHKey(fingerprint="aa:bb:cc")],
            backups=True,
            private_networking=True,
            user_data="#cloud-config\n",
        )

        service.create(request)

        _, _, body = sent(session)
        assert body["image"] == 7555620
        assert body["ssh_keys"] == [512189, "aa:bb:cc"]
        assert body["backups"] is True
        assert body["private_networking"] is True
        assert body["user_data"] == "#cloud-config\n"

    def test_create_leaves_request_unchanged(self, service, session, http_response):
        """Test that the create request is not mutated by the call."""
        session.request.return_value = http_response(202, {"droplet": {"id": 125}})
        request = DropletCreateRequest(
            name="web-3", region="nyc3", size="s-1vcpu-1gb", image=DropletCreateImage(id=1)
        )
        before = request.model_dump()

        service.create(request)

        assert request.model_dump() == before

    def test_create_propagates_links(self, service, session, http_response):
        """Test that create surfaces the action links."""
        links = {"actions": [{"id": 9, "rel": "create", "href": f"{ACTIONS}/9"}]}
        session.request.return_value = http_response(202, {"droplet": {"id": 126}, "links": links})
        request = DropletCreateRequest(
            name="web-4", region="nyc3", size="s-1vcpu-1gb", image=DropletCreateImage(slug="x")
        )

        _, resp = service.create(request)

        assert resp.links.actions[0].id == 9


class TestDelete:
    """Tests for DropletsService.delete."""

    def test_delete(self, service, session, http_response):
        """Test deleting a droplet."""
        session.request.return_value = http_response(204)

        resp = service.delete(3164444)

        assert sent(session) == ("DELETE", f"{BASE}/3164444", None)
        assert resp.status_code == 204

    def test_delete_failure(self, service, session, http_response):
        """Test that a failed delete raises with the response attached."""
        session.request.return_value = http_response(404, {"message": "not found"})

        with pytest.raises(TransportError) as exc_info:
            service.delete(1)

        assert exc_info.value.response.status_code == 404

    def test_delete_invalid_id(self, service, session):
        """Test that delete validates the droplet ID."""
        with pytest.raises(ValueError):
            service.delete(0)

        session.request.assert_not_called()


class TestSubResources:
    """Tests for kernels, snapshots, backups and actions listings."""

    @pytest.mark.parametrize(
        "operation, item, model",
        [
            ("kernels", {"id": 231, "name": "DO-recovery-static-fsck", "version": "3.8.0"}, Kernel),
            ("snapshots", {"id": 67512819, "name": "web-1-snap", "type": "snapshot"}, Image),
            ("backups", {"id": 53893572, "name": "web-1 backup", "type": "backup"}, Image),
            ("actions", {"id": 36804636, "status": "completed", "type": "create"}, Action),
        ],
    )
    def test_listing(self, service, session, http_response, operation, item, model):
        """Test path, options, payload and links for each sub-resource."""
        session.request.return_value = http_response(200, {operation: [item], "links": LINKS})

        items, resp = getattr(service, operation)(3164444, ListOptions(page=2, per_page=1))

        method, url, body = sent(session)
        assert method == "GET"
        assert url == f"{BASE}/3164444/{operation}?page=2&per_page=1"
        assert body is None
        assert items == [model.model_validate(item)]
        assert resp.links == Links.model_validate(LINKS)

    @pytest.mark.parametrize("operation", ["kernels", "snapshots", "backups", "actions"])
    def test_listing_without_options(self, service, session, http_response, operation):
        """Test that sub-resource listings work without options and links."""
        session.request.return_value = http_response(200, {operation: []})

        items, resp = getattr(service, operation)(42)

        assert sent(session)[1] == f"{BASE}/42/{operation}"
        assert items == []
        assert resp.links is None

    def test_kernels_decode_error(self, service, session, http_response):
        """Test that a kernels body of the wrong shape raises a decode error."""
        session.request.return_value = http_response(200, {"kernels": "nope"})

        with pytest.raises(DecodeError):
            service.kernels(42)


class TestNeighbors:
    """Tests for DropletsService.neighbors."""

    def test_neighbors(self, service, session, http_response, droplet_json):
        """Test listing neighbors."""
        session.request.return_value = http_response(200, {"droplets": [droplet_json]})

        droplets, resp = service.neighbors(3164444)

        assert sent(session) == ("GET", f"{BASE}/3164444/neighbors", None)
        assert droplets[0].name == "web-1"
        assert resp.links is None

    def test_neighbors_never_carries_links(self, service, session, http_response, droplet_json):
        """Neighbors deliberately ignores links sent by the server."""
        session.request.return_value = http_response(
            200, {"droplets": [droplet_json], "links": LINKS}
        )

        _, resp = service.neighbors(3164444)

        assert resp.links is None


class TestActionStatus:
    """Tests for DropletsService.action_status."""

    def test_action_status_by_uri(self, service, session, http_response):
        """Test resolving an action status through its URI."""
        session.request.return_value = http_response(
            200, {"action": {"id": 36804636, "status": "in-progress", "type": "create"}}
        )

        status = service.action_status("https://api.digitalocean.com/v2/actions/36804636")

        assert status == "in-progress"
        assert sent(session) == ("GET", "https://api.digitalocean.com/v2/actions/36804636", None)


class TestIterAll:
    """Tests for DropletsService.iter_all."""

    def test_follows_next_links(self, service, session, http_response):
        """Test that every page is fetched until there is no next link."""
        first = {"pages": {"next": f"{BASE}?page=2&per_page=1"}}
        last = {"pages": {"prev": f"{BASE}?page=1&per_page=1"}}
        session.request.side_effect = [
            http_response(200, {"droplets": [{"id": 1}], "links": first}),
            http_response(200, {"droplets": [{"id": 2}], "links": last}),
        ]

        droplets = list(service.iter_all(service.list, ListOptions(per_page=1)))

        assert [d.id for d in droplets] == [1, 2]
        urls = [call.args[1] for call in session.request.call_args_list]
        assert urls == [f"{BASE}?per_page=1", f"{BASE}?page=2&per_page=1"]

    def test_stops_without_links(self, service, session, http_response):
        """Test that a response without links is the only page."""
        session.request.return_value = http_response(200, {"kernels": [{"id": 1}]})

        kernels = list(service.iter_all(lambda opt: service.kernels(42, opt)))

        assert [k.id for k in kernels] == [1]
        assert session.request.call_count == 1

    def test_max_pages(self, service, session, http_response):
        """Test that runaway pagination is cut off."""
        session.request.return_value = http_response(
            200, {"droplets": [], "links": {"pages": {"next": f"{BASE}?page=2"}}}
        )

        with pytest.raises(DigitalOceanAPIError, match="Pagination limit reached: 3 pages"):
            list(DropletsService.iter_all(service.list, max_pages=3))

        assert session.request.call_count == 3
