"""Shared fixtures: a real Client whose HTTP session is mocked."""

import json
from http import HTTPStatus
from unittest.mock import MagicMock

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from dropapi.droplets import DropletsService
from dropapi.transport import Client


def _make_http_response(
    status_code: int = 200,
    payload=None,
    text: str | None = None,
    headers: dict[str, str] | None = None,
) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.reason = HTTPStatus(status_code).phrase
    if text is not None:
        response._content = text.encode()
    elif payload is not None:
        response._content = json.dumps(payload).encode()
    else:
        response._content = b""
    response.encoding = "utf-8"
    response.headers = CaseInsensitiveDict(headers or {})
    return response


@pytest.fixture
def http_response():
    """Factory for canned ``requests.Response`` objects."""
    return _make_http_response


@pytest.fixture
def session():
    """A requests session whose ``request`` method is a mock."""
    session = requests.Session()
    session.request = MagicMock()
    return session


@pytest.fixture
def client(session):
    """Client using the mocked session."""
    return Client("fake-token", session=session)


@pytest.fixture
def service(client):
    """DropletsService backed by the mocked client."""
    return DropletsService(client)


@pytest.fixture
def droplet_json():
    """A droplet as returned by the API."""
    return {
        "id": 3164444,
        "name": "web-1",
        "memory": 1024,
        "vcpus": 1,
        "disk": 25,
        "locked": False,
        "status": "active",
        "kernel": None,
        "created_at": "2020-07-21T18:37:44Z",
        "features": ["backups", "ipv6"],
        "backup_ids": [53893572],
        "snapshot_ids": [67512819],
        "action_ids": [],
        "image": {
            "id": 63663980,
            "name": "20.04 (LTS) x64",
            "distribution": "Ubuntu",
            "slug": "ubuntu-20-04-x64",
            "public": True,
            "regions": ["nyc3"],
            "type": "base",
            "min_disk_size": 20,
            "size_gigabytes": 2.36,
            "created_at": "2020-05-15T05:47:50Z",
        },
        "size": {
            "slug": "s-1vcpu-1gb",
            "memory": 1024,
            "vcpus": 1,
            "disk": 25,
            "transfer": 1.0,
            "price_monthly": 5.0,
            "price_hourly": 0.00743999984115362,
            "regions": ["nyc3"],
            "available": True,
        },
        "size_slug": "s-1vcpu-1gb",
        "networks": {
            "v4": [
                {
                    "ip_address": "10.128.192.124",
                    "netmask": "255.255.0.0",
                    "gateway": "nil",
                    "type": "private",
                },
                {
                    "ip_address": "192.241.165.154",
                    "netmask": "255.255.240.0",
                    "gateway": "192.241.160.1",
                    "type": "public",
                },
            ],
            "v6": [
                {
                    "ip_address": "2604:a880:0:1010::18a:a001",
                    "netmask": 64,
                    "gateway": "2604:a880:0:1010::1",
                    "type": "public",
                }
            ],
        },
        "region": {
            "name": "New York 3",
            "slug": "nyc3",
            "features": ["private_networking", "backups", "ipv6"],
            "available": True,
            "sizes": ["s-1vcpu-1gb"],
        },
        "tags": ["web"],
    }
