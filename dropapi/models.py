"""Resource models for the droplets API.

Models are populated from server responses only. Unknown keys are kept
(``extra="allow"``) so that a decoded object re-encodes to the JSON it came
from.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_serializer

from dropapi.identifiers import DropletCreateImage, DropletCreateSSHKey


class Resource(BaseModel):
    """Base class for API objects: keeps unknown fields, prints as JSON."""

    model_config = ConfigDict(extra="allow")

    def __str__(self) -> str:
        return json.dumps(self.model_dump(mode="json", exclude_unset=True), sort_keys=True)


class Region(Resource):
    slug: str = ""
    name: str = ""
    sizes: list[str] = Field(default_factory=list)
    available: bool = False
    features: list[str] = Field(default_factory=list)


class Size(Resource):
    slug: str = ""
    memory: int = 0
    vcpus: int = 0
    disk: int = 0
    transfer: float = 0.0
    price_monthly: float = 0.0
    price_hourly: float = 0.0
    regions: list[str] = Field(default_factory=list)
    available: bool = False


class Image(Resource):
    """A distribution image, snapshot or backup."""

    id: int = 0
    name: str = ""
    type: str = ""
    distribution: str = ""
    slug: str | None = None
    public: bool = False
    regions: list[str] = Field(default_factory=list)
    min_disk_size: int = 0
    size_gigabytes: float = 0.0
    created_at: str = ""
    status: str = ""


class Action(Resource):
    """An asynchronous operation performed on a resource."""

    id: int = 0
    status: str = ""
    type: str = ""
    started_at: str | None = None
    completed_at: str | None = None
    resource_id: int = 0
    resource_type: str = ""
    region_slug: str | None = None


class Kernel(Resource):
    """Boot kernel available to a droplet."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: int = 0
    name: str = ""
    version: str = ""


class NetworkV4(Resource):
    ip_address: str = ""
    netmask: str = ""
    gateway: str = ""
    type: str = ""


class NetworkV6(Resource):
    ip_address: str = ""
    netmask: int = 0
    gateway: str = ""
    type: str = ""


class Networks(Resource):
    v4: list[NetworkV4] = Field(default_factory=list)
    v6: list[NetworkV6] = Field(default_factory=list)


class Droplet(Resource):
    """A DigitalOcean droplet as returned by the API."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: int = 0
    name: str = ""
    memory: int = 0
    vcpus: int = 0
    disk: int = 0
    region: Region | None = None
    image: Image | None = None
    size: Size | None = None
    size_slug: str = ""
    backup_ids: list[int] = Field(default_factory=list)
    snapshot_ids: list[int] = Field(default_factory=list)
    locked: bool = False
    status: str = ""
    networks: Networks | None = None
    action_ids: list[int] = Field(default_factory=list)
    created_at: str = ""

    def _address(self, version: str, network_type: str) -> str | None:
        if self.networks is None:
            return None
        for network in getattr(self.networks, version):
            if network.type == network_type:
                return network.ip_address
        return None

    def public_ipv4(self) -> str | None:
        """First public IPv4 address, if any."""
        return self._address("v4", "public")

    def private_ipv4(self) -> str | None:
        """First private IPv4 address, if any."""
        return self._address("v4", "private")

    def public_ipv6(self) -> str | None:
        """First public IPv6 address, if any."""
        return self._address("v6", "public")


class DropletCreateRequest(BaseModel):
    """
    Request body for creating a droplet.

    ``image`` and each entry of ``ssh_keys`` serialize to a bare slug,
    fingerprint or ID (see ``dropapi.identifiers``). ``user_data`` is left
    out of the body when empty.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    region: str
    size: str
    image: DropletCreateImage
    ssh_keys: list[DropletCreateSSHKey] = Field(default_factory=list)
    backups: bool = False
    ipv6: bool = False
    private_networking: bool = False
    user_data: str = ""

    @model_serializer(mode="wrap")
    def omit_empty_user_data(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        if not data.get("user_data"):
            data.pop("user_data", None)
        return data

    def __str__(self) -> str:
        return json.dumps(self.model_dump(mode="json"))
