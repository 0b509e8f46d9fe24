"""dropapi - Typed client for DigitalOcean droplets."""

from pathlib import Path

BASE_VERSION = "0.1.0"


def _get_version() -> str:
    """
    Get version string.

    Returns:
        - "0.1.0+git.<commit>" if installed (commit hash embedded at build time)
        - "0.1.0" otherwise
    """
    version_file = Path(__file__).parent / "_version.txt"
    try:
        commit = version_file.read_text().strip()
    except OSError:
        return BASE_VERSION
    return f"{BASE_VERSION}+git.{commit}" if commit else BASE_VERSION


__version__ = _get_version()

from dropapi.droplets import DropletsService  # noqa: E402
from dropapi.envelopes import Links, Pages  # noqa: E402
from dropapi.errors import (  # noqa: E402
    DecodeError,
    DigitalOceanAPIError,
    RequestError,
    TransportError,
)
from dropapi.identifiers import DropletCreateImage, DropletCreateSSHKey  # noqa: E402
from dropapi.models import (  # noqa: E402
    Action,
    Droplet,
    DropletCreateRequest,
    Image,
    Kernel,
)
from dropapi.transport import Client, ListOptions, Response  # noqa: E402

__all__ = [
    "Action",
    "Client",
    "DecodeError",
    "DigitalOceanAPIError",
    "Droplet",
    "DropletCreateImage",
    "DropletCreateRequest",
    "DropletCreateSSHKey",
    "DropletsService",
    "Image",
    "Kernel",
    "Links",
    "ListOptions",
    "Pages",
    "RequestError",
    "Response",
    "TransportError",
    "__version__",
]
