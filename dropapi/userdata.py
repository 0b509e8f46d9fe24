"""User data templates and SSH key references for droplet creation."""

import base64
import hashlib
from pathlib import Path

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from jinja2 import Template

from dropapi.identifiers import DropletCreateSSHKey


def render_user_data(template_path: str, **context: str) -> str:
    """
    Render a user data (cloud-init) template.

    Args:
        template_path: Path to a Jinja2 template file
        **context: Template variables (the CLI passes name, region and size)

    Returns:
        Rendered user data

    Raises:
        FileNotFoundError: If the template does not exist
    """
    template_file = Path(template_path).expanduser()
    if not template_file.exists():
        raise FileNotFoundError(f"User data template not found: {template_path}")

    template = Template(template_file.read_text())
    return template.render(**context)


def compute_ssh_key_fingerprint(public_key: str) -> str:
    """
    Compute MD5 fingerprint of an SSH public key.

    This is the fingerprint format DigitalOcean uses to identify account keys.

    Args:
        public_key: SSH public key content ("ssh-ed25519 AAAA... comment")

    Returns:
        MD5 fingerprint in format: aa:bb:cc:dd:...

    Raises:
        ValueError: If key format is invalid
    """
    try:
        serialization.load_ssh_public_key(public_key.strip().encode())
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise ValueError(f"Invalid SSH public key: {e}") from e

    parts = public_key.strip().split()
    key_data = base64.b64decode(parts[1])
    fingerprint = hashlib.md5(key_data).hexdigest()

    return ":".join(fingerprint[i : i + 2] for i in range(0, len(fingerprint), 2))


def ssh_key_from_file(key_path: str) -> DropletCreateSSHKey:
    """
    Reference an account SSH key by the fingerprint of a local public key.

    Raises:
        FileNotFoundError: If the key file doesn't exist
        ValueError: If the file is not a public key
    """
    path = Path(key_path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"SSH key not found: {key_path}")
    if not path.name.endswith(".pub"):
        raise ValueError(f"SSH key file must be a public key (*.pub): {key_path}")

    return DropletCreateSSHKey.from_fingerprint(compute_ssh_key_fingerprint(path.read_text()))
