"""Image and SSH key references used when creating a droplet.

The API accepts either a human-readable alias or a numeric ID wherever a
create request points at an image or an SSH key:

    "image": "ubuntu-20-04-x64"      or   "image": 7555620
    "ssh_keys": ["3b:16:bf:..."]     or   "ssh_keys": [512189]

Both reference kinds carry the two alternatives side by side and serialize to
a single JSON scalar: the alias when it is non-empty, the ID otherwise.
"""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, model_serializer, model_validator


class AliasOrID(BaseModel):
    """A reference that prefers its alias over its numeric ID on the wire."""

    model_config = ConfigDict(frozen=True)

    alias_field: ClassVar[str]

    id: int = 0

    @property
    def alias(self) -> str:
        return getattr(self, self.alias_field)

    @model_validator(mode="before")
    @classmethod
    def coerce_scalar(cls, data: Any) -> Any:
        # Accept the wire form back: a bare string or number.
        if isinstance(data, str):
            return {cls.alias_field: data}
        if isinstance(data, int) and not isinstance(data, bool):
            return {"id": data}
        return data

    @model_serializer
    def encode(self) -> str | int:
        """Serialize as the alias if it is non-empty, otherwise as the ID.

        An empty alias with an unset ID still encodes as 0; the API rejects
        it, not this client.
        """
        if self.alias:
            return self.alias
        return self.id

    @classmethod
    def from_id(cls, value: int):
        return cls(id=value)

    @classmethod
    def parse(cls, text: str):
        """
        Build a reference from command-line text.

        All-digit text is taken as a numeric ID, anything else as the alias.

        Args:
            text: Alias or ID as typed by the user

        Returns:
            Reference of the calling class
        """
        text = text.strip()
        if text.isdigit():
            return cls(id=int(text))
        return cls(**{cls.alias_field: text})


class DropletCreateImage(AliasOrID):
    """Identifies an image for the create request. Prefers slug over ID."""

    alias_field: ClassVar[str] = "slug"

    slug: str = ""

    @classmethod
    def from_slug(cls, slug: str) -> "DropletCreateImage":
        return cls(slug=slug)


class DropletCreateSSHKey(AliasOrID):
    """Identifies an SSH key for the create request. Prefers fingerprint over ID."""

    alias_field: ClassVar[str] = "fingerprint"

    fingerprint: str = ""

    @classmethod
    def from_fingerprint(cls, fingerprint: str) -> "DropletCreateSSHKey":
        return cls(fingerprint=fingerprint)
