"""Lookup of droplet actions by URI."""

from dropapi.envelopes import ActionRoot
from dropapi.models import Action
from dropapi.transport import Response, Transport


class DropletActionsService:
    """Read access to droplet actions."""

    def __init__(self, client: Transport):
        self.client = client

    def get_by_uri(self, uri: str) -> tuple[Action, Response]:
        """
        Get an action from its canonical URI.

        Args:
            uri: Action URI, absolute (``links.actions[].href``) or relative
                to the API base URL

        Returns:
            Tuple of (action, response metadata)
        """
        req = self.client.new_request("GET", uri)
        resp, root = self.client.do(req, ActionRoot)
        return root.payload, resp
