"""Outlook mail folder provider (Microsoft Graph).

Graph folders are real hierarchies, so parent ids map directly. Folders have
no color, so color hints are ignored.
"""

from typing import Any

from mailwright.reconciliation.models import RemoteNode
from mailwright.reconciliation.providers.http import HttpTaxonomyProvider

PAGE_SIZE = 250


class OutlookFolderProvider(HttpTaxonomyProvider):
    """Creates and lists mail folders through Microsoft Graph."""

    base_url = "https://graph.microsoft.com/v1.0/me"

    @property
    def provider_name(self) -> str:
        return "outlook"

    async def _list_folders(self, url: str) -> list[dict[str, Any]]:
        folders: list[dict[str, Any]] = []
        params: dict[str, Any] | None = {"$top": PAGE_SIZE}
        next_url: str | None = url
        while next_url:
            data = await self._request("GET", next_url, operation="list_nodes", params=params)
            folders.extend(data.get("value", []))
            # nextLink is absolute and already carries the paging parameters
            next_url = data.get("@odata.nextLink")
            params = None
        return folders

    async def list_nodes(self) -> list[RemoteNode]:
        nodes: list[RemoteNode] = []
        pending: list[tuple[dict[str, Any], str | None]] = [
            (folder, None) for folder in await self._list_folders("/mailFolders")
        ]
        while pending:
            folder, parent_id = pending.pop(0)
            nodes.append(
                RemoteNode(id=folder["id"], name=folder["displayName"], parent_id=parent_id)
            )
            if folder.get("childFolderCount", 0) > 0:
                children = await self._list_folders(f"/mailFolders/{folder['id']}/childFolders")
                pending.extend((child, folder["id"]) for child in children)
        return nodes

    async def create_node(
        self,
        name: str,
        parent_id: str | None = None,
        color_hint: str | None = None,  # noqa: ARG002
    ) -> str:
        url = "/mailFolders" if parent_id is None else f"/mailFolders/{parent_id}/childFolders"
        data = await self._request(
            "POST",
            url,
            operation="create_node",
            json={"displayName": name, "isHidden": False},
        )
        return self._node_id(data, "create_node")
