"""Gmail label provider.

Gmail labels are flat: nesting is expressed by "/" in the label name
("Urgent/No Power"). This provider maps those names to the generic
parent-id shape and back.
"""

import httpx

from mailwright.errors import RemoteProviderError
from mailwright.observability.logging import get_logger
from mailwright.reconciliation.models import RemoteNode
from mailwright.reconciliation.provider import CredentialSupplier
from mailwright.reconciliation.providers.http import HttpTaxonomyProvider

logger = get_logger(__name__)

GMAIL_SEPARATOR = "/"
CONFLICT_STATUS = 409


def text_color_for(background: str) -> str:
    """Black or white text, whichever reads better on the background."""
    value = background.lstrip("#")
    if len(value) != 6:
        return "#ffffff"
    try:
        r, g, b = (int(value[i : i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return "#ffffff"
    luminance = 0.299 * r + 0.587 * g + 0.114 * b
    return "#000000" if luminance > 160 else "#ffffff"


class GmailLabelProvider(HttpTaxonomyProvider):
    """Creates and lists user labels through the Gmail REST API."""

    base_url = "https://gmail.googleapis.com/gmail/v1/users/me"

    def __init__(
        self,
        credentials: CredentialSupplier,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(credentials, timeout=timeout, transport=transport)
        # label id -> full "Parent/Child" name, needed to name new children
        self._full_names: dict[str, str] = {}

    @property
    def provider_name(self) -> str:
        return "gmail"

    async def list_nodes(self) -> list[RemoteNode]:
        """List user labels as parent-linked nodes.

        A nested label whose parent label does not exist (e.g. only
        "Urgent/No Power") is reported at the root under its full name, so it
        can never match a root category that happens to share its leaf name.
        """
        data = await self._request("GET", "/labels", operation="list_nodes")
        labels = [lbl for lbl in data.get("labels", []) if lbl.get("type", "user") == "user"]

        self._full_names = {lbl["id"]: lbl["name"] for lbl in labels}
        ids_by_name = {name: label_id for label_id, name in self._full_names.items()}

        nodes: list[RemoteNode] = []
        for label_id, full_name in self._full_names.items():
            parent_name, _, leaf = full_name.rpartition(GMAIL_SEPARATOR)
            parent_id = ids_by_name.get(parent_name) if parent_name else None
            if parent_name and parent_id is None:
                logger.debug("gmail_orphan_label", label_id=label_id, parent=parent_name)
                nodes.append(RemoteNode(id=label_id, name=full_name))
                continue
            nodes.append(RemoteNode(id=label_id, name=leaf, parent_id=parent_id))
        return nodes

    async def create_node(
        self,
        name: str,
        parent_id: str | None = None,
        color_hint: str | None = None,
    ) -> str:
        full_name = name
        if parent_id is not None:
            parent_name = self._full_names.get(parent_id)
            if parent_name is None:
                raise RemoteProviderError(f"Unknown Gmail parent label id '{parent_id}'")
            full_name = f"{parent_name}{GMAIL_SEPARATOR}{name}"

        body: dict[str, object] = {
            "name": full_name,
            "labelListVisibility": "labelShow",
            "messageListVisibility": "show",
        }
        if color_hint:
            body["color"] = {
                "backgroundColor": color_hint,
                "textColor": text_color_for(color_hint),
            }

        try:
            data = await self._request("POST", "/labels", operation="create_node", json=body)
        except RemoteProviderError as e:
            if e.status_code != CONFLICT_STATUS:
                raise
            existing = self._id_for(full_name)
            if existing is None:
                raise
            logger.info("gmail_label_exists", label=full_name, label_id=existing)
            return existing

        label_id = self._node_id(data, "create_node")
        self._full_names[label_id] = full_name
        return label_id

    def _id_for(self, full_name: str) -> str | None:
        # Gmail label names conflict case-insensitively
        wanted = full_name.casefold()
        for label_id, known in self._full_names.items():
            if known.casefold() == wanted:
                return label_id
        return None
