"""Remote taxonomy provider interfaces.

Concrete providers translate a mailbox's labels or folders into the generic
`{id, name, parent_id}` shape and back. Token acquisition and refresh happen
outside this package; providers only ask a CredentialSupplier for a bearer
token before each call.
"""

from abc import ABC, abstractmethod

from mailwright.reconciliation.models import RemoteNode


class CredentialSupplier(ABC):
    """Returns a valid bearer credential for the remote provider."""

    @abstractmethod
    async def get_token(self) -> str:
        pass


class StaticCredentialSupplier(CredentialSupplier):
    """Supplies a fixed token obtained elsewhere."""

    def __init__(self, token: str) -> None:
        self._token = token

    async def get_token(self) -> str:
        return self._token


class TaxonomyProvider(ABC):
    """Abstract interface for label/folder providers.

    Implementations raise RemoteProviderError on failure, flagging rate limits,
    server errors, and transport failures as retriable.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name for logging and metrics."""
        pass

    @abstractmethod
    async def list_nodes(self) -> list[RemoteNode]:
        """Fetch the full current remote snapshot."""
        pass

    @abstractmethod
    async def create_node(
        self,
        name: str,
        parent_id: str | None = None,
        color_hint: str | None = None,
    ) -> str:
        """Create a node and return its remote id.

        Args:
            name: Node name (a single path segment)
            parent_id: Remote id of the parent node, None for top level
            color_hint: Display color; providers without colors ignore it
        """
        pass

    async def close(self) -> None:  # noqa: B027
        """Release provider resources."""
