"""Mock taxonomy provider for testing."""

import asyncio
import itertools
from typing import Any

from mailwright.errors import RemoteProviderError
from mailwright.reconciliation.models import RemoteNode
from mailwright.reconciliation.provider import TaxonomyProvider


class MockTaxonomyProvider(TaxonomyProvider):
    """In-memory remote label store.

    Records every call for assertions and can be scripted to fail specific
    node names, either permanently or for a fixed number of attempts.
    """

    def __init__(
        self,
        existing: list[RemoteNode] | None = None,
        create_delay: float = 0.0,
    ):
        """Initialize mock provider.

        Args:
            existing: Nodes already present in the remote mailbox
            create_delay: Seconds each create call sleeps before completing
        """
        self._nodes: list[RemoteNode] = list(existing or [])
        self._create_delay = create_delay
        self._ids = itertools.count(1)
        self._failures: dict[str, tuple[RemoteProviderError, int | None]] = {}
        self._list_failures: list[RemoteProviderError] = []
        self._call_history: list[dict[str, Any]] = []

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def call_history(self) -> list[dict[str, Any]]:
        """Return history of calls for testing assertions."""
        return self._call_history

    @property
    def nodes(self) -> list[RemoteNode]:
        return list(self._nodes)

    def create_calls(self) -> list[dict[str, Any]]:
        return [c for c in self._call_history if c["operation"] == "create_node"]

    def clear_history(self) -> None:
        self._call_history.clear()

    def fail_on(
        self,
        name: str,
        error: RemoteProviderError | None = None,
        times: int | None = None,
    ) -> None:
        """Script failures for creates of `name`.

        Args:
            name: Node name to fail
            error: Error to raise (terminal by default)
            times: Number of failing attempts before succeeding, None for always
        """
        self._failures[name] = (
            error or RemoteProviderError(f"Cannot create '{name}'", status_code=400),
            times,
        )

    def fail_listing(self, error: RemoteProviderError, times: int = 1) -> None:
        self._list_failures.extend([error] * times)

    async def list_nodes(self) -> list[RemoteNode]:
        self._call_history.append({"operation": "list_nodes"})
        if self._list_failures:
            raise self._list_failures.pop(0)
        return list(self._nodes)

    async def create_node(
        self,
        name: str,
        parent_id: str | None = None,
        color_hint: str | None = None,
    ) -> str:
        self._call_history.append({
            "operation": "create_node",
            "name": name,
            "parent_id": parent_id,
            "color_hint": color_hint,
        })
        if self._create_delay:
            await asyncio.sleep(self._create_delay)

        scripted = self._failures.get(name)
        if scripted is not None:
            error, remaining = scripted
            if remaining is None:
                raise error
            if remaining > 0:
                self._failures[name] = (error, remaining - 1)
                raise error

        node_id = f"mock-{next(self._ids)}"
        self._nodes.append(RemoteNode(id=node_id, name=name, parent_id=parent_id))
        return node_id
