"""Remote taxonomy reconciler.

Diffs a merged taxonomy against the live labels/folders of a mailbox and
creates only what is missing. Algorithm:

1. Fetch the full remote snapshot once (with retry).
2. Index it by (parent id, canonical name).
3. Walk the taxonomy level by level so every parent id is known before its
   children are looked up or created. Siblings run with bounded concurrency.
4. Retriable provider errors back off exponentially up to a fixed attempt
   cap. A node that still fails, or whose provider call raised anything
   unexpected, is recorded as failed and its subtree as skipped; other
   branches carry on.
5. Merge the resulting path -> id map into the tenant's persisted map and
   save the run result. A run stopped by its deadline is persisted too, so
   the next run resumes instead of starting over.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from mailwright.config.models import ReconciliationConfig
from mailwright.errors import RemoteProviderError
from mailwright.merging.models import MergedTaxonomy
from mailwright.naming import PATH_SEPARATOR, canonical_name
from mailwright.observability.logging import get_logger
from mailwright.observability.metrics import (
    PROVIDER_RETRIES,
    RECONCILED_NODES,
    RECONCILIATION_LATENCY,
    RECONCILIATION_TIMEOUTS,
)
from mailwright.reconciliation.locks import TenantLock
from mailwright.reconciliation.models import (
    NodeFailure,
    NodeOutcome,
    NodeState,
    ReconciliationResult,
    RemoteNode,
    utc_now,
)
from mailwright.reconciliation.provider import TaxonomyProvider
from mailwright.reconciliation.stores.base import IdMapStore
from mailwright.schemas.models import TaxonomyNode

logger = get_logger(__name__)

T = TypeVar("T")

LookupKey = tuple[str | None, str]


@dataclass
class _Run:
    """Mutable state of one reconciliation run."""

    result: ReconciliationResult
    lookup: dict[LookupKey, str] = field(default_factory=dict)
    states: dict[str, NodeState] = field(default_factory=dict)

    def index(self, snapshot: list[RemoteNode]) -> None:
        for remote in snapshot:
            self.lookup.setdefault((remote.parent_id, canonical_name(remote.name)), remote.id)


def subtree_paths(path: str, node: TaxonomyNode) -> list[str]:
    """Paths of every descendant of a node, parents first."""
    paths: list[str] = []
    level = [(f"{path}{PATH_SEPARATOR}{c.name}", c) for c in node.children]
    while level:
        paths.extend(p for p, _ in level)
        level = [(f"{p}{PATH_SEPARATOR}{c.name}", c) for p, n in level for c in n.children]
    return paths


class RemoteTaxonomyReconciler:
    """Reconciles merged taxonomies against one remote provider.

    At most one run per tenant executes at a time; the tenant lock is held
    from the snapshot fetch until the result is persisted.
    """

    def __init__(
        self,
        provider: TaxonomyProvider,
        store: IdMapStore,
        lock: TenantLock,
        config: ReconciliationConfig | None = None,
    ) -> None:
        self._provider = provider
        self._store = store
        self._lock = lock
        self._config = config or ReconciliationConfig()

    @property
    def store(self) -> IdMapStore:
        return self._store

    async def reconcile(
        self,
        tenant_id: str,
        taxonomy: MergedTaxonomy,
        *,
        timeout: float | None = None,
    ) -> ReconciliationResult:
        """Create missing nodes and persist the tenant's path -> id map.

        Args:
            tenant_id: Tenant whose mailbox is reconciled
            taxonomy: Validated merged taxonomy
            timeout: Deadline in seconds (defaults to reconciliation config)

        Raises:
            ReconciliationInProgressError: Another run holds the tenant lock
            RemoteProviderError: The remote snapshot could not be fetched
        """
        deadline = timeout if timeout is not None else self._config.default_timeout_seconds
        provider = self._provider.provider_name

        async with self._lock.acquire(tenant_id):
            run = _Run(result=ReconciliationResult(tenant_id=tenant_id, provider=provider))
            run.states = {path: NodeState.UNCHECKED for path in taxonomy.paths()}

            logger.info(
                "reconciliation_started",
                tenant_id=tenant_id,
                provider=provider,
                node_count=len(run.states),
                timeout=deadline,
            )

            with RECONCILIATION_LATENCY.labels(provider=provider).time():
                try:
                    async with asyncio.timeout(deadline):
                        snapshot = await self._with_retry("list_nodes", self._provider.list_nodes)
                        run.index(snapshot)
                        await self._walk(run, taxonomy)
                except TimeoutError:
                    self._mark_timed_out(run)

            result = run.result
            result.finished_at = utc_now()
            await self._store.merge_id_map(tenant_id, result.name_to_id)
            await self._store.save_result(result)

        logger.info("reconciliation_completed", tenant_id=tenant_id, **result.summary())
        return result

    async def _walk(self, run: _Run, taxonomy: MergedTaxonomy) -> None:
        semaphore = asyncio.Semaphore(self._config.max_concurrency)
        level: list[tuple[str, TaxonomyNode, str | None]] = [
            (node.name, node, None) for node in taxonomy.nodes
        ]

        while level:
            ids = await asyncio.gather(
                *(
                    self._reconcile_node(run, path, node, parent_id, semaphore)
                    for path, node, parent_id in level
                )
            )

            next_level: list[tuple[str, TaxonomyNode, str | None]] = []
            for (path, node, _), node_id in zip(level, ids, strict=True):
                if node_id is None:
                    self._skip_subtree(run, path, node)
                    continue
                next_level.extend(
                    (f"{path}{PATH_SEPARATOR}{child.name}", child, node_id)
                    for child in node.children
                )
            level = next_level

    async def _reconcile_node(
        self,
        run: _Run,
        path: str,
        node: TaxonomyNode,
        parent_id: str | None,
        semaphore: asyncio.Semaphore,
    ) -> str | None:
        provider = self._provider.provider_name
        key: LookupKey = (parent_id, node.canonical)
        run.states[path] = NodeState.CHECKED

        existing = run.lookup.get(key)
        if existing is not None:
            run.states[path] = NodeState.MATCHED
            run.result.matched.append(NodeOutcome(name=path, id=existing))
            RECONCILED_NODES.labels(provider=provider, state=NodeState.MATCHED.value).inc()
            logger.debug("node_matched", path=path, node_id=existing)
            return existing

        async with semaphore:
            try:
                node_id = await self._with_retry(
                    "create_node", lambda: self._create(node, parent_id)
                )
            except RemoteProviderError as e:
                run.states[path] = NodeState.FAILED
                run.result.failed.append(
                    NodeFailure(name=path, reason=e.message, retriable=e.retriable)
                )
                RECONCILED_NODES.labels(provider=provider, state=NodeState.FAILED.value).inc()
                logger.warning(
                    "node_failed",
                    path=path,
                    error=e.message,
                    retriable=e.retriable,
                    status_code=e.status_code,
                )
                return None

        run.lookup[key] = node_id
        run.states[path] = NodeState.CREATED
        run.result.created.append(NodeOutcome(name=path, id=node_id))
        RECONCILED_NODES.labels(provider=provider, state=NodeState.CREATED.value).inc()
        logger.info("node_created", path=path, node_id=node_id)
        return node_id

    async def _create(self, node: TaxonomyNode, parent_id: str | None) -> str:
        """Create one node; unexpected provider failures become terminal errors."""
        try:
            return await self._provider.create_node(node.name, parent_id, node.color_hint)
        except RemoteProviderError:
            raise
        except Exception as e:
            raise RemoteProviderError(
                f"{self._provider.provider_name} create_node failed unexpectedly: {e!r}",
                retriable=False,
            ) from e

    async def _with_retry(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        """Run a provider call, backing off on retriable errors."""
        attempts = self._config.max_attempts
        for attempt in range(1, attempts + 1):
            try:
                return await call()
            except RemoteProviderError as e:
                if not e.retriable or attempt == attempts:
                    raise
                delay = min(
                    self._config.backoff_base_seconds * 2 ** (attempt - 1),
                    self._config.backoff_max_seconds,
                )
                PROVIDER_RETRIES.labels(
                    provider=self._provider.provider_name, operation=operation
                ).inc()
                logger.warning(
                    "provider_call_retry",
                    operation=operation,
                    attempt=attempt,
                    delay=delay,
                    error=e.message,
                )
                await asyncio.sleep(delay)
        raise AssertionError("unreachable")

    def _skip_subtree(self, run: _Run, path: str, node: TaxonomyNode) -> None:
        provider = self._provider.provider_name
        for child_path in subtree_paths(path, node):
            run.states[child_path] = NodeState.SKIPPED
            run.result.skipped.append(
                NodeFailure(name=child_path, reason=f"parent '{path}' failed", retriable=True)
            )
            RECONCILED_NODES.labels(provider=provider, state=NodeState.SKIPPED.value).inc()

    def _mark_timed_out(self, run: _Run) -> None:
        """Record every unfinished node as skipped after the deadline hit."""
        run.result.timed_out = True
        pending = [
            path
            for path, state in run.states.items()
            if state in (NodeState.UNCHECKED, NodeState.CHECKED)
        ]
        for path in pending:
            run.states[path] = NodeState.SKIPPED
            run.result.skipped.append(
                NodeFailure(name=path, reason="deadline exceeded", retriable=True)
            )
        RECONCILIATION_TIMEOUTS.labels(provider=self._provider.provider_name).inc()
        logger.warning(
            "reconciliation_timed_out",
            tenant_id=run.result.tenant_id,
            completed=len(run.result.matched) + len(run.result.created),
            pending=len(pending),
        )
