"""Reentrancy guard and per-operation unit of work.

Every public marketplace operation runs inside ``guard.operation(name)``:

    async with guard.operation("buy_item") as op:
        ...checks using op.session...
        op.begin_effects()                 # raises ReentrancyError when nested
        ...mutate listings / proceeds...
        await op.call_external(registry.transfer, ...)
        op.emit(event)

The outermost operation acquires the single marketplace lock, opens one
session, commits it on success and rolls it back on any exception. Events
collected with ``emit`` are dispatched only after the commit.

A call that arrives while an operation is already active in the same logical
flow (a collaborator calling back into the service) is *nested*: it reuses the
outer session, so it observes the effects already flushed, and it may read but
never mutate. Nested detection relies on a context variable, which also
follows tasks spawned from inside the operation while that operation is still
running. Once it has finished, such a task is treated like any unrelated
task: it waits for the lock and opens its own session.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from nft_marketplace.domain.exceptions import ReentrancyError
from nft_marketplace.logging_config import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from nft_marketplace.domain.models import MarketplaceEvent
    from nft_marketplace.services.event_notifier import EventNotifier

logger = get_logger(__name__)


class Operation:
    """Handle for one logical marketplace operation.

    Enforces checks-effects-interactions: ``call_external`` is refused until
    ``begin_effects`` has been called, and flushes pending writes first.
    """

    def __init__(self, name: str, session: AsyncSession, reentrant: bool) -> None:
        self.name = name
        self.session = session
        self.reentrant = reentrant
        self.events: list[MarketplaceEvent] = []
        self.active = True
        self._mutating = False

    def begin_effects(self) -> None:
        """Mark the end of the read-only check phase.

        Raises:
            ReentrancyError: If this operation is nested inside another one.
        """
        if self.reentrant:
            logger.warning("reentrancy.rejected", operation=self.name)
            raise ReentrancyError(self.name)
        self._mutating = True

    async def call_external(
        self, func: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any
    ) -> Any:
        """Hand control to an external collaborator after state is consistent."""
        if not self._mutating:
            raise RuntimeError(
                f"{self.name}: external call attempted before internal state changes"
            )
        await self.session.flush()
        return await func(*args, **kwargs)

    def emit(self, event: MarketplaceEvent) -> None:
        """Queue an event for dispatch once the operation commits."""
        if not self._mutating:
            raise RuntimeError(f"{self.name}: event emitted outside the effects phase")
        self.events.append(event)


class ReentrancyGuard:
    """One lock shared by every marketplace operation."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        notifier: EventNotifier | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._notifier = notifier
        self._lock = asyncio.Lock()
        self._current: ContextVar[Operation | None] = ContextVar(
            f"marketplace_operation_{id(self)}", default=None
        )

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @property
    def active_operation(self) -> Operation | None:
        """The operation running in the current context, if any."""
        op = self._current.get()
        return op if op is not None and op.active else None

    @asynccontextmanager
    async def operation(self, name: str) -> AsyncIterator[Operation]:
        outer = self._current.get()
        if outer is not None and outer.active:
            logger.debug("reentrancy.nested_call", operation=name, outer=outer.name)
            yield Operation(name, outer.session, reentrant=True)
            return

        async with self._lock:
            async with self._session_factory() as session:
                op = Operation(name, session, reentrant=False)
                token = self._current.set(op)
                try:
                    yield op
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
                finally:
                    op.active = False
                    self._current.reset(token)

        if self._notifier is not None:
            for event in op.events:
                await self._notifier.publish(event)
