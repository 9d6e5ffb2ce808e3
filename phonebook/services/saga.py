"""Compensating-action bookkeeping for multi-store writes."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from phonebook.utils.monitoring import observe_compensation, observe_saga

logger = logging.getLogger(__name__)

Compensation = Callable[[], Awaitable[Any]]


class Saga:
    """Run steps in order and undo completed ones when a later step fails.

    Use as an async context manager. `step` awaits an action and, if given an
    `undo` callable, registers it with the action's result bound as its only
    argument. When `compensate` is False a failure leaves completed steps in
    place.
    """

    def __init__(self, name: str, *, compensate: bool = True) -> None:
        self.name = name
        self.compensate = compensate
        self._completed: List[Tuple[str, Compensation]] = []

    async def step(
        self,
        label: str,
        action: Awaitable[Any],
        undo: Optional[Callable[[Any], Awaitable[Any]]] = None,
    ) -> Any:
        result = await action
        if undo is not None:
            self.record(label, lambda: undo(result))
        return result

    def record(self, label: str, undo: Compensation) -> None:
        """Register a compensation for work that already happened."""

        self._completed.append((label, undo))

    async def rollback(self) -> None:
        while self._completed:
            label, undo = self._completed.pop()
            try:
                await undo()
            except Exception:
                observe_compensation(self.name, label, succeeded=False)
                logger.exception("Compensation %s of %s failed", label, self.name)
            else:
                observe_compensation(self.name, label, succeeded=True)
                logger.info("Compensated %s of %s", label, self.name)

    async def __aenter__(self) -> "Saga":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc is None:
            self._completed.clear()
            observe_saga(self.name, "committed")
            return False
        if self.compensate and self._completed:
            logger.warning("%s failed (%s); rolling back %d step(s)", self.name, exc, len(self._completed))
            await self.rollback()
            observe_saga(self.name, "compensated")
        elif self._completed:
            logger.warning("%s failed (%s); leaving %d step(s) uncompensated", self.name, exc, len(self._completed))
            observe_saga(self.name, "uncompensated")
        else:
            observe_saga(self.name, "failed")
        return False


__all__ = ["Saga"]
