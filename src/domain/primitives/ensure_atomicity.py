"""Domain primitive: all-or-nothing multi-step writes.

Some governance operations write more than one record: superseding the
prior proxy grant and inserting the new one, or recording item outcomes
and completing the session. This async context manager runs registered
compensating actions in reverse order if any step fails, then re-raises.

Usage:
    async with AtomicOperationContext() as ctx:
        await repo.update(previous)
        ctx.add_rollback(lambda: repo.update(original))
        await repo.add(new_grant)
        # On exception: the prior grant is restored, exception re-raised
"""

import asyncio
import inspect
from collections.abc import Callable, Coroutine
from types import TracebackType
from typing import Any

import structlog

log = structlog.get_logger()

# Rollback handlers can be sync or async
RollbackHandler = Callable[[], None] | Callable[[], Coroutine[Any, Any, None]]


class AtomicOperationContext:
    """Context manager ensuring multi-step writes roll back together.

    Handlers are called in LIFO order if an exception escapes the block.
    A failing handler is logged and the remaining handlers still run. The
    original exception is always re-raised.

    Attributes:
        operation: Name used in log entries.
        _rollback_handlers: Registered compensating actions.
    """

    def __init__(self, operation: str = "atomic_operation") -> None:
        self.operation = operation
        self._rollback_handlers: list[RollbackHandler] = []

    def add_rollback(self, handler: RollbackHandler) -> None:
        """Register a compensating action. Must take no arguments."""
        self._rollback_handlers.append(handler)

    async def __aenter__(self) -> "AtomicOperationContext":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool:
        if exc_val is None:
            return False

        log.info(
            "atomic_operation_failed",
            operation=self.operation,
            error=str(exc_val),
            error_type=exc_type.__name__ if exc_type else "Unknown",
            rollback_count=len(self._rollback_handlers),
        )

        for handler in reversed(self._rollback_handlers):
            try:
                if inspect.iscoroutinefunction(handler) or (
                    inspect.ismethod(handler)
                    and inspect.iscoroutinefunction(handler.__func__)
                ):
                    await handler()
                else:
                    result = handler()
                    # Lambdas wrapping a coroutine call return the coroutine
                    if asyncio.iscoroutine(result):
                        await result
            except Exception as rollback_error:
                log.error(
                    "rollback_handler_failed",
                    operation=self.operation,
                    rollback_error=str(rollback_error),
                    rollback_error_type=type(rollback_error).__name__,
                )

        return False
