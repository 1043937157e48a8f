"""Unit tests for AtomicOperationContext."""

import pytest

from src.domain.primitives.ensure_atomicity import AtomicOperationContext


class TestAtomicOperationContext:
    """Tests for rollback ordering and exception propagation."""

    @pytest.mark.asyncio
    async def test_no_rollback_on_success(self) -> None:
        calls: list[str] = []

        async with AtomicOperationContext("test") as ctx:
            ctx.add_rollback(lambda: calls.append("undo"))

        assert calls == []

    @pytest.mark.asyncio
    async def test_rollbacks_run_in_reverse_and_reraise(self) -> None:
        calls: list[str] = []

        async def undo_async() -> None:
            calls.append("async")

        with pytest.raises(ValueError, match="step failed"):
            async with AtomicOperationContext("test") as ctx:
                ctx.add_rollback(lambda: calls.append("first"))
                ctx.add_rollback(undo_async)
                ctx.add_rollback(lambda: undo_async())
                raise ValueError("step failed")

        assert calls == ["async", "async", "first"]

    @pytest.mark.asyncio
    async def test_failing_rollback_does_not_stop_others(self) -> None:
        calls: list[str] = []

        def broken() -> None:
            raise RuntimeError("rollback broke")

        with pytest.raises(ValueError):
            async with AtomicOperationContext("test") as ctx:
                ctx.add_rollback(lambda: calls.append("first"))
                ctx.add_rollback(broken)
                raise ValueError("step failed")

        assert calls == ["first"]
