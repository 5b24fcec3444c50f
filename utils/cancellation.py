"""
Cooperative cancellation signal shared between a completion's producer task
and whoever owns the consumer side of its stream.
"""
import asyncio


class CancellationToken:
    """One-shot signal. Once cancelled it stays cancelled."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        """Fire the signal. Safe to call any number of times."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        """Suspend until the signal fires (returns at once if it already has)."""
        await self._event.wait()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"
