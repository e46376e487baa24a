from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from .errors import RequestInFlight

T = TypeVar("T")


@dataclass(slots=True)
class RequestGuard:
    """Lets one regeneration or provider request run per session.

    A second request while one is running is refused with ``RequestInFlight``;
    the guard is released however the running request ends.
    """

    busy: bool = False
    running: str | None = None

    def acquire(self, kind: str) -> None:
        if self.busy:
            raise RequestInFlight(f"Cannot start a {kind} request; {self.running or 'another'} request is still running.")
        self.busy = True
        self.running = kind

    def release(self) -> None:
        self.busy = False
        self.running = None

    def run(self, kind: str, callback: Callable[[], T]) -> T:
        self.acquire(kind)
        try:
            return callback()
        finally:
            self.release()

    async def run_async(self, kind: str, callback: Callable[[], Awaitable[T]]) -> T:
        self.acquire(kind)
        try:
            return await callback()
        finally:
            self.release()
