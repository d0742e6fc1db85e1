"""Compile Guard - allows at most one in-flight compile per project."""

import time
import uuid
from contextlib import contextmanager
from threading import Lock
from typing import Callable, Iterator, Optional

from adcompose.core.errors import CompileInProgress


class CompileGuard:
    """Thread-safe per-project in-flight flag with token-checked release and a stale-flag watchdog."""

    def __init__(
        self,
        timeout_seconds: float = 600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the guard.

        Args:
            timeout_seconds: Age after which an in-flight flag is treated as stale
            clock: Monotonic clock, injectable for tests
        """
        self.timeout_seconds = timeout_seconds
        self.clock = clock
        self.in_flight: dict[str, tuple[str, float]] = {}
        self.lock = Lock()

    def _is_stale(self, acquired_at: float, now: float) -> bool:
        return now - acquired_at >= self.timeout_seconds

    def acquire(self, project_id: str) -> str:
        """
        Mark a compile as in flight.

        Args:
            project_id: Project identifier

        Returns:
            Token that must be presented to release the flag

        Raises:
            CompileInProgress: If a non-stale compile is already in flight
        """
        with self.lock:
            now = self.clock()
            entry = self.in_flight.get(project_id)
            if entry is not None and not self._is_stale(entry[1], now):
                raise CompileInProgress(project_id)

            token = uuid.uuid4().hex
            self.in_flight[project_id] = (token, now)
            return token

    def release(self, project_id: str, token: str) -> bool:
        """
        Clear the in-flight flag if the token still owns it.

        A compile whose flag was already cleared by the watchdog and re-acquired by
        another request cannot clear the newer flag.

        Returns:
            True if the flag was cleared
        """
        with self.lock:
            entry = self.in_flight.get(project_id)
            if entry is None or entry[0] != token:
                return False
            del self.in_flight[project_id]
            return True

    def is_in_flight(self, project_id: str) -> bool:
        with self.lock:
            entry = self.in_flight.get(project_id)
            return entry is not None and not self._is_stale(entry[1], self.clock())

    def sweep(self) -> list[str]:
        """Clear stale flags. Returns the affected project IDs."""
        with self.lock:
            now = self.clock()
            stale = [pid for pid, (_, acquired_at) in self.in_flight.items() if self._is_stale(acquired_at, now)]
            for project_id in stale:
                del self.in_flight[project_id]
            return stale

    @contextmanager
    def hold(self, project_id: str) -> Iterator[str]:
        """Hold the in-flight flag for the duration of a block."""
        token = self.acquire(project_id)
        try:
            yield token
        finally:
            self.release(project_id, token)


# Process-wide guard shared by the API and the CLI
_compile_guard: Optional[CompileGuard] = None


def get_compile_guard(timeout_seconds: float = 600.0) -> CompileGuard:
    """Get or create the process-wide compile guard."""
    global _compile_guard
    if _compile_guard is None:
        _compile_guard = CompileGuard(timeout_seconds=timeout_seconds)
    return _compile_guard
