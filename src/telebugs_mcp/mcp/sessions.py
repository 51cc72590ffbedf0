# src/telebugs_mcp/mcp/sessions.py
"""Session id to principal registry for the streamable HTTP transport."""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from telebugs_mcp.contracts import PrincipalContext

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Binding:
    ctx: PrincipalContext
    last_seen: float


class SessionRegistry:
    """Thread-safe map of MCP session id to the principal that opened it.

    Written when a session is initialized. Removed when the session is
    terminated, when the session manager no longer knows it, or after
    ``idle_timeout`` seconds without a lookup. The principal context is fixed
    for the session's lifetime: a changed API key only takes effect in a new
    session.
    """

    def __init__(self, idle_timeout: float | None = None, clock: Callable[[], float] = time.monotonic) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, _Binding] = {}
        self._idle_timeout = idle_timeout
        self._clock = clock

    def register(self, session_id: str, ctx: PrincipalContext) -> None:
        self.prune_idle()
        with self._lock:
            self._sessions[session_id] = _Binding(ctx, self._clock())
        logger.info("Session %s initialized for %s", session_id, ctx.principal.name)

    def get(self, session_id: str) -> PrincipalContext | None:
        now = self._clock()
        with self._lock:
            binding = self._sessions.get(session_id)
            if binding is None:
                return None
            if self._expired(binding, now):
                del self._sessions[session_id]
                expired = True
            else:
                binding.last_seen = now
                expired = False
        if expired:
            logger.info("Session %s expired for %s", session_id, binding.ctx.principal.name)
            return None
        return binding.ctx

    def remove(self, session_id: str) -> None:
        with self._lock:
            binding = self._sessions.pop(session_id, None)
        if binding is not None:
            logger.info("Session %s closed for %s", session_id, binding.ctx.principal.name)

    def prune_idle(self) -> int:
        """Drop every binding idle for longer than the timeout; returns how many."""
        if self._idle_timeout is None:
            return 0
        now = self._clock()
        with self._lock:
            stale = [sid for sid, binding in self._sessions.items() if self._expired(binding, now)]
            for sid in stale:
                del self._sessions[sid]
        if stale:
            logger.info("Pruned %d idle sessions", len(stale))
        return len(stale)

    def _expired(self, binding: _Binding, now: float) -> bool:
        return self._idle_timeout is not None and now - binding.last_seen > self._idle_timeout

    def __contains__(self, session_id: object) -> bool:
        if not isinstance(session_id, str):
            return False
        return self.get(session_id) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
