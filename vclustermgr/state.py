"""In-memory state shared by request handlers: migrations, Vault setup and cluster clients."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

__all__ = [
    "MIGRATION_TTL_SECONDS",
    "MigrationTracker",
    "VaultSetupState",
    "VaultStateStore",
    "ClientRegistry",
]

MIGRATION_TTL_SECONDS = 15 * 60

_IN_PROGRESS = frozenset({"waiting", "configuring"})


@dataclass(frozen=True)
class _Migration:
    source: str
    target: str
    expires_at: float


class MigrationTracker:
    """Remembers app migrations between vclusters for a limited time."""

    def __init__(
        self,
        ttl: float = MIGRATION_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._entries: Dict[Tuple[str, str, str], _Migration] = {}
        self._lock = threading.Lock()

    def add(self, env: str, source_name: str, target_name: str, app_name: str) -> None:
        """Mark an app as migrating from one vcluster to another."""
        entry = _Migration(source_name, target_name, self._clock() + self._ttl)
        with self._lock:
            self._entries[(env, source_name, app_name)] = entry
            self._entries[(env, target_name, app_name)] = entry

    def label(self, env: str, vc_name: str, app_name: str) -> str:
        """Describe an ongoing migration of the app, or return "" if there is none.

        Expired entries are dropped when looked up.
        """
        key = (env, vc_name, app_name)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return ""
            if self._clock() > entry.expires_at:
                del self._entries[key]
                return ""
        if vc_name == entry.source:
            return "Migre vers " + entry.target
        return "Depuis " + entry.source

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


@dataclass(frozen=True)
class VaultSetupState:
    """Progress of the Vault auth backend setup for one vcluster.

    ``status`` is one of "waiting", "configuring", "done" or "error".
    """

    status: str
    message: str = ""
    updated_at: float = field(default_factory=time.time)

    @property
    def in_progress(self) -> bool:
        return self.status in _IN_PROGRESS


class VaultStateStore:
    """Thread-safe store of Vault setup states keyed by environment and name."""

    def __init__(self) -> None:
        self._states: Dict[str, VaultSetupState] = {}
        self._lock = threading.Lock()

    def set(self, env: str, name: str, status: str, message: str = "") -> VaultSetupState:
        state = VaultSetupState(status=status, message=message)
        with self._lock:
            self._states[f"{env}/{name}"] = state
        return state

    def get(self, env: str, name: str) -> Optional[VaultSetupState]:
        with self._lock:
            return self._states.get(f"{env}/{name}")


class ClientRegistry:
    """Cluster clients per environment, falling back to any registered client."""

    def __init__(self, clients: Optional[Mapping[str, Any]] = None) -> None:
        self._clients: Dict[str, Any] = dict(clients or {})
        self._lock = threading.Lock()

    def register(self, env: str, client: Any) -> None:
        with self._lock:
            self._clients[env] = client

    def for_env(self, env: str) -> Optional[Any]:
        """Return the client for ``env``, any other client if none, or None."""
        with self._lock:
            if env in self._clients:
                return self._clients[env]
            return next(iter(self._clients.values()), None)

    def __contains__(self, env: object) -> bool:
        with self._lock:
            return env in self._clients