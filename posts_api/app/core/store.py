"""
Concurrent in-memory storage for users and posts.

Nothing is persisted: all data lives for the lifetime of the process
and a restart loses it.  The store is an ordinary object created by
the application factory and handed to services through FastAPI
dependencies, so every test can work against a fresh instance.

Each ``Table`` is a dictionary split into shards, each shard guarded by
its own ``threading.Lock``.  Single-key operations are atomic; no lock
is ever held across two store calls.  The ``EmailIndex`` is a table of
its own keyed by email whose ``reserve`` is an atomic insert-if-absent,
which is what makes duplicate signups impossible even when they race.
"""

import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Generic, Hashable, List, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

DEFAULT_SHARDS = 16


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class User:
    id: uuid.UUID
    email: str
    username: str
    password_hash: str
    created_at: datetime


@dataclass(frozen=True)
class Post:
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    content: str
    created_at: datetime


class Table(Generic[K, V]):
    """Thread-safe key/value table with per-shard locking."""

    def __init__(self, shards: int = DEFAULT_SHARDS) -> None:
        if shards < 1:
            raise ValueError("shards must be at least 1")
        self._shards: List[Dict[K, V]] = [{} for _ in range(shards)]
        self._locks = [threading.Lock() for _ in range(shards)]

    def _index(self, key: K) -> int:
        return hash(key) % len(self._shards)

    def insert(self, key: K, value: V) -> None:
        """Add or overwrite the entry for ``key`` (last writer wins)."""
        i = self._index(key)
        with self._locks[i]:
            self._shards[i][key] = value

    def insert_if_absent(self, key: K, value: V) -> bool:
        """Insert only when ``key`` is not present.  Returns ``True`` on insert."""
        i = self._index(key)
        with self._locks[i]:
            if key in self._shards[i]:
                return False
            self._shards[i][key] = value
            return True

    def get(self, key: K) -> Optional[V]:
        i = self._index(key)
        with self._locks[i]:
            return self._shards[i].get(key)

    def remove(self, key: K) -> Optional[V]:
        """Delete ``key`` and return the removed value, or ``None`` if absent."""
        i = self._index(key)
        with self._locks[i]:
            return self._shards[i].pop(key, None)

    def remove_if(self, key: K, expected: V) -> bool:
        """Delete ``key`` only while it still maps to ``expected``."""
        i = self._index(key)
        with self._locks[i]:
            if self._shards[i].get(key) != expected:
                return False
            del self._shards[i][key]
            return True

    def scan(self) -> List[V]:
        """Return an unordered snapshot of all values.

        Shards are copied one at a time, so concurrent writes to other
        shards may or may not be reflected.
        """
        values: List[V] = []
        for shard, lock in zip(self._shards, self._locks):
            with lock:
                values.extend(shard.values())
        return values

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not None  # type: ignore[arg-type]

    def __len__(self) -> int:
        total = 0
        for shard, lock in zip(self._shards, self._locks):
            with lock:
                total += len(shard)
        return total


class EmailIndex:
    """Unique secondary index from email to user id."""

    def __init__(self, shards: int = DEFAULT_SHARDS) -> None:
        self._table: Table[str, uuid.UUID] = Table(shards)

    def lookup(self, email: str) -> Optional[uuid.UUID]:
        return self._table.get(email)

    def reserve(self, email: str, user_id: uuid.UUID) -> bool:
        """Claim ``email`` for ``user_id``.

        Returns ``False`` when the email is already taken.  Of any
        number of concurrent reservations for the same email exactly
        one succeeds.
        """
        return self._table.insert_if_absent(email, user_id)

    def release(self, email: str, user_id: uuid.UUID) -> None:
        """Undo a reservation made by ``user_id``.

        A reservation held by another user id is left untouched.
        """
        self._table.remove_if(email, user_id)

    def __len__(self) -> int:
        return len(self._table)


class EntityStore:
    """Process-wide container for all tables."""

    def __init__(self, shards: int = DEFAULT_SHARDS) -> None:
        self.users: Table[uuid.UUID, User] = Table(shards)
        self.posts: Table[uuid.UUID, Post] = Table(shards)
        self.email_index = EmailIndex(shards)

    def find_user_by_email(self, email: str) -> Optional[User]:
        user_id = self.email_index.lookup(email)
        if user_id is None:
            return None
        user = self.users.get(user_id)
        # A reservation whose user insert has not landed yet is not a user.
        if user is None or user.email != email:
            return None
        return user
